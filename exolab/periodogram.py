"""Orbital period estimation from detected transits.

A simplified single-harmonic periodogram: for each trial period the power is
the absolute cosine correlation of the mean-subtracted flux,

    power(p) = |sum((flux_i - mean_flux) * cos(2 pi time_i / p))|

searched on a fixed-step grid bracketing the spacing implied by the number
of transits. There is no sine term and no variance normalization, so this is
not a true Lomb-Scargle periodogram.
"""

import logging

import numpy as np

from exolab.constants import MAX_PERIOD, MIN_PERIOD, PERIOD_CHUNK_SIZE, PERIOD_STEP

logger = logging.getLogger(__name__)


def expected_period(time, n_transits):
    """Initial period guess: observed time span divided by transit count.

    With a single transit this is the whole time span. That is not a real
    period but the search still runs around it.
    """
    if n_transits <= 0 or len(time) == 0:
        return 0.0
    time_span = float(time[-1] - time[0])
    return time_span / n_transits


def period_grid(expected, min_period=MIN_PERIOD, max_period=MAX_PERIOD, step=PERIOD_STEP):
    """Trial periods from ``max(min_period, expected/2)`` to ``min(max_period, 2*expected)``.

    Periods are ``lower + k * step`` for every k keeping the value at or below
    the upper bound. Empty if the lower bound exceeds the upper bound.
    """
    lower = max(min_period, expected * 0.5)
    upper = min(max_period, expected * 2.0)
    if lower > upper:
        return np.array([])
    # Small tolerance so an upper bound landing exactly on the grid is kept
    n_steps = int(np.floor((upper - lower) / step + 1e-9)) + 1
    return lower + step * np.arange(n_steps)


def cosine_power(time, flux, periods, mean_flux=None, chunk_size=PERIOD_CHUNK_SIZE):
    """Cosine-correlation power for each trial period.

    Evaluated in blocks of ``chunk_size`` periods so memory stays bounded at
    ``chunk_size * len(time)`` for long light curves.

    Returns
    -------
    ndarray
        Power per trial period (same length as ``periods``).
    """
    time = np.asarray(time, dtype=float)
    flux = np.asarray(flux, dtype=float)
    periods = np.asarray(periods, dtype=float)
    if mean_flux is None:
        mean_flux = float(np.mean(flux))
    residual = flux - mean_flux

    power = np.empty(len(periods))
    for lo in range(0, len(periods), chunk_size):
        block = periods[lo:lo + chunk_size]
        phase = 2.0 * np.pi * time[np.newaxis, :] / block[:, np.newaxis]
        power[lo:lo + chunk_size] = np.abs(np.cos(phase) @ residual)
    return power


def estimate_period(transits, time, flux, mean_flux=None):
    """Estimate the orbital period from transits and the validated series.

    Parameters
    ----------
    transits : sequence of TransitEvent
        Accepted transit events, in time order.
    time, flux : array-like
        Validated light curve.
    mean_flux : float, optional
        Precomputed mean flux.

    Returns
    -------
    float
        Trial period with the highest power (first one on ties), or 0.0 when
        there are no transits or the search range is empty.
    """
    time = np.asarray(time, dtype=float)
    guess = expected_period(time, len(transits))
    periods = period_grid(guess)

    if len(periods) == 0:
        logger.warning("Empty period search range (expected period %.3f d); reporting 0", guess)
        return 0.0

    if len(transits) == 1:
        logger.info("Single transit: period guess %.3f d is the full time span", guess)

    power = cosine_power(time, flux, periods, mean_flux=mean_flux)
    best_idx = int(np.argmax(power))
    best_period = float(periods[best_idx])

    logger.info("Period search: %d trial periods in [%.2f, %.2f] d, best P=%.4f d (power=%.4g)",
                len(periods), periods[0], periods[-1], best_period, power[best_idx])
    return best_period
