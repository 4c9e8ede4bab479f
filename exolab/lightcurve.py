"""Light curve input: loading, validation, noise statistics and demo data.

Loads user-supplied tabular light curves (CSV, or Kepler/TESS FITS), filters
malformed samples, and computes the mean flux and noise level that the
transit scan is thresholded against.
"""

import csv
import logging
from pathlib import Path

import numpy as np

from exolab.constants import MIN_DATA_POINTS
from exolab.records import LightCurveSample, sample_pairs

logger = logging.getLogger(__name__)

# Header names tried before falling back to column position.
TIME_COLUMNS = ("time", "Time", "TIME")
FLUX_COLUMNS = ("flux", "Flux", "FLUX")

# FITS flux columns in order of preference: systematics-corrected first.
FITS_FLUX_COLUMNS = ("PDCSAP_FLUX", "SAP_FLUX")


def validate_samples(samples):
    """Drop malformed samples, preserving input order.

    A sample is kept only if both time and flux are finite, ``flux > 0`` and
    ``time >= 0``. Time ordering is assumed, not checked.

    Parameters
    ----------
    samples : sequence or dict
        Sequence of samples (see :func:`exolab.records.coerce_sample` for the
        accepted shapes), or a light curve dict with ``time`` and ``flux``
        arrays.

    Returns
    -------
    dict
        Keys: time (array), flux (array), n_points_raw, n_points_clean,
        sufficient (bool, at least MIN_DATA_POINTS valid samples).
    """
    if isinstance(samples, dict) and "time" in samples and "flux" in samples:
        try:
            time = np.atleast_1d(np.asarray(samples["time"], dtype=float))
            flux = np.atleast_1d(np.asarray(samples["flux"], dtype=float))
        except (TypeError, ValueError):
            logger.warning("Light curve arrays are not numeric; treating as empty")
            time, flux = np.array([]), np.array([])
        n_raw = max(len(time), len(flux))
        n = min(len(time), len(flux))
        time, flux = time[:n], flux[:n]
    else:
        try:
            pairs = sample_pairs(samples)
        except TypeError:
            logger.warning("Light curve input of type %s is not iterable; treating as empty",
                           type(samples).__name__)
            pairs = []
        n_raw = len(pairs)
        pairs = [p for p in pairs if p is not None]
        if pairs:
            time, flux = (np.asarray(col, dtype=float) for col in zip(*pairs))
        else:
            time, flux = np.array([]), np.array([])

    mask = np.isfinite(time) & np.isfinite(flux)
    mask[mask] = (flux[mask] > 0) & (time[mask] >= 0)
    n_clean = int(np.sum(mask))

    logger.info("Validation: kept %d of %d samples (%d malformed)",
                n_clean, n_raw, n_raw - n_clean)

    return {
        "time": time[mask],
        "flux": flux[mask],
        "n_points_raw": n_raw,
        "n_points_clean": n_clean,
        "sufficient": n_clean >= MIN_DATA_POINTS,
    }


def compute_noise_statistics(flux):
    """Return ``(mean_flux, noise_level)`` for validated flux values.

    The noise level is the population standard deviation,
    ``sqrt(mean((flux - mean_flux)**2))``.
    """
    flux = np.asarray(flux, dtype=float)
    mean_flux = float(np.mean(flux))
    noise_level = float(np.sqrt(np.mean((flux - mean_flux) ** 2)))
    return mean_flux, noise_level


def load_lightcurve_csv(path):
    """Read a two-column time/flux CSV file.

    Columns named time/Time/TIME and flux/Flux/FLUX are preferred; otherwise
    the first column is taken as time and the second as flux. Cells that do
    not parse as numbers become NaN and are left for validation to drop.

    Parameters
    ----------
    path : str or Path
        CSV file with a header row.

    Returns
    -------
    list of LightCurveSample

    Raises
    ------
    ValueError
        If the file has no header row or fewer than two columns.
    """
    path = Path(path)
    with path.open("r", newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        header = reader.fieldnames
        if not header or len(header) < 2:
            raise ValueError(f"{path}: expected a header with 'time' and 'flux' columns")

        time_col = _pick_column(header, TIME_COLUMNS, 0)
        flux_col = _pick_column(header, FLUX_COLUMNS, 1)
        logger.info("Reading %s (time column '%s', flux column '%s')",
                    path.name, time_col, flux_col)

        samples = [
            LightCurveSample(_float_or_nan(row.get(time_col)), _float_or_nan(row.get(flux_col)))
            for row in reader
        ]

    logger.info("Loaded %d rows from %s", len(samples), path.name)
    return samples


def load_lightcurve_fits(path, flux_column=None):
    """Read a Kepler/TESS light curve FITS file.

    Uses the TIME column and the first available flux column
    (PDCSAP_FLUX, then SAP_FLUX unless ``flux_column`` is given). Flux is
    divided by its median so it centers near 1.0.

    Returns
    -------
    list of LightCurveSample
    """
    from astropy.io import fits

    path = Path(path)
    with fits.open(path) as hdul:
        data = hdul[1].data
        names = [n.upper() for n in data.columns.names]
        candidates = (flux_column,) if flux_column else FITS_FLUX_COLUMNS
        column = next((c for c in candidates if c.upper() in names), None)
        if "TIME" not in names or column is None:
            raise ValueError(f"{path}: no TIME/{'/'.join(candidates)} columns in first extension")

        time = np.asarray(data["TIME"], dtype=float)
        flux = np.asarray(data[column], dtype=float)

    finite = np.isfinite(flux)
    if np.any(finite):
        median_flux = float(np.median(flux[finite]))
        if median_flux > 0:
            flux = flux / median_flux

    logger.info("Loaded %d rows from %s (%s, median-normalized)", len(time), path.name, column)
    return [LightCurveSample(float(t), float(f)) for t, f in zip(time, flux)]


def load_lightcurve(path):
    """Load a light curve, dispatching on the file suffix."""
    suffix = Path(path).suffix.lower()
    if suffix == ".csv":
        return load_lightcurve_csv(path)
    if suffix in (".fits", ".fit"):
        return load_lightcurve_fits(path)
    raise ValueError(f"Unsupported light curve format '{suffix}' (expected .csv or .fits)")


def generate_synthetic_lightcurve(n_points=1000, cadence=0.1, period=5.0,
                                  transit_duration=0.3, depth=0.005, noise=0.001,
                                  rng=None):
    """Build the demo light curve: flat flux with box-shaped periodic dips.

    ``time = i * cadence``; ``flux = 1 + U[0, 1) * noise``, scaled by
    ``1 - depth`` whenever ``time % period < transit_duration``.

    Returns
    -------
    list of LightCurveSample
    """
    if rng is None:
        rng = np.random.default_rng()

    time = np.arange(n_points) * cadence
    flux = 1.0 + rng.random(n_points) * noise
    in_transit = (time % period) < transit_duration
    flux[in_transit] *= (1.0 - depth)

    logger.info("Synthetic light curve: %d points, P=%.2f d, depth=%.4f, %d in-transit points",
                n_points, period, depth, int(np.sum(in_transit)))
    return [LightCurveSample(float(t), float(f)) for t, f in zip(time, flux)]


def _pick_column(header, names, fallback_index):
    for name in names:
        if name in header:
            return name
    return header[fallback_index]


def _float_or_nan(val):
    """Parse a float value, returning NaN for empty/invalid."""
    if val is None or val == "":
        return float("nan")
    try:
        return float(val)
    except (ValueError, TypeError):
        return float("nan")
