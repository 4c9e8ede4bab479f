"""Transit dip scanning, feature extraction and rule-based classification.

The scan walks the validated light curve once with a two-state machine
(outside a dip / inside a dip) against a 2-sigma threshold below the mean
flux. Each dip that closes is checked by :func:`accept_dip`; accepted dips
become :class:`~exolab.records.TransitEvent` records from which depth,
duration, periodicity, symmetry and signal-to-noise are derived.
"""

import logging
from enum import Enum

import numpy as np

from exolab.constants import (
    DEPTH_SCORE_CAP,
    DIP_SIGMA,
    MAX_DIP_DURATION,
    MAX_DURATION,
    MAX_PERIOD,
    MAX_TRANSIT_DEPTH,
    MIN_DIP_DEPTH,
    MIN_DIP_DURATION,
    MIN_DURATION,
    MIN_PERIOD,
    MIN_PERIODICITY,
    MIN_SIGNAL_TO_NOISE,
    MIN_SYMMETRY,
    MIN_TRANSIT_DEPTH,
    MIN_TRANSITS_FOR_PERIODICITY,
    PERIODICITY_WEIGHT,
    SNR_SCORE_CAP,
    SYMMETRY_WEIGHT,
    TRANSIT_COUNT_SCORE_CAP,
)
from exolab.records import FeatureSet, TransitEvent

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Dip scan
# ---------------------------------------------------------------------------

class ScanState(Enum):
    OUTSIDE = "outside"
    INSIDE_DIP = "inside_dip"


def dip_threshold(mean_flux, noise_level, n_sigma=DIP_SIGMA):
    """Flux below which a sample counts as part of a dip."""
    return mean_flux - n_sigma * noise_level


def accept_dip(start, end, depth):
    """Whether a closed dip looks like a transit.

    Rejects single-cadence noise spikes and broad variability trends:
    ``MIN_DIP_DURATION < end - start < MAX_DIP_DURATION`` and
    ``depth > MIN_DIP_DEPTH`` (absolute flux units).
    """
    duration = end - start
    return MIN_DIP_DURATION < duration < MAX_DIP_DURATION and depth > MIN_DIP_DEPTH


class TransitScanner:
    """Two-state dip tracker fed one sample at a time.

    OUTSIDE -> INSIDE_DIP when flux drops below the threshold; the dip
    remembers its start time and its lowest sample. INSIDE_DIP -> OUTSIDE
    when flux returns to or above the threshold; the dip is then closed at
    that sample's time and handed to :func:`accept_dip`.
    """

    def __init__(self, mean_flux, threshold):
        self.mean_flux = mean_flux
        self.threshold = threshold
        self.state = ScanState.OUTSIDE
        self.start = 0.0
        self.min_flux = mean_flux
        self.min_time = 0.0
        self.n_rejected = 0

    def step(self, time, flux):
        """Consume one sample; return a TransitEvent if an accepted dip just closed."""
        below = flux < self.threshold

        if self.state is ScanState.OUTSIDE:
            if below:
                self.state = ScanState.INSIDE_DIP
                self.start = time
                self.min_flux = flux
                self.min_time = time
            return None

        if below:
            if flux < self.min_flux:
                self.min_flux = flux
                self.min_time = time
            return None

        depth = self.mean_flux - self.min_flux
        event = None
        if accept_dip(self.start, time, depth):
            event = TransitEvent(time=self.min_time, depth=depth, start=self.start, end=time)
        else:
            self.n_rejected += 1
        self.state = ScanState.OUTSIDE
        self.min_flux = self.mean_flux
        return event


def find_transits(time, flux, mean_flux, noise_level):
    """Scan a validated light curve for transit-like dips.

    A dip still open at the last sample is dropped.

    Returns
    -------
    list of TransitEvent
        Accepted dips in time order.
    """
    threshold = dip_threshold(mean_flux, noise_level)
    scanner = TransitScanner(mean_flux, threshold)

    transits = []
    for t, f in zip(np.asarray(time, dtype=float), np.asarray(flux, dtype=float)):
        event = scanner.step(float(t), float(f))
        if event is not None:
            transits.append(event)

    logger.info("Dip scan: threshold=%.6f, %d transit(s) accepted, %d dip(s) rejected%s",
                threshold, len(transits), scanner.n_rejected,
                ", final dip left open" if scanner.state is ScanState.INSIDE_DIP else "")
    return transits


# ---------------------------------------------------------------------------
# Features
# ---------------------------------------------------------------------------

def mean_transit_depth(transits):
    """Average absolute depth of the transit events."""
    if not transits:
        return 0.0
    return float(np.mean([t.depth for t in transits]))


def normalized_depth(transits, mean_flux):
    """Average depth as a fraction of the mean flux."""
    if not transits:
        return 0.0
    return mean_transit_depth(transits) / mean_flux


def mean_duration(transits):
    if not transits:
        return 0.0
    return float(np.mean([t.end - t.start for t in transits]))


def periodicity_score(transits):
    """Regularity of transit spacing, ``max(0, 1 - std/mean)`` of the intervals.

    Needs at least three transits (two intervals); otherwise 0.
    """
    if len(transits) < MIN_TRANSITS_FOR_PERIODICITY:
        return 0.0
    intervals = np.diff([t.time for t in transits])
    mean_interval = float(np.mean(intervals))
    if mean_interval <= 0:
        return 0.0
    return max(0.0, 1.0 - float(np.std(intervals)) / mean_interval)


def symmetry_score(transits):
    """Average ingress/egress balance, ``1 - |ingress - egress| / (ingress + egress)``."""
    if not transits:
        return 0.0
    scores = []
    for t in transits:
        ingress = t.time - t.start
        egress = t.end - t.time
        total = ingress + egress
        scores.append(1.0 - abs(ingress - egress) / total if total > 0 else 0.0)
    return max(0.0, float(np.mean(scores)))


def signal_to_noise(transits, noise_level):
    """Mean absolute (unnormalized) depth over the noise level."""
    if not transits or noise_level <= 0:
        return 0.0
    return mean_transit_depth(transits) / noise_level


def extract_features(transits, mean_flux, noise_level):
    """Derive the feature set and signal-to-noise from accepted transits.

    Returns
    -------
    tuple of (FeatureSet, float)
        Features (depth is normalized) and the signal-to-noise ratio.
    """
    features = FeatureSet(
        depth=normalized_depth(transits, mean_flux),
        duration=mean_duration(transits),
        periodicity=periodicity_score(transits),
        symmetry=symmetry_score(transits),
        noise_level=noise_level,
    )
    snr = signal_to_noise(transits, noise_level)

    logger.info("Features: depth=%.1f ppm, duration=%.3f d, periodicity=%.3f, "
                "symmetry=%.3f, SNR=%.2f",
                features.depth * 1e6, features.duration, features.periodicity,
                features.symmetry, snr)
    return features, snr


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def is_likely_planet(depth, period, duration, snr, features):
    """Apply the fixed planet criteria; every check must pass.

    Parameters
    ----------
    depth : float
        Normalized transit depth.
    period : float
        Estimated period (days).
    duration : float
        Mean transit duration (days).
    snr : float
        Signal-to-noise ratio.
    features : FeatureSet
        Supplies periodicity and symmetry.
    """
    if depth < MIN_TRANSIT_DEPTH or depth > MAX_TRANSIT_DEPTH:
        return False
    if period < MIN_PERIOD or period > MAX_PERIOD:
        return False
    if snr < MIN_SIGNAL_TO_NOISE:
        return False

    return (features.periodicity > MIN_PERIODICITY
            and features.symmetry > MIN_SYMMETRY
            and MIN_DURATION < duration < MAX_DURATION)


def compute_confidence(features, snr, n_transits):
    """Weighted confidence score in [0, 1].

    depth (<= 0.3) + SNR (<= 0.3) + periodicity (<= 0.2) + symmetry (<= 0.1)
    + transit count (<= 0.1).
    """
    confidence = (
        min(DEPTH_SCORE_CAP, features.depth * 10)
        + min(SNR_SCORE_CAP, (snr / 10) * 0.3)
        + features.periodicity * PERIODICITY_WEIGHT
        + features.symmetry * SYMMETRY_WEIGHT
        + min(TRANSIT_COUNT_SCORE_CAP, (n_transits / 10) * 0.1)
    )
    return min(1.0, max(0.0, confidence))
