"""Pipeline orchestration: validate -> noise -> dip scan -> features/period -> classify."""

import logging

from exolab.constants import MAX_NOISE_LEVEL, MIN_DATA_POINTS, SENTINEL_NOISE_LEVEL
from exolab.lightcurve import compute_noise_statistics, validate_samples
from exolab.periodogram import estimate_period
from exolab.records import DetectionResult, FeatureSet
from exolab.transit import compute_confidence, extract_features, find_transits, is_likely_planet

logger = logging.getLogger(__name__)


def detect_transits(samples):
    """Run the full transit detection pipeline on a light curve.

    Never raises: too few valid samples, an overly noisy series, or a series
    without transit-like dips all produce a negative result with zeroed
    features. Only the insufficient-data path reports the sentinel
    ``noise_level = 1``; the other paths carry the measured noise level.

    Parameters
    ----------
    samples : sequence
        Light curve samples (LightCurveSample, {"time", "flux"} mappings,
        or (time, flux) pairs), or a dict with ``time``/``flux`` arrays.
        Malformed entries are dropped.

    Returns
    -------
    DetectionResult
    """
    if samples is None:
        samples = []
    lc = validate_samples(samples)

    if not lc["sufficient"]:
        logger.warning("Only %d valid samples (need %d); skipping detection",
                       lc["n_points_clean"], MIN_DATA_POINTS)
        return _no_detection("insufficient_data", SENTINEL_NOISE_LEVEL)

    time, flux = lc["time"], lc["flux"]
    mean_flux, noise_level = compute_noise_statistics(flux)
    logger.info("Noise statistics: mean flux=%.6f, noise=%.6f", mean_flux, noise_level)

    if noise_level > MAX_NOISE_LEVEL:
        logger.warning("Noise level %.4f exceeds %.4f; series too noisy to analyze",
                       noise_level, MAX_NOISE_LEVEL)
        return _no_detection("too_noisy", noise_level)

    transits = find_transits(time, flux, mean_flux, noise_level)
    if not transits:
        logger.info("No transit-like dips found")
        return _no_detection("no_transits", noise_level)

    features, snr = extract_features(transits, mean_flux, noise_level)
    period = estimate_period(transits, time, flux, mean_flux=mean_flux)

    is_planet = is_likely_planet(features.depth, period, features.duration, snr, features)
    confidence = compute_confidence(features, snr, len(transits))

    logger.info("Detection: is_planet=%s, confidence=%.3f, P=%.4f d, %d transit(s)",
                is_planet, confidence, period, len(transits))

    return DetectionResult(
        is_planet=is_planet,
        confidence=confidence,
        transit_depth=features.depth,
        period=period,
        duration=features.duration,
        epoch=transits[0].time,
        signal_to_noise=snr,
        features=features,
        n_transits=len(transits),
        status="ok",
    )


def _no_detection(status, noise_level):
    """Return a negative result with zeroed features."""
    return DetectionResult(
        is_planet=False,
        confidence=0.0,
        transit_depth=0.0,
        period=0.0,
        duration=0.0,
        epoch=0.0,
        signal_to_noise=0.0,
        features=FeatureSet(noise_level=noise_level),
        n_transits=0,
        status=status,
    )
