"""Transit detection for exoplanet light curves."""

from exolab.candidate import CandidateCatalog, generate_exoplanet_candidate
from exolab.pipeline import detect_transits
from exolab.records import DetectionResult, ExoplanetCandidate, FeatureSet, LightCurveSample

__all__ = [
    "CandidateCatalog",
    "DetectionResult",
    "ExoplanetCandidate",
    "FeatureSet",
    "LightCurveSample",
    "detect_transits",
    "generate_exoplanet_candidate",
]
