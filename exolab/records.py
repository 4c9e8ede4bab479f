"""Record types passed between pipeline stages."""

from dataclasses import asdict, dataclass, field
from typing import Any, NamedTuple, Optional

import numpy as np


class LightCurveSample(NamedTuple):
    """One photometric measurement: time in days, flux relative to ~1.0."""

    time: float
    flux: float


class TransitEvent(NamedTuple):
    """A single accepted dip.

    ``time`` is the time of minimum flux, ``depth`` is ``mean_flux - min_flux``
    in absolute flux units, ``start``/``end`` bound the below-threshold run.
    """

    time: float
    depth: float
    start: float
    end: float


@dataclass(frozen=True)
class FeatureSet:
    depth: float = 0.0
    duration: float = 0.0
    periodicity: float = 0.0
    symmetry: float = 0.0
    noise_level: float = 0.0

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class DetectionResult:
    """Terminal output of :func:`exolab.pipeline.detect_transits`."""

    is_planet: bool
    confidence: float
    transit_depth: float
    period: float
    duration: float
    epoch: float
    signal_to_noise: float
    features: FeatureSet
    n_transits: int = 0
    status: str = "ok"

    def to_dict(self):
        out = asdict(self)
        out["features"] = self.features.to_dict()
        return out


@dataclass(frozen=True)
class ExoplanetCandidate:
    """Presentable planet record synthesized from a passing detection."""

    id: str
    name: str
    distance: float          # AU
    size: float              # Earth radii
    temperature: float       # K
    orbital_period: float    # days
    discovery_method: str
    confidence: float
    transit_depth: float
    discovery_date: str
    host_star: str
    light_curve_data: Optional[Any] = field(default=None, repr=False, compare=False)

    def to_dict(self, include_light_curve=False):
        out = {
            "id": self.id,
            "name": self.name,
            "distance": self.distance,
            "size": self.size,
            "temperature": self.temperature,
            "orbital_period": self.orbital_period,
            "discovery_method": self.discovery_method,
            "confidence": self.confidence,
            "transit_depth": self.transit_depth,
            "discovery_date": self.discovery_date,
            "host_star": self.host_star,
        }
        if include_light_curve and self.light_curve_data is not None:
            out["light_curve_data"] = [
                {"time": p[0], "flux": p[1]}
                for p in sample_pairs(self.light_curve_data) if p is not None
            ]
        return out


def sample_pairs(samples):
    """Coerce a whole light curve into a list of ``(time, flux)`` pairs.

    ``samples`` is either a sequence of samples or a light curve dict with
    ``time`` and ``flux`` arrays (zipped to the shorter length). Malformed
    entries become None so callers can count them. Raises TypeError if
    ``samples`` is not iterable.
    """
    if isinstance(samples, dict) and "time" in samples and "flux" in samples:
        samples = zip(np.atleast_1d(samples["time"]), np.atleast_1d(samples["flux"]))
    return [coerce_sample(s) for s in samples]


def coerce_sample(sample):
    """Return ``(time, flux)`` as floats, or None if the sample is malformed.

    Accepts :class:`LightCurveSample`, mappings with ``time``/``flux`` keys,
    objects with ``time``/``flux`` attributes, and plain 2-sequences.
    Strings and bytes are never samples. Finiteness and sign are not
    checked here.
    """
    if isinstance(sample, (str, bytes)):
        return None
    try:
        if isinstance(sample, dict):
            time, flux = sample["time"], sample["flux"]
        elif hasattr(sample, "time") and hasattr(sample, "flux"):
            time, flux = sample.time, sample.flux
        else:
            time, flux = sample[0], sample[1]
        return float(time), float(flux)
    except (KeyError, IndexError, TypeError, ValueError):
        return None
