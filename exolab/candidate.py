"""Planet candidate synthesis from a positive detection, plus an in-memory catalog.

The derived properties are presentation values from rough scaling relations,
not a physical characterization:

    size         = clamp(sqrt(depth) * 10, 0.3, 20)          Earth radii
    distance     = (P / 365.25)^(2/3) * 1.5                  AU
    temperature  = clamp(T_star * sqrt(0.5 / distance), 50, 2000)   K

with T_star drawn uniformly from [5000, 7000) K. Randomness and the wall
clock are injectable so synthesis can be reproduced in tests.
"""

import dataclasses
import logging
import math
import string
from datetime import datetime

import numpy as np

from exolab.constants import (
    ANALYZED_MIN_CONFIDENCE,
    CANDIDATE_MIN_CONFIDENCE,
    DAYS_PER_YEAR,
    DEFAULT_HOST_STAR,
    DISCOVERY_METHOD,
)
from exolab.records import ExoplanetCandidate

logger = logging.getLogger(__name__)

MIN_PLANET_RADIUS = 0.3       # Earth radii
MAX_PLANET_RADIUS = 20.0      # Earth radii
MIN_PLANET_TEMP = 50.0        # K
MAX_PLANET_TEMP = 2000.0      # K
STELLAR_TEMP_BASE = 5000.0    # K
STELLAR_TEMP_SPREAD = 2000.0  # K
PLANET_LETTERS = "bcdef"

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LENGTH = 9


def estimate_planet_radius(transit_depth):
    """Planet radius in Earth radii, ``sqrt(depth) * 10`` clamped to [0.3, 20]."""
    radius = math.sqrt(max(transit_depth, 0.0)) * 10.0
    return max(MIN_PLANET_RADIUS, min(MAX_PLANET_RADIUS, radius))


def estimate_orbital_distance(period_days):
    """Orbital distance in AU, ``(P / 365.25)^(2/3) * 1.5``; 0 for non-positive P."""
    if period_days <= 0:
        return 0.0
    return (period_days / DAYS_PER_YEAR) ** (2.0 / 3.0) * 1.5


def estimate_planet_temperature(stellar_temp_K, distance_AU):
    """Planet temperature, ``T_star * sqrt(0.5 / a)`` clamped to [50, 2000] K."""
    if distance_AU <= 0:
        return MAX_PLANET_TEMP
    temperature = stellar_temp_K * math.sqrt(0.5 / distance_AU)
    return max(MIN_PLANET_TEMP, min(MAX_PLANET_TEMP, temperature))


def generate_exoplanet_candidate(detection, samples, host_star_name=DEFAULT_HOST_STAR,
                                 rng=None, clock=None):
    """Synthesize a presentable planet candidate from a detection.

    Parameters
    ----------
    detection : DetectionResult
        Output of :func:`exolab.pipeline.detect_transits`.
    samples : sequence
        The light curve the detection was run on; kept by reference.
    host_star_name : str
        Label for the host star; the planet is named after it.
    rng : numpy.random.Generator, optional
        Source of the stellar temperature, planet letter and id suffix.
    clock : callable, optional
        Zero-argument callable returning the current ``datetime``.

    Returns
    -------
    ExoplanetCandidate or None
        None unless ``detection.is_planet`` and confidence > 0.6.
    """
    if not detection.is_planet or not detection.confidence > CANDIDATE_MIN_CONFIDENCE:
        logger.info("No candidate: is_planet=%s, confidence=%.3f (need > %.2f)",
                    detection.is_planet, detection.confidence, CANDIDATE_MIN_CONFIDENCE)
        return None

    if rng is None:
        rng = np.random.default_rng()
    if clock is None:
        clock = datetime.now

    size = estimate_planet_radius(detection.transit_depth)
    distance = estimate_orbital_distance(detection.period)
    stellar_temp = STELLAR_TEMP_BASE + float(rng.random()) * STELLAR_TEMP_SPREAD
    temperature = estimate_planet_temperature(stellar_temp, distance)

    letter = PLANET_LETTERS[int(rng.integers(0, len(PLANET_LETTERS)))]
    now = clock()
    suffix = "".join(rng.choice(list(_ID_ALPHABET), size=_ID_SUFFIX_LENGTH))

    candidate = ExoplanetCandidate(
        id=f"exoplanet_{int(now.timestamp() * 1000)}_{suffix}",
        name=f"{host_star_name} {letter}",
        distance=distance,
        size=size,
        temperature=temperature,
        orbital_period=detection.period,
        discovery_method=DISCOVERY_METHOD,
        confidence=detection.confidence,
        transit_depth=detection.transit_depth,
        discovery_date=now.date().isoformat(),
        host_star=host_star_name,
        light_curve_data=samples,
    )

    logger.info("Candidate %s: %.2f R_earth at %.4f AU, %.0f K (T_star=%.0f K)",
                candidate.name, size, distance, temperature, stellar_temp)
    return candidate


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

REFERENCE_PLANETS = (
    ExoplanetCandidate(
        id="1", name="Kepler-452b", distance=1402, size=1.6, temperature=265,
        orbital_period=385, discovery_method="Transit Method", confidence=0.95,
        transit_depth=0.008, discovery_date="2015-07-23", host_star="Kepler-452",
    ),
    ExoplanetCandidate(
        id="2", name="Proxima Centauri b", distance=4.2, size=1.3, temperature=234,
        orbital_period=11.2, discovery_method="Radial Velocity", confidence=0.88,
        transit_depth=0.0, discovery_date="2016-08-24", host_star="Proxima Centauri",
    ),
    ExoplanetCandidate(
        id="3", name="TRAPPIST-1e", distance=39, size=0.9, temperature=251,
        orbital_period=6.1, discovery_method="Transit Method", confidence=0.92,
        transit_depth=0.006, discovery_date="2017-02-22", host_star="TRAPPIST-1",
    ),
    ExoplanetCandidate(
        id="4", name="HD 209458 b", distance=159, size=1.4, temperature=1130,
        orbital_period=3.5, discovery_method="Transit Method", confidence=0.78,
        transit_depth=0.015, discovery_date="1999-11-05", host_star="HD 209458",
    ),
)


class CandidateCatalog:
    """Insertion-ordered collection of candidates keyed by id."""

    def __init__(self, candidates=()):
        self._candidates = []
        for candidate in candidates:
            self.add(candidate)

    @classmethod
    def with_reference_planets(cls):
        """Catalog pre-populated with four well-known planets."""
        return cls(REFERENCE_PLANETS)

    def add(self, candidate):
        """Add a candidate; returns False if its id is already present."""
        if self.get(candidate.id) is not None:
            logger.info("Candidate %s already in catalog", candidate.id)
            return False
        self._candidates.append(candidate)
        return True

    def remove(self, candidate_id):
        """Remove by id; returns False if no such candidate."""
        before = len(self._candidates)
        self._candidates = [c for c in self._candidates if c.id != candidate_id]
        return len(self._candidates) < before

    def update(self, candidate_id, **changes):
        """Replace fields of a stored candidate; returns the new record or None."""
        for i, candidate in enumerate(self._candidates):
            if candidate.id == candidate_id:
                updated = dataclasses.replace(candidate, **changes)
                self._candidates[i] = updated
                return updated
        return None

    def get(self, candidate_id):
        return next((c for c in self._candidates if c.id == candidate_id), None)

    def total_count(self):
        return len(self._candidates)

    def analyzed_count(self):
        """Candidates with confidence above 0.7."""
        return sum(1 for c in self._candidates if c.confidence > ANALYZED_MIN_CONFIDENCE)

    def __len__(self):
        return len(self._candidates)

    def __iter__(self):
        return iter(list(self._candidates))
