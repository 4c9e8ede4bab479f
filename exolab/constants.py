"""Detection thresholds shared by the transit pipeline."""

# ---------------------------------------------------------------------------
# Input validation and noise
# ---------------------------------------------------------------------------
MIN_DATA_POINTS = 100        # valid samples needed before any analysis
MAX_NOISE_LEVEL = 0.01       # flux stddev above which the series is unusable
SENTINEL_NOISE_LEVEL = 1.0   # reported when there are too few samples

# ---------------------------------------------------------------------------
# Dip scan
# ---------------------------------------------------------------------------
DIP_SIGMA = 2.0              # threshold = mean - DIP_SIGMA * noise
MIN_DIP_DURATION = 0.1       # days, exclusive
MAX_DIP_DURATION = 0.5       # days, exclusive
MIN_DIP_DEPTH = 0.0001       # absolute flux units, exclusive

# ---------------------------------------------------------------------------
# Period search
# ---------------------------------------------------------------------------
MIN_PERIOD = 0.5             # days
MAX_PERIOD = 1000.0          # days
PERIOD_STEP = 0.1            # days
PERIOD_CHUNK_SIZE = 256      # periods evaluated per vectorized block

# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------
MIN_TRANSIT_DEPTH = 0.0001   # normalized
MAX_TRANSIT_DEPTH = 0.1      # normalized
MIN_SIGNAL_TO_NOISE = 3.0
MIN_PERIODICITY = 0.7
MIN_SYMMETRY = 0.6
MIN_DURATION = 0.05          # days, exclusive
MAX_DURATION = 0.3           # days, exclusive
MIN_TRANSITS_FOR_PERIODICITY = 3

# Confidence weights (the five caps sum to 1.0)
DEPTH_SCORE_CAP = 0.3
SNR_SCORE_CAP = 0.3
PERIODICITY_WEIGHT = 0.2
SYMMETRY_WEIGHT = 0.1
TRANSIT_COUNT_SCORE_CAP = 0.1

# ---------------------------------------------------------------------------
# Candidates
# ---------------------------------------------------------------------------
CANDIDATE_MIN_CONFIDENCE = 0.6   # exclusive
ANALYZED_MIN_CONFIDENCE = 0.7    # exclusive
DISCOVERY_METHOD = "Transit Method"
DEFAULT_HOST_STAR = "Unknown Star"
DAYS_PER_YEAR = 365.25
