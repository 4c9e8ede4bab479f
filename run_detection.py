"""Run transit detection on a light curve file or on the built-in demo data.

Usage:
    python run_detection.py --demo
    python run_detection.py --demo --seed 42 --save
    python run_detection.py --file kepler_lc.csv --host-star "Kepler-10"
    python run_detection.py --file tess_lc.fits --save --output-dir output/tess
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import numpy as np

from exolab.candidate import generate_exoplanet_candidate
from exolab.constants import DEFAULT_HOST_STAR
from exolab.lightcurve import generate_synthetic_lightcurve, load_lightcurve
from exolab.pipeline import detect_transits
from exolab.report import confidence_band, save_detection_report

LOG_DIR = Path(__file__).resolve().parent / "logs"

logger = logging.getLogger(__name__)


def _configure_logging():
    LOG_DIR.mkdir(exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        handlers=[
            logging.FileHandler(LOG_DIR / "detection.log"),
            logging.StreamHandler(sys.stderr),
        ],
    )


def run(path=None, demo=False, host_star=DEFAULT_HOST_STAR, seed=None,
        save=False, output_dir=None):
    """Load (or generate) a light curve, detect transits, synthesize a candidate.

    Returns
    -------
    dict
        Keys: source, confidence_band, detection, candidate (None when the
        detection does not qualify), and report_paths when saved.
    """
    rng = np.random.default_rng(seed)

    if demo:
        source = "synthetic demo"
        samples = generate_synthetic_lightcurve(rng=rng)
    else:
        source = str(path)
        samples = load_lightcurve(path)

    detection = detect_transits(samples)
    candidate = generate_exoplanet_candidate(detection, samples, host_star, rng=rng)

    result = {
        "source": source,
        "confidence_band": confidence_band(detection.confidence),
        "detection": detection.to_dict(),
        "candidate": candidate.to_dict() if candidate is not None else None,
    }

    if save:
        stem = Path(path).stem if path is not None else "demo"
        result["report_paths"] = save_detection_report(
            detection, candidate, output_dir=output_dir, name=stem, source=source,
        )

    return result


def main(argv=None):
    parser = argparse.ArgumentParser(description="Light Curve Transit Detection")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--file", type=str, help="Light curve file (.csv or .fits)")
    group.add_argument("--demo", action="store_true", help="Use the synthetic demo light curve")
    parser.add_argument("--host-star", type=str, default=DEFAULT_HOST_STAR,
                        help="Host star label used to name the candidate")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for demo data and candidate synthesis")
    parser.add_argument("--save", action="store_true", help="Write JSON and markdown reports")
    parser.add_argument("--output-dir", type=str, default=None,
                        help="Report directory (default: output/detections)")
    args = parser.parse_args(argv)

    _configure_logging()

    try:
        result = run(path=args.file, demo=args.demo, host_star=args.host_star,
                     seed=args.seed, save=args.save, output_dir=args.output_dir)
    except (OSError, ValueError) as e:
        logger.error("Could not read light curve '%s': %s", args.file, e)
        return 1

    sys.stdout.write(json.dumps(result, indent=2) + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
