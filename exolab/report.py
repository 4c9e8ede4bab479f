"""Detection reports: structured dict, markdown summary, and files on disk."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import numpy as np

logger = logging.getLogger(__name__)

OUTPUT_DIR = Path(__file__).resolve().parent.parent / "output" / "detections"

STATUS_TEXT = {
    "ok": "Analysis completed",
    "insufficient_data": "Too few valid samples to analyze",
    "too_noisy": "Light curve too noisy to analyze",
    "no_transits": "No transit-like dips found",
}


def confidence_band(confidence):
    """Qualitative label for a confidence score: high (> 0.8), moderate (> 0.6), low."""
    if confidence > 0.8:
        return "high"
    if confidence > 0.6:
        return "moderate"
    return "low"


def build_detection_report(detection, candidate=None, source=None):
    """Combine a detection and optional candidate into a JSON-ready dict."""
    return {
        "generated_utc": datetime.now(timezone.utc).isoformat(),
        "source": source,
        "confidence_band": confidence_band(detection.confidence),
        "detection": detection.to_dict(),
        "candidate": candidate.to_dict() if candidate is not None else None,
    }


def format_detection_markdown(detection, candidate=None, source=None):
    """Format a detection (and candidate, if any) as a markdown string."""
    d = detection
    f = d.features
    lines = []

    lines.append("# Transit Detection Report")
    if source:
        lines.append(f"**Source**: {source}")
    lines.append(f"**Status**: {STATUS_TEXT.get(d.status, d.status)}")
    lines.append("")

    verdict = "Planet candidate" if d.is_planet else "No planet detected"
    lines.append(f"## Verdict: {verdict}")
    lines.append("")
    lines.append(f"- **Confidence**: {round(d.confidence * 100)}% ({confidence_band(d.confidence)})")
    lines.append(f"- **Transits found**: {d.n_transits}")
    lines.append(f"- **Transit depth**: {d.transit_depth * 100:.3f}%")
    lines.append(f"- **Period**: {d.period:.2f} days")
    lines.append(f"- **Duration**: {d.duration * 24:.2f} hours")
    lines.append(f"- **Epoch**: {_fmt(d.epoch)}")
    lines.append(f"- **Signal-to-noise**: {d.signal_to_noise:.2f}")
    lines.append("")

    lines.append("## Features")
    lines.append("")
    lines.append("| Feature | Value |")
    lines.append("|---------|-------|")
    for key in ("depth", "duration", "periodicity", "symmetry", "noise_level"):
        lines.append(f"| {key} | {_fmt(getattr(f, key), 6)} |")
    lines.append("")

    if candidate is not None:
        c = candidate
        lines.append(f"## Candidate: {c.name}")
        lines.append("")
        lines.append(f"- **ID**: {c.id}")
        lines.append(f"- **Host star**: {c.host_star}")
        lines.append(f"- **Radius**: {c.size:.2f} Earth radii")
        lines.append(f"- **Orbital distance**: {c.distance:.4f} AU")
        lines.append(f"- **Temperature**: {c.temperature:.0f} K")
        lines.append(f"- **Orbital period**: {c.orbital_period:.2f} days")
        lines.append(f"- **Method**: {c.discovery_method}")
        lines.append(f"- **Date**: {c.discovery_date}")
        lines.append("")

    return "\n".join(lines)


def save_detection_report(detection, candidate=None, output_dir=None, name="detection",
                          source=None):
    """Save a detection report as JSON and markdown files.

    Parameters
    ----------
    detection : DetectionResult
    candidate : ExoplanetCandidate, optional
    output_dir : str or Path, optional
        Output directory. Default: output/detections/.
    name : str
        File name stem; spaces become underscores.
    source : str, optional
        Where the light curve came from, recorded in both files.

    Returns
    -------
    dict
        Paths to saved files: json_path, md_path.
    """
    output_dir = Path(output_dir) if output_dir is not None else OUTPUT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)

    stem = "{}_{}".format(name.replace(" ", "_").lower(),
                          datetime.now(timezone.utc).strftime("%Y%m%d"))
    report = build_detection_report(detection, candidate, source=source)
    documents = {
        "json": json.dumps(report, indent=2, default=_json_serializer),
        "md": format_detection_markdown(detection, candidate, source=source),
    }

    paths = {}
    for ext, text in documents.items():
        path = output_dir / f"{stem}.{ext}"
        path.write_text(text, encoding="utf-8")
        logger.info("Report saved: %s", path)
        paths[f"{ext}_path"] = str(path)
    return paths


def _fmt(value, decimals=4):
    """Fixed-point text for a number; "N/A" for None or non-finite values."""
    if value is None or not np.isfinite(value):
        return "N/A"
    return f"{float(value):.{decimals}f}"


def _json_serializer(obj):
    """``json.dumps`` fallback for numpy values and records with ``to_dict``."""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.generic):
        return obj.item()
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
