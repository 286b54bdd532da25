"""
volcano_engine/audit.py -- Audit log for reproducing an import pass.

Captures parameters, column assignments, library versions, table
dimensions, step timings and a summary of the produced points.

Functions
---------
get_library_versions()
    Return a dict of library name -> version string.

build_import_audit(pipeline)
    Build a JSON-serializable audit log from a completed import pipeline.

format_audit_text(audit_dict)
    Format an audit dict as human-readable text for lab notebooks.
"""

from __future__ import annotations

import datetime
import platform
from collections import Counter
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

import numpy as np

from volcano_engine.config import VOLCANO_CONFIG

if TYPE_CHECKING:
    from volcano_engine.pipeline import VolcanoImportPipeline


# ══════════════════════════════════════════════════════════════════════
# Library versions
# ══════════════════════════════════════════════════════════════════════

def get_library_versions() -> dict[str, str]:
    """Return ``{library: version}`` for the numeric stack.

    Libraries that are not installed return ``"not installed"``.
    """
    libs: dict[str, str] = {}
    for name in ("pandas", "numpy"):
        try:
            mod = __import__(name)
            libs[name] = getattr(mod, "__version__", "unknown")
        except ImportError:
            libs[name] = "not installed"
    return libs


# ══════════════════════════════════════════════════════════════════════
# JSON-safe serialiser
# ══════════════════════════════════════════════════════════════════════

def _safe_serialize(obj: Any) -> Any:
    """Make an audit value JSON-safe.

    Dataclass params arrive as dicts holding tuples; table ranges may be
    numpy floats.  Anything else unexpected is stringified.
    """
    if isinstance(obj, dict):
        return {str(k): _safe_serialize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_safe_serialize(v) for v in obj]
    if isinstance(obj, np.generic):
        return obj.item()
    if obj is None or isinstance(obj, (str, bool, int, float)):
        return obj
    return str(obj)


# ══════════════════════════════════════════════════════════════════════
# Import pass audit builder
# ══════════════════════════════════════════════════════════════════════

def _dimensions(dataset) -> dict:
    if dataset is None:
        return {"n_columns": 0, "n_rows": 0}
    return {"n_columns": len(dataset.columns), "n_rows": dataset.row_count}


def build_import_audit(pipeline: VolcanoImportPipeline) -> dict:
    """Build a JSON-serializable audit log from a completed import pipeline.

    Parameters
    ----------
    pipeline : VolcanoImportPipeline
        A pipeline instance whose ``.run()`` method has completed.

    Returns
    -------
    dict
        Complete audit log, safe for ``json.dumps()``.
    """
    points = pipeline.points
    selection_counts: Counter = Counter()
    for point in points:
        selection_counts.update(point.selections)

    background = VOLCANO_CONFIG["background_label"]
    n_selected = sum(
        1 for point in points
        if any(name in pipeline.membership.get(point.protein_id, {}) for name in point.selections)
    )

    mapping = pipeline.mapping
    processed = pipeline.processed
    volcano = pipeline.volcano

    results_summary: dict[str, Any] = {
        "n_points": len(points),
        "n_points_in_selections": n_selected,
        "n_points_background": selection_counts.get(background, 0),
        "points_per_group": dict(selection_counts),
        "n_conditions": len(mapping.condition_order) if mapping else 0,
        "new_condition_colors": dict(mapping.new_colors) if mapping else {},
    }
    if volcano is not None:
        results_summary["fold_change_range"] = [volcano.min_fc, volcano.max_fc]
        results_summary["max_neg_log10_p"] = volcano.max_neg_log10_p
        results_summary["axis"] = volcano.axis.to_dict()

    audit = {
        "volcano_engine": {
            "pipeline": "volcano_import",
            "timestamp": datetime.datetime.now(
                datetime.timezone.utc
            ).isoformat(),
            "pipeline_class": "VolcanoImportPipeline",
        },
        "environment": {
            "python": platform.python_version(),
            "platform": platform.platform(),
            "libraries": get_library_versions(),
        },
        "input_data": {
            "raw_table": _dimensions(pipeline.raw_dataset),
            "differential_table": _dimensions(pipeline.differential_dataset),
            "n_differential_rows_kept": len(processed) if processed is not None else 0,
            "missing_samples": list(pipeline.missing_samples),
        },
        "parameters": {
            **asdict(pipeline.params),
            "p_cutoff": pipeline.settings.p_cutoff,
            "log2_fold_change_cutoff": pipeline.settings.log2_fold_change_cutoff,
            "background_grey": pipeline.settings.background_grey,
            "raw_form": pipeline.raw_form.to_dict(),
            "differential_form": pipeline.differential_form.to_dict(),
        },
        "execution": {
            "steps_completed": list(pipeline._step_log),
            "step_timings_seconds": dict(pipeline.step_timings),
            "total_seconds": pipeline._total_elapsed,
        },
        "results_summary": results_summary,
    }

    return _safe_serialize(audit)


# ══════════════════════════════════════════════════════════════════════
# Human-readable text formatter
# ══════════════════════════════════════════════════════════════════════

def _append_mapping(lines: list[str], mapping: dict, indent: str = "  ") -> None:
    for k, v in mapping.items():
        if isinstance(v, dict):
            lines.append(f"{indent}{k}:")
            _append_mapping(lines, v, indent + "  ")
        else:
            lines.append(f"{indent}{k}: {v}")


def format_audit_text(audit: dict) -> str:
    """Format an audit dict as a human-readable text report.

    Parameters
    ----------
    audit : dict
        Output of ``build_import_audit()``.

    Returns
    -------
    str
        Multi-line plain-text summary.
    """
    lines: list[str] = []
    sep = "=" * 60

    lines.append(sep)
    lines.append("Volcano Engine -- Import Audit Log")
    lines.append(sep)
    lines.append("")

    meta = audit.get("volcano_engine", {})
    lines.append(f"Pipeline : {meta.get('pipeline', 'unknown')}")
    lines.append(f"Timestamp: {meta.get('timestamp', 'unknown')}")
    lines.append("")

    for title, key in (
        ("Environment", "environment"),
        ("Input Data", "input_data"),
        ("Parameters", "parameters"),
    ):
        lines.append(f"--- {title} ---")
        _append_mapping(lines, audit.get(key, {}))
        lines.append("")

    lines.append("--- Execution ---")
    exe = audit.get("execution", {})
    total = exe.get("total_seconds")
    if total is not None:
        lines.append(f"  Total time: {total:.3f}s")
    timings = exe.get("step_timings_seconds", {})
    if timings:
        lines.append("  Step timings:")
        for step, secs in timings.items():
            lines.append(f"    {step}: {secs:.3f}s")
    lines.append("")

    lines.append("--- Results Summary ---")
    _append_mapping(lines, audit.get("results_summary", {}))
    lines.append("")

    lines.append(sep)
    return "\n".join(lines)
