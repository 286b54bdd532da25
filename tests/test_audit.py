import json

import numpy as np

from volcano_engine.audit import (
    _safe_serialize,
    build_import_audit,
    format_audit_text,
    get_library_versions,
)
from volcano_engine.models import Settings
from volcano_engine.pipeline import VolcanoImportPipeline


def _run(raw_text, raw_form, differential_text, differential_form):
    pipeline = VolcanoImportPipeline(
        Settings(), raw_text, raw_form, differential_text, differential_form,
        membership={"P1": {"Hits": True}},
    )
    return pipeline.run()


def test_library_versions_include_numeric_stack():
    versions = get_library_versions()
    assert set(versions) == {"pandas", "numpy"}


def test_audit_is_json_serialisable(raw_text, raw_form, differential_text, differential_form):
    audit = _run(raw_text, raw_form, differential_text, differential_form).build_audit()
    json.dumps(audit)
    assert audit["volcano_engine"]["pipeline_class"] == "VolcanoImportPipeline"
    assert audit["input_data"]["raw_table"] == {"n_columns": 4, "n_rows": 1}
    assert audit["input_data"]["differential_table"] == {"n_columns": 5, "n_rows": 3}
    assert audit["input_data"]["n_differential_rows_kept"] == 2
    assert audit["parameters"]["match_comparison_suffix"] is False
    assert audit["parameters"]["differential_form"]["_comparisonSelect"] == ["X"]


def test_audit_results_summary(raw_text, raw_form, differential_text, differential_form):
    pipeline = _run(raw_text, raw_form, differential_text, differential_form)
    summary = build_import_audit(pipeline)["results_summary"]
    assert summary["n_points"] == 2
    assert summary["n_points_in_selections"] == 1
    assert summary["points_per_group"]["Hits"] == 1
    assert summary["n_conditions"] == 2
    assert "run_complete" in build_import_audit(pipeline)["execution"]["steps_completed"]


def test_format_audit_text(raw_text, raw_form, differential_text, differential_form):
    audit = _run(raw_text, raw_form, differential_text, differential_form).build_audit()
    text = format_audit_text(audit)
    assert "Volcano Engine -- Import Audit Log" in text
    assert "--- Results Summary ---" in text
    assert "n_points: 2" in text


def test_numpy_and_tuple_values_serialised():
    value = _safe_serialize({"range": (np.float64(-1.5), np.float64(2.0)), "n": np.int64(3), 1: None})
    assert value == {"range": [-1.5, 2.0], "n": 3, "1": None}
    assert type(value["range"][0]) is float
    json.dumps(value)
