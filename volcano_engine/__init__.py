"""
volcano_engine -- Headless volcano-plot core for proteomics tables.

No UI, file, or network dependency.  Importable for headless use,
testing, notebooks, or any frontend.

Usage:
    from volcano_engine import Settings, RawForm, DifferentialForm
    from volcano_engine import run_import_pass

    merged, points = run_import_pass(
        Settings.from_dict(record), raw_text, RawForm(...),
        differential_text, DifferentialForm(...),
    )
"""

from volcano_engine.analysis import run_import_pass, run_import_with_store
from volcano_engine.audit import (
    build_import_audit,
    format_audit_text,
    get_library_versions,
)
from volcano_engine.colors import AllocatorState, ColorCycleAllocator, colors_in_use
from volcano_engine.conditions import (
    SampleMapping,
    map_samples,
    missing_samples,
    parse_sample_name,
)
from volcano_engine.config import PALETTES, get_palette
from volcano_engine.differential import (
    ProcessedDifferential,
    essential_columns,
    process_differential,
    resolve_comparison,
)
from volcano_engine.merge import merge_settings
from volcano_engine.models import (
    DifferentialForm,
    PlotPoint,
    RawForm,
    SampleInfo,
    SelectionMembership,
    Settings,
    VolcanoAxis,
)
from volcano_engine.pipeline import ImportParams, VolcanoImportPipeline
from volcano_engine.protocols import (
    FileData,
    GeneNameLookup,
    ProgressCallback,
    SettingsStore,
)
from volcano_engine.selections import (
    active_selections,
    membership_from_selections,
    selection_names,
)
from volcano_engine.tabular import (
    TabularDataset,
    deduplicate_header,
    load_tabular_file,
    load_tabular_text,
)
from volcano_engine.volcano import (
    VolcanoResult,
    build_volcano_points,
    significance_bucket,
)

__all__ = [
    "run_import_pass",
    "run_import_with_store",
    "build_import_audit",
    "format_audit_text",
    "get_library_versions",
    "AllocatorState",
    "ColorCycleAllocator",
    "colors_in_use",
    "SampleMapping",
    "map_samples",
    "missing_samples",
    "parse_sample_name",
    "PALETTES",
    "get_palette",
    "ProcessedDifferential",
    "essential_columns",
    "process_differential",
    "resolve_comparison",
    "merge_settings",
    "DifferentialForm",
    "PlotPoint",
    "RawForm",
    "SampleInfo",
    "SelectionMembership",
    "Settings",
    "VolcanoAxis",
    "ImportParams",
    "VolcanoImportPipeline",
    "FileData",
    "GeneNameLookup",
    "ProgressCallback",
    "SettingsStore",
    "active_selections",
    "membership_from_selections",
    "selection_names",
    "TabularDataset",
    "deduplicate_header",
    "load_tabular_file",
    "load_tabular_text",
    "VolcanoResult",
    "build_volcano_points",
    "significance_bucket",
]
