"""
volcano_engine/models.py — Value types shared across the engine.

All records here are frozen dataclasses.  A pass never mutates a
``Settings`` instance; it builds a new one with ``dataclasses.replace``
and hands it back to the caller, who owns replacing its stored copy.

Persisted records use the camelCase keys of the settings JSON.  Reading
goes through :mod:`volcano_engine.values`, so a malformed field falls
back to its default instead of raising.  Keys the engine does not know
about are carried in ``Settings.extra`` and written back unchanged.

Types
-----
RawForm, DifferentialForm
    Column assignments for the raw and differential tables.
SampleInfo
    Condition / replicate of one sample column.
VolcanoAxis
    Optional axis bounds plus titles.
Settings
    The long-lived settings record.
PlotPoint
    One plot-ready volcano point.
SelectionMembership
    ``protein_id -> {selection_name: bool}``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict

from volcano_engine.config import SETTINGS_DEFAULTS, VOLCANO_CONFIG
from volcano_engine.values import (
    as_bool,
    as_bool_map,
    as_float,
    as_map,
    as_optional_float,
    as_str,
    as_str_list,
    as_str_list_map,
    as_str_map,
)

SelectionMembership = Dict[str, Dict[str, bool]]


# ─────────────────────────────────────────────────────────────────────
# Forms
# ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RawForm:
    """Which raw-table columns hold the protein id and the samples."""

    primary_id_column: str = ""
    sample_columns: tuple[str, ...] = ()
    is_log2: bool = False

    @classmethod
    def from_dict(cls, record: Any) -> RawForm:
        data = as_map(record)
        return cls(
            primary_id_column=as_str(data.get("_primaryIDs")),
            sample_columns=tuple(as_str_list(data.get("_samples"))),
            is_log2=as_bool(data.get("_log2")),
        )

    def to_dict(self) -> dict:
        return {
            "_primaryIDs": self.primary_id_column,
            "_samples": list(self.sample_columns),
            "_log2": self.is_log2,
        }


@dataclass(frozen=True)
class DifferentialForm:
    """Column assignments and transform switches for the differential table."""

    primary_id_column: str = ""
    gene_name_column: str = ""
    fold_change_column: str = ""
    transform_fold_change: bool = False
    significance_column: str = ""
    transform_significance: bool = False
    comparison_column: str = ""
    comparison_select: tuple[str, ...] = ()
    reverse_fold_change: bool = False

    @classmethod
    def from_dict(cls, record: Any) -> DifferentialForm:
        data = as_map(record)
        return cls(
            primary_id_column=as_str(data.get("_primaryIDs")),
            gene_name_column=as_str(data.get("_geneNames")),
            fold_change_column=as_str(data.get("_foldChange")),
            transform_fold_change=as_bool(data.get("_transformFC")),
            significance_column=as_str(data.get("_significant")),
            transform_significance=as_bool(data.get("_transformSignificant")),
            comparison_column=as_str(data.get("_comparison")),
            comparison_select=tuple(as_str_list(data.get("_comparisonSelect"))),
            reverse_fold_change=as_bool(data.get("_reverseFoldChange")),
        )

    def to_dict(self) -> dict:
        return {
            "_primaryIDs": self.primary_id_column,
            "_geneNames": self.gene_name_column,
            "_foldChange": self.fold_change_column,
            "_transformFC": self.transform_fold_change,
            "_significant": self.significance_column,
            "_transformSignificant": self.transform_significance,
            "_comparison": self.comparison_column,
            "_comparisonSelect": list(self.comparison_select),
            "_reverseFoldChange": self.reverse_fold_change,
        }


# ─────────────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SampleInfo:
    condition: str
    replicate: str
    name: str

    @classmethod
    def from_dict(cls, sample: str, record: Any) -> SampleInfo:
        data = as_str_map(record)
        return cls(
            condition=data.get("condition", ""),
            replicate=data.get("replicate", ""),
            name=data.get("name", sample),
        )

    def to_dict(self) -> dict:
        return {
            "condition": self.condition,
            "replicate": self.replicate,
            "name": self.name,
        }


_AXIS_KEYS = ("minX", "maxX", "minY", "maxY", "x", "y")


@dataclass(frozen=True)
class VolcanoAxis:
    """Axis bounds; ``None`` means "derive from the data"."""

    min_x: float | None = None
    max_x: float | None = None
    min_y: float | None = None
    max_y: float | None = None
    x_title: str = SETTINGS_DEFAULTS["axis_x_title"]
    y_title: str = SETTINGS_DEFAULTS["axis_y_title"]
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, record: Any) -> VolcanoAxis:
        data = as_map(record)
        return cls(
            min_x=as_optional_float(data.get("minX")),
            max_x=as_optional_float(data.get("maxX")),
            min_y=as_optional_float(data.get("minY")),
            max_y=as_optional_float(data.get("maxY")),
            x_title=as_str(data.get("x"), SETTINGS_DEFAULTS["axis_x_title"]),
            y_title=as_str(data.get("y"), SETTINGS_DEFAULTS["axis_y_title"]),
            extra={k: v for k, v in data.items() if k not in _AXIS_KEYS},
        )

    def to_dict(self) -> dict:
        record = dict(self.extra)
        record.update({
            "minX": self.min_x,
            "maxX": self.max_x,
            "minY": self.min_y,
            "maxY": self.max_y,
            "x": self.x_title,
            "y": self.y_title,
        })
        return record


# Persisted key → Settings attribute, for the fields the engine reads.
_SETTINGS_KEYS: dict = {
    "pCutoff": "p_cutoff",
    "log2FCCutoff": "log2_fold_change_cutoff",
    "colorMap": "color_map",
    "defaultColorList": "default_palette",
    "sampleMap": "sample_map",
    "sampleOrder": "sample_order",
    "sampleVisible": "sample_visible",
    "conditionOrder": "condition_order",
    "backGroundColorGrey": "background_grey",
    "customVolcanoTextCol": "custom_text_column",
    "volcanoPlotTitle": "plot_title",
    "plotFontFamily": "plot_font_family",
    "volcanoAxis": "volcano_axis",
}


@dataclass(frozen=True)
class Settings:
    """Long-lived settings record, replaced (never mutated) after each pass.

    Attributes
    ----------
    color_map : dict[str, str]
        Name → colour for conditions, selections and significance
        buckets.  They share one map.
    default_palette : tuple[str, ...]
        Palette cycled through by the colour allocator.
    sample_map : dict[str, SampleInfo]
        Sample column → condition/replicate.
    sample_order : dict[str, tuple[str, ...]]
        Condition → ordered sample columns.
    sample_visible : dict[str, bool]
    condition_order : tuple[str, ...]
    extra : dict
        Every persisted key not listed above, kept verbatim.
    """

    p_cutoff: float = SETTINGS_DEFAULTS["p_cutoff"]
    log2_fold_change_cutoff: float = SETTINGS_DEFAULTS["log2_fold_change_cutoff"]
    color_map: dict[str, str] = field(default_factory=dict)
    default_palette: tuple[str, ...] = tuple(SETTINGS_DEFAULTS["default_palette"])
    sample_map: dict[str, SampleInfo] = field(default_factory=dict)
    sample_order: dict[str, tuple[str, ...]] = field(default_factory=dict)
    sample_visible: dict[str, bool] = field(default_factory=dict)
    condition_order: tuple[str, ...] = ()
    background_grey: bool = False
    custom_text_column: str = ""
    plot_title: str = ""
    plot_font_family: str = SETTINGS_DEFAULTS["plot_font_family"]
    volcano_axis: VolcanoAxis = field(default_factory=VolcanoAxis)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, record: Any) -> Settings:
        """Build settings from a decoded JSON record.

        Missing or malformed fields take their defaults.  A record whose
        ``defaultColorList`` is absent or empty gets the default palette.
        """
        data = as_map(record)
        palette = as_str_list(data.get("defaultColorList")) or list(
            SETTINGS_DEFAULTS["default_palette"]
        )
        sample_map = {
            sample: SampleInfo.from_dict(sample, info)
            for sample, info in as_map(data.get("sampleMap")).items()
        }
        return cls(
            p_cutoff=as_float(data.get("pCutoff"), SETTINGS_DEFAULTS["p_cutoff"]),
            log2_fold_change_cutoff=as_float(
                data.get("log2FCCutoff"), SETTINGS_DEFAULTS["log2_fold_change_cutoff"]
            ),
            color_map=as_str_map(data.get("colorMap")),
            default_palette=tuple(palette),
            sample_map=sample_map,
            sample_order={
                condition: tuple(samples)
                for condition, samples in as_str_list_map(data.get("sampleOrder")).items()
            },
            sample_visible=as_bool_map(data.get("sampleVisible")),
            condition_order=tuple(dict.fromkeys(as_str_list(data.get("conditionOrder")))),
            background_grey=as_bool(data.get("backGroundColorGrey")),
            custom_text_column=as_str(data.get("customVolcanoTextCol")),
            plot_title=as_str(data.get("volcanoPlotTitle")),
            plot_font_family=as_str(
                data.get("plotFontFamily"), SETTINGS_DEFAULTS["plot_font_family"]
            ),
            volcano_axis=VolcanoAxis.from_dict(data.get("volcanoAxis")),
            extra={k: v for k, v in data.items() if k not in _SETTINGS_KEYS},
        )

    def to_dict(self) -> dict:
        record = dict(self.extra)
        record.update({
            "pCutoff": self.p_cutoff,
            "log2FCCutoff": self.log2_fold_change_cutoff,
            "colorMap": dict(self.color_map),
            "defaultColorList": list(self.default_palette),
            "sampleMap": {s: info.to_dict() for s, info in self.sample_map.items()},
            "sampleOrder": {c: list(s) for c, s in self.sample_order.items()},
            "sampleVisible": dict(self.sample_visible),
            "conditionOrder": list(self.condition_order),
            "backGroundColorGrey": self.background_grey,
            "customVolcanoTextCol": self.custom_text_column,
            "volcanoPlotTitle": self.plot_title,
            "plotFontFamily": self.plot_font_family,
            "volcanoAxis": self.volcano_axis.to_dict(),
        })
        return record

    def updated(self, **changes: Any) -> Settings:
        return replace(self, **changes)


# ─────────────────────────────────────────────────────────────────────
# Plot output
# ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PlotPoint:
    x: float
    y: float
    protein_id: str
    gene_name: str
    comparison: str
    selections: tuple[str, ...] = ()
    colors: tuple[str, ...] = ()
    custom_text: str | None = None

    @property
    def color(self) -> str:
        return self.colors[0] if self.colors else VOLCANO_CONFIG["neutral_color"]

    def to_dict(self) -> dict:
        """Renderer-neutral record; ``customText`` only when present."""
        record = {
            "x": self.x,
            "y": self.y,
            "id": self.protein_id,
            "gene": self.gene_name,
            "comparison": self.comparison,
            "selections": list(self.selections),
            "colors": list(self.colors),
            "color": self.color,
        }
        if self.custom_text is not None:
            record["customText"] = self.custom_text
        return record
