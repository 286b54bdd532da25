"""
volcano_engine/analysis.py — Facade for running an import pass.

Thin functional wrappers around
:class:`~volcano_engine.pipeline.VolcanoImportPipeline` for callers that
do not need the intermediate state.

    analysis.py (facade)
        └── pipeline.py
              ├── tabular.py       → parse tables
              ├── conditions.py    → samples → conditions
              ├── differential.py  → numeric rows
              ├── volcano.py       → plot points
              └── merge.py         → new settings

Functions
---------
run_import_pass(settings, raw_text, raw_form, ...)
    → ``(merged_settings, points)``.

run_import_with_store(store, raw_text, raw_form, ...)
    → Load settings from a store, run the pass, save, return points.
"""

from __future__ import annotations

from typing import Callable

from volcano_engine.models import (
    DifferentialForm,
    PlotPoint,
    RawForm,
    SelectionMembership,
    Settings,
)
from volcano_engine.pipeline import VolcanoImportPipeline
from volcano_engine.protocols import GeneNameLookup, SettingsStore


def run_import_pass(
    settings: Settings,
    raw_text: str = "",
    raw_form: RawForm | None = None,
    differential_text: str = "",
    differential_form: DifferentialForm | None = None,
    membership: SelectionMembership | None = None,
    gene_lookup: GeneNameLookup | None = None,
    progress_callback: Callable[[int, int, str], None] | None = None,
    match_comparison_suffix: bool = False,
    palette_name: str | None = None,
) -> tuple[Settings, list[PlotPoint]]:
    """Run a complete import pass.

    Parameters
    ----------
    settings : Settings
        Current persisted settings.  Not modified.
    raw_text, differential_text : str
        Tab-delimited table texts.  Either may be empty, which skips the
        corresponding processing.
    raw_form, differential_form
        Column assignments for the two tables.
    membership : SelectionMembership, optional
        User selections by protein id.
    gene_lookup : GeneNameLookup, optional
        Preferred gene-name source.
    progress_callback : callable, optional
        ``(current, total, message_key)``; total is 7.
    match_comparison_suffix : bool
        See :class:`~volcano_engine.pipeline.ImportParams`.
    palette_name : str, optional
        Name from ``config.PALETTES`` replacing the settings palette.

    Returns
    -------
    tuple[Settings, list[PlotPoint]]
        The new settings value (the caller replaces its copy with it)
        and one point per kept differential row.
    """
    pipeline = VolcanoImportPipeline(
        settings,
        raw_text=raw_text,
        raw_form=raw_form,
        differential_text=differential_text,
        differential_form=differential_form,
        membership=membership,
    )
    pipeline.progress_callback = progress_callback
    pipeline.gene_lookup = gene_lookup
    pipeline.configure(
        match_comparison_suffix=match_comparison_suffix,
        palette_name=palette_name,
    )
    pipeline.run()
    return pipeline.get_results()


def run_import_with_store(
    store: SettingsStore,
    raw_text: str = "",
    raw_form: RawForm | None = None,
    differential_text: str = "",
    differential_form: DifferentialForm | None = None,
    membership: SelectionMembership | None = None,
    **kwargs,
) -> list[PlotPoint]:
    """Like :func:`run_import_pass`, reading and writing *store*.

    The merged settings are saved in a single ``store.save`` call after
    the pass has completed; nothing is saved if the pass raises.
    """
    merged, points = run_import_pass(
        store.load(),
        raw_text=raw_text,
        raw_form=raw_form,
        differential_text=differential_text,
        differential_form=differential_form,
        membership=membership,
        **kwargs,
    )
    store.save(merged)
    return points
