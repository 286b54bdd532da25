"""
volcano_engine/pipeline.py — Class-based orchestrator for one import pass.

An import pass takes the persisted settings plus the raw and
differential table texts and produces the merged settings and the
volcano points.  The pipeline keeps every intermediate result so each
stage can be run and inspected on its own.

Usage
-----
Fluent chaining (full pass)::

    pipeline = (
        VolcanoImportPipeline(settings, raw_text, raw_form,
                              differential_text, differential_form,
                              membership)
        .configure(match_comparison_suffix=True)
        .run()
    )
    merged_settings, points = pipeline.get_results()

Step-by-step (for testing / inspection)::

    pipeline = VolcanoImportPipeline(settings, raw_text, raw_form)
    pipeline.load_raw().map_samples()
    # inspect pipeline.mapping
    pipeline.load_differential().process_differential()
    pipeline.build_points().merge_settings()

Not re-entrant: one instance serves one pass on one thread.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, fields, replace
from typing import Callable

from volcano_engine.conditions import SampleMapping, map_samples, missing_samples
from volcano_engine.config import get_palette
from volcano_engine.differential import ProcessedDifferential, process_differential
from volcano_engine.merge import merge_settings
from volcano_engine.models import (
    DifferentialForm,
    PlotPoint,
    RawForm,
    SelectionMembership,
    Settings,
)
from volcano_engine.protocols import GeneNameLookup
from volcano_engine.tabular import TabularDataset, load_tabular_text
from volcano_engine.volcano import VolcanoResult, build_volcano_points

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────
# Parameter snapshot
# ─────────────────────────────────────────────────────────────────────

@dataclass
class ImportParams:
    """Tuneable knobs of an import pass, recorded in the audit log."""

    # Restrict "name (X)" selections to rows of comparison X.
    match_comparison_suffix: bool = False

    # Named palette from config.PALETTES replacing the settings palette.
    palette_name: str | None = None


# ─────────────────────────────────────────────────────────────────────
# Pipeline class
# ─────────────────────────────────────────────────────────────────────

class VolcanoImportPipeline:
    """Orchestrates tabular loading, sample mapping, differential
    processing, point building and the final settings merge.

    Every step method returns ``self`` to allow fluent chaining.

    Pipeline stages
    ~~~~~~~~~~~~~~~~
    1. ``load_raw()``              — parse the raw table text
    2. ``map_samples()``           — conditions, sample order, colours
    3. ``load_differential()``     — parse the differential table text
    4. ``process_differential()``  — filter, project, transform
    5. ``build_points()``          — plot points and bucket colours
    6. ``merge_settings()``        — fold everything into new settings
    7. ``run()``                   — all of the above

    Empty raw text skips stages 1–2; empty differential text skips 3–5.

    Key attributes
    ~~~~~~~~~~~~~~~
    params : ImportParams
    settings : Settings
        Working settings (input, with a palette override applied).
    mapping : SampleMapping | None
    processed : ProcessedDifferential | None
    volcano : VolcanoResult | None
    merged_settings : Settings | None
    step_timings : dict[str, float]
    """

    TOTAL_STEPS: int = 7

    def __init__(
        self,
        settings: Settings,
        raw_text: str = "",
        raw_form: RawForm | None = None,
        differential_text: str = "",
        differential_form: DifferentialForm | None = None,
        membership: SelectionMembership | None = None,
    ) -> None:
        self._settings_input: Settings = settings
        self.raw_text: str = raw_text or ""
        self.raw_form: RawForm = raw_form or RawForm()
        self.differential_text: str = differential_text or ""
        self.differential_form: DifferentialForm = differential_form or DifferentialForm()
        self.membership: SelectionMembership = membership or {}

        self.params: ImportParams = ImportParams()
        self.settings: Settings = settings

        # ── Intermediate state ─────────────────────────────────────
        self.raw_dataset: TabularDataset | None = None
        self.differential_dataset: TabularDataset | None = None
        self.mapping: SampleMapping | None = None
        self.missing_samples: list[str] = []
        self.processed: ProcessedDifferential | None = None
        self.volcano: VolcanoResult | None = None

        # Final output
        self.merged_settings: Settings | None = None

        # Tracking
        self.step_timings: dict[str, float] = {}
        self._step_log: list[str] = []
        self._step: int = 0
        self._pipeline_t0: float | None = None
        self._total_elapsed: float | None = None

        self.progress_callback: Callable[[int, int, str], None] | None = None
        self.gene_lookup: GeneNameLookup | None = None

    # ── Configuration ──────────────────────────────────────────────

    def configure(self, **kwargs) -> VolcanoImportPipeline:
        """Set pipeline parameters.  Returns *self* for chaining.

        Unknown keys and unknown palette names raise ``ValueError``.
        """
        valid = [f.name for f in fields(self.params)]
        for key, value in kwargs.items():
            if key not in valid:
                raise ValueError(f"Unknown parameter: '{key}'.  Valid keys: {valid}")
            setattr(self.params, key, value)

        if self.params.palette_name:
            palette = get_palette(self.params.palette_name)
            self.settings = replace(self._settings_input, default_palette=tuple(palette))
        else:
            self.settings = self._settings_input
        return self

    # ── Helpers ────────────────────────────────────────────────────

    def _report(self, message_key: str) -> None:
        if self.progress_callback:
            self.progress_callback(self._step, self.TOTAL_STEPS, message_key)
        self._step += 1

    def _finish(self, step: str, t0: float) -> None:
        self.step_timings[step] = time.monotonic() - t0
        self._step_log.append(step)
        logger.debug("Step '%s' finished in %.3fs.", step, self.step_timings[step])

    # ── Raw table ──────────────────────────────────────────────────

    def load_raw(self) -> VolcanoImportPipeline:
        self._report("progress.load_raw")
        if not self.raw_text.strip():
            logger.info("No raw table supplied; skipping sample mapping.")
            return self
        t0 = time.monotonic()
        self.raw_dataset = load_tabular_text(self.raw_text)
        self.missing_samples = missing_samples(self.raw_dataset, self.raw_form)
        if self.missing_samples:
            logger.warning(
                "Configured samples not found in raw table: %s", self.missing_samples,
            )
        self._finish("load_raw", t0)
        return self

    def map_samples(self) -> VolcanoImportPipeline:
        """Derive conditions for the configured sample columns.

        After this step
        ~~~~~~~~~~~~~~~~
        - ``self.mapping`` — merged sample/condition/colour state
        """
        self._report("progress.map_samples")
        if self.raw_dataset is None:
            return self
        t0 = time.monotonic()
        self.mapping = map_samples(self.raw_form.sample_columns, self.settings)
        self._finish("map_samples", t0)
        return self

    # ── Differential table ─────────────────────────────────────────

    def load_differential(self) -> VolcanoImportPipeline:
        self._report("progress.load_differential")
        if not self.differential_text.strip():
            logger.info("No differential table supplied; skipping volcano points.")
            return self
        t0 = time.monotonic()
        self.differential_dataset = load_tabular_text(self.differential_text)
        self._finish("load_differential", t0)
        return self

    def process_differential(self) -> VolcanoImportPipeline:
        """Filter by comparison, project and transform the differential rows.

        After this step
        ~~~~~~~~~~~~~~~~
        - ``self.processed``          — numeric rows
        - ``self.differential_form``  — comparison resolved
        """
        self._report("progress.process_differential")
        if self.differential_dataset is None:
            return self
        t0 = time.monotonic()
        self.processed = process_differential(
            self.differential_dataset,
            self.differential_form,
            custom_text_column=self.settings.custom_text_column,
        )
        self.differential_form = self.processed.form
        self._finish("process_differential", t0)
        return self

    # ── Points ─────────────────────────────────────────────────────

    def build_points(self) -> VolcanoImportPipeline:
        """Build volcano points against the condition-coloured settings.

        After this step
        ~~~~~~~~~~~~~~~~
        - ``self.volcano`` — points, extended colour map, axis
        """
        self._report("progress.build_points")
        if self.processed is None:
            return self
        t0 = time.monotonic()
        # condition colours must be visible to the volcano pass
        current = merge_settings(self.settings, self.mapping)
        self.volcano = build_volcano_points(
            self.processed,
            self.membership,
            current,
            gene_lookup=self.gene_lookup,
            match_comparison_suffix=self.params.match_comparison_suffix,
        )
        self._finish("build_points", t0)
        return self

    # ── Merge ──────────────────────────────────────────────────────

    def merge_settings(self) -> VolcanoImportPipeline:
        self._report("progress.merge_settings")
        t0 = time.monotonic()
        self.merged_settings = merge_settings(
            self.settings,
            self.mapping,
            self.volcano.color_map if self.volcano else None,
        )
        self._finish("merge_settings", t0)
        return self

    # ── Convenience: run all ───────────────────────────────────────

    def run(self) -> VolcanoImportPipeline:
        """Run every stage in order.  Returns *self* for chaining."""
        self._pipeline_t0 = time.monotonic()
        self._step = 0

        (
            self
            .load_raw()
            .map_samples()
            .load_differential()
            .process_differential()
            .build_points()
            .merge_settings()
        )

        self._total_elapsed = time.monotonic() - self._pipeline_t0
        self._report("progress.done")
        self._step_log.append("run_complete")
        logger.info(
            "Import pass complete in %.3fs: %d points.",
            self._total_elapsed, len(self.points),
        )
        return self

    # ── Output accessors ───────────────────────────────────────────

    @property
    def points(self) -> list[PlotPoint]:
        return list(self.volcano.points) if self.volcano else []

    def build_audit(self) -> dict:
        """JSON-serialisable audit log of the completed pass."""
        from volcano_engine.audit import build_import_audit
        return build_import_audit(self)

    def get_results(self) -> tuple[Settings, list[PlotPoint]]:
        """Return ``(merged_settings, points)``.

        Raises
        ------
        RuntimeError
            If the pipeline has not been run yet.
        """
        if self.merged_settings is None:
            raise RuntimeError(
                "Pipeline has not been run yet. Call .run() or "
                "execute steps individually first."
            )
        return self.merged_settings, self.points

    def __repr__(self) -> str:
        status = self._step_log[-1] if self._step_log else "not started"
        n_points = len(self.volcano.points) if self.volcano else "?"
        return (
            f"<VolcanoImportPipeline "
            f"status={status!r} "
            f"points={n_points} "
            f"params={self.params!r}>"
        )
