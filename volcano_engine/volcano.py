"""
volcano_engine/volcano.py — Processed differential rows → volcano points.

Each row becomes one :class:`~volcano_engine.models.PlotPoint`.  A row's
colour comes from the user selections it belongs to; rows outside every
selection fall into a significance bucket (or the grey background when
that option is on).

Bucket colours are cached per *position*, the comparison-independent
quadrant (``"P-value <= FC > "``), so the same quadrant has one colour
across comparisons even though the bucket labels differ.  Group colours
already in the settings seed that cache before any new colour is drawn,
so a re-import that adds comparisons keeps each quadrant's colour.

Functions
---------
significance_bucket(x, y, p_cutoff, fc_cutoff, comparison)
    → ``(group_label, position_key)``.

build_volcano_points(processed, membership, settings, ...)
    → :class:`VolcanoResult`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Iterable

from volcano_engine.colors import ColorCycleAllocator, colors_in_use
from volcano_engine.conditions import condition_names as settings_condition_names
from volcano_engine.config import VOLCANO_CONFIG
from volcano_engine.differential import ProcessedDifferential
from volcano_engine.models import PlotPoint, SelectionMembership, Settings, VolcanoAxis
from volcano_engine.protocols import GeneNameLookup
from volcano_engine.selections import active_selections, selection_names

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VolcanoResult:
    """Points plus the colour map and axis they were built with.

    Attributes
    ----------
    points : list[PlotPoint]
        One point per processed row, in row order.
    color_map : dict[str, str]
        Input colour map extended with selection and bucket colours.
    axis : VolcanoAxis
        Settings axis with unset bounds filled from the data range.
    min_fc, max_fc, max_neg_log10_p : float
        Observed ranges; all 0 when there are no rows.
    """

    points: list[PlotPoint] = field(default_factory=list)
    color_map: dict[str, str] = field(default_factory=dict)
    axis: VolcanoAxis = field(default_factory=VolcanoAxis)
    min_fc: float = 0.0
    max_fc: float = 0.0
    max_neg_log10_p: float = 0.0


def significance_bucket(
    x: float,
    y: float,
    p_cutoff: float,
    fc_cutoff: float,
    comparison: str,
) -> tuple[str, str]:
    """Classify a point against the p-value and fold-change cutoffs.

    Parameters
    ----------
    x : float
        Log2 fold change.
    y : float
        ``-log10`` of the p-value.
    p_cutoff : float
        Raw p-value cutoff.  ``<= 0`` puts every point above it.
    fc_cutoff : float
        Absolute log2 fold-change cutoff.
    comparison : str
        Appended to the label in parentheses.

    Returns
    -------
    tuple[str, str]
        ``("P-value <= 0.05;FC > 0.6 (A vs B)", "P-value <= FC > ")``.
    """
    threshold = -math.log10(p_cutoff) if p_cutoff > 0 else math.inf
    if y < threshold:
        p_group, position = f"P-value > {p_cutoff}", "P-value > "
    else:
        p_group, position = f"P-value <= {p_cutoff}", "P-value <= "
    if abs(x) > fc_cutoff:
        fc_group = f"FC > {fc_cutoff}"
        position += "FC > "
    else:
        fc_group = f"FC <= {fc_cutoff}"
        position += "FC <= "
    return f"{p_group};{fc_group} ({comparison})", position


def _text(value, default: str = "") -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return default
    return str(value)


def _resolve_gene(
    protein_id: str,
    gene_cell: str,
    gene_lookup: GeneNameLookup | None,
) -> str:
    if gene_lookup is not None and protein_id:
        found = gene_lookup(protein_id)
        if found:
            return found
    if gene_cell.strip():
        return gene_cell
    return protein_id


def build_volcano_points(
    processed: ProcessedDifferential,
    membership: SelectionMembership,
    settings: Settings,
    condition_names: Iterable[str] | None = None,
    gene_lookup: GeneNameLookup | None = None,
    match_comparison_suffix: bool = False,
) -> VolcanoResult:
    """Build plot points and extend the colour map.

    Parameters
    ----------
    processed : ProcessedDifferential
        Output of :func:`~volcano_engine.differential.process_differential`.
    membership : SelectionMembership
        User selections by protein id.
    settings : Settings
        Supplies the colour map, palette, cutoffs, background option,
        custom text column and axis.  Not modified.
    condition_names : iterable of str, optional
        Names whose colours do not count as "in use" for selection
        colouring.  Defaults to the conditions known to *settings*.
    gene_lookup : GeneNameLookup, optional
        Preferred source of gene names.
    match_comparison_suffix : bool
        Restrict selections named ``"... (X)"`` to comparison ``X``.

    Returns
    -------
    VolcanoResult
    """
    if condition_names is None:
        conditions = settings_condition_names(settings)
    else:
        conditions = set(condition_names)

    color_map = dict(settings.color_map)
    allocator = ColorCycleAllocator(
        settings.default_palette,
        in_use=colors_in_use(color_map, conditions),
    )
    color_map.update(allocator.assign(selection_names(membership), color_map))

    form = processed.form
    columns = set(processed.rows.columns)
    fc_col = form.fold_change_column if form.fold_change_column in columns else None
    sig_col = form.significance_column if form.significance_column in columns else None
    id_col = form.primary_id_column if form.primary_id_column in columns else None
    gene_col = form.gene_name_column if form.gene_name_column in columns else None
    cmp_col = form.comparison_column if form.comparison_column in columns else None
    text_col = settings.custom_text_column if settings.custom_text_column in columns else None

    # position -> colour, seeded from bucket groups coloured on earlier passes
    position_colors: dict[str, str] = {}
    if not settings.background_grey:
        for row in processed.records():
            x = float(row[fc_col]) if fc_col else 0.0
            y = float(row[sig_col]) if sig_col else 0.0
            comparison = _text(row.get(cmp_col)).strip() if cmp_col else ""
            group, position = significance_bucket(
                x, y, settings.p_cutoff, settings.log2_fold_change_cutoff, comparison,
            )
            if group in color_map:
                position_colors.setdefault(position, color_map[group])

    points: list[PlotPoint] = []
    min_fc = max_fc = max_y = 0.0

    for i, row in enumerate(processed.records()):
        x = float(row[fc_col]) if fc_col else 0.0
        y = float(row[sig_col]) if sig_col else 0.0
        if i == 0:
            min_fc = max_fc = x
            max_y = y
        else:
            min_fc = min(min_fc, x)
            max_fc = max(max_fc, x)
            max_y = max(max_y, y)

        protein_id = _text(row.get(id_col)) if id_col else ""
        gene = _resolve_gene(protein_id, _text(row.get(gene_col)) if gene_col else "", gene_lookup)
        comparison = _text(row.get(cmp_col)).strip() if cmp_col else ""
        custom_text = _text(row.get(text_col)) if text_col else None

        selections = active_selections(
            membership, protein_id, color_map, comparison, match_comparison_suffix,
        )
        colors = [color_map[name] for name in selections]

        if not selections:
            if settings.background_grey:
                selections = [VOLCANO_CONFIG["background_label"]]
                colors = [VOLCANO_CONFIG["background_color"]]
            else:
                group, position = significance_bucket(
                    x, y, settings.p_cutoff, settings.log2_fold_change_cutoff, comparison,
                )
                if group in color_map:
                    color = color_map[group]
                elif position in position_colors:
                    color = position_colors[position]
                else:
                    color = allocator.next_color()
                    position_colors[position] = color
                color_map[group] = color
                selections = [group]
                colors = [color]

        points.append(PlotPoint(
            x=x,
            y=y,
            protein_id=protein_id,
            gene_name=gene,
            comparison=comparison,
            selections=tuple(selections),
            colors=tuple(colors),
            custom_text=custom_text,
        ))

    padding = VOLCANO_CONFIG["axis_padding"]
    current = settings.volcano_axis
    axis = replace(
        current,
        min_x=current.min_x if current.min_x is not None else min_fc - padding,
        max_x=current.max_x if current.max_x is not None else max_fc + padding,
        min_y=current.min_y if current.min_y is not None else 0.0,
        max_y=current.max_y if current.max_y is not None else max_y + padding,
    )

    logger.info(
        "Built %d volcano points (fold change %.3g..%.3g, max -log10 p %.3g).",
        len(points), min_fc, max_fc, max_y,
    )
    return VolcanoResult(
        points=points,
        color_map=color_map,
        axis=axis,
        min_fc=min_fc,
        max_fc=max_fc,
        max_neg_log10_p=max_y,
    )
