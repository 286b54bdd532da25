"""
volcano_engine/differential.py — Differential table → numeric volcano rows.

Takes the parsed differential table and the user's column assignments
and produces one row per kept protein with a numeric fold change and
significance, optionally transformed onto log scales.

Functions
---------
resolve_comparison(dataset, form)
    → Form with the comparison column and selection filled in.

essential_columns(form, custom_text_column)
    → Ordered, unique list of the columns the volcano pass needs.

process_differential(dataset, form, custom_text_column)
    → :class:`ProcessedDifferential`.

Numeric policy
--------------
Unparsable and non-finite values become ``0.0``.  ``log2`` and
``-log10`` are applied only to strictly positive values; anything else
maps to ``0.0``.  Reversal of the fold change happens after the log
transform.

Form column names match headers trimmed and case-insensitively; only
the essential columns are ever copied out of the table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

import numpy as np
import pandas as pd

from volcano_engine.config import DIFFERENTIAL_DEFAULTS
from volcano_engine.models import DifferentialForm
from volcano_engine.tabular import TabularDataset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessedDifferential:
    """Projected, filtered and transformed differential rows.

    Attributes
    ----------
    rows : pd.DataFrame
        One row per kept input row, ``RangeIndex``.  The fold-change and
        significance columns (when present) hold ``float64``; every other
        column holds the strings as read.
    form : DifferentialForm
        The form after comparison resolution.
    essential_columns : tuple[str, ...]
        Columns requested by the form, present or not.
    n_input_rows : int
        Row count before comparison filtering.
    """

    rows: pd.DataFrame = field(default_factory=pd.DataFrame)
    form: DifferentialForm = field(default_factory=DifferentialForm)
    essential_columns: tuple[str, ...] = ()
    n_input_rows: int = 0

    def __len__(self) -> int:
        return len(self.rows.index)

    def records(self) -> list[dict]:
        """One dict per row; rows survive even when no column resolved."""
        if len(self.rows.columns) == 0:
            return [{} for _ in range(len(self.rows.index))]
        return self.rows.to_dict(orient="records")


def resolve_comparison(dataset: TabularDataset, form: DifferentialForm) -> DifferentialForm:
    """Fill in the comparison column and the selected comparison values.

    An unset comparison column becomes the sentinel placeholder with
    selection ``["1"]``.  A real column with no selection selects the
    trimmed value of its first row, or ``"1"`` when there is none.
    """
    sentinel = DIFFERENTIAL_DEFAULTS["comparison_sentinel"]
    default = DIFFERENTIAL_DEFAULTS["default_comparison"]
    column = form.comparison_column

    if not column or column == sentinel:
        select = form.comparison_select or (default,)
        return replace(form, comparison_column=sentinel, comparison_select=tuple(select))

    if form.comparison_select:
        return form

    first = ""
    header = dataset.resolve_column(column)
    if header is not None and dataset.row_count > 0:
        first = str(dataset.cell(0, header)).strip()
    return replace(form, comparison_select=(first or default,))


def essential_columns(form: DifferentialForm, custom_text_column: str = "") -> list[str]:
    candidates = [
        form.fold_change_column,
        form.significance_column,
        form.primary_id_column,
        form.gene_name_column,
        custom_text_column,
        form.comparison_column,
    ]
    return list(dict.fromkeys(c for c in candidates if c))


def _to_float(series: pd.Series) -> pd.Series:
    """Strings → float64; unparsable or non-finite → 0.0."""
    values = pd.to_numeric(series.astype(str).str.strip(), errors="coerce")
    values = values.astype("float64").replace([np.inf, -np.inf], np.nan)
    return values.fillna(0.0)


def _safe_log2(values: pd.Series) -> pd.Series:
    positive = values > 0
    out = np.zeros(len(values), dtype="float64")
    out[positive.to_numpy()] = np.log2(values[positive].to_numpy())
    return pd.Series(out, index=values.index)


def _safe_neg_log10(values: pd.Series) -> pd.Series:
    positive = values > 0
    out = np.zeros(len(values), dtype="float64")
    out[positive.to_numpy()] = -np.log10(values[positive].to_numpy())
    return pd.Series(out, index=values.index)


def process_differential(
    dataset: TabularDataset,
    form: DifferentialForm,
    custom_text_column: str = "",
) -> ProcessedDifferential:
    """Project, filter and transform the differential table.

    Form column names are matched to the header with
    :meth:`TabularDataset.resolve_column` (trimmed, case-insensitive),
    and the projected columns carry the names the form asked for.

    Parameters
    ----------
    dataset : TabularDataset
        Parsed differential table.
    form : DifferentialForm
        Column assignments.  The comparison is resolved first, see
        :func:`resolve_comparison`.
    custom_text_column : str
        Optional extra column carried through for point labels.

    Returns
    -------
    ProcessedDifferential
        Empty rows for an empty dataset.
    """
    form = resolve_comparison(dataset, form)
    wanted = essential_columns(form, custom_text_column)
    headers = {name: dataset.resolve_column(name) for name in wanted}
    present = {name: header for name, header in headers.items() if header is not None}

    absent = [name for name, header in headers.items() if header is None]
    # the sentinel placeholder is never a real column
    absent = [c for c in absent if c != DIFFERENTIAL_DEFAULTS["comparison_sentinel"]]
    if absent:
        logger.warning("Columns not found in differential table: %s", absent)

    if dataset.row_count == 0:
        logger.info("Differential table is empty; no rows to process.")
        return ProcessedDifferential(
            rows=pd.DataFrame(columns=list(present)),
            form=form,
            essential_columns=tuple(wanted),
            n_input_rows=0,
        )

    projected = dataset.select(list(present.values())).frame
    rows = pd.DataFrame(
        {name: projected[header] for name, header in present.items()},
        index=projected.index,
    )

    comparison = form.comparison_column
    if comparison in present and form.comparison_select:
        selected = set(form.comparison_select)
        mask = rows[comparison].astype(str).str.strip().isin(selected)
        rows = rows[mask]
        logger.debug(
            "Comparison filter on '%s' %s kept %d of %d rows.",
            comparison, sorted(selected), len(rows.index), dataset.row_count,
        )
    rows = rows.reset_index(drop=True)

    fc = form.fold_change_column
    if fc and fc in rows.columns:
        values = _to_float(rows[fc])
        if form.transform_fold_change:
            values = _safe_log2(values)
        if form.reverse_fold_change:
            values = -values
        rows[fc] = values

    sig = form.significance_column
    if sig and sig in rows.columns and sig != fc:
        values = _to_float(rows[sig])
        if form.transform_significance:
            values = _safe_neg_log10(values)
        rows[sig] = values

    logger.info(
        "Processed differential table: %d of %d rows kept.",
        len(rows.index), dataset.row_count,
    )
    return ProcessedDifferential(
        rows=rows,
        form=form,
        essential_columns=tuple(wanted),
        n_input_rows=dataset.row_count,
    )
