"""
volcano_engine/tabular.py — Tab-delimited text → column-oriented dataset.

Functions
---------
deduplicate_header(tokens)
    → Make header names unique (``a, a`` → ``a, a.1``).

load_tabular_text(text)
    → Parse tab-delimited text into a :class:`TabularDataset`.

load_tabular_file(file_data)
    → Decode a :class:`FileData` and delegate to ``load_tabular_text``.

Parsing never fails: short rows are padded with empty cells, extra cells
are dropped, and empty input yields a dataset with no columns.  Every
cell is kept as the string that was read; numeric interpretation is the
caller's business.
"""

from __future__ import annotations

import logging

import pandas as pd

from volcano_engine.config import TABULAR_CONFIG
from volcano_engine.protocols import FileData

logger = logging.getLogger(__name__)


class TabularDataset:
    """Ordered, uniquely named columns of string cells.

    Backed by a ``pandas.DataFrame`` of ``object`` dtype with a default
    ``RangeIndex``, so rows are addressed by position.
    """

    def __init__(self, frame: pd.DataFrame) -> None:
        if not frame.columns.is_unique:
            raise ValueError(
                f"Column names must be unique, got: {list(frame.columns)}"
            )
        self._frame = frame.reset_index(drop=True)

    @classmethod
    def from_columns(cls, columns: dict[str, list[str]]) -> TabularDataset:
        """Build a dataset from ``{name: cells}``.

        Raises
        ------
        ValueError
            If the columns do not all hold the same number of cells.
        """
        lengths = {name: len(cells) for name, cells in columns.items()}
        if len(set(lengths.values())) > 1:
            raise ValueError(f"Columns have unequal lengths: {lengths}")
        n_rows = next(iter(lengths.values()), 0)
        frame = pd.DataFrame(
            {name: pd.Series(list(cells), dtype=object) for name, cells in columns.items()},
            index=pd.RangeIndex(n_rows),
        )
        return cls(frame)

    @classmethod
    def empty(cls) -> TabularDataset:
        return cls(pd.DataFrame())

    @property
    def columns(self) -> list[str]:
        return [str(c) for c in self._frame.columns]

    @property
    def row_count(self) -> int:
        return len(self._frame.index)

    def __len__(self) -> int:
        return self.row_count

    @property
    def frame(self) -> pd.DataFrame:
        """The underlying frame (a copy; the dataset stays immutable)."""
        return self._frame.copy()

    def has_column(self, name: str) -> bool:
        return bool(name) and name in self._frame.columns

    def resolve_column(self, name: str) -> str | None:
        """Header name matching *name*, or ``None``.

        An exact match wins; otherwise the first header equal to *name*
        after trimming both and ignoring case.
        """
        if not name:
            return None
        if name in self._frame.columns:
            return name
        wanted = name.strip().casefold()
        if not wanted:
            return None
        for header in self.columns:
            if header.strip().casefold() == wanted:
                return header
        return None

    def column(self, name: str) -> list[str]:
        """Cells of column *name*.  Raises ``KeyError`` if absent."""
        return self._frame[name].tolist()

    def cell(self, row: int, name: str) -> str:
        return self._frame.at[row, name]

    def select(self, names: list[str]) -> TabularDataset:
        """Project onto *names* in the given order, skipping absent ones."""
        present = [n for n in dict.fromkeys(names) if self.has_column(n)]
        return TabularDataset(self._frame[present])

    def __repr__(self) -> str:
        return f"<TabularDataset columns={len(self.columns)} rows={self.row_count}>"


# ─────────────────────────────────────────────────────────────────────
# Parsing
# ─────────────────────────────────────────────────────────────────────

def deduplicate_header(tokens: list[str]) -> list[str]:
    """Rename repeated header tokens so every name is unique.

    The first occurrence keeps its name; later ones get ``.1``, ``.2``, …
    in left-to-right order.  A generated name that already appears
    among the tokens takes the next counter instead.

    Examples
    --------
    >>> deduplicate_header(["a", "b", "a"])
    ['a', 'b', 'a.1']
    >>> deduplicate_header(["x", "x", "x.1"])
    ['x', 'x.2', 'x.1']
    """
    joiner = TABULAR_CONFIG["duplicate_joiner"]
    taken = set(tokens)
    seen: set[str] = set()
    counters: dict[str, int] = {}
    result = []
    for token in tokens:
        if token not in seen:
            seen.add(token)
            result.append(token)
            continue
        count = counters.get(token, 0)
        while True:
            count += 1
            candidate = f"{token}{joiner}{count}"
            if candidate not in taken and candidate not in seen:
                break
        counters[token] = count
        seen.add(candidate)
        result.append(candidate)
    return result


def load_tabular_text(text: str) -> TabularDataset:
    """Parse tab-delimited text.

    Parameters
    ----------
    text : str
        Full table text.  The first non-blank line is the header.

    Returns
    -------
    TabularDataset
        Zero columns and zero rows for empty input.  Header tokens are
        trimmed and de-duplicated; data cells are kept verbatim.
    """
    body = text.strip("\r\n") if text else ""
    if not body:
        logger.debug("Empty table text; returning an empty dataset.")
        return TabularDataset.empty()

    separator = TABULAR_CONFIG["separator"]
    lines = [line.rstrip("\r") for line in body.split("\n")]
    header = deduplicate_header([token.strip() for token in lines[0].split(separator)])
    width = len(header)

    rows = []
    for line in lines[1:]:
        cells = line.split(separator)[:width]
        if len(cells) < width:
            cells.extend([""] * (width - len(cells)))
        rows.append(cells)

    frame = pd.DataFrame(rows, columns=header, dtype=object)
    if not rows:
        frame = pd.DataFrame({name: pd.Series([], dtype=object) for name in header})
    logger.debug("Parsed table: %d columns, %d rows.", width, len(rows))
    return TabularDataset(frame)


def load_tabular_file(file_data: FileData) -> TabularDataset:
    """Decode uploaded bytes as UTF-8 (BOM tolerated) and parse them."""
    text = file_data.content.decode(TABULAR_CONFIG["encoding"], errors="replace")
    text = text.lstrip("\ufeff")
    dataset = load_tabular_text(text)
    logger.info(
        "Loaded '%s': %d columns, %d rows.",
        file_data.name, len(dataset.columns), dataset.row_count,
    )
    return dataset
