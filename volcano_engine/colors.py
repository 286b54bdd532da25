"""
volcano_engine/colors.py — Deterministic colour allocation from a palette.

The allocator walks a palette with a cursor and skips colours that are
already bound to other names.  Once it has wrapped around the palette
and still finds only used colours, it stops skipping and hands colours
out in order, so allocation always terminates and reuses colours once
the palette is exhausted.

Types
-----
AllocatorState
    SCANNING → WRAPPED_ONCE → FORCING.

ColorCycleAllocator
    Stateful allocator; one instance per allocation scope.

Functions
---------
colors_in_use(color_map, exclude_names)
    → Colours bound to names outside *exclude_names*.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable

from volcano_engine.config import VOLCANO_CONFIG

logger = logging.getLogger(__name__)


class AllocatorState(Enum):
    SCANNING = "scanning"
    WRAPPED_ONCE = "wrapped_once"
    FORCING = "forcing"


def colors_in_use(color_map: dict[str, str], exclude_names: Iterable[str] = ()) -> set[str]:
    """Return the colours of every *color_map* entry not in *exclude_names*."""
    excluded = set(exclude_names)
    return {color for name, color in color_map.items() if name not in excluded}


class ColorCycleAllocator:
    """Cycle through *palette*, avoiding colours in *in_use* while possible.

    Parameters
    ----------
    palette : sequence of str
        Ordered candidate colours.  An empty palette is allowed; every
        request then returns the fallback colour.
    in_use : iterable of str
        Colours already bound to other names (the set U).
    cursor : int, optional
        Starting position.  Defaults to the number of distinct palette
        colours found in *in_use* when that is below the palette size,
        otherwise 0.

    Notes
    -----
    State persists across :meth:`next_color` calls on the same instance,
    so a batch of names allocated together sees one continuous walk.
    Each call takes at most ``2 * len(palette)`` steps.
    """

    def __init__(
        self,
        palette: Iterable[str],
        in_use: Iterable[str] = (),
        cursor: int | None = None,
    ) -> None:
        self.palette: list[str] = list(palette)
        self.in_use: set[str] = set(in_use)
        self.state: AllocatorState = AllocatorState.SCANNING
        if cursor is None:
            used = len(self.in_use.intersection(self.palette))
            cursor = used if used < len(self.palette) else 0
        self.cursor: int = cursor

    def _advance(self) -> None:
        self.cursor += 1
        if self.cursor >= len(self.palette):
            self.cursor = 0

    def next_color(self) -> str:
        """Return the colour for the next name."""
        size = len(self.palette)
        if size == 0:
            return VOLCANO_CONFIG["fallback_color"]

        for _ in range(2 * size + 1):
            if self.state is AllocatorState.FORCING:
                color = self.palette[self.cursor]
                break
            if self.cursor >= size:
                self.cursor = 0
                color = self.palette[0]
                self.state = AllocatorState.WRAPPED_ONCE
                break
            if self.palette[self.cursor] in self.in_use:
                self.cursor += 1
                if self.state is AllocatorState.WRAPPED_ONCE:
                    self.cursor %= size
                    color = self.palette[self.cursor]
                    self.cursor = 0
                    self.state = AllocatorState.FORCING
                    break
                continue
            color = self.palette[self.cursor]
            break
        else:
            # unreachable: the walk above wraps within 2 * size steps
            raise RuntimeError("Colour allocation did not terminate.")

        self._advance()
        return color

    def assign(self, names: Iterable[str], color_map: dict[str, str]) -> dict[str, str]:
        """Colour every name in *names* that *color_map* does not bind yet.

        *color_map* itself is not modified.  Returns the new bindings in
        the order the names were given; repeated names are coloured once.
        """
        new_colors: dict[str, str] = {}
        for name in names:
            if name in color_map or name in new_colors:
                continue
            new_colors[name] = self.next_color()
        if new_colors:
            logger.debug("Allocated colours: %s", new_colors)
        return new_colors

    def __repr__(self) -> str:
        return (
            f"<ColorCycleAllocator palette={len(self.palette)} "
            f"cursor={self.cursor} state={self.state.value}>"
        )
