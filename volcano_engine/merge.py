"""
volcano_engine/merge.py — Fold a pass's results back into the settings.

Only the sample, condition and colour fields are written; every other
field (title, font, cutoffs, unknown persisted keys) is carried over
untouched.  The input settings are never modified: a new value is
returned and the caller replaces its stored copy with it.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from volcano_engine.conditions import SampleMapping
from volcano_engine.models import Settings

logger = logging.getLogger(__name__)


def merge_settings(
    settings: Settings,
    mapping: SampleMapping | None = None,
    color_map: dict[str, str] | None = None,
) -> Settings:
    """Return *settings* with the sample mapping and new colours merged in.

    Parameters
    ----------
    settings : Settings
        Settings as they were before the pass.
    mapping : SampleMapping, optional
        Result of :func:`~volcano_engine.conditions.map_samples`.  When
        omitted, the sample fields are left as they are.
    color_map : dict[str, str], optional
        Colour map produced by the volcano pass.

    Returns
    -------
    Settings
        Existing colour entries always win over incoming ones.
    """
    merged_colors = dict(settings.color_map)
    added = 0
    for source in (mapping.color_map if mapping else None, color_map):
        if not source:
            continue
        for name, color in source.items():
            if name not in merged_colors:
                merged_colors[name] = color
                added += 1

    changes: dict = {"color_map": merged_colors}
    if mapping is not None:
        changes.update(
            sample_map=dict(mapping.sample_map),
            sample_order=dict(mapping.sample_order),
            sample_visible=dict(mapping.sample_visible),
            condition_order=tuple(mapping.condition_order),
        )

    logger.debug("Merged settings: %d new colour entries.", added)
    return replace(settings, **changes)
