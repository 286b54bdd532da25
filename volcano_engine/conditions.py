"""
volcano_engine/conditions.py — Sample column → condition mapping.

Each sample column of the raw table belongs to one experimental
condition.  The condition is read from the persisted sample map when the
sample is already known, and otherwise derived from the column name:
``"Treated.Rep.2"`` → condition ``"Treated.Rep"``, replicate ``"2"``.

Newly discovered conditions receive a colour from a condition-scoped
:class:`~volcano_engine.colors.ColorCycleAllocator`; existing colours are
never changed.

Functions
---------
parse_sample_name(name)
    → ``(condition, replicate)``.

map_samples(sample_columns, settings)
    → :class:`SampleMapping` with the merged sample/condition state.

missing_samples(dataset, raw_form)
    → Configured sample columns absent from the raw table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from volcano_engine.colors import ColorCycleAllocator, colors_in_use
from volcano_engine.models import RawForm, SampleInfo, Settings
from volcano_engine.tabular import TabularDataset

logger = logging.getLogger(__name__)

_SEPARATOR = "."


@dataclass(frozen=True)
class SampleMapping:
    """Result of one sample-mapping pass.

    Attributes
    ----------
    conditions : tuple[str, ...]
        Non-empty conditions in discovery order.
    sample_map, sample_order, sample_visible, condition_order
        Merged values, ready to be written into ``Settings``.
    color_map : dict[str, str]
        The previous colour map extended with ``new_colors``.
    new_colors : dict[str, str]
        Colours allocated in this pass, by condition.
    """

    conditions: tuple[str, ...] = ()
    sample_map: dict[str, SampleInfo] = field(default_factory=dict)
    sample_order: dict[str, tuple[str, ...]] = field(default_factory=dict)
    sample_visible: dict[str, bool] = field(default_factory=dict)
    condition_order: tuple[str, ...] = ()
    color_map: dict[str, str] = field(default_factory=dict)
    new_colors: dict[str, str] = field(default_factory=dict)


def parse_sample_name(name: str) -> tuple[str, str]:
    """Split *name* on its last ``.`` into ``(condition, replicate)``.

    A name without a ``.`` has no condition: ``("", name)``.
    """
    condition, sep, replicate = name.rpartition(_SEPARATOR)
    if not sep:
        return "", name
    return condition, replicate


def condition_names(settings: Settings, extra: tuple[str, ...] = ()) -> set[str]:
    """All names in *settings* that denote a condition, plus *extra*."""
    names = set(extra)
    names.update(settings.condition_order)
    names.update(info.condition for info in settings.sample_map.values())
    names.discard("")
    return names


def map_samples(sample_columns: list[str] | tuple[str, ...], settings: Settings) -> SampleMapping:
    """Derive conditions for *sample_columns* and merge them into *settings*' state.

    Parameters
    ----------
    sample_columns : sequence of str
        Sample column names, in the order the user configured them.
    settings : Settings
        Current settings.  Not modified.

    Returns
    -------
    SampleMapping
    """
    conditions: list[str] = []
    new_sample_map: dict[str, SampleInfo] = {}
    sample_order: dict[str, list[str]] = {
        c: list(samples) for c, samples in settings.sample_order.items()
    }
    sample_visible = dict(settings.sample_visible)

    for sample in sample_columns:
        condition, replicate = parse_sample_name(sample)
        stored = settings.sample_map.get(sample)
        if stored is not None:
            condition = stored.condition
        if condition and condition not in conditions:
            conditions.append(condition)
        order = sample_order.setdefault(condition, [])
        if sample not in order:
            order.append(sample)
        sample_visible.setdefault(sample, True)
        new_sample_map[sample] = SampleInfo(
            condition=condition, replicate=replicate, name=sample,
        )

    # Old entries survive only for samples still listed; they win over new ones.
    listed = set(sample_columns)
    sample_map = {s: info for s, info in settings.sample_map.items() if s in listed}
    for sample, info in new_sample_map.items():
        sample_map.setdefault(sample, info)

    all_conditions = condition_names(settings, tuple(conditions))
    allocator = ColorCycleAllocator(
        settings.default_palette,
        in_use=colors_in_use(settings.color_map, all_conditions),
    )
    new_colors = allocator.assign(conditions, settings.color_map)
    color_map = dict(settings.color_map)
    color_map.update(new_colors)

    present = set(conditions)
    condition_order = [c for c in settings.condition_order if c in present]
    condition_order.extend(c for c in conditions if c not in condition_order)

    kept_conditions = set(condition_order)
    merged_order = {
        c: tuple(samples) for c, samples in sample_order.items() if c in kept_conditions
    }
    merged_visible = {s: v for s, v in sample_visible.items() if s in sample_map}

    unparsed = [s for s, info in sample_map.items() if not info.condition]
    if unparsed:
        logger.warning("Samples without a condition separator: %s", unparsed)
    logger.info(
        "Mapped %d samples to %d conditions (%d newly coloured).",
        len(sample_map), len(condition_order), len(new_colors),
    )

    return SampleMapping(
        conditions=tuple(conditions),
        sample_map=sample_map,
        sample_order=merged_order,
        sample_visible=merged_visible,
        condition_order=tuple(condition_order),
        color_map=color_map,
        new_colors=new_colors,
    )


def missing_samples(dataset: TabularDataset, raw_form: RawForm) -> list[str]:
    return [s for s in raw_form.sample_columns if not dataset.has_column(s)]
