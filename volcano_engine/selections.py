"""
volcano_engine/selections.py — Helpers over user selection membership.

A selection membership maps each protein id to the named selections it
belongs to: ``{"P12345": {"Kinases": True, "Hits (A vs B)": False}}``.
"""

from __future__ import annotations

import re
from typing import Iterable

from volcano_engine.models import SelectionMembership

# "Hits (A vs B)" → "A vs B": the last parenthesised group of a name.
_COMPARISON_SUFFIX = re.compile(r"\(([^)]*)\)[^(]*$")


def selection_names(membership: SelectionMembership) -> list[str]:
    """Names with at least one ``True`` membership, in first-seen order."""
    names: dict[str, None] = {}
    for selections in membership.values():
        for name, selected in selections.items():
            if selected:
                names.setdefault(name, None)
    return list(names)


def membership_from_selections(selections: dict[str, Iterable[str]]) -> SelectionMembership:
    """Invert ``{selection_name: [protein_id, ...]}`` into a membership map."""
    membership: SelectionMembership = {}
    for name, protein_ids in selections.items():
        for protein_id in protein_ids:
            membership.setdefault(protein_id, {})[name] = True
    return membership


def comparison_suffix(name: str) -> str | None:
    match = _COMPARISON_SUFFIX.search(name)
    return match.group(1) if match else None


def active_selections(
    membership: SelectionMembership,
    protein_id: str,
    color_map: dict[str, str],
    comparison: str,
    match_comparison_suffix: bool = False,
) -> list[str]:
    """Selections that apply to one row.

    Only ``True`` memberships whose name has a colour in *color_map* are
    returned.  With *match_comparison_suffix*, a name ending in
    ``(X)`` applies only to rows whose comparison is ``X``.
    """
    active = []
    for name, selected in membership.get(protein_id, {}).items():
        if not selected or name not in color_map:
            continue
        if match_comparison_suffix:
            suffix = comparison_suffix(name)
            if suffix is not None and suffix != comparison:
                continue
        active.append(name)
    return active
