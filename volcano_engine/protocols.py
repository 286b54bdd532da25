"""
volcano_engine/protocols.py -- Abstract protocols and shared types for the engine.

Defines callback protocols for the collaborators the engine talks to but
never implements (persistent settings store, gene-name lookup) and the
lightweight file container used by the tabular loader.

Types
-----
ProgressCallback
    Protocol — ``(current, total, message_key) -> None``.

SettingsStore
    Protocol — ``load() -> Settings`` / ``save(settings) -> None``.

GeneNameLookup
    Protocol — ``(protein_id) -> str | None``.

FileData
    NamedTuple — ``(content: bytes, name: str)``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple, Protocol, runtime_checkable

if TYPE_CHECKING:
    from volcano_engine.models import Settings


@runtime_checkable
class ProgressCallback(Protocol):
    """Receives ``(step_index, n_steps, step_key)`` as an import advances.

    ``step_index`` counts from 0 and ``step_key`` is a stable string such
    as ``"progress.load_raw"``; turning it into display text is up to
    whoever registered the callback.
    """

    def __call__(self, current: int, total: int, message_key: str) -> None: ...


@runtime_checkable
class SettingsStore(Protocol):
    """Persistent store holding the long-lived settings record."""

    def load(self) -> Settings: ...

    def save(self, settings: Settings) -> None: ...


@runtime_checkable
class GeneNameLookup(Protocol):
    """Resolve a primary protein id to a gene name, or ``None`` if unknown."""

    def __call__(self, protein_id: str) -> str | None: ...


class FileData(NamedTuple):
    """An uploaded table: its bytes and the name to report it under."""

    content: bytes
    name: str
