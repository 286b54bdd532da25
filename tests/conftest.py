"""Shared fixtures for the volcano_engine test-suite."""

from __future__ import annotations

import pytest

from volcano_engine.config import PALETTES
from volcano_engine.models import DifferentialForm, RawForm, Settings


class InMemorySettingsStore:
    """Settings store keeping one value in memory and counting saves."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.saves = 0

    def load(self) -> Settings:
        return self.settings

    def save(self, settings: Settings) -> None:
        self.settings = settings
        self.saves += 1


@pytest.fixture
def pastel() -> list[str]:
    return list(PALETTES["pastel"])


@pytest.fixture
def raw_text() -> str:
    return "id\tA.1\tA.2\tB.1\nP1\t10\t12\t5\n"


@pytest.fixture
def raw_form() -> RawForm:
    return RawForm(primary_id_column="id", sample_columns=("A.1", "A.2", "B.1"))


@pytest.fixture
def differential_text() -> str:
    return (
        "id\tgene\tlogFC\tpval\tcmp\n"
        "P1\tG1\t4\t0.001\tX\n"
        "P2\t\t0.5\t0.5\tX\n"
        "P3\tG3\t-8\t0.01\tY\n"
    )


@pytest.fixture
def differential_form() -> DifferentialForm:
    return DifferentialForm(
        primary_id_column="id",
        gene_name_column="gene",
        fold_change_column="logFC",
        transform_fold_change=True,
        significance_column="pval",
        transform_significance=True,
        comparison_column="cmp",
        comparison_select=("X",),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def store(settings) -> InMemorySettingsStore:
    return InMemorySettingsStore(settings)
