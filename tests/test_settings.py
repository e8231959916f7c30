"""Tests for environment-driven assembly settings."""

from __future__ import annotations

import pytest

from chartoptions import AssemblySettings, DatasetGrouping
from chartoptions.components import PALETTE

pytestmark = pytest.mark.unit

_VARIABLES = (
    "CHARTOPTIONS_DATASET_GROUPING",
    "CHARTOPTIONS_INDENT",
    "CHARTOPTIONS_DEFAULT_COLORS",
    "CHARTOPTIONS_HOIST_FUNCTIONS",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _VARIABLES:
        monkeypatch.delenv(name, raising=False)


def test_defaults_when_nothing_is_set() -> None:
    assert AssemblySettings.from_env() == AssemblySettings()
    assert AssemblySettings().default_colors == PALETTE


def test_reads_every_variable(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHARTOPTIONS_DATASET_GROUPING", " Chart ")
    monkeypatch.setenv("CHARTOPTIONS_INDENT", "2")
    monkeypatch.setenv("CHARTOPTIONS_DEFAULT_COLORS", "#111, #222,,")
    monkeypatch.setenv("CHARTOPTIONS_HOIST_FUNCTIONS", "no")

    settings = AssemblySettings.from_env()

    assert settings.dataset_grouping is DatasetGrouping.chart
    assert settings.indent == 2
    assert settings.default_colors == ("#111", "#222")
    assert settings.hoist_functions is False


def test_zero_indent_means_compact_output(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHARTOPTIONS_INDENT", "0")

    assert AssemblySettings.from_env().indent is None


def test_unknown_grouping_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHARTOPTIONS_DATASET_GROUPING", "rows")

    with pytest.raises(ValueError):
        AssemblySettings.from_env()
