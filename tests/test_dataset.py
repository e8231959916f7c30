"""Tests for dataset block planning."""

from __future__ import annotations

import pytest

from chartoptions import CategoryData, Chart, ChartType, Data, DatasetGrouping
from chartoptions.data import DataProvider
from chartoptions.dataset import DatasetLayout, column_name, plan_dataset
from chartoptions.encoders import ENCODERS
from chartoptions.serials import SerialArena, assign_serials

pytestmark = pytest.mark.unit


def _plan(
    providers: list[DataProvider],
    charts: list[Chart],
    grouping: DatasetGrouping = DatasetGrouping.element_count,
) -> tuple[DatasetLayout | None, SerialArena]:
    arena = SerialArena()
    for provider in providers:
        arena.reset(provider)
    ordered = assign_serials(providers, arena, ENCODERS, grouping=grouping)
    return plan_dataset(ordered, charts, arena, grouping=grouping), arena


def test_column_name() -> None:
    assert column_name(4) == "d4"


def test_blocks_by_element_count() -> None:
    x = CategoryData(["a", "b", "c", "d"])
    y = Data([1, 2, 3, 4])
    z = Data([5, 6, 7])
    first = Chart(ChartType.line, x, y)
    second = Chart(ChartType.bar, z, z)

    layout, arena = _plan([x, y, z], [first, second])

    assert layout is not None
    assert [block.columns for block in layout.blocks] == [(x, y), (z,)]
    assert layout.block_for(first) == 0
    assert layout.block_for(second) == 1
    assert arena.state_of(z).dataset_index == 1
    assert arena.state_of(z).column == "d2"


def test_equal_providers_share_one_column() -> None:
    x = CategoryData(["a", "b"])
    same = CategoryData(["a", "b"])
    y = Data([1, 2])

    layout, arena = _plan([x, same, y], [Chart(ChartType.line, x, y), Chart(ChartType.line, same, y)])

    assert layout is not None
    assert [block.columns for block in layout.blocks] == [(x, y)]
    assert arena.state_of(same).column == arena.state_of(x).column == "d0"


def test_series_spanning_several_blocks_falls_back_to_inline() -> None:
    x = Data([1, 2])
    y = Data([1, 2, 3])

    layout, _ = _plan([x, y], [Chart(ChartType.scatter, x, y)])

    assert layout is None


def test_custom_value_encoder_falls_back_to_inline() -> None:
    x = CategoryData(["a"])
    y = Data([1], value_encoder=lambda value, index: {"value": value})

    layout, _ = _plan([x, y], [Chart(ChartType.line, x, y)])

    assert layout is None


def test_no_data_means_no_dataset() -> None:
    layout, _ = _plan([], [])

    assert layout is None


def test_blocks_by_chart_repeat_shared_columns_and_collect_leftovers() -> None:
    x = CategoryData(["a", "b"])
    y = Data([1, 2])
    z = Data([3, 4, 5])
    spare = Data([9])
    first = Chart(ChartType.line, x, y)
    second = Chart(ChartType.line, x, z)

    layout, arena = _plan([x, y, z, spare], [first, second], DatasetGrouping.chart)

    assert layout is not None
    assert [block.columns for block in layout.blocks] == [(x, y), (x, z), (spare,)]
    assert layout.block_for(second) == 1
    assert arena.state_of(x).dataset_index == 0
    assert arena.state_of(spare).dataset_index == 2
