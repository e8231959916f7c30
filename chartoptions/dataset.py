"""Dataset (shared table) planning.

When every active data provider supports it, data is written once into
`dataset` blocks and series reference columns by name. Providers are batched
into blocks either by element count (providers of different lengths cannot
share a table) or by the chart consuming them.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from .parts import PartId

if TYPE_CHECKING:
    from .data import DataProvider
    from .serials import SerialArena

logger = logging.getLogger(__name__)


class DatasetGrouping(StrEnum):
    """How data providers are batched into dataset blocks."""

    element_count = "element_count"
    chart = "chart"


class DataConsumer(Protocol):
    """A series-like part bound to data providers."""

    id: PartId

    @property
    def data(self) -> Sequence[DataProvider]: ...


@dataclass(frozen=True, slots=True)
class DatasetBlock:
    """One `{"source": {...}}` table.

    Args:
        index: Dataset index referenced by series (`datasetIndex`).
        columns: Providers in column order; column names come from the arena.
    """

    index: int
    columns: tuple[DataProvider, ...]


@dataclass(frozen=True, slots=True)
class DatasetLayout:
    """Blocks of one pass plus the block each consuming series reads from."""

    blocks: tuple[DatasetBlock, ...] = ()
    series_blocks: Mapping[PartId, int] = field(default_factory=dict)

    def block_for(self, consumer: DataConsumer) -> int | None:
        return self.series_blocks.get(consumer.id)


def column_name(serial: int) -> str:
    return f"d{serial}"


def plan_dataset(
    providers: Sequence[DataProvider],
    consumers: Sequence[DataConsumer],
    arena: SerialArena,
    *,
    grouping: DatasetGrouping,
) -> DatasetLayout | None:
    """Decide dataset encoding for a pass and lay out its blocks.

    Args:
        providers: Data providers in serial order.
        consumers: Series consuming the providers, in serial order.
        arena: Pass arena; every provider must already hold a serial. Dataset
            indices and column names are written into it.
        grouping: Block partitioning mode.

    Returns:
        The layout, or None when the document must be encoded inline (a provider
        opts out, there is no data, or a series would span several blocks).
    """

    opted_out = [provider for provider in providers if not provider.supports_dataset]
    if opted_out:
        logger.debug("Inline encoding: %d provider(s) do not support dataset encoding", len(opted_out))
        return None

    distinct: dict[int, DataProvider] = {}
    for provider in providers:
        distinct.setdefault(arena.serial_of(provider), provider)
    if not distinct:
        return None

    if grouping is DatasetGrouping.chart:
        layout = _plan_by_consumer(distinct, consumers, arena)
    else:
        layout = _plan_by_length(distinct, consumers)
    if layout is None:
        return None

    _place_all(providers, layout, arena)
    logger.debug(
        "Dataset encoding: %d block(s) with %s column(s)",
        len(layout.blocks),
        [len(block.columns) for block in layout.blocks],
    )
    return layout


def _plan_by_length(
    distinct: Mapping[int, DataProvider],
    consumers: Sequence[DataConsumer],
) -> DatasetLayout | None:
    lengths: dict[int, list[DataProvider]] = {}
    for provider in distinct.values():
        lengths.setdefault(len(provider), []).append(provider)

    block_of_length = {length: index for index, length in enumerate(lengths)}
    series_blocks: dict[PartId, int] = {}
    for consumer in consumers:
        indices = {block_of_length[len(provider)] for provider in consumer.data}
        if len(indices) > 1:
            logger.debug("Inline encoding: series %s binds data of different lengths", consumer.id)
            return None
        if indices:
            series_blocks[consumer.id] = indices.pop()

    blocks = tuple(DatasetBlock(index, tuple(members)) for index, members in enumerate(lengths.values()))
    return DatasetLayout(blocks=blocks, series_blocks=series_blocks)


def _plan_by_consumer(
    distinct: Mapping[int, DataProvider],
    consumers: Sequence[DataConsumer],
    arena: SerialArena,
) -> DatasetLayout:
    blocks: list[DatasetBlock] = []
    series_blocks: dict[PartId, int] = {}
    placed: set[int] = set()
    for consumer in consumers:
        members: dict[int, DataProvider] = {}
        for provider in consumer.data:
            serial = arena.serial_of(provider)
            members.setdefault(serial, distinct.get(serial, provider))
        if not members:
            continue
        index = len(blocks)
        blocks.append(DatasetBlock(index, tuple(members.values())))
        series_blocks[consumer.id] = index
        placed.update(members)

    leftovers = tuple(provider for serial, provider in distinct.items() if serial not in placed)
    if leftovers:
        blocks.append(DatasetBlock(len(blocks), leftovers))
    return DatasetLayout(blocks=tuple(blocks), series_blocks=series_blocks)


def _place_all(providers: Sequence[DataProvider], layout: DatasetLayout, arena: SerialArena) -> None:
    """Record each provider's first block and its column name in the arena."""

    block_of_serial: dict[int, int] = {}
    for block in layout.blocks:
        for provider in block.columns:
            block_of_serial.setdefault(arena.serial_of(provider), block.index)
    for provider in providers:
        serial = arena.serial_of(provider)
        arena.place(provider, dataset_index=block_of_serial.get(serial), column=column_name(serial))
