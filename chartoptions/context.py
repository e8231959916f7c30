"""Per-pass encoding context handed to every part while it encodes."""

from __future__ import annotations

from dataclasses import dataclass, field

from .dataset import DataConsumer, DatasetGrouping, DatasetLayout
from .parts import Part, PartId, PartTag
from .serials import SerialArena


@dataclass(slots=True)
class EncodingContext:
    """State of one assembly pass.

    Args:
        parts: Parts of the pass, ordered by serial.
        arena: Serial and dataset bookkeeping for the pass.
        skipping_data: Whether bulk data is being left out.
        grouping: Dataset grouping mode.
        layout: Dataset layout, or None when data is encoded inline.
    """

    parts: list[Part]
    arena: SerialArena
    skipping_data: bool = False
    grouping: DatasetGrouping = DatasetGrouping.element_count
    layout: DatasetLayout | None = None
    _ids: frozenset[PartId] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._ids = frozenset(part.id for part in self.parts)

    @property
    def dataset_mode(self) -> bool:
        return self.layout is not None

    def serial_of(self, part: Part) -> int:
        """Serial of `part` in this pass (negative when it has none)."""

        return self.arena.serial_of(part)

    def contains(self, part: Part | None) -> bool:
        """Return True when `part` takes part in this pass."""

        return part is not None and part.id in self._ids

    def with_tag(self, tag: PartTag) -> list[Part]:
        """Return the parts of this pass emitted under `tag`, in serial order."""

        return [part for part in self.parts if tag in part.tags]

    def column_of(self, part: Part) -> str | None:
        """Dataset column name of a data provider, or None outside dataset mode."""

        state = self.arena.state_of(part)
        return None if state is None else state.column

    def dataset_index_for(self, consumer: DataConsumer) -> int | None:
        """Dataset block read by `consumer`, or None when data is inline."""

        if self.layout is None:
            return None
        return self.layout.block_for(consumer)
