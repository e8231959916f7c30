"""Per-pass serial bookkeeping and cross-category serial assignment."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Protocol

from .errors import StructuralValidationError
from .parts import Part, PartId

if TYPE_CHECKING:
    from .dataset import DatasetGrouping

UNASSIGNED = -2


@dataclass(slots=True)
class SerialState:
    """Bookkeeping for one part during one pass.

    Args:
        serial: Position within the part's category, or UNASSIGNED.
        dataset_index: Dataset block the part's values live in (dataset mode only).
        column: Column name inside that block (dataset mode only).
        excluded: Whether the part kept its committed state for a skip-data pass.
    """

    serial: int = UNASSIGNED
    dataset_index: int | None = None
    column: str | None = None
    excluded: bool = False


class SerialArena:
    """Map of PartId to SerialState for one pass.

    The arena is seeded with the committed states of the last successful pass so
    that skip-data passes can keep referencing data the consumer already holds.
    """

    def __init__(self, previous: Mapping[PartId, SerialState] | None = None) -> None:
        self._previous = dict(previous or {})
        self._states: dict[PartId, SerialState] = {}

    def reset(self, part: Part) -> None:
        self._states[part.id] = SerialState()

    def exclude(self, part: Part) -> None:
        """Carry the part's committed state into this pass.

        Raises:
            StructuralValidationError: When the part was never transmitted.
        """

        prior = self._previous.get(part.id)
        if prior is None or prior.serial < 0:
            raise StructuralValidationError(f"Skipping data but new data found: {part.label}", part=part)
        self._states[part.id] = replace(prior, excluded=True)

    def state_of(self, part: Part) -> SerialState | None:
        return self._states.get(part.id)

    def serial_of(self, part: Part) -> int:
        state = self._states.get(part.id)
        return UNASSIGNED if state is None else state.serial

    def assign(self, part: Part, serial: int) -> None:
        self._states.setdefault(part.id, SerialState()).serial = serial

    def place(self, part: Part, *, dataset_index: int | None, column: str | None) -> None:
        state = self._states.setdefault(part.id, SerialState())
        state.dataset_index = dataset_index
        state.column = column

    def snapshot(self) -> dict[PartId, SerialState]:
        """Return copies of every state that holds a real serial."""

        return {part_id: replace(state, excluded=False) for part_id, state in self._states.items() if state.serial >= 0}


class SerialCategory(Protocol):
    """What serial assignment needs from a category encoder."""

    def supports(self, part: Part) -> bool: ...

    def dedup_key(self, part: Part, grouping: DatasetGrouping) -> Hashable: ...


def assign_serials(
    parts: Sequence[Part],
    arena: SerialArena,
    categories: Iterable[SerialCategory],
    *,
    grouping: DatasetGrouping,
) -> list[Part]:
    """Assign category serials and return the parts ordered by serial.

    For each category in priority order, the still-unassigned parts it supports
    are partitioned by the category's dedup key; every group gets the next
    integer (first-seen order), shared by all of its members.

    Args:
        parts: Validated parts of the pass in registry order.
        arena: Arena already reset for this pass.
        categories: Category encoders in emission priority order.
        grouping: Active dataset grouping mode.

    Returns:
        A new list of the parts, stable-sorted by serial ascending.
    """

    for category in categories:
        groups: dict[Hashable, int] = {}
        for part in parts:
            if arena.serial_of(part) != UNASSIGNED or not category.supports(part):
                continue
            serial = groups.setdefault(category.dedup_key(part, grouping), len(groups))
            arena.assign(part, serial)
    return sorted(parts, key=arena.serial_of)
