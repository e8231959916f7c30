"""Per-pass working set of parts."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING

from .parts import Capability, Component, Part, PartTag

if TYPE_CHECKING:
    from .data import DataProvider

logger = logging.getLogger(__name__)


class PartRegistry:
    """Ordered collection of the parts taking part in one assembly pass.

    Components contribute their parts through `add_parts_into`, recursively
    (a chart pulls in its coordinate system, which pulls in its axes). The
    registry enforces the membership rules:

    - `None` and parts already present are ignored;
    - skip-eligible parts are dropped while skipping data;
    - a single-instance part displaces the active part of the same lineage in
      place, keeping its position.
    """

    def __init__(self, *, skipping_data: bool = False) -> None:
        self.skipping_data = skipping_data
        self._parts: list[Part] = []
        self._ids: set[int] = set()

    @classmethod
    def collect(
        cls,
        components: Sequence[Component],
        root_parts: Iterable[Part | None] = (),
        *,
        skipping_data: bool = False,
    ) -> PartRegistry:
        """Build the working set for one pass.

        Args:
            components: Top-level components in user order.
            root_parts: Document-level parts (colors, title, legend ...) added last.
            skipping_data: Whether the pass is a skip-data pass.

        Returns:
            A populated PartRegistry.
        """

        registry = cls(skipping_data=skipping_data)
        for component in components:
            component.add_parts_into(registry)
        registry.add_all(components)
        registry.add_all(root_parts)
        return registry

    def add(self, part: Part | None) -> PartRegistry:
        """Add one part, applying the membership rules.

        Args:
            part: Part to add; None is ignored.

        Returns:
            This registry, for chaining.
        """

        if part is None or part.id in self._ids:
            return self
        if self.skipping_data and part.has(Capability.skip_eligible):
            logger.debug("Dropping %r while skipping data", part)
            return self
        if part.has(Capability.single_instance):
            lineage = part.lineage_key()
            for index, existing in enumerate(self._parts):
                if existing.has(Capability.single_instance) and existing.lineage_key() == lineage:
                    logger.debug("Replacing single-instance %r with %r", existing, part)
                    self._ids.discard(existing.id)
                    self._ids.add(part.id)
                    self._parts[index] = part
                    return self
        self._ids.add(part.id)
        self._parts.append(part)
        return self

    def add_all(self, parts: Iterable[Part | None]) -> PartRegistry:
        for part in parts:
            self.add(part)
        return self

    def __iter__(self) -> Iterator[Part]:
        return iter(self._parts)

    def __len__(self) -> int:
        return len(self._parts)

    def __contains__(self, part: object) -> bool:
        return isinstance(part, Part) and part.id in self._ids

    @property
    def parts(self) -> tuple[Part, ...]:
        """Parts in registration order."""

        return tuple(self._parts)

    def with_tag(self, tag: PartTag) -> list[Part]:
        """Return the parts emitted under `tag`, in registration order."""

        return [part for part in self._parts if tag in part.tags]

    def data_providers(self) -> list[DataProvider]:
        """Return the data-carrying parts in registry order."""

        return [part for part in self._parts if Capability.carries_data in part.capabilities]  # type: ignore[misc]
