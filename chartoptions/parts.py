"""Part identity, category tags and capabilities.

A Part is one serializable unit of the option document (an axis, a series, the
tooltip, a data column ...). Parts never store per-pass bookkeeping: serials and
dataset indices live in the `SerialArena` owned by the pass. Category membership
and pipeline behaviour are declared with closed tag and capability sets rather
than discovered from the class hierarchy.
"""

from __future__ import annotations

import itertools
from collections.abc import Hashable
from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar

from .properties import PropertyDictionary, PropertyObject

if TYPE_CHECKING:
    from .context import EncodingContext
    from .registry import PartRegistry

PartId = int

_PART_IDS = itertools.count(1)


def new_part_id() -> PartId:
    """Return a fresh process-wide part id (never reused)."""

    return next(_PART_IDS)


class PartTag(StrEnum):
    """Output categories a part can belong to."""

    colors = "colors"
    text_style = "text_style"
    title = "title"
    legend = "legend"
    toolbox = "toolbox"
    tooltip = "tooltip"
    data = "data"
    x_axis = "x_axis"
    y_axis = "y_axis"
    angle_axis = "angle_axis"
    radius_axis = "radius_axis"
    grid = "grid"
    polar = "polar"
    series = "series"
    data_zoom = "data_zoom"


class Capability(StrEnum):
    """Pipeline behaviours a part opts into."""

    single_instance = "single_instance"
    skip_eligible = "skip_eligible"
    value_dedup = "value_dedup"
    carries_data = "carries_data"


class Part(PropertyObject):
    """Serializable configuration unit with a stable identity.

    Class attributes:
        tags: Categories the part is emitted under.
        capabilities: Pipeline behaviours (see `Capability`).
        lineage: Exclusivity group for single-instance parts; defaults to the
            class name.
        emit_id: Whether the encoded object carries an `"id"` member.
    """

    tags: ClassVar[frozenset[PartTag]] = frozenset()
    capabilities: ClassVar[frozenset[Capability]] = frozenset()
    lineage: ClassVar[str | None] = None
    emit_id: ClassVar[bool] = True

    def __init__(self, name: str | None = None) -> None:
        super().__init__()
        self.id: PartId = new_part_id()
        self.name = name

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id} name={self.name!r}>"

    @classmethod
    def lineage_key(cls) -> str:
        return cls.lineage or cls.__name__

    def has(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def value_key(self) -> Hashable:
        """Return the equality key used by value-deduplicating categories.

        Defaults to identity; parts that can be shared by value override it.
        """

        return self.id

    @property
    def label(self) -> str:
        """Name used in error messages."""

        return self.name or type(self).__name__

    def display_name(self, context: EncodingContext | None) -> str | None:
        return self.name

    def validate(self, registry: PartRegistry) -> None:
        """Raise StructuralValidationError when the part cannot be encoded."""

    def build_properties(self, properties: PropertyDictionary, context: EncodingContext | None) -> None:
        if self.emit_id:
            properties.set("id", self.id)
        properties.set("name", self.display_name(context))

    def encode_json(self, context: EncodingContext | None = None) -> str:
        """Return the full `{...}` object emitted for this part."""

        return self.to_json(context)


class Component(Part):
    """A top-level part that can contribute further parts to a pass."""

    def add_parts_into(self, registry: PartRegistry) -> None:
        """Add the parts this component depends on (not the component itself)."""

    def skipping_data(self, skipping: bool) -> None:
        """Hook called before each pass with the effective skip-data flag."""
