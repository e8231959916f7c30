"""Category encoders: one per top-level section of the option document.

`ENCODERS` is the static registration table. Its order is the emission order
and the serial-assignment order, so every section only references indices of
sections written before it.
"""

from __future__ import annotations

from collections.abc import Hashable
from enum import StrEnum
from typing import Final

from .codec import encode_key
from .context import EncodingContext
from .data import DataProvider, DataType
from .dataset import DatasetGrouping
from .parts import Capability, Part, PartTag
from .serials import UNASSIGNED


class Shape(StrEnum):
    """How a section's parts are written."""

    array = "array"
    object = "object"
    value = "value"


class CategoryEncoder:
    """Filter, deduplicate and write the parts of one category.

    Args:
        label: Top-level key of the section.
        tag: Tag a part must carry to belong to the category.
        shape: `array` writes every distinct part as a list; `object` and `value`
            write only the first part (a single object or a bare value).
    """

    def __init__(self, label: str, tag: PartTag, shape: Shape = Shape.array) -> None:
        self.label = label
        self.tag = tag
        self.shape = shape

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.label}>"

    def supports(self, part: Part) -> bool:
        return self.tag in part.tags

    def dedup_key(self, part: Part, grouping: DatasetGrouping) -> Hashable:
        """Parts with equal keys share one serial and are written once."""

        if part.has(Capability.value_dedup):
            return part.value_key()
        return part.id

    def is_active(self, context: EncodingContext) -> bool:
        return True

    def distinct_parts(self, context: EncodingContext) -> list[Part]:
        """Return the first part of every serial group, in serial order."""

        selected: list[Part] = []
        last = UNASSIGNED
        for part in context.parts:
            if not self.supports(part):
                continue
            serial = context.serial_of(part)
            if serial < 0 or serial == last:
                continue
            last = serial
            selected.append(part)
        return selected

    def encode_part(self, part: Part, context: EncodingContext) -> str:
        return part.encode_json(context)

    def encode(self, context: EncodingContext) -> str | None:
        """Return the `"label":...` member for the section, or None when empty."""

        if not self.is_active(context):
            return None
        parts = self.distinct_parts(context)
        if not parts:
            return None
        if self.shape is Shape.array:
            body = "[" + ",".join(self.encode_part(part, context) for part in parts) + "]"
        else:
            body = self.encode_part(parts[0], context)
        return encode_key(self.label) + ":" + body


class DatasetEncoder(CategoryEncoder):
    """Writes the shared `dataset` tables when the pass uses dataset encoding."""

    def dedup_key(self, part: Part, grouping: DatasetGrouping) -> Hashable:
        if grouping is DatasetGrouping.element_count and part.has(Capability.value_dedup):
            return part.value_key()
        return part.id

    def is_active(self, context: EncodingContext) -> bool:
        return context.dataset_mode and not context.skipping_data

    def encode(self, context: EncodingContext) -> str | None:
        if not self.is_active(context) or context.layout is None or not context.layout.blocks:
            return None
        tables: list[str] = []
        for block in context.layout.blocks:
            columns = ",".join(
                encode_key(context.column_of(provider) or "") + ":" + provider.encode_values()
                for provider in block.columns
                if isinstance(provider, DataProvider)
            )
            tables.append('{"source":{' + columns + "}}")
        body = tables[0] if len(tables) == 1 else "[" + ",".join(tables) + "]"
        return encode_key(self.label) + ":" + body


class AxisEncoder(CategoryEncoder):
    """Writes one axis section; inline category data is attached when unambiguous."""

    def encode_part(self, part: Part, context: EncodingContext) -> str:
        text = part.encode_json(context)
        data = self._category_data(part, context)
        if data is None:
            return text
        body = text[1:-1]
        member = '"data":' + data.encode_values()
        return "{" + (body + "," + member if body else member) + "}"

    def _category_data(self, part: Part, context: EncodingContext) -> DataProvider | None:
        if context.dataset_mode or context.skipping_data:
            return None
        if len(self.distinct_parts(context)) != 1:
            return None
        axis = getattr(part, "axis", None)
        if axis is None or axis.data_type is not DataType.category:
            return None
        providers: dict[int, DataProvider] = {}
        for candidate in context.with_tag(PartTag.data):
            if isinstance(candidate, DataProvider) and candidate.data_type is DataType.category:
                providers.setdefault(context.serial_of(candidate), candidate)
        if len(providers) != 1:
            return None
        return next(iter(providers.values()))


CATEGORY_LABELS: Final[dict[PartTag, str]] = {
    PartTag.colors: "color",
    PartTag.text_style: "textStyle",
    PartTag.title: "title",
    PartTag.legend: "legend",
    PartTag.toolbox: "toolbox",
    PartTag.tooltip: "tooltip",
    PartTag.data: "dataset",
    PartTag.x_axis: "xAxis",
    PartTag.y_axis: "yAxis",
    PartTag.angle_axis: "angleAxis",
    PartTag.radius_axis: "radiusAxis",
    PartTag.grid: "grid",
    PartTag.polar: "polar",
    PartTag.series: "series",
    PartTag.data_zoom: "dataZoom",
}


def label_for(tag: PartTag) -> str:
    return CATEGORY_LABELS[tag]


ENCODERS: Final[tuple[CategoryEncoder, ...]] = (
    CategoryEncoder(label_for(PartTag.colors), PartTag.colors, Shape.value),
    CategoryEncoder(label_for(PartTag.text_style), PartTag.text_style, Shape.object),
    CategoryEncoder(label_for(PartTag.title), PartTag.title),
    CategoryEncoder(label_for(PartTag.legend), PartTag.legend),
    CategoryEncoder(label_for(PartTag.toolbox), PartTag.toolbox),
    CategoryEncoder(label_for(PartTag.tooltip), PartTag.tooltip),
    DatasetEncoder(label_for(PartTag.data), PartTag.data),
    AxisEncoder(label_for(PartTag.x_axis), PartTag.x_axis),
    AxisEncoder(label_for(PartTag.y_axis), PartTag.y_axis),
    AxisEncoder(label_for(PartTag.angle_axis), PartTag.angle_axis),
    AxisEncoder(label_for(PartTag.radius_axis), PartTag.radius_axis),
    CategoryEncoder(label_for(PartTag.grid), PartTag.grid),
    CategoryEncoder(label_for(PartTag.polar), PartTag.polar),
    CategoryEncoder(label_for(PartTag.series), PartTag.series),
    CategoryEncoder(label_for(PartTag.data_zoom), PartTag.data_zoom),
)
