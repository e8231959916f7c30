"""Series (charts) and data zoom components."""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum
from typing import TYPE_CHECKING

from .codec import encode_key
from .coordinates import Axis, CoordinateSystem, PolarCoordinate
from .data import DataProvider, TreeData
from .errors import StructuralValidationError
from .parts import Component, PartTag
from .properties import PropertyDictionary

if TYPE_CHECKING:
    from .context import EncodingContext
    from .registry import PartRegistry


class ChartType(StrEnum):
    """Series types with the data dimensions each one consumes."""

    line = "line"
    bar = "bar"
    scatter = "scatter"
    pie = "pie"
    treemap = "treemap"

    @property
    def dimensions(self) -> tuple[str, ...]:
        """Data dimensions a series of this type consumes, in binding order."""

        return _DIMENSIONS[self]

    @property
    def requires_coordinate_system(self) -> bool:
        return self in (ChartType.line, ChartType.bar, ChartType.scatter)

    @property
    def named_items(self) -> bool:
        """Inline data is written as `{"name","value"}` objects."""

        return self is ChartType.pie


_DIMENSIONS: dict[ChartType, tuple[str, ...]] = {
    ChartType.line: ("x", "y"),
    ChartType.bar: ("x", "y"),
    ChartType.scatter: ("x", "y"),
    ChartType.pie: ("itemName", "value"),
    ChartType.treemap: ("value",),
}


class Chart(Component):
    """One series of the document.

    Data providers are bound in dimension order (for a cartesian line chart:
    x values, then y values). Charts that need a coordinate system are plotted
    on one with `plot_on`; their providers, coordinate system and axes are then
    pulled into each pass automatically.

    Args:
        chart_type: Series type.
        *data: Data providers in dimension order.
        name: Series name (defaults to "Chart <n>").
    """

    tags = frozenset({PartTag.series})

    def __init__(self, chart_type: ChartType = ChartType.line, *data: DataProvider, name: str | None = None) -> None:
        super().__init__(name)
        self.chart_type = chart_type
        self._data: list[DataProvider] = list(data)
        self.coordinate_system: CoordinateSystem | None = None
        self.axes: list[Axis] | None = None
        self.colors: list[str] = []
        self.stack: str | None = None

    @property
    def data(self) -> tuple[DataProvider, ...]:
        return tuple(self._data)

    def set_data(self, *data: DataProvider) -> Chart:
        """Replace the bound data providers (in dimension order)."""

        self._data = list(data)
        return self

    def plot_on(self, coordinate_system: CoordinateSystem | None, *axes: Axis) -> Chart:
        """Plot on `coordinate_system`, optionally on specific axes (added to it when missing)."""

        if coordinate_system is None:
            if self.coordinate_system is not None:
                self.coordinate_system.remove(self)
            return self
        coordinate_system.add(self)
        if axes:
            coordinate_system.add_axis(*axes)
            self.axes = list(axes)
        return self

    def axes_of(self, kind: type[Axis]) -> list[Axis]:
        """Axes of `kind` used by this chart (its own selection, else all of the coordinate system's)."""

        if self.axes:
            return [axis for axis in self.axes if isinstance(axis, kind)]
        if self.coordinate_system is None:
            return []
        return self.coordinate_system.axes_of(kind)

    def display_name(self, context: EncodingContext | None) -> str | None:
        if self.name:
            return self.name
        serial = context.serial_of(self) if context is not None else 0
        return f"Chart {max(serial, 0) + 1}"

    @property
    def label(self) -> str:
        return self.name or f"{type(self).__name__} ({self.chart_type})"

    def dimensions(self) -> tuple[str, ...]:
        """Column roles written in `encode`, taken from the coordinate system when plotted."""

        if self.coordinate_system is not None:
            return self.coordinate_system.dimensions
        return self.chart_type.dimensions

    def add_parts_into(self, registry: PartRegistry) -> None:
        if self.coordinate_system is not None:
            registry.add(self.coordinate_system)
            self.coordinate_system.add_parts_into(registry)
        else:
            registry.add_all(self._data)

    def validate(self, registry: PartRegistry) -> None:
        if not self._data:
            raise StructuralValidationError(f"Chart[{self.label}]: data not set.", part=self)
        required = self.chart_type.dimensions
        if len(self._data) < len(required):
            raise StructuralValidationError(
                f"Chart[{self.label}]: data for {required[len(self._data)]} not set.", part=self
            )
        if self.chart_type.requires_coordinate_system and self.coordinate_system is None:
            raise StructuralValidationError(f"Chart[{self.label}]: coordinate system not set.", part=self)
        if self.coordinate_system is None or not self.axes:
            return
        seen: set[type[Axis]] = set()
        for axis in self.axes:
            if not self.coordinate_system.contains_axis(axis):
                raise StructuralValidationError(
                    f"Chart[{self.label}]: axis {axis.label} doesn't belong to the coordinate system.", part=self
                )
            if type(axis) in seen:
                raise StructuralValidationError(
                    f"Chart[{self.label}]: multiple axes of the same type found ({axis.label}).", part=self
                )
            seen.add(type(axis))

    def build_properties(self, properties: PropertyDictionary, context: EncodingContext | None) -> None:
        super().build_properties(properties, context)
        properties.set("color", self.colors)
        properties.set("type", self.chart_type)
        if context is not None:
            self._build_axis_indices(properties, context)
        if self.coordinate_system is not None:
            properties.set("coordinateSystem", self.coordinate_system.system_name)
            if isinstance(self.coordinate_system, PolarCoordinate) and context is not None:
                properties.set("polarIndex", context.serial_of(self.coordinate_system), lambda serial: serial > 0)
        properties.set("stack", self.stack)
        if context is not None and not context.skipping_data:
            self._build_data(properties, context)

    def _build_axis_indices(self, properties: PropertyDictionary, context: EncodingContext) -> None:
        coordinate_system = self.coordinate_system
        if coordinate_system is None:
            return
        for kind in coordinate_system.axis_kinds:
            serials = [context.serial_of(axis.wrap(coordinate_system)) for axis in self.axes_of(kind)]
            serials = [serial for serial in serials if serial >= 0]
            if serials:
                properties.set(f"{kind.axis_name}Index", min(serials), lambda serial: serial > 0)

    def _build_data(self, properties: PropertyDictionary, context: EncodingContext) -> None:
        if context.dataset_mode:
            index = context.dataset_index_for(self)
            properties.set("datasetIndex", index)
            encode = {
                dimension: context.column_of(provider)
                for dimension, provider in zip(self.dimensions(), self._data)
            }
            properties.set("encode", encode)
            return
        properties.set_json('"data":' + self.inline_data())

    def inline_data(self) -> str:
        """Return the series' own `data` array."""

        if len(self._data) == 1 or isinstance(self._data[0], TreeData):
            return self._data[0].encode_values()
        if self.chart_type.named_items:
            return _encode_items(self._data[0], self._data[1])
        return _encode_rows(self._data)


class DataZoomKind(StrEnum):
    slider = "slider"
    inside = "inside"


class DataZoom(Component):
    """Zoom control for the axes of one coordinate system.

    Args:
        coordinate_system: Coordinate system whose axes are zoomed; it must be
            part of the document through one of its charts.
        *axes: Axes to zoom; every axis of the coordinate system when omitted.
        kind: Slider or inside (mouse wheel / touch) zoom.
    """

    tags = frozenset({PartTag.data_zoom})

    def __init__(
        self,
        coordinate_system: CoordinateSystem,
        *axes: Axis,
        kind: DataZoomKind = DataZoomKind.slider,
    ) -> None:
        super().__init__()
        self.coordinate_system = coordinate_system
        self.kind = kind
        self._axes: list[Axis] = []
        self.start: float | None = None
        self.end: float | None = None
        self.zoom_lock: bool | None = None
        self.add_axis(*axes)

    def add_axis(self, *axes: Axis) -> DataZoom:
        """Restrict zooming to `axes` (added to any already selected)."""

        for axis in axes:
            if axis is not None and axis not in self._axes:
                self._axes.append(axis)
        return self

    @property
    def axes(self) -> tuple[Axis, ...]:
        return tuple(self._axes) or self.coordinate_system.axes

    def validate(self, registry: PartRegistry) -> None:
        if self.coordinate_system not in registry:
            raise StructuralValidationError(f"DataZoom[{self.label}]: coordinate system is not used.", part=self)
        for axis in self._axes:
            if not self.coordinate_system.contains_axis(axis):
                raise StructuralValidationError(
                    f"DataZoom[{self.label}]: axis {axis.label} doesn't belong to the coordinate system.", part=self
                )

    def build_properties(self, properties: PropertyDictionary, context: EncodingContext | None) -> None:
        super().build_properties(properties, context)
        properties.set("type", self.kind)
        if context is not None:
            indices: dict[str, list[int]] = {}
            for axis in self.axes:
                serial = context.serial_of(axis.wrap(self.coordinate_system))
                if serial >= 0:
                    indices.setdefault(f"{axis.axis_name}Index", []).append(serial)
            for key, serials in indices.items():
                properties.set(key, serials)
        properties.set("start", self.start)
        properties.set("end", self.end)
        properties.set("zoomLock", self.zoom_lock)


def _encode_rows(providers: Sequence[DataProvider]) -> str:
    columns = [provider.values() for provider in providers]
    rows: list[str] = []
    for index in range(max(len(column) for column in columns)):
        cells = [
            provider.encode_item(column[index], index) if index < len(column) else "null"
            for provider, column in zip(providers, columns)
        ]
        rows.append("[" + ",".join(cells) + "]")
    return "[" + ",".join(rows) + "]"


def _encode_items(names: DataProvider, values: DataProvider) -> str:
    item_names = names.values()
    item_values = values.values()
    items: list[str] = []
    for index in range(max(len(item_names), len(item_values))):
        members: list[str] = []
        if index < len(item_names):
            members.append(encode_key("name") + ":" + names.encode_item(item_names[index], index))
        value = item_values[index] if index < len(item_values) else None
        members.append(encode_key("value") + ":" + values.encode_item(value, index))
        items.append("{" + ",".join(members) + "}")
    return "[" + ",".join(items) + "]"
