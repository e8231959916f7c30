"""Axes and coordinate systems.

An `Axis` can be shared by several coordinate systems; what is emitted is one
`AxisWrapper` per (axis, coordinate system) pair, which carries the index of
its coordinate system. Wrappers are cached so a pair always maps to the same
part.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from .components import VisiblePart
from .data import DataProvider, DataType
from .encoders import label_for
from .errors import StructuralValidationError
from .parts import Capability, Part, PartId, PartTag, new_part_id
from .properties import PropertyDictionary, PropertyObject
from .styles import Border

if TYPE_CHECKING:
    from collections.abc import Hashable

    from .context import EncodingContext
    from .registry import PartRegistry
    from .series import Chart


class Axis(PropertyObject):
    """Base axis. The data type is declared or inferred from the first value seen.

    Args:
        data_type: Declared data type; inferred from `min`/`max` or from the
            first chart plotted on the axis when omitted.
        name: Axis title.
    """

    tag: ClassVar[PartTag]
    axis_name: ClassVar[str]

    def __init__(self, data_type: DataType | None = None, *, name: str | None = None) -> None:
        super().__init__()
        self.id: PartId = new_part_id()
        self.data_type = data_type
        self.name = name
        self.name_location: str | None = None
        self.name_gap: int | None = None
        self.inverted = False
        self.show_zero = True
        self.divisions = 0
        self._min: Any = None
        self._max: Any = None
        self._wrappers: dict[PartId, AxisWrapper] = {}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id} name={self.name!r}>"

    @property
    def label(self) -> str:
        return self.name or type(self).__name__

    @property
    def min(self) -> Any:
        return self._min

    @min.setter
    def min(self, value: Any) -> None:
        self._min = self._value(value)

    @property
    def max(self) -> Any:
        return self._max

    @max.setter
    def max(self, value: Any) -> None:
        self._max = self._value(value)

    def _value(self, value: Any) -> Any:
        if value is None:
            return None
        if self.data_type is None:
            self.data_type = DataType.type_for(value)
            return value
        return self.data_type.map_value(value)

    def infer_data_type(self, provider: DataProvider) -> None:
        """Adopt the provider's data type when none is known yet."""

        if self.data_type is None:
            self.data_type = provider.data_type

    def invert(self) -> Axis:
        self.inverted = True
        return self

    def wrap(self, coordinate_system: CoordinateSystem) -> AxisWrapper:
        """Return the (cached) part representing this axis inside `coordinate_system`."""

        wrapper = self._wrappers.get(coordinate_system.id)
        if wrapper is None:
            wrapper = AxisWrapper(self, coordinate_system)
            self._wrappers[coordinate_system.id] = wrapper
        return wrapper

    def validate(self) -> None:
        """Raise StructuralValidationError when no data type could be determined."""

        if self.data_type is None:
            raise StructuralValidationError(f"Unable to determine the data type for this axis - {self.label}")

    def build_properties(self, properties: PropertyDictionary, context: EncodingContext | None) -> None:
        properties.set("inverse", True, self.inverted)
        properties.set("type", self.data_type.axis_type if self.data_type else None)
        if self.name is not None:
            properties.set("name", self.name)
            properties.set("nameLocation", self.name_location)
            properties.set("nameGap", self.name_gap)
        properties.set("min", self._min)
        properties.set("max", self._max)
        if self.data_type is not DataType.category:
            properties.set("splitNumber", self.divisions, self.divisions > 0)
            properties.set("scale", not self.show_zero, self._min is None and self._max is None)


class XAxis(Axis):
    tag = PartTag.x_axis
    axis_name = "xAxis"


class YAxis(Axis):
    tag = PartTag.y_axis
    axis_name = "yAxis"


class AngleAxis(Axis):
    tag = PartTag.angle_axis
    axis_name = "angleAxis"


class RadiusAxis(Axis):
    tag = PartTag.radius_axis
    axis_name = "radiusAxis"


class AxisWrapper(Part):
    """An axis placed on one coordinate system; equal by (axis, coordinate system)."""

    capabilities = frozenset({Capability.value_dedup})

    def __init__(self, axis: Axis, coordinate_system: CoordinateSystem) -> None:
        super().__init__(axis.name)
        self.axis = axis
        self.coordinate_system = coordinate_system

    @property
    def tags(self) -> frozenset[PartTag]:  # type: ignore[override]
        return frozenset({self.axis.tag})

    @property
    def label(self) -> str:
        return self.axis.label

    def value_key(self) -> Hashable:
        return (self.axis.id, self.coordinate_system.id)

    def validate(self, registry: PartRegistry) -> None:
        self.axis.validate()

    def build_properties(self, properties: PropertyDictionary, context: EncodingContext | None) -> None:
        properties.set("id", self.id)
        if context is not None and context.contains(self.coordinate_system):
            label = label_for(next(iter(self.coordinate_system.tags)))
            properties.set(f"{label}Index", context.serial_of(self.coordinate_system))
        properties.splice(self.axis)


class CoordinateSystem(VisiblePart):
    """Holds axes and the charts plotted on them.

    Class attributes:
        system_name: `coordinateSystem` value written by series plotted here.
        dimensions: Column roles written in a series' `encode`, in data order.
        axis_kinds: Axis class matching each dimension.
    """

    system_name: ClassVar[str]
    dimensions: ClassVar[tuple[str, ...]]
    axis_kinds: ClassVar[tuple[type[Axis], ...]]

    def __init__(self) -> None:
        super().__init__()
        self._axes: list[Axis] = []
        self._charts: list[Chart] = []

    @property
    def axes(self) -> tuple[Axis, ...]:
        return tuple(self._axes)

    @property
    def charts(self) -> tuple[Chart, ...]:
        return tuple(self._charts)

    def add(self, *charts: Chart) -> CoordinateSystem:
        """Plot charts on this coordinate system (moving them off any previous one)."""

        for chart in charts:
            if chart.coordinate_system is not None:
                chart.coordinate_system.remove(chart)
            chart.coordinate_system = self
            chart.axes = None
            self._charts.append(chart)
        return self

    def remove(self, *charts: Chart) -> CoordinateSystem:
        """Take charts off this coordinate system."""

        for chart in charts:
            if chart in self._charts:
                self._charts.remove(chart)
            chart.coordinate_system = None
            chart.axes = None
        return self

    def add_axis(self, *axes: Axis | None) -> CoordinateSystem:
        """Add axes, ignoring None and axes already present.

        Returns:
            This coordinate system, for chaining.
        """

        for axis in axes:
            if axis is not None and axis not in self._axes:
                self._axes.append(axis)
        return self

    def remove_axis(self, *axes: Axis) -> CoordinateSystem:
        for axis in axes:
            if axis in self._axes:
                self._axes.remove(axis)
        return self

    def axes_of(self, kind: type[Axis]) -> list[Axis]:
        """Return the axes of `kind` in the order they were added."""

        return [axis for axis in self._axes if isinstance(axis, kind)]

    def contains_axis(self, axis: Axis) -> bool:
        """Return True when `axis` belongs to this coordinate system."""

        return axis in self._axes

    def add_parts_into(self, registry: PartRegistry) -> None:
        for chart in self._charts:
            registry.add(chart)
            registry.add_all(chart.data)
            self._infer_axis_types(chart)
        for axis in self._axes:
            registry.add(axis.wrap(self))

    def _infer_axis_types(self, chart: Chart) -> None:
        for index, kind in enumerate(self.axis_kinds):
            if index >= len(chart.data):
                break
            for axis in chart.axes_of(kind):
                axis.infer_data_type(chart.data[index])

    def validate(self, registry: PartRegistry) -> None:
        for axis in self._axes:
            axis.validate()


class RectangularCoordinate(CoordinateSystem):
    """Cartesian grid; needs at least one X and one Y axis."""

    tags = frozenset({PartTag.grid})
    system_name = "cartesian2d"
    dimensions = ("x", "y")
    axis_kinds = (XAxis, YAxis)

    def __init__(self, x_axis: XAxis | None = None, y_axis: YAxis | None = None) -> None:
        super().__init__()
        self.add_axis(x_axis, y_axis)
        self.border: Border | None = None
        self.contain_label: bool | None = None

    def get_border(self, create: bool = False) -> Border | None:
        """Return the grid border, creating an empty one when `create` is set."""

        if self.border is None and create:
            self.border = Border()
        return self.border

    def build_properties(self, properties: PropertyDictionary, context: EncodingContext | None) -> None:
        super().build_properties(properties, context)
        properties.splice(self.border)
        properties.set("containLabel", self.contain_label)

    def validate(self, registry: PartRegistry) -> None:
        if not self.axes_of(XAxis):
            raise StructuralValidationError(f"RectangularCoordinate[{self.label}]: X axis not set.", part=self)
        if not self.axes_of(YAxis):
            raise StructuralValidationError(f"RectangularCoordinate[{self.label}]: Y axis not set.", part=self)
        super().validate(registry)


class PolarCoordinate(CoordinateSystem):
    """Polar coordinates; needs a radius axis and an angle axis."""

    tags = frozenset({PartTag.polar})
    system_name = "polar"
    dimensions = ("radius", "angle")
    axis_kinds = (RadiusAxis, AngleAxis)

    def __init__(self, radius_axis: RadiusAxis | None = None, angle_axis: AngleAxis | None = None) -> None:
        super().__init__()
        self.add_axis(radius_axis, angle_axis)
        self.radius: Any = None
        self.center: tuple[Any, Any] | None = None

    def build_properties(self, properties: PropertyDictionary, context: EncodingContext | None) -> None:
        super().build_properties(properties, context)
        properties.set("center", list(self.center) if self.center else None)
        properties.set("radius", self.radius)

    def validate(self, registry: PartRegistry) -> None:
        if not self.axes_of(RadiusAxis):
            raise StructuralValidationError(f"PolarCoordinate[{self.label}]: radius axis not set.", part=self)
        if not self.axes_of(AngleAxis):
            raise StructuralValidationError(f"PolarCoordinate[{self.label}]: angle axis not set.", part=self)
        super().validate(registry)
