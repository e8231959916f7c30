"""Data providers: typed value streams encodable inline or as dataset columns."""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable, Iterator
from datetime import date, datetime, time, timezone, tzinfo
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar

from .codec import encode_scalar
from .parts import Capability, Part, PartTag
from .properties import PropertyDictionary, PropertyObject, encode_value

if TYPE_CHECKING:
    from .context import EncodingContext

ValueEncoder = Callable[[Any, int], Any]


class DataType(StrEnum):
    """Kind of values carried by a provider."""

    number = "number"
    category = "category"
    date = "date"
    time = "time"
    legacy_date = "legacy_date"
    log = "log"

    @property
    def axis_type(self) -> str:
        """Axis `type` value understood by the rendering engine."""

        return _AXIS_TYPES[self]

    def supports(self, value: Any) -> bool:
        if self in (DataType.number, DataType.log, DataType.legacy_date):
            return _is_number(value)
        if self is DataType.category:
            return isinstance(value, str)
        if self is DataType.date:
            return isinstance(value, date) and not isinstance(value, datetime)
        return isinstance(value, datetime)

    def map_value(self, value: Any, zone: tzinfo = timezone.utc) -> Any:
        """Convert `value` to this type's native representation.

        Dates and datetimes convert into each other; `legacy_date` values are
        POSIX timestamps in seconds. Values that cannot be represented map to None.

        Args:
            value: Raw value.
            zone: Zone used to interpret timestamps and naive datetimes.

        Returns:
            The mapped value, or None.
        """

        if value is None:
            return None
        if self is DataType.time:
            if _is_number(value):
                value = datetime.fromtimestamp(float(value), tz=zone).replace(tzinfo=None)
            elif isinstance(value, date) and not isinstance(value, datetime):
                value = datetime.combine(value, time.min)
        elif self is DataType.date:
            if _is_number(value):
                value = datetime.fromtimestamp(float(value), tz=zone).date()
            elif isinstance(value, datetime):
                value = value.date()
        elif self is DataType.legacy_date:
            if isinstance(value, datetime):
                value = (value if value.tzinfo else value.replace(tzinfo=zone)).timestamp()
            elif isinstance(value, date):
                value = datetime.combine(value, time.min, tzinfo=zone).timestamp()
        return value if self.supports(value) else None

    @classmethod
    def type_for(cls, value: Any) -> DataType | None:
        """Infer the data type of a sample value."""

        if _is_number(value):
            return cls.number
        if isinstance(value, str):
            return cls.category
        if isinstance(value, datetime):
            return cls.time
        if isinstance(value, date):
            return cls.date
        return None


_AXIS_TYPES: dict[DataType, str] = {
    DataType.number: "value",
    DataType.category: "category",
    DataType.date: "time",
    DataType.time: "time",
    DataType.legacy_date: "time",
    DataType.log: "log",
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


class DataProvider(Part):
    """Ordered value stream with a data type.

    A provider supports dataset (shared table) encoding unless it was given a
    custom per-value encoder; one such provider switches the whole document to
    inline encoding.
    """

    tags = frozenset({PartTag.data})
    capabilities = frozenset({Capability.carries_data, Capability.value_dedup})
    emit_id = False
    default_type: ClassVar[DataType | None] = None

    def __init__(
        self,
        values: Iterable[Any] = (),
        *,
        data_type: DataType | None = None,
        name: str | None = None,
        value_encoder: ValueEncoder | None = None,
    ) -> None:
        super().__init__(name)
        self._values: list[Any] = list(values)
        self._data_type = data_type or self.default_type
        self.value_encoder = value_encoder

    def __len__(self) -> int:
        return len(self.values())

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values())

    def __getitem__(self, index: int) -> Any:
        return self.values()[index]

    def append(self, value: Any) -> DataProvider:
        self._values.append(value)
        return self

    def extend(self, values: Iterable[Any]) -> DataProvider:
        self._values.extend(values)
        return self

    def clear(self) -> None:
        self._values.clear()

    @property
    def data_type(self) -> DataType:
        """Declared type, else the type of the first non-null value (number when empty)."""

        if self._data_type is not None:
            return self._data_type
        for value in self._values:
            inferred = DataType.type_for(value)
            if inferred is not None:
                return inferred
        return DataType.number

    @data_type.setter
    def data_type(self, data_type: DataType | None) -> None:
        self._data_type = data_type

    def values(self) -> list[Any]:
        """Return the values mapped to the provider's data type."""

        data_type = self.data_type
        return [data_type.map_value(value) for value in self._values]

    @property
    def supports_dataset(self) -> bool:
        return self.value_encoder is None

    def value_key(self) -> Hashable:
        return (self.data_type, tuple(self.values()))

    def encode_item(self, value: Any, index: int) -> str:
        if self.value_encoder is not None:
            encoded = encode_value(self.value_encoder(value, index))
        else:
            encoded = encode_scalar(value)
        return "null" if encoded is None else encoded

    def encode_values(self) -> str:
        """Return the values as a JSON array (inline `data` or a dataset column)."""

        return "[" + ",".join(self.encode_item(value, index) for index, value in enumerate(self.values())) + "]"

    def encode_json(self, context: EncodingContext | None = None) -> str:
        return self.encode_values()


class Data(DataProvider):
    """Numeric values."""

    default_type = DataType.number


class CategoryData(DataProvider):
    default_type = DataType.category


class DateData(DataProvider):
    default_type = DataType.date


class TimeData(DataProvider):
    default_type = DataType.time


class LegacyDateData(DataProvider):
    """POSIX timestamps (seconds); encoded as ISO-8601 UTC instants."""

    default_type = DataType.legacy_date

    def encode_item(self, value: Any, index: int) -> str:
        if self.value_encoder is None and value is not None:
            value = datetime.fromtimestamp(float(value), tz=timezone.utc)
        return super().encode_item(value, index)


class LogData(DataProvider):
    default_type = DataType.log


class SerialData(DataProvider):
    """Arithmetic progression from `start` to `end` inclusive.

    A zero step is treated as 1; the bounds are swapped to match the step's sign.
    """

    default_type = DataType.number

    def __init__(self, start: int, end: int, step: int = 1, *, name: str | None = None) -> None:
        super().__init__(name=name)
        self.step = step or 1
        if self.step > 0:
            self.start, self.end = min(start, end), max(start, end)
        else:
            self.start, self.end = max(start, end), min(start, end)

    def values(self) -> list[Any]:
        stop = self.end + (1 if self.step > 0 else -1)
        return list(range(self.start, stop, self.step))

    def append(self, value: Any) -> DataProvider:
        raise TypeError("SerialData values are derived from its range.")

    def extend(self, values: Iterable[Any]) -> DataProvider:
        raise TypeError("SerialData values are derived from its range.")


class TreeNode(PropertyObject):
    """Named node of hierarchical data."""

    def __init__(self, name: str, value: int | float | Decimal | None = None, children: Iterable[TreeNode] = ()) -> None:
        super().__init__()
        self.name = name
        self.value = value
        self.children: list[TreeNode] = list(children)

    def add(self, *children: TreeNode) -> TreeNode:
        self.children.extend(children)
        return self

    def total(self) -> int | float | Decimal:
        """Return the node's value, or the sum of its children's totals when unset."""

        if self.value is not None:
            return self.value
        return sum(child.total() for child in self.children)

    def build_properties(self, properties: PropertyDictionary, context: EncodingContext | None) -> None:
        properties.set("name", self.name or "Name?")
        properties.set("value", self.value if self.value is not None else self.total())
        properties.set("children", self.children)


class TreeData(DataProvider):
    """Hierarchical data; always encoded inline as nested `{name, value, children}` objects."""

    capabilities = frozenset({Capability.carries_data})
    default_type = DataType.number

    def __init__(self, *roots: TreeNode, name: str | None = None) -> None:
        super().__init__(roots, name=name)

    def values(self) -> list[Any]:
        return list(self._values)

    @property
    def supports_dataset(self) -> bool:
        return False

    def value_key(self) -> Hashable:
        return self.id

    def encode_item(self, value: Any, index: int) -> str:
        return value.to_json()
