"""Conditional property dictionaries used to build JSON object bodies.

Every encodable thing in an option document (parts, mix-in groups such as
position or padding, nested style objects) writes its fields into a
`PropertyDictionary`. The dictionary keeps entries in insertion order and
decides at encode time which of them are emitted:

- keyed entries are omitted when their value is None or their condition fails;
- spliced property objects contribute their members at the parent's level;
- raw JSON fragments are verified strictly when registered and written verbatim.

When several entries claim the same key the most recently registered one wins,
whether the key comes from a keyed entry, a raw fragment or a spliced object.
Each key is written at most once.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Literal

from .codec import encode_key, encode_member, encode_scalar, verify_fragment

if TYPE_CHECKING:
    from .context import EncodingContext

Condition = Callable[[Any], bool] | bool | None
EntryKind = Literal["value", "splice", "json"]


@dataclass(slots=True)
class _Entry:
    """One `(key | None, value)` entry of a PropertyDictionary."""

    key: str | None
    value: Any
    condition: Condition = None
    kind: EntryKind = "value"
    members: dict[str, Any] | None = None
    sequence: int = 0


class PropertyDictionary:
    """Ordered key/value store that encodes to the members of one JSON object."""

    def __init__(self) -> None:
        self._entries: list[_Entry] = []
        self._sequence = 0

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> PropertyDictionary:
        """Build a dictionary from a plain mapping (insertion order preserved)."""

        properties = cls()
        for name, value in values.items():
            properties.set(str(name), value)
        return properties

    def set(self, name: str, value: Any, when: Condition = None) -> PropertyDictionary:
        """Store `value` under `name`, replacing any earlier entry with that name.

        Args:
            name: JSON key.
            value: Scalar, sequence, mapping, PropertyObject or PropertyDictionary.
            when: Optional predicate (called with `value`) or boolean; the entry is
                omitted from the output when it evaluates false.

        Returns:
            This dictionary, for chaining.
        """

        self._put(_Entry(key=name, value=value, condition=when))
        return self

    def splice(self, value: PropertyObject | PropertyDictionary | None) -> PropertyDictionary:
        """Splice a nested object's members in-line, without a wrapping key."""

        if value is not None:
            self._append(_Entry(key=None, value=value, kind="splice"))
        return self

    def set_json(self, fragment: str) -> PropertyDictionary:
        """Splice a raw `"key":value,...` fragment after verifying it strictly.

        Raises:
            EncodingError: When the fragment is not a well-formed member list.
        """

        text, members = verify_fragment(fragment)
        if text:
            self._append(_Entry(key=None, value=text, kind="json", members=members))
        return self

    def update(self, other: PropertyDictionary) -> PropertyDictionary:
        """Register every entry of `other` after the entries already present."""

        for entry in other._entries:
            copied = replace(entry)
            if copied.key is None:
                self._append(copied)
            else:
                self._put(copied)
        return self

    def get(self, name: str, default: Any = None) -> Any:
        """Return the stored value for a keyed entry (conditions are not evaluated)."""

        index = self._index_of(name)
        return default if index is None else self._entries[index].value

    def keys(self) -> tuple[str, ...]:
        """Return the keyed entry names in order."""

        return tuple(entry.key for entry in self._entries if entry.key is not None)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._index_of(name) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def is_empty(self, context: EncodingContext | None = None) -> bool:
        """Return True when encoding would write nothing."""

        return not self.encode(context)

    def encode(self, context: EncodingContext | None = None) -> str:
        """Encode the non-omitted entries as comma-separated `"key":value` members.

        Returns:
            The members without surrounding braces, or an empty string when every
            entry was omitted.
        """

        members: list[str] = []
        for entry, surviving, complete in self._resolve(context):
            if entry.kind == "json" and complete:
                members.append(str(entry.value))
            else:
                members.extend(text for _, text in surviving)
        return ",".join(members)

    def members(self, context: EncodingContext | None = None) -> list[tuple[str, str]]:
        """Return the surviving `(key, '"key":value')` members in output order."""

        return [member for _, surviving, _ in self._resolve(context) for member in surviving]

    def _resolve(self, context: EncodingContext | None) -> list[tuple[_Entry, list[tuple[str, str]], bool]]:
        """Encode every entry and keep each member only where its key was last claimed.

        A keyed entry claims its key even when its value is omitted; fragments and
        splices claim the keys of the members they write.

        Returns:
            `(entry, surviving members, whether every member survived)` per entry.
        """

        produced: list[tuple[_Entry, list[tuple[str, str]]]] = []
        owners: dict[str, int] = {}
        for entry in self._entries:
            members = _entry_members(entry, context)
            claimed = (entry.key,) if entry.key is not None else tuple(name for name, _ in members)
            for name in claimed:
                if owners.get(name, -1) < entry.sequence:
                    owners[name] = entry.sequence
            produced.append((entry, members))

        resolved: list[tuple[_Entry, list[tuple[str, str]], bool]] = []
        for entry, members in produced:
            surviving = [member for member in members if owners.get(member[0]) == entry.sequence]
            resolved.append((entry, surviving, len(surviving) == len(members)))
        return resolved

    def _index_of(self, name: str) -> int | None:
        for index, entry in enumerate(self._entries):
            if entry.key == name:
                return index
        return None

    def _append(self, entry: _Entry) -> None:
        self._sequence += 1
        entry.sequence = self._sequence
        self._entries.append(entry)

    def _put(self, entry: _Entry) -> None:
        index = self._index_of(entry.key or "")
        if index is None:
            self._append(entry)
            return
        self._sequence += 1
        entry.sequence = self._sequence
        self._entries[index] = entry


class PropertyObject:
    """Base for anything that encodes to the members of one JSON object.

    Subclasses describe their built-in fields in `build_properties`; callers can
    add or override fields through `set_property` / `set_property_json`. Custom
    entries are registered after the built-ins, so they win on key collisions.
    """

    def __init__(self) -> None:
        self._custom = PropertyDictionary()

    def build_properties(self, properties: PropertyDictionary, context: EncodingContext | None) -> None:
        """Write built-in fields into `properties`."""

    def properties(self, context: EncodingContext | None = None) -> PropertyDictionary:
        """Return built-in fields followed by custom overrides."""

        properties = PropertyDictionary()
        self.build_properties(properties, context)
        return properties.update(self._custom)

    @property
    def custom_properties(self) -> PropertyDictionary:
        return self._custom

    def set_property(self, name: str, value: Any, when: Condition = None) -> PropertyObject:
        """Set a custom field that is written after (and overrides) built-in fields."""

        self._custom.set(name, value, when)
        return self

    def set_property_json(self, fragment: str) -> PropertyObject:
        """Add a raw JSON member-list fragment as a custom override."""

        self._custom.set_json(fragment)
        return self

    def splice_property(self, value: PropertyObject | PropertyDictionary | None) -> PropertyObject:
        """Splice another property object's members as a custom override."""

        self._custom.splice(value)
        return self

    def encode_members(self, context: EncodingContext | None = None) -> str:
        return self.properties(context).encode(context)

    def is_empty(self, context: EncodingContext | None = None) -> bool:
        return not self.encode_members(context)

    def to_json(self, context: EncodingContext | None = None) -> str:
        """Return the complete JSON object text (`{}` when empty)."""

        return "{" + self.encode_members(context) + "}"


def encode_value(value: Any, context: EncodingContext | None = None) -> str | None:
    """Encode a property value as JSON text, or None when it should be omitted.

    Nested property objects and mappings with no surviving members are omitted,
    and so are sequences with zero usable elements.
    """

    if value is None:
        return None
    if isinstance(value, (PropertyObject, PropertyDictionary, Mapping)):
        body = _encode_body(value, context)
        return "{" + body + "}" if body else None
    if isinstance(value, (list, tuple)):
        return _encode_array(value, context)
    return encode_scalar(value)


def _encode_body(value: Any, context: EncodingContext | None) -> str:
    if isinstance(value, PropertyObject):
        return value.encode_members(context)
    if isinstance(value, PropertyDictionary):
        return value.encode(context)
    return PropertyDictionary.from_mapping(value).encode(context)


def _encode_array(values: list[Any] | tuple[Any, ...], context: EncodingContext | None) -> str | None:
    encoded: list[str] = []
    usable = False
    for item in values:
        if item is None:
            encoded.append("null")
            continue
        text = encode_value(item, context)
        if text is None:
            continue
        encoded.append(text)
        usable = True
    if not usable:
        return None
    return "[" + ",".join(encoded) + "]"


def _encode_keyed(entry: _Entry, context: EncodingContext | None) -> str | None:
    value = entry.value
    if value is None or entry.key is None:
        return None
    condition = entry.condition
    if condition is not None:
        allowed = condition if isinstance(condition, bool) else condition(value)
        if not allowed:
            return None
    text = encode_value(value, context)
    if text is None:
        return None
    return encode_key(entry.key) + ":" + text


def _entry_members(entry: _Entry, context: EncodingContext | None) -> list[tuple[str, str]]:
    if entry.kind == "json":
        return [(name, encode_member(name, value)) for name, value in (entry.members or {}).items()]
    if entry.kind == "splice":
        value = entry.value
        if isinstance(value, PropertyObject):
            value = value.properties(context)
        return value.members(context)
    member = _encode_keyed(entry, context)
    return [] if member is None or entry.key is None else [(entry.key, member)]
