"""JSON encoding helpers shared by property dictionaries and data providers.

Scalars go through Django's `DjangoJSONEncoder` so dates, times, UUIDs and lazy
translation strings serialize the same way everywhere. Raw fragments and the
final document are parsed with a strict decoder that rejects `NaN`, `Infinity`
and duplicate keys.
"""

from __future__ import annotations

import json
import math
from decimal import Decimal
from enum import Enum
from typing import Any

from django.core.serializers.json import DjangoJSONEncoder

from .errors import EncodingError

_SCALAR_ENCODER = DjangoJSONEncoder(ensure_ascii=False, separators=(",", ":"))


def encode_scalar(value: Any) -> str | None:
    """Encode a scalar value as a JSON literal.

    Args:
        value: Value to encode. Enums encode their `.value`.

    Returns:
        The JSON text, or None when `value` is None.

    Raises:
        EncodingError: When the value has no JSON representation.
    """

    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return encode_scalar(value.value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value) if math.isfinite(value) else "null"
    if isinstance(value, Decimal):
        return str(value) if value.is_finite() else "null"
    try:
        return _SCALAR_ENCODER.encode(value)
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"Cannot encode value of type {type(value).__name__}: {value!r}.") from exc


def encode_key(name: str) -> str:
    """Return a quoted, escaped JSON object key."""

    return _SCALAR_ENCODER.encode(str(name))


def verify_fragment(fragment: str) -> tuple[str, dict[str, Any]]:
    """Verify a raw JSON member-list fragment such as `"a":1,"b":[2]`.

    Args:
        fragment: Comma-separated `"key":value` members without braces.

    Returns:
        A tuple of (stripped fragment, parsed members in declaration order).

    Raises:
        EncodingError: When the fragment is not a strict JSON member list.
    """

    if not isinstance(fragment, str):
        raise EncodingError(f"JSON fragment must be a string, got {type(fragment).__name__}.")
    text = fragment.strip()
    if not text:
        return "", {}
    try:
        parsed = _strict_loads("{" + text + "}")
    except ValueError as exc:
        raise EncodingError(f"Malformed JSON fragment: {fragment!r} ({exc}).") from exc
    return text, parsed


def encode_member(name: str, value: Any) -> str:
    """Re-encode one parsed fragment member as `"key":value` text."""

    return encode_key(name) + ":" + json.dumps(value, ensure_ascii=False, separators=(",", ":"), allow_nan=False)


def loads_document(text: str) -> dict[str, Any]:
    """Parse an assembled option document.

    Repeated keys keep the last value, which is how later custom overrides
    win over earlier spliced members.

    Raises:
        EncodingError: When the text is not a well-formed JSON object.
    """

    try:
        document = _strict_loads(text, allow_duplicates=True)
    except ValueError as exc:
        raise EncodingError(f"Assembled document is not valid JSON: {exc}.") from exc
    if not isinstance(document, dict):
        raise EncodingError("Assembled document must be a JSON object.")
    return document


def dumps_document(document: dict[str, Any], *, indent: int | None = None) -> str:
    """Serialize a parsed option document back to text."""

    if indent is None:
        return json.dumps(document, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
    return json.dumps(document, ensure_ascii=False, indent=indent, allow_nan=False)


def _strict_loads(text: str, *, allow_duplicates: bool = False) -> Any:
    """Parse JSON rejecting non-standard constants (and duplicate keys unless allowed)."""

    if allow_duplicates:
        return json.loads(text, parse_constant=_reject_constant)
    return json.loads(text, object_pairs_hook=_reject_duplicate_keys, parse_constant=_reject_constant)


def _reject_duplicate_keys(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in pairs:
        if key in out:
            raise ValueError(f"duplicate key {key!r}")
        out[key] = value
    return out


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard constant {name}")
