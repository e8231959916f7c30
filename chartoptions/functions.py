"""JavaScript callback hoisting.

JSON cannot carry functions, so string values that look like anonymous
JavaScript functions are moved out of the tree: the value is replaced by a
reserved key `@function@<path>` and the function, renamed to `<path>`, is added
to the document root under that key. A post-processor on the client side can
then turn the texts back into live callbacks.
"""

from __future__ import annotations

import re
from typing import Any, Final

from django.utils.text import capfirst

FUNCTION_PREFIX: Final = "@function@"

_ANONYMOUS_FUNCTION = re.compile(r"^function\s*\(")


def is_function(value: Any) -> bool:
    return isinstance(value, str) and _ANONYMOUS_FUNCTION.match(value.strip()) is not None


def hoist_functions(document: dict[str, Any], root_name: str = "option") -> dict[str, Any]:
    """Hoist function-valued strings of `document` to root-level reserved keys.

    Args:
        document: Parsed option document; modified in place.
        root_name: Prefix of every generated function name.

    Returns:
        The same document, for chaining.
    """

    hoisted: dict[str, str] = {}
    for key in list(document):
        if key.startswith(FUNCTION_PREFIX):
            continue
        document[key] = _hoist(document[key], root_name + capfirst(key), hoisted)
    document.update(hoisted)
    return document


def _hoist(value: Any, path: str, hoisted: dict[str, str]) -> Any:
    if isinstance(value, dict):
        return {key: _hoist(item, path + capfirst(key), hoisted) for key, item in value.items()}
    if isinstance(value, list):
        return [_hoist(item, f"{path}{index}", hoisted) for index, item in enumerate(value)]
    if not is_function(value):
        return value
    text = value.strip()
    key = FUNCTION_PREFIX + path
    hoisted[key] = "function " + path + text[text.index("(") :]
    return key
