"""Assembly settings, optionally read from environment variables.

Environment variables:
    CHARTOPTIONS_DATASET_GROUPING: `element_count` (default) or `chart`.
    CHARTOPTIONS_INDENT: Pretty-print indent; unset or 0 writes compact JSON.
    CHARTOPTIONS_DEFAULT_COLORS: Comma-separated palette used to pad the colour cycle.
    CHARTOPTIONS_HOIST_FUNCTIONS: Whether JavaScript function strings are hoisted (default true).
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .components import PALETTE
from .dataset import DatasetGrouping


def _env_bool(name: str, *, default: bool) -> bool:
    """Parse a boolean environment variable.

    Args:
        name: Environment variable name.
        default: Value when the variable is not set.

    Returns:
        Parsed boolean value.
    """

    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _env_int(name: str, *, default: int) -> int:
    """Parse an integer environment variable.

    Args:
        name: Environment variable name.
        default: Value when the variable is not set.

    Returns:
        Parsed integer value.
    """

    raw = os.getenv(name)
    if raw is None:
        return default
    return int(raw.strip())


def _env_csv(name: str, *, default: list[str]) -> list[str]:
    """Parse a comma-separated environment variable into a list of strings.

    Args:
        name: Environment variable name.
        default: Value when the variable is not set.

    Returns:
        A list of non-empty, trimmed values.
    """

    raw = os.getenv(name)
    if raw is None:
        return default
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass(frozen=True, slots=True)
class AssemblySettings:
    """Document-wide assembly options.

    Args:
        dataset_grouping: How data providers are batched into dataset blocks.
        indent: Pretty-print indent, or None for compact output.
        default_colors: Palette used to pad the document colour cycle.
        hoist_functions: Whether JavaScript function strings are hoisted to
            root-level `@function@` keys.
    """

    dataset_grouping: DatasetGrouping = DatasetGrouping.element_count
    indent: int | None = None
    default_colors: tuple[str, ...] = PALETTE
    hoist_functions: bool = True

    @classmethod
    def from_env(cls) -> AssemblySettings:
        """Build settings from `CHARTOPTIONS_*` environment variables.

        Raises:
            ValueError: When a variable holds an unsupported value.
        """

        grouping = os.getenv("CHARTOPTIONS_DATASET_GROUPING")
        indent = _env_int("CHARTOPTIONS_INDENT", default=0)
        return cls(
            dataset_grouping=DatasetGrouping(grouping.strip().lower()) if grouping else DatasetGrouping.element_count,
            indent=indent if indent > 0 else None,
            default_colors=tuple(_env_csv("CHARTOPTIONS_DEFAULT_COLORS", default=list(PALETTE))),
            hoist_functions=_env_bool("CHARTOPTIONS_HOIST_FUNCTIONS", default=True),
        )
