"""Exceptions raised while assembling chart option documents."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .parts import Part


class ChartAssemblyError(Exception):
    """Base exception for the project."""


class StructuralValidationError(ChartAssemblyError):
    """Raised when the part graph cannot produce a consistent document.

    Args:
        message: Human-readable description naming the offending part.
        part: The part that failed validation, when known.
    """

    def __init__(self, message: str, *, part: Part | None = None) -> None:
        super().__init__(message)
        self.part = part


class EncodingError(ChartAssemblyError):
    """Raised when a raw JSON fragment or value cannot be encoded strictly."""
