"""Pytest fixtures shared across the option assembly tests."""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from chartoptions import DataType, DocumentAssembler, RectangularCoordinate, XAxis, YAxis


@pytest.fixture
def assembler() -> DocumentAssembler:
    """Return an assembler with default settings and no default legend."""

    assembler = DocumentAssembler()
    assembler.set_legend(None)
    return assembler


@pytest.fixture
def grid() -> RectangularCoordinate:
    """Return a cartesian grid with a category X axis and a numeric Y axis."""

    return RectangularCoordinate(XAxis(DataType.category), YAxis(DataType.number))


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    - `unit`: pure, fast tests of a single module.
    - `integration`: tests assembling complete documents through DocumentAssembler.

    Each test must have exactly one of these markers.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            markers = []
            if has_unit:
                markers.append("unit")
            if has_integration:
                markers.append("integration")
            invalid.append(f"{item.nodeid} (markers={markers or 'none'})")

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )
