"""Chart option document assembly.

This package turns a mutable graph of chart descriptions (series, axes,
coordinate systems, data) into one JSON option document for an ECharts-style
rendering engine. It performs no rendering and no I/O.
"""

from .assembler import DocumentAssembler
from .components import DefaultColors, DefaultTextStyle, Legend, Title, Toolbox, Tooltip, TooltipTrigger
from .coordinates import AngleAxis, PolarCoordinate, RadiusAxis, RectangularCoordinate, XAxis, YAxis
from .data import (
    CategoryData,
    Data,
    DataType,
    DateData,
    LegacyDateData,
    LogData,
    SerialData,
    TimeData,
    TreeData,
    TreeNode,
)
from .dataset import DatasetGrouping
from .errors import ChartAssemblyError, EncodingError, StructuralValidationError
from .series import Chart, ChartType, DataZoom, DataZoomKind
from .settings import AssemblySettings

__all__ = [
    "AngleAxis",
    "AssemblySettings",
    "CategoryData",
    "Chart",
    "ChartAssemblyError",
    "ChartType",
    "Data",
    "DataType",
    "DataZoom",
    "DataZoomKind",
    "DatasetGrouping",
    "DateData",
    "DefaultColors",
    "DefaultTextStyle",
    "DocumentAssembler",
    "EncodingError",
    "LegacyDateData",
    "Legend",
    "LogData",
    "PolarCoordinate",
    "RadiusAxis",
    "RectangularCoordinate",
    "SerialData",
    "StructuralValidationError",
    "TimeData",
    "Title",
    "Toolbox",
    "Tooltip",
    "TooltipTrigger",
    "TreeData",
    "TreeNode",
    "XAxis",
    "YAxis",
]
