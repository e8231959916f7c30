"""End-to-end tests for option document assembly."""

from __future__ import annotations

import json
from typing import Any

import pytest

from chartoptions import (
    AngleAxis,
    AssemblySettings,
    CategoryData,
    Chart,
    ChartType,
    Data,
    DatasetGrouping,
    DataType,
    DataZoom,
    DocumentAssembler,
    PolarCoordinate,
    RadiusAxis,
    RectangularCoordinate,
    StructuralValidationError,
    Title,
    TreeData,
    TreeNode,
    XAxis,
    YAxis,
)

pytestmark = pytest.mark.integration


def _assemble(assembler: DocumentAssembler, **kwargs: Any) -> dict[str, Any]:
    return json.loads(assembler.assemble(**kwargs))


def _two_lengths(grid: RectangularCoordinate) -> tuple[Chart, Chart]:
    x = CategoryData(["a", "b", "c", "d"])
    y = Data([1, 2, 3, 4])
    z = Data([5, 6, 7])
    return Chart(ChartType.line, x, y).plot_on(grid), Chart(ChartType.bar, z, z).plot_on(grid)


def test_dataset_blocks_grouped_by_element_count(assembler: DocumentAssembler, grid: RectangularCoordinate) -> None:
    first, second = _two_lengths(grid)
    assembler.add(first, second)

    document = _assemble(assembler)

    assert list(document) == ["dataset", "xAxis", "yAxis", "grid", "series"]
    assert document["dataset"] == [
        {"source": {"d0": ["a", "b", "c", "d"], "d1": [1, 2, 3, 4]}},
        {"source": {"d2": [5, 6, 7]}},
    ]
    assert document["series"] == [
        {
            "id": first.id,
            "name": "Chart 1",
            "type": "line",
            "coordinateSystem": "cartesian2d",
            "datasetIndex": 0,
            "encode": {"x": "d0", "y": "d1"},
        },
        {
            "id": second.id,
            "name": "Chart 2",
            "type": "bar",
            "coordinateSystem": "cartesian2d",
            "datasetIndex": 1,
            "encode": {"x": "d2", "y": "d2"},
        },
    ]
    assert document["xAxis"] == [{"id": grid.axes[0].wrap(grid).id, "gridIndex": 0, "type": "category"}]
    assert document["yAxis"][0]["type"] == "value"
    assert document["grid"] == [{"id": grid.id, "show": True}]


def test_single_dataset_block_is_written_as_an_object(
    assembler: DocumentAssembler, grid: RectangularCoordinate
) -> None:
    assembler.add(Chart(ChartType.line, CategoryData(["a", "b"]), Data([1, 2])).plot_on(grid))

    document = _assemble(assembler)

    assert document["dataset"] == {"source": {"d0": ["a", "b"], "d1": [1, 2]}}


def test_custom_value_encoder_switches_document_to_inline_data(
    assembler: DocumentAssembler, grid: RectangularCoordinate
) -> None:
    x = CategoryData(["a", "b"])
    y = Data([1, 2], value_encoder=lambda value, index: {"value": value, "symbolSize": index + 1})
    assembler.add(Chart(ChartType.scatter, x, y).plot_on(grid), Chart(ChartType.line, x, Data([3, 4])).plot_on(grid))

    document = _assemble(assembler)

    assert "dataset" not in document
    assert document["series"][0]["data"] == [["a", {"value": 1, "symbolSize": 1}], ["b", {"value": 2, "symbolSize": 2}]]
    assert document["series"][1]["data"] == [["a", 3], ["b", 4]]
    assert document["xAxis"][0]["data"] == ["a", "b"]
    assert "datasetIndex" not in document["series"][0]


def test_dataset_blocks_grouped_by_chart(grid: RectangularCoordinate) -> None:
    assembler = DocumentAssembler(AssemblySettings(dataset_grouping=DatasetGrouping.chart))
    assembler.set_legend(None)
    x = CategoryData(["a", "b"])
    first = Chart(ChartType.line, x, Data([1, 2])).plot_on(grid)
    second = Chart(ChartType.line, x, Data([3, 4])).plot_on(grid)
    assembler.add(first, second)

    document = _assemble(assembler)

    assert document["dataset"] == [
        {"source": {"d0": ["a", "b"], "d1": [1, 2]}},
        {"source": {"d0": ["a", "b"], "d2": [3, 4]}},
    ]
    assert document["series"][1]["datasetIndex"] == 1
    assert document["series"][1]["encode"] == {"x": "d0", "y": "d2"}


def test_charts_on_separate_grids_reference_their_axes(assembler: DocumentAssembler) -> None:
    x = CategoryData(["a", "b"])
    top = RectangularCoordinate(XAxis(), YAxis())
    bottom = RectangularCoordinate(XAxis(), YAxis())
    assembler.add(Chart(ChartType.line, x, Data([1, 2])).plot_on(top))
    assembler.add(Chart(ChartType.line, x, Data([3, 4])).plot_on(bottom))

    document = _assemble(assembler)

    assert len(document["grid"]) == 2
    assert [axis.get("gridIndex") for axis in document["xAxis"]] == [0, 1]
    assert "xAxisIndex" not in document["series"][0]
    assert document["series"][1]["xAxisIndex"] == 1
    assert document["series"][1]["yAxisIndex"] == 1


def test_polar_chart(assembler: DocumentAssembler) -> None:
    polar = PolarCoordinate(RadiusAxis(DataType.number), AngleAxis(DataType.category))
    chart = Chart(ChartType.bar, Data([3, 5]), CategoryData(["N", "S"])).plot_on(polar)
    assembler.add(chart)

    document = _assemble(assembler)

    assert list(document) == ["dataset", "angleAxis", "radiusAxis", "polar", "series"]
    assert document["radiusAxis"][0]["polarIndex"] == 0
    assert document["angleAxis"][0]["type"] == "category"
    assert document["series"][0]["coordinateSystem"] == "polar"
    assert document["series"][0]["encode"] == {"radius": "d0", "angle": "d1"}


def test_pie_chart_with_named_items(assembler: DocumentAssembler) -> None:
    names = CategoryData(["Rent", "Food"])
    assembler.add(Chart(ChartType.pie, names, Data([700, 300])))
    assert _assemble(assembler)["series"][0]["encode"] == {"itemName": "d0", "value": "d1"}

    assembler.remove_all()
    assembler.add(Chart(ChartType.pie, names, Data([700, 300], value_encoder=lambda value, index: value)))
    series = _assemble(assembler)["series"][0]

    assert series["data"] == [{"name": "Rent", "value": 700}, {"name": "Food", "value": 300}]
    assert "coordinateSystem" not in series


def test_treemap_data_is_always_inline(assembler: DocumentAssembler) -> None:
    root = TreeNode("All", children=[TreeNode("A", 2), TreeNode("B", 1)])
    assembler.add(Chart(ChartType.treemap, TreeData(root)))

    document = _assemble(assembler)

    assert "dataset" not in document
    assert document["series"][0]["data"] == [
        {"name": "All", "value": 3, "children": [{"name": "A", "value": 2}, {"name": "B", "value": 1}]}
    ]


def test_document_level_parts_are_written_in_category_order(
    assembler: DocumentAssembler, grid: RectangularCoordinate
) -> None:
    assembler.background = "#ffffff"
    assembler.get_title("Sales")
    assembler.get_tooltip()
    assembler.get_toolbox().add_feature("saveAsImage")
    assembler.get_default_colors().colors.append("#123456")
    assembler.get_default_text_style().font_size = 14
    assembler.add(Chart(ChartType.line, CategoryData(["a"]), Data([1])).plot_on(grid))

    document = _assemble(assembler)

    assert list(document)[:7] == ["backgroundColor", "color", "textStyle", "title", "toolbox", "tooltip", "dataset"]
    assert len(document["color"]) == 11
    assert document["color"][:2] == ["#123456", "#0000ff"]
    assert document["textStyle"] == {"fontSize": 14}
    assert document["title"][0]["text"] == "Sales"
    assert document["toolbox"][0]["feature"] == {"saveAsImage": {"show": True}}


def test_default_legend_is_written(grid: RectangularCoordinate) -> None:
    assembler = DocumentAssembler()
    assembler.add(Chart(ChartType.line, CategoryData(["a"]), Data([1])).plot_on(grid))

    document = _assemble(assembler)

    assert document["legend"] == [{"id": assembler.get_legend().id, "show": True}]


def test_document_title_displaces_a_component_title(
    assembler: DocumentAssembler, grid: RectangularCoordinate
) -> None:
    assembler.add(Title("component"), Chart(ChartType.line, CategoryData(["a"]), Data([1])).plot_on(grid))
    assembler.get_title("document")

    titles = _assemble(assembler)["title"]

    assert [title["text"] for title in titles] == ["document"]


def test_hidden_part_writes_only_show_false(assembler: DocumentAssembler, grid: RectangularCoordinate) -> None:
    assembler.get_title("Hidden").hide()
    assembler.add(Chart(ChartType.line, CategoryData(["a"]), Data([1])).plot_on(grid))

    assert _assemble(assembler)["title"] == [{"show": False}]


def test_function_strings_are_hoisted(assembler: DocumentAssembler, grid: RectangularCoordinate) -> None:
    assembler.get_tooltip().formatter = "function (params) { return params.name; }"
    assembler.add(Chart(ChartType.line, CategoryData(["a"]), Data([1])).plot_on(grid))

    document = _assemble(assembler)

    assert document["tooltip"][0]["formatter"] == "@function@optionTooltip0Formatter"
    assert document["@function@optionTooltip0Formatter"] == (
        "function optionTooltip0Formatter(params) { return params.name; }"
    )


def test_function_hoisting_can_be_disabled(grid: RectangularCoordinate) -> None:
    assembler = DocumentAssembler(AssemblySettings(hoist_functions=False, indent=2))
    assembler.get_tooltip().formatter = "function (params) { return params.name; }"
    assembler.add(Chart(ChartType.line, CategoryData(["a"]), Data([1])).plot_on(grid))

    output = assembler.assemble()

    assert "\n  " in output
    assert json.loads(output)["tooltip"][0]["formatter"].startswith("function (params)")


def test_data_zoom_references_axis_indices(assembler: DocumentAssembler, grid: RectangularCoordinate) -> None:
    zoom = DataZoom(grid, grid.axes[0])
    zoom.start = 10
    assembler.add(Chart(ChartType.line, CategoryData(["a"]), Data([1])).plot_on(grid), zoom)

    document = _assemble(assembler)

    assert document["dataZoom"] == [{"id": zoom.id, "type": "slider", "xAxisIndex": [0], "start": 10}]


def test_data_zoom_on_unused_coordinate_system_is_rejected(
    assembler: DocumentAssembler, grid: RectangularCoordinate
) -> None:
    unused = RectangularCoordinate(XAxis(DataType.number), YAxis(DataType.number))
    assembler.add(Chart(ChartType.line, CategoryData(["a"]), Data([1])).plot_on(grid), DataZoom(unused))

    with pytest.raises(StructuralValidationError, match="coordinate system is not used"):
        assembler.assemble()


def test_axis_without_data_type_is_rejected(assembler: DocumentAssembler) -> None:
    x_axis = XAxis()
    y_axis = YAxis()
    grid = RectangularCoordinate(x_axis, y_axis)
    grid.add_axis(YAxis(name="spare"))
    assembler.add(Chart(ChartType.line, CategoryData(["a"]), Data([1])).plot_on(grid, x_axis, y_axis))

    with pytest.raises(StructuralValidationError, match="Unable to determine the data type for this axis - spare"):
        assembler.assemble()


def test_chart_without_coordinate_system_is_rejected(assembler: DocumentAssembler) -> None:
    assembler.add(Chart(ChartType.line, CategoryData(["a"]), Data([1]), name="orphan"))

    with pytest.raises(StructuralValidationError, match=r"Chart\[orphan\]: coordinate system not set\.") as excinfo:
        assembler.assemble()

    assert excinfo.value.part is assembler.components[0]


def test_skip_data_pass_leaves_out_data_and_tooltip(
    assembler: DocumentAssembler, grid: RectangularCoordinate
) -> None:
    first, second = _two_lengths(grid)
    assembler.get_tooltip()
    assembler.add(first, second)
    full = _assemble(assembler)

    skipped = _assemble(assembler, skip_data=True)

    assert "dataset" in full and "tooltip" in full
    assert "dataset" not in skipped
    assert "tooltip" not in skipped
    for series in skipped["series"]:
        assert not {"data", "datasetIndex", "encode"} & set(series)
    assert [series["name"] for series in skipped["series"]] == ["Chart 1", "Chart 2"]


def test_skip_data_on_first_pass_writes_data(assembler: DocumentAssembler, grid: RectangularCoordinate) -> None:
    assembler.add(Chart(ChartType.line, CategoryData(["a"]), Data([1])).plot_on(grid))

    assert "dataset" in _assemble(assembler, skip_data=True)


def test_skip_data_with_new_data_is_rejected_and_keeps_last_pass(
    assembler: DocumentAssembler, grid: RectangularCoordinate
) -> None:
    x = CategoryData(["a"])
    chart = Chart(ChartType.line, x, Data([1])).plot_on(grid)
    assembler.add(chart)
    assembler.assemble()
    committed = assembler.committed
    fresh = Data([2], name="fresh")
    chart.set_data(x, fresh)

    with pytest.raises(StructuralValidationError, match="Skipping data but new data found: fresh") as excinfo:
        assembler.assemble(skip_data=True)

    assert excinfo.value.part is fresh
    assert assembler.committed is committed
    assert _assemble(assembler)["dataset"] == {"source": {"d0": ["a"], "d1": [2]}}


def test_assemble_is_not_reentrant(assembler: DocumentAssembler, grid: RectangularCoordinate) -> None:
    class Reentrant(Chart):
        def skipping_data(self, skipping: bool) -> None:
            assembler.assemble()

    assembler.add(Reentrant(ChartType.line, CategoryData(["a"]), Data([1])).plot_on(grid))

    with pytest.raises(RuntimeError, match="already running"):
        assembler.assemble()

    assembler.remove_all()
    assert assembler.assemble() == "{}"


def test_grid_border_is_spliced_into_grid(assembler: DocumentAssembler, grid: RectangularCoordinate) -> None:
    border = grid.get_border(create=True)
    border.width = 2
    border.color = "#cccccc"
    grid.contain_label = True
    assembler.add(Chart(ChartType.line, CategoryData(["a"]), Data([1])).plot_on(grid))

    document = _assemble(assembler)

    assert grid.get_border() is border
    assert document["grid"] == [
        {"id": grid.id, "show": True, "borderWidth": 2, "borderColor": "#cccccc", "containLabel": True}
    ]


def _sales_document(grid: RectangularCoordinate, *, inline: bool) -> DocumentAssembler:
    assembler = DocumentAssembler()
    assembler.get_title("Sales")
    assembler.get_tooltip().formatter = "function (params) { return params.name; }"
    encoder = (lambda value, index: {"value": value}) if inline else None
    x = CategoryData(["a", "b", "c"])
    assembler.add(
        Chart(ChartType.line, x, Data([1, 2, 3], value_encoder=encoder)).plot_on(grid),
        Chart(ChartType.bar, x, Data([4, 5, 6])).plot_on(grid),
    )
    return assembler


@pytest.mark.parametrize("inline", [False, True])
def test_unchanged_graph_assembles_to_identical_output(grid: RectangularCoordinate, inline: bool) -> None:
    assembler = _sales_document(grid, inline=inline)

    first = assembler.assemble()

    assert assembler.assemble() == first
    assert ("dataset" in json.loads(first)) is not inline


@pytest.mark.parametrize("inline", [False, True])
def test_full_pass_after_skip_data_passes_repeats_first_output(grid: RectangularCoordinate, inline: bool) -> None:
    assembler = _sales_document(grid, inline=inline)
    first = assembler.assemble()

    skipped = assembler.assemble(skip_data=True)
    assert assembler.assemble(skip_data=True) == skipped

    assert assembler.assemble() == first
