"""Document-level components: title, legend, toolbox, tooltip and defaults."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Final

from .codec import encode_scalar
from .parts import Capability, Component, Part, PartTag
from .properties import PropertyDictionary
from .styles import Padding, Position, TextStyle

if TYPE_CHECKING:
    from .context import EncodingContext

PALETTE: Final[tuple[str, ...]] = (
    "#0000ff",
    "#c23531",
    "#2f4554",
    "#61a0a8",
    "#d48265",
    "#91c7ae",
    "#749f83",
    "#ca8622",
    "#bda29a",
    "#6e7074",
    "#546570",
    "#c4ccd3",
)
PALETTE_SIZE: Final = 11


class VisiblePart(Component):
    """A component that can be hidden; a hidden part encodes as `{"show":false}` only."""

    def __init__(self, name: str | None = None) -> None:
        super().__init__(name)
        self.show = True
        self.position: Position | None = None
        self.padding: Padding | None = None

    def hide(self) -> VisiblePart:
        self.show = False
        return self

    def display(self) -> VisiblePart:
        self.show = True
        return self

    def get_position(self, create: bool = False) -> Position | None:
        """Return the position, creating an empty one when `create` is set."""

        if self.position is None and create:
            self.position = Position()
        return self.position

    def build_properties(self, properties: PropertyDictionary, context: EncodingContext | None) -> None:
        super().build_properties(properties, context)
        properties.set("show", self.show)
        properties.splice(self.position)
        properties.splice(self.padding)

    def encode_json(self, context: EncodingContext | None = None) -> str:
        if not self.show:
            return '{"show":false}'
        return super().encode_json(context)


class Title(VisiblePart):
    tags = frozenset({PartTag.title})
    capabilities = frozenset({Capability.single_instance})

    def __init__(self, text: str, subtext: str | None = None) -> None:
        super().__init__()
        self.text = text
        self.subtext = subtext
        self.text_style: TextStyle | None = None
        self.subtext_style: TextStyle | None = None

    def build_properties(self, properties: PropertyDictionary, context: EncodingContext | None) -> None:
        super().build_properties(properties, context)
        properties.set("text", self.text)
        properties.set("subtext", self.subtext)
        properties.set("textStyle", self.text_style)
        properties.set("subtextStyle", self.subtext_style)


class Legend(VisiblePart):
    """Series legend; the assembler creates one by default."""

    tags = frozenset({PartTag.legend})

    def __init__(self, orient: str | None = None) -> None:
        super().__init__()
        self.orient = orient
        self.scrollable = False
        self.text_style: TextStyle | None = None

    def build_properties(self, properties: PropertyDictionary, context: EncodingContext | None) -> None:
        super().build_properties(properties, context)
        properties.set("type", "scroll", self.scrollable)
        properties.set("orient", self.orient)
        properties.set("textStyle", self.text_style)


class Toolbox(VisiblePart):
    """Toolbox with feature buttons such as `saveAsImage` or `dataView`."""

    tags = frozenset({PartTag.toolbox})
    capabilities = frozenset({Capability.single_instance})

    def __init__(self, *features: str) -> None:
        super().__init__()
        self.orient: str | None = None
        self._features: dict[str, dict[str, Any]] = {}
        for feature in features:
            self.add_feature(feature)

    def add_feature(self, feature: str, **options: Any) -> Toolbox:
        """Enable a feature button; `options` become members of its object."""

        self._features[feature] = {"show": True, **options}
        return self

    def remove_feature(self, feature: str) -> Toolbox:
        """Disable a feature button; unknown features are ignored."""

        self._features.pop(feature, None)
        return self

    @property
    def features(self) -> tuple[str, ...]:
        return tuple(self._features)

    def build_properties(self, properties: PropertyDictionary, context: EncodingContext | None) -> None:
        super().build_properties(properties, context)
        properties.set("orient", self.orient)
        properties.set("feature", self._features or None)


class TooltipTrigger(StrEnum):
    item = "item"
    axis = "axis"
    none = "none"


class Tooltip(VisiblePart):
    """Tooltip settings; left out of skip-data passes."""

    tags = frozenset({PartTag.tooltip})
    capabilities = frozenset({Capability.single_instance, Capability.skip_eligible})

    def __init__(self, trigger: TooltipTrigger | None = None, formatter: str | None = None) -> None:
        super().__init__()
        self.trigger = trigger
        self.formatter = formatter

    def build_properties(self, properties: PropertyDictionary, context: EncodingContext | None) -> None:
        super().build_properties(properties, context)
        properties.set("trigger", self.trigger)
        properties.set("formatter", self.formatter)


class DefaultColors(Part):
    """Document colour cycle, padded from the built-in palette to eleven entries."""

    tags = frozenset({PartTag.colors})
    capabilities = frozenset({Capability.single_instance})
    emit_id = False

    def __init__(self, colors: Iterable[str] = (), *, palette: Sequence[str] = PALETTE) -> None:
        super().__init__()
        self.colors: list[str] = list(colors)
        self.palette = tuple(palette)

    def resolved(self) -> list[str]:
        """Return the user colours followed by palette colours not already present."""

        colors = [color for color in self.colors if color]
        for color in self.palette:
            if len(colors) >= PALETTE_SIZE:
                break
            if color not in colors:
                colors.append(color)
        return colors

    def encode_json(self, context: EncodingContext | None = None) -> str:
        return "[" + ",".join(encode_scalar(color) or "null" for color in self.resolved()) + "]"


class DefaultTextStyle(Part):
    tags = frozenset({PartTag.text_style})
    capabilities = frozenset({Capability.single_instance})
    emit_id = False

    def __init__(self, style: TextStyle | None = None) -> None:
        super().__init__()
        self.style = style or TextStyle()

    def build_properties(self, properties: PropertyDictionary, context: EncodingContext | None) -> None:
        properties.splice(self.style)
