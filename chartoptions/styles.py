"""Small property groups shared by several parts.

`Position`, `Padding` and `Border` are spliced into their owner's object;
`TextStyle` is written as a nested object under its owner's key.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .properties import PropertyDictionary, PropertyObject

if TYPE_CHECKING:
    from .context import EncodingContext

Size = int | float | str


class Position(PropertyObject):
    """Placement inside the chart area (pixels, or strings such as "10%" / "center")."""

    def __init__(
        self,
        *,
        left: Size | None = None,
        right: Size | None = None,
        top: Size | None = None,
        bottom: Size | None = None,
        width: Size | None = None,
        height: Size | None = None,
    ) -> None:
        super().__init__()
        self.left = left
        self.right = right
        self.top = top
        self.bottom = bottom
        self.width = width
        self.height = height

    def center(self) -> Position:
        self.left = "center"
        self.right = None
        return self

    def build_properties(self, properties: PropertyDictionary, context: EncodingContext | None) -> None:
        properties.set("left", self.left)
        properties.set("right", self.right)
        properties.set("top", self.top)
        properties.set("bottom", self.bottom)
        properties.set("width", self.width)
        properties.set("height", self.height)


class Padding(PropertyObject):
    """Inner padding written as `"padding":[top,right,bottom,left]`."""

    def __init__(self, top: int = 5, right: int | None = None, bottom: int | None = None, left: int | None = None) -> None:
        super().__init__()
        self.top = top
        self.right = top if right is None else right
        self.bottom = top if bottom is None else bottom
        self.left = self.right if left is None else left

    def build_properties(self, properties: PropertyDictionary, context: EncodingContext | None) -> None:
        properties.set("padding", [self.top, self.right, self.bottom, self.left])


class Border(PropertyObject):
    def __init__(self, *, width: int | None = None, color: str | None = None, radius: int | None = None) -> None:
        super().__init__()
        self.width = width
        self.color = color
        self.radius = radius

    def build_properties(self, properties: PropertyDictionary, context: EncodingContext | None) -> None:
        properties.set("borderWidth", self.width, lambda width: width > 0)
        properties.set("borderColor", self.color)
        properties.set("borderRadius", self.radius, lambda radius: radius > 0)


class TextStyle(PropertyObject):
    """Font and colour settings for a piece of text."""

    def __init__(
        self,
        *,
        color: str | None = None,
        font_size: int | None = None,
        font_weight: str | int | None = None,
        font_family: str | None = None,
        font_style: str | None = None,
    ) -> None:
        super().__init__()
        self.color = color
        self.font_size = font_size
        self.font_weight = font_weight
        self.font_family = font_family
        self.font_style = font_style

    def build_properties(self, properties: PropertyDictionary, context: EncodingContext | None) -> None:
        properties.set("color", self.color)
        properties.set("fontStyle", self.font_style)
        properties.set("fontWeight", self.font_weight)
        properties.set("fontFamily", self.font_family)
        properties.set("fontSize", self.font_size, lambda size: size > 0)
