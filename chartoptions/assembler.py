"""Document assembler: validate, assign serials, encode.

One call to `DocumentAssembler.assemble` is one pass over the caller's
component graph:

1. collect the parts contributed by the components and the document-level parts;
2. validate every part (data parts of a skip-data pass must have been sent before);
3. assign category serials and order the parts by serial;
4. decide dataset vs inline encoding and lay out the dataset blocks;
5. write every section in category priority order, then hoist function strings.

Any error aborts the pass before output is produced; only a successful pass
is committed for use by later skip-data passes.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from .codec import dumps_document, encode_key, encode_scalar, loads_document
from .components import DefaultColors, DefaultTextStyle, Legend, Title, Toolbox, Tooltip
from .context import EncodingContext
from .data import DataProvider
from .dataset import DataConsumer, DatasetGrouping, DatasetLayout, plan_dataset
from .encoders import ENCODERS
from .functions import hoist_functions
from .parts import Capability, Component, Part, PartId, PartTag
from .registry import PartRegistry
from .serials import SerialArena, SerialState, assign_serials
from .settings import AssemblySettings
from .styles import TextStyle

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommittedPass:
    """What later skip-data passes need from the last successful pass."""

    states: Mapping[PartId, SerialState] = field(default_factory=dict)
    grouping: DatasetGrouping = DatasetGrouping.element_count
    layout: DatasetLayout | None = None

    @property
    def dataset_mode(self) -> bool:
        return self.layout is not None


class DocumentAssembler:
    """Turns an ordered list of components into one option document.

    A legend is created by default; title, tooltip, toolbox, default colours and
    default text style are created on first access.

    Args:
        settings: Assembly options; `AssemblySettings()` when omitted.
    """

    def __init__(self, settings: AssemblySettings | None = None) -> None:
        self.settings = settings or AssemblySettings()
        self.background: str | None = None
        self._components: list[Component] = []
        self._title: Title | None = None
        self._legend: Legend | None = Legend()
        self._tooltip: Tooltip | None = None
        self._toolbox: Toolbox | None = None
        self._default_colors: DefaultColors | None = None
        self._default_text_style: DefaultTextStyle | None = None
        self._committed: CommittedPass | None = None
        self._assembling = False

    @property
    def components(self) -> tuple[Component, ...]:
        """Top-level components in the order they were added."""

        return tuple(self._components)

    @property
    def committed(self) -> CommittedPass | None:
        """State of the last successful pass, or None before the first one."""

        return self._committed

    def add(self, *components: Component) -> DocumentAssembler:
        """Append components, ignoring None and components already present.

        Returns:
            This assembler, for chaining.
        """

        for component in components:
            if component is not None and component not in self._components:
                self._components.append(component)
        return self

    def remove(self, *components: Component) -> DocumentAssembler:
        """Remove components; unknown components are ignored."""

        for component in components:
            if component in self._components:
                self._components.remove(component)
        return self

    def remove_all(self) -> DocumentAssembler:
        """Remove every component but keep the committed pass."""

        self._components.clear()
        return self

    def clear(self) -> None:
        """Remove every component and forget the committed pass."""

        self._components.clear()
        self._committed = None

    def get_title(self, text: str = "") -> Title:
        """Return the document title, creating it with `text` on first access."""

        if self._title is None:
            self._title = Title(text)
        return self._title

    def set_title(self, title: Title | None) -> None:
        """Replace the document title; None removes it."""

        self._title = title

    def get_legend(self) -> Legend:
        """Return the legend, creating one if it was removed."""

        if self._legend is None:
            self._legend = Legend()
        return self._legend

    def set_legend(self, legend: Legend | None) -> None:
        self._legend = legend

    def get_tooltip(self) -> Tooltip:
        """Return the tooltip, creating it on first access."""

        if self._tooltip is None:
            self._tooltip = Tooltip()
        return self._tooltip

    def set_tooltip(self, tooltip: Tooltip | None) -> None:
        self._tooltip = tooltip

    def get_toolbox(self) -> Toolbox:
        """Return the toolbox, creating it on first access."""

        if self._toolbox is None:
            self._toolbox = Toolbox()
        return self._toolbox

    def set_toolbox(self, toolbox: Toolbox | None) -> None:
        self._toolbox = toolbox

    def get_default_colors(self) -> DefaultColors:
        """Return the document colour cycle, seeded from the settings palette."""

        if self._default_colors is None:
            self._default_colors = DefaultColors(palette=self.settings.default_colors)
        return self._default_colors

    def get_default_text_style(self) -> TextStyle:
        """Return the document-wide text style for in-place editing."""

        if self._default_text_style is None:
            self._default_text_style = DefaultTextStyle()
        return self._default_text_style.style

    def root_parts(self) -> list[Part | None]:
        """Document-level parts, added after every component's parts."""

        text_style = self._default_text_style
        if text_style is not None and text_style.style.is_empty():
            text_style = None
        return [self._default_colors, text_style, self._title, self._tooltip, self._legend, self._toolbox]

    def assemble(self, *, skip_data: bool = False) -> str:
        """Run one pass and return the option document as JSON text.

        Args:
            skip_data: Leave bulk data out, relying on what the consumer received
                in earlier passes. Ignored on the first pass.

        Returns:
            The JSON document.

        Raises:
            StructuralValidationError: When the component graph is invalid.
            EncodingError: When a value or raw fragment cannot be encoded.
            RuntimeError: When called again while a pass is running.
        """

        if self._assembling:
            raise RuntimeError("DocumentAssembler.assemble() is already running for this assembler.")
        self._assembling = True
        try:
            return self._assemble(skip_data)
        finally:
            self._assembling = False

    def _assemble(self, skip_data: bool) -> str:
        committed = self._committed
        if skip_data and committed is None:
            logger.debug("Skip-data requested before any full pass; assembling with data")
            skip_data = False
        logger.debug("Assembling %d component(s), skip_data=%s", len(self._components), skip_data)

        for component in self._components:
            component.skipping_data(skip_data)
        registry = PartRegistry.collect(self._components, self.root_parts(), skipping_data=skip_data)

        arena = SerialArena(committed.states if committed is not None else None)
        for part in registry:
            if skip_data and part.has(Capability.carries_data):
                arena.exclude(part)
                continue
            part.validate(registry)
            arena.reset(part)

        grouping = committed.grouping if skip_data and committed is not None else self.settings.dataset_grouping
        parts = assign_serials(registry.parts, arena, ENCODERS, grouping=grouping)

        if skip_data and committed is not None:
            layout = committed.layout
        else:
            providers = [part for part in parts if isinstance(part, DataProvider)]
            consumers: list[DataConsumer] = [part for part in parts if PartTag.series in part.tags]  # type: ignore[misc]
            layout = plan_dataset(providers, consumers, arena, grouping=grouping)

        context = EncodingContext(parts, arena, skipping_data=skip_data, grouping=grouping, layout=layout)
        document = loads_document(self._encode(context))
        if self.settings.hoist_functions:
            hoist_functions(document)
        output = dumps_document(document, indent=self.settings.indent)

        self._committed = CommittedPass(states=arena.snapshot(), grouping=grouping, layout=layout)
        logger.debug("Assembled option document: %s", output)
        return output

    def _encode(self, context: EncodingContext) -> str:
        members: list[str] = []
        background = encode_scalar(self.background)
        if background is not None:
            members.append(encode_key("backgroundColor") + ":" + background)
        for encoder in ENCODERS:
            member = encoder.encode(context)
            if member:
                members.append(member)
        return "{" + ",".join(members) + "}"
