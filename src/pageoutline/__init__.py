# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Page Outline: compact indented outline of a rendered document for AI agents.

Converts a rendered document snapshot into a Pug-like outline containing only
visible, semantically interesting elements:

    h1 Hello World
    section
      p This is an example.
      button(aria-label="Next page") Next page

This module holds the read-only node model shared by the converter and the
host adapters (lxml loader, Playwright snapshot).
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import StrEnum


class NodeKind(StrEnum):
    """Node variant tag."""

    ELEMENT = "element"
    TEXT = "text"
    OTHER = "other"  # comment, processing instruction, doctype


@dataclass(frozen=True, slots=True)
class ComputedStyle:
    """Subset of the computed style consulted for visibility."""

    display: str = "inline"
    visibility: str = "visible"
    opacity: str = "1"  # exact string as reported by the style engine
    position: str = "static"


@dataclass(frozen=True, slots=True)
class Rect:
    """Viewport-relative bounding box."""

    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def is_zero_size(self) -> bool:
        return self.width == 0 and self.height == 0


@dataclass(frozen=True, slots=True)
class Viewport:
    width: float = 1280
    height: float = 800


@dataclass(eq=False, slots=True)
class TextNode:
    text: str

    kind = NodeKind.TEXT


@dataclass(eq=False, slots=True)
class OtherNode:
    """Any node that is neither element nor text. Always skipped."""

    description: str = ""

    kind = NodeKind.OTHER


@dataclass(eq=False, slots=True)
class ElementNode:
    """A rendered element with its style, geometry and live control state.

    ``eq=False`` keeps identity semantics: the active element is matched by
    ``is``, never by structural equality.
    """

    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)
    style: ComputedStyle | None = None  # None: style unknown, treated as initial values
    rect: Rect | None = None  # None: geometry unknown, never zero-size or off-screen
    checked: bool | None = None  # live checked state (checkbox/radio)
    value: str | None = None  # live value (input/textarea/select)
    control_type: str | None = None  # live input.type

    kind = NodeKind.ELEMENT

    def __post_init__(self) -> None:
        self.tag = self.tag.lower()

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.attributes.get(name, default)

    @property
    def computed_style(self) -> ComputedStyle:
        return self.style if self.style is not None else ComputedStyle()

    @property
    def input_type(self) -> str:
        """Live ``type`` of an input, lower-cased (``text`` when unspecified)."""
        if self.control_type:
            return self.control_type.lower()
        return (self.attributes.get("type") or "text").strip().lower()

    def element_children(self) -> list[ElementNode]:
        return [c for c in self.children if isinstance(c, ElementNode)]

    def iter_elements(self):
        """Depth-first, document-order walk over this element and its descendants."""
        stack: list[ElementNode] = [self]
        while stack:
            el = stack.pop()
            yield el
            stack.extend(reversed(el.element_children()))


Node = ElementNode | TextNode | OtherNode


@dataclass(frozen=True)
class Document:
    """A document snapshot: root container, viewport, and the focused element."""

    root: ElementNode
    viewport: Viewport = field(default_factory=Viewport)
    active_element: ElementNode | None = None

    def is_active(self, element: ElementNode) -> bool:
        return self.active_element is not None and self.active_element is element

    def with_focus(self, element: ElementNode | None) -> Document:
        """Return a copy of this document with ``element`` focused."""
        return dataclasses.replace(self, active_element=element)

    @property
    def element_count(self) -> int:
        return sum(1 for _ in self.root.iter_elements())


__all__ = [
    "ComputedStyle",
    "Document",
    "ElementNode",
    "Node",
    "NodeKind",
    "OtherNode",
    "Rect",
    "TextNode",
    "Viewport",
]
