# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Rendered-visibility heuristic over style and geometry.

Leaf module with no side effects. An element judged invisible prunes its
whole subtree in the converter.
"""

from __future__ import annotations

from . import Document, ElementNode, Node, Rect, Viewport

_OUT_OF_FLOW = frozenset({"absolute", "fixed"})


def _is_off_screen(rect: Rect, viewport: Viewport) -> bool:
    return (
        rect.left + rect.width < 0
        or rect.top + rect.height < 0
        or rect.left > viewport.width
        or rect.top > viewport.height
    )


def _has_visible_positioned_child(document: Document, element: ElementNode) -> bool:
    """Zero-size wrappers often host absolutely positioned overlays.

    Only direct children are inspected.
    """
    for child in element.element_children():
        if child.computed_style.position in _OUT_OF_FLOW and is_visible(document, child):
            return True
    return False


def is_visible(document: Document, node: Node) -> bool:
    """True if ``node`` should be treated as rendered.

    Non-element nodes and the root container are always visible. Unknown
    style counts as initial CSS values; unknown geometry is never zero-size
    or off-screen.
    """
    if not isinstance(node, ElementNode):
        return True
    if node is document.root or node.tag == "body":
        return True

    style = node.computed_style
    rect = node.rect
    zero_size = rect is not None and rect.is_zero_size

    if zero_size and _has_visible_positioned_child(document, node):
        return True

    if style.display == "none" or style.visibility == "hidden":
        return False
    if node.get("aria-hidden") == "true":
        return False
    if zero_size:
        return False
    if style.opacity == "0":
        return False
    if style.position in _OUT_OF_FLOW and rect is not None and _is_off_screen(rect, document.viewport):
        return False
    return True
