# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Live document capture from a Playwright page.

One ``page.evaluate`` round-trip serializes the rendered body (tags,
attributes in document order, computed style, bounding box, live control
state, focus) into JSON; ``document_from_snapshot`` turns that payload into
a Document. The conversion itself then runs offline over the snapshot.

Payload shape:
    {"viewport": {"width": 1280, "height": 800},
     "root": {"k": "e", "tag": "body", "attrs": [["class", "x"]],
              "style": {"display": ..., "visibility": ..., "opacity": ..., "position": ...},
              "rect": {"left": 0, "top": 0, "width": 1280, "height": 600},
              "type": "text", "checked": false, "value": "", "focused": false,
              "children": [{"k": "t", "text": "..."}, {"k": "o"}, ...]}}
"""

from __future__ import annotations

import logging
from typing import Any

from playwright.async_api import Page

from . import ComputedStyle, Document, ElementNode, Node, OtherNode, Rect, TextNode, Viewport
from .config import DEFAULT_MAX_DEPTH, DEFAULT_MAX_NODES
from .errors import ResourceExhaustionError, SnapshotError

logger = logging.getLogger(__name__)

# Raised by the JS walker when the page exceeds maxNodes
_NODE_LIMIT_SENTINEL = "PAGEOUTLINE_NODE_LIMIT"

# ---------------------------------------------------------------------------
# JS snapshot walker (node cap is enforced JS-side too)
# ---------------------------------------------------------------------------

_SNAPSHOT_JS = """(maxNodes) => {
  let count = 0;
  const active = document.activeElement;
  function walk(node) {
    if (++count > maxNodes) throw new Error('PAGEOUTLINE_NODE_LIMIT: snapshot exceeds ' + maxNodes + ' nodes');
    if (node.nodeType === Node.TEXT_NODE) return {k: 't', text: node.textContent};
    if (node.nodeType !== Node.ELEMENT_NODE) return {k: 'o'};
    const style = window.getComputedStyle(node);
    const rect = node.getBoundingClientRect();
    const tag = node.tagName.toLowerCase();
    const out = {
      k: 'e',
      tag: tag,
      attrs: Array.from(node.attributes, a => [a.name, a.value]),
      style: {
        display: style.display,
        visibility: style.visibility,
        opacity: style.opacity,
        position: style.position
      },
      rect: {left: rect.left, top: rect.top, width: rect.width, height: rect.height},
      focused: node === active,
      children: Array.from(node.childNodes, walk)
    };
    if (tag === 'input') {
      out.type = (node.type || 'text').toLowerCase();
      out.checked = !!node.checked;
      out.value = node.value;
    } else if (tag === 'textarea' || tag === 'select') {
      out.value = node.value;
    }
    return out;
  }
  if (!document.body) return null;
  return {
    viewport: {width: window.innerWidth, height: window.innerHeight},
    root: walk(document.body)
  };
}"""


# ---------------------------------------------------------------------------
# Payload parsing (pure function)
# ---------------------------------------------------------------------------


def _as_str(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default


def _as_float(value: Any) -> float:
    return float(value) if isinstance(value, int | float) and not isinstance(value, bool) else 0.0


def _parse_style(raw: Any) -> ComputedStyle | None:
    if not isinstance(raw, dict):
        return None
    return ComputedStyle(
        display=_as_str(raw.get("display"), "inline"),
        visibility=_as_str(raw.get("visibility"), "visible"),
        opacity=_as_str(raw.get("opacity"), "1"),
        position=_as_str(raw.get("position"), "static"),
    )


def _parse_rect(raw: Any) -> Rect | None:
    if not isinstance(raw, dict):
        return None
    return Rect(
        left=_as_float(raw.get("left")),
        top=_as_float(raw.get("top")),
        width=_as_float(raw.get("width")),
        height=_as_float(raw.get("height")),
    )


def _parse_attrs(raw: Any) -> dict[str, str]:
    attrs: dict[str, str] = {}
    if not isinstance(raw, list):
        return attrs
    for pair in raw:
        if isinstance(pair, list | tuple) and len(pair) == 2 and isinstance(pair[0], str):
            attrs[pair[0]] = pair[1] if isinstance(pair[1], str) else ""
    return attrs


class _SnapshotParser:
    def __init__(self, max_nodes: int, max_depth: int) -> None:
        self.max_nodes = max_nodes
        self.max_depth = max_depth
        self.count = 0
        self.active: ElementNode | None = None

    def parse(self, raw: Any, depth: int = 0) -> Node:
        self.count += 1
        if self.count > self.max_nodes:
            raise ResourceExhaustionError(
                f"snapshot exceeds {self.max_nodes} nodes", limit=self.max_nodes, observed=self.count
            )
        if not isinstance(raw, dict):
            raise SnapshotError(f"malformed snapshot node: {type(raw).__name__}")

        kind = raw.get("k")
        if kind == "t":
            return TextNode(_as_str(raw.get("text"), ""))
        if kind != "e":
            return OtherNode()

        if depth > self.max_depth:
            raise ResourceExhaustionError(
                f"snapshot nesting exceeds depth {self.max_depth}", limit=self.max_depth, observed=depth
            )
        tag = raw.get("tag")
        if not isinstance(tag, str) or not tag:
            raise SnapshotError("snapshot element without a tag name")

        value = raw.get("value")
        checked = raw.get("checked")
        node = ElementNode(
            tag=tag,
            attributes=_parse_attrs(raw.get("attrs")),
            style=_parse_style(raw.get("style")),
            rect=_parse_rect(raw.get("rect")),
            checked=checked if isinstance(checked, bool) else None,
            value=value if isinstance(value, str) else None,
            control_type=_as_str(raw.get("type"), "") or None,
        )
        if raw.get("focused") is True and self.active is None:
            self.active = node

        children = raw.get("children") or []
        if not isinstance(children, list):
            raise SnapshotError(f"snapshot children of <{tag}> is not a list")
        for child in children:
            node.children.append(self.parse(child, depth + 1))
        return node


def document_from_snapshot(
    raw: Any,
    *,
    max_nodes: int = DEFAULT_MAX_NODES,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Document:
    """Build a Document from a snapshot payload.

    Raises:
        SnapshotError: payload is not a snapshot or its root is not an element.
        ResourceExhaustionError: node or depth limits exceeded.
    """
    if not isinstance(raw, dict) or "root" not in raw:
        raise SnapshotError("snapshot payload must be an object with a 'root' key")

    parser = _SnapshotParser(max_nodes, max_depth)
    try:
        root = parser.parse(raw["root"])
    except RecursionError as e:
        raise ResourceExhaustionError("snapshot nesting too deep to parse") from e
    if not isinstance(root, ElementNode):
        raise SnapshotError("snapshot root is not an element")

    vp = raw.get("viewport")
    viewport = Viewport()
    if isinstance(vp, dict):
        viewport = Viewport(
            width=_as_float(vp.get("width")) or viewport.width,
            height=_as_float(vp.get("height")) or viewport.height,
        )
    return Document(root=root, viewport=viewport, active_element=parser.active)


# ---------------------------------------------------------------------------
# Capture
# ---------------------------------------------------------------------------


async def capture_document(
    page: Page,
    *,
    max_nodes: int = DEFAULT_MAX_NODES,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Document:
    """Snapshot the rendered body of ``page``.

    Raises:
        SnapshotError: evaluation failed, or the page has no body.
        ResourceExhaustionError: node or depth limits exceeded.
    """
    try:
        raw = await page.evaluate(_SNAPSHOT_JS, max_nodes)
    except Exception as e:
        if _NODE_LIMIT_SENTINEL in str(e):
            raise ResourceExhaustionError(f"snapshot exceeds {max_nodes} nodes", limit=max_nodes) from e
        raise SnapshotError(f"document snapshot failed: {e}") from e
    if raw is None:
        raise SnapshotError("page has no <body> to snapshot")

    document = document_from_snapshot(raw, max_nodes=max_nodes, max_depth=max_depth)
    logger.debug("Captured snapshot: %d elements", document.element_count)
    return document
