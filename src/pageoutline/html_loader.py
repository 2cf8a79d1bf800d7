# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Static HTML → Document via lxml, for offline conversion and tests.

There is no layout engine here, so the style/geometry oracle is
approximated:
  - inline ``style`` declarations supply display/visibility/opacity/position
  - the ``hidden`` attribute and head/script/style/template are display:none
  - geometry is unknown (``rect=None``): nothing is zero-size or off-screen
Live control state is taken from markup the way a freshly parsed page
reports it (``checked``/``value`` attributes, textarea text, selected option).
libxml2 runs with ``huge_tree`` so deep nesting reaches the ``max_depth``
guard instead of being truncated by the parser.
"""

from __future__ import annotations

import logging

import lxml.html
from lxml import etree

from . import ComputedStyle, Document, ElementNode, Node, OtherNode, TextNode, Viewport
from .config import DEFAULT_MAX_DEPTH, DEFAULT_MAX_NODES
from .errors import LoaderError, ResourceExhaustionError

logger = logging.getLogger(__name__)

# Elements the UA stylesheet renders as display:none
_UA_HIDDEN_TAGS = frozenset({"head", "script", "style", "template", "title", "meta", "link", "base"})

_STYLE_PROPS = ("display", "visibility", "opacity", "position")


def parse_inline_style(style_attr: str | None) -> dict[str, str]:
    """Extract the visibility-relevant declarations of a ``style`` attribute.

    Later declarations win, ``!important`` is dropped, values are lower-cased.
    """
    props: dict[str, str] = {}
    if not style_attr:
        return props
    for decl in style_attr.split(";"):
        name, sep, value = decl.partition(":")
        if not sep:
            continue
        name = name.strip().lower()
        if name not in _STYLE_PROPS:
            continue
        value = value.replace("!important", "").strip().lower()
        if value:
            props[name] = value
    return props


def _normalize_opacity(raw: str) -> str:
    """Serialize like a computed style does: ``0.0`` → ``0``, ``50%`` → ``0.5``."""
    try:
        number = float(raw[:-1]) / 100 if raw.endswith("%") else float(raw)
    except ValueError:
        return "1"
    number = min(max(number, 0.0), 1.0)
    return f"{number:g}"


def _computed_style(el: lxml.html.HtmlElement, tag: str) -> ComputedStyle:
    props = parse_inline_style(el.get("style"))
    display = props.get("display", "inline")
    if tag in _UA_HIDDEN_TAGS or el.get("hidden") is not None:
        display = "none"
    return ComputedStyle(
        display=display,
        visibility=props.get("visibility", "visible"),
        opacity=_normalize_opacity(props["opacity"]) if "opacity" in props else "1",
        position=props.get("position", "static"),
    )


def _selected_option_value(select: lxml.html.HtmlElement) -> str:
    options = list(select.iter("option"))
    if not options:
        return ""
    chosen = next((o for o in options if o.get("selected") is not None), options[0])
    value = chosen.get("value")
    return value if value is not None else " ".join(chosen.text_content().split())


class _Builder:
    """Recursive lxml → node conversion with resource guards."""

    def __init__(self, max_nodes: int, max_depth: int) -> None:
        self.max_nodes = max_nodes
        self.max_depth = max_depth
        self.count = 0
        self.mapping: dict[lxml.html.HtmlElement, ElementNode] = {}  # keys keep lxml proxies alive
        self.autofocus: ElementNode | None = None

    def _tick(self) -> None:
        self.count += 1
        if self.count > self.max_nodes:
            raise ResourceExhaustionError(
                f"document exceeds {self.max_nodes} nodes", limit=self.max_nodes, observed=self.count
            )

    def build(self, el, depth: int = 0) -> Node:
        self._tick()
        if not isinstance(el.tag, str):
            return OtherNode(description=type(el).__name__)
        if depth > self.max_depth:
            raise ResourceExhaustionError(
                f"document nesting exceeds depth {self.max_depth}", limit=self.max_depth, observed=depth
            )

        tag = el.tag.lower()
        node = ElementNode(tag=tag, attributes=dict(el.attrib), style=_computed_style(el, tag))
        self.mapping[el] = node

        if tag == "input":
            node.control_type = (el.get("type") or "text").strip().lower()
            if node.control_type in ("checkbox", "radio"):
                node.checked = el.get("checked") is not None
            else:
                node.value = el.get("value") or ""
        elif tag == "textarea":
            node.value = el.text_content()
        elif tag == "select":
            node.value = _selected_option_value(el)

        if self.autofocus is None and el.get("autofocus") is not None:
            self.autofocus = node

        children: list[Node] = []
        if el.text:
            children.append(TextNode(el.text))
        for child in el:
            children.append(self.build(child, depth + 1))
            if child.tail:
                children.append(TextNode(child.tail))
        node.children = children
        return node


def load_html(
    markup: str | bytes,
    *,
    viewport: Viewport | None = None,
    focus_xpath: str | None = None,
    max_nodes: int = DEFAULT_MAX_NODES,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Document:
    """Parse ``markup`` into a Document rooted at ``<body>``.

    Args:
        markup: HTML document or fragment.
        viewport: Viewport size (default 1280x800).
        focus_xpath: XPath of the element to mark focused; defaults to the
            first ``autofocus`` element.

    Raises:
        LoaderError: empty or unparseable markup, or a bad focus XPath.
        ResourceExhaustionError: node or depth limits exceeded.
    """
    try:
        doc = lxml.html.document_fromstring(markup, parser=lxml.html.HTMLParser(huge_tree=True))
    except (etree.ParserError, ValueError) as e:
        raise LoaderError(f"cannot parse HTML: {e}") from e

    body = doc.body
    if body is None:
        raise LoaderError("document has no <body>")

    builder = _Builder(max_nodes, max_depth)
    try:
        root = builder.build(body)
    except RecursionError as e:
        raise ResourceExhaustionError("document nesting too deep to load") from e
    assert isinstance(root, ElementNode)

    active = builder.autofocus
    if focus_xpath:
        try:
            found = doc.xpath(focus_xpath)
        except etree.XPathError as e:
            raise LoaderError(f"invalid focus XPath {focus_xpath!r}: {e}") from e
        active = next((builder.mapping[el] for el in found if el in builder.mapping), None)
        if active is None:
            logger.warning("Focus XPath %r matched no element inside <body>", focus_xpath)

    logger.debug("Loaded HTML: %d nodes", builder.count)
    return Document(root=root, viewport=viewport or Viewport(), active_element=active)
