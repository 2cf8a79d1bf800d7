# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Document snapshot → indented outline text.

Per element, in order:
  1. invisible            → pruned with its whole subtree
  2. subtree-skip tag     → pruned with its whole subtree
  3. included             → header line, then
       text-only children → text appended on the header line
       mixed children     → "| text" lines interleaved with child blocks at depth+1
  4. not included         → element children at the same depth, text dropped

Output format:
    h1 Hello World
    section
      p This is an example.
      button(aria-label="Next page") Next page
"""

from __future__ import annotations

import logging
import time

from . import Document, ElementNode, Node, TextNode
from .classifier import should_include
from .errors import ResourceExhaustionError
from .extractor import extract_attributes, find_whitelisted_classes, format_header
from .visibility import is_visible
from .whitelist import DEFAULT_TABLES, WhitelistTables

logger = logging.getLogger(__name__)


def _only_text_children(element: ElementNode) -> bool:
    return all(isinstance(child, TextNode) for child in element.children)


class OutlineConverter:
    """Stateless converter bound to one set of whitelist tables."""

    def __init__(self, tables: WhitelistTables = DEFAULT_TABLES, indent: str = "  ") -> None:
        self.tables = tables
        self.indent = indent

    def convert(self, document: Document) -> str:
        """Outline of ``document.root`` with surrounding whitespace stripped.

        Raises:
            ResourceExhaustionError: the tree is nested deeper than the
                interpreter stack allows.
        """
        t0 = time.perf_counter()
        try:
            outline = self.convert_node(document, document.root).strip()
        except RecursionError as e:
            raise ResourceExhaustionError("document nesting too deep to outline") from e
        logger.debug(
            "Outline converted: %d lines, %d chars in %.1fms",
            outline.count("\n") + 1 if outline else 0,
            len(outline),
            (time.perf_counter() - t0) * 1000,
        )
        return outline

    def convert_node(self, document: Document, node: Node, depth: int = 0) -> str:
        if not isinstance(node, ElementNode):
            return ""
        if not is_visible(document, node):
            return ""
        if node.tag in self.tables.skip_subtree_tags:
            return ""

        if not should_include(node, self.tables):
            parts: list[str] = []
            for child in node.children:
                if isinstance(child, ElementNode):
                    parts.append(self.convert_node(document, child, depth))
            return "".join(parts)

        header = format_header(
            node.tag,
            extract_attributes(document, node, self.tables),
            find_whitelisted_classes(node, self.tables),
        )
        line = self.indent * depth + header

        if _only_text_children(node):
            text = " ".join(t for t in (child.text.strip() for child in node.children) if t)
            return f"{line} {text}\n" if text else f"{line}\n"

        return line + "\n" + self._convert_mixed(document, node, depth + 1)

    def _convert_mixed(self, document: Document, element: ElementNode, depth: int) -> str:
        """Children of an included element with text and elements interleaved."""
        parts: list[str] = []
        pending: list[str] = []
        text_prefix = self.indent * depth + "| "

        for child in element.children:
            if isinstance(child, TextNode):
                text = child.text.strip()
                if text:
                    pending.append(text)
            elif isinstance(child, ElementNode):
                if pending:
                    parts.append(text_prefix + " ".join(pending) + "\n")
                    pending = []
                parts.append(self.convert_node(document, child, depth))

        if pending:
            parts.append(text_prefix + " ".join(pending) + "\n")
        return "".join(parts)


def convert_document(document: Document, tables: WhitelistTables | None = None) -> str:
    """Convert with a throwaway converter (default tables unless given)."""
    return OutlineConverter(tables or DEFAULT_TABLES).convert(document)
