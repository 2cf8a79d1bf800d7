# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Inclusion decision: does a visible element deserve its own outline line?"""

from __future__ import annotations

from . import ElementNode, TextNode
from .extractor import has_whitelisted_class
from .whitelist import DEFAULT_TABLES, WhitelistTables


def has_direct_text(element: ElementNode) -> bool:
    """True if a direct text child carries non-whitespace content."""
    return any(isinstance(child, TextNode) and child.text.strip() for child in element.children)


def has_meaningful_attribute(element: ElementNode, tables: WhitelistTables = DEFAULT_TABLES) -> bool:
    """Boolean attributes count by presence, others need a non-blank value."""
    for name, value in element.attributes.items():
        if name not in tables.attributes:
            continue
        if name in tables.boolean_attributes or value.strip():
            return True
    return False


def should_include(element: ElementNode, tables: WhitelistTables = DEFAULT_TABLES) -> bool:
    if element.tag in tables.ignored_tags:
        return False
    return (
        element.tag in tables.tags
        or has_direct_text(element)
        or has_whitelisted_class(element, tables)
        or has_meaningful_attribute(element, tables)
    )
