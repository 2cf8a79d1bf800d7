# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Per-element annotation payload: whitelisted attributes, live value, focus, classes.

Attribute values are data-hygiene filtered before they reach the outline:
blank, over-long, ``data:`` and ``javascript:`` values are omitted silently.
"""

from __future__ import annotations

from . import Document, ElementNode
from .whitelist import DEFAULT_TABLES, WhitelistTables

ClassifiedAttributes = dict[str, str | bool]

_IMAGE_TAGS = frozenset({"img", "image"})
_CHECKABLE_TYPES = frozenset({"checkbox", "radio"})
_VALUE_TAGS = frozenset({"textarea", "select"})


def find_whitelisted_classes(
    element: ElementNode,
    tables: WhitelistTables = DEFAULT_TABLES,
    *,
    first_only: bool = False,
) -> list[str]:
    """Class tokens containing a whitelisted substring, in original casing and order."""
    class_attr = element.get("class")
    if not class_attr:
        return []

    matches: list[str] = []
    for token in class_attr.split():
        lowered = token.lower()
        if any(sub in lowered for sub in tables.class_substrings):
            if first_only:
                return [token]
            matches.append(token)
    return matches


def has_whitelisted_class(element: ElementNode, tables: WhitelistTables = DEFAULT_TABLES) -> bool:
    return bool(find_whitelisted_classes(element, tables, first_only=True))


def is_safe_value(value: str, max_len: int) -> bool:
    """Non-blank, within ``max_len``, and not an inline data or script URI."""
    if not value.strip() or len(value) > max_len:
        return False
    if value.startswith("data:"):
        return False
    return not value.lstrip().lower().startswith("javascript:")


def captured_value(element: ElementNode) -> bool | str | None:
    """Live form-control state.

    Checkbox/radio inputs report their checked flag, other inputs, textareas
    and selects their current value. Anything else returns None.
    """
    if element.tag == "input":
        if element.input_type in _CHECKABLE_TYPES:
            return bool(element.checked)
        return element.value or ""
    if element.tag in _VALUE_TAGS:
        return element.value or ""
    return None


def extract_attributes(
    document: Document,
    element: ElementNode,
    tables: WhitelistTables = DEFAULT_TABLES,
) -> ClassifiedAttributes:
    """Ordered attribute payload for an included element.

    Markup attributes come first in document order, then the live value,
    then the focus flag. Later keys overwrite earlier ones in place.
    """
    attributes: ClassifiedAttributes = {}

    for name, value in element.attributes.items():
        if name not in tables.attributes:
            continue
        if name == "href" and element.tag in _IMAGE_TAGS:
            continue
        if name in tables.boolean_attributes:
            attributes[name] = True
        elif is_safe_value(value, tables.max_attribute_length):
            attributes[name] = value

    live = captured_value(element)
    if isinstance(live, bool):
        if live:
            attributes["checked"] = True
    elif live is not None and live.strip():
        attributes["value"] = live

    if document.is_active(element):
        attributes["focused"] = True

    return attributes


def format_header(tag: str, attributes: ClassifiedAttributes, classes: list[str]) -> str:
    """``tag(key="v" flag).cls.cls`` without indentation or trailing text."""
    header = tag
    if attributes:
        parts = [name if value is True else f'{name}="{value}"' for name, value in attributes.items()]
        header += f"({' '.join(parts)})"
    if classes:
        header += "." + ".".join(classes)
    return header
