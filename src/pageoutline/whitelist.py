# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Whitelist tables driving inclusion, attribute and class filtering.

Tables are immutable: they are built once (defaults or a YAML file) and
injected into the converter. Nothing mutates them during a conversion.

YAML format (every key optional, each replaces the default set):

    tags: [nav, main, button]
    attributes: [href, aria-label, checked]
    boolean_attributes: [checked]
    class_substrings: [active, error]
    ignored_tags: [html, body]
    skip_subtree_tags: [noscript]
    max_attribute_length: 150
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError

logger = logging.getLogger(__name__)

MAX_ATTRIBUTE_LENGTH = 150

# Structural containers that never get their own line
IGNORED_TAGS = frozenset({"html", "body"})

# Fallback content that must never reach the outline
SKIP_SUBTREE_TAGS = frozenset({"noscript"})

WHITELISTED_TAGS = frozenset(
    {
        # landmarks / sectioning
        "nav",
        "main",
        "header",
        "footer",
        "aside",
        "article",
        "section",
        # interactive
        "a",
        "form",
        "input",
        "textarea",
        "button",
        "select",
        "option",
        # headings
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        # lists
        "ul",
        "ol",
        "li",
        "dl",
        "dt",
        "dd",
        "caption",
        "pre",
        "code",
        "fieldset",
        "legend",
        "dialog",
        "details",
        "summary",
        "iframe",
        "br",
        "hr",
    }
)

# Matched case-insensitively as substrings of individual class tokens
WHITELISTED_CLASS_SUBSTRINGS = frozenset(
    {
        # direction / affordance icons
        "up",
        "down",
        "left",
        "right",
        "arrow",
        "caret",
        "chevron",
        "star",
        "increase",
        "decrease",
        "plus",
        "minus",
        "expand",
        "collapse",
        "open",
        "close",
        # validation state
        "success",
        "error",
        "warning",
        "valid",
        "invalid",
        # selection / pagination state
        "active",
        "inactive",
        "enabled",
        "disabled",
        "next",
        "prev",
        "previous",
        "first",
        "last",
    }
)

BOOLEAN_ATTRIBUTES = frozenset({"checked", "selected", "disabled", "readonly", "required", "focused"})

WHITELISTED_ATTRIBUTES = (
    frozenset(
        {
            "href",
            "target",
            "download",
            "action",
            "method",
            "type",
            "name",
            "value",
            "placeholder",
            "aria-label",
            "aria-expanded",
            "aria-hidden",
            "aria-controls",
            "aria-current",
            "aria-describedby",
            "aria-disabled",
            "aria-haspopup",
            "aria-invalid",
            "aria-labelledby",
            "aria-live",
            "aria-pressed",
            "aria-required",
            "aria-selected",
            "aria-checked",
            "aria-valuenow",
            "aria-valuemin",
            "aria-valuemax",
            "role",
            "title",
            "alt",
            "data-testid",
        }
    )
    | BOOLEAN_ATTRIBUTES
)


@dataclass(frozen=True, slots=True)
class WhitelistTables:
    """The five static sets plus the attribute length cap."""

    ignored_tags: frozenset[str] = IGNORED_TAGS
    skip_subtree_tags: frozenset[str] = SKIP_SUBTREE_TAGS
    tags: frozenset[str] = WHITELISTED_TAGS
    attributes: frozenset[str] = WHITELISTED_ATTRIBUTES
    boolean_attributes: frozenset[str] = BOOLEAN_ATTRIBUTES
    class_substrings: frozenset[str] = WHITELISTED_CLASS_SUBSTRINGS
    max_attribute_length: int = MAX_ATTRIBUTE_LENGTH

    def __post_init__(self) -> None:
        # class tokens are lower-cased before matching
        object.__setattr__(self, "class_substrings", frozenset(s.lower() for s in self.class_substrings))
        stray = self.boolean_attributes - self.attributes
        if stray:
            raise ConfigError(f"boolean attributes not in the attribute whitelist: {sorted(stray)}")
        if self.max_attribute_length < 1:
            raise ConfigError(f"max_attribute_length must be >= 1, got {self.max_attribute_length}")
        if "" in self.class_substrings:
            # an empty substring would match every class token
            raise ConfigError("class_substrings must not contain an empty string")


DEFAULT_TABLES = WhitelistTables()


class _WhitelistFile(BaseModel):
    """Schema of a whitelist YAML file."""

    model_config = ConfigDict(extra="forbid")

    ignored_tags: list[str] | None = None
    skip_subtree_tags: list[str] | None = None
    tags: list[str] | None = None
    attributes: list[str] | None = None
    boolean_attributes: list[str] | None = None
    class_substrings: list[str] | None = None
    max_attribute_length: int | None = Field(None, ge=1)


def tables_from_mapping(data: dict, base: WhitelistTables = DEFAULT_TABLES) -> WhitelistTables:
    """Build tables from a plain mapping, replacing only the keys present."""
    try:
        parsed = _WhitelistFile.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid whitelist: {e}") from e

    overrides: dict = {}
    for name, values in parsed.model_dump(exclude_none=True).items():
        if name == "max_attribute_length":
            overrides[name] = values
        else:
            overrides[name] = frozenset(v.strip().lower() for v in values if v.strip())
    return dataclasses.replace(base, **overrides)


def load_whitelist(path: str | Path, base: WhitelistTables = DEFAULT_TABLES) -> WhitelistTables:
    """Load whitelist tables from a YAML file.

    Raises:
        ConfigError: unreadable file, invalid YAML, or a schema violation.
    """
    p = Path(path)
    try:
        with open(p, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"cannot read whitelist file {p}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in whitelist file {p}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"whitelist file {p} must contain a mapping, got {type(data).__name__}")

    tables = tables_from_mapping(data, base)
    logger.debug("Loaded whitelist %s (%d keys overridden)", p, len(data))
    return tables
