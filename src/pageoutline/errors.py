# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Page Outline exception hierarchy.

The conversion core never raises: missing style, geometry or attributes
degrade to "no match". These errors come from the adapters around it
(configuration, HTML loading, live snapshot capture). All inherit from
OutlineError so callers can catch the base class for any failure.
"""

from __future__ import annotations


class OutlineError(Exception):
    """Base exception for all Page Outline errors."""


class ConfigError(OutlineError):
    """Invalid whitelist tables, whitelist file, or environment setting."""


class LoaderError(OutlineError):
    """Markup could not be parsed into a document."""


class SnapshotError(OutlineError):
    """Live document capture failed or returned a malformed payload."""


class ResourceExhaustionError(OutlineError):
    """Document exceeds resource limits (node count, nesting depth)."""

    def __init__(self, message: str, *, limit: int = 0, observed: int = 0) -> None:
        super().__init__(message)
        self.limit = limit
        self.observed = observed
