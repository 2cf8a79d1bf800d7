# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Shared test configuration and fixtures."""

try:
    import pageoutline  # noqa: F401
except ImportError:
    raise ImportError("pageoutline is not installed. Run: pip install -e '.[dev]'") from None

import pytest

from pageoutline.converter import OutlineConverter
from pageoutline.whitelist import DEFAULT_TABLES


@pytest.fixture
def converter() -> OutlineConverter:
    return OutlineConverter(DEFAULT_TABLES)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep PAGEOUTLINE_* settings from the developer shell out of tests."""
    import os

    for name in list(os.environ):
        if name.startswith("PAGEOUTLINE_"):
            monkeypatch.delenv(name, raising=False)
