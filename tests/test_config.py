# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for pageoutline.config — environment settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from pageoutline.config import DEFAULT_MAX_DEPTH, DEFAULT_MAX_NODES, OutlineSettings
from pageoutline.errors import ConfigError
from pageoutline.whitelist import DEFAULT_TABLES


class TestFromEnv:
    def test_defaults(self):
        s = OutlineSettings.from_env({})
        assert s.log_level == "INFO"
        assert s.log_json is False
        assert s.whitelist_path is None
        assert s.max_nodes == DEFAULT_MAX_NODES
        assert s.max_depth == DEFAULT_MAX_DEPTH

    def test_values(self):
        s = OutlineSettings.from_env(
            {
                "PAGEOUTLINE_LOG_LEVEL": "debug",
                "PAGEOUTLINE_LOG_JSON": "Yes",
                "PAGEOUTLINE_WHITELIST": "/etc/wl.yaml",
                "PAGEOUTLINE_MAX_NODES": "1000",
                "PAGEOUTLINE_MAX_DEPTH": " 64 ",
            }
        )
        assert s.log_level == "DEBUG"
        assert s.log_json is True
        assert s.whitelist_path == Path("/etc/wl.yaml")
        assert s.max_nodes == 1000
        assert s.max_depth == 64

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("PAGEOUTLINE_MAX_NODES", "7")
        assert OutlineSettings.from_env().max_nodes == 7

    @pytest.mark.parametrize("raw", ["many", "0", "-3", "1.5"])
    def test_invalid_int(self, raw):
        with pytest.raises(ConfigError, match="PAGEOUTLINE_MAX_NODES"):
            OutlineSettings.from_env({"PAGEOUTLINE_MAX_NODES": raw})

    def test_json_falsy(self):
        assert OutlineSettings.from_env({"PAGEOUTLINE_LOG_JSON": "0"}).log_json is False


class TestLoadTables:
    def test_default_tables(self):
        assert OutlineSettings().load_tables() is DEFAULT_TABLES

    def test_whitelist_file(self, tmp_path):
        path = tmp_path / "wl.yaml"
        path.write_text("tags: [table]\n")
        assert OutlineSettings(whitelist_path=path).load_tables().tags == {"table"}
