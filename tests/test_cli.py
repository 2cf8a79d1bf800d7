# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Tests for the pageoutline CLI (convert path; capture with a patched browser)."""

from __future__ import annotations

import argparse
import io
import logging
from unittest.mock import AsyncMock, patch

import pytest
import structlog

from pageoutline import Viewport
from pageoutline.cli import build_parser, main, parse_viewport
from pageoutline.errors import SnapshotError
from pageoutline.html_loader import load_html

_PAGE = "<html><body><h1>Hello World</h1><form><input type='text' id='q' placeholder='Search...'></form></body></html>"


@pytest.fixture(autouse=True)
def _reset_logging():
    root = logging.getLogger()
    old_handlers = root.handlers[:]
    old_level = root.level
    yield
    root.handlers = old_handlers
    root.setLevel(old_level)
    structlog.reset_defaults()


@pytest.fixture
def page_file(tmp_path):
    path = tmp_path / "page.html"
    path.write_text(_PAGE)
    return path


class TestParseViewport:
    def test_valid(self):
        assert parse_viewport("800x600") == Viewport(800, 600)
        assert parse_viewport("800X600") == Viewport(800, 600)

    @pytest.mark.parametrize("raw", ["800", "axb", "0x600", "-1x5"])
    def test_invalid(self, raw):
        with pytest.raises(argparse.ArgumentTypeError):
            parse_viewport(raw)


class TestConvert:
    def test_convert_file(self, page_file, capsys):
        main(["convert", str(page_file)])
        out = capsys.readouterr().out
        assert out == 'h1 Hello World\nform\n  input(type="text" placeholder="Search...")\n'

    def test_convert_with_focus(self, page_file, capsys):
        main(["convert", str(page_file), "--focus", "//input[@id='q']"])
        assert 'input(type="text" placeholder="Search..." focused)' in capsys.readouterr().out

    def test_convert_stdin(self, monkeypatch, capsys):
        fake_stdin = io.TextIOWrapper(io.BytesIO(b"<h2>From stdin</h2>"))
        monkeypatch.setattr("sys.stdin", fake_stdin)
        main(["convert", "-"])
        assert capsys.readouterr().out == "h2 From stdin\n"

    def test_convert_with_whitelist(self, page_file, tmp_path, capsys):
        wl = tmp_path / "wl.yaml"
        wl.write_text("tags: [form]\n")
        main(["convert", str(page_file), "--whitelist", str(wl)])
        # h1 still included by its text, input no longer whitelisted but has meaningful attributes
        assert capsys.readouterr().out == 'h1 Hello World\nform\n  input(type="text" placeholder="Search...")\n'

    def test_missing_file_exit_1(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["convert", str(tmp_path / "missing.html")])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err

    def test_bad_env_exit_1(self, page_file, monkeypatch, capsys):
        monkeypatch.setenv("PAGEOUTLINE_MAX_NODES", "lots")
        with pytest.raises(SystemExit) as exc_info:
            main(["convert", str(page_file)])
        assert exc_info.value.code == 1
        assert "PAGEOUTLINE_MAX_NODES" in capsys.readouterr().err

    def test_node_limit_from_env(self, page_file, monkeypatch, capsys):
        monkeypatch.setenv("PAGEOUTLINE_MAX_NODES", "2")
        with pytest.raises(SystemExit) as exc_info:
            main(["convert", str(page_file)])
        assert exc_info.value.code == 1
        assert "exceeds" in capsys.readouterr().err

    def test_nesting_too_deep_exit_1(self, tmp_path, monkeypatch, capsys):
        path = tmp_path / "deep.html"
        path.write_text("<div>" * 1500 + "<span>leaf</span>" + "</div>" * 1500)
        monkeypatch.setenv("PAGEOUTLINE_MAX_DEPTH", "5000")
        with pytest.raises(SystemExit) as exc_info:
            main(["convert", str(path)])
        assert exc_info.value.code == 1
        assert "too deep" in capsys.readouterr().err

    def test_usage_error_exit_2(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["convert"])
        assert exc_info.value.code == 2


class TestCapture:
    def test_capture_prints_outline(self, capsys):
        document = load_html(_PAGE)
        with patch("pageoutline.cli._capture", new=AsyncMock(return_value=document)) as fake:
            main(["capture", "https://example.com", "--viewport", "1024x768"])
        assert capsys.readouterr().out.startswith("h1 Hello World\n")
        args = fake.await_args.args
        assert args[0] == "https://example.com"
        assert args[1].viewport == Viewport(1024, 768)

    def test_capture_failure_exit_1(self, capsys):
        with patch("pageoutline.cli._capture", new=AsyncMock(side_effect=SnapshotError("cannot capture x"))):
            with pytest.raises(SystemExit) as exc_info:
                main(["capture", "https://example.com"])
        assert exc_info.value.code == 1
        assert "cannot capture x" in capsys.readouterr().err

    def test_parser_defaults(self):
        args = build_parser().parse_args(["capture", "https://example.com"])
        assert args.wait_until == "load"
        assert args.timeout == 30_000
        assert args.focus is None
