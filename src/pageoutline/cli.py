# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Page Outline CLI: convert HTML files or capture live pages.

Usage:
    python -m pageoutline.cli convert page.html [--focus XPATH] [--viewport 1280x800]
    python -m pageoutline.cli convert - < page.html
    python -m pageoutline.cli capture https://example.com [--focus CSS] [--timeout MS]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from . import Viewport
from .config import OutlineSettings
from .converter import OutlineConverter
from .errors import ConfigError, OutlineError, SnapshotError
from .whitelist import load_whitelist

logger = logging.getLogger(__name__)

_WAIT_UNTIL = ("load", "domcontentloaded", "networkidle", "commit")


def parse_viewport(value: str) -> Viewport:
    """``1280x800`` → Viewport(1280, 800)."""
    width, sep, height = value.lower().partition("x")
    try:
        if not sep:
            raise ValueError(value)
        vp = Viewport(width=int(width), height=int(height))
    except ValueError:
        raise argparse.ArgumentTypeError(f"viewport must look like WIDTHxHEIGHT, got {value!r}") from None
    if vp.width <= 0 or vp.height <= 0:
        raise argparse.ArgumentTypeError(f"viewport dimensions must be positive, got {value!r}")
    return vp


def _converter(args: argparse.Namespace, settings: OutlineSettings) -> OutlineConverter:
    if args.whitelist:
        return OutlineConverter(load_whitelist(args.whitelist))
    return OutlineConverter(settings.load_tables())


def _read_markup(source: str) -> bytes:
    if source == "-":
        return sys.stdin.buffer.read()
    path = Path(source)
    try:
        return path.read_bytes()
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e


def cmd_convert(args: argparse.Namespace, settings: OutlineSettings) -> None:
    """Convert a static HTML file (or stdin) to an outline."""
    from .html_loader import load_html

    converter = _converter(args, settings)
    document = load_html(
        _read_markup(args.source),
        viewport=args.viewport,
        focus_xpath=args.focus,
        max_nodes=settings.max_nodes,
        max_depth=settings.max_depth,
    )
    print(converter.convert(document))


async def _capture(url: str, args: argparse.Namespace, settings: OutlineSettings):
    from playwright.async_api import Error as PlaywrightError
    from playwright.async_api import async_playwright
    from .snapshot import capture_document

    viewport = args.viewport or Viewport()
    try:
        async with async_playwright() as pw:
            browser = await pw.chromium.launch(headless=True)
            try:
                page = await browser.new_page(viewport={"width": int(viewport.width), "height": int(viewport.height)})
                await page.goto(url, wait_until=args.wait_until, timeout=args.timeout)
                if args.focus:
                    await page.focus(args.focus, timeout=args.timeout)
                return await capture_document(page, max_nodes=settings.max_nodes, max_depth=settings.max_depth)
            finally:
                await browser.close()
    except PlaywrightError as e:
        raise SnapshotError(f"cannot capture {url}: {e}") from e


def cmd_capture(args: argparse.Namespace, settings: OutlineSettings) -> None:
    """Render a URL in headless Chromium and print its outline."""
    converter = _converter(args, settings)
    document = asyncio.run(_capture(args.url, args, settings))
    logger.info("Captured %s (%d elements)", args.url, document.element_count)
    print(converter.convert(document))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Page Outline CLI",
        prog="python -m pageoutline.cli",
    )
    parser.add_argument("--log-level", type=str, default=None, help="Log level (default: PAGEOUTLINE_LOG_LEVEL or INFO)")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines on stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--viewport", type=parse_viewport, default=None, metavar="WxH", help="Viewport size")
    common.add_argument("--whitelist", type=str, default=None, metavar="YAML", help="Whitelist tables file")

    p_convert = subparsers.add_parser(
        "convert",
        parents=[common],
        help="Convert a static HTML file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
examples:
  %(prog)s page.html                               Outline of a saved page
  %(prog)s page.html --focus "//input[@id='q']"    Mark an element focused
  curl -s https://example.com | %(prog)s -         Read markup from stdin""",
    )
    p_convert.add_argument("source", help="HTML file path, or - for stdin")
    p_convert.add_argument("--focus", type=str, default=None, metavar="XPATH", help="XPath of the focused element")

    p_capture = subparsers.add_parser("capture", parents=[common], help="Render a URL and outline it")
    p_capture.add_argument("url", help="Page URL")
    p_capture.add_argument("--focus", type=str, default=None, metavar="CSS", help="Selector to focus before capture")
    p_capture.add_argument("--wait-until", choices=_WAIT_UNTIL, default="load", help="Navigation wait condition")
    p_capture.add_argument("--timeout", type=float, default=30_000, metavar="MS", help="Navigation timeout in ms")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    from .logging_config import configure

    try:
        settings = OutlineSettings.from_env()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    configure(json_output=args.json_logs or settings.log_json, level=args.log_level or settings.log_level)

    commands = {"convert": cmd_convert, "capture": cmd_capture}
    try:
        commands[args.command](args, settings)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)
    except OutlineError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
