# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Environment-driven settings.

    PAGEOUTLINE_LOG_LEVEL   root log level (default INFO)
    PAGEOUTLINE_LOG_JSON    1/true/yes/on for JSON log lines
    PAGEOUTLINE_WHITELIST   path to a whitelist YAML file
    PAGEOUTLINE_MAX_NODES   snapshot node limit (default 50000)
    PAGEOUTLINE_MAX_DEPTH   snapshot nesting limit (default 256)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError
from .whitelist import DEFAULT_TABLES, WhitelistTables, load_whitelist

DEFAULT_MAX_NODES = 50_000
DEFAULT_MAX_DEPTH = 256

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ConfigError(f"{name} must be >= 1, got {value}")
    return value


@dataclass(frozen=True, slots=True)
class OutlineSettings:
    log_level: str = "INFO"
    log_json: bool = False
    whitelist_path: Path | None = None
    max_nodes: int = DEFAULT_MAX_NODES
    max_depth: int = DEFAULT_MAX_DEPTH

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> OutlineSettings:
        env = os.environ if env is None else env
        whitelist = env.get("PAGEOUTLINE_WHITELIST", "").strip()
        return cls(
            log_level=env.get("PAGEOUTLINE_LOG_LEVEL", "").strip().upper() or "INFO",
            log_json=env.get("PAGEOUTLINE_LOG_JSON", "").strip().lower() in _TRUTHY,
            whitelist_path=Path(whitelist) if whitelist else None,
            max_nodes=_env_int(env, "PAGEOUTLINE_MAX_NODES", DEFAULT_MAX_NODES),
            max_depth=_env_int(env, "PAGEOUTLINE_MAX_DEPTH", DEFAULT_MAX_DEPTH),
        )

    def load_tables(self) -> WhitelistTables:
        if self.whitelist_path is None:
            return DEFAULT_TABLES
        return load_whitelist(self.whitelist_path)
