"""
Lumos Configuration
===================
Engine settings, populated directly or from LUMOS_* environment variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class LumosConfig:
    """Settings for a Runtime.

    Only populate the fields you need; the defaults suit an embedded engine
    whose caller collects output from the returned results.
    """

    echo_output: bool = False       # Also write `print` output to stdout as it happens
    default_target: str = "python"  # Target used by compile() when none is given
    log_level: str = "WARNING"      # Level the CLI configures logging with
    sweep_threshold: int = 256      # Live scopes before a reachability sweep runs
    indent_width: int = 4           # Spaces per indentation level in rendered code
    recursion_limit: int = 8000     # Host recursion limit raised to fit deep call chains

    @classmethod
    def from_env(cls) -> LumosConfig:
        """Build a config from LUMOS_* environment variables, falling back to defaults."""
        defaults = cls()
        return cls(
            echo_output=_env_bool("LUMOS_ECHO_OUTPUT", defaults.echo_output),
            default_target=os.environ.get("LUMOS_DEFAULT_TARGET", defaults.default_target),
            log_level=os.environ.get("LUMOS_LOG_LEVEL", defaults.log_level).upper(),
            sweep_threshold=_env_int("LUMOS_SWEEP_THRESHOLD", defaults.sweep_threshold),
            indent_width=_env_int("LUMOS_INDENT_WIDTH", defaults.indent_width),
            recursion_limit=_env_int("LUMOS_RECURSION_LIMIT", defaults.recursion_limit),
        )

    @property
    def numeric_log_level(self) -> int:
        level = logging.getLevelName(self.log_level)
        return level if isinstance(level, int) else logging.WARNING
