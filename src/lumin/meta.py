# src/lumin/meta.py

"""Centralized program identity constants for Lumin."""

from typing import NamedTuple

_BASE = "lumin"

# CLI script name (the console-script entrypoint)
PROGRAM_SCRIPT = _BASE

# Human-readable name for banners, help text, etc.
PROGRAM_DISPLAY = _BASE.title()

# Python package / import name
PROGRAM_PACKAGE = _BASE

# Environment variable prefix (used for LUMIN_LOG_LEVEL, etc.)
PROGRAM_ENV = _BASE.upper()

# Short tagline or description for help screens and metadata
DESCRIPTION = "Minify, pack, and compile Lua code."


class Metadata(NamedTuple):
    version: str
    commit: str
