# src/lumin/__init__.py

"""Lumin: minify, pack and compile Lua code.

Full developer API
==================
This package re-exports all non-private symbols from its submodules,
making it suitable for programmatic use, custom integrations, or build
scripts. Anything prefixed with "_" is considered internal and may change.

Highlights:
    - main()              → CLI entrypoint
    - minify()            → Strip a Lua program down to its tokens
    - pack()              → Inline requires and comment blocks, keep layout
    - compile_lua()       → Hand final text to the host `luac`
    - tokenize()          → Split Lua source into classified tokens
    - RequireResolver     → Inline `require` calls with once-only semantics
"""

from .actions import get_metadata, run_selftest
from .blocks import (
    escape_lua_string,
    remove_delete_blocks,
    remove_noinstall_blocks,
    replace_build_replace_blocks,
)
from .cli import main
from .config import (
    determine_log_level,
    find_config,
    load_config,
    resolve_options,
    validate_config,
)
from .constants import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_LUAC,
    LUA_EXTENSION,
)
from .meta import (
    PROGRAM_DISPLAY,
    PROGRAM_ENV,
    PROGRAM_PACKAGE,
    PROGRAM_SCRIPT,
    Metadata,
)
from .pipeline import LuaCompileError, compile_lua, minify, pack
from .requires import RequireResolver, resolve_requires, wrap_module
from .runtime import Runtime, current_runtime
from .tokenizer import (
    LuaTokenizeError,
    UnexpectedCharacterError,
    UnterminatedStringError,
    tokenize,
)
from .tokens import describe, join, strip
from .types import CachedModule, LuminConfigInput, Options, Token, TokenType
from .utils_logs import (
    LEVEL_ORDER,
    colorize,
    get_logger,
)

__all__ = [  # noqa: RUF022
    # --- actions ---
    "get_metadata",
    "run_selftest",
    # --- blocks ---
    "escape_lua_string",
    "remove_delete_blocks",
    "remove_noinstall_blocks",
    "replace_build_replace_blocks",
    # --- cli ---
    "main",
    # --- config ---
    "determine_log_level",
    "find_config",
    "load_config",
    "resolve_options",
    "validate_config",
    # --- constants ---
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_LUAC",
    "LUA_EXTENSION",
    # --- meta ---
    "PROGRAM_DISPLAY",
    "PROGRAM_ENV",
    "PROGRAM_PACKAGE",
    "PROGRAM_SCRIPT",
    "Metadata",
    # --- pipeline ---
    "LuaCompileError",
    "compile_lua",
    "minify",
    "pack",
    # --- requires ---
    "RequireResolver",
    "resolve_requires",
    "wrap_module",
    # --- runtime ---
    "Runtime",
    "current_runtime",
    # --- tokenizer ---
    "LuaTokenizeError",
    "UnexpectedCharacterError",
    "UnterminatedStringError",
    "tokenize",
    # --- tokens ---
    "describe",
    "join",
    "strip",
    # --- types ---
    "CachedModule",
    "LuminConfigInput",
    "Options",
    "Token",
    "TokenType",
    # --- utils_logs ---
    "LEVEL_ORDER",
    "colorize",
    "get_logger",
]
