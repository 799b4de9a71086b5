# tests/utils/__init__.py

from .luaproject import (
    LUA,
    make_lua_project,
    requires_lua,
    roundtrip,
    run_lua,
    texts,
)
from .patch_everywhere import patch_everywhere

__all__ = [
    "LUA",
    "make_lua_project",
    "patch_everywhere",
    "requires_lua",
    "roundtrip",
    "run_lua",
    "texts",
]
