# src/lumin/constants.py
"""
Central constants used across the project.
"""

# --- env keys ---
DEFAULT_ENV_LOG_LEVEL: str = "LOG_LEVEL"
DEFAULT_ENV_SANDBOX: str = "SANDBOX"
DEFAULT_ENV_LUAC: str = "LUAC"

# --- config defaults ---
DEFAULT_LOG_LEVEL: str = "info"
DEFAULT_LUAC: str = "luac"
DEFAULT_MINIFY: bool = False
DEFAULT_RECURSIVE: bool = False
DEFAULT_DELETE_BLOCKS: bool = False
DEFAULT_PROGRESS: bool = False
DEFAULT_COMPILE: bool = False
DEFAULT_SANDBOX: bool = False

# --- source files ---
LUA_EXTENSION: str = ".lua"
SOURCE_ENCODING: str = "utf-8"
# keeps undecodable bytes intact from read to write
SOURCE_ERRORS: str = "surrogateescape"

# --- joiner ---
JOIN_CHUNK_SIZE: int = 4096
JOIN_PROGRESS_EVERY: int = 100
