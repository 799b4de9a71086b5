# src/lumin/blocks.py
"""Processors for sentinel comment blocks.

Three pairs of comments mark regions of source for special handling:

    --[[minify-delete]] ... --[[/minify-delete]]
        removed on request; nesting is a fatal error
    --[[no-install]] ... --[[/no-install]]
        always removed
    --[[build-replace=<path>]] ... --[[/build-replace]]
        replaced by the contents of <path> as a quoted Lua string
"""

import re
from collections.abc import Callable
from pathlib import Path

from .constants import LUA_EXTENSION
from .types import Token, TokenType
from .utils import read_source
from .utils_logs import get_logger, progress_tick

DELETE_OPEN = "--[[minify-delete]]"
DELETE_CLOSE = "--[[/minify-delete]]"
NOINSTALL_OPEN = "--[[no-install]]"
NOINSTALL_CLOSE = "--[[/no-install]]"
BUILD_REPLACE_OPEN = re.compile(r"^--\[\[build-replace=(.*?)\]\]")
BUILD_REPLACE_CLOSE = "--[[/build-replace]]"


def _is_comment(token: Token, text: str) -> bool:
    return token.type is TokenType.COMMENT and token.text == text


def _find_close(tokens: list[Token], start: int, close: str, opener: str) -> int:
    """Return the index of the closing sentinel after `start`."""
    for i in range(start + 1, len(tokens)):
        if _is_comment(tokens[i], close):
            return i
    xmsg = f"Unterminated `{opener}` block: missing `{close}`."
    raise ValueError(xmsg)


def remove_delete_blocks(tokens: list[Token]) -> list[Token]:
    """Drop every `--[[minify-delete]]` region, sentinels included.

    A second opener inside a region aborts the whole run with exit
    status 1 after printing the offending region.
    """
    new_tokens: list[Token] = []
    i = 0
    while i < len(tokens):
        if not _is_comment(tokens[i], DELETE_OPEN):
            new_tokens.append(tokens[i])
            i += 1
            continue

        begin = i
        i += 1
        while i < len(tokens) and not _is_comment(tokens[i], DELETE_CLOSE):
            if _is_comment(tokens[i], DELETE_OPEN):
                context = "".join(t.text for t in tokens[max(begin - 1, 0) : i + 1])
                get_logger().error(
                    "Unexpected `%s` inside a `%s` block.\nCONTEXT:\n%s",
                    DELETE_OPEN,
                    DELETE_OPEN,
                    context,
                )
                raise SystemExit(1)
            i += 1

        if i >= len(tokens):
            xmsg = f"Unterminated `{DELETE_OPEN}` block: missing `{DELETE_CLOSE}`."
            raise ValueError(xmsg)
        i += 1

    return new_tokens


def remove_noinstall_blocks(tokens: list[Token]) -> list[Token]:
    """Drop every `--[[no-install]]` region, sentinels included.

    Nested openers are not checked: the region ends at the first close.
    """
    new_tokens: list[Token] = []
    i = 0
    while i < len(tokens):
        if _is_comment(tokens[i], NOINSTALL_OPEN):
            i = _find_close(tokens, i, NOINSTALL_CLOSE, NOINSTALL_OPEN) + 1
            continue
        new_tokens.append(tokens[i])
        i += 1
    return new_tokens


def escape_lua_string(text: str) -> str:
    """Escape text for use inside a double-quoted Lua string literal.

    Only backslash, newline and double quote are escaped. A carriage
    return is left raw, which Lua rejects inside a short string, so
    payloads with CRLF line endings must be converted first.
    """
    return text.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def replace_build_replace_blocks(
    tokens: list[Token],
    minify: Callable[[str], str],
    *,
    base_dir: Path | None = None,
    progress: bool = False,
) -> list[Token]:
    """Replace each `--[[build-replace=<path>]]` region with file contents.

    `.lua` payloads are passed through `minify` first; anything else is
    embedded verbatim. The result is a single double-quoted string token.
    """
    logger = get_logger()
    root = base_dir if base_dir is not None else Path.cwd()
    new_tokens: list[Token] = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        match = (
            BUILD_REPLACE_OPEN.match(token.text)
            if token.type is TokenType.COMMENT
            else None
        )
        if not match:
            new_tokens.append(token)
            i += 1
            continue

        file = match.group(1)
        path = root / file
        logger.debug("[BUILD-REPLACE] %s", path)
        try:
            text = read_source(path)
        except OSError as e:
            xmsg = f"Error in `build-replace={file}` block: File not found."
            raise FileNotFoundError(xmsg) from e

        if file.endswith(LUA_EXTENSION):
            text = minify(text)

        new_tokens.append(Token(f'"{escape_lua_string(text)}"', TokenType.STRING))
        i = _find_close(tokens, i, BUILD_REPLACE_CLOSE, token.text) + 1

        if progress:
            progress_tick()

    return new_tokens
