# src/lumin/requires.py
"""Inline `require` calls so a program becomes a single file.

Each distinct required file is tokenized once, resolved recursively and
wrapped in an accessor function that evaluates the module body on first
call and returns the cached result afterwards:

    CRQ0={nil,false}
    function RQ0()
    local fn=function()
      <module body>
    end
    if not CRQ0[2] then CRQ0={fn(),true} end
    return CRQ0[1]
    end

Every `require "mod"` / `require("mod")` is then replaced by `RQ0()`.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from .blocks import remove_delete_blocks as _remove_delete_blocks
from .constants import LUA_EXTENSION
from .tokenizer import tokenize
from .types import CachedModule, Token, TokenType
from .utils import plural, read_source
from .utils_logs import get_logger, progress_tick

REQUIRE_WORD = "require"
ID_PREFIX = "RQ"
CELL_PREFIX = "C"

_LONG_BRACKET = re.compile(r"^\[(=*)\[(.*)\]\1\]$", re.DOTALL)


@dataclass
class _ResolveContext:
    """State for one top-level resolve; never shared between calls."""

    base_dir: Path
    remove_delete_blocks: bool
    progress: bool
    cache: dict[str, CachedModule] = field(default_factory=dict)
    # files currently being resolved, outermost first
    stack: list[str] = field(default_factory=list)


def _skip_insignificant(tokens: list[Token], i: int) -> int:
    while i < len(tokens) and not tokens[i].is_significant:
        i += 1
    return i


def _match_require(tokens: list[Token], i: int) -> tuple[Token, int] | None:
    """Match a require call starting at `tokens[i]`.

    Returns the string argument and the index of the call's last token,
    or None when this is not a call with a literal string argument.
    """
    token = tokens[i]
    if token.type is not TokenType.WORD or token.text != REQUIRE_WORD:
        return None

    j = _skip_insignificant(tokens, i + 1)
    if j >= len(tokens):
        return None
    if tokens[j].type is TokenType.STRING:
        return tokens[j], j
    if tokens[j].type is not TokenType.LPAREN:
        return None

    j = _skip_insignificant(tokens, j + 1)
    if j >= len(tokens) or tokens[j].type is not TokenType.STRING:
        return None
    arg = tokens[j]

    j = _skip_insignificant(tokens, j + 1)
    if j >= len(tokens) or tokens[j].type is not TokenType.RPAREN:
        return None
    return arg, j


def string_literal_value(text: str) -> str:
    """Return the raw contents of a quoted or long-bracket string token."""
    match = _LONG_BRACKET.match(text)
    if match:
        return match.group(2)
    return text[1:-1]


def module_path(name: str) -> str:
    """Map a module name to its relative source path: `a.b` → `a/b.lua`."""
    return os.path.normpath(name.replace(".", "/") + LUA_EXTENSION)


def _load_module(path: Path, ctx: _ResolveContext) -> list[Token]:
    tokens = tokenize(read_source(path))
    if ctx.remove_delete_blocks:
        tokens = _remove_delete_blocks(tokens)
    # a shebang is only legal on the first line of a chunk
    first = tokens[0] if tokens else None
    if first and first.type is TokenType.COMMENT and first.text.startswith("#!"):
        tokens = tokens[1:]
    return tokens


def _extract_requires(
    tokens: list[Token],
    ctx: _ResolveContext,
    resolver: "RequireResolver",
) -> list[Token]:
    """Replace require calls in `tokens`, filling `ctx.cache` depth-first."""
    logger = get_logger()
    if ctx.progress:
        progress_tick()

    new_tokens: list[Token] = []
    i = 0
    while i < len(tokens):
        found = _match_require(tokens, i)
        if found is None:
            new_tokens.append(tokens[i])
            i += 1
            continue

        arg, last = found
        file = module_path(string_literal_value(arg.text))
        path = ctx.base_dir / file

        if file not in ctx.cache:
            if file in ctx.stack:
                chain = " -> ".join([*ctx.stack, file])
                xmsg = (
                    f"Circular require detected: {chain}"
                    " (requires are inlined at load time, so even a cycle"
                    " inside a function body is rejected)"
                )
                raise ValueError(xmsg)
            try:
                module_tokens = _load_module(path, ctx)
            except OSError:
                logger.warning(
                    "File not found: `%s`. Skipping require statement.", file
                )
                new_tokens.append(tokens[i])
                i += 1
                continue

            logger.debug("[REQUIRE] inlining %s", file)
            ctx.stack.append(file)
            try:
                resolved = _extract_requires(module_tokens, ctx, resolver)
            finally:
                ctx.stack.pop()
            ctx.cache[file] = CachedModule(id=resolver.next_id(), tokens=resolved)

        new_tokens.extend(
            [
                Token(ctx.cache[file].id, TokenType.WORD),
                Token("(", TokenType.LPAREN),
                Token(")", TokenType.RPAREN),
            ]
        )
        i = last + 1

    return new_tokens


def wrap_module(module: CachedModule) -> list[Token]:
    """Build the memoizing accessor definition for one cached module."""
    rq = module.id
    cell = f"{CELL_PREFIX}{rq}"
    head = tokenize(f"{cell}={{nil,false}}\nfunction {rq}()\nlocal fn=function()\n")
    tail = tokenize(
        f"\nend\nif not {cell}[2] then {cell}={{fn(),true}} end\n"
        f"return {cell}[1]\nend\n"
    )
    return head + module.tokens + tail


class RequireResolver:
    """Inline require calls, one fresh dependency cache per `resolve()`.

    The id counter lives as long as the resolver so generated names
    never repeat between calls on the same instance.
    """

    def __init__(
        self,
        base_dir: Path | None = None,
        *,
        remove_delete_blocks: bool = False,
        progress: bool = False,
    ) -> None:
        self.base_dir = base_dir if base_dir is not None else Path.cwd()
        self.remove_delete_blocks = remove_delete_blocks
        self.progress = progress
        self._next_id = 0

    def next_id(self) -> str:
        rq = f"{ID_PREFIX}{self._next_id}"
        self._next_id += 1
        return rq

    def resolve(self, tokens: list[Token]) -> list[Token]:
        """Return wrapper definitions followed by the substituted program."""
        ctx = _ResolveContext(
            base_dir=self.base_dir,
            remove_delete_blocks=self.remove_delete_blocks,
            progress=self.progress,
        )

        if ctx.remove_delete_blocks:
            tokens = _remove_delete_blocks(tokens)

        program = _extract_requires(tokens, ctx, self)

        result: list[Token] = []
        for module in ctx.cache.values():
            result.extend(wrap_module(module))
        result.extend(program)

        count = len(ctx.cache)
        get_logger().debug("[REQUIRE] inlined %d module%s", count, plural(count))
        return result


def resolve_requires(
    tokens: list[Token],
    *,
    base_dir: Path | None = None,
    remove_delete_blocks: bool = False,
    progress: bool = False,
) -> list[Token]:
    """Resolve all require calls in `tokens` with a throwaway resolver."""
    resolver = RequireResolver(
        base_dir,
        remove_delete_blocks=remove_delete_blocks,
        progress=progress,
    )
    return resolver.resolve(tokens)
