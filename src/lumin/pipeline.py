# src/lumin/pipeline.py
"""Top-level operations: minify, pack and compile Lua code."""

import os
import shutil
import subprocess
from functools import partial
from pathlib import Path

from .blocks import (
    remove_delete_blocks as _remove_delete_blocks,
    remove_noinstall_blocks,
    replace_build_replace_blocks,
)
from .constants import DEFAULT_ENV_LUAC, DEFAULT_LUAC, SOURCE_ENCODING, SOURCE_ERRORS
from .meta import PROGRAM_ENV
from .requires import RequireResolver
from .tokenizer import tokenize
from .tokens import join, strip
from .types import Token
from .utils_logs import get_logger, progress_line, progress_reporter


class LuaCompileError(RuntimeError):
    """The host Lua compiler rejected the code or could not be run."""


def _insert_helper_files(
    tokens: list[Token],
    *,
    base_dir: Path | None,
    remove_delete_blocks: bool,
    sandbox: bool,
    progress: bool,
) -> list[Token]:
    if progress:
        progress_line("Inserting helper files")

    # nested Lua payloads are minified standalone unless sandboxed
    nested = partial(
        minify,
        standalone=not sandbox,
        remove_delete_blocks=remove_delete_blocks,
        sandbox=sandbox,
        base_dir=base_dir,
    )
    return replace_build_replace_blocks(
        tokens, nested, base_dir=base_dir, progress=progress
    )


def minify(
    text: str,
    *,
    standalone: bool = False,
    remove_delete_blocks: bool = False,
    progress: bool = False,
    sandbox: bool = False,
    base_dir: Path | None = None,
) -> str:
    """Minify a string of Lua code.

    standalone: inline every `require` of a literal path.
    remove_delete_blocks: drop `--[[minify-delete]]` regions.
    sandbox: do not resolve requires inside build-replace payloads.
    """
    tokens = tokenize(text)

    if remove_delete_blocks:
        tokens = _remove_delete_blocks(tokens)

    if standalone:
        resolver = RequireResolver(
            base_dir,
            remove_delete_blocks=remove_delete_blocks,
            progress=progress,
        )
        tokens = resolver.resolve(tokens)

    tokens = remove_noinstall_blocks(tokens)
    tokens = _insert_helper_files(
        tokens,
        base_dir=base_dir,
        remove_delete_blocks=remove_delete_blocks,
        sandbox=sandbox,
        progress=progress,
    )
    tokens = strip(tokens)

    reporter = progress_reporter("Generating text") if progress else None
    return join(tokens, reporter)


def pack(
    text: str,
    *,
    remove_delete_blocks: bool = False,
    progress: bool = False,
    sandbox: bool = False,
    base_dir: Path | None = None,
) -> str:
    """Resolve all require statements and special comment blocks.

    Unlike `minify`, whitespace and comments are kept.
    """
    tokens = tokenize(text)

    tokens = RequireResolver(base_dir, progress=progress).resolve(tokens)

    if remove_delete_blocks:
        tokens = _remove_delete_blocks(tokens)

    tokens = remove_noinstall_blocks(tokens)
    tokens = _insert_helper_files(
        tokens,
        base_dir=base_dir,
        remove_delete_blocks=remove_delete_blocks,
        sandbox=sandbox,
        progress=progress,
    )

    reporter = progress_reporter("Generating text") if progress else None
    return join(tokens, reporter)


def find_luac(luac: str | None = None) -> str:
    """Pick the compiler: argument → LUMIN_LUAC → `luac`."""
    return luac or os.getenv(f"{PROGRAM_ENV}_{DEFAULT_ENV_LUAC}") or DEFAULT_LUAC


def compile_lua(text: str, *, luac: str | None = None) -> bytes:
    """Compile Lua code into bytecode with the host `luac`.

    Raises LuaCompileError carrying the compiler's message on failure.
    """
    logger = get_logger()
    compiler = find_luac(luac)
    executable = shutil.which(compiler)
    if executable is None:
        xmsg = f"Lua compiler not found: {compiler}"
        raise LuaCompileError(xmsg)

    logger.debug("[COMPILE] using %s", executable)
    result = subprocess.run(  # noqa: S603
        [executable, "-o", "-", "-"],
        input=text.encode(SOURCE_ENCODING, errors=SOURCE_ERRORS),
        capture_output=True,
        check=False,
    )
    if result.returncode != 0:
        message = result.stderr.decode(SOURCE_ENCODING, errors="replace").strip()
        xmsg = f"Failed to compile Lua code into bytecode: {message}"
        raise LuaCompileError(xmsg)

    return result.stdout
