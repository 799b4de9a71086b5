# src/lumin/utils.py


import json
import os
import re
import sys
from contextlib import suppress
from pathlib import Path
from typing import Any, TextIO, cast

from .constants import SOURCE_ENCODING, SOURCE_ERRORS

# `// line`, `# line` and `/* block */` comments outside of strings;
# a `//` right after `:` is kept so URLs survive
_JSONC_TOKEN = re.compile(
    r'"(?:\\.|[^"\\])*"|/\*.*?\*/|(?<!:)//[^\n]*|#[^\n]*',
    re.DOTALL,
)
_TRAILING_COMMA = re.compile(r",(?=\s*[}\]])")


def should_use_color() -> bool:
    """Return True if colored diagnostics should be enabled."""
    if "NO_COLOR" in os.environ:
        return False
    if os.getenv("FORCE_COLOR", "").lower() in {"1", "true", "yes"}:
        return True
    # diagnostics go to stderr, so that is the stream to ask
    return sys.stderr.isatty()


def read_source(path: Path) -> str:
    """Read a source or payload file as text, keeping undecodable bytes."""
    return path.read_text(encoding=SOURCE_ENCODING, errors=SOURCE_ERRORS)


def write_source(path: Path, text: str) -> None:
    path.write_text(text, encoding=SOURCE_ENCODING, errors=SOURCE_ERRORS)


def strip_jsonc(text: str) -> str:
    """Turn JSONC text into plain JSON (drop comments and trailing commas)."""

    def keep_strings(match: re.Match[str]) -> str:
        token = match.group(0)
        return token if token.startswith('"') else ""

    return _TRAILING_COMMA.sub("", _JSONC_TOKEN.sub(keep_strings, text))


def load_jsonc(path: Path) -> dict[str, Any] | list[Any] | None:
    """Load a JSONC file; None when it holds nothing but comments."""
    if not path.is_file():
        xmsg = f"JSONC file not found: {path}"
        raise FileNotFoundError(xmsg)

    text = strip_jsonc(path.read_text(encoding="utf-8")).strip()
    if not text:
        return None

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        xmsg = (
            f"Invalid JSONC syntax in {path}:"
            f" {e.msg} (line {e.lineno}, column {e.colno})"
        )
        raise ValueError(xmsg) from e

    if not isinstance(data, (dict, list)):
        xmsg = f"Invalid JSONC root type: {type(data).__name__}"
        raise ValueError(xmsg)  # noqa: TRY004
    return cast("dict[str, Any] | list[Any]", data)


def remove_path_in_error_message(inner_msg: str, path: Path) -> str:
    """Drop mentions of `path` from an error message.

    "Invalid JSONC syntax in /abs/.lumin.jsonc: Expecting value"
        → "Invalid JSONC syntax: Expecting value"
    """
    names = sorted({str(path), path.name}, key=len, reverse=True)
    alternatives = "|".join(re.escape(n) for n in names)
    pattern = rf"\s*(?:in\s+)?(['\"]?)(?:{alternatives})\1"
    return re.sub(pattern, "", inner_msg).strip(": ").strip()


def plural(obj: Any) -> str:
    """Return 's' unless obj (a number or a sized object) counts one."""
    try:
        count = len(obj)
    except TypeError:
        count = obj if isinstance(obj, (int, float)) else 0
    return "" if count == 1 else "s"


def safe_log(msg: str) -> None:
    """Write straight to the real stderr; never raises."""
    stream = cast("TextIO", sys.__stderr__)
    with suppress(Exception):
        stream.write(f"{msg}\n")
        stream.flush()
