# src/lumin/types.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TypedDict

from typing_extensions import NotRequired


class TokenType(str, Enum):
    SPACE = "space"
    COMMENT = "comment"
    STRING = "string"
    WORD = "word"
    LPAREN = "lparen"
    RPAREN = "rparen"
    SYMBOL = "symbol"


# tokens that carry no program meaning once stripped
INSIGNIFICANT_TYPES = frozenset({TokenType.SPACE, TokenType.COMMENT})


@dataclass(frozen=True)
class Token:
    text: str
    type: TokenType

    @property
    def is_significant(self) -> bool:
        return self.type not in INSIGNIFICANT_TYPES


@dataclass(frozen=True)
class CachedModule:
    id: str  # generated accessor name, e.g. RQ0
    tokens: list[Token]  # the module body, already require-resolved


class LuminConfigInput(TypedDict, total=False):
    """Shape of a `.lumin.json(c)` file before resolution."""

    minify: bool
    recursive: bool
    delete_blocks: bool
    progress: bool
    compile: bool
    sandbox: bool
    output: str
    root: str
    luac: str
    log_level: str


class Options(TypedDict):
    """Fully resolved run options (CLI → env → config → defaults)."""

    minify: bool
    recursive: bool
    delete_blocks: bool
    progress: bool
    compile: bool
    sandbox: bool
    root: Path
    luac: str
    log_level: str

    # None means stdout
    output: NotRequired[Path | None]
