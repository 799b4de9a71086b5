# src/lumin/tokens.py
"""Whole-sequence token helpers: stripping, joining and dumping."""

from collections.abc import Callable, Iterable

from .constants import JOIN_CHUNK_SIZE, JOIN_PROGRESS_EVERY
from .types import Token, TokenType


def strip(tokens: Iterable[Token]) -> list[Token]:
    """Remove whitespace and comments from a sequence of tokens."""
    return [token for token in tokens if token.is_significant]


def join(
    tokens: list[Token],
    progress: Callable[[int], None] | None = None,
) -> str:
    """Join tokens back into text.

    A single space is inserted between two adjacent words, and nowhere
    else, so `return x` never fuses into `returnx`.
    """
    chunks: list[str] = []
    buffer: list[str] = []
    buffered = 0
    prev_type = TokenType.SPACE
    total = len(tokens)

    for i, token in enumerate(tokens, start=1):
        if prev_type is TokenType.WORD and token.type is TokenType.WORD:
            buffer.append(" ")
            buffered += 1
        buffer.append(token.text)
        buffered += len(token.text)
        prev_type = token.type

        if progress and i % JOIN_PROGRESS_EVERY == 0:
            progress(i * 100 // total)

        if buffered > JOIN_CHUNK_SIZE:
            chunks.append("".join(buffer))
            buffer.clear()
            buffered = 0

    chunks.append("".join(buffer))

    if progress:
        progress(100)
    return "".join(chunks)


def describe(tokens: Iterable[Token]) -> str:
    """Render one `type = text` line per token, for debugging."""
    return "\n".join(f"{token.type.value} = {token.text!r}" for token in tokens)
