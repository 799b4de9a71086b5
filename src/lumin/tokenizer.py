# src/lumin/tokenizer.py
"""Split Lua source text into classified tokens.

The tokenizer is deliberately shallow: it knows just enough about Lua to
keep strings and comments intact and to tell words from punctuation.
Concatenating the text of every token reproduces the input exactly.
"""

import re
import string

from .types import Token, TokenType


class LuaTokenizeError(ValueError):
    """Raised when source text cannot be split into tokens."""

    def __init__(self, message: str, position: int) -> None:
        super().__init__(message)
        self.position = position


class UnterminatedStringError(LuaTokenizeError):
    pass


class UnexpectedCharacterError(LuaTokenizeError):
    def __init__(self, char: str, position: int) -> None:
        xmsg = (
            f"Error when parsing Lua code: Unexpected character: `{char}`"
            f" at offset {position}."
        )
        super().__init__(xmsg, position)
        self.char = char


_QUOTES = ('"', "'")

# Tried in order at the current position; the first match wins.
_RULES: list[tuple[re.Pattern[str], TokenType]] = [
    (re.compile(r"[ \t\n\r\f\v]+"), TokenType.SPACE),
    (re.compile(r"#![^\n]*\n"), TokenType.COMMENT),  # shebang
    (re.compile(r"--\[(=*)\[.*?\]\1\]", re.DOTALL), TokenType.COMMENT),
    (re.compile(r"--[^\n]*\n?"), TokenType.COMMENT),
    (re.compile(r"\[(=*)\[.*?\]\1\]", re.DOTALL), TokenType.STRING),
    (re.compile(r'"'), TokenType.STRING),
    (re.compile(r"'"), TokenType.STRING),
    (re.compile(r"[A-Za-z0-9_]+"), TokenType.WORD),
    (re.compile(r"\("), TokenType.LPAREN),
    (re.compile(r"\)"), TokenType.RPAREN),
    (re.compile(f"[{re.escape(string.punctuation)}]"), TokenType.SYMBOL),
]


def _find_string_end(text: str, start: int) -> int:
    """Return the index of the quote closing the string opened at `start`.

    A candidate quote preceded by an odd number of backslashes is escaped.
    """
    quote = text[start]
    i = start
    while True:
        i = text.find(quote, i + 1)
        if i == -1:
            xmsg = (
                "Error when parsing Lua code: Unclosed string"
                f" starting at offset {start}."
            )
            raise UnterminatedStringError(xmsg, start)

        backslashes = 0
        b = i - 1
        while b > start and text[b] == "\\":
            backslashes += 1
            b -= 1

        if backslashes % 2 == 0:
            return i


def tokenize(text: str) -> list[Token]:
    """Tokenize a string of Lua code.

    Raises:
        UnterminatedStringError: a quoted string never closes.
        UnexpectedCharacterError: a character matches no rule.

    """
    tokens: list[Token] = []
    pos = 0
    length = len(text)

    while pos < length:
        for pattern, token_type in _RULES:
            match = pattern.match(text, pos)
            if not match:
                continue

            end = match.end()
            if match.group(0) in _QUOTES:
                end = _find_string_end(text, pos) + 1

            tokens.append(Token(text[pos:end], token_type))
            pos = end
            break
        else:
            raise UnexpectedCharacterError(text[pos], pos)

    return tokens
