# tests/test_tokens.py
"""Tests for lumin.tokens (strip, join, describe)."""

import lumin.tokens as mod_tokens
from lumin.tokenizer import tokenize
from lumin.types import Token, TokenType


def minified(text: str) -> str:
    return mod_tokens.join(mod_tokens.strip(tokenize(text)))


def test_strip_removes_space_and_comments_only() -> None:
    # --- setup ---
    tokens = tokenize("local x -- c\n= --[[ b ]] 1")

    # --- execute ---
    result = mod_tokens.strip(tokens)

    # --- verify ---
    assert [t.text for t in result] == ["local", "x", "=", "1"]
    assert all(t.type not in {TokenType.SPACE, TokenType.COMMENT} for t in result)


def test_strip_keeps_strings_that_look_like_comments() -> None:
    result = mod_tokens.strip(tokenize("s = '-- not a comment'"))
    assert result[-1] == Token("'-- not a comment'", TokenType.STRING)


def test_join_separates_adjacent_words() -> None:
    assert minified("return x") == "return x"
    assert minified("local   function\n\tf()  end") == "local function f()end"


def test_join_never_spaces_punctuation() -> None:
    assert minified("f(a) ;") == "f(a);"
    assert minified("x = a + b") == "x=a+b"


def test_join_keeps_words_apart_after_comment_removal() -> None:
    # the comment carried the only separator between `1` and `y`
    assert minified("x = 1 -- set x\ny = 2") == "x=1 y=2"


def test_minified_output_keeps_word_boundaries() -> None:
    source = "if not done then return nil end"
    words = [t.text for t in tokenize(source) if t.type is TokenType.WORD]

    result = minified(source)

    assert [t.text for t in tokenize(result) if t.type is TokenType.WORD] == words


def test_join_handles_output_larger_than_one_chunk() -> None:
    # --- setup ---
    source = "local a = 1\n" * 2000

    # --- execute ---
    result = mod_tokens.join(tokenize(source))

    # --- verify ---
    assert result == source


def test_join_reports_progress_without_changing_output() -> None:
    # --- setup ---
    tokens = [Token("x", TokenType.WORD), Token(";", TokenType.SYMBOL)] * 125
    seen: list[int] = []

    # --- execute ---
    result = mod_tokens.join(tokens, seen.append)

    # --- verify ---
    assert result == "x;" * 125
    assert seen == [40, 80, 100]


def test_join_empty() -> None:
    assert mod_tokens.join([]) == ""


def test_describe_lists_type_and_text() -> None:
    result = mod_tokens.describe(tokenize("f 'a'"))
    assert result.splitlines() == [
        "word = 'f'",
        "space = ' '",
        "string = \"'a'\"",
    ]
