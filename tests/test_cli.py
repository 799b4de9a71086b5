# tests/test_cli.py
"""Tests for lumin.cli (argument handling and exit codes)."""

# we import `_` private for testing purposes only
# pyright: reportPrivateUsage=false

import io
import json
import sys
from pathlib import Path

import pytest
from pytest import MonkeyPatch

import lumin.cli as mod_cli
from lumin.meta import PROGRAM_DISPLAY, PROGRAM_ENV, PROGRAM_SCRIPT
from tests.utils import make_lua_project, patch_everywhere

MAIN = """\
local util = require 'util'
--[[minify-delete]]
print('debug')
--[[/minify-delete]]
print(util.name) -- done
"""

FILES = {
    "main.lua": MAIN,
    "util.lua": "return { name = 'util' }\n",
}


def _stdin(data: bytes) -> io.TextIOWrapper:
    return io.TextIOWrapper(io.BytesIO(data), encoding="utf-8")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: MonkeyPatch) -> None:
    for name in ("LOG_LEVEL", "SANDBOX", "LUAC"):
        monkeypatch.delenv(f"{PROGRAM_ENV}_{name}", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)


def test_pack_to_stdout(
    tmp_path: Path,
    monkeypatch: MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    make_lua_project(tmp_path, FILES)

    # --- patch and execute ---
    with monkeypatch.context() as mp:
        mp.chdir(tmp_path)
        code = mod_cli.main(["main.lua"])

    # --- verify ---
    captured = capsys.readouterr()
    assert code == 0
    assert "local util = RQ0()\n" in captured.out
    assert "print('debug')" in captured.out
    assert "-- done" in captured.out
    assert captured.err == ""


def test_minify_recursive_to_file(
    tmp_path: Path,
    monkeypatch: MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    make_lua_project(tmp_path, FILES)

    # --- patch and execute ---
    with monkeypatch.context() as mp:
        mp.chdir(tmp_path)
        code = mod_cli.main(["main.lua", "-m", "-r", "-d", "-o", "out.lua"])

    # --- verify ---
    captured = capsys.readouterr()
    assert code == 0
    assert captured.out == ""
    assert "Wrote" in captured.err
    result = (tmp_path / "out.lua").read_text(encoding="utf-8")
    assert result.endswith("local util=RQ0()print(util.name)")
    assert "debug" not in result


def test_minify_without_recursive_keeps_require(
    tmp_path: Path,
    monkeypatch: MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    make_lua_project(tmp_path, FILES)

    with monkeypatch.context() as mp:
        mp.chdir(tmp_path)
        code = mod_cli.main(["main.lua", "--minify"])

    out = capsys.readouterr().out
    assert code == 0
    assert out.startswith("local util=require'util'")


def test_reads_stdin_when_no_input_file(
    tmp_path: Path,
    monkeypatch: MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- patch and execute ---
    with monkeypatch.context() as mp:
        mp.chdir(tmp_path)
        mp.setattr(sys, "stdin", _stdin(b"local x = 1 -- one\nreturn x\n"))
        code = mod_cli.main(["-m"])

    # --- verify ---
    assert code == 0
    assert capsys.readouterr().out == "local x=1 return x"


def test_non_utf8_bytes_survive_stdin_to_stdout(
    tmp_path: Path,
    monkeypatch: MonkeyPatch,
    capsysbinary: pytest.CaptureFixture[bytes],
) -> None:
    # --- setup ---
    source = b'local s = "caf\xe9" -- latin-1\nreturn s\n'

    # --- patch and execute ---
    with monkeypatch.context() as mp:
        mp.chdir(tmp_path)
        mp.setattr(sys, "stdin", _stdin(source))
        code = mod_cli.main(["-m"])

    # --- verify ---
    assert code == 0
    assert capsysbinary.readouterr().out == b'local s="caf\xe9"return s'


def test_non_utf8_bytes_survive_file_to_stdout(
    tmp_path: Path,
    monkeypatch: MonkeyPatch,
    capsysbinary: pytest.CaptureFixture[bytes],
) -> None:
    # --- setup ---
    source = b'local s = "caf\xe9"\nreturn s\n'
    (tmp_path / "in.lua").write_bytes(source)

    # --- patch and execute ---
    with monkeypatch.context() as mp:
        mp.chdir(tmp_path)
        code = mod_cli.main(["in.lua"])

    # --- verify ---
    assert code == 0
    assert capsysbinary.readouterr().out == source


def test_config_file_supplies_options(
    tmp_path: Path,
    monkeypatch: MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    make_lua_project(tmp_path, FILES)
    config = tmp_path / f".{PROGRAM_SCRIPT}.json"
    config.write_text(json.dumps({"minify": True, "recursive": True}))

    # --- patch and execute ---
    with monkeypatch.context() as mp:
        mp.chdir(tmp_path)
        code = mod_cli.main(["main.lua"])

    # --- verify ---
    out = capsys.readouterr().out
    assert code == 0
    assert out.startswith("CRQ0={nil,false}")


def test_invalid_config_returns_error(
    tmp_path: Path,
    monkeypatch: MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    make_lua_project(tmp_path, FILES)
    (tmp_path / f".{PROGRAM_SCRIPT}.json").write_text('{"minfy": true}')

    with monkeypatch.context() as mp:
        mp.chdir(tmp_path)
        code = mod_cli.main(["main.lua"])

    assert code == 1
    assert "did you mean 'minify'" in capsys.readouterr().err


def test_tokens_flag_dumps_tokens(
    tmp_path: Path,
    monkeypatch: MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    make_lua_project(tmp_path, {"t.lua": "f 'a'"})

    with monkeypatch.context() as mp:
        mp.chdir(tmp_path)
        code = mod_cli.main(["t.lua", "--tokens"])

    assert code == 0
    assert capsys.readouterr().out.splitlines() == [
        "word = 'f'",
        "space = ' '",
        "string = \"'a'\"",
    ]


def test_missing_input_file_returns_error(
    tmp_path: Path,
    monkeypatch: MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    with monkeypatch.context() as mp:
        mp.chdir(tmp_path)
        code = mod_cli.main(["missing.lua"])

    assert code == 1
    assert "Error opening input file: missing.lua" in capsys.readouterr().err


def test_tokenizer_error_returns_error(
    tmp_path: Path,
    monkeypatch: MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    make_lua_project(tmp_path, {"bad.lua": 'print("open\n'})

    with monkeypatch.context() as mp:
        mp.chdir(tmp_path)
        code = mod_cli.main(["bad.lua"])

    assert code == 1
    assert "Unclosed string" in capsys.readouterr().err


def test_nested_delete_blocks_exit(
    tmp_path: Path,
    monkeypatch: MonkeyPatch,
) -> None:
    make_lua_project(
        tmp_path,
        {"n.lua": "--[[minify-delete]]--[[minify-delete]]--[[/minify-delete]]"},
    )

    with monkeypatch.context() as mp:
        mp.chdir(tmp_path)
        with pytest.raises(SystemExit) as e:
            mod_cli.main(["n.lua", "-d"])

    assert e.value.code == 1


def test_missing_compiler_returns_error(
    tmp_path: Path,
    monkeypatch: MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    make_lua_project(tmp_path, {"c.lua": "return 1"})

    with monkeypatch.context() as mp:
        mp.chdir(tmp_path)
        code = mod_cli.main(["c.lua", "-c", "--luac", "lumin-no-such-luac"])

    assert code == 1
    assert "Lua compiler not found" in capsys.readouterr().err


def test_root_option_changes_require_base(
    tmp_path: Path,
    monkeypatch: MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    make_lua_project(tmp_path, {"lib/util.lua": "return 1", "main.lua": MAIN})

    # --- patch and execute ---
    with monkeypatch.context() as mp:
        mp.chdir(tmp_path)
        code = mod_cli.main(["main.lua", "--root", "lib"])

    # --- verify ---
    assert code == 0
    assert "local util = RQ0()" in capsys.readouterr().out


def test_help_flag(
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Should print usage information and exit cleanly when --help is passed."""
    # --- execute ---
    with pytest.raises(SystemExit) as e:
        mod_cli.main(["--help"])

    # --- verify ---
    assert e.value.code == 0
    out = capsys.readouterr().out
    assert "usage:" in out.lower()
    assert PROGRAM_SCRIPT in out


def test_version_flag(
    capsys: pytest.CaptureFixture[str],
) -> None:
    code = mod_cli.main(["--version"])

    assert code == 0
    assert capsys.readouterr().out.startswith(f"{PROGRAM_DISPLAY} ")


def test_unknown_flag_suggests_close_match(
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- execute ---
    with pytest.raises(SystemExit) as e:
        mod_cli.main(["--minfy"])

    # --- verify ---
    assert e.value.code == 2  # noqa: PLR2004
    err = capsys.readouterr().err
    assert "unrecognized arguments: --minfy" in err
    assert "Hint: did you mean --minify?" in err


def test_selftest_flag(
    capsys: pytest.CaptureFixture[str],
) -> None:
    code = mod_cli.main(["--selftest"])

    assert code == 0
    assert "Self-test passed" in capsys.readouterr().err


def test_quiet_suppresses_info(
    tmp_path: Path,
    monkeypatch: MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    make_lua_project(tmp_path, FILES)

    with monkeypatch.context() as mp:
        mp.chdir(tmp_path)
        code = mod_cli.main(["main.lua", "-q", "-o", "out.lua"])

    assert code == 0
    assert capsys.readouterr().err == ""


def test_unexpected_error_is_reported(
    tmp_path: Path,
    monkeypatch: MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    # --- setup ---
    make_lua_project(tmp_path, {"x.lua": "return 1"})

    def boom(*_args: object, **_kwargs: object) -> str:
        xmsg = "kaboom"
        raise KeyError(xmsg)

    # --- patch and execute ---
    with monkeypatch.context() as mp:
        mp.chdir(tmp_path)
        patch_everywhere(mp, mod_cli, "_process", boom)
        code = mod_cli.main(["x.lua"])

    # --- verify ---
    assert code == 1
    err = capsys.readouterr().err
    assert "💥" in err
    assert "Unexpected internal error" in err
    assert "kaboom" in err
