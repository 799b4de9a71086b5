# src/lumin/cli.py

import argparse
import platform
import sys
from difflib import get_close_matches
from pathlib import Path

from .actions import get_metadata, run_selftest
from .config import determine_log_level, find_config, load_config, resolve_options
from .constants import SOURCE_ENCODING, SOURCE_ERRORS
from .meta import DESCRIPTION, PROGRAM_DISPLAY, PROGRAM_SCRIPT
from .pipeline import compile_lua, minify, pack
from .runtime import current_runtime
from .tokenizer import tokenize
from .tokens import describe
from .types import LuminConfigInput, Options
from .utils import read_source, safe_log, should_use_color, write_source
from .utils_logs import LEVEL_ORDER, get_logger, set_log_level


# --------------------------------------------------------------------------- #
# CLI setup and helpers
# --------------------------------------------------------------------------- #


class HintingArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that suggests the closest flag for a mistyped one."""

    def error(self, message: str) -> None:  # type: ignore[override]
        marker = "unrecognized arguments:"
        hints: list[str] = []
        if marker in message:
            flags = [s for a in self._actions for s in a.option_strings]
            unknown = message.split(marker, 1)[1].split()
            for arg in (u for u in unknown if u.startswith("-")):
                close = get_close_matches(arg, flags, n=1, cutoff=0.6)
                if close:
                    hints.append(f"Hint: did you mean {close[0]}?")

        self.print_usage(sys.stderr)
        self.exit(2, "\n".join([f"{self.prog}: error: {message}", *hints]) + "\n")


def _setup_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    parser = HintingArgumentParser(prog=PROGRAM_SCRIPT, description=DESCRIPTION)

    parser.add_argument(
        "input_file",
        nargs="?",
        default="-",
        help="The Lua source file to process (default: stdin).",
    )
    parser.add_argument(
        "-o",
        "--output",
        metavar="OUTPUT_FILE",
        help="Output file (default: stdout).",
    )
    parser.add_argument(
        "-c",
        "--compile",
        action="store_true",
        default=None,
        help="Compile to Lua bytecode with the host compiler.",
    )
    parser.add_argument(
        "-r",
        "--recursive",
        action="store_true",
        default=None,
        help="Recursively pack all require calls when minifying.",
    )
    parser.add_argument(
        "-d",
        "--delete",
        dest="delete_blocks",
        action="store_true",
        default=None,
        help="Remove `--[[minify-delete]]` ... `--[[/minify-delete]]` blocks.",
    )
    parser.add_argument(
        "-m",
        "--minify",
        action="store_true",
        default=None,
        help="Minify the Lua code (default: pack only).",
    )
    parser.add_argument(
        "-p",
        "--progress",
        action="store_true",
        default=None,
        help="Print progress to stderr.",
    )
    parser.add_argument(
        "--sandbox",
        action="store_true",
        default=None,
        help="Do not resolve requires inside build-replace Lua payloads.",
    )
    parser.add_argument(
        "--root",
        metavar="DIR",
        help="Directory that require and build-replace paths are relative to.",
    )
    parser.add_argument("--luac", metavar="PATH", help="Host Lua compiler to use.")
    parser.add_argument("--config", help="Path to a .lumin.json(c) config file.")
    parser.add_argument(
        "--tokens",
        action="store_true",
        help="Print the token list of the input and exit.",
    )

    # --- Color ---
    color = parser.add_mutually_exclusive_group()
    color.add_argument(
        "--no-color",
        dest="use_color",
        action="store_const",
        const=False,
        help="Disable ANSI color output.",
    )
    color.add_argument(
        "--color",
        dest="use_color",
        action="store_const",
        const=True,
        help="Force-enable ANSI color output (overrides auto-detect).",
    )
    color.set_defaults(use_color=None)

    # --- Version and verbosity ---
    parser.add_argument("--version", action="store_true", help="Show version info.")

    log_level = parser.add_mutually_exclusive_group()
    log_level.add_argument(
        "-q",
        "--quiet",
        action="store_const",
        const="warning",
        dest="log_level",
        help="Suppress non-critical output (same as --log-level warning).",
    )
    log_level.add_argument(
        "-v",
        "--verbose",
        action="store_const",
        const="debug",
        dest="log_level",
        help="Verbose output (same as --log-level debug).",
    )
    log_level.add_argument(
        "--log-level",
        choices=LEVEL_ORDER,
        default=None,
        dest="log_level",
        help="Set log verbosity level.",
    )
    parser.add_argument(
        "--selftest",
        action="store_true",
        help="Run a built-in sanity test to verify tool correctness.",
    )
    return parser


def _read_input(input_file: str, cwd: Path) -> str:
    if input_file == "-":
        return sys.stdin.buffer.read().decode(SOURCE_ENCODING, errors=SOURCE_ERRORS)
    path = cwd / input_file
    if not path.is_file():
        xmsg = f"Error opening input file: {input_file}"
        raise FileNotFoundError(xmsg)
    return read_source(path)


def _write_output(result: str | bytes, output: Path | None) -> None:
    if output is None:
        # bypass the text layer so surrogate-escaped bytes round-trip
        if isinstance(result, str):
            result = result.encode(SOURCE_ENCODING, errors=SOURCE_ERRORS)
        sys.stdout.flush()
        sys.stdout.buffer.write(result)
        sys.stdout.buffer.flush()
        return

    if isinstance(result, bytes):
        output.write_bytes(result)
    else:
        write_source(output, result)


def _process(text: str, options: Options) -> str | bytes:
    """Run the configured pipeline over one source text."""
    if options["minify"]:
        new_text = minify(
            text,
            standalone=options["recursive"],
            remove_delete_blocks=options["delete_blocks"],
            progress=options["progress"],
            sandbox=options["sandbox"],
            base_dir=options["root"],
        )
    else:
        new_text = pack(
            text,
            remove_delete_blocks=options["delete_blocks"],
            progress=options["progress"],
            sandbox=options["sandbox"],
            base_dir=options["root"],
        )

    if options["compile"]:
        return compile_lua(new_text, luac=options["luac"])
    return new_text


def _report(message: str, *, internal: bool = False) -> None:
    """Log a fatal error; fall back to raw stderr if logging breaks."""
    try:
        if internal:
            get_logger().critical("Unexpected internal error: %s", message)
        else:
            get_logger().error("%s", message)
    except Exception:  # noqa: BLE001
        safe_log(f"[FATAL] Logging failed while reporting: {message}")


# --------------------------------------------------------------------------- #
# Main entry
# --------------------------------------------------------------------------- #


def main(argv: list[str] | None = None) -> int:
    logger = get_logger()

    try:
        args = _setup_parser().parse_args(argv)

        # CLI and env decide the level until a config is loaded
        set_log_level(determine_log_level(args))
        current_runtime["use_color"] = (
            should_use_color() if args.use_color is None else args.use_color
        )
        logger.debug(
            "%s on Python %s (%s)",
            PROGRAM_DISPLAY,
            platform.python_version(),
            platform.python_implementation(),
        )

        if args.version:
            meta = get_metadata()
            print(f"{PROGRAM_DISPLAY} {meta.version} ({meta.commit})")
            return 0

        if args.selftest:
            return 0 if run_selftest() else 1

        # --- configuration ---
        cwd = Path.cwd().resolve()
        config_path = find_config(args, cwd)
        config: LuminConfigInput = load_config(config_path) if config_path else {}
        options = resolve_options(
            args, config, config_path.parent if config_path else cwd, cwd
        )
        set_log_level(options["log_level"])
        if config_path:
            logger.debug("🔧 Using config: %s", config_path)
        logger.trace("[CONFIG] resolved options: %s", options)

        text = _read_input(args.input_file, cwd)

        if args.tokens:
            print(describe(tokenize(text)))
            return 0

        output = options.get("output")
        _write_output(_process(text, options), output)
        if output:
            logger.info("✅ Wrote %s", output)

    except (FileNotFoundError, ValueError, TypeError, RuntimeError) as e:
        _report(str(e))
        return 1

    except Exception as e:  # noqa: BLE001
        _report(str(e), internal=True)
        return 1

    return 0
