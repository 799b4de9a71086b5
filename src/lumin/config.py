# src/lumin/config.py


import argparse
import os
from difflib import get_close_matches
from pathlib import Path
from typing import Any, cast

from .constants import (
    DEFAULT_COMPILE,
    DEFAULT_DELETE_BLOCKS,
    DEFAULT_ENV_LOG_LEVEL,
    DEFAULT_ENV_LUAC,
    DEFAULT_ENV_SANDBOX,
    DEFAULT_LOG_LEVEL,
    DEFAULT_LUAC,
    DEFAULT_MINIFY,
    DEFAULT_PROGRESS,
    DEFAULT_RECURSIVE,
    DEFAULT_SANDBOX,
)
from .meta import PROGRAM_ENV, PROGRAM_SCRIPT
from .types import LuminConfigInput, Options
from .utils import load_jsonc, remove_path_in_error_message
from .utils_logs import LEVEL_ORDER, get_logger

_TRUE_VALUES = {"1", "true", "yes", "on"}

# option → expected JSON type
CONFIG_SCHEMA: dict[str, type] = {
    "minify": bool,
    "recursive": bool,
    "delete_blocks": bool,
    "progress": bool,
    "compile": bool,
    "sandbox": bool,
    "output": str,
    "root": str,
    "luac": str,
    "log_level": str,
}

_BOOL_DEFAULTS: dict[str, bool] = {
    "minify": DEFAULT_MINIFY,
    "recursive": DEFAULT_RECURSIVE,
    "delete_blocks": DEFAULT_DELETE_BLOCKS,
    "progress": DEFAULT_PROGRESS,
    "compile": DEFAULT_COMPILE,
    "sandbox": DEFAULT_SANDBOX,
}


def _env(name: str) -> str | None:
    return os.getenv(f"{PROGRAM_ENV}_{name}")


def determine_log_level(
    args: argparse.Namespace,
    config_log_level: str | None = None,
) -> str:
    """Resolve log level from CLI → env → config → default."""
    if getattr(args, "log_level", None):
        return cast("str", args.log_level)

    env_log_level = _env(DEFAULT_ENV_LOG_LEVEL) or os.getenv(DEFAULT_ENV_LOG_LEVEL)
    if env_log_level:
        return env_log_level

    if config_log_level:
        return config_log_level

    return DEFAULT_LOG_LEVEL


def find_config(args: argparse.Namespace, cwd: Path) -> Path | None:
    """Locate a configuration file.

    Search order:
      1. Explicit path from CLI (--config)
      2. Default candidates in the current working directory:
         .{PROGRAM_SCRIPT}.jsonc, .{PROGRAM_SCRIPT}.json

    Returns the first matching path, or None if no config was found.
    """
    logger = get_logger()

    # --- 1. Explicit config path ---
    if getattr(args, "config", None):
        config = Path(args.config).expanduser().resolve()
        if not config.exists():
            # Explicit path → hard failure
            xmsg = f"Specified config file not found: {config}"
            raise FileNotFoundError(xmsg)
        if config.is_dir():
            xmsg = f"Specified config path is a directory, not a file: {config}"
            raise ValueError(xmsg)
        return config

    # --- 2. Default candidate files ---
    candidates: list[Path] = [
        cwd / f".{PROGRAM_SCRIPT}.jsonc",
        cwd / f".{PROGRAM_SCRIPT}.json",
    ]
    found = [p for p in candidates if p.exists()]

    if not found:
        # configs are optional
        logger.trace("No config file found in %s", cwd)
        return None

    if len(found) > 1:
        names = ", ".join(p.name for p in found)
        logger.warning(
            "Multiple config files detected (%s); using %s.", names, found[0].name
        )
    return found[0]


def load_config(config_path: Path) -> LuminConfigInput:
    """Load and validate a JSON/JSONC config file.

    An empty file (or one holding only comments) is an empty config.
    """
    try:
        raw = load_jsonc(config_path)
    except ValueError as e:
        clean_msg = remove_path_in_error_message(str(e), config_path)
        xmsg = (
            f"Error while loading configuration file '{config_path.name}': {clean_msg}"
        )
        raise ValueError(xmsg) from e

    if raw is None:
        return {}

    if not isinstance(raw, dict):
        xmsg = (
            f"Invalid top-level value in {config_path.name}: "
            f"{type(raw).__name__} (expected object)"
        )
        raise TypeError(xmsg)

    validate_config(raw, source=config_path.name)
    return cast("LuminConfigInput", raw)


def validate_config(raw: dict[str, Any], *, source: str = "config") -> None:
    """Reject unknown keys and wrongly typed values, with hints."""
    errors: list[str] = []

    for key, value in raw.items():
        expected = CONFIG_SCHEMA.get(key)
        if expected is None:
            msg = f"Unknown key {key!r} in {source}."
            close = get_close_matches(key, list(CONFIG_SCHEMA), n=1, cutoff=0.6)
            if close:
                msg += f" Hint: did you mean {close[0]!r}?"
            errors.append(msg)
            continue

        # bool is an int subclass; neither is accepted for the other
        if type(value) is not expected:
            errors.append(
                f"{key!r} in {source} must be {expected.__name__},"
                f" not {type(value).__name__}."
            )

    level = raw.get("log_level")
    if isinstance(level, str) and level not in LEVEL_ORDER:
        errors.append(
            f"'log_level' in {source} must be one of {', '.join(LEVEL_ORDER)}."
        )

    if errors:
        raise ValueError("\n".join(errors))


def _resolve_bool(
    name: str,
    args: argparse.Namespace,
    config: LuminConfigInput,
    env_name: str | None = None,
) -> bool:
    cli_value = getattr(args, name, None)
    if cli_value:
        return True

    if env_name:
        env_value = _env(env_name)
        if env_value is not None:
            return env_value.lower() in _TRUE_VALUES

    if name in config:
        return bool(config[name])  # type: ignore[literal-required]

    return _BOOL_DEFAULTS[name]


def resolve_options(
    args: argparse.Namespace,
    config: LuminConfigInput,
    config_dir: Path,
    cwd: Path,
) -> Options:
    """Merge CLI args, environment and config into run options.

    CLI paths are relative to `cwd`; config paths to `config_dir`.
    """
    # --- root (base directory for require and build-replace paths) ---
    if getattr(args, "root", None):
        root = (cwd / args.root).resolve()
    elif "root" in config:
        root = (config_dir / config["root"]).resolve()
    else:
        root = cwd

    # --- output ---
    output: Path | None = None
    cli_out = getattr(args, "output", None)
    if cli_out and cli_out != "-":
        output = (cwd / cli_out).resolve()
    elif not cli_out and config.get("output") not in (None, "-"):
        output = (config_dir / cast("str", config["output"])).resolve()

    luac = (
        getattr(args, "luac", None)
        or _env(DEFAULT_ENV_LUAC)
        or config.get("luac")
        or DEFAULT_LUAC
    )

    return {
        "minify": _resolve_bool("minify", args, config),
        "recursive": _resolve_bool("recursive", args, config),
        "delete_blocks": _resolve_bool("delete_blocks", args, config),
        "progress": _resolve_bool("progress", args, config),
        "compile": _resolve_bool("compile", args, config),
        "sandbox": _resolve_bool("sandbox", args, config, DEFAULT_ENV_SANDBOX),
        "root": root,
        "luac": luac,
        "log_level": determine_log_level(args, config.get("log_level")),
        "output": output,
    }
