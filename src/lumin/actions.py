# src/lumin/actions.py
import re
import shutil
import subprocess
import tempfile
from pathlib import Path

from .meta import PROGRAM_DISPLAY, PROGRAM_SCRIPT, Metadata
from .pipeline import minify
from .utils_logs import get_logger

_SELFTEST_MAIN = """\
#!/usr/bin/env lua
local greet = require 'lib.greet'
--[[minify-delete]]
print('debug only')
--[[/minify-delete]]
local banner = --[[build-replace=banner.txt]] nil --[[/build-replace]]
print(banner, greet('world'))
"""

_SELFTEST_MODULE = """\
-- greeting helper
return function(name)
  return 'hello ' .. name
end
"""

_SELFTEST_BANNER = 'say "hi"\n'


_VERSION_LINE = re.compile(r'(?m)^\s*version\s*=\s*["\']([^"\']+)["\']')


def _git_commit(root: Path) -> str:
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],  # noqa: S607
            cwd=root,
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return "unknown"
    return result.stdout.strip() or "unknown"


def get_metadata() -> Metadata:
    """Return the version (from pyproject.toml) and git commit.

    Either falls back to "unknown", e.g. in an installed wheel.
    """
    root = Path(__file__).resolve().parents[2]
    pyproject = root / "pyproject.toml"

    version = "unknown"
    if pyproject.is_file():
        match = _VERSION_LINE.search(pyproject.read_text(encoding="utf-8"))
        if match:
            version = match.group(1)

    meta = Metadata(version, _git_commit(root))
    get_logger().trace("[META] %s", meta)
    return meta


def run_selftest() -> bool:
    """Run a lightweight functional test of the tool itself."""
    logger = get_logger()
    logger.info("🧪 Running self-test...")

    tmp_dir: Path | None = None
    try:
        tmp_dir = Path(tempfile.mkdtemp(prefix=f"{PROGRAM_SCRIPT}-selftest-"))
        (tmp_dir / "lib").mkdir()
        (tmp_dir / "lib" / "greet.lua").write_text(_SELFTEST_MODULE, encoding="utf-8")
        (tmp_dir / "banner.txt").write_text(_SELFTEST_BANNER, encoding="utf-8")

        logger.debug("[SELFTEST] using temp dir: %s", tmp_dir)

        result = minify(
            _SELFTEST_MAIN,
            standalone=True,
            remove_delete_blocks=True,
            base_dir=tmp_dir,
        )
        logger.debug("[SELFTEST] output: %s", result)

        expected = [
            "function RQ0()",  # accessor for lib/greet.lua
            "local greet=RQ0()",
            'local banner="say \\"hi\\"\\n"',
        ]
        missing = [part for part in expected if part not in result]
        if not missing and "debug only" not in result and "require" not in result:
            logger.info(
                "✅ Self-test passed: %s is working correctly.", PROGRAM_DISPLAY
            )
            return True

        logger.error("Self-test failed: unexpected output: %s", result)
        return False

    except PermissionError:
        logger.error("Self-test failed: insufficient permissions.")  # noqa: TRY400
        return False
    except FileNotFoundError:
        logger.error("Self-test failed: missing file or directory.")  # noqa: TRY400
        return False
    except Exception:
        # a bug in lumin itself; keep the traceback
        logger.exception(
            "Unexpected self-test failure. "
            "Please report this issue with the following traceback:"
        )
        return False

    finally:
        if tmp_dir and tmp_dir.exists():
            shutil.rmtree(tmp_dir, ignore_errors=True)
