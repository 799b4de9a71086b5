# tests/conftest.py
"""
Shared test setup for project.

Diagnostics are asserted through `capsys`: the lumin logger writes to
whatever `sys.stderr` is at emit time.
"""

from collections.abc import Generator

import pytest

import lumin.runtime as mod_runtime
from lumin.utils_logs import set_log_level


@pytest.fixture(autouse=True)
def reset_runtime() -> Generator[None, None, None]:
    """Reset runtime log level and color between tests."""
    mod_runtime.current_runtime["use_color"] = False
    set_log_level("info")
    yield
    mod_runtime.current_runtime["use_color"] = False
    set_log_level("info")
