"""Ensure the pure (Qt-free) modules type-check."""

import pathlib
import subprocess
import sys
from typing import Iterable, Tuple

import pytest

Command = Tuple[str, ...]

REPO_ROOT = pathlib.Path(__file__).resolve().parent.parent
MYPY_TARGETS: Tuple[str, ...] = (
    "src/rt_rotator/utils",
    "src/rt_rotator/errors.py",
    "src/rt_rotator/models.py",
    "src/rt_rotator/rotation.py",
    "src/rt_rotator/sidecar.py",
    "src/rt_rotator/listing.py",
    "src/rt_rotator/session.py",
)


def _python_module(module: str, *args: str) -> Command:
    return (sys.executable, "-m", module, *args)


def test_mypy() -> None:
    """Run mypy over everything except the Qt front end."""
    pytest.importorskip("mypy")
    command = _python_module("mypy", *MYPY_TARGETS)
    result = subprocess.run(
        command,
        cwd=REPO_ROOT,
        check=False,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        details: Iterable[str] = [
            f"command: {' '.join(command)}",
            f"exit code: {result.returncode}",
        ]
        stdout = result.stdout.strip()
        stderr = result.stderr.strip()
        if stdout:
            details = [*details, "stdout:\n" + stdout]
        if stderr:
            details = [*details, "stderr:\n" + stderr]
        pytest.fail("\n\n".join(details))
