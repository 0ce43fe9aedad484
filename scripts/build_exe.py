"""Build a standalone rt_rotator executable with PyInstaller.

The version is taken from setuptools_scm and embedded as ``version.json`` so
that :func:`rt_rotator.get_version` works inside the frozen app.
"""

from __future__ import annotations

import argparse
import json
import os
import re
import subprocess
import sys
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import List, Optional, Sequence

BASE_DIR = Path(__file__).resolve().parent.parent
ENTRY_POINT = BASE_DIR / "src/rt_rotator/app.py"
APP_NAME = "rt_rotator"

# Qt modules the rotator never imports; JPEG loading needs QtGui's image
# format plugins, so those stay.
EXCLUDED_MODULES = (
    "PySide6.QtNetwork",
    "PySide6.QtQml",
    "PySide6.QtQuick",
    "PySide6.QtPdf",
    "PySide6.QtSvg",
    "PySide6.QtWebEngineCore",
    "PySide6.QtMultimedia",
    "tkinter",
)

_SAFE = re.compile(r"[^A-Za-z0-9.-]+")


def _safe_version(version: str) -> str:
    cleaned = _SAFE.sub("-", version).strip("-")
    return cleaned or "unknown"


def _scm_version() -> str:
    try:
        import setuptools_scm  # type: ignore[import-untyped]

        return str(setuptools_scm.get_version(root=BASE_DIR))
    except (ImportError, LookupError):
        return "unknown"


def pyinstaller_command(
    version: str, version_json: Path, onedir: bool = False, console: bool = False
) -> List[str]:
    data_sep = ";" if os.name == "nt" else ":"
    cmd = [
        "pyinstaller",
        "--onedir" if onedir else "--onefile",
        "--name",
        f"{APP_NAME}-v{_safe_version(version)}",
        "--clean",
        "--add-data",
        f"{version_json}{data_sep}{APP_NAME}",
    ]
    if not console:
        cmd.append("--noconsole")
    for module in EXCLUDED_MODULES:
        cmd += ["--exclude-module", module]
    cmd.append(str(ENTRY_POINT))
    return cmd


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--onedir", action="store_true", help="Build a folder")
    parser.add_argument(
        "--console", action="store_true", help="Keep a console for log output"
    )
    args = parser.parse_args(argv)

    version = _scm_version()
    with TemporaryDirectory() as tmp:
        version_json = Path(tmp) / "version.json"
        version_json.write_text(
            json.dumps({"version": version}, indent=4), encoding="utf-8"
        )
        cmd = pyinstaller_command(version, version_json, args.onedir, args.console)
        print(" ".join(cmd))
        ret = subprocess.call(cmd, cwd=BASE_DIR)
    sys.exit(ret)


if __name__ == "__main__":
    main()
