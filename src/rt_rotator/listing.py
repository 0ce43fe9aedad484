"""Directory snapshots and the batch conversion command."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List

from .errors import NotFoundError, ReadError
from .sidecar import OUTPUT_SUFFIX, SIDECAR_SUFFIX, PathArg

log = logging.getLogger(__name__)

CONVERSION_PREFIX = (
    "parallel --delay 2 -j3 rawtherapee-cli -o converted -q "
    "-p {}.pp3.rot -j90 -js2 -Y -c {} ::: "
)
CONVERSION_FOOTER = (
    "\n\n# Optionally replace the original pp3 files with the modified ones:\n"
    '# for f in *.pp3.rot; do mv -- "$f" "${f%.rot}"; done'
)


def _checked_name(entry: os.DirEntry, directory: Path) -> str:
    try:
        entry.name.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ReadError("Cannot handle non UTF-8 file paths", directory) from exc
    return entry.name


def _scan(directory: PathArg) -> List[os.DirEntry]:
    d = Path(directory)
    try:
        with os.scandir(d) as it:
            return list(it)
    except (FileNotFoundError, NotADirectoryError, PermissionError) as exc:
        raise NotFoundError("Directory not found or inaccessible", d) from exc
    except OSError as exc:
        raise ReadError(f"Cannot list directory ({exc})", d) from exc


def _is_file(entry: os.DirEntry) -> bool:
    try:
        return entry.is_file()
    except OSError:
        return False


def list_images(directory: PathArg, extension: str) -> List[Path]:
    """Files in ``directory`` whose extension matches ``extension``.

    Matching ignores case and an optional leading dot. The result is sorted by
    full path and reflects the directory at call time only.
    """
    d = Path(directory)
    wanted = "." + extension.lstrip(".").lower()
    images: List[Path] = []
    for entry in _scan(d):
        name = _checked_name(entry, d)
        if _is_file(entry) and Path(name).suffix.lower() == wanted:
            images.append(d / name)
    images.sort(key=str)
    log.info("Found %d *%s files in %s", len(images), wanted, d)
    return images


def list_rotated_sidecars(raw_dir: PathArg) -> List[Path]:
    """``*.rot`` files in ``raw_dir``, sorted by name."""
    d = Path(raw_dir)
    found = [
        d / name
        for name in (_checked_name(e, d) for e in _scan(d))
        if Path(name).suffix == OUTPUT_SUFFIX
    ]
    found.sort(key=str)
    return found


def raw_name_for(rotated: PathArg) -> str:
    """``IMG_0001.NEF.pp3.rot`` -> ``IMG_0001.NEF``."""
    stem = Path(rotated).stem
    if stem.endswith(SIDECAR_SUFFIX):
        stem = stem[: -len(SIDECAR_SUFFIX)]
    return stem


def build_conversion_command(raw_dir: PathArg) -> str:
    """Shell text that feeds every ``.pp3.rot`` in ``raw_dir`` to rawtherapee-cli.

    The text is meant to be copied into a terminal opened in ``raw_dir``; it is
    never executed here.
    """
    names = [raw_name_for(p) for p in list_rotated_sidecars(raw_dir)]
    command = CONVERSION_PREFIX + "".join(f"{name} " for name in names)
    log.debug("Conversion command covers %d files", len(names))
    return command + CONVERSION_FOOTER


__all__ = [
    "list_images",
    "list_rotated_sidecars",
    "raw_name_for",
    "build_conversion_command",
]
