"""Patch the rotation angle of a RawTherapee ``.pp3`` sidecar.

A ``.pp3`` file is an INI-like text file. Only the ``Degree`` key of the
``[Rotation]`` section is touched; every other line, including comments and
sections this module knows nothing about, is copied through verbatim and in
order. The result goes to ``<input>.rot`` next to the input, which is never
modified.
"""

from __future__ import annotations

import logging
import math
import re
from os import PathLike
from pathlib import Path
from typing import Iterable, List, Union

from .errors import (
    KeyNotFoundError,
    MalformedValueError,
    NotFoundError,
    ReadError,
    SectionNotFoundError,
    WriteError,
)

log = logging.getLogger(__name__)

SECTION_MARKER = "[Rotation]"
KEY_PREFIX = "Degree="
OUTPUT_SUFFIX = ".rot"
SIDECAR_SUFFIX = ".pp3"

PathArg = Union[str, PathLike]

# Plain decimal or exponent notation, or inf/infinity/nan; no spaces or underscores
_DEGREE_RE = re.compile(
    r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)


# ------------------------------- Paths ----------------------------------------


def rotated_path(path: PathArg) -> Path:
    """``X.pp3`` -> ``X.pp3.rot`` in the same directory."""
    p = Path(path)
    return p.with_name(p.name + OUTPUT_SUFFIX)


def sidecar_path(raw_dir: PathArg, image_path: PathArg, raw_ext: str) -> Path:
    """Sidecar of the raw file a preview image was exported from.

    ``previews/IMG_0001.jpg`` with ``raw_ext="NEF"`` maps to
    ``raw_dir/IMG_0001.NEF.pp3``.
    """
    ext = raw_ext.lstrip(".")
    return Path(raw_dir) / f"{Path(image_path).stem}.{ext}{SIDECAR_SUFFIX}"


# ------------------------------ Text helpers ----------------------------------


def split_lines(text: str) -> List[str]:
    """Split on ``\\n``, dropping a trailing ``\\r`` and the empty tail after
    a final newline."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def format_degree(value: float) -> str:
    """Shortest text that parses back to ``value``; ``10.0`` prints as ``10``."""
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return repr(value)


def _is_section_header(line: str) -> bool:
    s = line.strip()
    return len(s) >= 2 and s[0] == "[" and s[-1] == "]"


def parse_degree(line: str) -> float:
    _, sep, raw = line.partition("=")
    if not sep:
        raise MalformedValueError(f"Line invalid: {line!r}")
    if not _DEGREE_RE.fullmatch(raw):
        raise MalformedValueError(f"Rotation invalid: {raw!r}")
    return float(raw)


# ------------------------------- Rewriting ------------------------------------


def rewrite_lines(
    lines: Iterable[str], delta_degrees: float, strict: bool = False
) -> List[str]:
    """Return ``lines`` with ``[Rotation] Degree`` decreased by ``delta_degrees``.

    Only the first ``Degree=`` line of the first ``[Rotation]`` section is
    changed; the section ends at the next ``[...]`` header. Without a section
    or key the lines come back unchanged unless ``strict`` is set, in which
    case :class:`SectionNotFoundError` or :class:`KeyNotFoundError` is raised.
    """
    out = list(lines)
    in_section = False
    for i, line in enumerate(out):
        if not in_section:
            in_section = line.strip() == SECTION_MARKER
        elif line.startswith(KEY_PREFIX):
            old = parse_degree(line)
            out[i] = KEY_PREFIX + format_degree(old - delta_degrees)
            log.debug("Degree %s -> %s", format_degree(old), out[i])
            return out
        elif _is_section_header(line):
            break

    if not in_section:
        if strict:
            raise SectionNotFoundError(f"No {SECTION_MARKER} section")
        log.warning("No %s section, copying sidecar unchanged", SECTION_MARKER)
    else:
        if strict:
            raise KeyNotFoundError(f"No {KEY_PREFIX} line in {SECTION_MARKER}")
        log.warning("No %s line, copying sidecar unchanged", KEY_PREFIX)
    return out


def read_lines(path: PathArg) -> List[str]:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except (FileNotFoundError, PermissionError) as exc:
        raise NotFoundError("Sidecar not found or inaccessible", p) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ReadError(f"Cannot read sidecar ({exc})", p) from exc
    return split_lines(text)


def write_lines(path: PathArg, lines: Iterable[str]) -> None:
    p = Path(path)
    try:
        with open(p, "w", encoding="utf-8", newline="") as f:
            f.write("\n".join(lines))
    except OSError as exc:
        raise WriteError(f"Cannot write sidecar ({exc})", p) from exc


def apply_rotation_delta(
    path: PathArg, delta_degrees: float, strict: bool = False
) -> Path:
    """Write ``<path>.rot`` with the rotation reduced by ``delta_degrees``.

    The sidecar is read fresh on every call. Nothing is written if reading or
    parsing fails.

    :return: Path of the written ``.rot`` file.
    """
    src = Path(path)
    lines = read_lines(src)
    try:
        rewritten = rewrite_lines(lines, delta_degrees, strict=strict)
    except (MalformedValueError, SectionNotFoundError, KeyNotFoundError) as exc:
        exc.path = src
        raise
    dst = rotated_path(src)
    write_lines(dst, rewritten)
    log.info("Wrote %s (delta %s°)", dst, format_degree(delta_degrees))
    return dst


__all__ = [
    "SECTION_MARKER",
    "KEY_PREFIX",
    "OUTPUT_SUFFIX",
    "rotated_path",
    "sidecar_path",
    "split_lines",
    "format_degree",
    "parse_degree",
    "rewrite_lines",
    "read_lines",
    "write_lines",
    "apply_rotation_delta",
]
