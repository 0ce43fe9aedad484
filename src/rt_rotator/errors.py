"""Exceptions raised by the sidecar, listing and session layers."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class RotatorError(Exception):
    """Base class for every failure surfaced to the UI layer."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        msg = super().__str__()
        if self.path is not None:
            return f"{msg}: {self.path}"
        return msg


class NotFoundError(RotatorError):
    """The path does not exist or is inaccessible."""


class ReadError(RotatorError):
    """Reading a file or listing a directory failed."""


class WriteError(RotatorError):
    """Writing the rotated sidecar failed."""


class MalformedValueError(RotatorError):
    """The ``Degree=`` line holds something that is not a number."""


class SectionNotFoundError(RotatorError):
    """No ``[Rotation]`` section (strict mode only)."""


class KeyNotFoundError(RotatorError):
    """``[Rotation]`` present but without a ``Degree=`` line (strict mode only)."""


class NoImageSelectedError(RotatorError):
    """An action needs a selected image but the listing is empty."""


__all__ = [
    "RotatorError",
    "NotFoundError",
    "ReadError",
    "WriteError",
    "MalformedValueError",
    "SectionNotFoundError",
    "KeyNotFoundError",
    "NoImageSelectedError",
]
