"""Dataclasses describing rotation state, gestures and persisted preferences."""

from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, NamedTuple

import json


class RotationMode(str, Enum):
    """How pointer drags on the preview translate into rotation."""

    FREE = "free"  # vertical drag distance, clamped to +-45°
    LINE = "line"  # drawn line snapped to horizontal/vertical

    @classmethod
    def parse(cls, value: object, default: "RotationMode") -> "RotationMode":
        try:
            return cls(str(value).lower())
        except ValueError:
            return default


class Point(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True)
class DragGesture:
    """Pointer positions captured at drag start and at release."""

    start: Point
    end: Point


@dataclass(frozen=True)
class RotationState:
    """Accumulated rotation correction for the currently selected image."""

    accumulated_degrees: float = 0.0
    mode: RotationMode = RotationMode.LINE


@dataclass
class AppConfig:
    """Persisted configuration for the application."""

    image_dir: str = ""
    image_ext: str = "jpg"
    raw_dir: str = ""
    raw_ext: str = "NEF"
    current_image_idx: int = 0
    current_rotation: float = 0.0
    rotation_mode: RotationMode = RotationMode.LINE
    conversion_command: str = ""

    def to_json(self) -> str:
        data = asdict(self)
        data["rotation_mode"] = self.rotation_mode.value
        return json.dumps(data, indent=2)

    @staticmethod
    def from_json(text: str) -> "AppConfig":
        data: Dict = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("configuration must be a JSON object")
        d = AppConfig()
        return AppConfig(
            image_dir=str(data.get("image_dir", d.image_dir)),
            image_ext=str(data.get("image_ext", d.image_ext)),
            raw_dir=str(data.get("raw_dir", d.raw_dir)),
            raw_ext=str(data.get("raw_ext", d.raw_ext)),
            current_image_idx=max(
                0, int(data.get("current_image_idx", d.current_image_idx))
            ),
            current_rotation=float(data.get("current_rotation", d.current_rotation)),
            rotation_mode=RotationMode.parse(
                data.get("rotation_mode", d.rotation_mode.value), d.rotation_mode
            ),
            conversion_command=str(
                data.get("conversion_command", d.conversion_command)
            ),
        )


__all__ = [
    "RotationMode",
    "Point",
    "DragGesture",
    "RotationState",
    "AppConfig",
]
