"""Selection and rotation state for one browsing session, free of Qt."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import List, Optional

from .errors import NoImageSelectedError
from .listing import build_conversion_command, list_images
from .models import AppConfig, DragGesture, RotationMode, RotationState
from .rotation import apply_free_drag, apply_line_drag, reset, with_mode
from .sidecar import apply_rotation_delta, sidecar_path

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Directories:
    """Where previews and raw sidecars live."""

    image_dir: str = ""
    image_ext: str = "jpg"
    raw_dir: str = ""
    raw_ext: str = "NEF"

    @staticmethod
    def from_config(cfg: AppConfig) -> "Directories":
        return Directories(cfg.image_dir, cfg.image_ext, cfg.raw_dir, cfg.raw_ext)


@dataclass
class RotatorSession:
    dirs: Directories = field(default_factory=Directories)
    images: List[Path] = field(default_factory=list)
    index: int = 0
    rotation: RotationState = field(default_factory=reset)

    @staticmethod
    def from_config(cfg: AppConfig) -> "RotatorSession":
        """Restore a session; the image list stays empty until reopened."""
        return RotatorSession(
            dirs=Directories.from_config(cfg),
            index=cfg.current_image_idx,
            rotation=with_mode(
                RotationState(cfg.current_rotation, RotationMode.LINE),
                cfg.rotation_mode,
            ),
        )

    def store(self, cfg: AppConfig) -> None:
        cfg.image_dir = self.dirs.image_dir
        cfg.image_ext = self.dirs.image_ext
        cfg.raw_dir = self.dirs.raw_dir
        cfg.raw_ext = self.dirs.raw_ext
        cfg.current_image_idx = self.index
        cfg.current_rotation = self.rotation.accumulated_degrees
        cfg.rotation_mode = self.rotation.mode

    # ----------------------------- Selection ----------------------------------

    @property
    def current_image(self) -> Optional[Path]:
        if 0 <= self.index < len(self.images):
            return self.images[self.index]
        return None

    @property
    def current_sidecar(self) -> Optional[Path]:
        image = self.current_image
        if image is None:
            return None
        return sidecar_path(self.dirs.raw_dir, image, self.dirs.raw_ext)

    def set_directories(self, dirs: Directories) -> None:
        self.dirs = dirs

    def open_image_directory(self) -> List[Path]:
        """Take a fresh snapshot of the preview directory.

        The previous selection index is kept when it is still in range.
        """
        self.images = list_images(self.dirs.image_dir, self.dirs.image_ext)
        index = self.index if self.index < len(self.images) else 0
        self.select(index)
        return self.images

    def select(self, index: int) -> RotationState:
        """Select by position; the rotation always restarts at zero."""
        self.index = index
        self.rotation = reset(self.rotation.mode)
        log.debug("Selected #%d: %s", index, self.current_image)
        return self.rotation

    def select_next(self) -> bool:
        if self.index + 1 < len(self.images):
            self.select(self.index + 1)
            return True
        return False

    def select_previous(self) -> bool:
        if self.index > 0 and self.index - 1 < len(self.images):
            self.select(self.index - 1)
            return True
        return False

    # ------------------------------ Rotation ----------------------------------

    def set_mode(self, mode: RotationMode) -> RotationState:
        self.rotation = with_mode(self.rotation, mode)
        return self.rotation

    def set_rotation(self, state: RotationState) -> None:
        self.rotation = state

    def reset_rotation(self) -> RotationState:
        self.rotation = reset(self.rotation.mode)
        return self.rotation

    def free_drag(self, delta_y: float) -> RotationState:
        self.rotation = apply_free_drag(self.rotation, delta_y)
        return self.rotation

    def line_drag(self, gesture: DragGesture) -> RotationState:
        self.rotation = apply_line_drag(self.rotation, gesture)
        return self.rotation

    # ------------------------------ Outputs -----------------------------------

    def apply_rotation(self, strict: bool = False) -> Path:
        """Write the ``.pp3.rot`` for the current image."""
        path = self.current_sidecar
        if path is None:
            raise NoImageSelectedError("No image selected")
        return apply_rotation_delta(
            path, self.rotation.accumulated_degrees, strict=strict
        )

    def conversion_command(self) -> str:
        return build_conversion_command(self.dirs.raw_dir)


__all__ = ["Directories", "RotatorSession"]
