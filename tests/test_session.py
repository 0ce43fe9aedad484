"""Selection and commit flow without any Qt involvement."""

from __future__ import annotations

from pathlib import Path

import pytest

from rt_rotator.errors import NoImageSelectedError, NotFoundError
from rt_rotator.models import (
    AppConfig,
    DragGesture,
    Point,
    RotationMode,
    RotationState,
)
from rt_rotator.session import Directories, RotatorSession


@pytest.fixture
def dirs(tmp_path: Path) -> Directories:
    jpg = tmp_path / "jpg"
    raw = tmp_path / "raw"
    jpg.mkdir()
    raw.mkdir()
    for name in ("IMG_0002.jpg", "IMG_0001.jpg", "IMG_0003.JPG"):
        (jpg / name).write_bytes(b"")
    (raw / "IMG_0001.NEF.pp3").write_text(
        "[Rotation]\nDegree=2\n[Crop]\nEnabled=false\n", encoding="utf-8"
    )
    return Directories(str(jpg), "jpg", str(raw), "NEF")


def test_open_and_navigate(dirs: Directories) -> None:
    s = RotatorSession(dirs=dirs)
    images = s.open_image_directory()

    assert [p.name for p in images] == ["IMG_0001.jpg", "IMG_0002.jpg", "IMG_0003.JPG"]
    assert s.current_image == images[0]
    assert s.current_sidecar == Path(dirs.raw_dir) / "IMG_0001.NEF.pp3"

    assert not s.select_previous()
    assert s.select_next() and s.select_next()
    assert s.index == 2
    assert not s.select_next()


def test_selection_always_resets_rotation(dirs: Directories) -> None:
    s = RotatorSession(dirs=dirs)
    s.open_image_directory()
    s.free_drag(200.0)
    assert s.rotation.accumulated_degrees == 20.0

    s.select(1)
    assert s.rotation.accumulated_degrees == 0.0
    s.line_drag(DragGesture(Point(100.0, 10.0), Point(0.0, 0.0)))
    assert s.rotation.accumulated_degrees != 0.0
    s.select_previous()
    assert s.rotation.accumulated_degrees == 0.0


def test_open_keeps_index_in_range(dirs: Directories) -> None:
    s = RotatorSession(dirs=dirs, index=2)
    s.open_image_directory()
    assert s.index == 2
    s = RotatorSession(dirs=dirs, index=9)
    s.open_image_directory()
    assert s.index == 0


def test_apply_rotation_writes_rot_file(dirs: Directories) -> None:
    s = RotatorSession(dirs=dirs)
    s.open_image_directory()
    s.set_mode(RotationMode.FREE)
    s.free_drag(-30.0)

    out = s.apply_rotation()

    assert out == Path(dirs.raw_dir) / "IMG_0001.NEF.pp3.rot"
    assert out.read_text(encoding="utf-8") == (
        "[Rotation]\nDegree=5\n[Crop]\nEnabled=false"
    )
    assert "IMG_0001.NEF" in s.conversion_command()


def test_apply_rotation_without_sidecar(dirs: Directories) -> None:
    s = RotatorSession(dirs=dirs)
    s.open_image_directory()
    s.select(1)
    with pytest.raises(NotFoundError):
        s.apply_rotation()


def test_apply_rotation_without_images(tmp_path: Path) -> None:
    s = RotatorSession(dirs=Directories(str(tmp_path), "jpg", str(tmp_path), "NEF"))
    s.open_image_directory()
    with pytest.raises(NoImageSelectedError):
        s.apply_rotation()


def test_mode_switch_clamps_into_free_range() -> None:
    s = RotatorSession(rotation=RotationState(-60.0, RotationMode.LINE))
    assert s.set_mode(RotationMode.FREE).accumulated_degrees == -45.0


def test_restored_free_angle_is_clamped() -> None:
    cfg = AppConfig(current_rotation=80.0, rotation_mode=RotationMode.FREE)
    s = RotatorSession.from_config(cfg)
    assert s.rotation == RotationState(45.0, RotationMode.FREE)

    cfg.rotation_mode = RotationMode.LINE
    assert RotatorSession.from_config(cfg).rotation.accumulated_degrees == 80.0


def test_config_round_trip(dirs: Directories) -> None:
    cfg = AppConfig(
        image_dir=dirs.image_dir,
        raw_dir=dirs.raw_dir,
        current_image_idx=1,
        current_rotation=-3.5,
        rotation_mode=RotationMode.FREE,
    )
    s = RotatorSession.from_config(cfg)
    assert s.dirs == dirs
    assert s.index == 1
    assert s.rotation.accumulated_degrees == -3.5
    assert s.rotation.mode is RotationMode.FREE

    s.select(2)
    out = AppConfig()
    s.store(out)
    assert out.current_image_idx == 2
    assert out.current_rotation == 0.0
    assert out.rotation_mode is RotationMode.FREE
    assert out.raw_ext == "NEF"
