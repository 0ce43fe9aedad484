from pathlib import Path

import pytest

from rt_rotator.errors import NotFoundError
from rt_rotator.listing import (
    build_conversion_command,
    list_images,
    list_rotated_sidecars,
    raw_name_for,
)


def _touch(directory: Path, *names: str) -> None:
    for name in names:
        (directory / name).write_bytes(b"")


def test_list_images_filters_case_insensitively(tmp_path: Path) -> None:
    _touch(tmp_path, "b.jpg", "a.JPG", "c.png", "d.jpeg", "noext")
    (tmp_path / "e.jpg").mkdir()

    images = list_images(tmp_path, "jpg")

    assert images == [tmp_path / "a.JPG", tmp_path / "b.jpg"]
    assert list_images(tmp_path, ".JPG") == images


def test_list_images_is_a_snapshot(tmp_path: Path) -> None:
    _touch(tmp_path, "a.jpg")
    first = list_images(tmp_path, "jpg")
    _touch(tmp_path, "b.jpg")
    assert first == [tmp_path / "a.jpg"]
    assert len(list_images(tmp_path, "jpg")) == 2


def test_list_images_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(NotFoundError):
        list_images(tmp_path / "nope", "jpg")


def test_list_images_on_a_file(tmp_path: Path) -> None:
    _touch(tmp_path, "a.jpg")
    with pytest.raises(NotFoundError):
        list_images(tmp_path / "a.jpg", "jpg")


def test_raw_name_for() -> None:
    assert raw_name_for("IMG_0001.NEF.pp3.rot") == "IMG_0001.NEF"
    assert raw_name_for(Path("/x/odd.rot")) == "odd"


def test_conversion_command(tmp_path: Path) -> None:
    _touch(
        tmp_path,
        "IMG_2.NEF.pp3.rot",
        "IMG_1.NEF.pp3.rot",
        "IMG_1.NEF.pp3",
        "IMG_1.NEF",
    )

    assert list_rotated_sidecars(tmp_path) == [
        tmp_path / "IMG_1.NEF.pp3.rot",
        tmp_path / "IMG_2.NEF.pp3.rot",
    ]
    command = build_conversion_command(tmp_path)

    first_line = command.splitlines()[0]
    assert first_line == (
        "parallel --delay 2 -j3 rawtherapee-cli -o converted -q -p {}.pp3.rot "
        "-j90 -js2 -Y -c {} ::: IMG_1.NEF IMG_2.NEF "
    )
    assert command.endswith('# for f in *.pp3.rot; do mv -- "$f" "${f%.rot}"; done')
    assert "\n\n# Optionally replace the original pp3 files" in command


def test_conversion_command_without_rot_files(tmp_path: Path) -> None:
    command = build_conversion_command(tmp_path)
    assert command.splitlines()[0].endswith("::: ")
