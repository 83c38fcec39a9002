import logging
import os

import pytest

from psd2png.errors import DirectoryNotFound
from psd2png.locator import FileLocator, normalize_extension

logger = logging.getLogger(__name__)


def _touch(root, *names):
    for name in names:
        path = root.joinpath(*name.split("/"))
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"")


def test_locate(tmp_path):
    _touch(tmp_path, "b.psd", "a.PSD", "x/y/c.psb", "x/readme.txt", "d.png", "e.psd.bak")
    result = FileLocator().locate(str(tmp_path))
    assert [os.path.relpath(p, str(tmp_path)) for p in result] == [
        "a.PSD",
        "b.psd",
        os.path.join("x", "y", "c.psb"),
    ]
    assert all(os.path.isabs(p) for p in result)


def test_locate_extensions(tmp_path):
    _touch(tmp_path, "a.psd", "b.tif")
    result = FileLocator(["TIF"]).locate(str(tmp_path))
    assert [os.path.basename(p) for p in result] == ["b.tif"]


def test_locate_empty(tmp_path):
    _touch(tmp_path, "notes.txt")
    assert FileLocator().locate(str(tmp_path)) == []


def test_locate_skips_directories_and_broken_links(tmp_path):
    (tmp_path / "folder.psd").mkdir()
    os.symlink(str(tmp_path / "missing"), str(tmp_path / "broken.psd"))
    _touch(tmp_path, "ok.psd")
    result = FileLocator().locate(str(tmp_path))
    assert [os.path.basename(p) for p in result] == ["ok.psd"]


def test_locate_deterministic(tmp_path):
    _touch(tmp_path, "z/1.psd", "a/2.psd", "m.psd", "a/b/3.psd")
    locator = FileLocator()
    assert locator.locate(str(tmp_path)) == locator.locate(str(tmp_path))


@pytest.mark.parametrize("name", ["missing", "file.psd"])
def test_locate_not_directory(tmp_path, name):
    _touch(tmp_path, "file.psd")
    with pytest.raises(DirectoryNotFound):
        FileLocator().iter_files(str(tmp_path / name))


def test_matches():
    locator = FileLocator()
    assert locator.matches("/a/b.Psd")
    assert locator.matches("b.PSB")
    assert not locator.matches("b.png")
    assert not locator.matches("psd")


@pytest.mark.parametrize(
    "value, expected", [("psd", ".psd"), (".PSB", ".psb"), (" .Tif ", ".tif")]
)
def test_normalize_extension(value, expected):
    assert normalize_extension(value) == expected


@pytest.mark.parametrize("value", ["", ".", "  "])
def test_normalize_extension_invalid(value):
    with pytest.raises(ValueError):
        normalize_extension(value)


def test_locator_requires_extension():
    with pytest.raises(ValueError):
        FileLocator([])
