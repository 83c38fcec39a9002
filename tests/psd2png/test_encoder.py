import logging
import os
import stat
import sys

import pytest

from psd2png import encoder
from psd2png.encoder import ImageEncoder, atomic_write
from psd2png.errors import EncodeFailed, WriteFailed
from psd2png.raster import RasterImage

from .utils import read_png

logger = logging.getLogger(__name__)

IMAGE = RasterImage(2, 1, b"\xff\x00\x00\xff\x00\x00\xff\x80")


def test_encode():
    data = ImageEncoder().encode(IMAGE)
    assert data.startswith(b"\x89PNG\r\n\x1a\n")


@pytest.mark.parametrize("level", [-1, 10, "6"])
def test_encoder_invalid_level(level):
    with pytest.raises(ValueError):
        ImageEncoder(level)


def test_write(tmp_path):
    destination = str(tmp_path / "a" / "b" / "x.png")
    ImageEncoder(compress_level=9).write(IMAGE, destination)
    image = read_png(destination)
    assert image.mode == "RGBA"
    assert image.size == (2, 1)
    assert list(image.getdata()) == [(255, 0, 0, 255), (0, 0, 255, 128)]


def test_write_overwrites(tmp_path):
    destination = tmp_path / "x.png"
    destination.write_bytes(b"old")
    ImageEncoder().write(IMAGE, str(destination))
    assert read_png(str(destination)).size == (2, 1)
    assert os.listdir(str(tmp_path)) == ["x.png"]


def test_write_failed(tmp_path):
    destination = tmp_path / "x.png"
    destination.mkdir()
    (destination / "keep").write_bytes(b"")
    with pytest.raises(WriteFailed, match="write failed") as excinfo:
        ImageEncoder().write(IMAGE, str(destination))
    assert excinfo.value.path == str(destination)
    assert sorted(os.listdir(str(tmp_path))) == ["x.png"]


def test_encode_failed():
    class BrokenImage:
        def to_pil(self):
            raise OSError("broken")

    with pytest.raises(EncodeFailed, match="encode failed: broken"):
        ImageEncoder().encode(BrokenImage())


def test_atomic_write(tmp_path):
    path = str(tmp_path / "sub" / "file.bin")
    atomic_write(path, b"data")
    atomic_write(path, b"other")
    with open(path, "rb") as f:
        assert f.read() == b"other"
    assert os.listdir(str(tmp_path / "sub")) == ["file.bin"]


def _mode(path):
    return stat.S_IMODE(os.stat(str(path)).st_mode)


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
def test_write_default_mode(tmp_path):
    destination = tmp_path / "x.png"
    ImageEncoder().write(IMAGE, str(destination))
    assert _mode(destination) == 0o666 & ~encoder._UMASK
    reference = tmp_path / "reference"
    with open(str(reference), "wb"):
        pass
    assert _mode(destination) == _mode(reference)


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
def test_write_keeps_existing_mode(tmp_path):
    destination = tmp_path / "x.png"
    destination.write_bytes(b"old")
    os.chmod(str(destination), 0o640)
    ImageEncoder().write(IMAGE, str(destination))
    assert _mode(destination) == 0o640
    assert read_png(str(destination)).size == (2, 1)
