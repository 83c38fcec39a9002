import logging

import pytest

from psd2png.constants import ColorMode
from psd2png.psd.header import FileHeader

logger = logging.getLogger(__name__)

DATA = (
    b"8BPS\x00\x01\x00\x00\x00\x00\x00\x00\x00\x03\x00\x00\x00\x96\x00\x00\x00d"
    b"\x00 \x00\x03"
)


def test_header_read():
    header = FileHeader.frombytes(DATA)
    assert header.version == 1
    assert header.channels == 3
    assert header.height == 150
    assert header.width == 100
    assert header.depth == 32
    assert header.color_mode == ColorMode.RGB


def test_header_psb():
    header = FileHeader.frombytes(DATA[:4] + b"\x00\x02" + DATA[6:])
    assert header.version == 2


@pytest.mark.parametrize(
    "data",
    [
        b"8BPX" + DATA[4:],
        DATA[:4] + b"\x00\x03" + DATA[6:],
        DATA[:14] + b"\x00\x00\x00\x00" + DATA[18:],
        DATA[:18] + b"\x00\x00\x00\x00" + DATA[22:],
        DATA[:22] + b"\x00\x03" + DATA[24:],
        DATA[:24] + b"\x00\x05",
        DATA[:12],
    ],
)
def test_header_invalid(data):
    with pytest.raises(ValueError):
        FileHeader.frombytes(data)


def test_header_signature_message():
    with pytest.raises(ValueError, match="not a PSD or PSB"):
        FileHeader(signature=b"\x89PNG")


@pytest.mark.parametrize(
    "width, height, depth, expected",
    [
        (100, 150, 8, 15000),
        (100, 150, 16, 30000),
        (100, 150, 32, 60000),
        (9, 2, 1, 4),
    ],
)
def test_header_plane_size(width, height, depth, expected):
    header = FileHeader(channels=1, width=width, height=height, depth=depth)
    assert header.plane_size == expected
