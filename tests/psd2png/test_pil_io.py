import io
import logging

import pytest
from PIL import Image, ImageCms

from psd2png import pil_io
from psd2png.constants import ColorMode, Compression, Resource
from psd2png.psd import PSD

from .utils import image_resource, make_psd, make_raster

logger = logging.getLogger(__name__)


@pytest.mark.parametrize(
    "mode, expected",
    [
        (ColorMode.BITMAP, "L"),
        (ColorMode.GRAYSCALE, "L"),
        (ColorMode.INDEXED, "RGB"),
        (ColorMode.RGB, "RGB"),
        (ColorMode.CMYK, "CMYK"),
        (ColorMode.DUOTONE, "L"),
        (ColorMode.LAB, "LAB"),
    ],
)
def test_get_pil_mode(mode, expected):
    assert pil_io.get_pil_mode(mode) == expected


def _convert(*args, **kwargs):
    image = pil_io.convert_image_data_to_pil(PSD.frombytes(make_psd(*args, **kwargs)))
    assert image.mode == "RGBA"
    return list(image.getdata())


@pytest.mark.parametrize(
    "compression", [Compression.RAW, Compression.RLE, Compression.ZIP]
)
def test_convert_rgb(compression):
    pixels = _convert(2, 1, [b"\xff\x00", b"\x00\xff", b"\x00\x00"], compression=compression)
    assert pixels == [(255, 0, 0, 255), (0, 255, 0, 255)]


def test_convert_rgb_alpha():
    pixels = _convert(2, 1, [b"\xff\xff", b"\x7f\x00", b"\x7f\x00", b"\x80\x00"])
    assert pixels[0] == (255, 0, 0, 128)
    assert pixels[1][3] == 0


def test_convert_grayscale():
    pixels = _convert(2, 1, [b"\x00\xff"], color_mode=ColorMode.GRAYSCALE)
    assert pixels == [(0, 0, 0, 255), (255, 255, 255, 255)]


def test_convert_grayscale_alpha():
    pixels = _convert(2, 1, [b"\x00\xff", b"\xff\x00"], color_mode=ColorMode.GRAYSCALE)
    assert pixels[0] == (0, 0, 0, 255)
    assert pixels[1][3] == 0


def test_convert_bitmap():
    pixels = _convert(3, 1, [b"\xa0"], color_mode=ColorMode.BITMAP, depth=1)
    assert pixels == [(0, 0, 0, 255), (255, 255, 255, 255), (0, 0, 0, 255)]


def test_convert_cmyk():
    planes = [b"\x00\xff", b"\xff\xff", b"\xff\xff", b"\xff\xff"]
    pixels = _convert(2, 1, planes, color_mode=ColorMode.CMYK)
    assert pixels == [(0, 255, 255, 255), (255, 255, 255, 255)]


def test_convert_lab():
    pixels = _convert(1, 1, [b"\xff", b"\x80", b"\x80"], color_mode=ColorMode.LAB)
    assert all(value >= 250 for value in pixels[0])


def test_convert_lab_mid_grey():
    pixels = _convert(1, 1, [b"\x80", b"\x80", b"\x80"], color_mode=ColorMode.LAB)
    r, g, b, a = pixels[0]
    assert 100 <= r <= 140
    assert abs(r - g) <= 8 and abs(r - b) <= 8
    assert a == 255


def test_convert_lab_red():
    # L=50, a*=+70, b*=+50.
    pixels = _convert(1, 1, [b"\x80", bytes([198]), bytes([178])], color_mode=ColorMode.LAB)
    r, g, b, _ = pixels[0]
    assert r > 150 and r > g + 100 and r > b + 100


def test_convert_16bit():
    planes = [b"\xff\xff", b"\x00\x00", b"\x80\x00"]
    pixels = _convert(1, 1, planes, depth=16)
    assert pixels == [(255, 0, 128, 255)]


def _srgb_profile():
    return ImageCms.ImageCmsProfile(ImageCms.createProfile("sRGB")).tobytes()


def test_convert_apply_icc():
    resources = image_resource(Resource.ICC_PROFILE, _srgb_profile())
    psd = PSD.frombytes(
        make_psd(1, 1, [b"\xff", b"\x00", b"\x00"], resources=resources)
    )
    image = pil_io.convert_image_data_to_pil(psd, apply_icc=True)
    assert image.mode == "RGBA"
    r, g, b, a = image.getpixel((0, 0))
    assert r > 250 and g < 5 and b < 5 and a == 255


def test_convert_invalid_icc(caplog):
    resources = image_resource(Resource.ICC_PROFILE, b"not a profile")
    psd = PSD.frombytes(
        make_psd(1, 1, [b"\xff", b"\x00", b"\x00"], resources=resources)
    )
    with caplog.at_level(logging.WARNING):
        image = pil_io.convert_image_data_to_pil(psd, apply_icc=True)
    assert image.getpixel((0, 0)) == (255, 0, 0, 255)
    assert "PyCMSError" in caplog.text


@pytest.mark.parametrize("mode", ["1", "L", "LA", "P", "RGB", "RGBA", "CMYK", "I", "F"])
def test_convert_to_rgba(mode):
    image = pil_io.convert_to_rgba(Image.new(mode, (3, 2)))
    assert image.mode == "RGBA"
    assert image.size == (3, 2)


def test_convert_to_rgba_16bit():
    image = Image.new("I;16", (1, 1))
    image.putpixel((0, 0), 0x8000)
    assert pil_io.convert_to_rgba(image).getpixel((0, 0)) == (128, 128, 128, 255)


@pytest.mark.parametrize("format", ["PNG", "JPEG", "BMP", "TIFF", "GIF"])
def test_open_raster(format):
    image = pil_io.open_raster(make_raster(5, 4, format=format))
    assert image.mode == "RGBA"
    assert image.size == (5, 4)


def test_open_raster_invalid():
    with pytest.raises(OSError):
        pil_io.open_raster(b"not an image at all")


def test_open_raster_truncated():
    with io.BytesIO() as f:
        Image.effect_noise((64, 64), 64).save(f, format="PNG")
        data = f.getvalue()
    with pytest.raises(OSError):
        pil_io.open_raster(data[: len(data) // 2])
