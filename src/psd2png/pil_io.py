"""
PIL IO module.

Color conversions of the merged image to RGBA, ICC handling, and the
generic raster reader used by the fallback decode path.
"""

import io
import logging
from typing import Optional

import numpy as np
from PIL import Image, ImageCms

from psd2png.constants import ColorMode
from psd2png.numpy_io import get_color_and_alpha, remove_background
from psd2png.psd import PSD

logger = logging.getLogger(__name__)


def get_pil_mode(color_mode: ColorMode) -> str:
    """Get the PIL mode of the color channels returned by numpy_io."""
    return {
        ColorMode.BITMAP: "L",
        ColorMode.GRAYSCALE: "L",
        ColorMode.DUOTONE: "L",
        ColorMode.MULTICHANNEL: "L",
        ColorMode.INDEXED: "RGB",
        ColorMode.RGB: "RGB",
        ColorMode.CMYK: "CMYK",
        ColorMode.LAB: "LAB",
    }[color_mode]


def convert_image_data_to_pil(psd: PSD, apply_icc: bool = False) -> Image.Image:
    """Convert the merged image data of the document to an RGBA image."""
    header = psd.header
    color, alpha = get_color_and_alpha(psd)
    mode = get_pil_mode(header.color_mode)
    size = (header.width, header.height)

    if alpha is not None and mode in ("RGB", "L"):
        color = remove_background(color, alpha)

    if mode == "CMYK":
        # PSD stores CMYK inverted: 255 is no ink.
        image = Image.frombytes(mode, size, (255 - color).tobytes())
    else:
        if mode == "LAB":
            # a* and b* are stored unsigned around 128; Pillow reads them signed.
            color = color.copy()
            color[:, :, 1:] ^= 0x80
        image = Image.frombytes(mode, size, np.ascontiguousarray(color).tobytes())

    icc = psd.image_resources.icc_profile if apply_icc else None
    image = _post_process(image, icc)

    if alpha is not None:
        image = image.convert("RGB") if image.mode != "L" else image
        image.putalpha(Image.frombytes("L", size, np.ascontiguousarray(alpha).tobytes()))
    return image.convert("RGBA")


def _post_process(image: Image.Image, icc_profile: Optional[bytes]) -> Image.Image:
    if image.mode == "LAB":
        return _lab_to_rgb(image)
    if image.mode == "CMYK":
        if icc_profile:
            return _apply_icc(image, icc_profile)
        return image.convert("RGB")
    if icc_profile:
        return _apply_icc(image, icc_profile)
    return image


def _lab_to_rgb(image: Image.Image) -> Image.Image:
    transform = ImageCms.buildTransform(
        ImageCms.createProfile("LAB"), ImageCms.createProfile("sRGB"), "LAB", "RGB"
    )
    return ImageCms.applyTransform(image, transform)


def _apply_icc(image: Image.Image, icc_profile: bytes) -> Image.Image:
    """Apply ICC Color profile."""
    if image.mode not in ("RGB", "CMYK"):
        logger.debug("%s ICC profile is not supported." % image.mode)
        return image

    try:
        in_profile = ImageCms.ImageCmsProfile(io.BytesIO(icc_profile))
        out_profile = ImageCms.createProfile("sRGB")
        return ImageCms.profileToProfile(image, in_profile, out_profile, outputMode="RGB")
    except (ImageCms.PyCMSError, OSError) as e:
        logger.warning("PyCMSError: %s" % (e))

    return image.convert("RGB")


def open_raster(data: bytes) -> Image.Image:
    """
    Open an already flat raster image with any format Pillow reads.

    :raise OSError: when Pillow cannot identify or load the data.
    """
    with Image.open(io.BytesIO(data)) as image:
        image.load()
        return convert_to_rgba(image)


def convert_to_rgba(image: Image.Image) -> Image.Image:
    """Convert any PIL image to 8 bit RGBA."""
    if image.mode in ("I", "I;16", "I;16B", "I;16L", "I;16N"):
        array = np.asarray(image).astype(np.int64) >> 8
        image = Image.fromarray(np.clip(array, 0, 255).astype(np.uint8))
    elif image.mode == "F":
        array = np.asarray(image)
        image = Image.fromarray(np.clip(array, 0, 255).astype(np.uint8))
    return image.convert("RGBA")
