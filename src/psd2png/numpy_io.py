"""
Conversion of the merged image data planes into numpy arrays.

The merged image of a PSD document is stored planar, one channel after
another, at 1, 8, 16 or 32 bits per sample. This module turns those planes
into an ``(height, width, channels)`` array of 8 bit samples and works out
which channel, if any, is the transparency of the flattened image.
"""

import logging
from typing import Optional, cast

import numpy as np

from psd2png.constants import ColorMode
from psd2png.psd import PSD

logger = logging.getLogger(__name__)

# Number of color channels in the merged image data for each color mode.
EXPECTED_CHANNELS = {
    ColorMode.BITMAP: 1,
    ColorMode.GRAYSCALE: 1,
    ColorMode.INDEXED: 1,
    ColorMode.RGB: 3,
    ColorMode.CMYK: 4,
    ColorMode.MULTICHANNEL: 1,
    ColorMode.DUOTONE: 1,
    ColorMode.LAB: 3,
}


def has_transparency(psd: PSD) -> bool:
    """Check if the merged image carries a transparency channel."""
    if psd.layer_and_mask_information.has_merged_transparency:
        return True
    if psd.header.color_mode == ColorMode.MULTICHANNEL:
        return False
    expected = EXPECTED_CHANNELS.get(psd.header.color_mode)
    if expected is not None and psd.header.channels > expected:
        alpha_ids = psd.image_resources.alpha_identifiers
        if alpha_ids and all(x > 0 for x in alpha_ids):
            return False
        if psd.layer_and_mask_information.layer_count > 0:
            return False
        return True
    return False


def get_transparency_index(psd: PSD) -> int:
    """Index of the transparency channel, the first extra channel by default."""
    alpha_ids = psd.image_resources.alpha_identifiers
    if alpha_ids:
        try:
            offset = alpha_ids.index(0)
            return psd.header.channels - len(alpha_ids) + offset
        except ValueError:
            pass
    return EXPECTED_CHANNELS[psd.header.color_mode]


def get_planes(psd: PSD) -> np.ndarray:
    """
    Decode the merged image data to a ``(height, width, channels)`` array of
    ``uint8`` samples.

    :raise ValueError: when the decompressed data does not match the header.
    """
    header = psd.header
    data = cast(bytes, psd.image_data.get_data(header, split=False))
    expected = header.plane_size * header.channels
    if len(data) != expected:
        raise ValueError(
            "Image data length mismatch: len=%d, expected=%d" % (len(data), expected)
        )
    if header.depth == 1:
        rows = np.frombuffer(data, np.uint8).reshape(
            (header.channels * header.height, -1)
        )
        bits = np.unpackbits(rows, axis=1)[:, : header.width]
        # Bitmap samples are ink coverage: 1 is black.
        array = ((1 - bits) * 255).astype(np.uint8)
    else:
        array = _parse_array(data, header.depth)
    return array.reshape((header.channels, header.height, header.width)).transpose(
        (1, 2, 0)
    )


def get_color_and_alpha(psd: PSD) -> tuple[np.ndarray, Optional[np.ndarray]]:
    """
    Split the merged planes into the color channels and the optional alpha.

    Indexed documents are expanded through their color table to RGB.
    """
    header = psd.header
    planes = get_planes(psd)
    expected = EXPECTED_CHANNELS[header.color_mode]
    if header.channels < expected:
        raise ValueError(
            "Channels mismatch: expected %d != given %d" % (expected, header.channels)
        )
    color = planes[:, :, :expected]

    alpha = None
    if has_transparency(psd):
        index = get_transparency_index(psd)
        if 0 <= index < header.channels:
            alpha = planes[:, :, index]
        else:
            logger.debug("Transparency index %d out of range" % index)

    if header.color_mode == ColorMode.INDEXED:
        lut = np.frombuffer(psd.color_mode_data.interleave(), np.uint8).reshape(
            (256, 3)
        )
        color = lut[color[:, :, 0]]
    return color, alpha


def remove_background(color: np.ndarray, alpha: np.ndarray) -> np.ndarray:
    """The merged preview is rendered on a white background; undo it."""
    c = color.astype(np.float32) / 255.0
    a = np.repeat(alpha.astype(np.float32)[:, :, None] / 255.0, c.shape[2], axis=2)
    mask = a > 0
    c[mask] = (c + a - 1)[mask] / a[mask]
    return (np.clip(c, 0.0, 1.0) * 255.0 + 0.5).astype(np.uint8)


def _parse_array(data: bytes, depth: int) -> np.ndarray:
    if depth == 8:
        return np.frombuffer(data, ">u1").copy()
    elif depth == 16:
        return (np.frombuffer(data, ">u2") >> 8).astype(np.uint8)
    elif depth == 32:
        parsed = np.nan_to_num(np.frombuffer(data, ">f4"))
        return (np.clip(parsed, 0.0, 1.0) * 255.0 + 0.5).astype(np.uint8)
    else:
        raise ValueError("Unsupported depth: %g" % depth)
