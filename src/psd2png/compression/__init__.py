"""
Decompression of the merged image data.

Supported methods, see :py:class:`~psd2png.constants.Compression`:

- **RAW**: Uncompressed raw pixel data
- **RLE**: Apple PackBits run-length encoding, one packet stream per row
  preceded by a table of row byte counts (2 bytes each in PSD, 4 in PSB)
- **ZIP**: Deflate without prediction
- **ZIP_WITH_PREDICTION**: Deflate with delta encoding per row

Example usage::

    from psd2png.compression import decompress
    from psd2png.constants import Compression

    raw_pixels = decompress(
        data=compressed,
        compression=Compression.RLE,
        width=100,
        height=100,
        depth=8,
        version=1
    )

Every decoded buffer is checked against the size implied by the geometry;
a mismatch raises :exc:`ValueError` instead of producing a padded or
truncated plane.
"""

import io
import logging
import zlib
from typing import Any

import numpy as np

from psd2png.constants import Compression
from psd2png.psd.bin_utils import read_be_array

from . import rle as rle_impl

logger = logging.getLogger(__name__)


def row_size(width: int, depth: int) -> int:
    """Byte size of one row of a single channel."""
    return (width * depth + 7) // 8


def decompress(
    data: bytes,
    compression: Compression,
    width: int,
    height: int,
    depth: int,
    version: int = 1,
) -> bytes:
    """Decompress raw data.

    :param data: compressed data bytes.
    :param compression: compression type,
            see :py:class:`~psd2png.constants.Compression`.
    :param width: width.
    :param height: number of rows, all channels included.
    :param depth: bit depth of the pixel.
    :param version: psd file version.
    :return: decompressed data bytes.
    :raise ValueError: when the data is corrupt or of unexpected length.
    """
    length = row_size(width, depth) * height

    if compression == Compression.RAW:
        result = data[:length]
    elif compression == Compression.RLE:
        result = decode_rle(data, width, height, depth, version)
    elif compression == Compression.ZIP:
        result = _inflate(data)
    elif compression == Compression.ZIP_WITH_PREDICTION:
        result = decode_prediction(_inflate(data), width, height, depth)
    else:
        raise ValueError("Unknown compression %r" % compression)

    if len(result) != length:
        raise ValueError(
            "Unexpected image data size: len=%d, expected=%d" % (len(result), length)
        )
    return result


def _inflate(data: bytes) -> bytes:
    try:
        return zlib.decompress(data)
    except zlib.error as e:
        raise ValueError("Invalid ZIP compression: %s" % e) from e


def decode_rle(data: bytes, width: int, height: int, depth: int, version: int) -> bytes:
    try:
        size = max(row_size(width, depth), 1)
        with io.BytesIO(data) as fp:
            bytes_counts = read_be_array(("H", "I")[version - 1], height, fp)
            return b"".join(
                rle_impl.decode(fp.read(count), size) for count in bytes_counts
            )
    except ValueError as e:
        logger.debug(
            f"Decompression of RLE data failed: {width=} {height=} {depth=} "
            f"{version=} size={len(data)}: {e}"
        )
        raise


def decode_prediction(data: bytes, w: int, h: int, depth: int) -> bytes:
    """Undo the per-row delta encoding of ZIP_WITH_PREDICTION data."""
    if depth == 8:
        arr = _delta_decode(data, np.uint8, w, h)
        return arr.tobytes()
    elif depth == 16:
        arr = _delta_decode(data, np.dtype(">u2"), w, h)
        return arr.astype(">u2").tobytes()
    elif depth == 32:
        # Each 4-byte value is split into 4 byte planes per row:
        # "123412341234" is stored as "111222333444" before delta encoding.
        arr = _delta_decode(data, np.uint8, w * 4, h)
        return arr.reshape((h, 4, w)).transpose((0, 2, 1)).tobytes()
    else:
        raise ValueError("Invalid pixel size %d" % (depth))


def _delta_decode(data: bytes, dtype: Any, w: int, h: int) -> np.ndarray:
    dtype = np.dtype(dtype)
    count = w * h
    if len(data) < count * dtype.itemsize:
        raise ValueError(
            "Predicted data too short: %d < %d" % (len(data), count * dtype.itemsize)
        )
    arr = np.frombuffer(data, dtype, count=count).reshape((h, w))
    native = arr.astype(dtype.newbyteorder("="))
    # Unsigned accumulation wraps around, which is the modulo of the format.
    return np.cumsum(native, axis=1, dtype=native.dtype)
