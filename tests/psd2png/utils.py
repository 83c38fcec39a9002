"""
Builders of in-memory PSD documents and flat raster files for the tests.
"""

import io
import logging
import os
import struct
import zlib
from typing import Optional, Sequence

from PIL import Image

from psd2png.constants import ColorMode, Compression

logging.basicConfig(level=logging.DEBUG)


def packbits(data: bytes) -> bytes:
    """PackBits with literal packets only, which every decoder accepts."""
    result = bytearray()
    for start in range(0, len(data), 128):
        chunk = data[start : start + 128]
        result.append(len(chunk) - 1)
        result.extend(chunk)
    return bytes(result)


def encode_rle(planes: Sequence[bytes], row_size: int, version: int = 1) -> bytes:
    rows = []
    for plane in planes:
        for start in range(0, len(plane), row_size):
            rows.append(packbits(plane[start : start + row_size]))
    counts = b"".join(struct.pack((">H", ">I")[version - 1], len(row)) for row in rows)
    return counts + b"".join(rows)


def image_resource(key: int, data: bytes) -> bytes:
    block = b"8BIM" + struct.pack(">H", key) + b"\x00\x00"
    block += struct.pack(">I", len(data)) + data
    if len(data) % 2:
        block += b"\x00"
    return block


def layer_info(layer_count: int) -> bytes:
    """Layer and mask section body holding only a layer count."""
    return struct.pack(">I", 2) + struct.pack(">h", layer_count)


def tagged_block(key: bytes, data: bytes = b"") -> bytes:
    return b"8BIM" + key + struct.pack(">I", len(data)) + data


def make_psd(
    width: int,
    height: int,
    planes: Sequence[bytes],
    color_mode: ColorMode = ColorMode.RGB,
    depth: int = 8,
    compression: Compression = Compression.RAW,
    version: int = 1,
    color_mode_data: bytes = b"",
    resources: bytes = b"",
    layer_and_mask: bytes = b"",
    channels: Optional[int] = None,
) -> bytes:
    """Serialize a document whose merged image data holds ``planes``."""
    if channels is None:
        channels = len(planes)
    header = struct.pack(
        ">4sH6xHIIHH", b"8BPS", version, channels, height, width, depth, color_mode
    )
    row_size = (width * depth + 7) // 8
    raw = b"".join(planes)
    if compression == Compression.RAW:
        data = raw
    elif compression == Compression.RLE:
        data = encode_rle(planes, row_size, version)
    elif compression == Compression.ZIP:
        data = zlib.compress(raw)
    else:
        raise ValueError("Use compression tests for prediction")

    with io.BytesIO() as f:
        f.write(header)
        f.write(struct.pack(">I", len(color_mode_data)) + color_mode_data)
        f.write(struct.pack(">I", len(resources)) + resources)
        f.write(struct.pack((">I", ">Q")[version - 1], len(layer_and_mask)))
        f.write(layer_and_mask)
        f.write(struct.pack(">H", compression) + data)
        return f.getvalue()


def make_rgb_psd(
    width: int, height: int, color: Sequence[int] = (255, 0, 0), **kwargs
) -> bytes:
    """Solid color RGB document; a fourth value in ``color`` adds alpha."""
    planes = [bytes([value]) * (width * height) for value in color]
    return make_psd(width, height, planes, **kwargs)


def make_raster(
    width: int, height: int, color=(200, 10, 10), format: str = "PNG", mode: str = "RGB"
) -> bytes:
    with io.BytesIO() as f:
        Image.new(mode, (width, height), color).save(f, format=format)
        return f.getvalue()


def read_png(path: str) -> Image.Image:
    with Image.open(path) as image:
        image.load()
        return image


def write_file(path: str, data: bytes) -> str:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(data)
    return path
