"""
Binary reading helpers for the PSD sections.

All multi-byte values in the format are big-endian.
"""

import array
import struct
import sys
from typing import Any, BinaryIO


def unpack(fmt: str, data: bytes) -> tuple[Any, ...]:
    fmt = str(">" + fmt)
    return struct.unpack(fmt, data)


def read_fmt(fmt: str, fp: BinaryIO) -> tuple[Any, ...]:
    """
    Reads data from ``fp`` according to ``fmt``.

    :raise ValueError: when the stream ends early.
    """
    fmt = str(">" + fmt)
    fmt_size = struct.calcsize(fmt)
    data = fp.read(fmt_size)
    if len(data) != fmt_size:
        raise ValueError(
            "Unexpected end of data: expected %d bytes, got %d" % (fmt_size, len(data))
        )
    return struct.unpack(fmt, data)


def pad(number: int, divisor: int) -> int:
    if number % divisor:
        number = (number // divisor + 1) * divisor
    return number


def read_padding(fp: BinaryIO, size: int, divisor: int = 2) -> bytes:
    """
    Read padding bytes for the given byte size.

    :param fp: file-like object
    :param divisor: divisor of the byte alignment
    :return: read padding bytes
    """
    remainder = size % divisor
    if remainder:
        return fp.read(divisor - remainder)
    return b""


def read_length_block(fp: BinaryIO, fmt: str = "I", padding: int = 1) -> bytes:
    """
    Read a block of data with a length marker at the beginning.

    :param fp: file-like
    :param fmt: format of the length marker
    :return: bytes object
    """
    length = read_fmt(fmt, fp)[0]
    data = fp.read(length)
    if len(data) != length:
        raise ValueError(
            "Truncated block: expected %d bytes, got %d" % (length, len(data))
        )
    read_padding(fp, length, padding)
    return data


def read_pascal_string(fp: BinaryIO, encoding: str = "macroman", padding: int = 2) -> str:
    length = read_fmt("B", fp)[0]
    if length == 0:
        fp.seek(padding - 1, 1)
        return ""

    res = fp.read(length)
    padded_length = pad(length + 1, padding) - 1  # -1 accounts for the length byte
    fp.seek(padded_length - length, 1)
    return res.decode(encoding, "replace")


def read_be_array(fmt: str, count: int, fp: BinaryIO) -> array.array:
    """
    Reads an array from a file with big-endian data.
    """
    arr = array.array(str(fmt))
    data = fp.read(arr.itemsize * count)
    if len(data) != arr.itemsize * count:
        raise ValueError("Truncated array: expected %d items" % count)
    arr.frombytes(data)
    if sys.byteorder == "little":
        arr.byteswap()
    return arr


def be_array_from_bytes(fmt: str, data: bytes) -> array.array:
    """
    Reads an array from bytestring with big-endian data.
    """
    arr = array.array(str(fmt), data)
    if sys.byteorder == "little":
        arr.byteswap()
    return arr


def is_readable(fp: BinaryIO, size: int = 1) -> bool:
    """
    Check if the file-like object has at least ``size`` more bytes.

    :param fp: file-like object
    :param size: byte size
    :return: bool
    """
    read_size = len(fp.read(size))
    fp.seek(-read_size, 1)
    return read_size == size


def trimmed_repr(data: bytes, trim_length: int = 16) -> str:
    if isinstance(data, bytes) and len(data) > trim_length:
        return repr(data[:trim_length] + b" ... =" + str(len(data)).encode("ascii"))
    return repr(data)
