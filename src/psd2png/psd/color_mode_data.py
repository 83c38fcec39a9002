"""
Color mode data structure.
"""

import logging
from typing import Any, BinaryIO, TypeVar

from attrs import define

from psd2png.psd.base import BaseElement
from psd2png.psd.bin_utils import read_length_block

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="ColorModeData")


@define(repr=False)
class ColorModeData(BaseElement):
    """
    Color mode data section of the PSD file.

    For indexed color images the data is the color table for the image in a
    non-interleaved order.

    Duotone images also have this data, but the data format is undocumented.
    """

    value: bytes = b""

    @classmethod
    def read(cls: type[T], fp: BinaryIO, **kwargs: Any) -> T:
        value = read_length_block(fp)
        logger.debug("reading color mode data, len=%d" % (len(value)))
        return cls(value)

    def interleave(self) -> bytes:
        """
        Returns interleaved color table in bytes.

        :raise ValueError: when the table does not hold 256 RGB entries.
        """
        if len(self.value) < 768:
            raise ValueError(
                "Color table too short: expected 768 bytes, got %d" % len(self.value)
            )
        return b"".join(
            bytes((self.value[i], self.value[i + 256], self.value[i + 512]))
            for i in range(256)
        )
