"""
File header structure.
"""

import logging
from typing import Any, BinaryIO, TypeVar

from attrs import define, field

from psd2png.constants import ColorMode
from psd2png.psd.base import BaseElement
from psd2png.psd.bin_utils import read_fmt
from psd2png.validators import in_, range_

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="FileHeader")


@define(repr=True)
class FileHeader(BaseElement):
    """
    Header section of the PSD file.

    Example::

        from psd2png.psd.header import FileHeader
        from psd2png.constants import ColorMode

        header = FileHeader(channels=2, height=359, width=400, depth=8,
                            color_mode=ColorMode.GRAYSCALE)

    .. py:attribute:: signature

        Signature: always equal to ``b'8BPS'``.

    .. py:attribute:: version

        Version number. PSD is 1, and PSB is 2.

    .. py:attribute:: channels

        The number of channels in the image, including any user-defined alpha
        channel.

    .. py:attribute:: height

        The height of the image in pixels. Zero is rejected.

    .. py:attribute:: width

        The width of the image in pixels. Zero is rejected.

    .. py:attribute:: depth

        The number of bits per channel.

    .. py:attribute:: color_mode

        The color mode of the file. See
        :py:class:`~psd2png.constants.ColorMode`
    """

    _FORMAT = "4sH6xHIIHH"

    signature: bytes = field(default=b"8BPS", repr=False)
    version: int = field(default=1, validator=in_((1, 2)))
    channels: int = field(default=4, validator=range_(1, 56))
    height: int = field(default=64, validator=range_(1, 300000))
    width: int = field(default=64, validator=range_(1, 300000))
    depth: int = field(default=8, validator=in_((1, 8, 16, 32)))
    color_mode: ColorMode = field(
        default=ColorMode.RGB, converter=ColorMode, validator=in_(ColorMode)
    )

    @signature.validator
    def _validate_signature(self, attribute: Any, value: bytes) -> None:
        if value != b"8BPS":
            raise ValueError("This is not a PSD or PSB file")

    @classmethod
    def read(cls: type[T], fp: BinaryIO, **kwargs: Any) -> T:
        return cls(*read_fmt(cls._FORMAT, fp))

    @property
    def bytes_per_sample(self) -> int:
        return max(1, self.depth // 8)

    @property
    def plane_size(self) -> int:
        """Byte size of one decompressed channel plane."""
        if self.depth == 1:
            return ((self.width + 7) // 8) * self.height
        return self.width * self.height * self.bytes_per_sample
