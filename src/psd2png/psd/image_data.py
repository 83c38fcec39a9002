"""
Image data section structure.

:py:class:`ImageData` corresponds to the last section of the PSD/PSB file
where the composited image is stored. When the file does not contain layers,
this is the only place pixels are saved. Flattening reads this section
only; layers are never blended again.
"""

import logging
from typing import Any, BinaryIO, TypeVar, Union

from attrs import define, field

from psd2png.compression import decompress
from psd2png.constants import Compression
from psd2png.psd.base import BaseElement
from psd2png.psd.bin_utils import read_fmt, trimmed_repr
from psd2png.psd.header import FileHeader
from psd2png.validators import in_

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="ImageData")


@define(repr=False)
class ImageData(BaseElement):
    """
    Merged channel image data.

    .. py:attribute:: compression

        See :py:class:`~psd2png.constants.Compression`.

    .. py:attribute:: data

        `bytes` as compressed in the `compression` flag.
    """

    compression: Compression = field(
        default=Compression.RAW, converter=Compression, validator=in_(Compression)
    )
    data: bytes = b""

    def __repr__(self) -> str:
        return "ImageData(compression=%s, data=%s)" % (
            self.compression.name,
            trimmed_repr(self.data),
        )

    @classmethod
    def read(cls: type[T], fp: BinaryIO, **kwargs: Any) -> T:
        start_pos = fp.tell()
        compression = Compression(read_fmt("H", fp)[0])
        data = fp.read()
        logger.debug("  read image data, len=%d" % (fp.tell() - start_pos))
        return cls(compression, data)

    def get_data(
        self, header: FileHeader, split: bool = True
    ) -> Union[list[bytes], bytes]:
        """
        Get decompressed data.

        :param header: See :py:class:`~psd2png.psd.header.FileHeader`.
        :param split: return one `bytes` per channel when True.
        :return: `list` of bytes corresponding each channel, or the joined
            planes when ``split`` is False.
        :raise ValueError: when the data does not match the header geometry.
        """
        data = decompress(
            self.data,
            self.compression,
            header.width,
            header.height * header.channels,
            header.depth,
            header.version,
        )
        if split:
            plane_size = header.plane_size
            return [
                data[i * plane_size : (i + 1) * plane_size]
                for i in range(header.channels)
            ]
        return data
