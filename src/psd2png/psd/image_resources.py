"""
Image resources section structure. Image resources store non-pixel data
associated with the document, such as the ICC profile or alpha channel
identifiers.

Only the resources that affect how the merged image is flattened are
interpreted; everything else is kept as raw bytes keyed by resource id.

Example::

    from psd2png.constants import Resource

    icc = psd.image_resources.get_data(Resource.ICC_PROFILE)
"""

import io
import logging
from typing import Any, BinaryIO, Optional, TypeVar

from attrs import define, field

from psd2png.constants import Resource
from psd2png.psd.base import BaseElement
from psd2png.psd.bin_utils import (
    be_array_from_bytes,
    is_readable,
    read_fmt,
    read_length_block,
    read_pascal_string,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="ImageResources")

_SIGNATURES = (b"8BIM", b"MeSa", b"AgHg", b"PHUT", b"DCSR")


@define(repr=False)
class ImageResources(BaseElement):
    """
    Image resources section of the PSD file. Mapping of resource id to the
    raw resource bytes.
    """

    items: dict = field(factory=dict)

    def __len__(self) -> int:
        return len(self.items)

    def get_data(self, key: Any, default: Any = None) -> Any:
        """
        Get the interpreted data of the resource.

        :param key: resource id, see :py:class:`~psd2png.constants.Resource`.
        """
        if key not in self.items:
            return default
        raw = self.items[key]
        if key == Resource.ALPHA_IDENTIFIERS:
            return list(be_array_from_bytes("I", raw[: len(raw) - len(raw) % 4]))
        return raw

    @property
    def icc_profile(self) -> Optional[bytes]:
        return self.get_data(Resource.ICC_PROFILE)

    @property
    def alpha_identifiers(self) -> Optional[list[int]]:
        return self.get_data(Resource.ALPHA_IDENTIFIERS)

    @classmethod
    def read(
        cls: type[T], fp: BinaryIO, encoding: str = "macroman", **kwargs: Any
    ) -> T:
        data = read_length_block(fp)
        logger.debug("reading image resources, len=%d" % (len(data)))
        with io.BytesIO(data) as f:
            return cls._read_body(f, encoding=encoding)

    @classmethod
    def _read_body(cls: type[T], fp: BinaryIO, encoding: str = "macroman") -> T:
        items = {}
        while is_readable(fp, 4):
            signature, key = read_fmt("4sH", fp)
            if signature not in _SIGNATURES:
                raise ValueError("Invalid image resource signature %r" % signature)
            read_pascal_string(fp, encoding, padding=2)
            items[key] = read_length_block(fp, padding=2)
        return cls(items)
