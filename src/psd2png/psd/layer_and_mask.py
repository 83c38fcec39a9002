"""
Layer and mask information section.

The flattening pipeline never composites layers, so this section is not
decoded into layer records. The reader only extracts what decides how the
merged image data is interpreted: the layer count and the tagged block keys
(for example the merged transparency markers).
"""

import io
import logging
from typing import Any, BinaryIO, TypeVar

from attrs import define, field

from psd2png.constants import LARGE_TAGS, Tag
from psd2png.psd.base import BaseElement
from psd2png.psd.bin_utils import is_readable, read_fmt, read_length_block

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="LayerAndMaskInformation")


@define(repr=False)
class LayerAndMaskInformation(BaseElement):
    """
    Summary of the layer and mask information section.

    .. py:attribute:: layer_count

        Number of layer records, 0 when the document has no layers.

    .. py:attribute:: tags

        Keys of the tagged blocks that follow the global layer mask, in
        file order.
    """

    layer_count: int = 0
    tags: list = field(factory=list)

    @property
    def has_merged_transparency(self) -> bool:
        keys = (
            Tag.SAVING_MERGED_TRANSPARENCY.value,
            Tag.SAVING_MERGED_TRANSPARENCY16.value,
            Tag.SAVING_MERGED_TRANSPARENCY32.value,
        )
        return any(key in self.tags for key in keys)

    @classmethod
    def read(cls: type[T], fp: BinaryIO, version: int = 1, **kwargs: Any) -> T:
        data = read_length_block(fp, fmt=("I", "Q")[version - 1])
        logger.debug("reading layer and mask info, len=%d" % (len(data)))
        self = cls()
        if not data:
            return self
        with io.BytesIO(data) as f:
            try:
                self._read_body(f, version)
            except ValueError as e:
                # Pixels of the merged image do not depend on this section.
                logger.debug("Incomplete layer and mask info: %s" % e)
        return self

    def _read_body(self, fp: BinaryIO, version: int) -> None:
        layer_info = read_length_block(fp, fmt=("I", "Q")[version - 1])
        if len(layer_info) >= 2:
            self.layer_count = abs(read_fmt("h", io.BytesIO(layer_info[:2]))[0])
        if not is_readable(fp, 4):
            return
        read_length_block(fp)  # Global layer mask info.
        while is_readable(fp, 12):
            signature, key = read_fmt("4s4s", fp)
            if signature not in (b"8BIM", b"8B64"):
                logger.debug("Invalid tagged block signature %r" % signature)
                break
            fmt = "Q" if version == 2 and key in LARGE_TAGS else "I"
            block = read_length_block(fp, fmt=fmt, padding=4)
            self.tags.append(key)
            if key in (Tag.LAYER_16.value, Tag.LAYER_32.value) and len(block) >= 2:
                # Lr16/Lr32 carry the layer info of high bit depth documents.
                count = abs(read_fmt("h", io.BytesIO(block[:2]))[0])
                self.layer_count = self.layer_count or count
