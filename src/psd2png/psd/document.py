"""
PSD document structure module.

This module contains the :py:class:`PSD` class that represents the
low-level binary structure of a PSD/PSB file, as far as flattening needs it.
"""

import logging
from typing import Any, BinaryIO, TypeVar

from attrs import define, field

from .base import BaseElement
from .color_mode_data import ColorModeData
from .header import FileHeader
from .image_data import ImageData
from .image_resources import ImageResources
from .layer_and_mask import LayerAndMaskInformation

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="PSD")


@define(repr=False)
class PSD(BaseElement):
    """
    Low-level PSD file structure that resembles the specification_.

    .. _specification: https://www.adobe.com/devnet-apps/photoshop/fileformatashtml/

    Example::

        from psd2png.psd import PSD

        with open(input_file, 'rb') as f:
            psd = PSD.read(f)

        channels = psd.image_data.get_data(psd.header)

    .. py:attribute:: header

        See :py:class:`.FileHeader`.

    .. py:attribute:: color_mode_data

        See :py:class:`.ColorModeData`.

    .. py:attribute:: image_resources

        See :py:class:`.ImageResources`.

    .. py:attribute:: layer_and_mask_information

        See :py:class:`.LayerAndMaskInformation`.

    .. py:attribute:: image_data

        See :py:class:`.ImageData`.
    """

    header: FileHeader = field(factory=FileHeader)
    color_mode_data: ColorModeData = field(factory=ColorModeData)
    image_resources: ImageResources = field(factory=ImageResources)
    layer_and_mask_information: LayerAndMaskInformation = field(
        factory=LayerAndMaskInformation
    )
    image_data: ImageData = field(factory=ImageData)

    @classmethod
    def read(
        cls: type[T], fp: BinaryIO, encoding: str = "macroman", **kwargs: Any
    ) -> T:
        header = FileHeader.read(fp)
        logger.debug("read %s" % header)
        return cls(
            header,
            ColorModeData.read(fp),
            ImageResources.read(fp, encoding),
            LayerAndMaskInformation.read(fp, header.version),
            ImageData.read(fp),
        )

    def __repr__(self) -> str:
        return (
            "PSD(header=%r, color_mode_data=%d bytes, image_resources=%d, "
            "layer_count=%d, tags=%r, image_data=%r)"
            % (
                self.header,
                len(self.color_mode_data.value),
                len(self.image_resources),
                self.layer_and_mask_information.layer_count,
                self.layer_and_mask_information.tags,
                self.image_data,
            )
        )
