"""
Decoding of candidate files to a :py:class:`~psd2png.raster.RasterImage`.

Decoding is an ordered list of strategies tried in turn until one succeeds::

    from psd2png.decoder import ImageDecoder

    decoder = ImageDecoder()
    image = decoder.decode_file('example.psd')

The default order is the layered document reader first, then the generic
flat raster reader, so a flat image saved with a ``.psd`` extension still
converts. When every strategy fails, :py:class:`~psd2png.errors.DecodeFailed`
is raised with the reason of each attempt.
"""

import io
import logging
from typing import Optional, Protocol, Sequence

from psd2png.errors import DecodeFailed
from psd2png.pil_io import convert_image_data_to_pil, open_raster
from psd2png.psd import PSD
from psd2png.raster import RasterImage

logger = logging.getLogger(__name__)


class DecodeStrategy(Protocol):
    """One way of turning file bytes into a raster."""

    name: str

    def decode(self, data: bytes) -> RasterImage: ...


class LayeredDocumentStrategy:
    """
    Read the pre-composited image data of a PSD/PSB document.

    :param apply_icc: apply the embedded ICC profile when converting.
    """

    name = "layered"

    def __init__(self, apply_icc: bool = False) -> None:
        self.apply_icc = apply_icc

    def decode(self, data: bytes) -> RasterImage:
        with io.BytesIO(data) as f:
            psd = PSD.read(f)
        logger.debug("decoded %r" % psd)
        image = convert_image_data_to_pil(psd, apply_icc=self.apply_icc)
        return RasterImage.from_pil(image)


class FlatRasterStrategy:
    """Read the bytes as any single-layer raster format Pillow supports."""

    name = "raster"

    def decode(self, data: bytes) -> RasterImage:
        return RasterImage.from_pil(open_raster(data))


def default_strategies(apply_icc: bool = False) -> list[DecodeStrategy]:
    return [LayeredDocumentStrategy(apply_icc=apply_icc), FlatRasterStrategy()]


class ImageDecoder:
    """
    Ordered decode strategies with fallback.

    :param strategies: strategies in the order they are attempted. Defaults
        to :py:func:`default_strategies`.
    """

    def __init__(self, strategies: Optional[Sequence[DecodeStrategy]] = None) -> None:
        if strategies is None:
            strategies = default_strategies()
        if not strategies:
            raise ValueError("At least one decode strategy is required")
        self.strategies = list(strategies)

    def decode(self, data: bytes, path: Optional[str] = None) -> RasterImage:
        """
        Decode the bytes with the first strategy that succeeds.

        :raise DecodeFailed: when every strategy fails.
        """
        reasons = []
        for strategy in self.strategies:
            try:
                image = strategy.decode(data)
            except Exception as e:
                logger.debug(
                    "%s decode failed for %s: %s" % (strategy.name, path or "<bytes>", e)
                )
                reasons.append("%s: %s" % (strategy.name, str(e) or type(e).__name__))
                continue
            logger.debug("%s decoded %s as %r" % (strategy.name, path or "<bytes>", image))
            return image
        raise DecodeFailed("decode failed: %s" % "; ".join(reasons), path)

    def decode_file(self, path: str) -> RasterImage:
        """
        Read and decode the file at ``path``.

        :raise DecodeFailed: when the file cannot be read or decoded.
        """
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise DecodeFailed("decode failed: cannot read file: %s" % e, path) from e
        return self.decode(data, path)
