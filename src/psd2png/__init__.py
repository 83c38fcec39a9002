"""
psd2png: batch conversion of Adobe Photoshop PSD/PSB files to flattened PNG.

Basic usage::

    from psd2png import convert_folder

    result = convert_folder('input', 'output', progress=print)
    print(result.succeeded, result.failed)

Architecture:

- :py:mod:`psd2png.psd`: Low-level binary structure parsing (read only)
- :py:mod:`psd2png.compression`: Image data codecs (RLE, ZIP)
- :py:mod:`psd2png.decoder`: Ordered decode strategies with fallback
- :py:mod:`psd2png.encoder`: Atomic PNG writer
- :py:mod:`psd2png.batch`: Directory tree conversion and progress reporting
"""

from psd2png.batch import (
    BatchOrchestrator,
    BatchResult,
    ConversionTarget,
    convert_folder,
    start_conversion,
)
from psd2png.decoder import ImageDecoder
from psd2png.encoder import ImageEncoder
from psd2png.locator import FileLocator
from psd2png.options import ConversionOptions
from psd2png.progress import ProgressEvent
from psd2png.raster import RasterImage
from psd2png.version import __version__

__all__ = [
    "BatchOrchestrator",
    "BatchResult",
    "ConversionOptions",
    "ConversionTarget",
    "FileLocator",
    "ImageDecoder",
    "ImageEncoder",
    "ProgressEvent",
    "RasterImage",
    "convert_folder",
    "start_conversion",
    "__version__",
]
