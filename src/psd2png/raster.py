"""
In-memory flattened raster.
"""

from typing import Any

import numpy as np
from attrs import define, field
from PIL import Image

from psd2png.pil_io import convert_to_rgba
from psd2png.validators import range_

MAX_DIMENSION = 300000


def _to_bytes(value: Any) -> bytes:
    # Unlike bytes(), memoryview rejects an int length.
    return memoryview(value).tobytes()


@define(frozen=True, repr=False)
class RasterImage:
    """
    Flattened RGBA image, 8 bits per channel, interleaved.

    The buffer length is validated against the geometry when the object is
    created, before any array or image view is built over it.

    .. py:attribute:: width

    .. py:attribute:: height

    .. py:attribute:: data

        `bytes` of length ``width * height * 4``.
    """

    width: int = field(validator=range_(1, MAX_DIMENSION))
    height: int = field(validator=range_(1, MAX_DIMENSION))
    data: bytes = field(converter=_to_bytes)

    @data.validator
    def _validate_data(self, attribute: Any, value: bytes) -> None:
        expected = self.width * self.height * 4
        if len(value) != expected:
            raise ValueError(
                "Pixel buffer length mismatch: len=%d, expected=%d"
                % (len(value), expected)
            )

    def __repr__(self) -> str:
        return "RasterImage(width=%d, height=%d)" % (self.width, self.height)

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "RasterImage":
        """Create from a ``(height, width, 4)`` array of ``uint8``."""
        if array.ndim != 3 or array.shape[2] != 4:
            raise ValueError("Expected (height, width, 4) array, got %r" % (array.shape,))
        height, width = array.shape[:2]
        return cls(width, height, np.ascontiguousarray(array, dtype=np.uint8).tobytes())

    @classmethod
    def from_pil(cls, image: Image.Image) -> "RasterImage":
        """Create from a PIL image of any mode."""
        image = convert_to_rgba(image)
        width, height = image.size
        return cls(width, height, image.tobytes())

    def to_array(self) -> np.ndarray:
        return np.frombuffer(self.data, np.uint8).reshape((self.height, self.width, 4))

    def to_pil(self) -> Image.Image:
        return Image.frombytes("RGBA", self.size, self.data)
