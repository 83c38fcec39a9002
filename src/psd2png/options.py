"""
Options of a conversion run.
"""

from typing import Any, Iterable

from attrs import define, field

from psd2png.constants import OUTPUT_EXTENSION, SOURCE_EXTENSIONS
from psd2png.locator import normalize_extension
from psd2png.validators import in_, range_


def _extensions(value: Iterable[str]) -> tuple[str, ...]:
    if isinstance(value, str):
        value = (value,)
    return tuple(dict.fromkeys(normalize_extension(ext) for ext in value))


@define(frozen=True)
class ConversionOptions:
    """
    Options of a conversion run.

    Example::

        options = ConversionOptions(workers=4, apply_icc=True)

    .. py:attribute:: extensions

        Source extensions to pick up, matched case-insensitively.

    .. py:attribute:: output_extension

        Extension of the written files. Only ``.png`` is supported.

    .. py:attribute:: workers

        Number of files converted concurrently. ``1`` converts strictly one
        file at a time.

    .. py:attribute:: compress_level

        PNG zlib compression level.

    .. py:attribute:: apply_icc

        Convert documents with an embedded ICC profile to sRGB.
    """

    extensions: tuple = field(default=SOURCE_EXTENSIONS, converter=_extensions)
    output_extension: str = field(
        default=OUTPUT_EXTENSION,
        converter=normalize_extension,
        validator=in_((OUTPUT_EXTENSION,)),
    )
    workers: int = field(default=1, validator=range_(1, 64))
    compress_level: int = field(default=6, validator=range_(0, 9))
    apply_icc: bool = False

    @extensions.validator
    def _validate_extensions(self, attribute: Any, value: tuple) -> None:
        if not value:
            raise ValueError("At least one source extension is required")
