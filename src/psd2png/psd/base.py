"""
Base data structure intended for inheritance.

All the section objects in :py:mod:`psd2png.psd` inherit from
:py:class:`BaseElement` and get attrs_ decoration for their fields. The
reader is read-only: there is no serialization counterpart.

.. _attrs: https://www.attrs.org/en/stable/index.html
"""

import io
import logging
from typing import Any, BinaryIO, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="BaseElement")


class BaseElement:
    """
    Base element of the PSD sections.

    .. py:classmethod:: read(cls, fp)

        Read the element from a file-like object.

    .. py:classmethod:: frombytes(self, data, *args, **kwargs)

        Read the element from bytes.
    """

    @classmethod
    def read(cls: type[T], fp: BinaryIO, **kwargs: Any) -> T:
        raise NotImplementedError()

    @classmethod
    def frombytes(cls: type[T], data: bytes, *args: Any, **kwargs: Any) -> T:
        with io.BytesIO(data) as f:
            return cls.read(f, *args, **kwargs)
