"""
Low-level API that translates binary data to Python structure.

All the data structures in this subpackage inherit from
:py:class:`~psd2png.psd.base.BaseElement`. Only reading is supported.
"""

from .document import PSD

__all__ = ["PSD"]
