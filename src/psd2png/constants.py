"""
Various constants for psd2png.
"""

from enum import Enum, IntEnum

#: Extensions picked up by the file locator unless configured otherwise.
SOURCE_EXTENSIONS = (".psd", ".psb")

#: Canonical extension of the flattened output.
OUTPUT_EXTENSION = ".png"


class ColorMode(IntEnum):
    """
    Color mode of the document.
    """

    BITMAP = 0
    GRAYSCALE = 1
    INDEXED = 2
    RGB = 3
    CMYK = 4
    MULTICHANNEL = 7
    DUOTONE = 8
    LAB = 9


class Compression(IntEnum):
    """
    Compression of the merged image data.

    0 = Raw Data, 1 = RLE compressed, 2 = ZIP without prediction,
    3 = ZIP with prediction.
    """

    RAW = 0
    RLE = 1
    ZIP = 2
    ZIP_WITH_PREDICTION = 3


class Resource(IntEnum):
    """
    Image resource keys the reader interprets. Other keys are kept as bytes.
    """

    ICC_PROFILE = 1039
    ALPHA_IDENTIFIERS = 1053


class Tag(Enum):
    """
    Tagged block keys found at the end of the layer and mask section.
    """

    LAYER_16 = b"Lr16"
    LAYER_32 = b"Lr32"
    SAVING_MERGED_TRANSPARENCY = b"Mtrn"
    SAVING_MERGED_TRANSPARENCY16 = b"Mt16"
    SAVING_MERGED_TRANSPARENCY32 = b"Mt32"


#: Tagged block keys whose length field is 8 bytes in PSB documents.
LARGE_TAGS = (
    b"LMsk",
    b"Lr16",
    b"Lr32",
    b"Layr",
    b"Mt16",
    b"Mt32",
    b"Mtrn",
    b"Alph",
    b"FMsk",
    b"lnk2",
    b"FEid",
    b"FXid",
    b"PxSD",
)


class BatchState(Enum):
    """
    State of a batch run.

    Transitions::

        IDLE -> SCANNING -> CONVERTING -> COMPLETED
                         -> FAILED
    """

    IDLE = "idle"
    SCANNING = "scanning"
    CONVERTING = "converting"
    COMPLETED = "completed"
    FAILED = "failed"
