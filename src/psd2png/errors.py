"""
Exception hierarchy.

Batch-fatal conditions derive from :py:class:`BatchError` and stop a run
before any file is converted. Per-file conditions derive from
:py:class:`FileConversionError`; the orchestrator records them and moves on
to the next candidate.
"""

from typing import Optional


class ConversionError(Exception):
    """Base class of every error raised by psd2png."""


class BatchError(ConversionError):
    """A condition that prevents the batch from starting."""


class MissingParameter(BatchError, ValueError):
    """The input root or the output root was not supplied."""

    def __init__(self, name: str) -> None:
        super().__init__("Missing required parameter: %s" % name)
        self.name = name


class DirectoryNotFound(BatchError):
    """The input root does not exist or is not a directory."""

    def __init__(self, path: str) -> None:
        super().__init__("Directory not found: %s" % path)
        self.path = path


class NoInputFilesFound(BatchError):
    """The input root holds no file with a matching extension."""

    def __init__(self, path: str) -> None:
        super().__init__("No PSD files found in the selected folder: %s" % path)
        self.path = path


class OutputDirectoryError(BatchError):
    """The output root could not be created."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__("Failed to create output directory %s: %s" % (path, reason))
        self.path = path


class FileConversionError(ConversionError):
    """A failure scoped to a single candidate file."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path


class DecodeFailed(FileConversionError):
    """Neither decode strategy could read the file."""


class EncodeFailed(FileConversionError):
    """The raster could not be serialized to PNG."""


class WriteFailed(FileConversionError):
    """The PNG could not be written to its destination."""


class PathDerivationError(FileConversionError):
    """The destination path could not be derived from the source path."""