"""
Discovery of candidate input files.
"""

import logging
import os
from typing import Iterable, Iterator

from psd2png.constants import SOURCE_EXTENSIONS
from psd2png.errors import DirectoryNotFound

logger = logging.getLogger(__name__)


class FileLocator:
    """
    Recursively enumerate files below a root directory whose extension
    matches, case-insensitively, one of ``extensions``.

    Directories and files are visited in sorted name order, which keeps the
    result deterministic for a given filesystem snapshot. Entries that
    cannot be stat'd, such as broken symlinks or unreadable directories,
    are skipped. Symlinked directories are not followed.

    Example::

        locator = FileLocator()
        for path in locator.iter_files('/path/to/input'):
            print(path)
    """

    def __init__(self, extensions: Iterable[str] = SOURCE_EXTENSIONS) -> None:
        self.extensions = tuple(normalize_extension(ext) for ext in extensions)
        if not self.extensions:
            raise ValueError("At least one extension is required")

    def matches(self, path: str) -> bool:
        return os.path.splitext(path)[1].lower() in self.extensions

    def iter_files(self, root: str) -> Iterator[str]:
        """
        Lazily yield absolute paths of the matching files under ``root``.

        :raise DirectoryNotFound: when ``root`` is not an existing directory.
        """
        root = os.path.abspath(root)
        if not os.path.isdir(root):
            raise DirectoryNotFound(root)
        return self._walk(root)

    def locate(self, root: str) -> list[str]:
        """List the matching files under ``root``. See :py:meth:`iter_files`."""
        return list(self.iter_files(root))

    def _walk(self, root: str) -> Iterator[str]:
        def onerror(error: OSError) -> None:
            logger.debug("Skipping unreadable entry: %s" % error)

        for dirpath, dirnames, filenames in os.walk(root, onerror=onerror):
            dirnames.sort()
            for filename in sorted(filenames):
                path = os.path.join(dirpath, filename)
                if not self.matches(path):
                    continue
                try:
                    if not os.path.isfile(path) or not os.access(path, os.R_OK):
                        logger.debug("Skipping unreadable file: %s" % path)
                        continue
                except OSError as e:
                    logger.debug("Skipping %s: %s" % (path, e))
                    continue
                yield path


def normalize_extension(extension: str) -> str:
    """Lowercase the extension and make sure it starts with a dot."""
    extension = extension.strip().lower()
    if not extension or extension == ".":
        raise ValueError("Invalid extension: %r" % extension)
    if not extension.startswith("."):
        extension = "." + extension
    return extension
