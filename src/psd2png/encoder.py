"""
PNG serialization of a :py:class:`~psd2png.raster.RasterImage`.

The destination is replaced atomically: the PNG is written to a temporary
file in the destination directory and renamed over the destination, so a
failed write never leaves a truncated file in place of an earlier output.
"""

import io
import logging
import os
import stat
import tempfile

from psd2png.errors import EncodeFailed, WriteFailed
from psd2png.raster import RasterImage

logger = logging.getLogger(__name__)


def _get_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


# Read once: changing the umask is process-wide and not thread safe.
_UMASK = _get_umask()


class ImageEncoder:
    """
    Encode rasters as PNG and write them to disk.

    :param compress_level: zlib compression level, 0 to 9.
    """

    format = "PNG"

    def __init__(self, compress_level: int = 6) -> None:
        if not isinstance(compress_level, int) or not 0 <= compress_level <= 9:
            raise ValueError("compress_level must be in range [0, 9]: %r" % compress_level)
        self.compress_level = compress_level

    def encode(self, image: RasterImage) -> bytes:
        """
        Serialize the raster to PNG bytes.

        :raise EncodeFailed: on serialization error.
        """
        try:
            with io.BytesIO() as f:
                image.to_pil().save(
                    f, format=self.format, compress_level=self.compress_level
                )
                return f.getvalue()
        except (OSError, ValueError) as e:
            raise EncodeFailed("encode failed: %s" % e) from e

    def write(self, image: RasterImage, destination: str) -> None:
        """
        Encode the raster and atomically write it to ``destination``.

        Parent directories are created as needed and an existing file is
        overwritten.

        :raise EncodeFailed: on serialization error.
        :raise WriteFailed: on filesystem error.
        """
        data = self.encode(image)
        try:
            atomic_write(destination, data)
        except OSError as e:
            raise WriteFailed("write failed: %s" % e, destination) from e
        logger.debug("wrote %s, len=%d" % (destination, len(data)))


def atomic_write(path: str, data: bytes) -> None:
    """Write ``data`` to ``path`` through a temporary file and a rename.

    The written file gets the mode of the file it replaces, or the default
    mode for new files under the current umask.
    """
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)

    # Same directory, so the rename stays on one filesystem.
    fd, tmp_path = tempfile.mkstemp(
        suffix=".tmp", prefix=".%s." % os.path.basename(path), dir=parent
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_path, _target_mode(path))
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def _target_mode(path: str) -> int:
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        return 0o666 & ~_UMASK
