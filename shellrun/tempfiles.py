"""
Temp file allocation for a run.

Many tools pick their output format from the file name (ImageMagick's
`convert in.png out.jpg`), so every temp file carries the extension of the
URL it stands for. Runners in separate processes may share one temp
directory; uniqueness rests on exclusive file creation only:

1. mkstemp() atomically creates an extension-less placeholder
2. <placeholder>.<ext> is created with O_EXCL
3. the placeholder is removed
"""

import logging
import os
import posixpath
import tempfile
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlparse

from shellrun.errors import ShellRunError

logger = logging.getLogger(__name__)

DEFAULT_TEMP_SUBDIR = "shellrun"


def default_temp_dir() -> Path:
    """Return the shared temp directory used when none is configured."""
    return Path(tempfile.gettempdir()) / DEFAULT_TEMP_SUBDIR


def url_extension(url: str) -> str:
    """
    Return the extension of a URL's path component without the leading dot.

    The extension is whatever follows the last dot of the final path
    segment, so dotfiles count: ".env" yields "env". Case is preserved.
    Returns "" when the segment has no dot.

    >>> url_extension("http://example.com/images/Duck.JPG?size=large")
    'JPG'
    >>> url_extension("capture://dimensions")
    ''
    """
    name = posixpath.basename(urlparse(url).path)
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1]


class TempFileAllocator:
    """
    Allocates uniquely named temp files and removes them again.

    One allocator belongs to one run: every path it hands out is tracked and
    deleted by cleanup().
    """

    def __init__(self, temp_dir: Optional[Union[str, Path]] = None):
        self._temp_dir = Path(temp_dir) if temp_dir else default_temp_dir()
        self._allocated: list[Path] = []

    @property
    def temp_dir(self) -> Path:
        return self._temp_dir

    @property
    def allocated(self) -> list[Path]:
        return list(self._allocated)

    def allocate(self, prefix: str, extension: Optional[str] = None) -> Path:
        """
        Create an empty temp file and return its path.

        Args:
            prefix: File name prefix (e.g. "input-")
            extension: Extension with or without the leading dot; empty or
                None yields a file without any suffix

        Raises:
            ShellRunError: If the file cannot be created
        """
        self._temp_dir.mkdir(parents=True, exist_ok=True)

        fd, placeholder = tempfile.mkstemp(prefix=prefix, dir=self._temp_dir)
        os.close(fd)

        ext = (extension or "").lstrip(".")
        if not ext:
            path = Path(placeholder)
            self._allocated.append(path)
            return path

        path = Path(f"{placeholder}.{ext}")
        try:
            fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o600)
        except OSError as e:
            raise ShellRunError(f"Unable to create tempfile: {path}") from e
        finally:
            os.unlink(placeholder)
        os.close(fd)

        self._allocated.append(path)
        return path

    def cleanup(self) -> list[Path]:
        """
        Delete every allocated file that still exists.

        Deletion is best-effort: failures are logged and returned, never raised.

        Returns:
            Paths that could not be removed
        """
        failed: list[Path] = []
        for path in self._allocated:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove temp file {path}: {e}")
                failed.append(path)
        self._allocated = []
        return failed
