"""
Output handlers - deliver produced files to their destinations.

Schemes:
- s3://bucket/path/to/key.ext: delegate to the configured Uploader
- http://host/path, https://...: PUT the file body; anything but 200 fails
- capture://key: keep the bytes in the run result under `key`
- file:///path/to/file: rename onto the path, creating parent directories;
  an existing directory at the path fails the delivery
"""

import errno
import logging
import os
import shutil
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

import requests

from shellrun.errors import DuplicateCaptureKeyError, UploadError
from shellrun.handlers.base import OutputHandler, RunContext
from shellrun.uploader import Uploader

logger = logging.getLogger(__name__)


class S3OutputHandler(OutputHandler):
    """
    Hands s3:// outputs to an Uploader.

    Uploader errors propagate unchanged.
    """

    def __init__(self, uploader: Optional[Uploader] = None):
        self._uploader = uploader

    def deliver(self, source: Path, url: str, context: RunContext) -> None:
        parts = urlparse(url)
        bucket = parts.netloc
        key = parts.path.lstrip("/")
        if not bucket:
            raise UploadError(f"No host could be parsed from {url}.", source=str(source), target=url)
        if not key:
            raise UploadError(f"No path could be parsed from {url}.", source=str(source), target=url)
        if self._uploader is None:
            raise UploadError(
                f"No uploader configured for {url}.", source=str(source), target=url
            )

        self._uploader.put_object(str(source), bucket, key)


class HttpOutputHandler(OutputHandler):
    """PUTs http:// and https:// outputs."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self._session = session or requests.Session()
        self._timeout = timeout

    def deliver(self, source: Path, url: str, context: RunContext) -> None:
        logger.info(f"Uploading output file from {source} to {url}")
        try:
            with open(source, "rb") as f:
                response = self._session.put(url, data=f, timeout=self._timeout)
        except requests.RequestException as e:
            raise UploadError(
                f"Error uploading {source} to {url}: {e}", source=str(source), target=url
            ) from e

        # Only 200 counts as delivered
        if response.status_code != 200:
            raise UploadError(
                f"Error uploading {source} to {url}: server responded with "
                f"{response.status_code}: {response.text}",
                source=str(source),
                target=url,
            )


class CaptureOutputHandler(OutputHandler):
    """Reads capture:// outputs into the run's capture buffer."""

    def deliver(self, source: Path, url: str, context: RunContext) -> None:
        key = urlparse(url).netloc
        if not key:
            raise UploadError(f"No capture key specified in {url}", source=str(source), target=url)
        if key in context.capture:
            raise DuplicateCaptureKeyError(key)

        context.capture[key] = Path(source).read_bytes()


class FileOutputHandler(OutputHandler):
    """Moves file:// outputs into place."""

    def deliver(self, source: Path, url: str, context: RunContext) -> None:
        target = Path(unquote(urlparse(url).path))
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise UploadError(
                f"mkdir({target.parent}) failed trying to create an enclosing directory "
                f"for target file: {e}",
                source=str(source),
                target=str(target),
            ) from e

        if target.is_dir():
            raise UploadError(
                f"rename({source}, {target}) failed: target is a directory",
                source=str(source),
                target=str(target),
            )

        logger.info(f"Moving {source} to {target}")
        try:
            os.replace(source, target)
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise UploadError(
                    f"rename({source}, {target}) failed: {e}", source=str(source), target=str(target)
                ) from e
            self._move_across_devices(source, target)

    @staticmethod
    def _move_across_devices(source: Path, target: Path) -> None:
        try:
            shutil.move(str(source), str(target))
        except OSError as e:
            raise UploadError(
                f"rename({source}, {target}) failed: {e}", source=str(source), target=str(target)
            ) from e
