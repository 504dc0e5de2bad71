"""
Input handlers - fetch source URLs into local temp files.

Schemes:
- http, https: GET, streaming the body to disk; status >= 300 fails
- "" (bare path), file: copy the local file; the original is never moved
"""

import logging
import shutil
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

import requests

from shellrun.errors import DownloadError
from shellrun.handlers.base import InputHandler

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class HttpInputHandler(InputHandler):
    """Downloads http:// and https:// inputs."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self._session = session or requests.Session()
        self._timeout = timeout

    def fetch(self, url: str, destination: Path) -> None:
        logger.info(f"Downloading {url} to {destination}")
        try:
            with self._session.get(url, stream=True, timeout=self._timeout) as response:
                if response.status_code >= 300:
                    raise DownloadError(
                        f"Error downloading file from {url} to {destination}: "
                        f"server responded with error code '{response.status_code}'."
                    )
                with open(destination, "wb") as f:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
        except requests.RequestException as e:
            raise DownloadError(f"Error downloading file from {url}: {e}") from e


class FileInputHandler(InputHandler):
    """
    Copies bare-path and file:// inputs.

    Bare paths are used as written; only file:// URLs are percent-decoded.
    """

    def fetch(self, url: str, destination: Path) -> None:
        parts = urlparse(url)
        source = unquote(parts.path) if parts.scheme.lower() == "file" else url
        logger.info(f"Copying {source} to {destination}")
        try:
            shutil.copyfile(source, destination)
        except OSError as e:
            raise DownloadError(f"copy({source}, {destination}) failed: {e}") from e
