"""
Object storage uploader - the boundary for s3:// outputs.

The runner never talks to an object storage SDK directly. It calls an
Uploader, which keeps:
1. the runner free of SDK imports
2. the SDK binding swappable (boto3, a local mirror, a mock)
3. credentials explicit configuration instead of process globals
"""

import logging
from pathlib import Path
from typing import Optional, Protocol, Union, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Uploader(Protocol):
    """Protocol for uploading a local file to an object storage bucket."""

    def set_credentials(self, key: Optional[str], secret: Optional[str]) -> "Uploader":
        """Set the access key pair. Returns self."""
        ...

    def set_region(self, region: Optional[str]) -> "Uploader":
        """Set the region the bucket lives in. Returns self."""
        ...

    def put_object(self, local_path: Union[str, Path], bucket: str, key: str) -> None:
        """
        Upload a file.

        Args:
            local_path: Fully qualified path to the source file
            bucket: Destination bucket name
            key: Object key inside the bucket

        Raises:
            Exception: Any SDK error, unchanged
        """
        ...


class S3Uploader:
    """
    Uploader backed by boto3.

    When no key pair is set, boto3 falls back to its default credential
    chain (environment, shared config, instance role).
    """

    def __init__(
        self,
        key: Optional[str] = None,
        secret: Optional[str] = None,
        region: Optional[str] = None,
    ):
        self._key = key
        self._secret = secret
        self._region = region
        self._client = None

    def set_credentials(self, key: Optional[str], secret: Optional[str]) -> "S3Uploader":
        self._key = key
        self._secret = secret
        self._client = None
        return self

    def set_region(self, region: Optional[str]) -> "S3Uploader":
        self._region = region
        self._client = None
        return self

    def _get_client(self):
        if self._client is None:
            import boto3

            options = {}
            if self._region:
                options["region_name"] = self._region
            if self._key and self._secret:
                options["aws_access_key_id"] = self._key
                options["aws_secret_access_key"] = self._secret
            self._client = boto3.client("s3", **options)
        return self._client

    def put_object(self, local_path: Union[str, Path], bucket: str, key: str) -> None:
        logger.info(f"Uploading {local_path} to s3://{bucket}/{key}")
        # upload_file switches to multipart for large files and aborts it on failure
        self._get_client().upload_file(str(local_path), bucket, key)


class NoOpUploader:
    """
    Uploader that records calls instead of uploading.

    Used for dry runs and tests.
    """

    def __init__(self) -> None:
        self.key: Optional[str] = None
        self.secret: Optional[str] = None
        self.region: Optional[str] = None
        self.uploads: list[tuple[str, str, str]] = []

    def set_credentials(self, key: Optional[str], secret: Optional[str]) -> "NoOpUploader":
        self.key = key
        self.secret = secret
        return self

    def set_region(self, region: Optional[str]) -> "NoOpUploader":
        self.region = region
        return self

    def put_object(self, local_path: Union[str, Path], bucket: str, key: str) -> None:
        self.uploads.append((str(local_path), bucket, key))
