"""
S3Disk - S3/MinIO backed disk.
"""

import logging
import os
import shutil
import tempfile
from typing import Optional
from urllib.parse import quote

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from .disk import Disk
from .errors import StorageFailure
from .s3_config import S3Config


class S3Disk(Disk):
    """
    Disk stored in an S3 bucket.

    Image paths are mapped onto object keys under the configured prefix.
    """

    NOT_FOUND_CODES = ('404', 'NoSuchKey', 'NotFound')

    def __init__(self, config: S3Config, logger: Optional[logging.Logger] = None):
        """
        Initialize S3 disk.

        Args:
            config: S3 configuration
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self._cache_dir: Optional[str] = None

        self._client = boto3.client(
            's3',
            endpoint_url=config.endpoint,
            aws_access_key_id=config.access_key,
            aws_secret_access_key=config.secret_key,
            region_name=config.region,
            config=Config(
                signature_version='s3v4',
                s3={'addressing_style': 'path'}
            ),
            verify=config.verify_ssl
        )

    @property
    def client(self):
        """Return the underlying boto3 client."""
        return self._client

    def _is_not_found(self, error: ClientError) -> bool:
        return error.response.get('Error', {}).get('Code') in self.NOT_FOUND_CODES

    def exists(self, path: str) -> bool:
        """Check if an object exists in S3."""
        try:
            self._client.head_object(Bucket=self.config.bucket, Key=self.config.key_for(path))
            return True
        except ClientError as e:
            if self._is_not_found(e):
                return False
            raise StorageFailure(f"Failed to check {path}: {e}") from e

    def read(self, path: str) -> bytes:
        """Download an object from S3."""
        try:
            response = self._client.get_object(Bucket=self.config.bucket, Key=self.config.key_for(path))
            return response['Body'].read()
        except ClientError as e:
            raise StorageFailure(f"Failed to read {path}: {e}") from e

    def write(self, path: str, data: bytes) -> None:
        """Upload an object to S3."""
        try:
            self._client.put_object(
                Bucket=self.config.bucket,
                Key=self.config.key_for(path),
                Body=data,
                ContentType=self.get_content_type(path)
            )
        except ClientError as e:
            raise StorageFailure(f"Failed to write {path}: {e}") from e

    def delete(self, path: str) -> bool:
        """Delete an object. S3 deletes are idempotent, so check first."""
        if not self.exists(path):
            return False
        try:
            self._client.delete_object(Bucket=self.config.bucket, Key=self.config.key_for(path))
            return True
        except ClientError as e:
            raise StorageFailure(f"Failed to delete {path}: {e}") from e

    def copy(self, path: str, new_path: str) -> None:
        """Server-side copy within the bucket."""
        try:
            self._client.copy_object(
                Bucket=self.config.bucket,
                Key=self.config.key_for(new_path),
                CopySource={'Bucket': self.config.bucket, 'Key': self.config.key_for(path)},
            )
        except ClientError as e:
            raise StorageFailure(f"Failed to copy {path} to {new_path}: {e}") from e

    def url(self, path: str) -> str:
        """Public URL when configured, otherwise a presigned GET URL."""
        key = self.config.key_for(path)
        if self.config.public_url:
            return f"{self.config.public_url.rstrip('/')}/{quote(key)}"
        return self._client.generate_presigned_url(
            'get_object',
            Params={'Bucket': self.config.bucket, 'Key': key},
            ExpiresIn=self.config.url_expiry,
        )

    def local_path(self, path: str) -> str:
        """Download the object into a temp cache and return the file path."""
        if self._cache_dir is None:
            self._cache_dir = tempfile.mkdtemp(prefix='darkroom-s3-')

        cache_root = os.path.realpath(self._cache_dir)
        target = os.path.realpath(os.path.join(cache_root, path.lstrip('/')))
        if os.path.commonpath([cache_root, target]) != cache_root or target == cache_root:
            raise StorageFailure(f"Path escapes cache directory: {path}")

        os.makedirs(os.path.dirname(target), exist_ok=True)
        self.logger.debug(f"Downloading {path} to {target}")

        with open(target, 'wb') as f:
            f.write(self.read(path))
        return target

    def close(self) -> None:
        """Remove the download cache."""
        if self._cache_dir is not None:
            shutil.rmtree(self._cache_dir, ignore_errors=True)
            self._cache_dir = None

    @staticmethod
    def get_content_type(path: str) -> str:
        """Get content type for a path's extension."""
        ext = os.path.splitext(path)[1].lower()
        return {
            '.jpg': 'image/jpeg',
            '.jpeg': 'image/jpeg',
            '.png': 'image/png',
            '.gif': 'image/gif',
            '.webp': 'image/webp',
            '.tif': 'image/tiff',
            '.tiff': 'image/tiff',
            '.bmp': 'image/bmp',
        }.get(ext, 'application/octet-stream')
