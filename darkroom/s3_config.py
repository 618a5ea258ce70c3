"""
S3Config - Connection settings for an S3/MinIO backed disk.
"""

import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class S3Config:
    """
    S3 connection settings.

    Attributes:
        endpoint: S3 endpoint URL (None for AWS default)
        bucket: Bucket holding the images
        prefix: Key prefix prepended to every image path
        access_key: Access key id
        secret_key: Secret access key
        region: Region name
        verify_ssl: Verify TLS certificates
        public_url: Base URL for public object URLs (presigned URLs when unset)
        url_expiry: Lifetime of presigned URLs in seconds
    """
    endpoint: Optional[str] = None
    bucket: Optional[str] = None
    prefix: str = ''
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    region: Optional[str] = None
    verify_ssl: bool = True
    public_url: Optional[str] = None
    url_expiry: int = 3600

    @classmethod
    def from_env(cls) -> 'S3Config':
        """Create configuration from S3_* environment variables."""
        return cls(
            endpoint=os.getenv('S3_ENDPOINT'),
            bucket=os.getenv('S3_BUCKET'),
            prefix=os.getenv('S3_PREFIX', ''),
            access_key=os.getenv('S3_ACCESS_KEY'),
            secret_key=os.getenv('S3_SECRET_KEY'),
            region=os.getenv('S3_REGION'),
            verify_ssl=os.getenv('S3_VERIFY_SSL', 'true').lower() not in ('0', 'false', 'no'),
            public_url=os.getenv('S3_PUBLIC_URL'),
            url_expiry=int(os.getenv('S3_URL_EXPIRY', '3600')),
        )

    def validate(self) -> List[str]:
        """Return a list of configuration errors (empty when valid)."""
        errors = []
        if not self.bucket:
            errors.append("S3_BUCKET is required")
        if not self.access_key:
            errors.append("S3_ACCESS_KEY is required")
        if not self.secret_key:
            errors.append("S3_SECRET_KEY is required")
        if self.url_expiry <= 0:
            errors.append("S3_URL_EXPIRY must be positive")
        return errors

    def key_for(self, path: str) -> str:
        """Map an image path onto an object key."""
        path = path.lstrip('/')
        if self.prefix:
            return f"{self.prefix.strip('/')}/{path}"
        return path
