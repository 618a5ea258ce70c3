"""
Disk - Blob storage contract and the named disk registry.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .errors import ConfigurationError


class Disk(ABC):
    """
    Storage backend holding image bytes.

    Paths are relative, '/'-separated image paths such as
    'blocks/hero/conversions/photo-thumb.jpg'. Implementations raise
    StorageFailure for backend errors.
    """

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check if a blob exists."""

    @abstractmethod
    def read(self, path: str) -> bytes:
        """Read a blob."""

    @abstractmethod
    def write(self, path: str, data: bytes) -> None:
        """Write (create or overwrite) a blob."""

    @abstractmethod
    def delete(self, path: str) -> bool:
        """Delete a blob. Returns False if it did not exist."""

    @abstractmethod
    def copy(self, path: str, new_path: str) -> None:
        """Copy a blob to a new path."""

    @abstractmethod
    def url(self, path: str) -> str:
        """Public URL for a blob."""

    @abstractmethod
    def local_path(self, path: str) -> str:
        """Filesystem path for native decoders."""

    def close(self) -> None:
        """Release local resources (temp files, caches)."""


class DiskManager:
    """Registry of disks by name."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._disks: Dict[str, Disk] = {}

    def register(self, name: str, disk: Disk) -> 'DiskManager':
        """Register (or replace) a named disk."""
        if name in self._disks:
            self.logger.debug(f"Replacing disk: {name}")
        self._disks[name] = disk
        return self

    def get(self, name: str) -> Disk:
        """Get a disk by name."""
        try:
            return self._disks[name]
        except KeyError:
            raise ConfigurationError(f"Disk not configured: {name}") from None

    def has(self, name: str) -> bool:
        return name in self._disks

    @property
    def names(self) -> List[str]:
        return list(self._disks)

    def close(self) -> None:
        for disk in self._disks.values():
            disk.close()
