"""
LocalDisk - Filesystem backed disk.
"""

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

from .disk import Disk
from .errors import StorageFailure


@dataclass
class LocalConfig:
    """
    Local filesystem settings.

    Attributes:
        root_path: Directory that image paths are relative to
        base_url: URL prefix that serves root_path (e.g. '/storage')
    """
    root_path: str
    base_url: str = '/storage'

    def validate(self) -> List[str]:
        """Return a list of configuration errors (empty when valid)."""
        errors = []
        if not self.root_path:
            errors.append("Local root path is required")
        elif not os.path.isdir(self.root_path):
            errors.append(f"Local root path does not exist: {self.root_path}")
        return errors


class LocalDisk(Disk):
    """
    Disk stored under a local directory.
    """

    def __init__(self, config: LocalConfig, logger: Optional[logging.Logger] = None):
        """
        Initialize local disk.

        Args:
            config: Local configuration
            logger: Optional logger instance
        """
        self.config = config
        self.root = Path(config.root_path)
        self.logger = logger or logging.getLogger(__name__)

    def _full_path(self, path: str) -> Path:
        full = (self.root / path.lstrip('/')).resolve()
        root = self.root.resolve()
        if full != root and root not in full.parents:
            raise StorageFailure(f"Path escapes disk root: {path}")
        return full

    def exists(self, path: str) -> bool:
        return self._full_path(path).is_file()

    def read(self, path: str) -> bytes:
        try:
            return self._full_path(path).read_bytes()
        except OSError as e:
            raise StorageFailure(f"Failed to read {path}: {e}") from e

    def write(self, path: str, data: bytes) -> None:
        full = self._full_path(path)
        try:
            full.parent.mkdir(parents=True, exist_ok=True)
            full.write_bytes(data)
        except OSError as e:
            raise StorageFailure(f"Failed to write {path}: {e}") from e

    def delete(self, path: str) -> bool:
        full = self._full_path(path)
        try:
            full.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageFailure(f"Failed to delete {path}: {e}") from e

    def copy(self, path: str, new_path: str) -> None:
        source = self._full_path(path)
        target = self._full_path(new_path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
        except OSError as e:
            raise StorageFailure(f"Failed to copy {path} to {new_path}: {e}") from e

    def url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{quote(path.lstrip('/'))}"

    def local_path(self, path: str) -> str:
        return str(self._full_path(path))
