"""
ImageCleanupService - Deletes the files of images being removed or replaced.
"""

import logging
from typing import Any, Iterable, Optional

from .conversion_manager import ConversionManager
from .manifest import decode_value
from .record_store import BlockAttribute


class ImageCleanupService:
    """
    Removes an image's original and conversions from its disk.

    Cleanup never raises; failures are logged and reported as False.
    """

    def __init__(self, manager: ConversionManager, logger: Optional[logging.Logger] = None):
        self.manager = manager
        self.logger = logger or logging.getLogger(__name__)

    def cleanup_single_image(self, manifest: Any, disk: str = 'public', context: Optional[dict] = None) -> bool:
        """
        Delete one image and all its conversions.

        Args:
            manifest: Manifest dict, JSON string or ImageManifest
            disk: Disk name
            context: Extra details included in log messages (e.g. block id)

        Returns:
            True if the files were deleted (missing files count as deleted)
        """
        context = context or {}
        try:
            self.manager.delete(manifest, disk)
        except Exception as e:
            self.logger.error(f"Failed to clean up image {manifest!r}: {e} {context}")
            return False

        self.logger.debug(f"Cleaned up image: {self.manager.get_path(manifest)} {context}")
        return True

    def cleanup_block_attributes(self, attributes: Iterable[BlockAttribute], disk: str = 'public') -> int:
        """
        Clean up the images held by block attributes about to be deleted.

        Only string values holding a converted manifest are cleaned.

        Returns:
            Number of images cleaned up
        """
        cleaned = 0
        for attribute in attributes:
            if not self.should_cleanup(attribute.value):
                continue
            context = {'block_id': attribute.block_id, 'key': attribute.field}
            if self.cleanup_single_image(decode_value(attribute.value), disk, context):
                cleaned += 1
        return cleaned

    @staticmethod
    def should_cleanup(value: Any) -> bool:
        """True for a JSON string with an 'original' and a 'conversions' mapping."""
        if not isinstance(value, str):
            return False
        data = decode_value(value)
        return (
            data is not None
            and data.get('original') is not None
            and isinstance(data.get('conversions'), dict)
        )
