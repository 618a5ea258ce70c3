"""
ConversionManager - Processes uploads into manifests and resolves their URLs.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .image_converter import ImageConverter
from .manifest import ImageManifest, decode_value


ManifestLike = Union[ImageManifest, dict, str, None]


class ConversionManager:
    """
    Entry point for storing an uploaded image and its conversions.
    """

    def __init__(self, converter: ImageConverter, logger: Optional[logging.Logger] = None):
        self.converter = converter
        self.disks = converter.disks
        self.logger = logger or logging.getLogger(__name__)

    def process(
        self,
        source: Union[str, Path],
        conversions: Dict[str, dict],
        disk: str,
        directory: str,
        preset: Optional[str] = None
    ) -> dict:
        """
        Process an uploaded file and create its conversions.

        Args:
            source: Path of the uploaded (temporary) file
            conversions: Normalized conversions
            disk: Disk name
            directory: Target directory
            preset: Optional preset id recorded for later regeneration

        Returns:
            JSON-serializable manifest dict
        """
        source = Path(source)
        self.logger.info(f"Processing upload: {source.name} -> {disk}:{directory}")

        manifest = self.converter.convert(
            source.read_bytes(),
            source.name,
            conversions,
            disk,
            directory,
        )
        if preset:
            manifest.preset = preset

        return manifest.to_dict()

    def replace(
        self,
        new_source: Union[str, Path],
        old_manifest: ManifestLike,
        conversions: Dict[str, dict],
        disk: str,
        directory: str,
        preset: Optional[str] = None
    ) -> dict:
        """Delete the old image and its conversions, then process the new file."""
        self.delete(old_manifest, disk)
        return self.process(new_source, conversions, disk, directory, preset)

    def delete(self, manifest: ManifestLike, disk: str) -> None:
        """Delete an image and all its conversions."""
        resolved = self._as_manifest(manifest)
        if resolved is not None:
            self.converter.delete(resolved, disk)

    def get_path(self, manifest: ManifestLike, conversion: str = 'original') -> Optional[str]:
        """
        Path for a conversion ('original' for the original).

        Plain string values are treated as a bare original path.
        """
        if not manifest:
            return None
        if isinstance(manifest, str) and decode_value(manifest) is None:
            return manifest

        resolved = self._as_manifest(manifest)
        if resolved is None:
            return None
        return resolved.conversion_path(conversion)

    def get_url(self, manifest: ManifestLike, conversion: str = 'original', disk: str = 'public') -> Optional[str]:
        """Public URL for a conversion, or None if it does not exist."""
        path = self.get_path(manifest, conversion)
        if not path:
            return None
        return self.disks.get(disk).url(path)

    @staticmethod
    def _as_manifest(manifest: Any) -> Optional[ImageManifest]:
        if isinstance(manifest, ImageManifest):
            return manifest
        if not manifest:
            return None
        return ImageManifest.from_value(manifest)
