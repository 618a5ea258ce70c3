"""
ImageConverter - Resizes, crops and encodes derivatives from an original image.
"""

import io
import logging
import os
import posixpath
from typing import Dict, List, Optional, Union

from PIL import Image, ImageOps, UnidentifiedImageError

from .config import DarkroomConfig
from .conversion_spec import CONTAIN
from .disk import Disk, DiskManager
from .errors import ConversionFailure, DarkroomError, OriginalNotFound
from .geometry import compute_geometry
from .manifest import ImageManifest


class ImageConverter:
    """
    Generates image conversions using Pillow and stores them on a disk.

    Derivatives are written next to the original, in the configured
    conversions directory:

        blocks/hero/photo.jpg
        blocks/hero/conversions/photo-thumb.jpg
    """

    FORMATS = {
        '.jpg': 'JPEG',
        '.jpeg': 'JPEG',
        '.png': 'PNG',
        '.gif': 'GIF',
        '.webp': 'WEBP',
        '.tif': 'TIFF',
        '.tiff': 'TIFF',
        '.bmp': 'BMP',
    }

    # Formats without alpha support
    OPAQUE_FORMATS = ('JPEG', 'BMP')

    def __init__(
        self,
        disks: DiskManager,
        config: Optional[DarkroomConfig] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize image converter.

        Args:
            disks: Named disks to read from and write to
            config: Package configuration (default quality, conversions directory)
            logger: Optional logger instance
        """
        self.disks = disks
        self.config = config or DarkroomConfig()
        self.logger = logger or logging.getLogger(__name__)

    def convert(
        self,
        source_data: bytes,
        source_name: str,
        conversions: Dict[str, dict],
        disk: str,
        directory: str
    ) -> ImageManifest:
        """
        Store an original and generate all its conversions.

        Args:
            source_data: Original image bytes
            source_name: Original file name (its name and extension are kept)
            conversions: Normalized conversions, e.g. {'thumb': {'width': 200, 'height': 200, 'fit': 'crop'}}
            disk: Disk name
            directory: Target directory (e.g. 'blocks/hero')

        Returns:
            Manifest with 'original' and one 'conversions' entry per conversion
        """
        storage = self.disks.get(disk)
        filename, extension = os.path.splitext(os.path.basename(source_name))
        original_path = posixpath.join(directory.strip('/'), f"{filename}{extension}")

        image = self.open_image(source_data, source_name)

        self.logger.debug(f"Storing original: {original_path}")
        storage.write(original_path, source_data)

        paths = {name: self.derivative_path(original_path, name) for name in conversions}
        try:
            written = self._write_conversions(storage, image, conversions, paths, extension)
        except Exception:
            self.discard(storage, [original_path])
            raise

        return ImageManifest(original=original_path, conversions=written)

    def regenerate(
        self,
        original_path: str,
        conversions: Dict[str, dict],
        disk: str,
        target_paths: Optional[Dict[str, str]] = None
    ) -> ImageManifest:
        """
        Regenerate conversions for an existing original.

        The original is never moved or rewritten. If any conversion fails,
        the derivatives written by this call are removed before the error
        is raised.

        Args:
            original_path: Path of the original on the disk
            conversions: Normalized conversions
            disk: Disk name
            target_paths: Optional name -> path overrides for where to write

        Raises:
            OriginalNotFound: If the original does not exist
            ConversionFailure: If decoding or encoding fails
            StorageFailure: If a derivative cannot be written
        """
        storage = self.disks.get(disk)

        if not storage.exists(original_path):
            raise OriginalNotFound(f"Original image not found: {original_path}")

        self.logger.debug(f"Reading original: {original_path}")
        image = self.open_image(storage.read(original_path), original_path)
        extension = os.path.splitext(original_path)[1]

        paths = {name: self.derivative_path(original_path, name) for name in conversions}
        paths.update({name: path for name, path in (target_paths or {}).items() if name in conversions})

        written = self._write_conversions(storage, image, conversions, paths, extension)
        return ImageManifest(original=original_path, conversions=written)

    def delete(self, manifest: Union[ImageManifest, dict], disk: str) -> None:
        """Delete an original and all its conversions. Missing files are ignored."""
        if not isinstance(manifest, ImageManifest):
            manifest = ImageManifest.from_dict(manifest)

        storage = self.disks.get(disk)
        for path in manifest.all_paths:
            if storage.delete(path):
                self.logger.debug(f"Deleted: {path}")

    def derivative_path(self, original_path: str, name: str, revision: Optional[str] = None) -> str:
        """
        Path for a conversion of an original.

        Args:
            original_path: e.g. 'blocks/hero/photo.jpg'
            name: Conversion name, e.g. 'thumb'
            revision: Optional token appended to the file name

        Returns:
            e.g. 'blocks/hero/conversions/photo-thumb.jpg'
        """
        directory = posixpath.dirname(original_path)
        filename, extension = posixpath.splitext(posixpath.basename(original_path))
        suffix = f"-{revision}" if revision else ''
        return posixpath.join(
            directory,
            self.config.conversions_directory.strip('/'),
            f"{filename}-{name}{suffix}{extension}",
        )

    def open_image(self, data: bytes, name: str = '') -> Image.Image:
        """Decode image bytes, applying EXIF orientation."""
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
            source_format = img.format
            img = ImageOps.exif_transpose(img)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise ConversionFailure(f"Cannot decode image {name}: {e}") from e

        if img.mode not in ('RGB', 'RGBA', 'L'):
            has_alpha = img.mode in ('LA', 'PA', 'P', 'RGBa') or 'transparency' in img.info
            img = img.convert('RGBA' if has_alpha else 'RGB')

        # Copies drop the decoded format
        img.format = source_format
        return img

    def render(self, image: Image.Image, config: dict, extension: str) -> bytes:
        """
        Apply one conversion to a decoded image and encode it.

        Args:
            image: Decoded original
            config: Normalized conversion config
            extension: Output extension (e.g. '.jpg'), selects the format

        Returns:
            Encoded derivative bytes
        """
        output_format = self._get_output_format(extension, image)
        geometry = compute_geometry(
            config.get('fit', CONTAIN),
            image.size,
            config.get('width'),
            config.get('height'),
        )

        try:
            converted = image.resize(geometry.resize, Image.Resampling.LANCZOS)
            if geometry.crop:
                converted = converted.crop(geometry.crop)
            converted = self._convert_color_mode(converted, output_format)

            quality = config.get('quality', self.config.quality)
            output = io.BytesIO()
            if output_format in ('JPEG', 'WEBP'):
                converted.save(output, format=output_format, quality=quality, optimize=True)
            elif output_format == 'PNG':
                converted.save(output, format='PNG', optimize=True)
            else:
                converted.save(output, format=output_format)
            return output.getvalue()
        except (OSError, ValueError) as e:
            raise ConversionFailure(f"Cannot encode {output_format}: {e}") from e

    def _write_conversions(
        self,
        storage: Disk,
        image: Image.Image,
        conversions: Dict[str, dict],
        paths: Dict[str, str],
        extension: str
    ) -> Dict[str, str]:
        """Render and write every conversion; on failure remove what was written."""
        written: Dict[str, str] = {}

        for name, config in conversions.items():
            path = paths[name]
            try:
                data = self.render(image, config, extension)
                storage.write(path, data)
            except DarkroomError as e:
                self.logger.error(f"Conversion '{name}' failed: {e}")
                self.discard(storage, list(written.values()))
                if isinstance(e, ConversionFailure) and e.conversion is None:
                    e.conversion = name
                raise
            except Exception as e:
                self.logger.error(f"Conversion '{name}' failed: {e}")
                self.discard(storage, list(written.values()))
                raise ConversionFailure(f"Conversion '{name}' failed: {e}", conversion=name) from e

            written[name] = path
            self.logger.debug(f"Generated {name}: {path} ({len(data)} bytes)")

        return written

    def discard(self, storage: Disk, paths: List[str]) -> None:
        """Best-effort removal of files written by a failed call."""
        for path in paths:
            try:
                storage.delete(path)
            except Exception as e:
                self.logger.warning(f"Could not remove partial file {path}: {e}")

    def _convert_color_mode(self, img: Image.Image, output_format: str) -> Image.Image:
        """Flatten transparency onto white for formats without alpha."""
        if output_format not in self.OPAQUE_FORMATS:
            return img
        if img.mode == 'RGBA':
            background = Image.new('RGB', img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode != 'RGB':
            return img.convert('RGB')
        return img

    def _get_output_format(self, extension: str, image: Image.Image) -> str:
        """Pillow format for an extension, falling back to the decoded format."""
        output_format = self.FORMATS.get(extension.lower()) or image.format
        if not output_format:
            raise ConversionFailure(f"Unsupported image extension: {extension or '(none)'}")
        return output_format
