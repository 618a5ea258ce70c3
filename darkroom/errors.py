"""
Errors - Exception hierarchy for conversions, storage and regeneration.
"""

from typing import List, Optional


class DarkroomError(Exception):
    """Base class for all darkroom errors."""

    kind = 'error'


class ConfigurationError(DarkroomError):
    """Invalid configuration, unknown disk, or a conversion include cycle."""

    kind = 'configuration'


class ValidationError(DarkroomError):
    """A single violated regeneration option rule."""

    kind = 'validation'

    def __init__(self, rule: str, message: str):
        super().__init__(message)
        self.rule = rule
        self.message = message


class InvalidOptions(DarkroomError):
    """
    Raised before any work begins when regeneration options are invalid.

    Attributes:
        errors: Every ValidationError found, in rule order
    """

    kind = 'validation'

    def __init__(self, errors: List[ValidationError]):
        super().__init__('; '.join(e.message for e in errors))
        self.errors = errors


class ImageError(DarkroomError):
    """Base for failures scoped to a single image reference."""


class MissingOriginal(ImageError):
    kind = 'missing_original'


class MissingPreset(ImageError):
    kind = 'missing_preset'


class PresetNotFound(ImageError):
    kind = 'preset_not_found'

    def __init__(self, preset: str):
        super().__init__(f"Preset not found: {preset}")
        self.preset = preset


class FileNotFound(ImageError):
    kind = 'file_not_found'


class OriginalNotFound(ImageError):
    kind = 'original_not_found'


class ConversionFailure(ImageError):
    """Decode, geometry or encode failure for one derivative."""

    kind = 'conversion_failed'

    def __init__(self, message: str, conversion: Optional[str] = None):
        super().__init__(message)
        self.conversion = conversion


class StorageFailure(ImageError):
    """Blob write, delete, copy or read failure on a disk."""

    kind = 'storage_failed'


class ManifestWriteFailure(ImageError):
    kind = 'manifest_write_failed'
