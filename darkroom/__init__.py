"""
Image conversions and regeneration.

Stores an uploaded original with named, resized derivatives and records them
in a small manifest embedded in the owning record:

    1. Convert: resize/crop/encode each conversion of a preset
    2. Discover: find manifests across model, block and SEO records
    3. Regenerate: rebuild derivatives from each manifest's preset

Supports both S3 and local filesystem storage.
"""

__version__ = "1.0.0"

from .config import DarkroomConfig
from .errors import (
    DarkroomError,
    ConfigurationError,
    ValidationError,
    InvalidOptions,
    ImageError,
    MissingOriginal,
    MissingPreset,
    PresetNotFound,
    FileNotFound,
    OriginalNotFound,
    ConversionFailure,
    StorageFailure,
    ManifestWriteFailure,
)
from .disk import Disk, DiskManager
from .s3_config import S3Config
from .s3_client import S3Disk
from .local_client import LocalConfig, LocalDisk
from .conversion_spec import ConversionSpec, ResponsiveConfig
from .presets import ConfigConversion, SocialImageConversion, PresetRegistry, default_registry
from .manifest import ImageManifest
from .image_converter import ImageConverter
from .conversion_manager import ConversionManager
from .cleanup import ImageCleanupService
from .responsive import ResponsiveImageService, Picture, Srcset
from .image_reference import ImageReference
from .json_store import JsonRecordStore
from .regenerate_options import RegenerationOptions
from .discovery import ImageDiscoveryService
from .regeneration_stats import RegenerationResult, RegenerationStats
from .regeneration_progress import RegenerationProgress
from .regenerator import Regenerator
from .reporter import RegenerationReporter

__all__ = [
    "DarkroomConfig",
    "DarkroomError",
    "ConfigurationError",
    "ValidationError",
    "InvalidOptions",
    "ImageError",
    "MissingOriginal",
    "MissingPreset",
    "PresetNotFound",
    "FileNotFound",
    "OriginalNotFound",
    "ConversionFailure",
    "StorageFailure",
    "ManifestWriteFailure",
    "Disk",
    "DiskManager",
    "S3Config",
    "S3Disk",
    "LocalConfig",
    "LocalDisk",
    "ConversionSpec",
    "ResponsiveConfig",
    "ConfigConversion",
    "SocialImageConversion",
    "PresetRegistry",
    "default_registry",
    "ImageManifest",
    "ImageConverter",
    "ConversionManager",
    "ImageCleanupService",
    "ResponsiveImageService",
    "Picture",
    "Srcset",
    "ImageReference",
    "JsonRecordStore",
    "RegenerationOptions",
    "ImageDiscoveryService",
    "RegenerationResult",
    "RegenerationStats",
    "RegenerationProgress",
    "Regenerator",
    "RegenerationReporter",
]
