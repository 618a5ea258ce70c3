"""
DarkroomConfig - Defaults for conversions, storage and responsive output.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional


def _default_breakpoints() -> Dict[str, int]:
    return {
        'sm': 640,
        'md': 768,
        'lg': 1024,
        'xl': 1280,
        '2xl': 1536,
    }


@dataclass
class DarkroomConfig:
    """
    Package-wide configuration.

    Attributes:
        quality: Encode quality used when a conversion does not set one (1-100)
        disk: Default disk name for stored images
        conversions_directory: Subdirectory (under the original's directory) for derivatives
        default_conversion: Conversion used as the fallback <img src>
        default_sizes: Fixed sizes attribute, or None to auto-generate
        auto_generate_sizes: Derive the sizes attribute from conversion widths
        breakpoints: Named breakpoints (px) used when auto-generating sizes
    """
    quality: int = 90
    disk: str = 'public'
    conversions_directory: str = 'conversions'
    default_conversion: str = 'medium'
    default_sizes: Optional[str] = None
    auto_generate_sizes: bool = True
    breakpoints: Dict[str, int] = field(default_factory=_default_breakpoints)

    @classmethod
    def from_env(cls) -> 'DarkroomConfig':
        """Create configuration from DARKROOM_* environment variables."""
        config = cls()

        quality = os.getenv('DARKROOM_QUALITY')
        if quality:
            config.quality = int(quality)

        config.disk = os.getenv('DARKROOM_DISK', config.disk)
        config.conversions_directory = os.getenv(
            'DARKROOM_CONVERSIONS_DIRECTORY', config.conversions_directory
        )
        config.default_conversion = os.getenv(
            'DARKROOM_DEFAULT_CONVERSION', config.default_conversion
        )
        config.default_sizes = os.getenv('DARKROOM_DEFAULT_SIZES') or None

        auto_sizes = os.getenv('DARKROOM_AUTO_GENERATE_SIZES')
        if auto_sizes is not None:
            config.auto_generate_sizes = auto_sizes.lower() in ('1', 'true', 'yes')

        return config

    def validate(self) -> List[str]:
        """Return a list of configuration errors (empty when valid)."""
        errors = []

        if not 1 <= self.quality <= 100:
            errors.append(f"DARKROOM_QUALITY must be between 1 and 100 (got {self.quality})")
        if not self.disk:
            errors.append("DARKROOM_DISK must not be empty")
        if not self.conversions_directory or self.conversions_directory.strip('/') == '':
            errors.append("DARKROOM_CONVERSIONS_DIRECTORY must not be empty")

        for name, width in self.breakpoints.items():
            if width <= 0:
                errors.append(f"Breakpoint '{name}' must be positive (got {width})")

        return errors
