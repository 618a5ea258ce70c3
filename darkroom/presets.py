"""
Presets - Built-in conversion sets and the preset registry.
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from .conversion_spec import CROP, ConversionSpec, ResponsiveConfig, SpecSource
from .errors import ConfigurationError, PresetNotFound


DEFAULT_PRESETS: Dict[str, Dict[str, dict]] = {
    'hero': {
        'thumb': {'width': 200, 'height': 200, 'fit': 'crop'},
        'medium': {'width': 800, 'height': 600, 'fit': 'contain'},
        'large': {'width': 1920, 'height': 1080, 'fit': 'max'},
        'desktop': {'width': 1920, 'height': 1080, 'fit': 'max'},
        'mobile': {'width': 768, 'height': 1024, 'fit': 'max'},
    },
    'gallery': {
        'thumb': {'width': 200, 'height': 200, 'fit': 'crop'},
        'medium': {'width': 800, 'height': 600, 'fit': 'contain'},
        'large': {'width': 1600, 'height': 1200, 'fit': 'max'},
    },
    'thumbnail': {
        'small': {'width': 150, 'height': 150, 'fit': 'crop'},
        'medium': {'width': 300, 'height': 300, 'fit': 'crop'},
        'large': {'width': 600, 'height': 600, 'fit': 'crop'},
    },
}


class ConfigConversion(ConversionSpec):
    """Conversion set defined by a plain mapping (e.g. from configuration)."""

    def __init__(
        self,
        name: str,
        conversions: Dict[str, dict],
        includes: Optional[List[SpecSource]] = None,
        quality: Optional[int] = None,
    ):
        super().__init__()
        self.name = name
        self._conversions = conversions
        self._includes = list(includes or [])
        if quality is not None:
            self.with_quality(quality)

    @property
    def spec_id(self) -> str:
        return f"config:{self.name}"

    def define(self) -> Dict[str, dict]:
        return {name: dict(config) for name, config in self._conversions.items()}

    def includes(self) -> List[SpecSource]:
        return list(self._includes)


class SocialImageConversion(ConversionSpec):
    """Open Graph and Twitter card images, cropped to the platforms' sizes."""

    default_quality = 90
    default_fit = CROP
    default_conversion = 'og'

    def define(self) -> Dict[str, dict]:
        return {
            'og': {'width': 1200, 'height': 630},
            'twitter': {'width': 1200, 'height': 600},
        }

    def responsive_config(self) -> ResponsiveConfig:
        # Used as-is by social platforms
        return ResponsiveConfig(
            default='og',
            srcset={'og': False, 'twitter': False},
            picture={'og': None},
            sizes=None,
        )


PresetFactory = Callable[[], ConversionSpec]


class PresetRegistry:
    """
    Maps stable preset identifiers (stored in manifests) to conversion specs.

    Include cycles are rejected when a preset is registered.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._factories: Dict[str, PresetFactory] = {}

    def register(self, preset_id: str, factory: PresetFactory) -> 'PresetRegistry':
        """
        Register a preset.

        Args:
            preset_id: Identifier stored in manifests (e.g. 'hero')
            factory: Spec class or zero-argument callable returning a spec

        Raises:
            ConfigurationError: If the id is empty or the spec includes itself
        """
        if not preset_id:
            raise ConfigurationError("Preset id must not be empty")

        spec = factory()
        if not isinstance(spec, ConversionSpec):
            raise ConfigurationError(f"Preset '{preset_id}' factory did not return a ConversionSpec")

        self.check_cycles(spec)
        self._factories[preset_id] = factory
        self.logger.debug(f"Registered preset: {preset_id}")
        return self

    @staticmethod
    def check_cycles(spec: ConversionSpec, path: Tuple[str, ...] = ()) -> None:
        """Raise ConfigurationError if spec reaches itself through includes."""
        if spec.spec_id in path:
            chain = ' -> '.join(path + (spec.spec_id,))
            raise ConfigurationError(f"Conversion include cycle: {chain}")

        for included in spec.include_graph():
            PresetRegistry.check_cycles(included, path + (spec.spec_id,))

    def resolve(self, preset_id: str) -> ConversionSpec:
        """
        Get a fresh spec instance for a preset id.

        Raises:
            PresetNotFound: If the id is not registered
        """
        factory = self._factories.get(preset_id)
        if factory is None:
            raise PresetNotFound(preset_id)
        return factory()

    def get(self, preset_id: Optional[str]) -> Optional[ConversionSpec]:
        """Like resolve(), but returns None for unknown or empty ids."""
        if not preset_id or preset_id not in self._factories:
            return None
        return self._factories[preset_id]()

    def has(self, preset_id: str) -> bool:
        return preset_id in self._factories

    @property
    def ids(self) -> List[str]:
        return list(self._factories)


def default_registry(quality: Optional[int] = None, logger: Optional[logging.Logger] = None) -> PresetRegistry:
    """
    Registry with the built-in presets: hero, gallery, thumbnail and social.

    Args:
        quality: Default quality for the configuration presets
        logger: Optional logger instance
    """
    registry = PresetRegistry(logger)

    for name, conversions in DEFAULT_PRESETS.items():
        registry.register(
            name,
            lambda name=name, conversions=conversions: ConfigConversion(name, conversions, quality=quality),
        )

    registry.register('social', SocialImageConversion)
    return registry
