"""Tests for presets and PresetRegistry."""

import pytest

from darkroom.conversion_spec import ConversionSpec
from darkroom.errors import ConfigurationError, PresetNotFound
from darkroom.presets import (
    DEFAULT_PRESETS,
    ConfigConversion,
    PresetRegistry,
    SocialImageConversion,
    default_registry,
)


class Looping(ConversionSpec):
    def includes(self):
        return [Looping]

    def define(self):
        return {'a': {'width': 10}}


class TestConfigConversion:
    """Tests for ConfigConversion."""

    def test_defines_mapping(self):
        """Test the mapping becomes the spec's conversions."""
        spec = ConfigConversion('cards', {'card': {'width': 600, 'height': 400}})

        assert spec.to_dict() == {'card': {'width': 600, 'height': 400, 'quality': 85, 'fit': 'contain'}}

    def test_quality_override(self):
        """Test quality sets the default for its conversions."""
        spec = ConfigConversion('cards', {'card': {'width': 600}}, quality=90)

        assert spec.to_dict()['card']['quality'] == 90

    def test_spec_id_from_name(self):
        """Test config specs are identified by name."""
        assert ConfigConversion('cards', {}).spec_id == 'config:cards'

    def test_includes(self):
        """Test included specs are merged first."""
        spec = ConfigConversion('cards', {'card': {'width': 600}}, includes=[SocialImageConversion])

        assert list(spec.to_dict()) == ['og', 'twitter', 'card']


class TestSocialImageConversion:
    """Tests for SocialImageConversion."""

    def test_conversions(self):
        """Test og and twitter sizes, cropped at quality 90."""
        result = SocialImageConversion().to_dict()

        assert result['og'] == {'width': 1200, 'height': 630, 'quality': 90, 'fit': 'crop'}
        assert result['twitter'] == {'width': 1200, 'height': 600, 'quality': 90, 'fit': 'crop'}

    def test_srcset_disabled(self):
        """Test social images opt out of srcset."""
        config = SocialImageConversion().responsive_config()

        assert config.default == 'og'
        assert not any(config.srcset.values())


class TestPresetRegistry:
    """Tests for PresetRegistry."""

    def test_register_and_resolve(self):
        """Test a registered preset resolves to a fresh instance."""
        registry = PresetRegistry().register('social', SocialImageConversion)

        first = registry.resolve('social')
        second = registry.resolve('social')

        assert isinstance(first, SocialImageConversion)
        assert first is not second

    def test_resolve_unknown(self):
        """Test an unknown id raises PresetNotFound."""
        with pytest.raises(PresetNotFound) as exc_info:
            PresetRegistry().resolve('Missing')

        assert exc_info.value.preset == 'Missing'
        assert exc_info.value.kind == 'preset_not_found'

    def test_get_returns_none(self):
        """Test get() returns None for unknown and empty ids."""
        registry = PresetRegistry()

        assert registry.get('Missing') is None
        assert registry.get(None) is None

    def test_register_rejects_cycle(self):
        """Test include cycles are rejected at registration."""
        registry = PresetRegistry()

        with pytest.raises(ConfigurationError, match='cycle'):
            registry.register('looping', Looping)

        assert not registry.has('looping')

    def test_register_rejects_empty_id(self):
        """Test the preset id must not be empty."""
        with pytest.raises(ConfigurationError):
            PresetRegistry().register('', SocialImageConversion)

    def test_register_rejects_non_spec(self):
        """Test the factory must build a ConversionSpec."""
        with pytest.raises(ConfigurationError):
            PresetRegistry().register('bad', dict)

    def test_ids_in_registration_order(self):
        """Test ids are listed in registration order."""
        registry = PresetRegistry()
        registry.register('b', SocialImageConversion).register('a', SocialImageConversion)

        assert registry.ids == ['b', 'a']


class TestDefaultRegistry:
    """Tests for default_registry()."""

    def test_builtin_presets(self):
        """Test hero, gallery, thumbnail and social are registered."""
        registry = default_registry()

        assert registry.ids == ['hero', 'gallery', 'thumbnail', 'social']

    def test_presets_match_configuration(self):
        """Test each configuration preset keeps its own conversions."""
        registry = default_registry()

        for name, conversions in DEFAULT_PRESETS.items():
            assert list(registry.resolve(name).to_dict()) == list(conversions)

    def test_quality_applies(self):
        """Test the quality argument reaches configuration presets."""
        registry = default_registry(quality=70)

        assert registry.resolve('hero').to_dict()['thumb']['quality'] == 70
