"""
ImageManifest - Record of an original image and its named derivatives.

Manifests are embedded as JSON inside record fields:

    {"original": "blocks/hero/photo.jpg",
     "conversions": {"thumb": "blocks/hero/conversions/photo-thumb.jpg"},
     "preset": "hero",
     "attribution": {"name": "Jane Doe", "link": "https://example.com"}}
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional


def decode_value(raw: Any) -> Optional[dict]:
    """
    Decode a stored field value into a dict.

    Accepts JSON strings and mappings. Returns None for anything else,
    including strings that are not JSON objects.
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            return None
    if isinstance(raw, Mapping):
        return dict(raw)
    return None


def is_manifest_shaped(value: Any) -> bool:
    """A value is a manifest iff it is a mapping with an 'original' or 'preset' key."""
    return isinstance(value, Mapping) and ('original' in value or 'preset' in value)


@dataclass
class ImageManifest:
    """
    Persisted image manifest.

    Attributes:
        original: Path of the original image on its disk
        conversions: Conversion name -> derivative path (None = not yet converted)
        preset: Stable id of the preset that produced the conversions
        attribution: Optional {'name', 'link'} credit for the image
        extra: Unknown keys, preserved on rewrite
    """
    original: Optional[str] = None
    conversions: Optional[Dict[str, str]] = None
    preset: Optional[str] = None
    attribution: Optional[Dict[str, str]] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    KNOWN_KEYS = ('original', 'conversions', 'preset', 'attribution')

    @classmethod
    def from_dict(cls, data: Mapping) -> 'ImageManifest':
        """Create from a decoded manifest mapping."""
        conversions = data.get('conversions')
        attribution = data.get('attribution')
        return cls(
            original=data.get('original'),
            conversions=dict(conversions) if isinstance(conversions, Mapping) else None,
            preset=data.get('preset'),
            attribution=dict(attribution) if isinstance(attribution, Mapping) else None,
            extra={k: v for k, v in data.items() if k not in cls.KNOWN_KEYS},
        )

    @classmethod
    def from_value(cls, raw: Any) -> Optional['ImageManifest']:
        """Create from a raw field value, or None if it is not a manifest."""
        data = decode_value(raw)
        if data is None or not is_manifest_shaped(data):
            return None
        return cls.from_dict(data)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = dict(self.extra)
        data['original'] = self.original
        if self.conversions is not None:
            data['conversions'] = dict(self.conversions)
        if self.preset is not None:
            data['preset'] = self.preset
        if self.attribution is not None:
            data['attribution'] = dict(self.attribution)
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @property
    def has_original(self) -> bool:
        return bool(self.original)

    @property
    def has_preset(self) -> bool:
        return bool(self.preset)

    @property
    def is_converted(self) -> bool:
        """False when the manifest has no 'conversions' key yet."""
        return self.conversions is not None

    def conversion_path(self, name: str) -> Optional[str]:
        """Path for a conversion name ('original' returns the original)."""
        if name == 'original':
            return self.original
        return (self.conversions or {}).get(name)

    @property
    def derivative_paths(self) -> List[str]:
        return list((self.conversions or {}).values())

    @property
    def all_paths(self) -> List[str]:
        """Original plus derivative paths."""
        paths = [self.original] if self.original else []
        return paths + self.derivative_paths

    def with_conversions(self, original: str, conversions: Dict[str, str]) -> 'ImageManifest':
        """Copy with a new original and conversions; preset, attribution and extra kept."""
        return replace(self, original=original, conversions=dict(conversions), extra=dict(self.extra))

    @property
    def attribution_name(self) -> Optional[str]:
        return (self.attribution or {}).get('name') or None

    @property
    def attribution_link(self) -> Optional[str]:
        return (self.attribution or {}).get('link') or None

    @property
    def has_attribution(self) -> bool:
        return self.attribution_name is not None
