"""
ResponsiveImageService - srcset, sizes and <picture> markup for stored images.
"""

import html
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import DarkroomConfig
from .conversion_manager import ConversionManager
from .conversion_spec import CONTAIN, ConversionSpec, ResponsiveConfig
from .errors import DarkroomError
from .manifest import ImageManifest, decode_value
from .presets import PresetRegistry


@dataclass
class Srcset:
    """
    Responsive <img> attributes.

    Attributes:
        srcset: 'url 200w, url 800w' (empty when no width is known)
        sizes: sizes attribute, or None
        src: Fallback URL (default conversion, else the original)
    """
    srcset: str
    sizes: Optional[str]
    src: Optional[str]

    def to_dict(self) -> dict:
        return {'srcset': self.srcset, 'sizes': self.sizes, 'src': self.src}


@dataclass
class PictureSource:
    srcset: str
    media: str

    def to_html(self) -> str:
        return f'<source srcset="{html.escape(self.srcset)}" media="{html.escape(self.media)}">'


@dataclass
class Picture:
    """A <picture> element: media-query sources plus a fallback <img>."""
    sources: List[PictureSource] = field(default_factory=list)
    src: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict)

    def to_html(self) -> str:
        img_attributes = {'src': self.src}
        img_attributes.update(self.attributes)
        sources = ''.join(source.to_html() for source in self.sources)
        return f"<picture>{sources}<img {build_attributes(img_attributes)}></picture>"

    def __str__(self) -> str:
        return self.to_html()


def build_attributes(attributes: Dict[str, Any]) -> str:
    """
    Render HTML attributes. None and False are omitted, True renders the bare name.
    """
    parts = []
    for key, value in attributes.items():
        if value is None or value is False:
            continue
        if value is True:
            parts.append(html.escape(str(key)))
        else:
            parts.append(f'{html.escape(str(key))}="{html.escape(str(value))}"')
    return ' '.join(parts)


class ResponsiveImageService:
    """
    Builds responsive image markup from a manifest.

    Widths come from the manifest's preset. Without a resolvable preset every
    conversion is a srcset candidate with an unknown width, so srcset is
    empty and markup degrades to a single fallback image.
    """

    def __init__(
        self,
        manager: ConversionManager,
        registry: PresetRegistry,
        config: Optional[DarkroomConfig] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.manager = manager
        self.registry = registry
        self.config = config or DarkroomConfig()
        self.logger = logger or logging.getLogger(__name__)

    def generate_srcset(self, manifest: Any, sizes: Optional[str] = None, disk: str = 'public') -> Srcset:
        """
        Build srcset, sizes and src for an image.

        Args:
            manifest: Manifest dict, JSON string or ImageManifest
            sizes: Explicit sizes attribute (None = from preset or auto-generated)
            disk: Disk the image is stored on

        Returns:
            Srcset attributes
        """
        data = self._manifest_data(manifest)
        conversions = data.get('conversions') or {}
        preset = self._load_preset(data)
        responsive = self._responsive_config(preset, conversions)
        metadata = self._metadata(preset, conversions)

        parts = []
        for name, enabled in responsive.srcset.items():
            if not enabled or name not in conversions:
                continue
            url = self.manager.get_url(data, name, disk)
            width = (metadata.get(name) or {}).get('width')
            if url and width:
                parts.append(f"{url} {width}w")

        if sizes is None:
            sizes = responsive.sizes
        if sizes is None:
            if self.config.auto_generate_sizes:
                sizes = self.generate_sizes(metadata)
            else:
                sizes = self.config.default_sizes

        return Srcset(
            srcset=', '.join(parts),
            sizes=sizes,
            src=self._default_src(data, responsive, disk),
        )

    def generate_picture(
        self,
        manifest: Any,
        attributes: Optional[Dict[str, Any]] = None,
        disk: str = 'public'
    ) -> Picture:
        """
        Build a <picture> element.

        One <source> per conversion the preset maps to a media query and the
        manifest contains; the <img> uses the default conversion or the original.
        """
        data = self._manifest_data(manifest)
        conversions = data.get('conversions') or {}
        responsive = self._responsive_config(self._load_preset(data), conversions)

        sources = []
        for name, media in responsive.picture.items():
            if media is None or name not in conversions:
                continue
            url = self.manager.get_url(data, name, disk)
            if url:
                sources.append(PictureSource(srcset=url, media=media))

        return Picture(
            sources=sources,
            src=self._default_src(data, responsive, disk),
            attributes=dict(attributes or {}),
        )

    def generate_sizes(self, metadata: Dict[str, dict]) -> str:
        """
        Derive a sizes attribute from conversion widths.

        Each width (largest first) is paired with the largest breakpoint it
        reaches; the smallest width is the fallback. '100vw' when no width
        is known.
        """
        widths = sorted(
            (meta['width'] for meta in metadata.values() if meta and meta.get('width')),
            reverse=True,
        )
        if not widths:
            return '100vw'

        # Largest breakpoint the width reaches, whatever the table order
        breakpoints = sorted(self.config.breakpoints.values(), reverse=True)
        parts = []
        for width in widths:
            for breakpoint in breakpoints:
                if width >= breakpoint:
                    parts.append(f"(min-width: {breakpoint}px) {width}px")
                    break

        parts.append(f"{widths[-1]}px")
        return ', '.join(parts)

    def _default_src(self, data: dict, responsive: ResponsiveConfig, disk: str) -> Optional[str]:
        default = responsive.default or self.config.default_conversion
        return self.manager.get_url(data, default, disk) or self.manager.get_url(data, 'original', disk)

    def _load_preset(self, data: dict) -> Optional[ConversionSpec]:
        preset_id = data.get('preset')
        if not preset_id:
            return None
        try:
            return self.registry.get(preset_id)
        except DarkroomError as e:
            self.logger.warning(f"Failed to load preset '{preset_id}' for responsive images: {e}")
            return None

    def _responsive_config(self, preset: Optional[ConversionSpec], conversions: Dict[str, str]) -> ResponsiveConfig:
        if preset is not None:
            return preset.responsive_config()
        return ResponsiveConfig(
            default=self.config.default_conversion,
            srcset={name: True for name in conversions},
            picture={name: None for name in conversions},
            sizes=self.config.default_sizes,
        )

    @staticmethod
    def _metadata(preset: Optional[ConversionSpec], conversions: Dict[str, str]) -> Dict[str, dict]:
        if preset is not None:
            return preset.conversion_metadata()
        return {name: {'width': None, 'height': None, 'fit': CONTAIN} for name in conversions}

    @staticmethod
    def _manifest_data(manifest: Any) -> dict:
        if isinstance(manifest, ImageManifest):
            return manifest.to_dict()
        return decode_value(manifest) or {}
