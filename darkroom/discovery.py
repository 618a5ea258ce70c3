"""
ImageDiscoveryService - Finds image manifests across record stores.

Each source scans one kind of record store. A source whose store is not
configured, or reports itself unavailable, yields nothing.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional

from .image_reference import ImageReference
from .manifest import decode_value, is_manifest_shaped
from .record_store import BlockStore, ModelStore, RecordStore, SeoStore
from .regenerate_options import RegenerationOptions


class ImageSource:
    """Base discovery source over one optional record store."""

    name = 'source'

    def __init__(self, store: Optional[RecordStore] = None, logger: Optional[logging.Logger] = None):
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    def is_available(self) -> bool:
        return self.store is not None and self.store.is_available()

    @property
    def disk(self) -> str:
        return getattr(self.store, 'disk', None) or 'public'

    def discover(self, options: RegenerationOptions) -> List[ImageReference]:
        """References matching the options, in store order."""
        if not self.is_available():
            self.logger.debug(f"Skipping {self.name}: store not available")
            return []
        return list(self._scan(options))

    def count(self, options: RegenerationOptions) -> int:
        return len(self.discover(options))

    def _scan(self, options: RegenerationOptions) -> Iterator[ImageReference]:
        raise NotImplementedError

    def _candidate(self, value: Any, options: RegenerationOptions) -> Optional[dict]:
        """Decoded manifest data if the value passes the shape, preset and disk filters."""
        data = decode_value(value)
        if data is None or not is_manifest_shaped(data):
            return None

        if options.has_conversion_filter:
            preset = data.get('preset')
            if not preset or options.conversion not in str(preset):
                return None

        if options.has_disk_filter and self.disk != options.disk:
            return None

        return data


class ModelSource(ImageSource):
    """Scans every field of typed records."""

    name = 'models'

    def _scan(self, options: RegenerationOptions) -> Iterator[ImageReference]:
        store: ModelStore = self.store

        for model_type in self._model_types(options):
            record_id = options.id if options.has_id_filter else None
            for record in store.records(model_type, record_id):
                for field, value in record.fields.items():
                    if options.has_field_filter and field != options.field:
                        continue
                    data = self._candidate(value, options)
                    if data is None:
                        continue
                    yield ImageReference.for_model(
                        record.model_type, record.record_id, field, data, self.disk
                    )

    def _model_types(self, options: RegenerationOptions) -> List[str]:
        model_types = self.store.model_types()
        if not options.has_model_filter:
            return model_types

        wanted = options.model
        for model_type in model_types:
            if model_type == wanted:
                return [model_type]
        # Short names match namespaced types, e.g. 'Article' -> 'app.models.Article'
        matches = [t for t in model_types if t.replace('\\', '.').rsplit('.', 1)[-1] == wanted]
        if not matches:
            self.logger.warning(f"Model type not found: {wanted}")
        return matches[:1]


class BlockSource(ImageSource):
    """Scans page-builder block attributes."""

    name = 'blocks'

    def _scan(self, options: RegenerationOptions) -> Iterator[ImageReference]:
        store: BlockStore = self.store
        attributes = store.attributes(
            block_type=options.block_type,
            field=options.field,
            block_id=options.id if options.has_id_filter else None,
        )

        for attribute in attributes:
            data = self._candidate(attribute.value, options)
            if data is None:
                continue
            yield ImageReference.for_block(attribute.block_id, attribute.field, data, self.disk)


class SeoSource(ImageSource):
    """Scans the image field of SEO entries."""

    name = 'seo'

    def _scan(self, options: RegenerationOptions) -> Iterator[ImageReference]:
        store: SeoStore = self.store
        field = store.IMAGE_FIELD

        if options.has_field_filter and options.field != field:
            return

        for entry in store.entries(options.id if options.has_id_filter else None):
            data = self._candidate(entry.fields.get(field), options)
            if data is None:
                continue
            yield ImageReference.for_seo(
                entry.seo_id, entry.seoable_type, entry.seoable_id, field, data, self.disk
            )


class ImageDiscoveryService:
    """
    Unions the references from every enabled source.

    Order is models, then blocks, then SEO entries. The same file reachable
    through two sources is reported twice.
    """

    def __init__(
        self,
        models: Optional[ModelStore] = None,
        blocks: Optional[BlockStore] = None,
        seo: Optional[SeoStore] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize discovery.

        Args:
            models: Model record store (None = not installed)
            blocks: Block attribute store (None = not installed)
            seo: SEO entry store (None = not installed)
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.model_source = ModelSource(models, self.logger)
        self.block_source = BlockSource(blocks, self.logger)
        self.seo_source = SeoSource(seo, self.logger)

    def _enabled_sources(self, options: RegenerationOptions) -> List[ImageSource]:
        sources = []
        if options.should_scan_models:
            sources.append(self.model_source)
        if options.should_scan_blocks:
            sources.append(self.block_source)
        if options.should_scan_seo:
            sources.append(self.seo_source)
        return sources

    def discover(self, options: RegenerationOptions) -> List[ImageReference]:
        """
        Discover all references matching the options.

        Returns:
            Complete list of references (a snapshot taken before any regeneration)
        """
        references: List[ImageReference] = []
        for source in self._enabled_sources(options):
            found = source.discover(options)
            self.logger.debug(f"Discovered {len(found)} images in {source.name}")
            references.extend(found)
        return references

    def count_by_type(self, options: RegenerationOptions) -> Dict[str, int]:
        """Counts per source plus 'total'."""
        counts = {'models': 0, 'blocks': 0, 'seo': 0}
        for source in self._enabled_sources(options):
            counts[source.name] = source.count(options)
        counts['total'] = sum(counts.values())
        return counts
