"""
ImageReference - Locates one manifest-bearing field in a record store.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .manifest import ImageManifest
from .record_store import RecordId

MODEL = 'model'
BLOCK = 'block'
SEO = 'seo'


@dataclass
class ImageReference:
    """
    A discovered image manifest and where it lives.

    Attributes:
        variant: 'model', 'block' or 'seo'
        field: Field holding the manifest
        data: Decoded manifest data as found
        disk: Disk the images are stored on
        model_type: Model type (model variant)
        record_id: Model record id (model variant)
        block_id: Block id (block variant)
        seo_id: SEO row id (seo variant)
        seoable_type: Type of the record the SEO row belongs to (seo variant)
        seoable_id: Id of the record the SEO row belongs to (seo variant)
    """
    variant: str
    field: str
    data: Dict[str, Any]
    disk: str = 'public'
    model_type: Optional[str] = None
    record_id: Optional[RecordId] = None
    block_id: Optional[RecordId] = None
    seo_id: Optional[RecordId] = None
    seoable_type: Optional[str] = None
    seoable_id: Optional[RecordId] = None

    @classmethod
    def for_model(
        cls,
        model_type: str,
        record_id: RecordId,
        field: str,
        data: dict,
        disk: str = 'public'
    ) -> 'ImageReference':
        return cls(MODEL, field, data, disk, model_type=model_type, record_id=record_id)

    @classmethod
    def for_block(cls, block_id: RecordId, field: str, data: dict, disk: str = 'public') -> 'ImageReference':
        return cls(BLOCK, field, data, disk, block_id=block_id)

    @classmethod
    def for_seo(
        cls,
        seo_id: RecordId,
        seoable_type: str,
        seoable_id: RecordId,
        field: str,
        data: dict,
        disk: str = 'public'
    ) -> 'ImageReference':
        return cls(SEO, field, data, disk, seo_id=seo_id, seoable_type=seoable_type, seoable_id=seoable_id)

    @property
    def is_model(self) -> bool:
        return self.variant == MODEL

    @property
    def is_block(self) -> bool:
        return self.variant == BLOCK

    @property
    def is_seo(self) -> bool:
        return self.variant == SEO

    @property
    def manifest(self) -> ImageManifest:
        return ImageManifest.from_dict(self.data)

    @property
    def preset(self) -> Optional[str]:
        return self.data.get('preset')

    @property
    def original_path(self) -> Optional[str]:
        return self.data.get('original')

    @property
    def conversions(self) -> Dict[str, str]:
        return dict(self.data.get('conversions') or {})

    @property
    def record_identity(self) -> Any:
        """Identity passed to the owning record store."""
        if self.is_model:
            return (self.model_type, self.record_id)
        if self.is_seo:
            return self.seo_id
        return self.block_id

    @property
    def identifier(self) -> str:
        """Unique key for this field, e.g. 'Article:12:hero'."""
        if self.is_model:
            return f"{self.model_type}:{self.record_id}:{self.field}"
        if self.is_seo:
            return f"seo:{self.seo_id}:{self.field}"
        return f"block:{self.block_id}:{self.field}"

    @property
    def description(self) -> str:
        """Human-readable description, e.g. 'Article #12 (hero)'."""
        if self.is_model:
            return f"{self._basename(self.model_type)} #{self.record_id} ({self.field})"
        if self.is_seo:
            return f"SEO for {self._basename(self.seoable_type)} #{self.seoable_id} ({self.field})"
        return f"Block #{self.block_id} ({self.field})"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        data = {
            'variant': self.variant,
            'identifier': self.identifier,
            'field': self.field,
            'disk': self.disk,
        }
        if self.is_model:
            data.update(model_type=self.model_type, record_id=self.record_id)
        elif self.is_seo:
            data.update(seo_id=self.seo_id, seoable_type=self.seoable_type, seoable_id=self.seoable_id)
        else:
            data.update(block_id=self.block_id)
        return data

    @staticmethod
    def _basename(type_name: Optional[str]) -> str:
        if not type_name:
            return 'unknown'
        return type_name.replace('\\', '.').rsplit('.', 1)[-1]
