"""
Record stores - Contracts for the stores that embed image manifests.

Three kinds of record carry manifests in their fields:

- models: typed records (e.g. Article #12, field 'hero')
- blocks: page-builder block attributes (block #3, field 'image')
- seo: SEO rows attached to another record (seo #7, field 'og_image')

Each store may be absent from a deployment; is_available() reports that.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

RecordId = Union[int, str]


@dataclass
class ModelRecord:
    model_type: str
    record_id: RecordId
    fields: Dict[str, Any] = field(default_factory=dict)


@dataclass
class BlockAttribute:
    block_id: RecordId
    block_type: str
    field: str
    value: Any


@dataclass
class SeoEntry:
    seo_id: RecordId
    seoable_type: str
    seoable_id: RecordId
    fields: Dict[str, Any] = field(default_factory=dict)


class RecordStore(ABC):
    """
    Base record store.

    Attributes:
        disk: Disk name the store's images live on
    """

    disk: str = 'public'

    def is_available(self) -> bool:
        """False when the backing store does not exist in this deployment."""
        return True

    @abstractmethod
    def read(self, identity: Any, field: str) -> Any:
        """Read the raw value of a field."""

    @abstractmethod
    def write(self, identity: Any, field: str, value: dict) -> None:
        """Write a manifest dict back to a field."""


class ModelStore(RecordStore):
    """Typed records. Identity is (model_type, record_id)."""

    @abstractmethod
    def model_types(self) -> List[str]:
        """Record types that declare image fields."""

    @abstractmethod
    def records(self, model_type: str, record_id: Optional[RecordId] = None) -> Iterable[ModelRecord]:
        """Records of a type, optionally only one id."""


class BlockStore(RecordStore):
    """Block attributes. Identity is the block id."""

    @abstractmethod
    def attributes(
        self,
        block_type: Optional[str] = None,
        field: Optional[str] = None,
        block_id: Optional[RecordId] = None
    ) -> Iterable[BlockAttribute]:
        """Attributes matching the given filters."""


class SeoStore(RecordStore):
    """SEO rows. Identity is the SEO row id."""

    IMAGE_FIELD = 'og_image'

    @abstractmethod
    def entries(self, seo_id: Optional[RecordId] = None) -> Iterable[SeoEntry]:
        """SEO rows with a non-empty image field, optionally only one id."""
