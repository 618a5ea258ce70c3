"""
JsonRecordStore - Record stores backed by a single JSON document.

Document layout:

    {
      "disk": "public",
      "image_models": ["Article"],
      "models": {"Article": {"1": {"title": "Hello", "hero": {...manifest...}}}},
      "blocks": [{"block_id": 3, "block_type": "hero", "attributes": {"image": "{...}"}}],
      "seo": [{"id": 7, "seoable_type": "Article", "seoable_id": 1, "og_image": {...}}]
    }

A missing "blocks" or "seo" section means that store is not available.
Values may be stored as JSON strings or objects; writes keep the shape.
Writes are serialized by one lock per document; a write whose save fails is
rolled back in memory.
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from .errors import ManifestWriteFailure
from .record_store import (
    BlockAttribute,
    BlockStore,
    ModelRecord,
    ModelStore,
    RecordId,
    SeoEntry,
    SeoStore,
)


def _coerce_id(value: Any) -> RecordId:
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return value


def _same_id(a: Any, b: Any) -> bool:
    return str(a) == str(b)


def _encode_like(current: Any, value: dict) -> Any:
    """Encode a manifest the way the current value was stored."""
    if isinstance(current, str):
        return json.dumps(value)
    return value


class JsonRecordStore:
    """
    Owns the JSON document and exposes one store per record kind.
    """

    def __init__(
        self,
        document: Optional[dict] = None,
        path: Optional[Union[str, Path]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize store.

        Args:
            document: Parsed document (empty if None)
            path: File to save to after each write (in-memory only if None)
            logger: Optional logger instance
        """
        self.document = document if document is not None else {}
        self.path = Path(path) if path else None
        self.logger = logger or logging.getLogger(__name__)
        self.lock = threading.RLock()

        disk = self.document.get('disk', 'public')
        self.models = JsonModelStore(self, disk)
        self.blocks = JsonBlockStore(self, disk)
        self.seo = JsonSeoStore(self, disk)

    @classmethod
    def load(cls, filepath: Union[str, Path], logger: Optional[logging.Logger] = None) -> 'JsonRecordStore':
        """Load a record document from a JSON file."""
        with open(filepath, 'r') as f:
            document = json.load(f)
        return cls(document, path=filepath, logger=logger)

    def save(self) -> None:
        """Write the document back to its file (no-op when in-memory)."""
        if self.path is None:
            return

        with self.lock:
            tmp_name = None
            try:
                with tempfile.NamedTemporaryFile(
                    'w', delete=False, dir=self.path.parent, prefix=f".{self.path.name}.", suffix='.tmp'
                ) as tmp:
                    tmp_name = tmp.name
                    json.dump(self.document, tmp, indent=2)
                os.replace(tmp_name, self.path)
            except (OSError, TypeError, ValueError) as e:
                if tmp_name and os.path.exists(tmp_name):
                    os.remove(tmp_name)
                raise ManifestWriteFailure(f"Failed to save records to {self.path}: {e}") from e

        self.logger.debug(f"Saved records: {self.path}")

    def commit(self, container: dict, key: str, value: Any) -> None:
        """
        Set container[key] and save the document.

        Raises:
            ManifestWriteFailure: If saving fails; container[key] is restored first
        """
        with self.lock:
            missing = key not in container
            previous = container.get(key)
            container[key] = value
            try:
                self.save()
            except Exception:
                if missing:
                    del container[key]
                else:
                    container[key] = previous
                raise


class JsonModelStore(ModelStore):

    def __init__(self, owner: JsonRecordStore, disk: str):
        self.owner = owner
        self.disk = disk

    @property
    def _models(self) -> dict:
        return self.owner.document.setdefault('models', {})

    def is_available(self) -> bool:
        return 'models' in self.owner.document

    def model_types(self) -> List[str]:
        declared = self.owner.document.get('image_models')
        if declared is None:
            return list(self._models)
        return [t for t in declared if t in self._models]

    def records(self, model_type: str, record_id: Optional[RecordId] = None) -> Iterable[ModelRecord]:
        for key, fields in self._models.get(model_type, {}).items():
            if record_id is not None and not _same_id(key, record_id):
                continue
            yield ModelRecord(model_type=model_type, record_id=_coerce_id(key), fields=dict(fields))

    def _record(self, identity) -> dict:
        model_type, record_id = identity
        records = self._models.get(model_type, {})
        for key, fields in records.items():
            if _same_id(key, record_id):
                return fields
        raise ManifestWriteFailure(f"Record not found: {model_type} #{record_id}")

    def read(self, identity, field: str) -> Any:
        return self._record(identity).get(field)

    def write(self, identity, field: str, value: dict) -> None:
        with self.owner.lock:
            record = self._record(identity)
            self.owner.commit(record, field, _encode_like(record.get(field), value))


class JsonBlockStore(BlockStore):

    def __init__(self, owner: JsonRecordStore, disk: str):
        self.owner = owner
        self.disk = disk

    def is_available(self) -> bool:
        return isinstance(self.owner.document.get('blocks'), list)

    def attributes(
        self,
        block_type: Optional[str] = None,
        field: Optional[str] = None,
        block_id: Optional[RecordId] = None
    ) -> Iterable[BlockAttribute]:
        for block in self.owner.document.get('blocks', []):
            if block_type is not None and block.get('block_type') != block_type:
                continue
            if block_id is not None and not _same_id(block.get('block_id'), block_id):
                continue
            for key, value in block.get('attributes', {}).items():
                if field is not None and key != field:
                    continue
                yield BlockAttribute(
                    block_id=_coerce_id(block.get('block_id')),
                    block_type=block.get('block_type', ''),
                    field=key,
                    value=value,
                )

    def _block(self, block_id) -> dict:
        for block in self.owner.document.get('blocks', []):
            if _same_id(block.get('block_id'), block_id):
                return block
        raise ManifestWriteFailure(f"Block not found: #{block_id}")

    def read(self, identity, field: str) -> Any:
        return self._block(identity).get('attributes', {}).get(field)

    def write(self, identity, field: str, value: dict) -> None:
        with self.owner.lock:
            attributes = self._block(identity).setdefault('attributes', {})
            self.owner.commit(attributes, field, _encode_like(attributes.get(field), value))


class JsonSeoStore(SeoStore):

    def __init__(self, owner: JsonRecordStore, disk: str):
        self.owner = owner
        self.disk = disk

    def is_available(self) -> bool:
        return isinstance(self.owner.document.get('seo'), list)

    def entries(self, seo_id: Optional[RecordId] = None) -> Iterable[SeoEntry]:
        for row in self.owner.document.get('seo', []):
            if row.get(self.IMAGE_FIELD) in (None, ''):
                continue
            if seo_id is not None and not _same_id(row.get('id'), seo_id):
                continue
            yield SeoEntry(
                seo_id=_coerce_id(row.get('id')),
                seoable_type=row.get('seoable_type', ''),
                seoable_id=_coerce_id(row.get('seoable_id')),
                fields={self.IMAGE_FIELD: row.get(self.IMAGE_FIELD)},
            )

    def _row(self, seo_id) -> dict:
        for row in self.owner.document.get('seo', []):
            if _same_id(row.get('id'), seo_id):
                return row
        raise ManifestWriteFailure(f"SEO entry not found: #{seo_id}")

    def read(self, identity, field: str) -> Any:
        return self._row(identity).get(field)

    def write(self, identity, field: str, value: dict) -> None:
        with self.owner.lock:
            row = self._row(identity)
            self.owner.commit(row, field, _encode_like(row.get(field), value))
