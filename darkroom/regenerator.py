"""
Regenerator - Rebuilds conversions for discovered image manifests.
"""

import logging
import posixpath
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Dict, List, Optional

from .discovery import ImageDiscoveryService
from .disk import Disk
from .errors import (
    DarkroomError,
    FileNotFound,
    InvalidOptions,
    ManifestWriteFailure,
    MissingOriginal,
    MissingPreset,
    ValidationError,
)
from .image_converter import ImageConverter
from .image_reference import BLOCK, MODEL, SEO, ImageReference
from .presets import PresetRegistry
from .record_store import RecordStore
from .regenerate_options import RegenerationOptions
from .regeneration_progress import RegenerationProgress
from .regeneration_stats import RegenerationResult, RegenerationStats


class Regenerator:
    """
    Regenerates image conversions from each manifest's preset.

    New derivatives are always written before anything is removed. Only
    when every derivative has been written is the manifest updated and
    are the old derivatives deleted; otherwise the stored manifest and
    the existing files are left as they were.
    """

    def __init__(
        self,
        discovery: ImageDiscoveryService,
        converter: ImageConverter,
        registry: PresetRegistry,
        stores: Optional[Dict[str, RecordStore]] = None,
        workers: int = 1,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize regenerator.

        Args:
            discovery: Discovery service listing the images to regenerate
            converter: Image converter (provides the disks)
            registry: Preset registry used to resolve manifest presets
            stores: Variant -> record store used to save manifests
                (defaults to the discovery service's stores)
            workers: Number of images processed concurrently
            logger: Optional logger instance
        """
        self.discovery = discovery
        self.converter = converter
        self.registry = registry
        self.workers = max(1, workers)
        self.logger = logger or logging.getLogger(__name__)

        if stores is None:
            stores = {
                MODEL: discovery.model_source.store,
                BLOCK: discovery.block_source.store,
                SEO: discovery.seo_source.store,
            }
        self.stores = {variant: store for variant, store in stores.items() if store is not None}

        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def validate(self, options: RegenerationOptions) -> List[ValidationError]:
        return options.validate()

    def run(
        self,
        options: RegenerationOptions,
        progress: Optional[RegenerationProgress] = None
    ) -> RegenerationStats:
        """
        Discover and regenerate every matching image.

        Args:
            options: Scope, filters and flags
            progress: Optional progress tracker

        Returns:
            RegenerationStats with one result per discovered image

        Raises:
            InvalidOptions: If the options are invalid (nothing is read or written)
        """
        errors = self.validate(options)
        if errors:
            raise InvalidOptions(errors)

        if not options.keep_on_fail:
            self.logger.warning("keep_on_fail=False is ignored: existing conversions are kept until replacements exist")

        self.logger.info(f"Discovering images: {options.describe()}")
        references = self.discovery.discover(options)

        stats = RegenerationStats(total_to_process=len(references))
        if progress:
            progress.on_start(len(references), options.dry_run)

        mode_str = " [DRY RUN]" if options.dry_run else ""
        self.logger.info(f"Starting regeneration: {len(references)} images{mode_str}")

        if options.dry_run or self.workers == 1:
            for reference in references:
                self._record(stats, self.process(reference, options), progress)
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                futures = [executor.submit(self.process, reference, options) for reference in references]
                for future in as_completed(futures):
                    self._record(stats, future.result(), progress)

        stats.finish()
        self.logger.info(
            f"Regeneration complete: {stats.succeeded} regenerated, "
            f"{stats.skipped} skipped, {stats.failed} failed "
            f"({stats.elapsed_seconds:.1f}s)"
        )
        return stats

    def process(self, reference: ImageReference, options: RegenerationOptions) -> RegenerationResult:
        """
        Regenerate one image. Never raises; failures are returned as results.

        Args:
            reference: Image to regenerate
            options: Regeneration flags (dry_run, backup)

        Returns:
            RegenerationResult for the reference
        """
        if options.dry_run:
            self.logger.info(f"[DRY RUN] Would regenerate: {reference.description}")
            return RegenerationResult(reference, success=False, message='Dry run', skipped=True)

        with self._lock_for(reference.identifier):
            try:
                message = self._regenerate(reference, options)
            except DarkroomError as e:
                self.logger.error(f"Failed: {reference.description}: {e}")
                return RegenerationResult(reference, success=False, message=str(e), error_kind=e.kind)
            except Exception as e:
                self.logger.exception(f"Unexpected error regenerating {reference.description}")
                return RegenerationResult(reference, success=False, message=str(e), error_kind='exception')

        self.logger.info(f"Regenerated: {reference.description}")
        return RegenerationResult(reference, success=True, message=message)

    def _regenerate(self, reference: ImageReference, options: RegenerationOptions) -> str:
        manifest = reference.manifest

        if not manifest.has_original:
            raise MissingOriginal('No original image found')
        if not manifest.has_preset:
            raise MissingPreset('No preset found')
        spec = self.registry.resolve(manifest.preset)

        storage = self.converter.disks.get(reference.disk)
        original_path = manifest.original
        if not storage.exists(original_path):
            raise FileNotFound(f"Original file not found: {original_path}")

        conversions = spec.to_dict()
        old_conversions = dict(manifest.conversions or {})

        if options.backup:
            self.backup_conversions(storage, old_conversions)

        targets = self._candidate_paths(storage, original_path, list(conversions), old_conversions)
        self.logger.debug(f"Generating {len(targets)} conversions for {reference.identifier}")
        result = self.converter.regenerate(original_path, conversions, reference.disk, target_paths=targets)

        new_manifest = manifest.with_conversions(result.original, result.conversions)
        try:
            self._save(reference, new_manifest.to_dict())
        except Exception as e:
            self.converter.discard(storage, new_manifest.derivative_paths)
            if isinstance(e, ManifestWriteFailure):
                raise
            raise ManifestWriteFailure(f"Failed to save manifest for {reference.identifier}: {e}") from e

        reference.data = new_manifest.to_dict()

        kept = set(new_manifest.derivative_paths)
        stale = [path for path in old_conversions.values() if path not in kept]
        self._delete_stale(storage, stale)

        return f"Regenerated {len(result.conversions)} conversions"

    def _candidate_paths(
        self,
        storage: Disk,
        original_path: str,
        names: List[str],
        old_conversions: Dict[str, str]
    ) -> Dict[str, str]:
        """
        Where each new derivative is written.

        The standard path is used when no current derivative or other file
        occupies it; otherwise a revisioned path is used so the current
        file survives until the manifest points elsewhere.
        """
        occupied = set(old_conversions.values())
        revision = uuid.uuid4().hex[:8]
        targets = {}

        for name in names:
            path = self.converter.derivative_path(original_path, name)
            if path in occupied or storage.exists(path):
                path = self.converter.derivative_path(original_path, name, revision=revision)
            targets[name] = path

        return targets

    def _save(self, reference: ImageReference, data: dict) -> None:
        store = self.stores.get(reference.variant)
        if store is None:
            raise ManifestWriteFailure(f"No record store for {reference.variant} images")
        store.write(reference.record_identity, reference.field, data)
        self.logger.debug(f"Saved manifest: {reference.identifier}")

    def backup_conversions(self, storage: Disk, conversions: Dict[str, str]) -> List[str]:
        """
        Copy existing derivatives to timestamped backup paths.

        Failures are logged and skipped.

        Returns:
            Backup paths that were written
        """
        backups = []
        timestamp = datetime.now().strftime('%Y%m%d%H%M%S')

        for path in conversions.values():
            try:
                if not storage.exists(path):
                    continue
                backup_path = self.backup_path(path, timestamp)
                storage.copy(path, backup_path)
                backups.append(backup_path)
                self.logger.debug(f"Backed up {path} -> {backup_path}")
            except Exception as e:
                self.logger.warning(f"Could not back up {path}: {e}")

        return backups

    @staticmethod
    def backup_path(path: str, timestamp: str) -> str:
        """e.g. 'conversions/a-thumb.jpg' -> 'conversions/a-thumb_backup_20250101120000.jpg'"""
        directory, basename = posixpath.split(path)
        filename, extension = posixpath.splitext(basename)
        return posixpath.join(directory, f"{filename}_backup_{timestamp}{extension}")

    def _delete_stale(self, storage: Disk, paths: List[str]) -> None:
        for path in paths:
            try:
                if storage.delete(path):
                    self.logger.debug(f"Deleted old conversion: {path}")
            except Exception as e:
                self.logger.warning(f"Could not delete old conversion {path}: {e}")

    def _lock_for(self, identifier: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(identifier)
            if lock is None:
                lock = self._locks[identifier] = threading.Lock()
            return lock

    @staticmethod
    def _record(
        stats: RegenerationStats,
        result: RegenerationResult,
        progress: Optional[RegenerationProgress]
    ) -> None:
        stats.record(result)
        if progress:
            progress.on_result(result)
            progress.on_progress_update(stats)
