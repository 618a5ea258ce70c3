"""
RegenerationStats - Per-image results and totals for a regeneration run.
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional

from .image_reference import ImageReference


@dataclass
class RegenerationResult:
    """
    Outcome for one image reference.

    Attributes:
        reference: The image reference
        success: Whether regeneration succeeded
        message: Human-readable outcome
        error_kind: Machine error kind when it failed (e.g. 'file_not_found')
        skipped: True when nothing was attempted (dry run)
    """
    reference: ImageReference
    success: bool
    message: str
    error_kind: Optional[str] = None
    skipped: bool = False

    @property
    def failed(self) -> bool:
        return not self.success and not self.skipped

    def to_dict(self) -> dict:
        return {
            'identifier': self.reference.identifier,
            'description': self.reference.description,
            'success': self.success,
            'skipped': self.skipped,
            'message': self.message,
            'error': self.error_kind,
        }


@dataclass
class RegenerationStats:
    """
    Totals for a regeneration run.

    Counts only depend on the set of results, not the order they arrived in.

    Attributes:
        total_to_process: Images discovered
        processed: Images handled (succeeded + failed + skipped)
        succeeded: Images regenerated
        failed: Images that failed
        skipped: Images not attempted
        start_time: Start timestamp
        end_time: End timestamp (None while running)
        results: Per-image results
    """
    total_to_process: int = 0
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None
    results: List[RegenerationResult] = field(default_factory=list)

    def record(self, result: RegenerationResult) -> None:
        """Add one result to the totals."""
        self.results.append(result)
        self.processed += 1
        if result.skipped:
            self.skipped += 1
        elif result.success:
            self.succeeded += 1
        else:
            self.failed += 1

    def finish(self) -> None:
        self.end_time = time.time()

    @property
    def success(self) -> bool:
        """True when no image failed."""
        return self.failed == 0

    @property
    def failures(self) -> List[RegenerationResult]:
        return [r for r in self.results if r.failed]

    @property
    def elapsed_seconds(self) -> float:
        end = self.end_time if self.end_time is not None else time.time()
        return end - self.start_time

    @property
    def rate_per_second(self) -> float:
        """Processing rate in images per second."""
        if self.elapsed_seconds > 0:
            return self.processed / self.elapsed_seconds
        return 0.0

    @property
    def rate_per_minute(self) -> float:
        return self.rate_per_second * 60

    @property
    def remaining_count(self) -> int:
        return self.total_to_process - self.processed

    @property
    def estimated_remaining_seconds(self) -> float:
        if self.rate_per_second > 0:
            return self.remaining_count / self.rate_per_second
        return 0.0

    def counts(self) -> dict:
        return {
            'processed': self.processed,
            'succeeded': self.succeeded,
            'failed': self.failed,
            'skipped': self.skipped,
        }

    def to_dict(self) -> dict:
        data = self.counts()
        data['total'] = self.total_to_process
        data['elapsed_seconds'] = round(self.elapsed_seconds, 3)
        return data
