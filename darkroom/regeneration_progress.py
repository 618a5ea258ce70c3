"""
RegenerationProgress - Tracks and displays regeneration progress.
"""

import logging
from typing import Optional

from .regeneration_stats import RegenerationResult, RegenerationStats


class RegenerationProgress:
    """
    Per-image output and periodic progress logging.
    """

    def __init__(
        self,
        show_files: bool = False,
        log_interval: int = 50,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize progress tracker.

        Args:
            show_files: If True, print each image as it's processed
            log_interval: Log summary progress every N images (when not show_files)
            logger: Optional logger instance
        """
        self.show_files = show_files
        self.log_interval = log_interval
        self.logger = logger or logging.getLogger(__name__)
        self.last_logged = 0

    def on_start(self, total: int, dry_run: bool = False) -> None:
        mode = ' [DRY RUN]' if dry_run else ''
        self.logger.info(f"Regenerating {total} images{mode}")

    def on_result(self, result: RegenerationResult) -> None:
        """Called when an image reference has been handled."""
        if not self.show_files:
            return

        description = result.reference.description
        if result.skipped:
            print(f"  [DRY RUN] {description} -> would regenerate")
        elif result.success:
            print(f"  [OK] {description} -> {result.message}")
        else:
            print(f"  [ERROR] {description} -> {result.message}")

    def on_progress_update(self, stats: RegenerationStats) -> None:
        """Log overall progress every log_interval images."""
        done = stats.processed

        if not self.show_files and done - self.last_logged >= self.log_interval:
            self.last_logged = done
            eta_minutes = stats.estimated_remaining_seconds / 60

            self.logger.info(
                f"Progress: {stats.succeeded} regenerated, {stats.failed} failed "
                f"({stats.rate_per_minute:.1f}/min, "
                f"~{eta_minutes:.0f}m remaining, {stats.remaining_count} left)"
            )

    def __call__(self, stats: RegenerationStats) -> None:
        self.on_progress_update(stats)
