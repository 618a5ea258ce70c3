"""
RegenerationReporter - Human-readable and JSON reports for regeneration runs.
"""

import json
import sys
from typing import Dict, Optional, TextIO

from .regenerate_options import RegenerationOptions
from .regeneration_stats import RegenerationStats


class RegenerationReporter:
    """
    Prints the run header and the final results.

    Honors the reporting flags of the options: quiet prints nothing,
    json prints a single JSON document, verbose adds failure details.
    """

    def __init__(
        self,
        options: RegenerationOptions,
        output: Optional[TextIO] = None
    ):
        """
        Initialize reporter.

        Args:
            options: Options of the run being reported
            output: Output stream (default: stdout)
        """
        self.options = options
        self.output = output or sys.stdout

    def _print(self, text: str = "") -> None:
        """Print to output stream."""
        print(text, file=self.output)

    @property
    def _silent(self) -> bool:
        return self.options.quiet or self.options.json

    @staticmethod
    def _format_duration(seconds: float) -> str:
        if seconds < 60:
            return f"{seconds:.1f} seconds"
        elif seconds < 3600:
            return f"{seconds / 60:.1f} minutes"
        return f"{seconds / 3600:.1f} hours"

    def report_summary(self, total: int, counts: Optional[Dict[str, int]] = None) -> None:
        """Print what is about to be regenerated."""
        if self._silent:
            return

        self._print("=" * 70)
        self._print("IMAGE REGENERATION")
        self._print("=" * 70)
        self._print()
        self._print(f"  Target:        {self.options.describe()}")
        self._print(f"  Images found:  {total:,}")

        if counts:
            for name in ('models', 'blocks', 'seo'):
                if counts.get(name):
                    self._print(f"    {name:<12}{counts[name]:,}")

        if self.options.dry_run:
            self._print()
            self._print("DRY RUN MODE - No changes will be made")
        self._print()

    def report_results(self, stats: RegenerationStats) -> None:
        """Print the final results (or JSON when requested)."""
        if self.options.json:
            self.report_json(stats)
            return
        if self.options.quiet:
            return

        self._print()
        self._print("Results:")
        self._print("-" * 70)
        self._print(f"  Successfully regenerated:  {stats.succeeded:,}")
        if stats.failed:
            self._print(f"  Failed:                    {stats.failed:,}")
        if stats.skipped:
            self._print(f"  Skipped:                   {stats.skipped:,}")
        self._print(f"  Time:                      {self._format_duration(stats.elapsed_seconds)}")
        self._print("-" * 70)

        if self.options.verbose and stats.failed:
            self._print()
            self._print("Failures:")
            for result in stats.failures:
                self._print(f"  - {result.reference.description}: {result.message}")

    def report_json(self, stats: RegenerationStats) -> None:
        """Print the results as a JSON document."""
        document = {
            'success': stats.success,
            'stats': {
                'total': stats.processed,
                'successful': stats.succeeded,
                'failed': stats.failed,
                'skipped': stats.skipped,
            },
            'results': [result.to_dict() for result in stats.results],
        }
        self._print(json.dumps(document, indent=2))

    @staticmethod
    def exit_code(stats: RegenerationStats) -> int:
        """0 when nothing failed, 1 otherwise."""
        return 0 if stats.success else 1
