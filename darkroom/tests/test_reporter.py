"""Tests for RegenerationReporter class."""

import io
import json

import pytest

from darkroom.image_reference import ImageReference
from darkroom.regenerate_options import RegenerationOptions
from darkroom.regeneration_stats import RegenerationResult, RegenerationStats
from darkroom.reporter import RegenerationReporter


@pytest.fixture
def stats():
    """Stats with one success and one failure."""
    stats = RegenerationStats(total_to_process=2, start_time=0.0, end_time=90.0)
    ok = ImageReference.for_model('Article', 1, 'hero', {'original': 'a.jpg', 'preset': 'hero'})
    bad = ImageReference.for_block(3, 'image', {'original': 'b.jpg'})
    stats.record(RegenerationResult(ok, success=True, message='Regenerated 5 conversions'))
    stats.record(RegenerationResult(bad, success=False, message='No preset found', error_kind='missing_preset'))
    return stats


def report(options, method, *args):
    output = io.StringIO()
    reporter = RegenerationReporter(options, output=output)
    getattr(reporter, method)(*args)
    return output.getvalue()


class TestRegenerationReporter:
    """Tests for RegenerationReporter class."""

    def test_init_default_output(self):
        """Test default output is stdout."""
        import sys
        reporter = RegenerationReporter(RegenerationOptions())
        assert reporter.output == sys.stdout

    def test_format_duration(self):
        """Test duration formatting."""
        assert RegenerationReporter._format_duration(30) == '30.0 seconds'
        assert RegenerationReporter._format_duration(90) == '1.5 minutes'
        assert RegenerationReporter._format_duration(3600) == '1.0 hours'

    def test_report_summary(self):
        """Test summary header."""
        result = report(RegenerationOptions(model='Article'), 'report_summary', 2, {'models': 2, 'blocks': 0})

        assert 'IMAGE REGENERATION' in result
        assert 'model: Article' in result
        assert 'Images found:  2' in result
        assert 'blocks' not in result
        assert 'DRY RUN' not in result

    def test_report_summary_dry_run(self):
        """Test dry run notice."""
        result = report(RegenerationOptions(all=True, dry_run=True), 'report_summary', 0)

        assert 'DRY RUN MODE - No changes will be made' in result

    @pytest.mark.parametrize('flag', ['quiet', 'json'])
    def test_report_summary_silent(self, flag):
        """Test quiet and JSON runs print no header."""
        options = RegenerationOptions(all=True, **{flag: True})

        assert report(options, 'report_summary', 3) == ''

    def test_report_results(self, stats):
        """Test results block."""
        result = report(RegenerationOptions(all=True), 'report_results', stats)

        assert 'Successfully regenerated:  1' in result
        assert 'Failed:                    1' in result
        assert '1.5 minutes' in result
        assert 'Failures:' not in result

    def test_report_results_verbose(self, stats):
        """Test verbose runs list each failure."""
        result = report(RegenerationOptions(all=True, verbose=True), 'report_results', stats)

        assert '  - Block #3 (image): No preset found' in result

    def test_report_results_quiet(self, stats):
        """Test quiet runs print nothing."""
        assert report(RegenerationOptions(all=True, quiet=True), 'report_results', stats) == ''

    def test_report_json(self, stats):
        """Test the JSON document."""
        document = json.loads(report(RegenerationOptions(all=True, json=True), 'report_results', stats))

        assert document['success'] is False
        assert document['stats'] == {'total': 2, 'successful': 1, 'failed': 1, 'skipped': 0}
        assert [r['identifier'] for r in document['results']] == ['Article:1:hero', 'block:3:image']
        assert document['results'][1]['error'] == 'missing_preset'

    def test_exit_code(self, stats):
        """Test exit code is 1 when anything failed."""
        assert RegenerationReporter.exit_code(stats) == 1
        assert RegenerationReporter.exit_code(RegenerationStats()) == 0
