"""Tests for ImageCleanupService class."""

import json

import pytest

from darkroom.cleanup import ImageCleanupService
from darkroom.conversion_manager import ConversionManager
from darkroom.errors import StorageFailure
from darkroom.record_store import BlockAttribute


@pytest.fixture
def manager(converter):
    return ConversionManager(converter)


@pytest.fixture
def cleanup(manager):
    """Fixture providing ImageCleanupService."""
    return ImageCleanupService(manager)


@pytest.fixture
def stored_image(local_disk, sample_image_bytes):
    """An original and one conversion on the local disk."""
    local_disk.write('blocks/a.jpg', sample_image_bytes)
    local_disk.write('blocks/conversions/a-thumb.jpg', sample_image_bytes)
    return {'original': 'blocks/a.jpg', 'conversions': {'thumb': 'blocks/conversions/a-thumb.jpg'}}


class TestImageCleanupService:
    """Tests for ImageCleanupService class."""

    def test_cleanup_single_image(self, cleanup, local_disk, stored_image):
        """Test the original and its conversions are deleted."""
        assert cleanup.cleanup_single_image(stored_image) is True

        assert not local_disk.exists('blocks/a.jpg')
        assert not local_disk.exists('blocks/conversions/a-thumb.jpg')

    def test_cleanup_missing_files(self, cleanup):
        """Test missing files count as cleaned up."""
        assert cleanup.cleanup_single_image({'original': 'gone.jpg', 'conversions': {}}) is True

    def test_cleanup_failure(self, cleanup, manager, stored_image, mocker):
        """Test failures are reported as False instead of raising."""
        mocker.patch.object(manager, 'delete', side_effect=StorageFailure('permission denied'))

        assert cleanup.cleanup_single_image(stored_image, context={'block_id': 3}) is False

    def test_cleanup_block_attributes(self, cleanup, local_disk, stored_image):
        """Test only converted manifests held as JSON strings are cleaned."""
        attributes = [
            BlockAttribute(block_id=3, block_type='hero', field='image', value=json.dumps(stored_image)),
            BlockAttribute(block_id=3, block_type='hero', field='title', value='Welcome'),
            BlockAttribute(block_id=3, block_type='hero', field='raw', value=stored_image),
        ]

        assert cleanup.cleanup_block_attributes(attributes) == 1
        assert not local_disk.exists('blocks/a.jpg')

    @pytest.mark.parametrize('value, expected', [
        ('{"original": "a.jpg", "conversions": {}}', True),
        ('{"original": "a.jpg"}', False),
        ('{"original": "a.jpg", "conversions": []}', False),
        ('{"conversions": {}}', False),
        ('not json', False),
        ({'original': 'a.jpg', 'conversions': {}}, False),
        (None, False),
    ])
    def test_should_cleanup(self, value, expected):
        """Test which values hold a cleanable image."""
        assert ImageCleanupService.should_cleanup(value) is expected
