"""Tests for ImageConverter class."""

import io
from unittest.mock import MagicMock

import pytest
from PIL import Image

from darkroom.config import DarkroomConfig
from darkroom.errors import ConversionFailure, OriginalNotFound, StorageFailure
from darkroom.image_converter import ImageConverter
from darkroom.manifest import ImageManifest


CONVERSIONS = {
    'thumb': {'width': 100, 'height': 100, 'fit': 'crop', 'quality': 85},
    'medium': {'width': 200, 'height': 200, 'fit': 'contain', 'quality': 85},
}


def image_size(data):
    return Image.open(io.BytesIO(data)).size


class TestImageConverter:
    """Tests for ImageConverter class."""

    def test_convert_stores_original_and_conversions(self, converter, local_disk, sample_image_bytes):
        """Test convert() writes the original and one file per conversion."""
        manifest = converter.convert(sample_image_bytes, 'photo.jpg', CONVERSIONS, 'public', 'blocks/hero')

        assert manifest.original == 'blocks/hero/photo.jpg'
        assert manifest.conversions == {
            'thumb': 'blocks/hero/conversions/photo-thumb.jpg',
            'medium': 'blocks/hero/conversions/photo-medium.jpg',
        }
        assert local_disk.read('blocks/hero/photo.jpg') == sample_image_bytes
        assert image_size(local_disk.read('blocks/hero/conversions/photo-thumb.jpg')) == (100, 100)
        assert image_size(local_disk.read('blocks/hero/conversions/photo-medium.jpg')) == (200, 150)

    def test_convert_keys_match_conversions(self, converter, sample_image_bytes):
        """Test manifest conversion keys equal the requested names."""
        manifest = converter.convert(sample_image_bytes, 'photo.jpg', CONVERSIONS, 'public', 'x')

        assert list(manifest.conversions) == list(CONVERSIONS)

    def test_convert_no_conversions(self, converter, sample_image_bytes):
        """Test no conversions gives an empty conversions map."""
        manifest = converter.convert(sample_image_bytes, 'photo.jpg', {}, 'public', 'x')

        assert manifest.conversions == {}

    def test_convert_png_keeps_transparency(self, converter, local_disk, sample_png_bytes):
        """Test PNG derivatives stay PNG with alpha."""
        converter.convert(sample_png_bytes, 'logo.png', {'s': {'width': 50, 'height': 50, 'fit': 'fill', 'quality': 90}},
                          'public', 'logos')

        img = Image.open(io.BytesIO(local_disk.read('logos/conversions/logo-s.png')))
        assert img.format == 'PNG'
        assert img.mode == 'RGBA'

    def test_convert_undecodable(self, converter, local_disk):
        """Test garbage input raises ConversionFailure and stores nothing."""
        with pytest.raises(ConversionFailure):
            converter.convert(b'not an image', 'photo.jpg', CONVERSIONS, 'public', 'x')

        assert not local_disk.exists('x/photo.jpg')

    def test_convert_failure_removes_written_files(self, converter, local_disk, sample_image_bytes, mocker):
        """Test a failing conversion removes the original and earlier derivatives."""
        real_render = converter.render
        calls = []

        def render(image, config, extension):
            calls.append(config)
            if len(calls) == 2:
                raise ConversionFailure('boom')
            return real_render(image, config, extension)

        mocker.patch.object(converter, 'render', side_effect=render)

        with pytest.raises(ConversionFailure) as exc_info:
            converter.convert(sample_image_bytes, 'photo.jpg', CONVERSIONS, 'public', 'x')

        assert exc_info.value.conversion == 'medium'
        assert not local_disk.exists('x/photo.jpg')
        assert not local_disk.exists('x/conversions/photo-thumb.jpg')

    def test_regenerate(self, converter, local_disk, sample_image_bytes):
        """Test regenerate() writes derivatives next to the existing original."""
        local_disk.write('a.jpg', sample_image_bytes)

        manifest = converter.regenerate('a.jpg', {'thumb': CONVERSIONS['thumb']}, 'public')

        assert manifest.original == 'a.jpg'
        assert manifest.conversions == {'thumb': 'conversions/a-thumb.jpg'}
        assert local_disk.read('a.jpg') == sample_image_bytes

    def test_regenerate_target_paths(self, converter, local_disk, sample_image_bytes):
        """Test target paths override where derivatives are written."""
        local_disk.write('a.jpg', sample_image_bytes)

        manifest = converter.regenerate('a.jpg', {'thumb': CONVERSIONS['thumb']}, 'public',
                                        target_paths={'thumb': 'conversions/a-thumb-r1.jpg'})

        assert manifest.conversions == {'thumb': 'conversions/a-thumb-r1.jpg'}
        assert local_disk.exists('conversions/a-thumb-r1.jpg')

    def test_regenerate_missing_original(self, converter):
        """Test a missing original raises OriginalNotFound."""
        with pytest.raises(OriginalNotFound):
            converter.regenerate('missing.jpg', CONVERSIONS, 'public')

    def test_write_failure_is_storage_failure(self, disks, sample_image_bytes):
        """Test a failing disk write surfaces as StorageFailure."""
        storage = MagicMock()
        storage.exists.return_value = True
        storage.read.return_value = sample_image_bytes
        storage.write.side_effect = StorageFailure('disk full')
        disks.register('broken', storage)

        with pytest.raises(StorageFailure):
            ImageConverter(disks).regenerate('a.jpg', CONVERSIONS, 'broken')

    def test_delete_is_idempotent(self, converter, local_disk, sample_image_bytes):
        """Test deleting a manifest twice succeeds both times."""
        manifest = converter.convert(sample_image_bytes, 'photo.jpg', CONVERSIONS, 'public', 'x')

        converter.delete(manifest, 'public')
        converter.delete(manifest.to_dict(), 'public')

        for path in manifest.all_paths:
            assert not local_disk.exists(path)

    def test_derivative_path(self, converter):
        """Test derivative path naming."""
        assert converter.derivative_path('blocks/hero/photo.jpg', 'thumb') == 'blocks/hero/conversions/photo-thumb.jpg'
        assert converter.derivative_path('a.jpg', 'thumb') == 'conversions/a-thumb.jpg'
        assert converter.derivative_path('a.jpg', 'thumb', revision='r1') == 'conversions/a-thumb-r1.jpg'

    def test_conversions_directory_config(self, disks):
        """Test the conversions directory is configurable."""
        converter = ImageConverter(disks, DarkroomConfig(conversions_directory='derived'))

        assert converter.derivative_path('a.jpg', 'thumb') == 'derived/a-thumb.jpg'

    def test_render_jpeg_flattens_alpha(self, converter, sample_png_bytes):
        """Test JPEG output of a transparent image is RGB."""
        image = converter.open_image(sample_png_bytes)

        data = converter.render(image, {'width': 50, 'height': 50, 'fit': 'fill', 'quality': 80}, '.jpg')

        img = Image.open(io.BytesIO(data))
        assert img.format == 'JPEG'
        assert img.mode == 'RGB'

    def test_render_unknown_extension_uses_source_format(self, converter, sample_image_bytes):
        """Test an unknown extension falls back to the decoded format."""
        image = converter.open_image(sample_image_bytes)

        data = converter.render(image, {'width': 20, 'height': 20, 'fit': 'fill', 'quality': 80}, '.xyz')

        assert Image.open(io.BytesIO(data)).format == 'JPEG'

    def test_returns_manifest(self, converter, sample_image_bytes):
        """Test convert() returns an ImageManifest."""
        assert isinstance(converter.convert(sample_image_bytes, 'p.jpg', {}, 'public', 'x'), ImageManifest)
