"""
Pytest fixtures for darkroom tests.
"""

import io

import pytest
from PIL import Image


def make_image_bytes(size=(400, 300), color='red', fmt='JPEG', mode='RGB'):
    """Encode a solid-color test image."""
    img = Image.new(mode, size, color=color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def s3_config():
    """Fixture providing S3 configuration."""
    from darkroom.s3_config import S3Config

    return S3Config(
        endpoint='https://test-endpoint.example.com:9000',
        bucket='test-bucket',
        prefix='media',
        access_key='test-access-key',
        secret_key='test-secret-key',
        region='us-east-1',
    )


@pytest.fixture
def mock_boto3_client(mocker):
    """Fixture providing a mocked boto3 client."""
    mock_client = mocker.MagicMock()
    mocker.patch('darkroom.s3_client.boto3.client', return_value=mock_client)
    return mock_client


@pytest.fixture
def image_factory():
    """Fixture providing make_image_bytes."""
    return make_image_bytes


@pytest.fixture
def sample_image_bytes():
    """Fixture providing sample JPEG image bytes (400x300)."""
    return make_image_bytes()


@pytest.fixture
def sample_png_bytes():
    """Fixture providing sample PNG image bytes with transparency."""
    return make_image_bytes((100, 100), color=(255, 0, 0, 128), fmt='PNG', mode='RGBA')


@pytest.fixture
def local_disk(tmp_path):
    """Fixture providing a LocalDisk rooted in a temp directory."""
    from darkroom.local_client import LocalConfig, LocalDisk

    root = tmp_path / 'storage'
    root.mkdir()
    return LocalDisk(LocalConfig(root_path=str(root), base_url='/storage'))


@pytest.fixture
def disks(local_disk):
    """Fixture providing a DiskManager with the local disk as 'public'."""
    from darkroom.disk import DiskManager

    return DiskManager().register('public', local_disk)


@pytest.fixture
def converter(disks):
    """Fixture providing an ImageConverter on the local disk."""
    from darkroom.image_converter import ImageConverter

    return ImageConverter(disks)


@pytest.fixture
def hero_registry():
    """Registry with 'HeroPreset' = one 200x200 crop at quality 85."""
    from darkroom.presets import ConfigConversion, PresetRegistry

    registry = PresetRegistry()
    registry.register(
        'HeroPreset',
        lambda: ConfigConversion(
            'HeroPreset',
            {'thumb': {'width': 200, 'height': 200, 'fit': 'crop', 'quality': 85}},
        ),
    )
    return registry


@pytest.fixture
def record_document():
    """Fixture providing a records document with models, blocks and SEO rows."""
    import json

    return {
        'disk': 'public',
        'image_models': ['Article'],
        'models': {
            'Article': {
                '1': {'title': 'First', 'hero': {'original': 'articles/a.jpg', 'preset': 'HeroPreset'}},
                '2': {'title': 'Second', 'hero': json.dumps({'original': 'articles/b.jpg', 'preset': 'gallery'})},
            },
            'Page': {
                '5': {'cover': {'original': 'pages/c.jpg', 'preset': 'HeroPreset'}},
            },
        },
        'blocks': [
            {
                'block_id': 3,
                'block_type': 'hero',
                'attributes': {
                    'image': json.dumps({'original': 'blocks/hero/d.jpg', 'preset': 'HeroPreset'}),
                    'title': 'Welcome',
                },
            },
        ],
        'seo': [
            {'id': 7, 'seoable_type': 'app.models.Article', 'seoable_id': 1,
             'og_image': json.dumps({'original': 'seo/e.jpg', 'preset': 'social'})},
            {'id': 8, 'seoable_type': 'app.models.Article', 'seoable_id': 2, 'og_image': None},
        ],
    }


@pytest.fixture
def records(record_document):
    """Fixture providing an in-memory JsonRecordStore."""
    from darkroom.json_store import JsonRecordStore

    return JsonRecordStore(record_document)
