"""Tests for LocalDisk, LocalConfig and DiskManager."""

import pytest

from darkroom.disk import DiskManager
from darkroom.errors import ConfigurationError, StorageFailure
from darkroom.local_client import LocalConfig, LocalDisk


class TestLocalConfig:
    """Tests for LocalConfig."""

    def test_validate_ok(self, tmp_path):
        """Test an existing directory is valid."""
        assert LocalConfig(root_path=str(tmp_path)).validate() == []

    def test_validate_missing_root(self):
        """Test an empty root is an error."""
        assert LocalConfig(root_path='').validate() == ["Local root path is required"]

    def test_validate_nonexistent_root(self, tmp_path):
        """Test a missing directory is an error."""
        errors = LocalConfig(root_path=str(tmp_path / 'nope')).validate()

        assert len(errors) == 1
        assert 'does not exist' in errors[0]


class TestLocalDisk:
    """Tests for LocalDisk."""

    def test_write_creates_directories(self, local_disk):
        """Test writing creates parent directories."""
        local_disk.write('a/b/c.jpg', b'data')

        assert local_disk.exists('a/b/c.jpg')
        assert local_disk.read('a/b/c.jpg') == b'data'

    def test_exists_false(self, local_disk):
        """Test a missing file does not exist."""
        assert not local_disk.exists('missing.jpg')

    def test_read_missing(self, local_disk):
        """Test reading a missing file is a StorageFailure."""
        with pytest.raises(StorageFailure):
            local_disk.read('missing.jpg')

    def test_delete(self, local_disk):
        """Test delete returns True once, then False."""
        local_disk.write('a.jpg', b'data')

        assert local_disk.delete('a.jpg') is True
        assert local_disk.delete('a.jpg') is False

    def test_copy(self, local_disk):
        """Test copying to a new directory."""
        local_disk.write('a.jpg', b'data')

        local_disk.copy('a.jpg', 'backup/a.jpg')

        assert local_disk.read('backup/a.jpg') == b'data'
        assert local_disk.exists('a.jpg')

    def test_copy_missing(self, local_disk):
        """Test copying a missing file is a StorageFailure."""
        with pytest.raises(StorageFailure):
            local_disk.copy('missing.jpg', 'b.jpg')

    def test_url(self, local_disk):
        """Test URLs join the base URL and quote the path."""
        assert local_disk.url('blocks/my photo.jpg') == '/storage/blocks/my%20photo.jpg'

    def test_local_path(self, local_disk, tmp_path):
        """Test local_path is the absolute file path."""
        assert local_disk.local_path('a.jpg') == str((tmp_path / 'storage' / 'a.jpg').resolve())

    def test_path_escape_rejected(self, local_disk):
        """Test paths cannot leave the root."""
        with pytest.raises(StorageFailure):
            local_disk.write('../outside.jpg', b'data')


class TestDiskManager:
    """Tests for DiskManager."""

    def test_register_and_get(self, local_disk):
        """Test a registered disk is returned by name."""
        disks = DiskManager().register('public', local_disk)

        assert disks.get('public') is local_disk
        assert disks.has('public')
        assert disks.names == ['public']

    def test_unknown_disk(self):
        """Test an unknown disk is a configuration error."""
        with pytest.raises(ConfigurationError, match='Disk not configured: s3'):
            DiskManager().get('s3')
