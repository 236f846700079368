"""Tests for the filestore management command."""

from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from server.apps.files.models import File


def _run(*args):
    out = StringIO()
    call_command('filestore', *args, stdout=out)
    return out.getvalue()


@pytest.fixture
def local_file(tmp_path):
    """Create a local file to upload.

    Returns:
        Path to the file.
    """
    path = tmp_path / 'notes.txt'
    path.write_bytes(b'some notes')
    return path


@pytest.mark.django_db
class TestFilestoreCommand:
    """Tests for the filestore command."""

    def test_upload(self, mock_s3, local_file):
        """Test upload stores the file under its local name."""
        output = _run('upload', str(local_file))

        file_instance = File.objects.get()
        assert file_instance.file_name == 'notes.txt'
        assert file_instance.size_bytes == 10
        assert f'as {file_instance.id}' in output

    def test_upload_with_name(self, mock_s3, local_file):
        """Test --name overrides the display name."""
        _run('upload', str(local_file), '--name', 'renamed.txt')

        assert File.objects.get().file_name == 'renamed.txt'

    def test_upload_missing_path(self, mock_s3, tmp_path):
        """Test uploading a missing path fails cleanly."""
        with pytest.raises(CommandError, match='Not a file'):
            _run('upload', str(tmp_path / 'missing.txt'))

    def test_download(self, mock_s3, local_file, tmp_path):
        """Test download writes the stored bytes to disk."""
        _run('upload', str(local_file))
        file_id = File.objects.get().id
        destination = tmp_path / 'copy.txt'

        output = _run('download', file_id, str(destination))

        assert destination.read_bytes() == b'some notes'
        assert 'Downloaded' in output

    def test_download_unknown(self, mock_s3, tmp_path):
        """Test a missing blob maps to its own message."""
        with pytest.raises(CommandError, match='Content not found'):
            _run('download', 'nonexistent', str(tmp_path / 'out.bin'))

    def test_delete(self, mock_s3, local_file):
        """Test delete soft-deletes the record."""
        _run('upload', str(local_file))
        file_id = File.objects.get().id

        output = _run('delete', file_id)

        assert f'Deleted {file_id}' in output
        assert File.all_objects.get(id=file_id).is_deleted is True

    def test_show(self, mock_s3, local_file):
        """Test show prints the metadata fields."""
        _run('upload', str(local_file))
        file_id = File.objects.get().id

        output = _run('show', file_id)

        assert f'id:         {file_id}' in output
        assert 'file_name:  notes.txt' in output
        assert 'size_bytes: 10' in output

    def test_show_unknown(self, mock_s3):
        """Test a missing record maps to its own message."""
        with pytest.raises(CommandError, match='File not found'):
            _run('show', 'nonexistent')

    def test_list(self, mock_s3, local_file):
        """Test list filters by name and prints a summary."""
        _run('upload', str(local_file), '--name', 'hello.txt')
        _run('upload', str(local_file), '--name', 'world.txt')

        output = _run('list', '--name', 'hello')

        assert 'hello.txt' in output
        assert 'world.txt' not in output
        assert 'Page 1/1, 1 file(s) total' in output

    def test_list_empty(self, mock_s3):
        """Test an empty store still prints a summary."""
        assert 'Page 1/1, 0 file(s) total' in _run('list')

    def test_list_invalid_page(self, mock_s3):
        """Test invalid paging maps to its own message."""
        with pytest.raises(CommandError, match='Invalid input'):
            _run('list', '--page', '0')
