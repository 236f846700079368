"""Shared fixtures for files app tests."""

import boto3
import pytest
from django.core.files.base import ContentFile
from moto import mock_aws

from server.apps.files.infrastructure.blob_store import BlobStore
from server.apps.files.infrastructure.storage import build_blob_storage
from server.apps.files.logic.file_operations import FileService


@pytest.fixture
def mock_s3(monkeypatch):
    """Mock S3 service with filestore-test bucket.

    Yields:
        boto3 S3 resource with filestore-test bucket created.
    """
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')

    with mock_aws():
        # Create S3 resource
        conn = boto3.resource('s3', region_name='us-east-1')

        # Create bucket
        conn.create_bucket(Bucket='filestore-test')

        yield conn


@pytest.fixture
def blob_storage(mock_s3):
    """Storage backend built from test settings.

    Returns:
        BlobStorage bound to the mocked bucket.
    """
    return build_blob_storage()


@pytest.fixture
def blob_store(blob_storage):
    """Blob store adapter over the mocked bucket.

    Returns:
        BlobStore instance.
    """
    return BlobStore(blob_storage)


@pytest.fixture
def file_service(db, blob_store):
    """File service with default options.

    Returns:
        FileService instance.
    """
    return FileService(blob_store)


@pytest.fixture
def sample_file_content():
    """Sample file content for testing.

    Returns:
        ContentFile with test data.
    """
    return ContentFile(b'test file content', name='test.txt')


@pytest.fixture
def located_blob_store(mock_s3, settings):
    """Blob store that keeps its keys under a ``tenant/`` prefix.

    Returns:
        BlobStore instance.
    """
    config = {
        'BACKEND': settings.BLOB_STORE['BACKEND'],
        'OPTIONS': {**settings.BLOB_STORE['OPTIONS'], 'location': 'tenant'},
    }
    return BlobStore(build_blob_storage(config))
