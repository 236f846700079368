"""Integration tests for the blob store against a real MinIO server.

Run with ``MINIO_ENDPOINT`` pointing at a reachable MinIO instance
(e.g. ``http://localhost:9000``); skipped otherwise.
"""
import io
import os
from typing import Final

import boto3
import pytest
from boto3.s3.transfer import TransferConfig
from botocore.client import BaseClient
from botocore.exceptions import ClientError

from server.apps.files.exceptions import BlobNotFoundError
from server.apps.files.infrastructure.blob_store import BlobStore
from server.apps.files.infrastructure.storage import build_blob_storage

_TEST_BUCKET: Final = 'filestore-integration'
_PART_SIZE: Final = 5 * 1024 * 1024  # S3 minimum multipart part size

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        'MINIO_ENDPOINT' not in os.environ,
        reason='MINIO_ENDPOINT is not set',
    ),
]


@pytest.fixture
def minio_credentials() -> dict[str, str]:
    """Read MinIO connection details from the environment.

    Returns:
        Endpoint and credentials.
    """
    return {
        'endpoint_url': os.environ['MINIO_ENDPOINT'],
        'access_key': os.getenv('MINIO_ROOT_USER', 'minioadmin'),
        'secret_key': os.getenv('MINIO_ROOT_PASSWORD', 'minioadmin'),
    }


@pytest.fixture
def s3_client(minio_credentials: dict[str, str]) -> BaseClient:
    """Create S3 client for MinIO.

    Returns:
        Configured boto3 S3 client for MinIO.
    """
    return boto3.client(
        's3',
        endpoint_url=minio_credentials['endpoint_url'],
        aws_access_key_id=minio_credentials['access_key'],
        aws_secret_access_key=minio_credentials['secret_key'],
        region_name='us-east-1',
    )


@pytest.fixture
def test_bucket(s3_client: BaseClient) -> str:
    """Ensure test bucket exists.

    Returns:
        Name of the test bucket.
    """
    try:
        s3_client.head_bucket(Bucket=_TEST_BUCKET)
    except ClientError:
        s3_client.create_bucket(Bucket=_TEST_BUCKET)

    return _TEST_BUCKET


@pytest.fixture
def blob_store(minio_credentials: dict[str, str], test_bucket: str) -> BlobStore:
    """Blob store writing to the MinIO test bucket.

    Returns:
        BlobStore with a small multipart chunk size.
    """
    storage = build_blob_storage({
        'BACKEND': 'server.apps.files.infrastructure.storage.BlobStorage',
        'OPTIONS': {
            **minio_credentials,
            'bucket_name': test_bucket,
            'region_name': 'us-east-1',
            'file_overwrite': False,
            'default_acl': None,
            'transfer_config': TransferConfig(
                multipart_threshold=_PART_SIZE,
                multipart_chunksize=_PART_SIZE,
            ),
        },
    })
    return BlobStore(storage)


def test_round_trip(blob_store: BlobStore) -> None:
    """Test small content survives upload and download."""
    content_id = blob_store.upload(io.BytesIO(b'Hello from MinIO'), 'hi.txt')

    with blob_store.download(content_id) as stream:
        assert stream.read() == b'Hello from MinIO'

    blob_store.delete(content_id)


def test_multipart_round_trip(blob_store: BlobStore) -> None:
    """Test content spanning several parts is reassembled in order."""
    payload = os.urandom(_PART_SIZE * 2 + 123)

    content_id = blob_store.upload(io.BytesIO(payload), 'large.bin')

    with blob_store.download(content_id) as stream:
        assert stream.content_length == len(payload)
        assert stream.read() == payload

    blob_store.delete(content_id)


def test_delete_then_download(blob_store: BlobStore) -> None:
    """Test deleted content is reported as missing."""
    content_id = blob_store.upload(io.BytesIO(b'short-lived'), 'tmp.txt')

    blob_store.delete(content_id)
    blob_store.delete(content_id)

    with pytest.raises(BlobNotFoundError):
        blob_store.download(content_id)
