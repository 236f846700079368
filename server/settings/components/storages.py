"""Blob store configuration for S3-compatible backends.

This module configures the blob storage to work with:
- MinIO for local development
- Cloudflare R2 or AWS S3 for production

All of them speak the S3 API and use the same S3Storage backend.
"""

from typing import Any, Final

from boto3.s3.transfer import TransferConfig

from server.settings.components import config

# Uploads larger than one chunk go through multipart upload, which only
# makes the object visible once every part has been committed
_CHUNK_SIZE: Final = config(
    'BLOB_STORE_CHUNK_SIZE',
    cast=int,
    default=8 * 1024 * 1024,
)

BLOB_STORE: Final[dict[str, Any]] = {
    'BACKEND': 'server.apps.files.infrastructure.storage.BlobStorage',
    'OPTIONS': {
        'bucket_name': config('AWS_STORAGE_BUCKET_NAME', default='filestore'),
        'access_key': config('AWS_ACCESS_KEY_ID', default=None),
        'secret_key': config('AWS_SECRET_ACCESS_KEY', default=None),
        'endpoint_url': config(
            'AWS_S3_ENDPOINT_URL',
            default=None,
        ),
        'region_name': config(
            'AWS_S3_REGION_NAME',
            default='auto',
        ),
        'location': config('BLOB_STORE_LOCATION', default=''),
        'file_overwrite': False,  # Content ids are never reused
        'default_acl': None,  # Inherit bucket ACL
        'transfer_config': TransferConfig(
            multipart_threshold=_CHUNK_SIZE,
            multipart_chunksize=_CHUNK_SIZE,
        ),
    },
}
