"""Custom storage backend for S3-compatible blob storage."""

import logging
from typing import Any, final, override

from django.conf import settings
from django.utils.module_loading import import_string
from storages.backends.s3 import S3Storage
from storages.utils import clean_name

logger = logging.getLogger(__name__)


@final
class BlobStorage(S3Storage):
    """S3 storage backend for file content.

    Extends django-storages S3Storage with:
    - Enhanced error logging
    - Streaming reads that do not spool the object to disk
    """

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save content to S3 with error handling and logging.

        Args:
            name: Storage key for the content.
            content: File content (file-like object).
            max_length: Optional maximum length for the key.

        Returns:
            Actual storage key used (may differ from name if conflicts).

        Raises:
            Exception: If S3 upload fails.
        """
        try:
            logger.info('Uploading blob to storage: %s', name)
            saved_name = super().save(name, content, max_length)
            logger.info('Successfully uploaded blob: %s', saved_name)
        except Exception:
            logger.exception('Failed to upload blob to storage: %s', name)
            raise
        else:
            return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete content from S3 with error handling and logging.

        Deleting a key that does not exist succeeds.

        Args:
            name: Storage key of content to delete.

        Raises:
            Exception: If S3 delete fails.
        """
        try:
            logger.info('Deleting blob from storage: %s', name)
            super().delete(name)
            logger.info('Successfully deleted blob: %s', name)
        except Exception:
            logger.exception('Failed to delete blob from storage: %s', name)
            raise

    def open_stream(self, name: str) -> dict[str, Any]:
        """Start a streaming GET of an object.

        Unlike ``open()``, nothing is buffered locally: the response body
        is read from the network as the caller consumes it.

        Args:
            name: Storage key of content to read.

        Returns:
            S3 GetObject response; ``Body`` is a botocore StreamingBody.

        Raises:
            botocore.exceptions.ClientError: If the key does not exist
                or S3 rejects the request.
        """
        key = self._normalize_name(clean_name(name))
        logger.debug('Opening blob stream: %s', key)
        return self.bucket.Object(key).get()


def build_blob_storage(config: dict[str, Any] | None = None) -> BlobStorage:
    """Construct the blob storage backend from configuration.

    Args:
        config: Mapping with ``BACKEND`` and ``OPTIONS`` keys. Defaults
            to the ``BLOB_STORE`` setting.

    Returns:
        New storage backend instance.
    """
    store_config = config if config is not None else settings.BLOB_STORE
    backend_class = import_string(store_config['BACKEND'])
    return backend_class(**store_config.get('OPTIONS', {}))
