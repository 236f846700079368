"""Blob store adapter: upload, download and delete content by id.

Wraps the S3 storage backend and translates storage library failures
into the blob store exceptions. Content ids are generated here, never
supplied by callers.
"""

import io
import logging
from typing import Any, BinaryIO, Final, final, override

from boto3.exceptions import Boto3Error
from botocore.exceptions import BotoCoreError, ClientError
from django.core.exceptions import SuspiciousOperation
from django.core.files.base import File as DjangoFile
from ulid import ULID

from server.apps.files.exceptions import (
    BlobNotFoundError,
    BlobReadError,
    BlobWriteError,
)
from server.apps.files.infrastructure.metadata import (
    detect_mime_type,
    validate_content_id,
)
from server.apps.files.infrastructure.storage import BlobStorage

logger = logging.getLogger(__name__)

_MISSING_OBJECT_CODES: Final = frozenset(('NoSuchKey', 'NotFound', '404'))

# Everything the S3 stack raises for store, network or local I/O failures
_STORE_ERRORS: Final = (BotoCoreError, ClientError, Boto3Error, OSError)

# A source stream closed by its owner mid-upload raises ValueError
_UPLOAD_ERRORS: Final = (*_STORE_ERRORS, ValueError)


def _is_missing_object(error: ClientError) -> bool:
    code = error.response.get('Error', {}).get('Code', '')
    return code in _MISSING_OBJECT_CODES


@final
class BlobStream(io.RawIOBase):
    """Forward-only binary stream over stored content.

    Bytes are fetched from the store as they are read. Failures while
    reading surface as :class:`BlobReadError`.
    """

    def __init__(
        self,
        content_id: str,
        body: Any,
        content_length: int | None = None,
        content_type: str | None = None,
    ) -> None:
        """Initialize BlobStream.

        Args:
            content_id: Id of the content being read.
            body: botocore StreamingBody (anything with ``read(n)``).
            content_length: Size reported by the store, if known.
            content_type: MIME type recorded at upload, if known.
        """
        super().__init__()
        self.content_id = content_id
        self.content_length = content_length
        self.content_type = content_type
        self._body = body

    @override
    def readable(self) -> bool:
        """Report the stream as readable.

        Returns:
            Always True.
        """
        return True

    @override
    def readinto(self, buffer: Any) -> int:
        """Read up to ``len(buffer)`` bytes into buffer.

        Args:
            buffer: Writable bytes-like object.

        Returns:
            Number of bytes read, 0 at end of stream.

        Raises:
            BlobReadError: If the store connection fails mid-read.
        """
        try:
            chunk = self._body.read(len(buffer))
        except _STORE_ERRORS as exc:
            logger.exception('Failed reading blob stream: %s', self.content_id)
            raise BlobReadError(self.content_id) from exc
        size = len(chunk)
        buffer[:size] = chunk
        return size

    @override
    def close(self) -> None:
        """Close the stream and release the underlying connection."""
        if not self.closed:
            self._body.close()
        super().close()


@final
class BlobStore:
    """Content storage addressed by store-generated ids.

    Safe to share across operations: every call is a self-contained
    request against the bucket.
    """

    def __init__(self, storage: BlobStorage) -> None:
        """Initialize BlobStore.

        Args:
            storage: Configured S3 storage backend.
        """
        self._storage = storage

    def upload(self, stream: BinaryIO, name: str) -> str:
        """Store the whole stream under a new content id.

        Content is sent in multipart chunks; the object only becomes
        readable once the last chunk is committed, so a stream that
        fails midway leaves nothing addressable.

        Args:
            stream: Binary stream, read to the end.
            name: Display name, used to guess the Content-Type.

        Returns:
            Content id of the stored object.

        Raises:
            BlobWriteError: If the stream fails, is closed before its end,
                or the store fails.
        """
        content_id = str(ULID())
        content = DjangoFile(stream, name=name)
        content.content_type = detect_mime_type(name)

        try:
            saved_id = self._storage.save(content_id, content)
        except _UPLOAD_ERRORS as exc:
            raise BlobWriteError(content_id) from exc

        if saved_id != content_id:
            logger.warning(
                'Storage renamed blob %s to %s',
                content_id,
                saved_id,
            )
        return saved_id

    def download(self, content_id: str) -> BlobStream:
        """Open stored content for sequential reading.

        Args:
            content_id: Id returned by :meth:`upload`.

        Returns:
            Lazily read stream; the caller must close it.

        Raises:
            BlobNotFoundError: If nothing is stored under the id.
            BlobReadError: If the store fails.
        """
        validate_content_id(content_id)
        try:
            response = self._storage.open_stream(content_id)
        except SuspiciousOperation as exc:
            # Ids escaping the configured location can never name content
            logger.info('Blob not found: %s', content_id)
            raise BlobNotFoundError(content_id) from exc
        except ClientError as exc:
            if _is_missing_object(exc):
                logger.info('Blob not found: %s', content_id)
                raise BlobNotFoundError(content_id) from exc
            logger.exception('Failed to open blob: %s', content_id)
            raise BlobReadError(content_id) from exc
        except _STORE_ERRORS as exc:
            logger.exception('Failed to open blob: %s', content_id)
            raise BlobReadError(content_id) from exc

        return BlobStream(
            content_id,
            response['Body'],
            content_length=response.get('ContentLength'),
            content_type=response.get('ContentType'),
        )

    def delete(self, content_id: str) -> None:
        """Delete stored content. Unknown ids are not an error.

        Args:
            content_id: Id returned by :meth:`upload`.

        Raises:
            BlobWriteError: If the store fails.
        """
        validate_content_id(content_id)
        try:
            self._storage.delete(content_id)
        except SuspiciousOperation:
            return
        except ClientError as exc:
            if _is_missing_object(exc):
                return
            raise BlobWriteError(content_id) from exc
        except _STORE_ERRORS as exc:
            raise BlobWriteError(content_id) from exc

    def exists(self, content_id: str) -> bool:
        """Check whether content is stored under the id.

        Args:
            content_id: Id returned by :meth:`upload`.

        Returns:
            True if the object exists.

        Raises:
            BlobReadError: If the store fails.
        """
        validate_content_id(content_id)
        try:
            return self._storage.exists(content_id)
        except SuspiciousOperation:
            return False
        except _STORE_ERRORS as exc:
            raise BlobReadError(content_id) from exc
