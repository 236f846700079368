"""Exceptions for files app."""

from server.apps.records.exceptions import StoreError


class BlobStoreError(StoreError):
    """Base class for blob store failures."""

    def __init__(self, content_id: str, message: str) -> None:
        """Initialize BlobStoreError.

        Args:
            content_id: Content id the operation was addressing.
            message: Human readable explanation.
        """
        self.content_id = content_id
        super().__init__(f'{message}: {content_id}')


class BlobWriteError(BlobStoreError):
    """Raised when content could not be stored or deleted."""

    def __init__(self, content_id: str) -> None:
        """Initialize BlobWriteError.

        Args:
            content_id: Content id that was being written or deleted.
        """
        super().__init__(content_id, 'Blob write failed')


class BlobReadError(BlobStoreError):
    """Raised when stored content could not be read."""

    def __init__(self, content_id: str) -> None:
        """Initialize BlobReadError.

        Args:
            content_id: Content id that was being read.
        """
        super().__init__(content_id, 'Blob read failed')


class BlobNotFoundError(BlobStoreError):
    """Raised when no content is stored under the given id."""

    def __init__(self, content_id: str) -> None:
        """Initialize BlobNotFoundError.

        Args:
            content_id: Content id that does not exist.
        """
        super().__init__(content_id, 'Blob not found')
