"""Business logic for file operations.

Coordinates the blob store (content) and the unit of work (metadata).

Consistency contract:
- Upload writes the blob first, then commits the metadata row with the
  same id. If the commit fails the blob is left orphaned and logged;
  nothing here deletes it again.
- Delete removes the blob first, then soft-deletes the metadata row.
- Listing reads only the live metadata view.
"""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import BinaryIO, Final, final

from django.conf import settings

from server.apps.files.infrastructure.blob_store import BlobStore, BlobStream
from server.apps.files.infrastructure.metadata import (
    detect_stream_size,
    validate_content_id,
    validate_file_name,
)
from server.apps.files.infrastructure.storage import build_blob_storage
from server.apps.files.models import File
from server.apps.records.exceptions import (
    InvalidArgumentError,
    MetadataNotFoundError,
)
from server.apps.records.models import new_record
from server.apps.records.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE: Final = 20

_FILE_NAME_MAX_LENGTH: Final = File._meta.get_field('file_name').max_length  # noqa: WPS437


@final
@dataclass(frozen=True, slots=True)
class FilePage:
    """One page of file metadata."""

    items: list[File]
    page: int
    page_size: int
    # Matching rows before pagination
    total: int

    @property
    def total_pages(self) -> int:
        """Number of pages needed to show every matching row."""
        return math.ceil(self.total / self.page_size)


@final
class FileService:
    """Upload, download, delete and list stored files."""

    def __init__(
        self,
        blob_store: BlobStore,
        unit_of_work_factory: Callable[[], UnitOfWork] = UnitOfWork,
        *,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        download_respects_soft_delete: bool = False,
    ) -> None:
        """Initialize FileService.

        Args:
            blob_store: Adapter for file content.
            unit_of_work_factory: Returns a fresh unit of work; called
                once per operation.
            default_page_size: Page size used by ``list_files`` when the
                caller gives none.
            download_respects_soft_delete: Refuse downloads whose
                metadata is missing or soft-deleted.
        """
        self._blob_store = blob_store
        self._unit_of_work_factory = unit_of_work_factory
        self._default_page_size = default_page_size
        self._download_respects_soft_delete = download_respects_soft_delete

    def upload(self, stream: BinaryIO, file_name: str) -> File:
        """Store content and create its metadata record.

        Args:
            stream: Binary stream, read to the end.
            file_name: Display name, must not be empty.

        Returns:
            Committed File record; its id is the blob content id.

        Raises:
            InvalidArgumentError: If file_name is empty or too long.
            BlobWriteError: If the content could not be stored. No
                metadata is written in that case.
            MetadataCommitError: If the metadata commit failed. The
                content stays in the blob store, unreferenced.
        """
        validate_file_name(file_name, _FILE_NAME_MAX_LENGTH)

        # Must be read before the upload consumes the stream
        size_bytes = detect_stream_size(stream)

        # Step 1: Upload to blob store first
        logger.info('Uploading file: %s (%d bytes)', file_name, size_bytes)
        content_id = self._blob_store.upload(stream, file_name)

        # Step 2: Commit metadata under the same id
        file_instance = new_record(
            File,
            id=content_id,
            file_name=file_name,
            size_bytes=size_bytes,
        )
        try:
            with self._unit_of_work_factory() as uow:
                uow.add(file_instance)
                uow.commit()
        except Exception:
            logger.exception(
                'Metadata commit failed, blob left orphaned: %s',
                content_id,
            )
            raise

        logger.info(
            'File record created: %s (ID: %s)',
            file_name,
            content_id,
        )
        return file_instance

    def download(self, file_id: str) -> BlobStream:
        """Open a file's content for reading.

        By default the metadata soft-delete flag is not consulted: a
        blob that still exists is served.

        Args:
            file_id: Id returned by :meth:`upload`.

        Returns:
            Lazily read content stream; the caller must close it.

        Raises:
            BlobNotFoundError: If no content is stored under the id.
            BlobReadError: If the blob store fails.
            MetadataNotFoundError: If soft-delete checks are enabled and
                the record is missing or deleted.
        """
        validate_content_id(file_id)
        if self._download_respects_soft_delete:
            self.get_file(file_id)

        logger.debug('Downloading file: %s', file_id)
        return self._blob_store.download(file_id)

    def delete(self, file_id: str) -> None:
        """Delete a file's content and soft-delete its metadata.

        Succeeds when the content or the record (or both) are already
        gone, so calling it twice is safe. A record that is already
        soft-deleted is flagged again, which refreshes its updated_at.

        Args:
            file_id: Id returned by :meth:`upload`.

        Raises:
            BlobWriteError: If the blob store fails.
            MetadataCommitError: If the soft delete could not be saved.
        """
        validate_content_id(file_id)

        # Step 1: Physical content goes first
        self._blob_store.delete(file_id)

        # Step 2: Flag the metadata row, if there is one
        with self._unit_of_work_factory() as uow:
            file_instance = uow.find_by_id(File, file_id)
            if file_instance is None:
                logger.info('No metadata for deleted blob: %s', file_id)
                return
            uow.remove(file_instance)
            uow.commit()

        logger.info(
            'File deleted: %s (ID: %s)',
            file_instance.file_name,
            file_id,
        )

    def list_files(
        self,
        name: str | None = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> FilePage:
        """List live files, optionally filtered by name.

        Rows are ordered by id (ULID, creation time first), so pages
        are stable.

        Args:
            name: Substring the file name must contain. Blank means all.
            page: 1-based page number.
            page_size: Rows per page; defaults to the service setting.

        Returns:
            Requested page with the filtered total.

        Raises:
            InvalidArgumentError: If page or page_size is below 1.
        """
        if page_size is None:
            page_size = self._default_page_size
        if page < 1:
            raise InvalidArgumentError('page', 'must be at least 1')
        if page_size < 1:
            raise InvalidArgumentError('page_size', 'must be at least 1')

        with self._unit_of_work_factory() as uow:
            queryset = uow.query(File)
            if name and name.strip():
                queryset = queryset.filter(file_name__contains=name)

            total = queryset.count()
            offset = (page - 1) * page_size
            items = list(queryset.order_by('id')[offset:offset + page_size])

        logger.debug(
            'Listed files (name=%r, page=%d, page_size=%d): %d of %d',
            name,
            page,
            page_size,
            len(items),
            total,
        )
        return FilePage(
            items=items,
            page=page,
            page_size=page_size,
            total=total,
        )

    def get_file(self, file_id: str) -> File:
        """Get live metadata for a file.

        Args:
            file_id: Id returned by :meth:`upload`.

        Returns:
            File record.

        Raises:
            MetadataNotFoundError: If the record is missing or deleted.
        """
        validate_content_id(file_id)
        with self._unit_of_work_factory() as uow:
            file_instance = uow.get_by_id(File, file_id)
        if file_instance.is_deleted:
            raise MetadataNotFoundError(File._meta.label, file_id)  # noqa: WPS437
        return file_instance


def create_file_service() -> FileService:
    """Build a file service from Django settings.

    Returns:
        FileService with its own blob storage backend.
    """
    blob_store = BlobStore(build_blob_storage())
    return FileService(
        blob_store,
        default_page_size=settings.FILES_DEFAULT_PAGE_SIZE,
        download_respects_soft_delete=(
            settings.FILES_DOWNLOAD_RESPECTS_SOFT_DELETE
        ),
    )
