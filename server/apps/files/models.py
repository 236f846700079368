"""Database models for files app."""

from typing import Final, final, override

from django.db import models

from server.apps.records.models import Record

_FILE_NAME_MAX_LENGTH: Final = 255


@final
class File(Record):
    """Metadata for content stored in the blob store.

    The primary key is the blob store's content id, so there is no
    separate mapping between the two stores. Records are created only
    by a successful upload and are never hard-deleted here: deletion
    sets ``is_deleted`` and the row stays for audit.
    """

    # Display name, not unique
    file_name = models.CharField(
        max_length=_FILE_NAME_MAX_LENGTH,
    )

    # Best effort: 0 when the uploaded stream did not report a length
    size_bytes = models.BigIntegerField(
        default=0,
        help_text='File size in bytes',
    )

    class Meta:
        """Model metadata."""

        verbose_name = 'File'  # type: ignore[mutable-override]
        verbose_name_plural = 'Files'  # type: ignore[mutable-override]
        # ULIDs sort by creation time (millisecond precision)
        ordering = ['id']

        indexes = [
            # Optimize name filtering on the live view
            models.Index(
                fields=['is_deleted', 'file_name'],
                name='files_live_name_idx',
            ),
        ]

        constraints = [
            models.CheckConstraint(
                condition=models.Q(size_bytes__gte=0),
                name='files_size_bytes_non_negative',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.file_name} ({self.id})'
