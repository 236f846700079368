"""Shared record fields for every persisted entity."""

from typing import Any, Final

from django.db import models
from django.utils import timezone
from ulid import ULID

# ULIDs are 26 chars; ids produced by a blob store may be longer
_RECORD_ID_MAX_LENGTH: Final = 64


def new_record_id() -> str:
    """Generate a new record id.

    Returns:
        ULID string: 26 Crockford base32 chars, sortable by creation time.
    """
    return str(ULID())


class LiveRecordManager(models.Manager):
    """Default manager that hides soft-deleted rows."""

    def get_queryset(self) -> models.QuerySet:
        """Exclude rows flagged as deleted.

        Returns:
            QuerySet of live rows only.
        """
        return super().get_queryset().filter(is_deleted=False)


class Record(models.Model):
    """Fields composed into every persisted entity.

    Holds data only. Id and timestamp assignment live in
    :func:`new_record_id` and :func:`new_record`, soft delete and
    ``updated_at`` refresh are applied by the unit of work.
    """

    id = models.CharField(
        primary_key=True,
        max_length=_RECORD_ID_MAX_LENGTH,
        default=new_record_id,
        editable=False,
    )

    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(default=timezone.now)

    is_deleted = models.BooleanField(default=False, db_index=True)

    # First manager is the default one: soft-deleted rows stay hidden
    objects = LiveRecordManager()
    all_objects = models.Manager()

    class Meta:
        """Model metadata."""

        abstract = True


def new_record[RecordT: Record](model: type[RecordT], **fields: Any) -> RecordT:
    """Build an unsaved record with consistent id and timestamps.

    ``created_at`` and ``updated_at`` share one clock reading. An explicit
    ``id`` (e.g. a blob content id) is kept as given.

    Args:
        model: Concrete record model to instantiate.
        fields: Model field values.

    Returns:
        Unsaved model instance.
    """
    now = timezone.now()
    fields.setdefault('id', new_record_id())
    fields.setdefault('created_at', now)
    fields.setdefault('updated_at', now)
    fields.setdefault('is_deleted', False)
    return model(**fields)
