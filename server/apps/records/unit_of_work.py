"""Unit of work over the Django ORM.

Stages entity changes in memory and writes them in one atomic block on
commit. Works with any model: entities with the ``SoftDeletable``
capability are flagged instead of deleted, entities with the
``Timestamped`` capability get ``updated_at`` refreshed on update.
"""

import enum
import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Self, final

from django.db import DEFAULT_DB_ALIAS, DatabaseError, models, transaction
from django.utils import timezone

from server.apps.records.exceptions import (
    MetadataCommitError,
    MetadataNotFoundError,
    UnitOfWorkClosedError,
)
from server.apps.records.protocols import SoftDeletable, Timestamped

logger = logging.getLogger(__name__)


class UnitOfWorkState(enum.Enum):
    """Lifecycle of a unit of work."""

    IDLE = 'idle'
    TRANSACTION_OPEN = 'transaction_open'
    CLOSED = 'closed'


class _Action(enum.Enum):
    INSERT = 'insert'
    UPDATE = 'update'
    SOFT_DELETE = 'soft_delete'
    DELETE = 'delete'


@dataclass(frozen=True, slots=True)
class _PendingChange:
    action: _Action
    entity: models.Model
    # is_deleted before remove() flipped it, restored on rollback
    was_deleted: bool = False


@final
class UnitOfWork:
    """Transactional session bound to one database alias.

    One instance serves one logical operation. Use it as a context
    manager so the open transaction is released on every exit path::

        with UnitOfWork() as uow:
            uow.add(record)
            uow.commit()
    """

    def __init__(self, using: str = DEFAULT_DB_ALIAS) -> None:
        """Initialize UnitOfWork.

        Args:
            using: Django database alias to read from and write to.
        """
        self.using = using
        self._pending: list[_PendingChange] = []
        self._atomic: transaction.Atomic | None = None
        self._closed = False

    def __enter__(self) -> Self:
        """Enter the scope of the unit of work.

        Returns:
            The unit of work itself.
        """
        self._ensure_open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """Close the unit of work, discarding anything not committed."""
        self.close()

    @property
    def state(self) -> UnitOfWorkState:
        """Current lifecycle state."""
        if self._closed:
            return UnitOfWorkState.CLOSED
        if self._atomic is not None:
            return UnitOfWorkState.TRANSACTION_OPEN
        return UnitOfWorkState.IDLE

    @property
    def has_changes(self) -> bool:
        """Whether anything is staged and not yet committed."""
        return bool(self._pending)

    def begin_transaction(self) -> None:
        """Open a transaction unless one is already open."""
        self._ensure_open()
        if self._atomic is not None:
            return
        atomic = transaction.atomic(using=self.using)
        atomic.__enter__()  # noqa: WPS609
        self._atomic = atomic
        logger.debug('Transaction opened on %s', self.using)

    def add(self, entity: models.Model) -> None:
        """Stage an entity for insertion.

        Args:
            entity: Unsaved model instance.
        """
        self._stage(_PendingChange(_Action.INSERT, entity))

    def update(self, entity: models.Model) -> None:
        """Stage an existing entity for update.

        Args:
            entity: Model instance whose row already exists.
        """
        self._stage(_PendingChange(_Action.UPDATE, entity))

    def remove(self, entity: models.Model) -> None:
        """Stage an entity for removal.

        Soft-deletable entities are flagged and staged as an update;
        any other entity is staged for a physical delete.

        Args:
            entity: Model instance to remove.
        """
        if isinstance(entity, SoftDeletable):
            was_deleted = entity.is_deleted
            entity.is_deleted = True
            self._stage(_PendingChange(
                _Action.SOFT_DELETE,
                entity,
                was_deleted=was_deleted,
            ))
            return
        self._stage(_PendingChange(_Action.DELETE, entity))

    def commit(self) -> bool:
        """Write staged changes and commit the open transaction.

        Changes are applied in the order they were staged. On any failure
        the unit of work is rolled back before the error is raised.

        Returns:
            True if at least one row was affected.

        Raises:
            MetadataCommitError: If the database rejected the changes.
        """
        self._ensure_open()
        pending_count = len(self._pending)
        try:
            with transaction.atomic(using=self.using):
                affected = sum(
                    self._apply(change) for change in self._pending
                )
            self._finish_transaction(commit=True)
        except DatabaseError as exc:
            logger.exception(
                'Commit failed on %s, rolling back %d change(s)',
                self.using,
                pending_count,
            )
            self.rollback()
            raise MetadataCommitError(pending_count) from exc
        except Exception:
            logger.exception('Commit failed on %s, rolling back', self.using)
            self.rollback()
            raise

        self._pending.clear()
        logger.debug(
            'Committed %d change(s) on %s, %d row(s) affected',
            pending_count,
            self.using,
            affected,
        )
        return affected > 0

    def rollback(self) -> None:
        """Roll back the open transaction and discard staged changes."""
        self._finish_transaction(commit=False)
        for change in self._pending:
            if change.action is _Action.SOFT_DELETE:
                change.entity.is_deleted = change.was_deleted  # type: ignore[attr-defined]
        if self._pending:
            logger.info(
                'Discarded %d staged change(s) on %s',
                len(self._pending),
                self.using,
            )
        self._pending.clear()

    def find_by_id[ModelT: models.Model](
        self,
        model: type[ModelT],
        record_id: object,
    ) -> ModelT | None:
        """Load one row from committed state.

        Goes through the base manager, so soft-deleted rows are returned.

        Args:
            model: Model class to look up.
            record_id: Primary key value.

        Returns:
            Fresh model instance, or None if no row has that key.
        """
        self._ensure_open()
        return model._base_manager.using(  # noqa: WPS437
            self.using,
        ).filter(pk=record_id).first()

    def get_by_id[ModelT: models.Model](
        self,
        model: type[ModelT],
        record_id: object,
    ) -> ModelT:
        """Load one row from committed state or fail.

        Args:
            model: Model class to look up.
            record_id: Primary key value.

        Returns:
            Fresh model instance.

        Raises:
            MetadataNotFoundError: If no row has that key.
        """
        entity = self.find_by_id(model, record_id)
        if entity is None:
            raise MetadataNotFoundError(model._meta.label, record_id)  # noqa: WPS437
        return entity

    def query[ModelT: models.Model](
        self,
        model: type[ModelT],
        *,
        include_deleted: bool = False,
    ) -> models.QuerySet[ModelT]:
        """Lazy queryset over every row of a model.

        Nothing is tracked: instances read from it are detached from the
        unit of work until passed to ``update`` or ``remove``.

        Args:
            model: Model class to query.
            include_deleted: Also return soft-deleted rows.

        Returns:
            Unevaluated QuerySet callers can filter and slice.
        """
        self._ensure_open()
        queryset = model._base_manager.using(self.using).all()  # noqa: WPS437
        # Model fields are class attributes, so the capability check
        # works on the class as well as on instances
        if include_deleted or not isinstance(model, SoftDeletable):
            return queryset
        return queryset.filter(is_deleted=False)

    def close(self) -> None:
        """Release the unit of work. Safe to call more than once."""
        if self._closed:
            return
        if self._atomic is not None or self._pending:
            logger.warning(
                'Closing unit of work on %s with uncommitted changes',
                self.using,
            )
        self.rollback()
        self._closed = True

    def _stage(self, change: _PendingChange) -> None:
        self._ensure_open()
        self._pending.append(change)

    def _apply(self, change: _PendingChange) -> int:
        entity = change.entity
        if change.action is _Action.INSERT:
            entity.save(using=self.using, force_insert=True)
            return 1
        if change.action is _Action.DELETE:
            deleted, _ = entity.delete(using=self.using)
            return deleted
        if isinstance(entity, Timestamped):
            entity.updated_at = timezone.now()
        entity.save(using=self.using, force_update=True)
        return 1

    def _finish_transaction(self, *, commit: bool) -> None:
        atomic, self._atomic = self._atomic, None
        if atomic is None:
            return
        if not commit:
            transaction.set_rollback(True, using=self.using)
        atomic.__exit__(None, None, None)  # noqa: WPS609
        logger.debug(
            'Transaction %s on %s',
            'committed' if commit else 'rolled back',
            self.using,
        )

    def _ensure_open(self) -> None:
        if self._closed:
            raise UnitOfWorkClosedError('Unit of work is closed')

