"""Exceptions shared by the record store and the file store."""


class StoreError(Exception):
    """Base class for every error raised by the file store."""


class InvalidArgumentError(StoreError, ValueError):
    """Raised when a caller passes a value the store cannot accept."""

    def __init__(self, argument: str, reason: str) -> None:
        """Initialize InvalidArgumentError.

        Args:
            argument: Name of the offending argument.
            reason: Human readable explanation.
        """
        self.argument = argument
        self.reason = reason
        super().__init__(f'Invalid {argument}: {reason}')


class MetadataError(StoreError):
    """Base class for relational store failures."""


class MetadataCommitError(MetadataError):
    """Raised when staged changes could not be written."""

    def __init__(self, pending_changes: int) -> None:
        """Initialize MetadataCommitError.

        Args:
            pending_changes: Number of staged changes that were discarded.
        """
        self.pending_changes = pending_changes
        super().__init__(
            f'Commit failed, {pending_changes} staged change(s) rolled back',
        )


class MetadataNotFoundError(MetadataError):
    """Raised when a record does not exist (or is soft-deleted)."""

    def __init__(self, model_name: str, record_id: object) -> None:
        """Initialize MetadataNotFoundError.

        Args:
            model_name: Label of the model that was searched.
            record_id: Primary key that was not found.
        """
        self.model_name = model_name
        self.record_id = record_id
        super().__init__(f'{model_name} not found: {record_id}')


class UnitOfWorkClosedError(MetadataError):
    """Raised when a unit of work is used after it was closed."""
