"""Capabilities an entity can opt into.

The unit of work checks these with ``isinstance`` instead of looking at
concrete model classes, so any model that carries the attributes gets
the behaviour.
"""

from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class SoftDeletable(Protocol):
    """Entity that is flagged as deleted instead of being removed."""

    is_deleted: bool


@runtime_checkable
class Timestamped(Protocol):
    """Entity whose ``updated_at`` is refreshed on every committed update."""

    updated_at: datetime
