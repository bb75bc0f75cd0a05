"""
Authorship -- audit metadata attached to every mutable return entity.

Records who created, last updated and completed an entity, and when.
Fields are read-only; the only mutators are ``update()`` and ``complete()``
so ``updated_at`` can never be moved backwards.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID


def as_utc(value: datetime | None) -> datetime | None:
    """Normalize a timestamp to aware UTC (naive values are taken as UTC)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Authorship:
    """
    Created / updated / completed stamps for one entity.

    Guarantees:
        - ``updated_at`` never moves backwards once set.
        - ``completed_*`` are only written by ``complete()``.
    """

    __slots__ = (
        "_created_at",
        "_created_by",
        "_updated_at",
        "_updated_by",
        "_completed_at",
        "_completed_by",
    )

    def __init__(
        self,
        created_at: datetime | None = None,
        created_by: UUID | None = None,
    ):
        self._created_at = as_utc(created_at)
        self._created_by = created_by
        self._updated_at: datetime | None = None
        self._updated_by: UUID | None = None
        self._completed_at: datetime | None = None
        self._completed_by: UUID | None = None

    @classmethod
    def restore(
        cls,
        *,
        created_at: datetime | None,
        created_by: UUID | None,
        updated_at: datetime | None = None,
        updated_by: UUID | None = None,
        completed_at: datetime | None = None,
        completed_by: UUID | None = None,
    ) -> Authorship:
        """Rebuild stamps loaded from storage."""
        authorship = cls(created_at, created_by)
        authorship._updated_at = as_utc(updated_at)
        authorship._updated_by = updated_by
        authorship._completed_at = as_utc(completed_at)
        authorship._completed_by = completed_by
        return authorship

    @property
    def created_at(self) -> datetime | None:
        return self._created_at

    @property
    def created_by(self) -> UUID | None:
        return self._created_by

    @property
    def updated_at(self) -> datetime | None:
        return self._updated_at

    @property
    def updated_by(self) -> UUID | None:
        return self._updated_by

    @property
    def completed_at(self) -> datetime | None:
        return self._completed_at

    @property
    def completed_by(self) -> UUID | None:
        return self._completed_by

    @property
    def is_completed(self) -> bool:
        return self._completed_at is not None

    def update(self, timestamp: datetime, user_id: UUID | None) -> None:
        """
        Stamp a modification by ``user_id``.

        A ``timestamp`` earlier than the stored ``updated_at`` (another
        writer's clock ran ahead) keeps the stored time and still records
        the user.
        """
        timestamp = as_utc(timestamp)
        if self._updated_at is None or timestamp > self._updated_at:
            self._updated_at = timestamp
        self._updated_by = user_id

    def complete(self, timestamp: datetime, user_id: UUID | None) -> None:
        """Stamp completion; also counts as a modification."""
        self.update(timestamp, user_id)
        self._completed_at = self._updated_at
        self._completed_by = user_id

    def __repr__(self) -> str:
        return (
            f"<Authorship updated_at={self._updated_at} "
            f"updated_by={self._updated_by} completed_at={self._completed_at}>"
        )
