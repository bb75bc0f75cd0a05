"""Tests for authorship stamps (returns_kernel/domain/authorship.py)."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from returns_kernel.domain.authorship import Authorship, as_utc

T0 = datetime(2024, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


class TestAuthorshipUpdate:
    """update() records the modifier and keeps updated_at monotonic."""

    def test_new_authorship_has_no_update_stamp(self):
        creator = uuid4()
        authorship = Authorship(T0, creator)

        assert authorship.created_at == T0
        assert authorship.created_by == creator
        assert authorship.updated_at is None
        assert authorship.updated_by is None
        assert not authorship.is_completed

    def test_update_sets_timestamp_and_user(self):
        user = uuid4()
        authorship = Authorship(T0, None)

        authorship.update(T0 + timedelta(minutes=5), user)

        assert authorship.updated_at == T0 + timedelta(minutes=5)
        assert authorship.updated_by == user

    def test_same_timestamp_is_allowed(self):
        authorship = Authorship(T0, None)
        authorship.update(T0, uuid4())
        second = uuid4()

        authorship.update(T0, second)

        assert authorship.updated_by == second

    def test_earlier_timestamp_keeps_stored_time(self):
        authorship = Authorship(T0, None)
        authorship.update(T0 + timedelta(hours=1), uuid4())
        late_writer = uuid4()

        authorship.update(T0, late_writer)

        assert authorship.updated_at == T0 + timedelta(hours=1)
        assert authorship.updated_by == late_writer

    def test_anonymous_user_allowed(self):
        authorship = Authorship(T0, None)
        authorship.update(T0, None)
        assert authorship.updated_by is None
        assert authorship.updated_at == T0

    def test_fields_are_read_only(self):
        authorship = Authorship(T0, None)
        with pytest.raises(AttributeError):
            authorship.updated_at = T0


class TestAuthorshipComplete:
    """complete() is a modification plus the completion stamp."""

    def test_complete_sets_updated_and_completed(self):
        user = uuid4()
        authorship = Authorship(T0, None)
        done = T0 + timedelta(days=2)

        authorship.complete(done, user)

        assert authorship.is_completed
        assert authorship.completed_at == done
        assert authorship.completed_by == user
        assert authorship.updated_at == done
        assert authorship.updated_by == user

    def test_complete_behind_last_update_uses_last_update(self):
        authorship = Authorship(T0, None)
        authorship.update(T0 + timedelta(hours=1), None)
        user = uuid4()

        authorship.complete(T0, user)

        assert authorship.is_completed
        assert authorship.completed_at == T0 + timedelta(hours=1)
        assert authorship.completed_by == user

    def test_complete_twice_restamps(self):
        authorship = Authorship(T0, None)
        authorship.complete(T0, uuid4())
        later_user = uuid4()

        authorship.complete(T0 + timedelta(minutes=1), later_user)

        assert authorship.completed_at == T0 + timedelta(minutes=1)
        assert authorship.completed_by == later_user


class TestAuthorshipRestore:
    """Stamps loaded from storage come back normalised to UTC."""

    def test_restore_all_fields(self):
        creator, updater, completer = uuid4(), uuid4(), uuid4()
        authorship = Authorship.restore(
            created_at=T0,
            created_by=creator,
            updated_at=T0 + timedelta(hours=1),
            updated_by=updater,
            completed_at=T0 + timedelta(hours=1),
            completed_by=completer,
        )

        assert authorship.created_by == creator
        assert authorship.updated_by == updater
        assert authorship.completed_by == completer
        assert authorship.is_completed

    def test_naive_timestamps_become_utc(self):
        naive = datetime(2024, 3, 1, 9, 0, 0)
        authorship = Authorship.restore(
            created_at=naive, created_by=None, updated_at=naive,
        )

        assert authorship.created_at == T0
        assert authorship.updated_at.tzinfo is not None

    def test_restored_stamp_ahead_of_clock_is_kept(self):
        ahead = T0 + timedelta(hours=2)
        authorship = Authorship.restore(
            created_at=T0, created_by=None, updated_at=ahead,
        )

        authorship.update(T0 + timedelta(hours=1), None)

        assert authorship.updated_at == ahead


class TestAsUtc:

    def test_none_passthrough(self):
        assert as_utc(None) is None

    def test_other_timezone_converted(self):
        plus_two = timezone(timedelta(hours=2))
        value = datetime(2024, 3, 1, 11, 0, 0, tzinfo=plus_two)
        assert as_utc(value) == T0
        assert as_utc(value).utcoffset() == timedelta(0)
