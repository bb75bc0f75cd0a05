"""
Tests for structured logging (returns_kernel/logging_config.py).

Most cases drive a ``ReturnEditor`` against the recording transaction and
inspect the JSON records it emits; the rest pin down the formatter and
handler setup directly.
"""

import json
import logging
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from returns_kernel.domain.statuses import ReturnStatus
from returns_kernel.domain.validation import RuleBasedValidator, ValidationRules
from returns_kernel.exceptions import OptimisticLockError, ValidationError
from returns_kernel.logging_config import (
    LOGGER_NAME,
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


def _by_message(records: list[dict], message: str) -> list[dict]:
    return [r for r in records if r["message"] == message]


def _format(message: str = "event", exc: BaseException | None = None, **extra) -> dict:
    logger = get_logger("test")
    exc_info = (type(exc), exc, exc.__traceback__) if exc is not None else None
    record = logger.makeRecord(
        logger.name, logging.INFO, __file__, 1, message, (), exc_info, extra=extra,
    )
    return json.loads(StructuredFormatter().format(record))


# ---------------------------------------------------------------------------
# Context bound by editor operations
# ---------------------------------------------------------------------------


class TestEditorOperationContext:

    def test_records_carry_return_actor_and_operation(
        self, editor, test_user, make_order_return, captured_logs,
    ):
        order_return = make_order_return()

        editor.add_payment(order_return, "card", "10")

        created = _by_message(captured_logs(), "payment_created")[0]
        assert created["return_id"] == str(order_return.id)
        assert created["actor_id"] == str(test_user.id)
        assert created["operation"] == "add_payment"

    def test_nested_operations_rebind_then_restore(
        self, editor, make_order_return, captured_logs,
    ):
        order_return = make_order_return(balance="100")

        # Settles: add_payment -> set_remaining_balance -> complete
        editor.add_payment(order_return, "card", "100")

        records = captured_logs()
        operation_of = {
            message: _by_message(records, message)[0]["operation"]
            for message in (
                "payment_created",
                "return_payment_added",
                "return_remaining_balance_set",
                "order_item_status_updated",
                "return_completed",
            )
        }
        assert operation_of == {
            "payment_created": "add_payment",
            "return_payment_added": "add_payment",
            "return_remaining_balance_set": "set_remaining_balance",
            "order_item_status_updated": "complete",
            # Logged after complete() has left its block
            "return_completed": "set_remaining_balance",
        }
        assert order_return.item.status is ReturnStatus.RETURN_COMPLETED

    def test_context_empty_after_operation(self, editor, make_order_return):
        editor.mark_received(make_order_return())
        assert LogContext.current() == {}

    def test_context_empty_after_failed_nested_operation(
        self, make_editor, make_order_return,
    ):
        editor = make_editor(validator=RuleBasedValidator(
            ValidationRules(non_negative_remaining_balance=True)
        ))

        with pytest.raises(ValidationError):
            editor.add_payment(make_order_return(balance="50"), "card", "80")

        assert LogContext.current() == {}

    def test_caller_context_survives_operation(self, editor, make_order_return):
        order_return = make_order_return()

        with LogContext.bind(actor_id="batch-job"):
            editor.accept(order_return)
            assert LogContext.current() == {"actor_id": "batch-job"}


class TestOperationFailedRecord:

    def test_lock_conflict_carries_error_code(
        self, editor, transaction, make_order_return, captured_logs,
    ):
        transaction.rowcount = 0
        order_return = make_order_return()

        with pytest.raises(OptimisticLockError):
            editor.mark_received(order_return)

        failed = _by_message(captured_logs(), "return_operation_failed")
        assert len(failed) == 1
        assert failed[0]["level"] == "WARNING"
        assert failed[0]["operation"] == "mark_received"
        assert failed[0]["return_id"] == str(order_return.id)
        assert failed[0]["error_type"] == "OptimisticLockError"
        assert failed[0]["error_code"] == "OPTIMISTIC_LOCK_CONFLICT"

    def test_nested_failure_logged_once_under_outer_operation(
        self, make_editor, make_order_return, captured_logs,
    ):
        editor = make_editor(validator=RuleBasedValidator(
            ValidationRules(non_negative_remaining_balance=True)
        ))

        # The rule fails inside the nested set_remaining_balance
        with pytest.raises(ValidationError):
            editor.add_payment(make_order_return(balance="50"), "card", "80")

        failed = _by_message(captured_logs(), "return_operation_failed")
        assert [r["operation"] for r in failed] == ["add_payment"]
        assert failed[0]["error_code"] == "VALIDATION_FAILED"


# ---------------------------------------------------------------------------
# LogContext.bind
# ---------------------------------------------------------------------------


class TestLogContextBind:

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError, match="correlation_id"):
            with LogContext.bind(correlation_id="abc"):
                pass

    def test_none_keeps_outer_value(self):
        with LogContext.bind(return_id="r1", actor_id="u1"):
            with LogContext.bind(return_id="r2", actor_id=None):
                assert LogContext.current() == {"return_id": "r2", "actor_id": "u1"}
            assert LogContext.current() == {"return_id": "r1", "actor_id": "u1"}

    def test_restored_when_block_raises(self):
        with pytest.raises(RuntimeError):
            with LogContext.bind(operation="complete"):
                raise RuntimeError("boom")
        assert LogContext.current() == {}


# ---------------------------------------------------------------------------
# StructuredFormatter
# ---------------------------------------------------------------------------


class TestStructuredFormatter:

    def test_header_fields(self):
        record = _format("return_accepted")

        assert record["message"] == "return_accepted"
        assert record["level"] == "INFO"
        assert record["logger"] == f"{LOGGER_NAME}.test"
        assert datetime.fromisoformat(record["ts"]).tzinfo is not None

    def test_domain_values_serialized(self):
        return_id = uuid4()
        stamp = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

        record = _format(
            return_id=return_id,
            remaining_balance=Decimal("12.50"),
            updated_at=stamp,
            status=ReturnStatus.RETURN_RECEIVED,
        )

        assert record["return_id"] == str(return_id)
        assert record["remaining_balance"] == "12.50"
        assert record["updated_at"] == stamp.isoformat()
        assert record["status"] == int(ReturnStatus.RETURN_RECEIVED)

    def test_extra_wins_over_bound_context(self):
        with LogContext.bind(return_id="bound", actor_id="u1"):
            record = _format(return_id="explicit")

        assert record["return_id"] == "explicit"
        assert record["actor_id"] == "u1"

    def test_kernel_error_fields(self):
        try:
            raise OptimisticLockError("return_item", "r-1", 3)
        except OptimisticLockError as exc:
            record = _format("return_operation_failed", exc=exc)

        assert record["exc_type"] == "OptimisticLockError"
        assert record["exc_code"] == "OPTIMISTIC_LOCK_CONFLICT"
        assert record["exc_entity_type"] == "return_item"
        assert record["exc_entity_id"] == "r-1"
        assert record["exc_expected_version"] == 3
        assert "Traceback" in record["traceback"]

    def test_plain_exception_has_no_code(self):
        try:
            raise KeyError("missing")
        except KeyError as exc:
            record = _format(exc=exc)

        assert record["exc_type"] == "KeyError"
        assert "exc_code" not in record


# ---------------------------------------------------------------------------
# configure_logging / reset_logging
# ---------------------------------------------------------------------------


@pytest.fixture
def fresh_logging():
    reset_logging()
    yield logging.getLogger(LOGGER_NAME)
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())


class TestConfigureLogging:

    def test_writes_json_lines(self, fresh_logging):
        stream = StringIO()
        configure_logging(stream=stream)

        get_logger("services.return_editor").info(
            "return_marked_received", extra={"return_id": "r-1"},
        )

        line = json.loads(stream.getvalue().strip())
        assert line["message"] == "return_marked_received"
        assert line["return_id"] == "r-1"
        assert fresh_logging.propagate is False

    def test_second_call_keeps_handler_and_changes_level(self, fresh_logging):
        first = configure_logging(level=logging.INFO, stream=StringIO())
        second = configure_logging(level=logging.WARNING, stream=StringIO())

        assert second is first
        assert fresh_logging.handlers.count(first) == 1
        assert fresh_logging.level == logging.WARNING

    def test_reset_leaves_foreign_handlers(self, fresh_logging):
        foreign = logging.NullHandler()
        fresh_logging.addHandler(foreign)
        try:
            configured = configure_logging(stream=StringIO())

            reset_logging()

            assert configured not in fresh_logging.handlers
            assert foreign in fresh_logging.handlers
            assert fresh_logging.propagate is True
        finally:
            fresh_logging.removeHandler(foreign)
