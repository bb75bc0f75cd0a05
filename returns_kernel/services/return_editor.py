"""
ReturnEditor -- state transitions and balance reconciliation for returns.

Responsibility:
    Every mutation of a return goes through this editor: receipt,
    acceptance/rejection, balance baselines, payments, refunds, restocking
    and completion.  Each operation mutates the in-memory aggregate, stamps
    authorship, validates, persists through the shared ``Transaction``,
    cascades to order-level collaborators, and commits.

Architecture position:
    Kernel > Services.  Depends only on the collaborator contracts in
    ``returns_kernel.domain.ports``; SQLAlchemy implementations are wired
    in ``returns_kernel.services.wiring``.

Invariants enforced:
    - Any write that leaves ``remaining_balance == 0`` completes the return
      in the same transaction (see ``assess_remaining_balance``).
    - Payments reduce ``remaining_balance`` by their amount; refunds raise
      ``balance`` by their amount and reset ``remaining_balance`` to it.
    - When the caller owns the transaction the editor never commits.  The
      flag is sticky once set.
    - return_items updates are versioned; a lost update raises
      ``OptimisticLockError``.

Failure modes:
    - ValidationError from the validator or a creator: nothing committed.
    - PersistenceError from the transaction: rolled back by the transaction.
    - PreconditionError: missing stock location, or a required cascade
      without an order item.
    In every case the in-memory ``OrderReturn`` stays mutated and must be
    discarded by the caller.  When the editor owns the transaction it rolls
    back whatever the failed operation had already written.
"""

from __future__ import annotations

from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Iterator
from uuid import uuid4

from returns_kernel.db import statements
from returns_kernel.domain.clock import Clock, SystemClock
from returns_kernel.domain.entities import (
    OrderPayment,
    OrderRefund,
    OrderReturn,
    Payment,
    Refund,
    StockLocation,
)
from returns_kernel.domain.ports import (
    CurrentUser,
    OrderItemStatusUpdater,
    OrderPaymentCreator,
    OrderRefundCreator,
    PaymentCreator,
    RefundCreator,
    Transaction,
)
from returns_kernel.domain.settlement import SettlementOutcome, assess_remaining_balance
from returns_kernel.domain.statuses import ReturnStatus
from returns_kernel.domain.validation import PermissiveValidator, ReturnValidator
from returns_kernel.domain.values import to_amount
from returns_kernel.exceptions import (
    MissingOrderItemError,
    MissingStockLocationError,
    OptimisticLockError,
)
from returns_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.return_editor")

DEFAULT_REFUND_REASON_PREFIX = "Returned Item: "


class ReturnEditor:
    """
    Orchestrates every state and balance change of an ``OrderReturn``.

    Usage:
        editor = build_return_editor(session, current_user)
        order_return = ReturnSelector(session).get(return_id)
        editor.add_payment(order_return, "card", Decimal("100.00"), "TXN1")
    """

    def __init__(
        self,
        transaction: Transaction,
        current_user: CurrentUser,
        item_status_updater: OrderItemStatusUpdater,
        payment_creator: PaymentCreator,
        order_payment_creator: OrderPaymentCreator,
        refund_creator: RefundCreator,
        order_refund_creator: OrderRefundCreator,
        validator: ReturnValidator | None = None,
        clock: Clock | None = None,
        caller_owns_transaction: bool = False,
        refund_reason_prefix: str = DEFAULT_REFUND_REASON_PREFIX,
        require_order_item_for_cascade: bool = False,
    ):
        self._transaction = transaction
        self._caller_owns_transaction = caller_owns_transaction
        self._current_user = current_user
        self._item_status_updater = item_status_updater
        self._payment_creator = payment_creator
        self._order_payment_creator = order_payment_creator
        self._refund_creator = refund_creator
        self._order_refund_creator = order_refund_creator
        self._validator = validator or PermissiveValidator()
        self._clock = clock or SystemClock()
        self._refund_reason_prefix = refund_reason_prefix
        self._require_order_item_for_cascade = require_order_item_for_cascade
        self._depth = 0

    # =========================================================================
    # Transaction ownership
    # =========================================================================

    def set_transaction(self, transaction: Transaction) -> None:
        """Join a caller-managed transaction; the editor stops committing for good."""
        self._transaction = transaction
        self._caller_owns_transaction = True

    @property
    def caller_owns_transaction(self) -> bool:
        return self._caller_owns_transaction

    # =========================================================================
    # Status
    # =========================================================================

    def mark_received(self, order_return: OrderReturn) -> OrderReturn:
        """Set the item to RETURN_RECEIVED and cascade it to the order item."""
        with self._operation("mark_received", order_return):
            self._check_cascade(order_return)
            self._item_status_updater.set_transaction(self._transaction)

            self._stamp(order_return)
            order_return.item.status = ReturnStatus.RETURN_RECEIVED

            self._update_item(
                order_return,
                status_code=int(ReturnStatus.RETURN_RECEIVED),
                **self._updated_values(order_return),
            )
            self._cascade_status(order_return, ReturnStatus.RETURN_RECEIVED)
            self._commit()

        logger.info("return_marked_received", extra={"return_id": str(order_return.id)})
        return order_return

    def accept(self, order_return: OrderReturn) -> OrderReturn:
        return self._set_accepted(order_return, True)

    def reject(self, order_return: OrderReturn) -> OrderReturn:
        return self._set_accepted(order_return, False)

    def complete(self, order_return: OrderReturn, commit: bool = True) -> OrderReturn:
        """
        Terminal transition: completion stamps, RETURN_COMPLETED, cascade.

        Not guarded against re-entry; completing twice re-stamps.
        """
        with self._operation("complete", order_return):
            self._check_cascade(order_return)
            self._item_status_updater.set_transaction(self._transaction)

            now = self._clock.now()
            user_id = self._current_user.id
            order_return.authorship.complete(now, user_id)
            order_return.item.authorship.complete(now, user_id)
            order_return.item.status = ReturnStatus.RETURN_COMPLETED

            item_authorship = order_return.item.authorship
            completion = {
                "updated_at": item_authorship.updated_at,
                "updated_by": item_authorship.updated_by,
                "completed_at": item_authorship.completed_at,
                "completed_by": item_authorship.completed_by,
            }
            self._transaction.run(statements.update_return(order_return.id, **completion))
            self._update_item(
                order_return,
                status_code=int(ReturnStatus.RETURN_COMPLETED),
                **completion,
            )
            self._cascade_status(order_return, ReturnStatus.RETURN_COMPLETED)

            if commit:
                self._commit()

        logger.info("return_completed", extra={
            "return_id": str(order_return.id),
            "completed_by": str(user_id) if user_id else None,
        })
        return order_return

    # =========================================================================
    # Balances
    # =========================================================================

    def set_balance(self, order_return: OrderReturn, balance: Any) -> OrderReturn:
        """Start a fresh baseline: balance and remaining balance both = ``balance``."""
        balance = to_amount(balance, "balance")
        with self._operation("set_balance", order_return):
            item = order_return.item
            item.balance = balance
            item.remaining_balance = balance

            self._stamp(order_return)
            self._validate(order_return)

            self._update_item(
                order_return,
                balance=balance,
                remaining_balance=balance,
                **self._updated_values(order_return),
            )
            self._commit()

        logger.info("return_balance_set", extra={
            "return_id": str(order_return.id),
            "balance": str(balance),
        })
        return order_return

    def set_remaining_balance(
        self,
        order_return: OrderReturn,
        remaining_balance: Any,
        commit: bool = True,
    ) -> OrderReturn:
        """
        Set the outstanding amount; a zero result completes the return.

        The completion runs without its own commit; a single commit follows
        when ``commit`` is true and the editor owns the transaction.
        """
        remaining_balance = to_amount(remaining_balance, "remaining_balance")
        with self._operation("set_remaining_balance", order_return):
            item = order_return.item
            item.remaining_balance = remaining_balance

            self._stamp(order_return)
            self._validate(order_return)

            self._update_item(
                order_return,
                balance=item.balance,
                remaining_balance=remaining_balance,
                **self._updated_values(order_return),
            )

            outcome = assess_remaining_balance(remaining_balance)
            logger.info("return_remaining_balance_set", extra={
                "return_id": str(order_return.id),
                "balance": str(item.balance),
                "remaining_balance": str(remaining_balance),
                "outcome": outcome.value,
            })
            if outcome is SettlementOutcome.SETTLED:
                self.complete(order_return, commit=False)

            if commit:
                self._commit()

        return order_return

    def clear_remaining_balance(
        self,
        order_return: OrderReturn,
        commit: bool = True,
    ) -> OrderReturn:
        return self.set_remaining_balance(order_return, Decimal("0"), commit)

    def add_payment(
        self,
        order_return: OrderReturn,
        method: str,
        amount: Any,
        reference: str | None = None,
    ) -> OrderReturn:
        """
        Take a payment against the return.

        The payment is linked to the return, mirrored onto the order when the
        item has one, and consumed in full against the remaining balance.
        """
        amount = to_amount(amount)
        with self._operation("add_payment", order_return):
            self._payment_creator.set_transaction(self._transaction)
            self._order_payment_creator.set_transaction(self._transaction)

            payment = Payment(
                method=method,
                amount=amount,
                currency_id=order_return.currency_id,
                reference=reference,
            )
            self._payment_creator.create(payment)
            self._transaction.run(statements.link_return_payment(
                uuid4(), order_return.id, payment.id,
            ))
            order_return.payments.append(payment)

            order = order_return.item.order
            if order is not None:
                order_payment = OrderPayment(order=order, payment=payment)
                self._order_payment_creator.create(order_payment)
                order.payments.append(order_payment)

            self._set_updated_return(order_return)
            self._set_updated_return_item(order_return)

            logger.info("return_payment_added", extra={
                "return_id": str(order_return.id),
                "payment_id": str(payment.id),
                "amount": str(amount),
                "mirrored_to_order": order is not None,
            })

            self.set_remaining_balance(
                order_return,
                order_return.item.remaining_balance - amount,
                commit=False,
            )
            self._commit()

        return order_return

    def refund(
        self,
        order_return: OrderReturn,
        method: str,
        amount: Any,
        payment: Payment | None = None,
        reference: str | None = None,
    ) -> OrderReturn:
        """
        Give money back against the return.

        The refund raises the balance by ``amount`` and resets the remaining
        balance to the new balance.
        """
        amount = to_amount(amount)
        with self._operation("refund", order_return):
            self._refund_creator.set_transaction(self._transaction)
            self._order_refund_creator.set_transaction(self._transaction)

            refund = Refund(
                method=method,
                amount=amount,
                currency_id=order_return.currency_id,
                reason=self._refund_reason_prefix + order_return.item.reason,
                reference=reference,
                payment=payment,
            )
            self._refund_creator.create(refund)
            self._transaction.run(statements.link_return_refund(
                uuid4(), order_return.id, refund.id,
            ))
            order_return.refunds.append(refund)

            order = order_return.item.order
            if order is not None:
                order_refund = OrderRefund(order=order, refund=refund)
                self._order_refund_creator.create(order_refund)
                order.refunds.append(order_refund)

            self._set_updated_return(order_return)
            self._set_updated_return_item(order_return)

            logger.info("return_refund_added", extra={
                "return_id": str(order_return.id),
                "refund_id": str(refund.id),
                "amount": str(amount),
                "mirrored_to_order": order is not None,
            })

            item = order_return.item
            item.balance = item.balance + amount
            self.set_remaining_balance(order_return, item.balance, commit=False)
            self._commit()

        return order_return

    # =========================================================================
    # Stock
    # =========================================================================

    def return_item_to_stock(
        self,
        order_return: OrderReturn,
        location: StockLocation | None = None,
    ) -> OrderReturn:
        """Mark the item as put back into stock at ``location`` (or its current one)."""
        with self._operation("return_item_to_stock", order_return):
            item = order_return.item
            if location is not None:
                item.returned_stock_location = location
            if item.returned_stock_location is None:
                raise MissingStockLocationError(str(order_return.id))

            self._stamp(order_return)
            item.returned_stock = True
            self._validate(order_return)

            self._update_item(
                order_return,
                returned_stock=True,
                returned_stock_location=item.returned_stock_location.name,
                **self._updated_values(order_return),
            )
            self._commit()

        logger.info("return_item_restocked", extra={
            "return_id": str(order_return.id),
            "location": order_return.item.returned_stock_location.name,
        })
        return order_return

    # =========================================================================
    # Extension point
    # =========================================================================

    def _validate(self, order_return: OrderReturn) -> None:
        """Checked before balance- and stock-affecting writes.  Override or inject."""
        self._validator.validate(order_return)

    # =========================================================================
    # Internals
    # =========================================================================

    def _set_accepted(self, order_return: OrderReturn, accepted: bool) -> OrderReturn:
        operation = "accept" if accepted else "reject"
        with self._operation(operation, order_return):
            order_return.item.accepted = accepted
            self._stamp(order_return)

            self._update_item(
                order_return,
                accepted=accepted,
                **self._updated_values(order_return),
            )
            self._commit()

        logger.info(f"return_{operation}ed", extra={"return_id": str(order_return.id)})
        return order_return

    def _stamp(self, order_return: OrderReturn) -> None:
        now = self._clock.now()
        user_id = self._current_user.id
        order_return.authorship.update(now, user_id)
        order_return.item.authorship.update(now, user_id)

    @staticmethod
    def _updated_values(order_return: OrderReturn) -> dict[str, Any]:
        return {
            "updated_at": order_return.authorship.updated_at,
            "updated_by": order_return.authorship.updated_by,
        }

    def _set_updated_return(self, order_return: OrderReturn) -> None:
        order_return.authorship.update(self._clock.now(), self._current_user.id)
        self._transaction.run(statements.update_return(
            order_return.id, **self._updated_values(order_return),
        ))

    def _set_updated_return_item(self, order_return: OrderReturn) -> None:
        # The item takes the return's stamp
        order_return.item.authorship.update(
            order_return.authorship.updated_at,
            order_return.authorship.updated_by,
        )
        self._update_item(order_return, **self._updated_values(order_return))

    def _update_item(self, order_return: OrderReturn, **values: Any) -> None:
        item = order_return.item
        rows = self._transaction.run(
            statements.update_return_item(order_return.id, item.version, **values)
        )
        if rows == 0:
            raise OptimisticLockError("return_item", str(order_return.id), item.version)
        item.version += 1

    def _check_cascade(self, order_return: OrderReturn) -> None:
        if order_return.item.order_item is None and self._require_order_item_for_cascade:
            raise MissingOrderItemError(str(order_return.id))

    def _cascade_status(self, order_return: OrderReturn, status: ReturnStatus) -> None:
        order_item = order_return.item.order_item
        if order_item is None:
            logger.debug("return_status_cascade_skipped", extra={
                "return_id": str(order_return.id),
                "status_code": int(status),
            })
            return
        self._item_status_updater.update_status(order_item, status)

    def _commit(self) -> None:
        # Only the outermost operation commits
        if self._caller_owns_transaction or self._depth > 1:
            return
        self._transaction.commit()

    @contextmanager
    def _operation(self, name: str, order_return: OrderReturn) -> Iterator[None]:
        user_id = self._current_user.id
        self._depth += 1
        try:
            with LogContext.bind(
                return_id=str(order_return.id),
                actor_id=str(user_id) if user_id else None,
                operation=name,
            ):
                yield
        except Exception as exc:
            if self._depth == 1:
                self._abort(name, order_return, exc)
            raise
        finally:
            self._depth -= 1

    def _abort(self, name: str, order_return: OrderReturn, exc: Exception) -> None:
        logger.warning("return_operation_failed", extra={
            "operation": name,
            "return_id": str(order_return.id),
            "error_type": type(exc).__name__,
            "error_code": getattr(exc, "code", None),
        })
        if not self._caller_owns_transaction:
            self._transaction.rollback()
