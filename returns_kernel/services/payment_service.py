"""
Payment and refund creators.

SQLAlchemy-backed implementations of the creator contracts in
``returns_kernel.domain.ports``.  Each validates its record, assigns an id,
and inserts one row through the shared transaction.  None of them commit.

Validation (raises ``ValidationError``):
    - method must be a non-empty string
    - amount must be a finite, non-zero Decimal
    - currency must be a 3-letter code
    - order mirrors need an order and an already-created payment/refund
"""

from uuid import uuid4

from returns_kernel.db import statements
from returns_kernel.domain.entities import OrderPayment, OrderRefund, Payment, Refund
from returns_kernel.domain.ports import (
    OrderPaymentCreator,
    OrderRefundCreator,
    PaymentCreator,
    RefundCreator,
)
from returns_kernel.domain.values import to_amount
from returns_kernel.exceptions import ValidationError
from returns_kernel.logging_config import get_logger
from returns_kernel.services.base import TransactionalService

logger = get_logger("services.payment")


def _check_money_record(record: Payment | Refund) -> None:
    if not isinstance(record.method, str) or not record.method.strip():
        raise ValidationError("Payment method is required", field="method")
    record.amount = to_amount(record.amount)
    if record.amount == 0:
        raise ValidationError("Amount must not be zero", field="amount")
    if not record.currency_id or len(record.currency_id) != 3:
        raise ValidationError(
            f"Invalid currency: {record.currency_id!r}", field="currency_id"
        )


class PaymentCreateService(TransactionalService, PaymentCreator):
    """Inserts ``payments`` rows."""

    def create(self, payment: Payment) -> Payment:
        _check_money_record(payment)
        payment.id = uuid4()

        self.transaction.run(statements.insert_payment(
            id=payment.id,
            method=payment.method,
            amount=payment.amount,
            currency_id=payment.currency_id,
            reference=payment.reference,
            created_at=self._clock.now(),
            created_by=self._current_user.id,
        ))

        logger.info("payment_created", extra={
            "payment_id": str(payment.id),
            "amount": str(payment.amount),
            "currency": payment.currency_id,
            "method": payment.method,
        })
        return payment


class RefundCreateService(TransactionalService, RefundCreator):
    """Inserts ``refunds`` rows."""

    def create(self, refund: Refund) -> Refund:
        _check_money_record(refund)
        if refund.payment is not None and refund.payment.id is None:
            raise ValidationError(
                "Refunded payment has not been created", field="payment"
            )
        refund.id = uuid4()

        self.transaction.run(statements.insert_refund(
            id=refund.id,
            method=refund.method,
            amount=refund.amount,
            currency_id=refund.currency_id,
            reason=refund.reason,
            reference=refund.reference,
            payment_id=refund.payment.id if refund.payment else None,
            created_at=self._clock.now(),
            created_by=self._current_user.id,
        ))

        logger.info("refund_created", extra={
            "refund_id": str(refund.id),
            "amount": str(refund.amount),
            "currency": refund.currency_id,
            "method": refund.method,
        })
        return refund


class OrderPaymentCreateService(TransactionalService, OrderPaymentCreator):
    """Inserts ``order_payments`` mirrors."""

    def create(self, order_payment: OrderPayment) -> OrderPayment:
        if order_payment.order is None:
            raise ValidationError("Order payment requires an order", field="order")
        if order_payment.payment.id is None:
            raise ValidationError("Payment has not been created", field="payment")
        order_payment.id = uuid4()

        self.transaction.run(statements.insert_order_payment(
            id=order_payment.id,
            order_id=order_payment.order.id,
            payment_id=order_payment.payment.id,
        ))
        return order_payment


class OrderRefundCreateService(TransactionalService, OrderRefundCreator):
    """Inserts ``order_refunds`` mirrors."""

    def create(self, order_refund: OrderRefund) -> OrderRefund:
        if order_refund.order is None:
            raise ValidationError("Order refund requires an order", field="order")
        if order_refund.refund.id is None:
            raise ValidationError("Refund has not been created", field="refund")
        order_refund.id = uuid4()

        self.transaction.run(statements.insert_order_refund(
            id=order_refund.id,
            order_id=order_refund.order.id,
            refund_id=order_refund.refund.id,
        ))
        return order_refund
