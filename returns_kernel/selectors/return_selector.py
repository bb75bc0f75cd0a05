"""
ReturnSelector -- loads the ``OrderReturn`` aggregate by id.

This is the read half of the controller contract: construct a return
aggregate by id, hand it to exactly one ``ReturnEditor`` operation.
The aggregate carries the item's optimistic-lock ``version`` as read, so a
concurrent writer in between is detected by the editor.
"""

from uuid import UUID

from sqlalchemy import select

from returns_kernel.domain.authorship import Authorship
from returns_kernel.domain.entities import (
    Order,
    OrderItem,
    OrderPayment,
    OrderRefund,
    OrderReturn,
    Payment,
    Refund,
    ReturnItem,
    StockLocation,
)
from returns_kernel.domain.statuses import ReturnStatus
from returns_kernel.exceptions import ReturnNotFoundError
from returns_kernel.logging_config import get_logger
from returns_kernel.models.order import (
    OrderItemModel,
    OrderModel,
    OrderPaymentModel,
    OrderRefundModel,
)
from returns_kernel.models.order_return import (
    ReturnItemModel,
    ReturnModel,
    ReturnPaymentModel,
    ReturnRefundModel,
)
from returns_kernel.models.payment import PaymentModel, RefundModel
from returns_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.return")


def _authorship(row: ReturnModel | ReturnItemModel) -> Authorship:
    return Authorship.restore(
        created_at=row.created_at,
        created_by=row.created_by,
        updated_at=row.updated_at,
        updated_by=row.updated_by,
        completed_at=row.completed_at,
        completed_by=row.completed_by,
    )


def _payment(row: PaymentModel) -> Payment:
    return Payment(
        id=row.id,
        method=row.method,
        amount=row.amount,
        currency_id=row.currency_id,
        reference=row.reference,
    )


class ReturnSelector(BaseSelector):
    """Read-only access to returns."""

    def get(self, return_id: UUID) -> OrderReturn:
        """
        Load a return with its item, order links, payments and refunds.

        Raises:
            ReturnNotFoundError: If the return or its item doesn't exist.
        """
        return_row = self.session.get(ReturnModel, return_id, populate_existing=True)
        if return_row is None:
            raise ReturnNotFoundError(str(return_id))

        item_row = self.session.execute(
            select(ReturnItemModel).where(ReturnItemModel.return_id == return_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if item_row is None:
            raise ReturnNotFoundError(str(return_id))

        order = self._order(item_row.order_id) if item_row.order_id else None
        order_item = None
        if item_row.order_item_id is not None:
            order_item_row = self.session.get(
                OrderItemModel, item_row.order_item_id, populate_existing=True
            )
            if order_item_row is not None:
                order_item = OrderItem(
                    id=order_item_row.id,
                    order_id=order_item_row.order_id,
                    status=self._status(order_item_row.status_code),
                )

        item = ReturnItem(
            id=item_row.id,
            return_id=return_row.id,
            reason=item_row.reason,
            status=ReturnStatus(item_row.status_code),
            accepted=item_row.accepted,
            balance=item_row.balance,
            remaining_balance=item_row.remaining_balance,
            returned_stock=item_row.returned_stock,
            returned_stock_location=(
                StockLocation(item_row.returned_stock_location)
                if item_row.returned_stock_location
                else None
            ),
            order_item=order_item,
            order=order,
            authorship=_authorship(item_row),
            version=item_row.version,
        )

        order_return = OrderReturn(
            id=return_row.id,
            currency_id=return_row.currency_id,
            item=item,
            authorship=_authorship(return_row),
            payments=self.payments_for(return_id),
            refunds=self.refunds_for(return_id),
        )

        logger.debug("return_loaded", extra={
            "return_id": str(return_id),
            "status_code": item_row.status_code,
            "version": item_row.version,
        })
        return order_return

    def find(self, return_id: UUID) -> OrderReturn | None:
        """Like ``get`` but returns None when the return doesn't exist."""
        try:
            return self.get(return_id)
        except ReturnNotFoundError:
            return None

    def payments_for(self, return_id: UUID) -> list[Payment]:
        rows = self.session.execute(
            select(PaymentModel)
            .join(ReturnPaymentModel, ReturnPaymentModel.payment_id == PaymentModel.id)
            .where(ReturnPaymentModel.return_id == return_id)
            .order_by(PaymentModel.created_at, PaymentModel.id)
            .execution_options(populate_existing=True)
        ).scalars().all()
        return [_payment(row) for row in rows]

    def refunds_for(self, return_id: UUID) -> list[Refund]:
        rows = self.session.execute(
            select(RefundModel)
            .join(ReturnRefundModel, ReturnRefundModel.refund_id == RefundModel.id)
            .where(ReturnRefundModel.return_id == return_id)
            .order_by(RefundModel.created_at, RefundModel.id)
            .execution_options(populate_existing=True)
        ).scalars().all()
        return [self._refund(row) for row in rows]

    def list_by_status(self, status: ReturnStatus) -> list[UUID]:
        """Ids of returns whose item is in ``status``."""
        return list(self.session.execute(
            select(ReturnItemModel.return_id)
            .where(ReturnItemModel.status_code == int(status))
            .order_by(ReturnItemModel.created_at)
        ).scalars().all())

    def _refund(self, row: RefundModel) -> Refund:
        payment = None
        if row.payment_id is not None:
            payment_row = self.session.get(
                PaymentModel, row.payment_id, populate_existing=True
            )
            payment = _payment(payment_row) if payment_row else None
        return Refund(
            id=row.id,
            method=row.method,
            amount=row.amount,
            currency_id=row.currency_id,
            reason=row.reason,
            reference=row.reference,
            payment=payment,
        )

    def _order(self, order_id: UUID) -> Order | None:
        order_row = self.session.get(OrderModel, order_id, populate_existing=True)
        if order_row is None:
            return None
        order = Order(id=order_row.id, currency_id=order_row.currency_id)

        payment_rows = self.session.execute(
            select(OrderPaymentModel, PaymentModel)
            .join(PaymentModel, OrderPaymentModel.payment_id == PaymentModel.id)
            .where(OrderPaymentModel.order_id == order_id)
            .execution_options(populate_existing=True)
        ).all()
        order.payments = [
            OrderPayment(order=order, payment=_payment(payment_row), id=link.id)
            for link, payment_row in payment_rows
        ]

        refund_rows = self.session.execute(
            select(OrderRefundModel, RefundModel)
            .join(RefundModel, OrderRefundModel.refund_id == RefundModel.id)
            .where(OrderRefundModel.order_id == order_id)
            .execution_options(populate_existing=True)
        ).all()
        order.refunds = [
            OrderRefund(order=order, refund=self._refund(refund_row), id=link.id)
            for link, refund_row in refund_rows
        ]
        return order

    @staticmethod
    def _status(code: int | None) -> ReturnStatus | int | None:
        if code is None:
            return None
        try:
            return ReturnStatus(code)
        except ValueError:
            return code
