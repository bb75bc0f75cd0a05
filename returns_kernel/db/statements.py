"""
Module: returns_kernel.db.statements
Responsibility: Builders for the Core statements the editor and its
    collaborators hand to ``Transaction.run``.  Each builder returns an
    executable with its values already bound, so the transaction only has to
    execute it.
Architecture position: Kernel > DB.  Imports models/ to reach table objects.

Invariants enforced:
    - Every return_items UPDATE is versioned: it matches the expected version
      and bumps it by one.  Zero affected rows means another caller won.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import Insert, Update, insert, update

from returns_kernel.models.order import (
    OrderItemModel,
    OrderItemStatusModel,
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

_returns = ReturnModel.__table__
_return_items = ReturnItemModel.__table__


def update_return(return_id: UUID, **values: Any) -> Update:
    """UPDATE returns SET ... WHERE id = :return_id."""
    return update(_returns).where(_returns.c.id == return_id).values(**values)


def update_return_item(return_id: UUID, expected_version: int, **values: Any) -> Update:
    """Versioned UPDATE return_items SET ... WHERE return_id = ? AND version = ?."""
    return (
        update(_return_items)
        .where(
            _return_items.c.return_id == return_id,
            _return_items.c.version == expected_version,
        )
        .values(version=expected_version + 1, **values)
    )


def link_return_payment(link_id: UUID, return_id: UUID, payment_id: UUID) -> Insert:
    return insert(ReturnPaymentModel.__table__).values(
        id=link_id, return_id=return_id, payment_id=payment_id
    )


def link_return_refund(link_id: UUID, return_id: UUID, refund_id: UUID) -> Insert:
    return insert(ReturnRefundModel.__table__).values(
        id=link_id, return_id=return_id, refund_id=refund_id
    )


def insert_payment(**values: Any) -> Insert:
    return insert(PaymentModel.__table__).values(**values)


def insert_refund(**values: Any) -> Insert:
    return insert(RefundModel.__table__).values(**values)


def insert_order_payment(**values: Any) -> Insert:
    return insert(OrderPaymentModel.__table__).values(**values)


def insert_order_refund(**values: Any) -> Insert:
    return insert(OrderRefundModel.__table__).values(**values)


def update_order_item_status(order_item_id: UUID, status_code: int) -> Update:
    table = OrderItemModel.__table__
    return (
        update(table)
        .where(table.c.id == order_item_id)
        .values(status_code=status_code)
    )


def insert_order_item_status(**values: Any) -> Insert:
    return insert(OrderItemStatusModel.__table__).values(**values)
