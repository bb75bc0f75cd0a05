"""ORM models - importing this package registers every table on Base.metadata."""

from returns_kernel.models.order import (
    OrderItemModel,
    OrderItemStatusModel,
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

__all__ = [
    "OrderModel",
    "OrderItemModel",
    "OrderItemStatusModel",
    "OrderPaymentModel",
    "OrderRefundModel",
    "PaymentModel",
    "RefundModel",
    "ReturnModel",
    "ReturnItemModel",
    "ReturnPaymentModel",
    "ReturnRefundModel",
]
