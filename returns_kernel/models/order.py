"""
Module: returns_kernel.models.order
Responsibility: ORM persistence for the order-side records a return touches:
    the order, its items (whose status the return drives), the item status
    history, and the order-scoped payment/refund mirrors.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from returns_kernel.db.base import Base, UUIDString


class OrderModel(Base):
    """An order placed by a customer."""

    __tablename__ = "orders"

    currency_id: Mapped[str] = mapped_column(String(3), nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return f"<OrderModel {self.id} ({self.currency_id})>"


class OrderItemModel(Base):
    """A line on an order; ``status_code`` reflects return progress."""

    __tablename__ = "order_items"

    __table_args__ = (
        Index("idx_order_items_order_id", "order_id"),
    )

    order_id: Mapped[UUID] = mapped_column(ForeignKey("orders.id"), nullable=False)
    status_code: Mapped[int | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return f"<OrderItemModel {self.id}: status={self.status_code}>"


class OrderItemStatusModel(Base):
    """Append-only history of order item status changes."""

    __tablename__ = "order_item_statuses"

    __table_args__ = (
        Index("idx_order_item_statuses_item", "order_item_id"),
    )

    order_item_id: Mapped[UUID] = mapped_column(
        ForeignKey("order_items.id"), nullable=False
    )
    status_code: Mapped[int] = mapped_column(nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    created_by: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)


class OrderPaymentModel(Base):
    """Order-scoped mirror of a payment."""

    __tablename__ = "order_payments"

    __table_args__ = (
        UniqueConstraint("order_id", "payment_id", name="uq_order_payments"),
    )

    order_id: Mapped[UUID] = mapped_column(ForeignKey("orders.id"), nullable=False)
    payment_id: Mapped[UUID] = mapped_column(ForeignKey("payments.id"), nullable=False)


class OrderRefundModel(Base):
    """Order-scoped mirror of a refund."""

    __tablename__ = "order_refunds"

    __table_args__ = (
        UniqueConstraint("order_id", "refund_id", name="uq_order_refunds"),
    )

    order_id: Mapped[UUID] = mapped_column(ForeignKey("orders.id"), nullable=False)
    refund_id: Mapped[UUID] = mapped_column(ForeignKey("refunds.id"), nullable=False)
