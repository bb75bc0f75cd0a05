"""
Module: returns_kernel.models.order_return
Responsibility: ORM persistence for returns, their single item, and the
    append-only payment/refund link tables.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - One item per return (uq_return_items_return_id).
    - ``version`` on return_items is bumped by every editor update and checked
      in the UPDATE's WHERE clause (optimistic locking).
    - Link rows are inserted once and never updated.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from returns_kernel.db.base import AuthoredBase, Base


class ReturnModel(AuthoredBase):
    """The return aggregate root row."""

    __tablename__ = "returns"

    currency_id: Mapped[str] = mapped_column(String(3), nullable=False)

    def __repr__(self) -> str:
        return f"<ReturnModel {self.id} ({self.currency_id})>"


class ReturnItemModel(AuthoredBase):
    """The returned item with its status and balance figures."""

    __tablename__ = "return_items"

    __table_args__ = (
        UniqueConstraint("return_id", name="uq_return_items_return_id"),
        Index("idx_return_items_status", "status_code"),
        Index("idx_return_items_order_item", "order_item_id"),
    )

    return_id: Mapped[UUID] = mapped_column(ForeignKey("returns.id"), nullable=False)
    order_item_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("order_items.id"), nullable=True
    )
    order_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("orders.id"), nullable=True
    )
    status_code: Mapped[int] = mapped_column(nullable=False)
    accepted: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    balance: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    remaining_balance: Mapped[Decimal] = mapped_column(
        nullable=False, default=Decimal("0")
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False, default="")
    returned_stock: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    returned_stock_location: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    version: Mapped[int] = mapped_column(nullable=False, default=0)

    def __repr__(self) -> str:
        return (
            f"<ReturnItemModel {self.id}: status={self.status_code} "
            f"remaining={self.remaining_balance}>"
        )


class ReturnPaymentModel(Base):
    """Link between a return and a payment taken against it."""

    __tablename__ = "return_payments"

    __table_args__ = (
        UniqueConstraint("return_id", "payment_id", name="uq_return_payments"),
    )

    return_id: Mapped[UUID] = mapped_column(ForeignKey("returns.id"), nullable=False)
    payment_id: Mapped[UUID] = mapped_column(ForeignKey("payments.id"), nullable=False)


class ReturnRefundModel(Base):
    """Link between a return and a refund given against it."""

    __tablename__ = "return_refunds"

    __table_args__ = (
        UniqueConstraint("return_id", "refund_id", name="uq_return_refunds"),
    )

    return_id: Mapped[UUID] = mapped_column(ForeignKey("returns.id"), nullable=False)
    refund_id: Mapped[UUID] = mapped_column(ForeignKey("refunds.id"), nullable=False)
