"""
Module: returns_kernel.models.payment
Responsibility: ORM persistence for payments and refunds recorded against
    returns.  Rows are inserted by the payment/refund creators and never
    updated by the kernel.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from returns_kernel.db.base import Base, UUIDString


class PaymentModel(Base):
    """A payment taken from a customer."""

    __tablename__ = "payments"

    method: Mapped[str] = mapped_column(String(50), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    currency_id: Mapped[str] = mapped_column(String(3), nullable=False)
    reference: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    created_by: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    def __repr__(self) -> str:
        return f"<PaymentModel {self.id}: {self.amount} {self.currency_id} via {self.method}>"


class RefundModel(Base):
    """A refund given to a customer, optionally against an earlier payment."""

    __tablename__ = "refunds"

    __table_args__ = (
        Index("idx_refunds_payment_id", "payment_id"),
    )

    method: Mapped[str] = mapped_column(String(50), nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    currency_id: Mapped[str] = mapped_column(String(3), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False, default="")
    reference: Mapped[str | None] = mapped_column(String(255), nullable=True)
    payment_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("payments.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    created_by: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    def __repr__(self) -> str:
        return f"<RefundModel {self.id}: {self.amount} {self.currency_id} via {self.method}>"
