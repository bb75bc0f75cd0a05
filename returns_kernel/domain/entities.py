"""
Return Domain Entities (``returns_kernel.domain.entities``).

Responsibility
--------------
In-memory shapes of the return aggregate and the order-side records it
references.  Unlike the kernel's DTOs these are deliberately mutable: the
``ReturnEditor`` mutates them first and persists second, so a failed
operation leaves them changed and the caller must discard them.

Invariants enforced
-------------------
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* An ``OrderReturn`` owns exactly one ``ReturnItem``.
* ``payments`` / ``refunds`` on a return are append-only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from returns_kernel.domain.authorship import Authorship
from returns_kernel.domain.statuses import ReturnStatus


@dataclass(frozen=True)
class StockLocation:
    """A named place returned stock is put back into."""
    name: str


@dataclass
class Payment:
    """Money received against a return."""
    method: str
    amount: Decimal
    currency_id: str
    reference: str | None = None
    id: UUID | None = None


@dataclass
class Refund:
    """Money given back against a return."""
    method: str
    amount: Decimal
    currency_id: str
    reason: str
    reference: str | None = None
    payment: Payment | None = None
    id: UUID | None = None


@dataclass
class OrderPayment:
    """Order-scoped mirror of a return payment."""
    order: Order
    payment: Payment
    id: UUID | None = None


@dataclass
class OrderRefund:
    """Order-scoped mirror of a return refund."""
    order: Order
    refund: Refund
    id: UUID | None = None


@dataclass
class Order:
    """The order a returned item was bought on."""
    id: UUID
    currency_id: str
    payments: list[OrderPayment] = field(default_factory=list)
    refunds: list[OrderRefund] = field(default_factory=list)


@dataclass
class OrderItem:
    """The order line a returned item came from."""
    id: UUID
    order_id: UUID
    status: ReturnStatus | int | None = None


@dataclass
class ReturnItem:
    """The returnable unit of a return."""
    id: UUID
    return_id: UUID
    reason: str = ""
    status: ReturnStatus = ReturnStatus.AWAITING_RETURN
    accepted: bool | None = None
    balance: Decimal = Decimal("0")
    remaining_balance: Decimal = Decimal("0")
    returned_stock: bool = False
    returned_stock_location: StockLocation | None = None
    order_item: OrderItem | None = None
    order: Order | None = None
    authorship: Authorship = field(default_factory=Authorship)
    version: int = 0

    @property
    def is_accepted(self) -> bool:
        return self.accepted is True

    @property
    def is_rejected(self) -> bool:
        return self.accepted is False

    @property
    def is_completed(self) -> bool:
        return self.status is ReturnStatus.RETURN_COMPLETED


@dataclass
class OrderReturn:
    """Aggregate root: one return wrapping exactly one item."""
    id: UUID
    currency_id: str
    item: ReturnItem
    authorship: Authorship = field(default_factory=Authorship)
    payments: list[Payment] = field(default_factory=list)
    refunds: list[Refund] = field(default_factory=list)

    def __repr__(self) -> str:
        return (
            f"<OrderReturn {self.id}: status={self.item.status.name} "
            f"balance={self.item.balance} remaining={self.item.remaining_balance}>"
        )
