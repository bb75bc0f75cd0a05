"""
Collaborator contracts consumed by the ``ReturnEditor``.

The host system implements these; ``returns_kernel.services`` ships the
SQLAlchemy-backed implementations.  Every collaborator that writes is
``Transactional``: the editor hands it the shared transaction before each
composite operation so all writes of one logical action land in the same
atomic unit.
"""

from abc import ABC, abstractmethod
from typing import Any, Protocol, runtime_checkable
from uuid import UUID

from returns_kernel.domain.entities import (
    OrderItem,
    OrderPayment,
    OrderRefund,
    Payment,
    Refund,
)
from returns_kernel.domain.statuses import ReturnStatus


class Transaction(ABC):
    """
    A unit of work against storage.

    Contract:
        - ``run`` executes one statement and returns the number of rows it
          affected.  On failure the implementation rolls back and raises
          ``PersistenceError``.
        - ``commit`` makes every statement run so far durable.
    """

    @abstractmethod
    def run(self, statement: Any, parameters: dict[str, Any] | None = None) -> int:
        ...

    @abstractmethod
    def commit(self) -> None:
        ...

    @abstractmethod
    def rollback(self) -> None:
        ...


@runtime_checkable
class CurrentUser(Protocol):
    """The identity every authorship stamp is attributed to."""

    @property
    def id(self) -> UUID | None: ...


class Transactional(ABC):
    """Collaborator that writes through a caller-supplied transaction."""

    @abstractmethod
    def set_transaction(self, transaction: Transaction) -> None:
        ...


class OrderItemStatusUpdater(Transactional):
    @abstractmethod
    def update_status(self, order_item: OrderItem, status: ReturnStatus) -> None:
        """Propagate a return status code onto the originating order item."""
        ...


class PaymentCreator(Transactional):
    @abstractmethod
    def create(self, payment: Payment) -> Payment:
        """Persist ``payment`` and assign its ``id``."""
        ...


class RefundCreator(Transactional):
    @abstractmethod
    def create(self, refund: Refund) -> Refund:
        """Persist ``refund`` and assign its ``id``."""
        ...


class OrderPaymentCreator(Transactional):
    @abstractmethod
    def create(self, order_payment: OrderPayment) -> OrderPayment:
        """Persist the order-scoped mirror of a payment."""
        ...


class OrderRefundCreator(Transactional):
    @abstractmethod
    def create(self, order_refund: OrderRefund) -> OrderRefund:
        """Persist the order-scoped mirror of a refund."""
        ...
