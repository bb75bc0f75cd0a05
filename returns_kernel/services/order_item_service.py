"""
Order item status propagation.

Writes a return-driven status code onto the originating order item and
appends a row to its status history, both through the shared transaction.
"""

from uuid import uuid4

from returns_kernel.db import statements
from returns_kernel.domain.entities import OrderItem
from returns_kernel.domain.ports import OrderItemStatusUpdater
from returns_kernel.domain.statuses import ReturnStatus
from returns_kernel.logging_config import get_logger
from returns_kernel.services.base import TransactionalService

logger = get_logger("services.order_item")


class OrderItemStatusService(TransactionalService, OrderItemStatusUpdater):
    """SQLAlchemy-backed ``OrderItemStatusUpdater``."""

    def update_status(self, order_item: OrderItem, status: ReturnStatus) -> None:
        code = int(status)

        self.transaction.run(statements.update_order_item_status(order_item.id, code))
        self.transaction.run(statements.insert_order_item_status(
            id=uuid4(),
            order_item_id=order_item.id,
            status_code=code,
            created_at=self._clock.now(),
            created_by=self._current_user.id,
        ))
        order_item.status = status

        logger.info("order_item_status_updated", extra={
            "order_item_id": str(order_item.id),
            "status_code": code,
        })
