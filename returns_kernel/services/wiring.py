"""
Wiring -- composes the editor with its SQLAlchemy-backed collaborators.

Usage:
    config = get_active_config()
    bootstrap(config)
    with session_scope() as session:
        editor = build_return_editor(
            session, current_user, config, caller_owns_transaction=True,
        )
        order_return = ReturnSelector(session).get(return_id)
        editor.mark_received(order_return)
"""

from __future__ import annotations

import logging

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from returns_config.schema import ReturnsConfig
from returns_kernel.db.engine import init_engine_from_url
from returns_kernel.domain.clock import Clock, SystemClock
from returns_kernel.domain.ports import CurrentUser
from returns_kernel.domain.validation import build_validator
from returns_kernel.logging_config import configure_logging
from returns_kernel.services.order_item_service import OrderItemStatusService
from returns_kernel.services.payment_service import (
    OrderPaymentCreateService,
    OrderRefundCreateService,
    PaymentCreateService,
    RefundCreateService,
)
from returns_kernel.services.return_editor import ReturnEditor
from returns_kernel.services.transaction import SessionTransaction


def bootstrap(config: ReturnsConfig) -> Engine:
    """Configure logging and the engine from ``config``."""
    configure_logging(level=getattr(logging, config.logging.level))
    return init_engine_from_url(
        config.database.url,
        echo=config.database.echo,
        pool_size=config.database.pool_size,
        max_overflow=config.database.max_overflow,
    )


def build_return_editor(
    session: Session,
    current_user: CurrentUser,
    config: ReturnsConfig | None = None,
    clock: Clock | None = None,
    caller_owns_transaction: bool = False,
) -> ReturnEditor:
    """Build a ``ReturnEditor`` whose every write goes through ``session``."""
    config = config or ReturnsConfig()
    clock = clock or SystemClock()
    transaction = SessionTransaction(session)

    def collaborator(cls):
        return cls(current_user, clock=clock, transaction=transaction)

    return ReturnEditor(
        transaction=transaction,
        current_user=current_user,
        item_status_updater=collaborator(OrderItemStatusService),
        payment_creator=collaborator(PaymentCreateService),
        order_payment_creator=collaborator(OrderPaymentCreateService),
        refund_creator=collaborator(RefundCreateService),
        order_refund_creator=collaborator(OrderRefundCreateService),
        validator=build_validator(config.rules),
        clock=clock,
        caller_owns_transaction=caller_owns_transaction,
        refund_reason_prefix=config.refund_reason_prefix,
        require_order_item_for_cascade=config.require_order_item_for_cascade,
    )
