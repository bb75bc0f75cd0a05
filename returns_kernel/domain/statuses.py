"""
Return status codes.

Closed set of codes shared between return items and the order items they
came from.  Codes are stable integers because they are persisted in both
``return_items.status_code`` and ``order_items.status_code``.
"""

from enum import IntEnum


class ReturnStatus(IntEnum):
    """Return lifecycle states.

    Contract: AWAITING_RETURN -> RETURN_RECEIVED -> RETURN_COMPLETED.
    RETURN_COMPLETED is also reachable from any state once the remaining
    balance reaches zero.
    """

    AWAITING_RETURN = 2000
    RETURN_RECEIVED = 2100
    RETURN_COMPLETED = 2200

    @property
    def is_terminal(self) -> bool:
        return self is ReturnStatus.RETURN_COMPLETED
