"""
Settlement assessment.

Pure decision of what a new remaining balance means for the return.  The
editor acts on the outcome; keeping the decision here makes the
auto-completion side effect of every balance write visible and testable on
its own.
"""

from decimal import Decimal
from enum import Enum


class SettlementOutcome(str, Enum):
    """What the editor must do after a remaining-balance write."""

    SETTLED = "settled"  # Nothing outstanding: complete the return
    STILL_OWING = "still_owing"  # Balance outstanding (either direction)


def assess_remaining_balance(remaining_balance: Decimal) -> SettlementOutcome:
    """Return SETTLED iff the remaining balance is exactly zero."""
    if Decimal(remaining_balance) == 0:
        return SettlementOutcome.SETTLED
    return SettlementOutcome.STILL_OWING
