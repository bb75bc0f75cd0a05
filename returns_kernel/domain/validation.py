"""
Return validation strategies.

The editor calls a ``ReturnValidator`` after mutating a return in memory and
before any balance- or stock-affecting write.  Raising ``ValidationError``
aborts the operation before anything is persisted.

``PermissiveValidator`` is the default and accepts everything.
``RuleBasedValidator`` enforces the rules switched on in ``ValidationRules``
(usually loaded from configuration).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from returns_kernel.domain.entities import OrderReturn
from returns_kernel.exceptions import ValidationError
from returns_kernel.logging_config import get_logger

logger = get_logger("domain.validation")


class ReturnValidator(ABC):
    """Strategy checked before balance- and stock-affecting writes."""

    @abstractmethod
    def validate(self, order_return: OrderReturn) -> None:
        """Raise ``ValidationError`` if the return may not be persisted."""
        ...


class PermissiveValidator(ReturnValidator):
    """Accepts every return."""

    def validate(self, order_return: OrderReturn) -> None:
        return None


@dataclass(frozen=True)
class ValidationRules:
    """Which domain rules a ``RuleBasedValidator`` enforces."""
    non_negative_remaining_balance: bool = False
    remaining_balance_within_balance: bool = False
    require_acceptance_before_settlement: bool = False
    require_stock_location: bool = False

    @property
    def any_enabled(self) -> bool:
        return any((
            self.non_negative_remaining_balance,
            self.remaining_balance_within_balance,
            self.require_acceptance_before_settlement,
            self.require_stock_location,
        ))


class RuleBasedValidator(ReturnValidator):
    """Validator driven by a ``ValidationRules`` set."""

    def __init__(self, rules: ValidationRules):
        self._rules = rules

    @property
    def rules(self) -> ValidationRules:
        return self._rules

    def validate(self, order_return: OrderReturn) -> None:
        item = order_return.item
        rules = self._rules

        if rules.non_negative_remaining_balance and item.remaining_balance < 0:
            self._reject(
                order_return,
                "remaining_balance",
                f"Remaining balance {item.remaining_balance} is negative",
            )

        if (
            rules.remaining_balance_within_balance
            and item.remaining_balance > item.balance
        ):
            self._reject(
                order_return,
                "remaining_balance",
                f"Remaining balance {item.remaining_balance} exceeds "
                f"balance {item.balance}",
            )

        # A remaining balance that differs from the baseline means money has
        # moved against the return.
        if (
            rules.require_acceptance_before_settlement
            and item.remaining_balance != item.balance
            and not item.is_accepted
        ):
            self._reject(
                order_return,
                "accepted",
                "Return must be accepted before its balance is settled",
            )

        if (
            rules.require_stock_location
            and item.returned_stock
            and item.returned_stock_location is None
        ):
            self._reject(
                order_return,
                "returned_stock_location",
                "Returned stock requires a stock location",
            )

    def _reject(self, order_return: OrderReturn, field: str, message: str) -> None:
        logger.info(
            "return_validation_failed",
            extra={"return_id": str(order_return.id), "field": field},
        )
        raise ValidationError(message, field=field)


def build_validator(rules: ValidationRules | None) -> ReturnValidator:
    """Permissive unless at least one rule is switched on."""
    if rules is None or not rules.any_enabled:
        return PermissiveValidator()
    return RuleBasedValidator(rules)
