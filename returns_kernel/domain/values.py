"""Monetary value coercion.  Amounts are ``Decimal``; floats are refused."""

from decimal import Decimal, InvalidOperation
from typing import Any

from returns_kernel.exceptions import ValidationError


def to_amount(value: Any, field: str = "amount") -> Decimal:
    """
    Coerce ``value`` to a finite ``Decimal``.

    Raises:
        ValidationError: For floats, booleans, non-numeric or non-finite values.
    """
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, bool) or isinstance(value, float):
        raise ValidationError(
            f"{field} must be a Decimal, int or numeric string, got {type(value).__name__}",
            field=field,
        )
    else:
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            raise ValidationError(f"{field} is not a number: {value!r}", field=field) from None
    if not amount.is_finite():
        raise ValidationError(f"{field} must be finite, got {amount}", field=field)
    return amount
