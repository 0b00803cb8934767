"""Allocation rules - validation applied before any balance mutation"""

from decimal import Decimal, InvalidOperation
from typing import Any

from fsa_ledger.domain.exceptions import InvalidArgumentError, InvalidStateError, LimitExceededError
from fsa_ledger.domain.models import STATUS_ACTIVE

CENT = Decimal("0.01")


def parse_amount(amount: Any) -> Decimal:
    """
    Coerce an allocation amount to a two-place Decimal.

    Accepts Decimal, int, or numeric strings. Floats go through str() so
    that 0.1 becomes Decimal("0.1") rather than its binary expansion.

    Raises:
        InvalidArgumentError: non-numeric, non-finite, zero or negative,
            or more than two fractional digits
    """
    if isinstance(amount, bool):
        raise InvalidArgumentError("amount", "Amount must be a number")
    if isinstance(amount, float):
        amount = str(amount)
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InvalidArgumentError("amount", "Amount must be a number") from e

    if not value.is_finite():
        raise InvalidArgumentError("amount", "Amount must be a finite number")
    if value <= 0:
        raise InvalidArgumentError("amount", "Amount must be greater than 0")
    if value.normalize().as_tuple().exponent < -2:
        raise InvalidArgumentError("amount", "Amount cannot have more than two decimal places")

    try:
        return value.quantize(CENT)
    except InvalidOperation as e:
        raise InvalidArgumentError("amount", "Amount is too large") from e


def check_allocatable(status: str, current_balance: Decimal, annual_limit: Decimal, amount: Decimal) -> None:
    """
    Verify an account in the given state can accept the allocation.

    Must be called against freshly locked account state.
    """
    if status != STATUS_ACTIVE:
        raise InvalidStateError("Cannot allocate to inactive account")

    if current_balance + amount > annual_limit:
        raise LimitExceededError(
            current_balance=current_balance,
            annual_limit=annual_limit,
            attempted_amount=amount,
        )


def default_description(amount: Decimal) -> str:
    """Label used when the caller gives no description"""
    return f"Allocation of ${amount:.2f}"
