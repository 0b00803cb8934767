"""Usage aggregation - fleet-wide statistics folded over account rows"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from fsa_ledger.domain.models import AccountUsage, AggregateUsage, STATUS_ACTIVE

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def compute_aggregate_usage(total_employees: int, accounts: Iterable[AccountUsage]) -> AggregateUsage:
    """
    Fold account rows into an AggregateUsage snapshot.

    Requirements:
    - Totals of annual limit and used amount across every account
    - Remaining balance = total limit - total used (may go negative)
    - Average usage % is the arithmetic mean over accounts with a positive
      limit, not weighted by limit; 0 when there are none
    - Any status other than active counts as inactive (suspended included)

    Example:
        limits {100, 200, 0}, used {50, 50, 0}
        usage % = 50, 25 (zero-limit account skipped) -> average 37.5
    """
    total_limit = ZERO
    total_used = ZERO
    active = 0
    inactive = 0
    usage_sum = ZERO
    usage_count = 0

    for account in accounts:
        total_limit += account.annual_limit
        total_used += account.used_amount

        if account.status == STATUS_ACTIVE:
            active += 1
        else:
            inactive += 1

        if account.annual_limit > 0:
            usage_sum += account.used_amount / account.annual_limit * HUNDRED
            usage_count += 1

    average = usage_sum / usage_count if usage_count else ZERO

    return AggregateUsage(
        total_employees=total_employees,
        total_annual_limit=total_limit,
        total_used_amount=total_used,
        total_remaining_balance=total_limit - total_used,
        average_usage_percentage=average.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
        active_accounts=active,
        inactive_accounts=inactive,
    )
