"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

ACCOUNT_TYPE_DCFSA = "DCFSA"

# Account status
STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"
STATUS_SUSPENDED = "suspended"
ACCOUNT_STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE, STATUS_SUSPENDED)

# Transaction type / status
TRANSACTION_CREDIT = "credit"
TRANSACTION_DEBIT = "debit"
TRANSACTION_PENDING = "pending"
TRANSACTION_APPROVED = "approved"
TRANSACTION_REJECTED = "rejected"


@dataclass
class PlanYear:
    """Inclusive date bounds of a benefits plan year"""

    start: date
    end: date


@dataclass
class AccountUsage:
    """Read-only view of the account fields the usage fold needs"""

    annual_limit: Decimal
    used_amount: Decimal
    status: str


@dataclass
class AggregateUsage:
    """Fleet-wide usage snapshot, computed on demand"""

    total_employees: int
    total_annual_limit: Decimal
    total_used_amount: Decimal
    total_remaining_balance: Decimal
    average_usage_percentage: Decimal
    active_accounts: int
    inactive_accounts: int


@dataclass
class AccountUpdate:
    """Administrative update command; None leaves a field untouched"""

    status: Optional[str] = None


@dataclass
class EmployeeDraft:
    """New employee details submitted at onboarding"""

    first_name: str
    last_name: str
    email: str
    employee_number: str
    hire_date: date
    department: Optional[str] = None
