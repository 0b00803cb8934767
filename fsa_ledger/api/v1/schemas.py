"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, UUID4


class AllocateRequest(BaseModel):
    """Request body for POST /v1/fsa-accounts/{id}/allocate"""

    # Range checks happen in the allocation engine so every caller gets the same errors
    amount: Decimal = Field(..., description="Amount in dollars to allocate")
    description: Optional[str] = Field(None, max_length=500, description="Ledger label")


class AccountUpdateRequest(BaseModel):
    """Request body for PATCH /v1/fsa-accounts/{id}"""

    status: Optional[str] = Field(None, description="active | inactive | suspended")


class OnboardEmployeeRequest(BaseModel):
    """Request body for POST /v1/employees"""

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    employee_number: str = Field(..., min_length=1, description="Employer-issued identifier")
    hire_date: date
    department: Optional[str] = None


class TransactionSchema(BaseModel):
    """Single ledger entry"""

    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    amount: Decimal
    description: str
    transaction_date: datetime
    transaction_type: str
    category: Optional[str] = None
    status: str
    created_at: datetime


class EmployeeSummary(BaseModel):
    """Employee fields embedded in account responses"""

    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    first_name: str
    last_name: str
    email: str
    employee_number: str
    department: Optional[str] = None


class AccountSummary(BaseModel):
    """FSA account without its history"""

    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    employee_id: UUID4
    account_type: str
    annual_limit: Decimal
    current_balance: Decimal
    used_amount: Decimal
    plan_year_start: date
    plan_year_end: date
    status: str
    created_at: datetime
    updated_at: datetime


class AccountResponse(AccountSummary):
    """FSA account with employee and full transaction history"""

    employee: EmployeeSummary
    transactions: List[TransactionSchema]


class EmployeeResponse(EmployeeSummary):
    """Employee with every FSA account, newest plan year first"""

    hire_date: date
    created_at: datetime
    updated_at: datetime
    fsa_accounts: List[AccountSummary]


class EmployeeWithAccountResponse(EmployeeResponse):
    """Response for GET /v1/employees/{id}/account"""

    fsa_account: AccountSummary


class AggregateUsageResponse(BaseModel):
    """Response for GET /v1/employees/aggregate/usage"""

    model_config = ConfigDict(from_attributes=True)

    total_employees: int
    total_annual_limit: Decimal
    total_used_amount: Decimal
    total_remaining_balance: Decimal
    average_usage_percentage: Decimal
    active_accounts: int
    inactive_accounts: int
