"""Employee endpoints: onboarding, lookups and the aggregate usage report"""

from typing import List
from fastapi import APIRouter, Depends, Request

from fsa_ledger.api.dependencies import (
    get_lifecycle_manager,
    get_request_id,
    get_usage_aggregator,
    parse_uuid,
)
from fsa_ledger.api.errors import to_http_exception
from fsa_ledger.api.v1.schemas import (
    AccountResponse,
    AccountSummary,
    AggregateUsageResponse,
    EmployeeResponse,
    EmployeeWithAccountResponse,
    OnboardEmployeeRequest,
)
from fsa_ledger.domain.exceptions import DomainException
from fsa_ledger.domain.models import EmployeeDraft
from fsa_ledger.services.lifecycle import AccountLifecycleManager
from fsa_ledger.services.usage import UsageAggregator

router = APIRouter(prefix="/v1")


@router.get("/employees/aggregate/usage", response_model=AggregateUsageResponse)
def get_aggregate_usage(aggregator: UsageAggregator = Depends(get_usage_aggregator)):
    """
    Fleet-wide FSA usage.

    Returns:
        Totals across all accounts, mean usage % over accounts with a
        positive limit, and active/inactive account counts
    """
    return aggregator.compute_aggregate_usage()


@router.get("/employees", response_model=List[EmployeeResponse])
def list_employees(aggregator: UsageAggregator = Depends(get_usage_aggregator)):
    return aggregator.list_employees()


@router.post("/employees", response_model=AccountResponse, status_code=201)
def onboard_employee(
    request_body: OnboardEmployeeRequest,
    request: Request,
    lifecycle: AccountLifecycleManager = Depends(get_lifecycle_manager),
):
    """Create an employee and its first FSA account together"""
    draft = EmployeeDraft(
        first_name=request_body.first_name,
        last_name=request_body.last_name,
        email=request_body.email,
        employee_number=request_body.employee_number,
        hire_date=request_body.hire_date,
        department=request_body.department,
    )
    try:
        return lifecycle.onboard_employee(draft)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))


@router.get("/employees/by-employee-number/{employee_number}", response_model=EmployeeResponse)
def get_employee_by_number(
    employee_number: str,
    request: Request,
    aggregator: UsageAggregator = Depends(get_usage_aggregator),
):
    try:
        return aggregator.get_employee_by_number(employee_number)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))


@router.get("/employees/{employee_id}", response_model=EmployeeResponse)
def get_employee(
    employee_id: str,
    request: Request,
    aggregator: UsageAggregator = Depends(get_usage_aggregator),
):
    employee_uuid = parse_uuid(employee_id, "employee ID")
    try:
        return aggregator.get_employee(employee_uuid)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))


@router.get("/employees/{employee_id}/account", response_model=EmployeeWithAccountResponse)
def get_employee_with_account(
    employee_id: str,
    request: Request,
    aggregator: UsageAggregator = Depends(get_usage_aggregator),
):
    """Employee together with its current FSA account"""
    employee_uuid = parse_uuid(employee_id, "employee ID")
    try:
        employee, account = aggregator.get_employee_with_account(employee_uuid)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))

    return EmployeeWithAccountResponse(
        **EmployeeResponse.model_validate(employee).model_dump(),
        fsa_account=AccountSummary.model_validate(account),
    )


@router.post("/employees/{employee_id}/fsa-accounts", response_model=AccountResponse, status_code=201)
def create_account(
    employee_id: str,
    request: Request,
    lifecycle: AccountLifecycleManager = Depends(get_lifecycle_manager),
):
    """Open a DCFSA account for the current plan year"""
    employee_uuid = parse_uuid(employee_id, "employee ID")
    try:
        return lifecycle.create_account(employee_uuid)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
