"""FSA account endpoints: reads, allocation and administrative updates"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Request

from fsa_ledger.api.dependencies import (
    get_allocation_engine,
    get_lifecycle_manager,
    get_request_id,
    parse_uuid,
)
from fsa_ledger.api.errors import to_http_exception
from fsa_ledger.api.v1.schemas import AccountResponse, AccountUpdateRequest, AllocateRequest
from fsa_ledger.domain.exceptions import DomainException
from fsa_ledger.domain.models import AccountUpdate
from fsa_ledger.services.allocation import AllocationEngine
from fsa_ledger.services.lifecycle import AccountLifecycleManager

router = APIRouter(prefix="/v1")


@router.get("/fsa-accounts", response_model=List[AccountResponse])
def list_accounts(engine: AllocationEngine = Depends(get_allocation_engine)):
    return engine.list_accounts()


@router.get("/fsa-accounts/employee/{employee_id}", response_model=List[AccountResponse])
def list_accounts_for_employee(employee_id: str, engine: AllocationEngine = Depends(get_allocation_engine)):
    """Accounts owned by an employee, newest plan year first"""
    return engine.list_accounts_for_employee(parse_uuid(employee_id, "employee ID"))


@router.get("/fsa-accounts/employee/{employee_id}/active", response_model=Optional[AccountResponse])
def get_active_account_for_employee(employee_id: str, engine: AllocationEngine = Depends(get_allocation_engine)):
    """Employee's active account, or null when there is none"""
    return engine.find_active_account_for_employee(parse_uuid(employee_id, "employee ID"))


@router.get("/fsa-accounts/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: str,
    request: Request,
    engine: AllocationEngine = Depends(get_allocation_engine),
):
    """Retrieve one account with its transaction history"""
    account_uuid = parse_uuid(account_id, "account ID")
    try:
        return engine.get_account(account_uuid)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))


@router.post("/fsa-accounts/{account_id}/allocate", response_model=AccountResponse)
def allocate(
    account_id: str,
    request_body: AllocateRequest,
    request: Request,
    engine: AllocationEngine = Depends(get_allocation_engine),
):
    """
    Allocate funds to an FSA account.

    Flow:
    1. Validate amount (> 0, two decimal places)
    2. Lock account, check it is active and the annual limit holds
    3. Credit balance and append an approved transaction in one commit

    Returns:
        Updated account with full transaction history
    """
    account_uuid = parse_uuid(account_id, "account ID")
    try:
        return engine.allocate(account_uuid, request_body.amount, request_body.description)
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))


@router.patch("/fsa-accounts/{account_id}", response_model=AccountResponse)
def update_account(
    account_id: str,
    request_body: AccountUpdateRequest,
    request: Request,
    lifecycle: AccountLifecycleManager = Depends(get_lifecycle_manager),
):
    """Administrative status change (active / inactive / suspended)"""
    account_uuid = parse_uuid(account_id, "account ID")
    try:
        return lifecycle.update_account(account_uuid, AccountUpdate(status=request_body.status))
    except DomainException as e:
        raise to_http_exception(e, get_request_id(request))
