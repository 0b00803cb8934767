"""Integration tests for account creation, onboarding and status changes"""

import uuid
import pytest
from datetime import date
from decimal import Decimal
from sqlalchemy import event, func, select
from sqlalchemy.exc import OperationalError

from fsa_ledger.domain.exceptions import (
    ConflictError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
    StorageFailureError,
)
from fsa_ledger.domain.models import AccountUpdate, EmployeeDraft
from fsa_ledger.infrastructure.database.models import Employee, FSAAccount
from fsa_ledger.services.lifecycle import AccountLifecycleManager
from fsa_ledger.utils.date_utils import today_in


def _draft(suffix: str = "001") -> EmployeeDraft:
    return EmployeeDraft(
        first_name="Riley",
        last_name="Morgan",
        email=f"riley.{suffix}@example.com",
        employee_number=f"E-{suffix}",
        hire_date=date(2024, 2, 12),
        department="Finance",
    )


def _count(store, model) -> int:
    with store.read_session() as db:
        return db.execute(select(func.count()).select_from(model)).scalar_one()


def test_onboard_creates_employee_and_default_account(lifecycle):
    account = lifecycle.onboard_employee(_draft())

    year = today_in("UTC").year
    assert account.annual_limit == Decimal("5000.00")
    assert account.current_balance == Decimal("0.00")
    assert account.used_amount == Decimal("0.00")
    assert account.status == "active"
    assert account.account_type == "DCFSA"
    assert account.plan_year_start == date(year, 1, 1)
    assert account.plan_year_end == date(year, 12, 31)
    assert account.employee.email == "riley.001@example.com"
    assert account.transactions == []


def test_onboard_duplicate_email_conflicts(lifecycle, store):
    lifecycle.onboard_employee(_draft("001"))

    duplicate = _draft("002")
    duplicate.email = "riley.001@example.com"
    with pytest.raises(ConflictError):
        lifecycle.onboard_employee(duplicate)

    assert _count(store, Employee) == 1
    assert _count(store, FSAAccount) == 1


def test_onboard_is_all_or_nothing(lifecycle, store):
    """Account insert failure rolls the new employee back too"""

    def fail_account_insert(session, flush_context, instances):
        if any(isinstance(obj, FSAAccount) for obj in session.new):
            raise OperationalError("INSERT INTO fsa_accounts", {}, Exception("disk I/O error"))

    event.listen(store.session_factory, "before_flush", fail_account_insert)
    try:
        with pytest.raises(StorageFailureError):
            lifecycle.onboard_employee(_draft())
    finally:
        event.remove(store.session_factory, "before_flush", fail_account_insert)

    assert _count(store, Employee) == 0
    assert _count(store, FSAAccount) == 0


def test_create_account_for_unknown_employee(lifecycle):
    with pytest.raises(NotFoundError):
        lifecycle.create_account(uuid.uuid4())


def test_create_account_rejects_second_active_account(lifecycle):
    account = lifecycle.onboard_employee(_draft())

    with pytest.raises(InvalidStateError, match="already has an active account"):
        lifecycle.create_account(account.employee_id)


def test_create_account_after_previous_deactivated(lifecycle, store):
    first = lifecycle.onboard_employee(_draft())
    lifecycle.update_account(first.id, AccountUpdate(status="inactive"))

    second = lifecycle.create_account(first.employee_id)

    assert second.id != first.id
    assert second.status == "active"
    assert second.employee_id == first.employee_id
    assert _count(store, FSAAccount) == 2


def test_create_account_uses_configured_limit(store):
    manager = AccountLifecycleManager(store, default_annual_limit=Decimal("2500.00"), timezone="UTC")
    account = manager.onboard_employee(_draft())
    assert account.annual_limit == Decimal("2500.00")


@pytest.mark.parametrize("status", ["inactive", "suspended"])
def test_status_transitions_round_trip(lifecycle, status):
    account = lifecycle.onboard_employee(_draft())

    changed = lifecycle.update_account(account.id, AccountUpdate(status=status))
    assert changed.status == status

    restored = lifecycle.update_account(account.id, AccountUpdate(status="active"))
    assert restored.status == "active"


def test_update_with_no_fields_is_a_no_op(lifecycle):
    account = lifecycle.onboard_employee(_draft())

    unchanged = lifecycle.update_account(account.id, AccountUpdate())

    assert unchanged.status == "active"
    assert unchanged.current_balance == account.current_balance


def test_update_rejects_unknown_status(lifecycle):
    account = lifecycle.onboard_employee(_draft())
    with pytest.raises(InvalidArgumentError) as exc_info:
        lifecycle.update_account(account.id, AccountUpdate(status="closed"))
    assert exc_info.value.field == "status"


def test_update_unknown_account(lifecycle):
    with pytest.raises(NotFoundError):
        lifecycle.update_account(uuid.uuid4(), AccountUpdate(status="inactive"))


def test_reactivation_blocked_by_other_active_account(lifecycle):
    first = lifecycle.onboard_employee(_draft())
    lifecycle.update_account(first.id, AccountUpdate(status="suspended"))
    lifecycle.create_account(first.employee_id)

    with pytest.raises(InvalidStateError):
        lifecycle.update_account(first.id, AccountUpdate(status="active"))


def test_suspended_account_rejects_allocation_until_reactivated(lifecycle, engine):
    account = lifecycle.onboard_employee(_draft())
    lifecycle.update_account(account.id, AccountUpdate(status="suspended"))

    with pytest.raises(InvalidStateError):
        engine.allocate(account.id, 100)

    lifecycle.update_account(account.id, AccountUpdate(status="active"))
    assert engine.allocate(account.id, 100).current_balance == Decimal("100.00")


def _active_accounts(store, employee_id) -> int:
    with store.read_session() as db:
        return db.execute(
            select(func.count())
            .select_from(FSAAccount)
            .where(FSAAccount.employee_id == employee_id, FSAAccount.status == "active")
        ).scalar_one()


def test_reactivation_loses_to_concurrent_account_creation(lifecycle, store, load_account):
    """A new account commits between the reactivation's check and its write"""
    account = lifecycle.onboard_employee(_draft())
    lifecycle.update_account(account.id, AccountUpdate(status="suspended"))
    created = []

    def create_competing_account(session, flush_context, instances):
        created.append(lifecycle.create_account(account.employee_id))

    event.listen(store.session_factory, "before_flush", create_competing_account, once=True)

    with pytest.raises(InvalidStateError):
        lifecycle.update_account(account.id, AccountUpdate(status="active"))

    assert len(created) == 1
    assert _active_accounts(store, account.employee_id) == 1
    assert load_account(account.id).status == "suspended"


def test_account_creation_loses_to_concurrent_reactivation(lifecycle, store, load_account):
    """A suspended account is reactivated between the creation's check and its insert"""
    account = lifecycle.onboard_employee(_draft())
    lifecycle.update_account(account.id, AccountUpdate(status="suspended"))
    reactivated = []

    def reactivate_competing_account(session, flush_context, instances):
        reactivated.append(lifecycle.update_account(account.id, AccountUpdate(status="active")))

    event.listen(store.session_factory, "before_flush", reactivate_competing_account, once=True)

    with pytest.raises(InvalidStateError):
        lifecycle.create_account(account.employee_id)

    assert reactivated[0].status == "active"
    assert _active_accounts(store, account.employee_id) == 1
    assert _count(store, FSAAccount) == 1
