"""Integration tests for the usage aggregator and employee lookups"""

import uuid
import pytest
from datetime import date
from decimal import Decimal

from fsa_ledger.domain.exceptions import NotFoundError
from fsa_ledger.domain.models import EmployeeDraft
from fsa_ledger.infrastructure.database.repositories import EmployeeRepository


def test_aggregate_usage_over_store(aggregator, make_account):
    make_account(annual_limit="100.00", used_amount="50.00")
    make_account(annual_limit="200.00", used_amount="50.00", status="inactive")
    make_account(annual_limit="0.00", used_amount="0.00", status="suspended")

    snapshot = aggregator.compute_aggregate_usage()

    assert snapshot.total_employees == 3
    assert snapshot.total_annual_limit == Decimal("300.00")
    assert snapshot.total_used_amount == Decimal("100.00")
    assert snapshot.total_remaining_balance == Decimal("200.00")
    assert snapshot.average_usage_percentage == Decimal("37.50")
    assert snapshot.active_accounts == 1
    assert snapshot.inactive_accounts == 2


def test_aggregate_usage_empty_store(aggregator):
    snapshot = aggregator.compute_aggregate_usage()

    assert snapshot.total_employees == 0
    assert snapshot.average_usage_percentage == Decimal("0.00")


def test_allocations_do_not_change_used_amount(aggregator, engine, make_account):
    """Allocated-to-date and spent are tracked separately"""
    account_id = make_account(annual_limit="1000.00", used_amount="100.00")
    engine.allocate(account_id, 500)

    snapshot = aggregator.compute_aggregate_usage()

    assert snapshot.total_used_amount == Decimal("100.00")
    assert snapshot.average_usage_percentage == Decimal("10.00")


def test_employee_lookups(aggregator, lifecycle):
    account = lifecycle.onboard_employee(
        EmployeeDraft(
            first_name="Sam",
            last_name="Okafor",
            email="sam@example.com",
            employee_number="E-42",
            hire_date=date(2022, 9, 1),
        )
    )

    employee = aggregator.get_employee(account.employee_id)
    assert employee.employee_number == "E-42"
    assert [a.id for a in employee.fsa_accounts] == [account.id]

    assert aggregator.get_employee_by_number("E-42").id == employee.id
    assert [e.id for e in aggregator.list_employees()] == [employee.id]

    found_employee, found_account = aggregator.get_employee_with_account(employee.id)
    assert found_employee.id == employee.id
    assert found_account.id == account.id


def test_employee_without_account(aggregator, store):
    with store.transaction() as db:
        employee = EmployeeRepository(db).create_employee(
            EmployeeDraft(
                first_name="Lee",
                last_name="Park",
                email="lee@example.com",
                employee_number="E-7",
                hire_date=date(2021, 1, 4),
            )
        )

    with pytest.raises(NotFoundError, match="No FSA account"):
        aggregator.get_employee_with_account(employee.id)


def test_employee_not_found(aggregator):
    with pytest.raises(NotFoundError):
        aggregator.get_employee(uuid.uuid4())
    with pytest.raises(NotFoundError):
        aggregator.get_employee_by_number("missing")
    with pytest.raises(NotFoundError):
        aggregator.get_employee_with_account(uuid.uuid4())
