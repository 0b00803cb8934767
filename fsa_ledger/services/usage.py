"""Usage aggregator - reporting reads over employees and their accounts"""

import uuid
from typing import List, Tuple

from fsa_ledger.domain.exceptions import NotFoundError
from fsa_ledger.domain.models import AccountUsage, AggregateUsage
from fsa_ledger.domain.usage import compute_aggregate_usage
from fsa_ledger.infrastructure.database.models import Employee, FSAAccount
from fsa_ledger.infrastructure.database.repositories import EmployeeRepository
from fsa_ledger.infrastructure.database.session import LedgerStore


class UsageAggregator:
    """
    Fleet-wide statistics and employee lookups.

    Reads take no locks; figures may trail concurrent allocations slightly.
    """

    def __init__(self, store: LedgerStore):
        self.store = store

    def compute_aggregate_usage(self) -> AggregateUsage:
        with self.store.read_session() as db:
            employees = EmployeeRepository(db).list_employees_with_accounts()
            usages = [
                AccountUsage(
                    annual_limit=account.annual_limit,
                    used_amount=account.used_amount,
                    status=account.status,
                )
                for employee in employees
                for account in employee.fsa_accounts
            ]
        return compute_aggregate_usage(len(employees), usages)

    def list_employees(self) -> List[Employee]:
        with self.store.read_session() as db:
            return EmployeeRepository(db).list_employees_with_accounts()

    def get_employee(self, employee_id: uuid.UUID) -> Employee:
        with self.store.read_session() as db:
            employee = EmployeeRepository(db).get_employee(employee_id)
        if employee is None:
            raise NotFoundError(f"Employee with ID {employee_id} not found")
        return employee

    def get_employee_by_number(self, employee_number: str) -> Employee:
        with self.store.read_session() as db:
            employee = EmployeeRepository(db).get_by_employee_number(employee_number)
        if employee is None:
            raise NotFoundError(f"Employee with employee number {employee_number} not found")
        return employee

    def get_employee_with_account(self, employee_id: uuid.UUID) -> Tuple[Employee, FSAAccount]:
        """Employee paired with its current account (newest plan year)"""
        employee = self.get_employee(employee_id)
        if not employee.fsa_accounts:
            raise NotFoundError(f"No FSA account found for employee {employee_id}")
        return employee, employee.fsa_accounts[0]
