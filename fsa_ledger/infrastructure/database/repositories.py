"""Data access layer for employees, FSA accounts and ledger transactions"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session, selectinload

from fsa_ledger.domain.models import (
    ACCOUNT_TYPE_DCFSA,
    STATUS_ACTIVE,
    TRANSACTION_APPROVED,
    TRANSACTION_CREDIT,
    EmployeeDraft,
    PlanYear,
)
from fsa_ledger.infrastructure.database.models import Employee, FSAAccount, Transaction


class EmployeeRepository:
    """Repository for employees"""

    def __init__(self, db: Session):
        self.db = db

    def create_employee(self, draft: EmployeeDraft) -> Employee:
        """Stage a new employee and flush to obtain its ID"""
        employee = Employee(
            first_name=draft.first_name,
            last_name=draft.last_name,
            email=draft.email,
            employee_number=draft.employee_number,
            department=draft.department,
            hire_date=draft.hire_date,
        )
        self.db.add(employee)
        self.db.flush()  # Get ID without committing
        return employee

    def get_employee(self, employee_id: uuid.UUID) -> Optional[Employee]:
        return self.db.execute(
            select(Employee)
            .where(Employee.id == employee_id)
            .options(selectinload(Employee.fsa_accounts))
        ).scalar_one_or_none()

    def lock_employee(self, employee_id: uuid.UUID) -> Optional[Employee]:
        """Load an employee row locked against concurrent account creation"""
        return self.db.execute(
            select(Employee).where(Employee.id == employee_id).with_for_update()
        ).scalar_one_or_none()

    def get_by_employee_number(self, employee_number: str) -> Optional[Employee]:
        return self.db.execute(
            select(Employee)
            .where(Employee.employee_number == employee_number)
            .options(selectinload(Employee.fsa_accounts))
        ).scalar_one_or_none()

    def find_duplicate(self, email: str, employee_number: str) -> Optional[Employee]:
        """Existing employee sharing the email or the employee number"""
        return self.db.execute(
            select(Employee)
            .where(or_(Employee.email == email, Employee.employee_number == employee_number))
            .limit(1)
        ).scalar_one_or_none()

    def list_employees_with_accounts(self) -> List[Employee]:
        return list(
            self.db.execute(
                select(Employee)
                .options(selectinload(Employee.fsa_accounts))
                .order_by(Employee.last_name, Employee.first_name)
            ).scalars()
        )


class AccountRepository:
    """Repository for FSA accounts"""

    def __init__(self, db: Session):
        self.db = db

    def create_account(
        self,
        employee_id: uuid.UUID,
        annual_limit: Decimal,
        plan_year: PlanYear,
    ) -> FSAAccount:
        """Stage a new active account with zero balances"""
        account = FSAAccount(
            employee_id=employee_id,
            account_type=ACCOUNT_TYPE_DCFSA,
            annual_limit=annual_limit,
            current_balance=Decimal("0.00"),
            used_amount=Decimal("0.00"),
            plan_year_start=plan_year.start,
            plan_year_end=plan_year.end,
            status=STATUS_ACTIVE,
        )
        self.db.add(account)
        self.db.flush()
        return account

    def load_relations(self, account: FSAAccount) -> FSAAccount:
        """Load employee and transaction history so they stay readable once detached"""
        _ = account.employee
        _ = account.transactions
        return account

    def lock_account(self, account_id: uuid.UUID) -> Optional[FSAAccount]:
        """
        Load an account with a row-level lock held until the transaction ends.

        populate_existing overwrites anything already in the identity map so
        validation always sees the committed row.
        """
        return self.db.execute(
            select(FSAAccount)
            .where(FSAAccount.id == account_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_employee_id(self, account_id: uuid.UUID) -> Optional[uuid.UUID]:
        """Owning employee of an account, read without locking"""
        return self.db.execute(
            select(FSAAccount.employee_id).where(FSAAccount.id == account_id)
        ).scalar_one_or_none()

    def get_account(self, account_id: uuid.UUID) -> Optional[FSAAccount]:
        """Fetch account with employee and transaction history"""
        return self.db.execute(
            select(FSAAccount)
            .where(FSAAccount.id == account_id)
            .options(selectinload(FSAAccount.employee), selectinload(FSAAccount.transactions))
        ).scalar_one_or_none()

    def list_accounts(self) -> List[FSAAccount]:
        return list(
            self.db.execute(
                select(FSAAccount)
                .options(selectinload(FSAAccount.employee), selectinload(FSAAccount.transactions))
                .order_by(FSAAccount.created_at)
            ).scalars()
        )

    def list_for_employee(self, employee_id: uuid.UUID) -> List[FSAAccount]:
        """Accounts for an employee, newest plan year first"""
        return list(
            self.db.execute(
                select(FSAAccount)
                .where(FSAAccount.employee_id == employee_id)
                .options(selectinload(FSAAccount.employee), selectinload(FSAAccount.transactions))
                .order_by(FSAAccount.plan_year_start.desc())
            ).scalars()
        )

    def find_active_for_employee(self, employee_id: uuid.UUID) -> Optional[FSAAccount]:
        return self.db.execute(
            select(FSAAccount)
            .where(FSAAccount.employee_id == employee_id, FSAAccount.status == STATUS_ACTIVE)
            .options(selectinload(FSAAccount.employee), selectinload(FSAAccount.transactions))
            .order_by(FSAAccount.plan_year_start.desc())
            .limit(1)
        ).scalar_one_or_none()

    def count_active_in_plan_year(
        self,
        employee_id: uuid.UUID,
        plan_year_start: date,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> int:
        """Number of active accounts the employee holds for a plan year"""
        query = select(func.count(FSAAccount.id)).where(
            FSAAccount.employee_id == employee_id,
            FSAAccount.status == STATUS_ACTIVE,
            FSAAccount.plan_year_start == plan_year_start,
        )
        if exclude_id is not None:
            query = query.where(FSAAccount.id != exclude_id)
        return self.db.execute(query).scalar_one()


class TransactionRepository:
    """Repository for ledger transactions (insert-only)"""

    def __init__(self, db: Session):
        self.db = db

    def record_allocation(
        self,
        account: FSAAccount,
        amount: Decimal,
        description: str,
        occurred_at: datetime,
    ) -> Transaction:
        """Append an approved credit to the account's history"""
        transaction = Transaction(
            fsa_account_id=account.id,
            amount=amount,
            description=description,
            transaction_date=occurred_at,
            transaction_type=TRANSACTION_CREDIT,
            status=TRANSACTION_APPROVED,
            created_at=occurred_at,
            updated_at=occurred_at,
        )
        account.transactions.append(transaction)
        self.db.add(transaction)
        return transaction

    def count_for_account(self, account_id: uuid.UUID) -> int:
        return self.db.execute(
            select(func.count(Transaction.id)).where(Transaction.fsa_account_id == account_id)
        ).scalar_one()
