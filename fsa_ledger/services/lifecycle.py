"""Account lifecycle - account creation at onboarding and administrative status changes"""

import logging
import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from fsa_ledger.config import settings
from fsa_ledger.domain.exceptions import (
    ConflictError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
    StorageFailureError,
)
from fsa_ledger.domain.models import ACCOUNT_STATUSES, STATUS_ACTIVE, AccountUpdate, EmployeeDraft
from fsa_ledger.infrastructure.database.models import FSAAccount
from fsa_ledger.infrastructure.database.repositories import AccountRepository, EmployeeRepository
from fsa_ledger.infrastructure.database.session import LedgerStore
from fsa_ledger.infrastructure.observability.metrics import (
    account_created_counter,
    account_status_change_counter,
)
from fsa_ledger.utils.date_utils import calendar_plan_year, today_in, utcnow

logger = logging.getLogger(__name__)

ACTIVE_ACCOUNT_EXISTS = "Employee already has an active account for this plan year"


class AccountLifecycleManager:
    """Creates FSA accounts and moves them between active, inactive and suspended"""

    def __init__(
        self,
        store: LedgerStore,
        default_annual_limit: Optional[Decimal] = None,
        timezone: Optional[str] = None,
    ):
        self.store = store
        if default_annual_limit is None:
            default_annual_limit = settings.default_annual_limit
        self.default_annual_limit = default_annual_limit
        self.timezone = timezone or settings.plan_year_timezone

    def create_account(self, employee_id: uuid.UUID) -> FSAAccount:
        """
        Open a DCFSA account for an existing employee in the current plan year.

        Raises:
            NotFoundError: employee does not exist
            InvalidStateError: employee already has an active account this plan year
            StorageFailureError: the store failed; nothing was persisted
        """
        try:
            with self.store.transaction() as db:
                employee = EmployeeRepository(db).lock_employee(employee_id)
                if employee is None:
                    raise NotFoundError(f"Employee with ID {employee_id} not found")
                account = self._open_account(db, employee.id)
        except IntegrityError as e:
            raise InvalidStateError(ACTIVE_ACCOUNT_EXISTS) from e
        except SQLAlchemyError as e:
            raise StorageFailureError("Account could not be created") from e

        account_created_counter.labels(source="direct").inc()
        logger.info(
            "FSA account created",
            extra={"account_id": str(account.id), "employee_id": str(employee_id)},
        )
        return account

    def onboard_employee(self, draft: EmployeeDraft) -> FSAAccount:
        """
        Create an employee together with its first FSA account.

        Both rows are written in one transactional context: if the account
        cannot be created the employee is rolled back as well.

        Raises:
            ConflictError: email or employee number already registered
            StorageFailureError: the store failed; nothing was persisted
        """
        try:
            with self.store.transaction() as db:
                employees = EmployeeRepository(db)
                if employees.find_duplicate(draft.email, draft.employee_number) is not None:
                    raise ConflictError("Employee with this email or employee number already exists")
                employee = employees.create_employee(draft)
                account = self._open_account(db, employee.id)
        except IntegrityError as e:
            # Lost a race with a concurrent onboarding of the same person
            raise ConflictError("Employee with this email or employee number already exists") from e
        except SQLAlchemyError as e:
            raise StorageFailureError("Employee could not be onboarded") from e

        account_created_counter.labels(source="onboarding").inc()
        logger.info(
            "Employee onboarded",
            extra={"account_id": str(account.id), "employee_id": str(account.employee_id)},
        )
        return account

    def update_account(self, account_id: uuid.UUID, update: AccountUpdate) -> FSAAccount:
        """
        Apply an administrative update to an account.

        Raises:
            InvalidArgumentError: unknown status value
            NotFoundError: no account with that ID
            InvalidStateError: reactivation would give the employee two
                active accounts in one plan year
            StorageFailureError: the store failed or a concurrent update won
        """
        if update.status is not None and update.status not in ACCOUNT_STATUSES:
            raise InvalidArgumentError(
                "status", f"Status must be one of: {', '.join(ACCOUNT_STATUSES)}"
            )

        try:
            with self.store.transaction() as db:
                accounts = AccountRepository(db)
                if update.status == STATUS_ACTIVE:
                    # Employee row before account row, as in create_account
                    employee_id = accounts.get_employee_id(account_id)
                    if employee_id is not None:
                        EmployeeRepository(db).lock_employee(employee_id)
                account = accounts.lock_account(account_id)
                if account is None:
                    raise NotFoundError(f"FSA Account with ID {account_id} not found")

                previous_status = account.status
                if update.status is not None and update.status != previous_status:
                    if update.status == STATUS_ACTIVE and accounts.count_active_in_plan_year(
                        account.employee_id, account.plan_year_start, exclude_id=account.id
                    ):
                        raise InvalidStateError(ACTIVE_ACCOUNT_EXISTS)
                    account.status = update.status
                    account.updated_at = utcnow()
                    db.flush()

                accounts.load_relations(account)
        except IntegrityError as e:
            raise InvalidStateError(ACTIVE_ACCOUNT_EXISTS) from e
        except SQLAlchemyError as e:
            raise StorageFailureError("Account could not be updated") from e

        if account.status != previous_status:
            account_status_change_counter.labels(from_status=previous_status, to_status=account.status).inc()
            logger.info(
                "FSA account status changed",
                extra={"account_id": str(account_id), "from_status": previous_status, "to_status": account.status},
            )
        return account

    def _open_account(self, db, employee_id: uuid.UUID) -> FSAAccount:
        plan_year = calendar_plan_year(today_in(self.timezone))
        accounts = AccountRepository(db)
        if accounts.count_active_in_plan_year(employee_id, plan_year.start):
            raise InvalidStateError(ACTIVE_ACCOUNT_EXISTS)
        account = accounts.create_account(employee_id, self.default_annual_limit, plan_year)
        return accounts.load_relations(account)
