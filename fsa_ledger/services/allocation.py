"""Allocation engine - applies funds allocations to FSA accounts atomically"""

import logging
import time
import uuid
from decimal import Decimal
from typing import Any, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from fsa_ledger.config import settings
from fsa_ledger.domain.allocation import check_allocatable, default_description, parse_amount
from fsa_ledger.domain.exceptions import DomainException, NotFoundError, StorageFailureError
from fsa_ledger.infrastructure.database.models import FSAAccount
from fsa_ledger.infrastructure.database.repositories import AccountRepository, TransactionRepository
from fsa_ledger.infrastructure.database.session import LedgerStore
from fsa_ledger.infrastructure.observability.logging import log_allocation
from fsa_ledger.infrastructure.observability.metrics import (
    allocation_conflict_counter,
    allocation_duration_histogram,
    record_allocation,
)
from fsa_ledger.utils.date_utils import utcnow

logger = logging.getLogger(__name__)


class AllocationEngine:
    """Validates and applies allocations against a single account at a time"""

    def __init__(self, store: LedgerStore, max_attempts: Optional[int] = None):
        self.store = store
        if max_attempts is None:
            max_attempts = settings.allocation_max_attempts
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.max_attempts = max_attempts

    def allocate(self, account_id: uuid.UUID, amount: Any, description: Optional[str] = None) -> FSAAccount:
        """
        Credit `amount` to the account and record the matching transaction.

        Flow:
        1. Validate the amount (no store access)
        2. Lock the account row and re-read it
        3. Check status and annual limit against the fresh row
        4. Bump the balance, append an approved credit, commit

        Steps 2-4 run in one transactional context. A concurrent commit on the
        same account surfaces as StaleDataError at flush; the attempt is rolled
        back and replayed from step 2.

        Raises:
            InvalidArgumentError: amount is not a positive two-place decimal
            NotFoundError: no account with that ID
            InvalidStateError: account is not active
            LimitExceededError: balance + amount would exceed the annual limit
            StorageFailureError: the store failed; nothing was persisted
        """
        start_time = time.time()
        try:
            value = parse_amount(amount)
            label = description or default_description(value)

            attempt = 0
            while True:
                attempt += 1
                try:
                    account = self._apply(account_id, value, label)
                    break
                except StaleDataError as e:
                    allocation_conflict_counter.inc()
                    logger.warning(
                        "Concurrent update on account, retrying",
                        extra={"account_id": str(account_id), "attempt": attempt},
                    )
                    if attempt >= self.max_attempts:
                        raise StorageFailureError(
                            f"Allocation to account {account_id} conflicted with concurrent updates "
                            f"{attempt} times"
                        ) from e
                except SQLAlchemyError as e:
                    logger.error(
                        f"Allocation storage error: {e}",
                        extra={"account_id": str(account_id), "attempt": attempt},
                    )
                    raise StorageFailureError("Allocation could not be committed") from e

        except DomainException as e:
            record_allocation(e.code)
            raise

        duration = time.time() - start_time
        allocation_duration_histogram.observe(duration)
        record_allocation("success", value)
        log_allocation(
            str(account.id),
            value,
            account.current_balance,
            account.annual_limit,
            attempt,
            duration * 1000,
        )
        return account

    def _apply(self, account_id: uuid.UUID, amount: Decimal, description: str) -> FSAAccount:
        """One allocation attempt inside its own transactional context"""
        with self.store.transaction() as db:
            accounts = AccountRepository(db)
            account = accounts.lock_account(account_id)
            if account is None:
                raise NotFoundError(f"FSA Account with ID {account_id} not found")

            check_allocatable(account.status, account.current_balance, account.annual_limit, amount)

            now = utcnow()
            account.current_balance = account.current_balance + amount
            account.updated_at = now
            TransactionRepository(db).record_allocation(account, amount, description, now)
            db.flush()

            return accounts.load_relations(account)

    def get_account(self, account_id: uuid.UUID) -> FSAAccount:
        """Fetch one account with employee and transaction history"""
        with self.store.read_session() as db:
            account = AccountRepository(db).get_account(account_id)
        if account is None:
            raise NotFoundError(f"FSA Account with ID {account_id} not found")
        return account

    def list_accounts(self) -> List[FSAAccount]:
        with self.store.read_session() as db:
            return AccountRepository(db).list_accounts()

    def list_accounts_for_employee(self, employee_id: uuid.UUID) -> List[FSAAccount]:
        with self.store.read_session() as db:
            return AccountRepository(db).list_for_employee(employee_id)

    def find_active_account_for_employee(self, employee_id: uuid.UUID) -> Optional[FSAAccount]:
        with self.store.read_session() as db:
            return AccountRepository(db).find_active_for_employee(employee_id)
