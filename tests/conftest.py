"""Pytest fixtures for testing"""

import uuid
import pytest
from datetime import date
from decimal import Decimal
from typing import Callable, Generator
from fastapi.testclient import TestClient

from fsa_ledger.api.main import create_app
from fsa_ledger.domain.models import EmployeeDraft, PlanYear
from fsa_ledger.infrastructure.database.models import FSAAccount
from fsa_ledger.infrastructure.database.repositories import AccountRepository, EmployeeRepository
from fsa_ledger.infrastructure.database.session import LedgerStore
from fsa_ledger.services.allocation import AllocationEngine
from fsa_ledger.services.lifecycle import AccountLifecycleManager
from fsa_ledger.services.usage import UsageAggregator


@pytest.fixture
def store(tmp_path) -> Generator[LedgerStore, None, None]:
    """Fresh SQLite-backed ledger store per test"""
    ledger_store = LedgerStore(f"sqlite:///{tmp_path / 'ledger.db'}")
    ledger_store.create_schema()
    try:
        yield ledger_store
    finally:
        ledger_store.drop_schema()
        ledger_store.dispose()


@pytest.fixture
def engine(store: LedgerStore) -> AllocationEngine:
    return AllocationEngine(store)


@pytest.fixture
def lifecycle(store: LedgerStore) -> AccountLifecycleManager:
    return AccountLifecycleManager(store, default_annual_limit=Decimal("5000.00"), timezone="UTC")


@pytest.fixture
def aggregator(store: LedgerStore) -> UsageAggregator:
    return UsageAggregator(store)


@pytest.fixture
def client(store: LedgerStore) -> TestClient:
    """Create FastAPI test client bound to the test store"""
    app = create_app(store=store)
    return TestClient(app)


@pytest.fixture
def make_account(store: LedgerStore) -> Callable[..., uuid.UUID]:
    """
    Insert an employee and one account with explicit balances.

    Returns the account ID.
    """

    def _make_account(
        annual_limit: str = "5000.00",
        current_balance: str = "0.00",
        used_amount: str = "0.00",
        status: str = "active",
    ) -> uuid.UUID:
        suffix = uuid.uuid4().hex[:8]
        with store.transaction() as db:
            employee = EmployeeRepository(db).create_employee(
                EmployeeDraft(
                    first_name="Dana",
                    last_name=f"Tester-{suffix}",
                    email=f"dana.{suffix}@example.com",
                    employee_number=f"EMP-{suffix}",
                    hire_date=date(2023, 3, 1),
                )
            )
            account = AccountRepository(db).create_account(
                employee.id,
                Decimal(annual_limit),
                PlanYear(start=date.today().replace(month=1, day=1), end=date.today().replace(month=12, day=31)),
            )
            account.current_balance = Decimal(current_balance)
            account.used_amount = Decimal(used_amount)
            account.status = status
            account_id = account.id
        return account_id

    return _make_account


@pytest.fixture
def load_account(store: LedgerStore) -> Callable[[uuid.UUID], FSAAccount]:
    """Read an account straight from the store, bypassing the services"""

    def _load_account(account_id: uuid.UUID) -> FSAAccount:
        with store.read_session() as db:
            return AccountRepository(db).get_account(account_id)

    return _load_account
