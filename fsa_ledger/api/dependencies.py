"""Dependency injection for FastAPI endpoints"""

import uuid
from fastapi import Depends, HTTPException, Request

from fsa_ledger.infrastructure.database.session import LedgerStore
from fsa_ledger.services.allocation import AllocationEngine
from fsa_ledger.services.lifecycle import AccountLifecycleManager
from fsa_ledger.services.usage import UsageAggregator


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_store(request: Request) -> LedgerStore:
    """Store handle owned by the running application"""
    return request.app.state.store


def get_allocation_engine(store: LedgerStore = Depends(get_store)) -> AllocationEngine:
    return AllocationEngine(store)


def get_lifecycle_manager(store: LedgerStore = Depends(get_store)) -> AccountLifecycleManager:
    return AccountLifecycleManager(store)


def get_usage_aggregator(store: LedgerStore = Depends(get_store)) -> UsageAggregator:
    return UsageAggregator(store)


def parse_uuid(value: str, name: str) -> uuid.UUID:
    """Path parameter to UUID, 400 on malformed input"""
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name} format")
