"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from fish_ledger.domain.locks import TransactionLocks
from fish_ledger.infrastructure.database.repositories import SqlLedgerStore
from fish_ledger.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_store(db: Session = Depends(get_db)) -> SqlLedgerStore:
    """Provide a ledger store bound to the request's session"""
    return SqlLedgerStore(db)


def get_transaction_locks(request: Request) -> TransactionLocks:
    """Provide the application-wide per-transaction lock registry"""
    return request.app.state.transaction_locks
