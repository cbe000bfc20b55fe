"""Pytest fixtures for testing"""

import copy
import threading
import time
import pytest
from datetime import datetime, timedelta, timezone
from typing import Generator, List, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from fish_ledger.api.main import create_app
from fish_ledger.infrastructure.database.models import Base
from fish_ledger.infrastructure.database.session import get_db
from fish_ledger.domain.exceptions import ConcurrentUpdateError, DuplicateKeyError, NotFoundError
from fish_ledger.domain.models import Customer, LineItem, Payment, Product, Transaction
from fish_ledger.domain.store import LedgerStore


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class InMemoryLedgerStore(LedgerStore):
    """
    Dict-backed LedgerStore that copies on every read and write, so callers
    see the same read-modify-write hazards as with a real database.
    read_delay widens the window between load and update.
    """

    def __init__(self, read_delay: float = 0.0):
        self.read_delay = read_delay
        self._guard = threading.Lock()
        self._customers: List[Customer] = []
        self._products: List[Product] = []
        self._transactions: dict = {}
        self._next_id = 1

    def _new_id(self) -> int:
        new_id = self._next_id
        self._next_id += 1
        return new_id

    def find_customer_by_name(self, name: str) -> Optional[Customer]:
        with self._guard:
            for c in self._customers:
                if c.name.casefold() == name.strip().casefold():
                    return copy.deepcopy(c)
        return None

    def insert_customer(self, customer: Customer) -> Customer:
        with self._guard:
            if any(c.name.casefold() == customer.name.strip().casefold() for c in self._customers):
                raise DuplicateKeyError(customer.name)
            stored = copy.deepcopy(customer)
            stored.id = self._new_id()
            self._customers.append(stored)
            return copy.deepcopy(stored)

    def list_customers(self) -> List[Customer]:
        with self._guard:
            return sorted(copy.deepcopy(self._customers), key=lambda c: c.name.casefold())

    def find_product_by_name(self, name: str) -> Optional[Product]:
        with self._guard:
            for p in self._products:
                if p.name.casefold() == name.strip().casefold():
                    return copy.deepcopy(p)
        return None

    def insert_product(self, product: Product) -> Product:
        with self._guard:
            if any(p.name.casefold() == product.name.strip().casefold() for p in self._products):
                raise DuplicateKeyError(product.name)
            stored = copy.deepcopy(product)
            stored.id = self._new_id()
            self._products.append(stored)
            return copy.deepcopy(stored)

    def list_products(self) -> List[Product]:
        with self._guard:
            return sorted(copy.deepcopy(self._products), key=lambda p: p.name.casefold())

    def delete_product(self, product_id: int) -> None:
        with self._guard:
            for p in self._products:
                if p.id == product_id:
                    self._products.remove(p)
                    return
        raise NotFoundError(f"Product {product_id} not found")

    def insert_transaction(self, transaction: Transaction) -> int:
        with self._guard:
            stored = copy.deepcopy(transaction)
            stored.id = self._new_id()
            stored.version = 1
            self._transactions[stored.id] = stored
            return stored.id

    def get_transaction(self, transaction_id: int, for_update: bool = False) -> Optional[Transaction]:
        with self._guard:
            stored = copy.deepcopy(self._transactions.get(transaction_id))
        if self.read_delay:
            time.sleep(self.read_delay)
        return stored

    def list_transactions(self, customer_name: Optional[str] = None) -> List[Transaction]:
        with self._guard:
            txns = [
                copy.deepcopy(t) for t in self._transactions.values()
                if customer_name is None or t.customer_name == customer_name
            ]
        return sorted(txns, key=lambda t: (t.created_at, t.id), reverse=True)

    def update_transaction(self, transaction_id: int, transaction: Transaction) -> Transaction:
        with self._guard:
            stored = self._transactions.get(transaction_id)
            if stored is None:
                raise NotFoundError(f"Transaction {transaction_id} not found")
            if stored.version != transaction.version:
                raise ConcurrentUpdateError(f"Transaction {transaction_id} was modified")
            updated = copy.deepcopy(transaction)
            updated.version = stored.version + 1
            self._transactions[transaction_id] = updated
            return copy.deepcopy(updated)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def memory_store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore()


@pytest.fixture
def slow_memory_store() -> InMemoryLedgerStore:
    """Store that pauses after each read to expose racing payments"""
    return InMemoryLedgerStore(read_delay=0.05)


@pytest.fixture
def make_transaction():
    """Factory for valid unsaved transactions"""

    def _make(
        customer_name: str = "Asha",
        line_totals: tuple = (250000,),
        payments: tuple = (),
        created_at: datetime | None = None,
    ) -> Transaction:
        items = [
            LineItem(
                product_name=f"Fish {i}",
                quantity="1",
                unit_price_paise=total,
                line_total_paise=total,
            )
            for i, total in enumerate(line_totals)
        ]
        start = created_at or datetime(2024, 1, 1, tzinfo=timezone.utc)
        paid = sum(payments)
        return Transaction(
            customer_name=customer_name,
            items=items,
            total_paise=sum(line_totals),
            paid_paise=paid,
            remaining_paise=sum(line_totals) - paid,
            payments=[
                Payment(amount_paise=amount, paid_at=start + timedelta(days=n + 1))
                for n, amount in enumerate(payments)
            ],
            created_at=start,
        )

    return _make
