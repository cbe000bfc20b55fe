"""Data access layer: SQLAlchemy implementation of LedgerStore"""

from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.orm.exc import StaleDataError
from fish_ledger.infrastructure.database.models import (
    CustomerRecord,
    LineItemRecord,
    PaymentRecord,
    ProductRecord,
    TransactionRecord,
)
from fish_ledger.domain.exceptions import (
    ConcurrentUpdateError,
    DuplicateKeyError,
    LedgerInvariantError,
    NotFoundError,
)
from fish_ledger.domain.models import Customer, LineItem, Payment, Product, Transaction
from fish_ledger.domain.store import LedgerStore


def name_key(name: str) -> str:
    """Case-insensitive uniqueness key for customer and product names"""
    return name.strip().casefold()


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo; every stored timestamp is UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlLedgerStore(LedgerStore):
    """
    LedgerStore backed by a SQLAlchemy session.

    Every mutating call commits on success and rolls back on failure, so each
    call is one atomic unit of work.
    """

    def __init__(self, db: Session):
        self.db = db

    # Customers

    def find_customer_by_name(self, name: str) -> Optional[Customer]:
        record = self.db.query(CustomerRecord).filter(CustomerRecord.name_key == name_key(name)).first()
        return self._customer(record) if record else None

    def insert_customer(self, customer: Customer) -> Customer:
        if self.find_customer_by_name(customer.name):
            raise DuplicateKeyError(f"Customer '{customer.name}' already exists")

        record = CustomerRecord(
            name=customer.name.strip(),
            name_key=name_key(customer.name),
            phone=customer.phone,
            address=customer.address,
            created_at=customer.created_at,
        )
        self.db.add(record)
        self._commit_unique(f"Customer '{customer.name}' already exists")
        return self._customer(record)

    def list_customers(self) -> List[Customer]:
        records = self.db.query(CustomerRecord).order_by(CustomerRecord.name_key, CustomerRecord.id).all()
        return [self._customer(r) for r in records]

    # Products

    def find_product_by_name(self, name: str) -> Optional[Product]:
        record = self.db.query(ProductRecord).filter(ProductRecord.name_key == name_key(name)).first()
        return self._product(record) if record else None

    def insert_product(self, product: Product) -> Product:
        if self.find_product_by_name(product.name):
            raise DuplicateKeyError(f"Product '{product.name}' already exists")

        record = ProductRecord(
            name=product.name.strip(),
            name_key=name_key(product.name),
            created_at=product.created_at,
        )
        self.db.add(record)
        self._commit_unique(f"Product '{product.name}' already exists")
        return self._product(record)

    def list_products(self) -> List[Product]:
        records = self.db.query(ProductRecord).order_by(ProductRecord.name_key, ProductRecord.id).all()
        return [self._product(r) for r in records]

    def delete_product(self, product_id: int) -> None:
        record = self.db.get(ProductRecord, product_id)
        if record is None:
            raise NotFoundError(f"Product {product_id} not found")
        self.db.delete(record)
        self.db.commit()

    # Transactions

    def insert_transaction(self, transaction: Transaction) -> int:
        record = TransactionRecord(
            customer_name=transaction.customer_name,
            total_paise=transaction.total_paise,
            paid_paise=transaction.paid_paise,
            remaining_paise=transaction.remaining_paise,
            created_at=transaction.created_at,
        )
        for position, item in enumerate(transaction.items):
            record.items.append(
                LineItemRecord(
                    position=position,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price_paise=item.unit_price_paise,
                    line_total_paise=item.line_total_paise,
                )
            )
        for position, payment in enumerate(transaction.payments):
            record.payments.append(self._payment_record(position, payment))

        self.db.add(record)
        self.db.commit()
        return record.id

    def get_transaction(self, transaction_id: int, for_update: bool = False) -> Optional[Transaction]:
        query = self.db.query(TransactionRecord).filter(TransactionRecord.id == transaction_id)
        if for_update:
            # Row lock where the backend supports it; always re-read from the database
            query = query.with_for_update().populate_existing()
        record = query.first()
        return self._transaction(record) if record else None

    def list_transactions(self, customer_name: Optional[str] = None) -> List[Transaction]:
        query = self.db.query(TransactionRecord).options(
            selectinload(TransactionRecord.items),
            selectinload(TransactionRecord.payments),
        )
        if customer_name is not None:
            query = query.filter(TransactionRecord.customer_name == customer_name)
        records = query.order_by(TransactionRecord.created_at.desc(), TransactionRecord.id.desc()).all()
        return [self._transaction(r) for r in records]

    def update_transaction(self, transaction_id: int, transaction: Transaction) -> Transaction:
        record = self.db.get(TransactionRecord, transaction_id)
        if record is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")

        if record.version != transaction.version:
            raise ConcurrentUpdateError(
                f"Transaction {transaction_id} was modified (version {record.version}, expected {transaction.version})"
            )
        if record.total_paise != transaction.total_paise or len(record.items) != len(transaction.items):
            raise LedgerInvariantError("Items and total cannot change after creation")

        stored = len(record.payments)
        if len(transaction.payments) < stored:
            raise LedgerInvariantError("Payments cannot be removed")

        for position, payment in enumerate(transaction.payments[stored:], start=stored):
            record.payments.append(self._payment_record(position, payment))
        record.paid_paise = transaction.paid_paise
        record.remaining_paise = transaction.remaining_paise

        try:
            self.db.commit()
        except StaleDataError as e:
            self.db.rollback()
            raise ConcurrentUpdateError(f"Transaction {transaction_id} was modified concurrently") from e
        except IntegrityError as e:
            self.db.rollback()
            raise LedgerInvariantError(f"Transaction {transaction_id} violates a ledger constraint") from e

        return self._transaction(record)

    # Helpers

    def _commit_unique(self, message: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateKeyError(message) from e

    @staticmethod
    def _payment_record(position: int, payment: Payment) -> PaymentRecord:
        return PaymentRecord(
            position=position,
            amount_paise=payment.amount_paise,
            note=payment.note or "",
            paid_at=payment.paid_at,
        )

    @staticmethod
    def _customer(record: CustomerRecord) -> Customer:
        return Customer(
            id=record.id,
            name=record.name,
            phone=record.phone,
            address=record.address,
            created_at=_aware(record.created_at),
        )

    @staticmethod
    def _product(record: ProductRecord) -> Product:
        return Product(id=record.id, name=record.name, created_at=_aware(record.created_at))

    @staticmethod
    def _transaction(record: TransactionRecord) -> Transaction:
        return Transaction(
            id=record.id,
            customer_name=record.customer_name,
            items=[
                LineItem(
                    product_name=i.product_name,
                    quantity=i.quantity,
                    unit_price_paise=i.unit_price_paise,
                    line_total_paise=i.line_total_paise,
                )
                for i in record.items
            ],
            total_paise=record.total_paise,
            paid_paise=record.paid_paise,
            remaining_paise=record.remaining_paise,
            payments=[
                Payment(amount_paise=p.amount_paise, paid_at=_aware(p.paid_at), note=p.note)
                for p in record.payments
            ],
            created_at=_aware(record.created_at),
            version=record.version,
        )
