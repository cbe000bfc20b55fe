"""Persistence interface consumed by the ledger core"""

from abc import ABC, abstractmethod
from typing import List, Optional

from fish_ledger.domain.models import Customer, Product, Transaction


class LedgerStore(ABC):
    """
    Storage contract for customers, products and transactions.

    Name lookups and uniqueness are case-insensitive; names are stored as given.
    insert_customer/insert_product raise DuplicateKeyError on a clash.
    """

    @abstractmethod
    def find_customer_by_name(self, name: str) -> Optional[Customer]: ...

    @abstractmethod
    def insert_customer(self, customer: Customer) -> Customer: ...

    @abstractmethod
    def list_customers(self) -> List[Customer]:
        """All customers, name ascending"""

    @abstractmethod
    def find_product_by_name(self, name: str) -> Optional[Product]: ...

    @abstractmethod
    def insert_product(self, product: Product) -> Product: ...

    @abstractmethod
    def list_products(self) -> List[Product]:
        """All products, name ascending"""

    @abstractmethod
    def delete_product(self, product_id: int) -> None:
        """Remove a product; raises NotFoundError. Line items keep their names."""

    @abstractmethod
    def insert_transaction(self, transaction: Transaction) -> int: ...

    @abstractmethod
    def get_transaction(self, transaction_id: int, for_update: bool = False) -> Optional[Transaction]: ...

    @abstractmethod
    def list_transactions(self, customer_name: Optional[str] = None) -> List[Transaction]:
        """Newest first; customer_name matches exactly when given"""

    @abstractmethod
    def update_transaction(self, transaction_id: int, transaction: Transaction) -> Transaction:
        """
        Persist appended payments and recomputed totals.

        Raises ConcurrentUpdateError if the stored version differs from
        transaction.version. Returns the transaction with its new version.
        """
