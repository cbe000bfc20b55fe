"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class TransactionStatus(str, Enum):
    """Settlement state derived from the outstanding balance"""

    PAID = "paid"
    PENDING = "pending"


@dataclass
class Customer:
    """Registered buyer"""

    name: str
    id: Optional[int] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class Product:
    """Registered fish variety"""

    name: str
    id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass
class LineEntry:
    """Raw bill line as typed by the clerk; any field may be missing"""

    product_name: Optional[str]
    quantity: Optional[str]
    unit_price: Optional[str]


@dataclass
class LineItem:
    """Priced line on a bill"""

    product_name: str
    quantity: str  # decimal text as entered, e.g. "2.5" boxes
    unit_price_paise: int
    line_total_paise: int


@dataclass
class Payment:
    """Single partial payment against a transaction"""

    amount_paise: int
    paid_at: datetime
    note: str = ""


@dataclass
class Transaction:
    """
    A bill and its payment history.

    paid_paise and remaining_paise are a cache of a fold over payments.
    version is maintained by the store for optimistic concurrency.
    """

    customer_name: str
    items: List[LineItem]
    total_paise: int
    created_at: datetime
    paid_paise: int = 0
    remaining_paise: int = 0
    payments: List[Payment] = field(default_factory=list)
    id: Optional[int] = None
    version: int = 1


@dataclass
class CustomerSummary:
    """Totals across one customer's transactions"""

    customer_name: str
    transaction_count: int
    total_billed_paise: int
    total_paid_paise: int
    total_outstanding_paise: int
    total_billed: str
    total_paid: str
    total_outstanding: str
