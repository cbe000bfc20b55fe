"""Bill composition from raw line entries"""

from dataclasses import replace
from datetime import datetime
from typing import List, Optional, Sequence

from fish_ledger.domain.exceptions import DuplicateKeyError, ValidationError
from fish_ledger.domain.ledger import verify_transaction
from fish_ledger.domain.models import Customer, LineEntry, LineItem, Product, Transaction
from fish_ledger.domain.money import MAX_PAISE, format_money, multiply_then_scale_down, parse_money
from fish_ledger.domain.store import LedgerStore
from fish_ledger.utils.time_utils import utc_now


def _present(value: Optional[str]) -> bool:
    return value is not None and str(value).strip() != ""


def price_line(entry: LineEntry) -> LineItem:
    """Price one complete entry: floor(quantity * unit price)"""
    quantity = str(entry.quantity).strip()
    unit_price_paise = parse_money(entry.unit_price)
    return LineItem(
        product_name=entry.product_name.strip(),
        quantity=quantity,
        unit_price_paise=unit_price_paise,
        line_total_paise=multiply_then_scale_down(parse_money(quantity), unit_price_paise),
    )


def compose_bill(
    customer_name: Optional[str],
    entries: Sequence[LineEntry],
    created_at: datetime | None = None,
) -> Transaction:
    """
    Build an unsaved transaction from raw bill lines.

    Entries missing a product name, quantity or unit price are dropped.

    Raises:
        ValidationError: blank customer name, no complete entries, or an
            amount too large to store
    """
    if not _present(customer_name):
        raise ValidationError("Customer name is required")

    complete = [
        e for e in entries
        if _present(e.product_name) and _present(e.quantity) and _present(e.unit_price)
    ]
    if not complete:
        raise ValidationError("At least one item with product, quantity and price is required")

    items = [price_line(e) for e in complete]
    total = 0
    for item in items:
        if item.unit_price_paise > MAX_PAISE or item.line_total_paise > MAX_PAISE:
            raise ValidationError(f"Amount for {item.product_name} is too large")
        total += item.line_total_paise

    if total > MAX_PAISE:
        raise ValidationError(f"Bill total exceeds {format_money(MAX_PAISE)}")

    transaction = Transaction(
        customer_name=customer_name.strip(),
        items=items,
        total_paise=total,
        paid_paise=0,
        remaining_paise=total,
        payments=[],
        created_at=created_at or utc_now(),
    )
    verify_transaction(transaction)
    return transaction


def ensure_customer(store: LedgerStore, name: str) -> Customer:
    """Return the registered customer, registering it first if new"""
    existing = store.find_customer_by_name(name)
    if existing:
        return existing
    try:
        return store.insert_customer(Customer(name=name, created_at=utc_now()))
    except DuplicateKeyError:
        # Registered by a concurrent request between lookup and insert
        return store.find_customer_by_name(name)


def ensure_product(store: LedgerStore, name: str) -> Product:
    """Return the registered product, registering it first if new"""
    existing = store.find_product_by_name(name)
    if existing:
        return existing
    try:
        return store.insert_product(Product(name=name, created_at=utc_now()))
    except DuplicateKeyError:
        return store.find_product_by_name(name)


def create_bill(
    store: LedgerStore,
    customer_name: Optional[str],
    entries: Sequence[LineEntry],
) -> Transaction:
    """
    Compose, register names and persist a new bill.

    Flow:
    1. Validate and price the lines (no writes on failure)
    2. Register customer and products idempotently
    3. Reuse registered casing so one customer's bills group together
    4. Insert the transaction
    """
    draft = compose_bill(customer_name, entries)

    customer = ensure_customer(store, draft.customer_name)
    items: List[LineItem] = [
        replace(item, product_name=ensure_product(store, item.product_name).name)
        for item in draft.items
    ]

    transaction = replace(draft, customer_name=customer.name, items=items)
    transaction_id = store.insert_transaction(transaction)
    return replace(transaction, id=transaction_id)
