"""Ledger engine - payment application and the total/paid/remaining invariant"""

from dataclasses import replace
from datetime import datetime
from typing import Optional

from fish_ledger.domain.exceptions import (
    LedgerInvariantError,
    NonPositivePaymentError,
    NotFoundError,
    OverpaymentError,
)
from fish_ledger.domain.locks import TransactionLocks
from fish_ledger.domain.models import Payment, Transaction, TransactionStatus
from fish_ledger.domain.money import subtract_money
from fish_ledger.domain.store import LedgerStore
from fish_ledger.utils.time_utils import utc_now


def _paid_from_history(transaction: Transaction) -> int:
    paid = 0
    for payment in transaction.payments:
        paid += payment.amount_paise
    return paid


def verify_transaction(transaction: Transaction) -> None:
    """
    Check every ledger invariant on a transaction.

    - total equals the sum of line totals
    - paid equals the sum of payments, each payment positive
    - remaining equals total - paid
    - 0 <= paid <= total
    """
    if not transaction.items:
        raise LedgerInvariantError("Transaction has no items")

    items_total = 0
    for item in transaction.items:
        if item.line_total_paise < 0:
            raise LedgerInvariantError(f"Negative line total for {item.product_name}")
        items_total += item.line_total_paise

    if transaction.total_paise != items_total:
        raise LedgerInvariantError(
            f"Total {transaction.total_paise} does not match items {items_total}"
        )
    if any(p.amount_paise <= 0 for p in transaction.payments):
        raise LedgerInvariantError("Payment history contains a non-positive amount")

    paid = _paid_from_history(transaction)
    if transaction.paid_paise != paid:
        raise LedgerInvariantError(f"Paid {transaction.paid_paise} does not match payments {paid}")
    if not 0 <= paid <= transaction.total_paise:
        raise LedgerInvariantError(f"Paid {paid} outside 0..{transaction.total_paise}")
    if transaction.remaining_paise != transaction.total_paise - paid:
        raise LedgerInvariantError(
            f"Remaining {transaction.remaining_paise} != total - paid ({transaction.total_paise - paid})"
        )


def apply_payment(
    transaction: Transaction,
    amount_paise: int,
    note: Optional[str] = None,
    paid_at: datetime | None = None,
) -> Transaction:
    """
    Apply a partial payment, returning the updated transaction.

    The input transaction is not modified. Outstanding balance is derived from
    the payment history, and paid/remaining are recomputed from the full list
    after appending, never incremented.

    Raises:
        NonPositivePaymentError: amount <= 0
        OverpaymentError: amount exceeds the outstanding balance
    """
    if amount_paise <= 0:
        raise NonPositivePaymentError(f"Payment must be positive, got {amount_paise}")

    outstanding = transaction.total_paise - _paid_from_history(transaction)
    if amount_paise > outstanding:
        raise OverpaymentError(
            f"Payment {amount_paise} exceeds outstanding balance {outstanding}"
        )

    payments = list(transaction.payments)
    payments.append(Payment(amount_paise=amount_paise, paid_at=paid_at or utc_now(), note=note or ""))

    updated = replace(transaction, payments=payments)
    updated.paid_paise = _paid_from_history(updated)
    updated.remaining_paise = subtract_money(updated.total_paise, updated.paid_paise)

    verify_transaction(updated)
    return updated


def transaction_status(transaction: Transaction) -> TransactionStatus:
    """Paid iff nothing remains outstanding"""
    if transaction.remaining_paise == 0:
        return TransactionStatus.PAID
    return TransactionStatus.PENDING


def record_payment(
    store: LedgerStore,
    locks: TransactionLocks,
    transaction_id: int,
    amount_paise: int,
    note: Optional[str] = None,
) -> Transaction:
    """
    Load, apply and persist a payment while holding the transaction's lock.

    Concurrent payments on the same id serialize here, so two requests can
    never both be checked against the same outstanding balance.

    Raises:
        NotFoundError: unknown transaction id
        PaymentError: amount rejected, nothing written
        TransactionBusyError: lock not acquired in time
    """
    with locks.hold(transaction_id):
        transaction = store.get_transaction(transaction_id, for_update=True)
        if transaction is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")

        updated = apply_payment(transaction, amount_paise, note)
        return store.update_transaction(transaction_id, updated)
