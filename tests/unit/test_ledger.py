"""Unit tests for payment application and ledger invariants"""

import threading
import pytest
from dataclasses import replace
from fish_ledger.domain.exceptions import (
    LedgerInvariantError,
    NonPositivePaymentError,
    NotFoundError,
    OverpaymentError,
    PaymentError,
    TransactionBusyError,
)
from fish_ledger.domain.ledger import apply_payment, record_payment, transaction_status, verify_transaction
from fish_ledger.domain.locks import TransactionLocks
from fish_ledger.domain.models import TransactionStatus


def assert_balanced(txn):
    assert txn.paid_paise + txn.remaining_paise == txn.total_paise
    assert 0 <= txn.paid_paise <= txn.total_paise
    verify_transaction(txn)


def test_apply_partial_payment(make_transaction):
    txn = make_transaction(line_totals=(150000,))

    updated = apply_payment(txn, 50000, note="cash")

    assert updated.paid_paise == 50000
    assert updated.remaining_paise == 100000
    assert len(updated.payments) == 1
    assert updated.payments[0].amount_paise == 50000
    assert updated.payments[0].note == "cash"
    assert updated.payments[0].paid_at is not None
    assert transaction_status(updated) == TransactionStatus.PENDING
    assert_balanced(updated)


def test_apply_payment_leaves_input_untouched(make_transaction):
    txn = make_transaction(line_totals=(150000,))

    apply_payment(txn, 50000)

    assert txn.paid_paise == 0
    assert txn.remaining_paise == 150000
    assert txn.payments == []


def test_exact_remaining_settles_transaction(make_transaction):
    txn = make_transaction(line_totals=(150000,), payments=(50000,))

    updated = apply_payment(txn, txn.remaining_paise)

    assert updated.remaining_paise == 0
    assert updated.paid_paise == 150000
    assert transaction_status(updated) == TransactionStatus.PAID
    assert_balanced(updated)


def test_overpayment_by_one_paisa_rejected(make_transaction):
    txn = make_transaction(line_totals=(150000,), payments=(50000,))

    with pytest.raises(OverpaymentError):
        apply_payment(txn, txn.remaining_paise + 1)

    assert txn.paid_paise == 50000
    assert txn.remaining_paise == 100000
    assert len(txn.payments) == 1


@pytest.mark.parametrize("amount", [0, -1, -50000])
def test_non_positive_payment_rejected(make_transaction, amount):
    txn = make_transaction()

    with pytest.raises(NonPositivePaymentError):
        apply_payment(txn, amount)

    assert txn.payments == []


def test_payment_errors_share_base_class():
    assert issubclass(NonPositivePaymentError, PaymentError)
    assert issubclass(OverpaymentError, PaymentError)


def test_no_payment_accepted_on_settled_transaction(make_transaction):
    txn = make_transaction(line_totals=(1000,), payments=(1000,))

    with pytest.raises(OverpaymentError):
        apply_payment(txn, 1)


def test_paid_is_recomputed_from_history(make_transaction):
    """A drifted cache is corrected from the payment list"""
    txn = make_transaction(line_totals=(100000,), payments=(20000, 30000))
    drifted = replace(txn, paid_paise=10, remaining_paise=99990)

    updated = apply_payment(drifted, 10000)

    assert updated.paid_paise == 60000
    assert updated.remaining_paise == 40000


def test_overpayment_checked_against_history_not_cache(make_transaction):
    txn = make_transaction(line_totals=(100000,), payments=(90000,))
    drifted = replace(txn, paid_paise=0, remaining_paise=100000)

    with pytest.raises(OverpaymentError):
        apply_payment(drifted, 20000)


def test_many_small_payments_stay_exact(make_transaction):
    txn = make_transaction(line_totals=(1000,))
    for _ in range(10):
        txn = apply_payment(txn, 100)
        assert_balanced(txn)

    assert txn.remaining_paise == 0
    assert transaction_status(txn) == TransactionStatus.PAID


def test_zero_total_bill_is_paid(make_transaction):
    assert transaction_status(make_transaction(line_totals=(0,))) == TransactionStatus.PAID


@pytest.mark.parametrize(
    "changes",
    [
        {"total_paise": 1},
        {"paid_paise": 5},
        {"remaining_paise": 5},
        {"items": []},
    ],
)
def test_verify_transaction_detects_inconsistency(make_transaction, changes):
    txn = replace(make_transaction(line_totals=(1000,)), **changes)
    with pytest.raises(LedgerInvariantError):
        verify_transaction(txn)


def test_record_payment_persists(memory_store, make_transaction):
    locks = TransactionLocks()
    txn_id = memory_store.insert_transaction(make_transaction(line_totals=(150000,)))

    updated = record_payment(memory_store, locks, txn_id, 50000, "first")

    stored = memory_store.get_transaction(txn_id)
    assert stored.paid_paise == 50000
    assert stored.remaining_paise == 100000
    assert stored.payments[0].note == "first"
    assert updated.version == stored.version
    assert len(locks) == 0


def test_record_payment_unknown_transaction(memory_store):
    with pytest.raises(NotFoundError):
        record_payment(memory_store, TransactionLocks(), 999, 100)


def test_rejected_payment_writes_nothing(memory_store, make_transaction):
    locks = TransactionLocks()
    txn_id = memory_store.insert_transaction(make_transaction(line_totals=(1000,)))

    with pytest.raises(OverpaymentError):
        record_payment(memory_store, locks, txn_id, 1001)

    stored = memory_store.get_transaction(txn_id)
    assert stored.payments == []
    assert stored.version == 1
    assert len(locks) == 0


def test_concurrent_payments_serialize(slow_memory_store, make_transaction):
    """Two payments that together exceed remaining: exactly one is accepted"""
    locks = TransactionLocks(timeout_seconds=5.0)
    txn_id = slow_memory_store.insert_transaction(make_transaction(line_totals=(100000,)))
    barrier = threading.Barrier(2)
    accepted, rejected = [], []

    def pay():
        barrier.wait()
        try:
            record_payment(slow_memory_store, locks, txn_id, 60000)
            accepted.append(1)
        except OverpaymentError:
            rejected.append(1)

    threads = [threading.Thread(target=pay) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(accepted) == 1
    assert len(rejected) == 1
    stored = slow_memory_store.get_transaction(txn_id)
    assert stored.paid_paise == 60000
    assert stored.remaining_paise == 40000
    assert len(stored.payments) == 1


def test_concurrent_payments_that_fit_all_apply(slow_memory_store, make_transaction):
    locks = TransactionLocks()
    txn_id = slow_memory_store.insert_transaction(make_transaction(line_totals=(100000,)))

    threads = [
        threading.Thread(target=record_payment, args=(slow_memory_store, locks, txn_id, 20000))
        for _ in range(5)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    stored = slow_memory_store.get_transaction(txn_id)
    assert stored.paid_paise == 100000
    assert len(stored.payments) == 5
    assert transaction_status(stored) == TransactionStatus.PAID


def test_lock_timeout_raises_busy():
    locks = TransactionLocks(timeout_seconds=0.05)
    held = threading.Event()
    release = threading.Event()

    def holder():
        with locks.hold(7):
            held.set()
            release.wait(2)

    t = threading.Thread(target=holder)
    t.start()
    held.wait(2)
    try:
        with pytest.raises(TransactionBusyError):
            with locks.hold(7):
                pass
        # Other transactions are not blocked
        with locks.hold(8):
            pass
    finally:
        release.set()
        t.join()

    assert len(locks) == 0
