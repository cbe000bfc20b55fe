"""Bills and payments - /transactions endpoints"""

import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from fish_ledger.api.v1.schemas import BillCreate, PaymentCreate, TransactionResponse
from fish_ledger.api.dependencies import get_request_id, get_store, get_transaction_locks
from fish_ledger.domain.billing import create_bill
from fish_ledger.domain.exceptions import (
    ConcurrentUpdateError,
    NonPositivePaymentError,
    NotFoundError,
    OverpaymentError,
    TransactionBusyError,
    ValidationError,
)
from fish_ledger.domain.ledger import record_payment
from fish_ledger.domain.locks import TransactionLocks
from fish_ledger.domain.models import LineEntry
from fish_ledger.domain.store import LedgerStore
from fish_ledger.infrastructure.database.session import get_db
from fish_ledger.infrastructure.observability.logging import log_bill_created, log_payment
from fish_ledger.infrastructure.observability.metrics import record_bill, record_payment as record_payment_metric

router = APIRouter()


@router.get("/transactions", response_model=List[TransactionResponse])
def list_transactions(store: LedgerStore = Depends(get_store)):
    """All bills, newest first"""
    return [TransactionResponse.from_domain(t) for t in store.list_transactions()]


@router.get("/transactions/customer/{customer_name}", response_model=List[TransactionResponse])
def list_customer_transactions(customer_name: str, store: LedgerStore = Depends(get_store)):
    """One customer's bills, newest first (exact name match)"""
    return [TransactionResponse.from_domain(t) for t in store.list_transactions(customer_name=customer_name)]


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
def get_transaction(transaction_id: int, store: LedgerStore = Depends(get_store)):
    transaction = store.get_transaction(transaction_id)
    if transaction is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return TransactionResponse.from_domain(transaction)


@router.post("/transactions", response_model=TransactionResponse, status_code=201)
def create_transaction(
    body: BillCreate,
    request: Request,
    db: Session = Depends(get_db),
    store: LedgerStore = Depends(get_store),
):
    """
    Create a bill from raw lines.

    Flow:
    1. Drop incomplete lines, price the rest in paise
    2. Register new customer/fish names (existing names are reused)
    3. Persist with paid = 0, remaining = total
    """
    request_id = get_request_id(request)
    entries = [
        LineEntry(product_name=i.product_name, quantity=i.quantity, unit_price=i.unit_price)
        for i in body.items
    ]

    try:
        transaction = create_bill(store, body.customer_name, entries)

    except ValidationError as e:
        db.rollback()
        logging.warning(f"Rejected bill: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error creating bill: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_bill(transaction.total_paise)
    log_bill_created(
        request_id,
        transaction.id,
        transaction.customer_name,
        transaction.total_paise,
        len(transaction.items),
    )
    return TransactionResponse.from_domain(transaction)


@router.post("/transactions/{transaction_id}/payment", response_model=TransactionResponse)
def create_payment(
    transaction_id: int,
    body: PaymentCreate,
    request: Request,
    db: Session = Depends(get_db),
    store: LedgerStore = Depends(get_store),
    locks: TransactionLocks = Depends(get_transaction_locks),
):
    """
    Apply a partial payment (amount in paise).

    Rejected payments leave the transaction unchanged.
    """
    request_id = get_request_id(request)

    try:
        transaction = record_payment(store, locks, transaction_id, body.amount, body.note)

    except NotFoundError as e:
        db.rollback()
        record_payment_metric("not_found")
        raise HTTPException(status_code=404, detail=str(e))

    except NonPositivePaymentError as e:
        db.rollback()
        record_payment_metric("non_positive")
        log_payment(request_id, transaction_id, body.amount, "non_positive")
        raise HTTPException(status_code=400, detail=str(e))

    except OverpaymentError as e:
        db.rollback()
        record_payment_metric("overpayment")
        log_payment(request_id, transaction_id, body.amount, "overpayment")
        raise HTTPException(status_code=400, detail=str(e))

    except (ConcurrentUpdateError, TransactionBusyError) as e:
        db.rollback()
        record_payment_metric("conflict")
        log_payment(request_id, transaction_id, body.amount, "conflict")
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error applying payment: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_payment_metric("accepted", body.amount)
    log_payment(request_id, transaction_id, body.amount, "accepted", transaction.remaining_paise)
    return TransactionResponse.from_domain(transaction)
