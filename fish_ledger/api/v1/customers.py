"""GET/POST /customers - customer registry"""

import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from fish_ledger.api.v1.schemas import CustomerCreate, CustomerResponse
from fish_ledger.api.dependencies import get_store
from fish_ledger.domain.exceptions import DuplicateKeyError
from fish_ledger.domain.models import Customer
from fish_ledger.domain.store import LedgerStore
from fish_ledger.infrastructure.database.session import get_db
from fish_ledger.utils.time_utils import utc_now

router = APIRouter()


@router.get("/customers", response_model=List[CustomerResponse])
def list_customers(store: LedgerStore = Depends(get_store)):
    """List registered customers, name ascending"""
    return [CustomerResponse.from_domain(c) for c in store.list_customers()]


@router.post("/customers", response_model=CustomerResponse, status_code=201)
def create_customer(
    body: CustomerCreate,
    db: Session = Depends(get_db),
    store: LedgerStore = Depends(get_store),
):
    """Register a customer; the name must be unique ignoring case"""
    if not body.name.strip():
        raise HTTPException(status_code=400, detail="Customer name is required")

    try:
        customer = store.insert_customer(
            Customer(name=body.name.strip(), phone=body.phone, address=body.address, created_at=utc_now())
        )
    except DuplicateKeyError as e:
        db.rollback()
        logging.warning(f"Duplicate customer: {e}")
        raise HTTPException(status_code=409, detail=str(e))

    return CustomerResponse.from_domain(customer)
