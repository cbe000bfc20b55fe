"""GET/POST/DELETE /fish - product registry"""

import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from fish_ledger.api.v1.schemas import MessageResponse, ProductCreate, ProductResponse
from fish_ledger.api.dependencies import get_store
from fish_ledger.domain.exceptions import DuplicateKeyError, NotFoundError
from fish_ledger.domain.models import Product
from fish_ledger.domain.store import LedgerStore
from fish_ledger.infrastructure.database.session import get_db
from fish_ledger.utils.time_utils import utc_now

router = APIRouter()


@router.get("/fish", response_model=List[ProductResponse])
def list_products(store: LedgerStore = Depends(get_store)):
    """List registered fish, name ascending"""
    return [ProductResponse.from_domain(p) for p in store.list_products()]


@router.post("/fish", response_model=ProductResponse, status_code=201)
def create_product(
    body: ProductCreate,
    db: Session = Depends(get_db),
    store: LedgerStore = Depends(get_store),
):
    """Register a fish name; must be unique ignoring case"""
    if not body.name.strip():
        raise HTTPException(status_code=400, detail="Fish name is required")

    try:
        product = store.insert_product(Product(name=body.name.strip(), created_at=utc_now()))
    except DuplicateKeyError as e:
        db.rollback()
        logging.warning(f"Duplicate product: {e}")
        raise HTTPException(status_code=409, detail=str(e))

    return ProductResponse.from_domain(product)


@router.delete("/fish/{product_id}", response_model=MessageResponse)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    store: LedgerStore = Depends(get_store),
):
    """
    Remove a fish name from the registry.

    Existing bills keep their line items; they store the name, not a reference.
    """
    try:
        store.delete_product(product_id)
    except NotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    return MessageResponse(message="Fish deleted successfully")
