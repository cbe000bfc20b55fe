"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional

from fish_ledger.domain.ledger import transaction_status
from fish_ledger.domain.models import Customer, CustomerSummary, Product, Transaction, TransactionStatus


class CustomerCreate(BaseModel):
    """Request body for POST /customers"""

    name: str = Field(..., min_length=1, description="Customer name, unique ignoring case")
    phone: Optional[str] = None
    address: Optional[str] = None


class CustomerResponse(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_domain(cls, customer: Customer) -> "CustomerResponse":
        return cls(
            id=customer.id,
            name=customer.name,
            phone=customer.phone,
            address=customer.address,
            created_at=customer.created_at,
        )


class ProductCreate(BaseModel):
    """Request body for POST /fish"""

    name: str = Field(..., min_length=1, description="Fish name, unique ignoring case")


class ProductResponse(BaseModel):
    id: int
    name: str
    created_at: datetime

    @classmethod
    def from_domain(cls, product: Product) -> "ProductResponse":
        return cls(id=product.id, name=product.name, created_at=product.created_at)


class LineEntrySchema(BaseModel):
    """Raw bill line; incomplete lines are dropped, not rejected"""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    product_name: Optional[str] = None
    quantity: Optional[str] = Field(None, description="Decimal quantity, e.g. \"2.5\"")
    unit_price: Optional[str] = Field(None, description="Decimal rupee price, e.g. \"250.00\"")


class BillCreate(BaseModel):
    """Request body for POST /transactions"""

    customer_name: Optional[str] = None
    items: List[LineEntrySchema] = Field(default_factory=list)


class PaymentCreate(BaseModel):
    """Request body for POST /transactions/{id}/payment"""

    amount: int = Field(..., description="Payment amount in paise")
    note: Optional[str] = None


class LineItemSchema(BaseModel):
    product_name: str
    quantity: str
    unit_price_paise: int
    line_total_paise: int


class PaymentSchema(BaseModel):
    amount_paise: int
    note: str
    paid_at: datetime


class TransactionResponse(BaseModel):
    """Bill with its ledger state"""

    id: int
    customer_name: str
    items: List[LineItemSchema]
    total_paise: int
    paid_paise: int
    remaining_paise: int
    status: TransactionStatus
    payments: List[PaymentSchema]
    created_at: datetime

    @classmethod
    def from_domain(cls, txn: Transaction) -> "TransactionResponse":
        return cls(
            id=txn.id,
            customer_name=txn.customer_name,
            items=[
                LineItemSchema(
                    product_name=i.product_name,
                    quantity=i.quantity,
                    unit_price_paise=i.unit_price_paise,
                    line_total_paise=i.line_total_paise,
                )
                for i in txn.items
            ],
            total_paise=txn.total_paise,
            paid_paise=txn.paid_paise,
            remaining_paise=txn.remaining_paise,
            status=transaction_status(txn),
            payments=[
                PaymentSchema(amount_paise=p.amount_paise, note=p.note, paid_at=p.paid_at)
                for p in txn.payments
            ],
            created_at=txn.created_at,
        )


class SummaryResponse(BaseModel):
    """Response for GET /summary/{customer_name}"""

    customer_name: str
    transaction_count: int
    total_billed_paise: int
    total_paid_paise: int
    total_outstanding_paise: int
    total_billed: str
    total_paid: str
    total_outstanding: str

    @classmethod
    def from_domain(cls, summary: CustomerSummary) -> "SummaryResponse":
        return cls(**vars(summary))


class MessageResponse(BaseModel):
    message: str
