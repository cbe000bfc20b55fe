"""GET /summary/{customer_name} - per-customer ledger totals"""

from fastapi import APIRouter, Depends

from fish_ledger.api.v1.schemas import SummaryResponse
from fish_ledger.api.dependencies import get_store
from fish_ledger.domain.store import LedgerStore
from fish_ledger.domain.summary import summarize

router = APIRouter()


@router.get("/summary/{customer_name}", response_model=SummaryResponse)
def get_summary(customer_name: str, store: LedgerStore = Depends(get_store)):
    """
    Billed, paid and outstanding totals for one customer.

    Returns zero totals for a name with no bills.
    """
    transactions = store.list_transactions(customer_name=customer_name)
    return SummaryResponse.from_domain(summarize(customer_name, transactions))
