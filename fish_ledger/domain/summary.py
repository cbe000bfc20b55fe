"""Per-customer roll-up of transactions"""

from typing import Iterable

from fish_ledger.domain.models import CustomerSummary, Transaction
from fish_ledger.domain.money import add_money, format_money


def summarize(customer_name: str, transactions: Iterable[Transaction]) -> CustomerSummary:
    """
    Fold billed, paid and outstanding amounts for one customer.

    Only transactions whose customer_name equals customer_name exactly
    (case-sensitive) are counted.
    """
    count = 0
    billed = paid = outstanding = 0

    for txn in transactions:
        if txn.customer_name != customer_name:
            continue
        count += 1
        billed = add_money(billed, txn.total_paise)
        paid = add_money(paid, txn.paid_paise)
        outstanding = add_money(outstanding, txn.remaining_paise)

    return CustomerSummary(
        customer_name=customer_name,
        transaction_count=count,
        total_billed_paise=billed,
        total_paid_paise=paid,
        total_outstanding_paise=outstanding,
        total_billed=format_money(billed),
        total_paid=format_money(paid),
        total_outstanding=format_money(outstanding),
    )
