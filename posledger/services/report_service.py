# posledger/services/report_service.py
from decimal import Decimal
from pathlib import Path
from typing import Iterable, List

import pandas as pd

from ..model import PaymentMethod, Transaction, TIMESTAMP_FORMAT
from ..utils.money import round_money

EXPORT_COLUMNS = [
    "Transaction ID",
    "Date",
    "Subtotal",
    "Tax Rate %",
    "Tax",
    "Total",
    "Method",
    "Amount Paid",
    "Change",
    "Card",
    "Card Holder",
    "Card Expiry",
    "Item",
    "Quantity",
    "Unit Price",
    "Line Total",
]


def summarize(transactions: Iterable[Transaction]) -> dict:
    """Sales totals with the cash/card split; all zeros for an empty log."""
    transactions = list(transactions)
    count = len(transactions)
    total_sales = sum((t.total_due for t in transactions), Decimal("0"))
    total_tax = sum((t.tax_amount for t in transactions), Decimal("0"))

    cash = [t for t in transactions if t.payment_method is PaymentMethod.CASH]
    card = [t for t in transactions if t.payment_method is not PaymentMethod.CASH]
    cash_total = sum((t.total_due for t in cash), Decimal("0"))
    card_total = sum((t.total_due for t in card), Decimal("0"))

    def pct(n):
        return round(n / count * 100, 1) if count else 0.0

    return {
        "transactions": count,
        "totalSales": float(round_money(total_sales)),
        "totalTax": float(round_money(total_tax)),
        "averageTransaction": float(round_money(total_sales / count)) if count else 0.0,
        "cashTransactions": len(cash),
        "cashPercent": pct(len(cash)),
        "cashTotal": float(round_money(cash_total)),
        "cardTransactions": len(card),
        "cardPercent": pct(len(card)),
        "cardTotal": float(round_money(card_total)),
    }


def transactions_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """One row per line item; a transaction without items still gets one row."""
    rows: List[dict] = []
    for t in transactions:
        header = {
            "Transaction ID": t.transaction_id,
            "Date": t.timestamp.strftime(TIMESTAMP_FORMAT),
            "Subtotal": float(t.subtotal),
            "Tax Rate %": float(t.tax_rate_percent),
            "Tax": float(t.tax_amount),
            "Total": float(t.total_due),
            "Method": t.payment_method.value,
            "Amount Paid": float(t.amount_paid),
            "Change": float(t.change_amount),
            "Card": t.card_number_masked,
            "Card Holder": t.card_holder_name,
            "Card Expiry": t.card_expiry,
        }
        if not t.line_items:
            rows.append({**header, "Item": None, "Quantity": None, "Unit Price": None, "Line Total": None})
        for item in t.line_items:
            rows.append({
                **header,
                "Item": item.description,
                "Quantity": item.quantity,
                "Unit Price": float(item.unit_price),
                "Line Total": float(item.line_total),
            })
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def export_transactions(transactions: Iterable[Transaction], path) -> int:
    """Write the log to ``path`` (.xlsx through openpyxl, anything else as CSV). Returns row count."""
    df = transactions_frame(transactions)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".xlsx":
        df.to_excel(path, index=False)
    else:
        df.to_csv(path, index=False)
    return len(df)
