# posledger/model/transaction.py
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple

from ..utils.money import to_float_money

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class PaymentMethod(Enum):
    CASH = "CASH"
    CARD = "CARD"


@dataclass(frozen=True)
class LineItem:
    """One cart line; joined to its transaction by ``transaction_id`` on read."""

    transaction_id: Optional[int]
    description: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal

    def as_api(self):
        return {
            "description": self.description,
            "quantity": self.quantity,
            "unitPrice": to_float_money(self.unit_price),
            "lineTotal": to_float_money(self.line_total),
        }


@dataclass(frozen=True)
class Transaction:
    """A settled sale. ``transaction_id`` stays None until the store saves it."""

    transaction_id: Optional[int]
    timestamp: datetime
    subtotal: Decimal
    tax_rate_percent: Decimal
    tax_amount: Decimal
    total_due: Decimal
    payment_method: PaymentMethod
    amount_paid: Decimal
    change_amount: Decimal
    card_number_masked: Optional[str] = None
    card_holder_name: Optional[str] = None
    card_expiry: Optional[str] = None
    line_items: Tuple[LineItem, ...] = ()

    def with_id(self, transaction_id: int) -> "Transaction":
        items = tuple(replace(i, transaction_id=transaction_id) for i in self.line_items)
        return replace(self, transaction_id=transaction_id, line_items=items)

    def with_line_items(self, items) -> "Transaction":
        return replace(self, line_items=tuple(items))

    def as_api(self):
        return {
            "transactionId": self.transaction_id,
            "date": self.timestamp.strftime(TIMESTAMP_FORMAT),
            "subtotal": to_float_money(self.subtotal),
            "taxRatePercent": float(self.tax_rate_percent),
            "tax": to_float_money(self.tax_amount),
            "total": to_float_money(self.total_due),
            "method": self.payment_method.value,
            "amountPaid": to_float_money(self.amount_paid),
            "change": to_float_money(self.change_amount),
            "cardNumberMasked": self.card_number_masked,
            "cardHolderName": self.card_holder_name,
            "cardExpiry": self.card_expiry,
            "lineItems": [i.as_api() for i in self.line_items],
        }
