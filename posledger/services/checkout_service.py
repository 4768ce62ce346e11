# posledger/services/checkout_service.py
import logging
import re
from collections import namedtuple
from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, List, Optional

from ..model import LineItem, PaymentMethod, Transaction
from ..utils.money import D, Money, round_money

logger = logging.getLogger(__name__)

DEFAULT_TAX_RATE = Decimal("8.5")
CARD_MASK = "****-****-****-"
DEFAULT_LAST4 = "0000"
_LAST4 = re.compile(r"\d{4}")

Totals = namedtuple("Totals", "subtotal tax_amount total_due")


class CheckoutError(ValueError):
    """Checkout input rejected before anything was written."""


class EmptyCart(CheckoutError):
    pass


class InvalidLineItem(CheckoutError):
    pass


class InsufficientPayment(CheckoutError):
    pass


class InvalidCard(CheckoutError):
    pass


def _to_money(value, field: str) -> Money:
    if isinstance(value, bool) or value is None:
        raise CheckoutError(f"{field} must be a number")
    try:
        amount = D(value)
    except InvalidOperation:
        raise CheckoutError(f"{field} must be a number")
    if not amount.is_finite():
        raise CheckoutError(f"{field} must be a number")
    return amount


def build_line_item(description, unit_price, quantity: int) -> LineItem:
    description = str(description).strip() if description is not None else ""
    if not description:
        raise InvalidLineItem("item name is required")
    price = _to_money(unit_price, "price")
    if price < 0:
        raise InvalidLineItem(f"price for {description} must not be negative")
    if quantity <= 0:
        raise InvalidLineItem(f"quantity for {description} must be positive")
    price = round_money(price)
    return LineItem(
        transaction_id=None,
        description=description,
        quantity=int(quantity),
        unit_price=price,
        line_total=round_money(price * quantity),
    )


def mask_card(last4) -> str:
    if isinstance(last4, (int, float)) and not isinstance(last4, bool):
        # a JSON number such as 4242 decodes as 4242.0; leading zeros are lost,
        # so only four-digit whole numbers are accepted
        if float(last4).is_integer() and 1000 <= last4 <= 9999:
            last4 = str(int(last4))
        else:
            raise InvalidCard("card number must be exactly the last 4 digits")
    last4 = str(last4 or "").strip()
    if not _LAST4.fullmatch(last4):
        raise InvalidCard("card number must be exactly the last 4 digits")
    return CARD_MASK + last4


def _number_or_zero(value, field: str) -> Money:
    """Cart numbers that are missing or not numeric count as zero."""
    try:
        return _to_money(value, field)
    except CheckoutError:
        logger.info("Treating %s %r as 0", field, value)
        return Decimal("0")


def _quantity(value) -> int:
    # JSON numbers arrive as floats; round half up like a till would
    qty = _number_or_zero(value, "quantity")
    return int(qty.to_integral_value(rounding=ROUND_HALF_UP))


class CheckoutService:
    """
    Prices a cart, settles it in cash or by card and saves the result.

    Every check happens before ``store.append``; a rejected checkout never
    touches the logs.
    """

    def __init__(self, store, tax_rate=DEFAULT_TAX_RATE, clock=datetime.now):
        self.store = store
        self.tax_rate = D(tax_rate)
        self.clock = clock

    def quote(self, items: Iterable[LineItem]) -> Totals:
        subtotal = round_money(sum((i.line_total for i in items), Decimal("0")))
        tax_amount = round_money(subtotal * self.tax_rate / Decimal(100))
        return Totals(subtotal, tax_amount, subtotal + tax_amount)

    def pay_cash(self, items, amount_paid=None) -> Transaction:
        """Settle in cash; ``amount_paid`` of None means exact change."""
        items = self._require_items(items)
        totals = self.quote(items)
        if amount_paid is None:
            paid = totals.total_due
        else:
            paid = round_money(_to_money(amount_paid, "amountPaid"))
        if paid < totals.total_due:
            raise InsufficientPayment("Insufficient cash payment")
        tx = self._transaction(items, totals, PaymentMethod.CASH, paid, paid - totals.total_due)
        return self.store.append(tx)

    def pay_card(self, items, last4, holder_name: Optional[str] = None,
                 expiry: Optional[str] = None) -> Transaction:
        items = self._require_items(items)
        totals = self.quote(items)
        tx = self._transaction(
            items, totals, PaymentMethod.CARD, totals.total_due, Decimal("0.00"),
            card_number_masked=mask_card(last4),
            card_holder_name=str(holder_name).strip() if holder_name else None,
            card_expiry=str(expiry).strip() if expiry else None,
        )
        return self.store.append(tx)

    def checkout(self, payload: Mapping) -> Transaction:
        """
        Settle an API checkout body:
          - items: [{name, price, quantity}]  (missing or non-numeric price and
                                              quantity count as 0; quantity <= 0
                                              lines are dropped)
          - paymentMethod: "CASH" | "CARD"   (anything but CASH is a card)
          - amountPaid                        (cash; defaults to the total)
          - cardLast4, cardHolderName, cardExpiry  (card)
        """
        raw_items = payload.get("items")
        if not isinstance(raw_items, list) or not raw_items:
            raise EmptyCart("No items provided")

        items = []
        for raw in raw_items:
            if not isinstance(raw, Mapping):
                raise InvalidLineItem("each item must be an object")
            name = raw.get("name")
            qty = _quantity(raw.get("quantity"))
            if qty <= 0:
                logger.info("Dropping cart line %r with quantity %s", name, qty)
                continue
            items.append(build_line_item(name, _number_or_zero(raw.get("price"), "price"), qty))

        method = str(payload.get("paymentMethod") or "").strip().upper()
        if method == PaymentMethod.CASH.value:
            return self.pay_cash(items, payload.get("amountPaid"))
        return self.pay_card(
            items,
            payload.get("cardLast4") or DEFAULT_LAST4,
            payload.get("cardHolderName"),
            payload.get("cardExpiry"),
        )

    def _require_items(self, items) -> List[LineItem]:
        items = list(items or [])
        if not items:
            raise EmptyCart("No items provided")
        return items

    def _transaction(self, items, totals: Totals, method: PaymentMethod, paid, change,
                     **card) -> Transaction:
        return Transaction(
            transaction_id=None,
            timestamp=self.clock().replace(microsecond=0),
            subtotal=totals.subtotal,
            tax_rate_percent=self.tax_rate,
            tax_amount=totals.tax_amount,
            total_due=totals.total_due,
            payment_method=method,
            amount_paid=paid,
            change_amount=change,
            line_items=tuple(items),
            **card,
        )
