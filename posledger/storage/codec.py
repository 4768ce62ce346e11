"""Pipe-delimited row format for transaction headers and line items.

Transaction log row::

    id|timestamp|subtotal|taxRatePercent|taxAmount|totalDue|paymentMethod|amountPaid|changeAmount|maskedCard|holderName|expiry

Line-item log row::

    transactionId|description|quantity|unitPrice|lineTotal

Fields are never escaped. A string field holding the delimiter (or a line
break) cannot be represented, so encoding one raises FieldContainsDelimiter
rather than writing a row that would decode differently.
"""

import re
from datetime import datetime
from typing import List, Optional

from ..model.transaction import LineItem, PaymentMethod, Transaction, TIMESTAMP_FORMAT
from ..utils.money import parse_money, to_string_money
from .errors import (
    FieldContainsDelimiter,
    MalformedField,
    MalformedNumber,
    MalformedTimestamp,
    TruncatedRecord,
)

DELIMITER = "|"
HEADER_MIN_FIELDS = 9
LINE_ITEM_FIELDS = 5

# ASCII only; int() and Decimal() also take "1_000" and non-ASCII digits
_INT = re.compile(r"-?[0-9]+")
_DECIMAL = re.compile(r"-?[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")


class RecordCodec:
    """Encodes and decodes one row at a time. Stateless."""

    def __init__(self, delimiter: str = DELIMITER):
        self.delimiter = delimiter

    # ---- encoding ------------------------------------------------------

    def encode_header(self, tx: Transaction) -> str:
        if tx.transaction_id is None:
            raise ValueError("transaction has no id; save it through the store")
        fields = [
            str(tx.transaction_id),
            tx.timestamp.strftime(TIMESTAMP_FORMAT),
            to_string_money(tx.subtotal),
            to_string_money(tx.tax_rate_percent),
            to_string_money(tx.tax_amount),
            to_string_money(tx.total_due),
            tx.payment_method.value,
            to_string_money(tx.amount_paid),
            to_string_money(tx.change_amount),
            self._text("card_number_masked", tx.card_number_masked),
            self._text("card_holder_name", tx.card_holder_name),
            self._text("card_expiry", tx.card_expiry),
        ]
        return self.delimiter.join(fields)

    def encode_line_item(self, item: LineItem) -> str:
        if item.transaction_id is None:
            raise ValueError("line item has no transaction id; save it through the store")
        fields = [
            str(item.transaction_id),
            self._text("description", item.description),
            str(item.quantity),
            to_string_money(item.unit_price),
            to_string_money(item.line_total),
        ]
        return self.delimiter.join(fields)

    def _text(self, name: str, value: Optional[str]) -> str:
        if value is None:
            return ""
        for ch in (self.delimiter, "\n", "\r"):
            if ch in value:
                raise FieldContainsDelimiter(name, value)
        return value

    # ---- decoding ------------------------------------------------------

    def decode_header(self, line: str) -> Transaction:
        parts = self._split(line)
        if len(parts) < HEADER_MIN_FIELDS:
            raise TruncatedRecord(
                f"header row has {len(parts)} fields, expected at least {HEADER_MIN_FIELDS}",
                line,
            )

        return Transaction(
            transaction_id=_int(parts[0], "transactionId", line),
            timestamp=_timestamp(parts[1], line),
            subtotal=_money(parts[2], "subtotal", line),
            tax_rate_percent=_money(parts[3], "taxRatePercent", line),
            tax_amount=_money(parts[4], "taxAmount", line),
            total_due=_money(parts[5], "totalDue", line),
            payment_method=_payment_method(parts[6], line),
            amount_paid=_money(parts[7], "amountPaid", line),
            change_amount=_money(parts[8], "changeAmount", line),
            card_number_masked=_optional(parts, 9),
            card_holder_name=_optional(parts, 10),
            card_expiry=_optional(parts, 11),
        )

    def decode_line_item(self, line: str) -> LineItem:
        parts = self._split(line)
        if len(parts) < LINE_ITEM_FIELDS:
            raise TruncatedRecord(
                f"line-item row has {len(parts)} fields, expected {LINE_ITEM_FIELDS}",
                line,
            )
        return LineItem(
            transaction_id=_int(parts[0], "transactionId", line),
            description=parts[1],
            quantity=_int(parts[2], "quantity", line),
            unit_price=_money(parts[3], "unitPrice", line),
            line_total=_money(parts[4], "lineTotal", line),
        )

    def _split(self, line: str) -> List[str]:
        return line.rstrip("\r\n").split(self.delimiter)


def _int(text: str, field: str, line: str) -> int:
    if not _INT.fullmatch(text.strip()):
        raise MalformedNumber(f"{field} is not an integer: {text!r}", line)
    return int(text.strip())


def _money(text: str, field: str, line: str):
    if not _DECIMAL.fullmatch(text.strip()):
        raise MalformedNumber(f"{field} is not a number: {text!r}", line)
    try:
        return parse_money(text)
    except ValueError:
        raise MalformedNumber(f"{field} is not a number: {text!r}", line)


def _timestamp(text: str, line: str) -> datetime:
    try:
        return datetime.strptime(text, TIMESTAMP_FORMAT)
    except ValueError:
        raise MalformedTimestamp(f"bad timestamp: {text!r}", line)


def _payment_method(text: str, line: str) -> PaymentMethod:
    try:
        return PaymentMethod(text.strip().upper())
    except ValueError:
        raise MalformedField(f"unknown payment method: {text!r}", line)


def _optional(parts: List[str], index: int) -> Optional[str]:
    if len(parts) > index and parts[index]:
        return parts[index]
    return None
