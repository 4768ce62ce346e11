# posledger/utils/money.py

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

Money = Decimal

CENTS = Decimal("0.01")

def D(x) -> Money:
    return x if isinstance(x, Decimal) else Decimal(str(x or "0"))

def round_money(x) -> Money:
    return D(x).quantize(CENTS, rounding=ROUND_HALF_UP)

def to_string_money(x) -> str:
    # plain notation, never "1E+2"
    return format(D(x), "f")

def to_float_money(x) -> float:
    return float(round_money(x))

def parse_money(text: str) -> Money:
    """Strict parse for stored values; raises ValueError on junk or NaN/Infinity."""
    try:
        value = Decimal(text.strip())
    except (InvalidOperation, AttributeError):
        raise ValueError(f"not a number: {text!r}")
    if not value.is_finite():
        raise ValueError(f"not a finite number: {text!r}")
    return value
