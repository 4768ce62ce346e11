# ------ posledger/model/__init__.py ------

from .transaction import LineItem, PaymentMethod, Transaction, TIMESTAMP_FORMAT
from .product import CATALOG, Product

__all__ = [
    "CATALOG",
    "LineItem",
    "PaymentMethod",
    "Product",
    "TIMESTAMP_FORMAT",
    "Transaction",
]
