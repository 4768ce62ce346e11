from .checkout_service import (
    CheckoutError,
    CheckoutService,
    EmptyCart,
    InsufficientPayment,
    InvalidCard,
    InvalidLineItem,
    Totals,
    build_line_item,
    mask_card,
)
from .report_service import export_transactions, summarize, transactions_frame
