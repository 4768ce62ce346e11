# posledger/checkout/routes.py
from ..extensions import ledger
from ..utils.api import api_ok, ok, request_object
from ..utils.money import to_float_money
from . import bp


@bp.post("")
def checkout():
    """
    Body: {
      "items": [{"name": str, "price": number, "quantity": number}],
      "paymentMethod": "CASH" | "CARD",
      "amountPaid": number,                        (cash)
      "cardLast4", "cardHolderName", "cardExpiry"  (card)
    }
    """
    payload = request_object()
    tx = ledger.checkout.checkout(payload)

    resp = ok(api_ok({
        "transactionId": tx.transaction_id,
        "totalDue": to_float_money(tx.total_due),
    }))
    resp.headers["X-Transaction-Id"] = str(tx.transaction_id)
    return resp
