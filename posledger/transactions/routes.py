# posledger/transactions/routes.py
from ..extensions import ledger
from ..services import summarize
from ..utils.api import err, ok
from . import bp


@bp.get("")
def list_transactions():
    """Every stored transaction in log order, line items nested."""
    return ok([t.as_api() for t in ledger.store.load_all()])


@bp.get("/summary")
def transaction_summary():
    return ok(summarize(ledger.store.load_all()))


@bp.get("/<int:transaction_id>")
def get_transaction(transaction_id: int):
    t = ledger.store.get(transaction_id)
    if not t:
        return err("transaction not found", 404)
    return ok(t.as_api())
