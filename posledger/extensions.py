# posledger/extensions.py
from flask import current_app
from flask_cors import CORS

from .services import CheckoutService
from .storage import TransactionStore


class Ledger:
    """Binds one TransactionStore and its CheckoutService to each app."""

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        store = TransactionStore.in_directory(
            app.config["POS_DATA_DIR"],
            app.config["POS_TRANSACTIONS_FILE"],
            app.config["POS_LINE_ITEMS_FILE"],
        )
        app.extensions["posledger"] = {
            "store": store,
            "checkout": CheckoutService(store, tax_rate=app.config["POS_TAX_RATE"]),
        }

    @property
    def store(self) -> TransactionStore:
        return current_app.extensions["posledger"]["store"]

    @property
    def checkout(self) -> CheckoutService:
        return current_app.extensions["posledger"]["checkout"]


cors = CORS()
ledger = Ledger()
