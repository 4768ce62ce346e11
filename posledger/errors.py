# posledger/errors.py
import logging

from .services import CheckoutError
from .storage import FieldContainsDelimiter, PartialPersistFailure
from .utils.api import err
from .utils.minijson import UnsupportedJSON

logger = logging.getLogger(__name__)


def register_error_handlers(app):
    # client errors -> 400
    @app.errorhandler(UnsupportedJSON)
    def handle_unsupported_json(e):
        logger.info("Rejected request body: %s", e)
        return err("Invalid request", 400, {"detail": e.message})

    @app.errorhandler(CheckoutError)
    def handle_checkout_error(e):
        return err(str(e), 400)

    @app.errorhandler(FieldContainsDelimiter)
    def handle_field_delimiter(e):
        return err(str(e), 400)

    # persistence failures -> 500
    @app.errorhandler(PartialPersistFailure)
    def handle_partial_persist(e):
        logger.error("Checkout left transaction %s partially saved", e.transaction_id)
        return err("Transaction partially saved", 500, {"transactionId": e.transaction_id})

    @app.errorhandler(OSError)
    def handle_os_error(e):
        logger.exception("Storage failure")
        return err("Could not access transaction storage", 500)

    @app.errorhandler(404)
    def handle_not_found(e):
        return err("Not Found", 404)

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        return err("Method Not Allowed", 405)
