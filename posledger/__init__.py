import logging

from flask import Flask

from .config import Config
from .extensions import cors, ledger
from .utils.api import json_response

LOG_FORMAT = "[POSLEDGER] %(asctime)s - %(levelname)s - %(name)s - %(message)s"


def create_app(test_config=None):
    app = Flask(__name__, instance_relative_config=True)

    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)
    Config.init_app(app)

    logging.basicConfig(level=app.config["POS_LOG_LEVEL"], format=LOG_FORMAT)
    logging.getLogger(__name__).setLevel(app.config["POS_LOG_LEVEL"])

    # Init extensions
    cors.init_app(app, resources={r"/api/*": {"origins": "*"}})
    ledger.init_app(app)

    # Register blueprints
    from .products import bp as products_bp; app.register_blueprint(products_bp)
    from .transactions import bp as transactions_bp; app.register_blueprint(transactions_bp)
    from .checkout import bp as checkout_bp; app.register_blueprint(checkout_bp)

    from .errors import register_error_handlers; register_error_handlers(app)
    from .cli import register_cli; register_cli(app)

    @app.get("/")
    def health():
        return json_response({"ok": True, "msg": "API running"})

    app.logger.info("Transaction logs in %s", app.config["POS_DATA_DIR"])
    return app
