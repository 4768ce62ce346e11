import os


def _env_flag(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


class Config:
    JSON_SORT_KEYS = False
    ENV = os.getenv("FLASK_ENV", "development")

    # storage; an empty data dir means the Flask instance folder
    POS_DATA_DIR = os.getenv("POS_DATA_DIR")
    POS_TRANSACTIONS_FILE = os.getenv("POS_TRANSACTIONS_FILE", "transactions.txt")
    POS_LINE_ITEMS_FILE = os.getenv("POS_LINE_ITEMS_FILE", "line_items.txt")

    POS_TAX_RATE = os.getenv("POS_TAX_RATE", "8.5")
    POS_STRICT_JSON = _env_flag("POS_STRICT_JSON", True)
    POS_LOG_LEVEL = os.getenv("POS_LOG_LEVEL", "INFO")

    @staticmethod
    def init_app(app):
        if not app.config.get("POS_DATA_DIR"):
            os.makedirs(app.instance_path, exist_ok=True)
            app.config["POS_DATA_DIR"] = app.instance_path
