"""Shared fixtures: an app bound to a temporary data directory."""

from datetime import datetime
from decimal import Decimal

import pytest

from posledger import create_app
from posledger.model import LineItem, PaymentMethod, Transaction
from posledger.storage import TransactionStore

FIXED_TIME = datetime(2024, 3, 1, 12, 30, 45)


@pytest.fixture
def app(tmp_path):
    app = create_app({"TESTING": True, "POS_DATA_DIR": str(tmp_path)})
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


@pytest.fixture
def store(tmp_path):
    return TransactionStore.in_directory(tmp_path)


def make_transaction(transaction_id=None, method=PaymentMethod.CASH, items=None, **overrides):
    """A settled 25.00 cash sale with one line item, unless overridden."""
    if items is None:
        items = (LineItem(transaction_id, "Cap", 2, Decimal("12.50"), Decimal("25.00")),)
    fields = dict(
        transaction_id=transaction_id,
        timestamp=FIXED_TIME,
        subtotal=Decimal("25.00"),
        tax_rate_percent=Decimal("8.5"),
        tax_amount=Decimal("2.13"),
        total_due=Decimal("27.13"),
        payment_method=method,
        amount_paid=Decimal("30.00"),
        change_amount=Decimal("2.87"),
        line_items=tuple(items),
    )
    fields.update(overrides)
    return Transaction(**fields)


@pytest.fixture
def sample_transaction():
    return make_transaction()
