"""Unit tests for the append-only TransactionStore."""

import logging
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from posledger.model import LineItem, PaymentMethod
from posledger.storage import FieldContainsDelimiter, PartialPersistFailure, TransactionStore
from tests.conftest import make_transaction

HEADER = "{id}|2024-03-01 12:30:45|25.00|8.5|2.13|27.13|CASH|30.00|2.87|||"


class TestIdentifiers:
    """Id assignment from the in-memory counter."""

    def test_empty_store_starts_at_one(self, store):
        assert store.next_id() == 1
        assert store.load_all() == []

    def test_ids_follow_appends(self, store, sample_transaction):
        saved = [store.append(sample_transaction) for _ in range(3)]

        assert [t.transaction_id for t in saved] == [1, 2, 3]
        assert store.next_id() == 4

    def test_counter_seeded_from_existing_log(self, tmp_path, sample_transaction):
        (tmp_path / "transactions.txt").write_text(
            HEADER.format(id=4) + "\n" + HEADER.format(id=11) + "\n" + HEADER.format(id=2) + "\n"
        )

        store = TransactionStore.in_directory(tmp_path)

        assert store.next_id() == 12
        assert store.append(sample_transaction).transaction_id == 12

    def test_refresh_picks_up_foreign_writes(self, store, sample_transaction):
        store.append(sample_transaction)
        with open(store.transactions_path, "a") as fh:
            fh.write(HEADER.format(id=40) + "\n")

        assert store.next_id() == 2
        assert store.refresh() == 41

    def test_explicit_id_is_kept(self, store):
        saved = store.append(make_transaction(transaction_id=10))

        assert saved.transaction_id == 10
        assert store.next_id() == 11

    def test_line_items_take_the_assigned_id(self, store, sample_transaction):
        saved = store.append(sample_transaction)

        assert all(i.transaction_id == saved.transaction_id for i in saved.line_items)
        assert store.line_items_path.read_text() == "1|Cap|2|12.50|25.00\n"

    @pytest.mark.parametrize("item_id", [None, 3])
    def test_explicit_id_stamps_line_items(self, store, item_id):
        """Items are written under the header id whatever id they carried."""
        tx = make_transaction(
            transaction_id=10,
            items=[LineItem(item_id, "Cap", 2, Decimal("12.50"), Decimal("25.00"))],
        )

        saved = store.append(tx)

        assert saved.line_items[0].transaction_id == 10
        assert store.line_items_path.read_text() == "10|Cap|2|12.50|25.00\n"
        assert len(store.get(10).line_items) == 1

    def test_concurrent_appends_get_distinct_ids(self, store, sample_transaction):
        with ThreadPoolExecutor(max_workers=8) as pool:
            saved = list(pool.map(lambda _: store.append(sample_transaction), range(40)))

        ids = sorted(t.transaction_id for t in saved)
        assert ids == list(range(1, 41))
        assert len(store.load_all()) == 40


class TestLoading:
    """Reading both logs back and joining them."""

    def test_append_then_load(self, store, sample_transaction):
        store.append(sample_transaction)

        loaded = store.load_all()

        assert len(loaded) == 1
        tx = loaded[0]
        assert tx.transaction_id == 1
        assert tx.subtotal == Decimal("25.00")
        assert tx.tax_amount == Decimal("2.13")
        assert tx.total_due == Decimal("27.13")
        assert tx.amount_paid == Decimal("30.00")
        assert tx.change_amount == Decimal("2.87")
        assert tx.line_items == (LineItem(1, "Cap", 2, Decimal("12.50"), Decimal("25.00")),)

    def test_load_is_repeatable(self, store, sample_transaction):
        store.append(sample_transaction)
        store.append(make_transaction(method=PaymentMethod.CARD, card_number_masked="****-****-****-4242"))

        assert store.load_all() == store.load_all()

    def test_missing_files_load_empty(self, tmp_path):
        store = TransactionStore.in_directory(tmp_path / "does-not-exist")

        assert store.load_all() == []
        assert store.get(1) is None

    def test_bad_rows_are_skipped(self, tmp_path, caplog):
        (tmp_path / "transactions.txt").write_text(
            HEADER.format(id=1) + "\n"
            "2|2024-03-01 12:30:45|25.00\n"
            "\n"
            + HEADER.format(id=3) + "\n"
        )
        (tmp_path / "line_items.txt").write_text(
            "1|Cap|2|12.50|25.00\n"
            "3|Cap|two|12.50|25.00\n"
            "3|Hoodie|1|29.99|29.99\n"
        )

        with caplog.at_level(logging.WARNING):
            loaded = TransactionStore.in_directory(tmp_path).load_all()

        assert [t.transaction_id for t in loaded] == [1, 3]
        assert [i.description for i in loaded[1].line_items] == ["Hoodie"]
        assert "Skipping transaction row 2" in caplog.text

    def test_rows_that_are_not_utf8_are_skipped(self, tmp_path, caplog):
        (tmp_path / "transactions.txt").write_bytes(
            HEADER.format(id=1).encode() + b"\n"
            b"2|\xff\xfe|bad\n"
            + HEADER.format(id=3).encode() + b"\n"
        )
        (tmp_path / "line_items.txt").write_bytes(b"3|Caf\xe9|1|4.50|4.50\n3|Hoodie|1|29.99|29.99\n")

        with caplog.at_level(logging.WARNING):
            store = TransactionStore.in_directory(tmp_path)
            loaded = store.load_all()

        assert store.next_id() == 4
        assert [t.transaction_id for t in loaded] == [1, 3]
        assert [i.description for i in loaded[1].line_items] == ["Hoodie"]
        assert "not valid UTF-8" in caplog.text

    def test_bad_line_item_logged_once_per_load(self, tmp_path, caplog):
        (tmp_path / "transactions.txt").write_text(
            HEADER.format(id=1) + "\n" + HEADER.format(id=2) + "\n" + HEADER.format(id=3) + "\n"
        )
        (tmp_path / "line_items.txt").write_text("1|Cap|two|12.50|25.00\n2|Cap|1|12.50|12.50\n")
        store = TransactionStore.in_directory(tmp_path)

        with caplog.at_level(logging.WARNING):
            loaded = store.load_all()

        assert [len(t.line_items) for t in loaded] == [0, 1, 0]
        assert caplog.text.count("Skipping line-item row 1") == 1

    def test_duplicate_ids_each_get_every_item(self, tmp_path):
        (tmp_path / "transactions.txt").write_text(HEADER.format(id=5) + "\n" + HEADER.format(id=5) + "\n")
        (tmp_path / "line_items.txt").write_text("5|Cap|1|12.50|12.50\n5|Hoodie|1|29.99|29.99\n")

        loaded = TransactionStore.in_directory(tmp_path).load_all()

        assert len(loaded) == 2
        assert loaded[0].line_items == loaded[1].line_items
        assert len(loaded[0].line_items) == 2

    def test_header_without_items(self, tmp_path):
        (tmp_path / "transactions.txt").write_text(HEADER.format(id=1) + "\n")

        loaded = TransactionStore.in_directory(tmp_path).load_all()

        assert loaded[0].line_items == ()

    def test_get_by_id(self, store, sample_transaction):
        store.append(sample_transaction)
        store.append(sample_transaction)

        assert store.get(2).transaction_id == 2
        assert store.get(3) is None


class TestWriteFailures:
    """What reaches disk when an append fails part way."""

    def test_encoding_error_writes_nothing(self, store):
        tx = make_transaction(items=[LineItem(None, "Pen|Set", 1, Decimal("5.99"), Decimal("5.99"))])

        with pytest.raises(FieldContainsDelimiter):
            store.append(tx)

        assert not store.transactions_path.exists()
        assert not store.line_items_path.exists()
        assert store.next_id() == 1

    def test_header_write_failure_propagates(self, store, sample_transaction):
        store.transactions_path.mkdir(parents=True)

        with pytest.raises(OSError):
            store.append(sample_transaction)

        assert store.next_id() == 1

    def test_line_item_failure_is_partial(self, store, sample_transaction, caplog):
        store.line_items_path.mkdir(parents=True)

        with caplog.at_level(logging.ERROR):
            with pytest.raises(PartialPersistFailure) as exc:
                store.append(sample_transaction)

        assert exc.value.transaction_id == 1
        assert exc.value.items_written == 0
        assert exc.value.items_expected == 1
        assert isinstance(exc.value.__cause__, OSError)
        # the header stays and the counter moves past it
        assert store.transactions_path.read_text().startswith("1|")
        assert store.next_id() == 2
        assert "saved without its line items" in caplog.text
