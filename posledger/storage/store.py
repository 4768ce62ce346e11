"""Append-only, file-backed transaction storage."""

import logging
import os
import threading
from pathlib import Path
from typing import Iterator, List, Optional

from ..model.transaction import LineItem, Transaction
from .codec import RecordCodec
from .errors import DecodeError, PartialPersistFailure

logger = logging.getLogger(__name__)

TRANSACTIONS_FILE = "transactions.txt"
LINE_ITEMS_FILE = "line_items.txt"


class TransactionStore:
    """
    Two parallel append-only logs: one header row per transaction and one row
    per line item, joined on the transaction id when loading.

    Identifiers come from an in-memory counter seeded by a full scan of the
    transaction log. The counter and both appends share one lock, so callers
    in the same process never receive the same id. A second process writing
    the same files is not coordinated with; call ``refresh()`` to reseed.
    """

    def __init__(self, transactions_path, line_items_path, codec: Optional[RecordCodec] = None):
        self.transactions_path = Path(transactions_path)
        self.line_items_path = Path(line_items_path)
        self.codec = codec or RecordCodec()
        self.lock = threading.RLock()
        self._next_id = self._scan_next_id()

    @classmethod
    def in_directory(cls, data_dir, transactions_file: str = TRANSACTIONS_FILE,
                     line_items_file: str = LINE_ITEMS_FILE) -> "TransactionStore":
        data_dir = Path(data_dir)
        return cls(data_dir / transactions_file, data_dir / line_items_file)

    # ---- identifiers ---------------------------------------------------

    def next_id(self) -> int:
        """Identifier the next ``append`` of an unsaved transaction will get."""
        with self.lock:
            return self._next_id

    def refresh(self) -> int:
        """Reseed the id counter from the transaction log."""
        with self.lock:
            self._next_id = self._scan_next_id()
            return self._next_id

    def _scan_next_id(self) -> int:
        max_id = 0
        for tx in self._read_headers():
            max_id = max(max_id, tx.transaction_id)
        return max_id + 1

    # ---- writes --------------------------------------------------------

    def append(self, transaction: Transaction) -> Transaction:
        """
        Persist a transaction and return it with its identifier filled in.

        Every row is encoded before anything is written, so encoding errors
        leave both logs untouched. An OSError while writing the header
        propagates as is. A failure after the header is on disk raises
        PartialPersistFailure; the header row stays where it is.
        """
        with self.lock:
            # line items always carry the header id
            if transaction.transaction_id is None:
                transaction = transaction.with_id(self._next_id)
            else:
                transaction = transaction.with_id(transaction.transaction_id)

            header = self.codec.encode_header(transaction)
            rows = [self.codec.encode_line_item(i) for i in transaction.line_items]

            self.transactions_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.transactions_path, "a", encoding="utf-8") as fh:
                fh.write(header + "\n")

            # the header is durable from here on; keep the counter ahead of it
            self._next_id = max(self._next_id, transaction.transaction_id + 1)

            written = 0
            try:
                self.line_items_path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.line_items_path, "a", encoding="utf-8") as fh:
                    for row in rows:
                        fh.write(row + "\n")
                        written += 1
            except OSError as e:
                logger.error(
                    "Transaction %s saved without its line items (%d of %d written): %s",
                    transaction.transaction_id, written, len(rows), e,
                )
                raise PartialPersistFailure(transaction.transaction_id, written, len(rows)) from e

            logger.info("Transaction saved to file with ID: %s", transaction.transaction_id)
            return transaction

    # ---- reads ---------------------------------------------------------

    def load_all(self) -> List[Transaction]:
        """
        Every decodable transaction in file order, line items attached.

        The line-item log is decoded once per call, then searched in full for
        each transaction. Duplicate header ids each receive every matching item.
        """
        with self.lock:
            headers = list(self._read_headers())
            items = self._read_line_items()
            return [h.with_line_items(_items_for(items, h.transaction_id)) for h in headers]

    def get(self, transaction_id: int) -> Optional[Transaction]:
        return next((t for t in self.load_all() if t.transaction_id == transaction_id), None)

    def _read_headers(self) -> Iterator[Transaction]:
        if not self.transactions_path.exists():
            logger.info("No transactions file found at %s. Starting fresh.", self.transactions_path)
            return
        for lineno, line in _rows(self.transactions_path):
            try:
                yield self.codec.decode_header(line)
            except DecodeError as e:
                logger.warning("Skipping transaction row %d in %s: %s",
                               lineno, self.transactions_path, e.message)

    def _read_line_items(self) -> List[LineItem]:
        items = []
        if not self.line_items_path.exists():
            return items
        for lineno, line in _rows(self.line_items_path):
            try:
                item = self.codec.decode_line_item(line)
            except DecodeError as e:
                logger.warning("Skipping line-item row %d in %s: %s",
                               lineno, self.line_items_path, e.message)
                continue
            items.append(item)
        return items


def _items_for(items: List[LineItem], transaction_id: int) -> List[LineItem]:
    return [i for i in items if i.transaction_id == transaction_id]


def _rows(path: os.PathLike):
    """
    Yield (line number, row) for every non-blank row; the file is closed on every exit.

    Rows are decoded one at a time, so a row that is not valid UTF-8 is
    logged and skipped without hiding the rows after it.
    """
    with open(path, "rb") as fh:
        for lineno, raw in enumerate(fh, 1):
            try:
                line = raw.decode("utf-8").rstrip("\r\n")
            except UnicodeDecodeError as e:
                logger.warning("Skipping row %d in %s: not valid UTF-8 (%s)", lineno, path, e.reason)
                continue
            if line.strip():
                yield lineno, line
