"""Errors raised by the record codec and the transaction store."""


class DecodeError(ValueError):
    """A stored row could not be turned back into a record.

    The store recovers from these locally: the row is skipped and logged.
    """

    def __init__(self, message: str, line: str = ""):
        super().__init__(message)
        self.message = message
        self.line = line


class TruncatedRecord(DecodeError):
    """Row has fewer fields than the schema requires."""


class MalformedNumber(DecodeError):
    """A numeric field could not be parsed."""


class MalformedTimestamp(DecodeError):
    """The timestamp field does not match ``%Y-%m-%d %H:%M:%S``."""


class MalformedField(DecodeError):
    """A non-numeric field holds a value outside its domain."""


class FieldContainsDelimiter(ValueError):
    """A string field would break the delimited row format if written."""

    def __init__(self, field: str, value: str):
        super().__init__(f"field '{field}' contains a reserved character: {value!r}")
        self.field = field
        self.value = value


class StorageError(Exception):
    """Base class for persistence failures surfaced to callers."""


class PartialPersistFailure(StorageError):
    """The header row was written but the line items were not (fully).

    The transaction log and the line-item log now disagree; nothing is
    rolled back or retried.
    """

    def __init__(self, transaction_id: int, items_written: int, items_expected: int):
        super().__init__(
            f"transaction {transaction_id} partially persisted: "
            f"{items_written} of {items_expected} line items written"
        )
        self.transaction_id = transaction_id
        self.items_written = items_written
        self.items_expected = items_expected
