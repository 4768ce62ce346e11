from .codec import DELIMITER, RecordCodec
from .errors import (
    DecodeError,
    FieldContainsDelimiter,
    MalformedField,
    MalformedNumber,
    MalformedTimestamp,
    PartialPersistFailure,
    StorageError,
    TruncatedRecord,
)
from .store import TransactionStore

__all__ = [
    "DELIMITER",
    "DecodeError",
    "FieldContainsDelimiter",
    "MalformedField",
    "MalformedNumber",
    "MalformedTimestamp",
    "PartialPersistFailure",
    "RecordCodec",
    "StorageError",
    "TransactionStore",
    "TruncatedRecord",
]
