"""
txnledger Storage - durable append-only substrates behind the Ledger.
"""

from txnledger.storage.base import (
    DEFAULT_COLLECTION,
    RecordStore,
    VerificationReport,
    Violation,
)
from txnledger.storage.jsonl import JsonlStore
from txnledger.storage.memory import MemoryStore

__all__ = [
    "DEFAULT_COLLECTION",
    "JsonlStore",
    "MemoryStore",
    "RecordStore",
    "VerificationReport",
    "Violation",
]
