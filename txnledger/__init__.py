"""
txnledger/__init__.py

txnledger: Append-only transaction ledger.

A durable, ordered store of immutable transaction records with three read
views: every record, records of one user, and the first record carrying a
reference.
"""

__version__ = "0.1.0"

from txnledger.api import LedgerService
from txnledger.config import LedgerConfig, load_config, open_ledger
from txnledger.core.exceptions import (
    ConfigError,
    IntegrityError,
    StorageError,
    TxnLedgerError,
    UnknownMethodError,
    ValidationError,
)
from txnledger.core.models import TransactionRecord
from txnledger.ledger import Ledger
from txnledger.storage import JsonlStore, MemoryStore, RecordStore

__all__ = [
    # Core types
    "Ledger",
    "LedgerService",
    "TransactionRecord",
    # Storage
    "JsonlStore",
    "MemoryStore",
    "RecordStore",
    # Config
    "LedgerConfig",
    "load_config",
    "open_ledger",
    # Errors
    "ConfigError",
    "IntegrityError",
    "StorageError",
    "TxnLedgerError",
    "UnknownMethodError",
    "ValidationError",
]
