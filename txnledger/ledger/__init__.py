"""
txnledger Ledger - Immutable Append-Only Transaction Log

The ledger is the source of truth for every recorded transaction.
"""

from txnledger.ledger.ledger import DEFAULT_LOCK_TIMEOUT, Ledger

__all__ = ["DEFAULT_LOCK_TIMEOUT", "Ledger"]
