"""
txnledger/storage/base.py

Persistence substrate contract.

A RecordStore is a durable, append-only sequence of record dicts kept under
one collection name. The ledger needs only three things from it:

    append(record)  → position   (append-ordering)
    get(position)   → record     (read-your-writes)
    len(store)                   (length query)

Stores do not interpret records beyond storing them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List


DEFAULT_COLLECTION = "TRANSACTIONS"


@dataclass
class Violation:
    """A single detected problem in stored data."""
    at_position:    int
    violation_type: str   # "chain_break" | "invalid_signature"
    detail:         str


@dataclass
class VerificationReport:
    """Aggregate result of a full integrity pass over a store."""
    collection:         str
    total_entries:      int
    chain_valid:        bool = True
    signed_entries:     int = 0
    invalid_signatures: int = 0
    violations:         List[Violation] = field(default_factory=list)

    def __bool__(self) -> bool:
        return not self.violations

    def to_dict(self) -> Dict[str, Any]:
        return {
            "collection":         self.collection,
            "total_entries":      self.total_entries,
            "chain_valid":        self.chain_valid,
            "signed_entries":     self.signed_entries,
            "invalid_signatures": self.invalid_signatures,
            "violations": [
                {
                    "at_position":    v.at_position,
                    "violation_type": v.violation_type,
                    "detail":         v.detail,
                }
                for v in self.violations
            ],
        }


class RecordStore(ABC):
    """Abstract append-only store of record dicts."""

    def __init__(self, collection: str = DEFAULT_COLLECTION) -> None:
        self.collection = collection

    @abstractmethod
    def append(self, record: Dict[str, Any]) -> int:
        """Durably append one record. Returns its zero-based position."""

    @abstractmethod
    def get(self, position: int) -> Dict[str, Any]:
        """Return a copy of the record at position. IndexError if out of range."""

    @abstractmethod
    def __len__(self) -> int:
        ...

    def verify(self) -> VerificationReport:
        """Check stored data. Stores without an integrity layer report clean."""
        return VerificationReport(
            collection=self.collection,
            total_entries=len(self),
        )

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        for position in range(len(self)):
            yield self.get(position)
