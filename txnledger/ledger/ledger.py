"""
txnledger/ledger/ledger.py

The transaction Ledger - append-only, ordered, durable.

append() MUST, in this exact order:
  1. Build the TransactionRecord (shape check happens here, outside the lock)
  2. Acquire lock (bounded by lock_timeout)
  3. Write through the RecordStore   - must succeed before state advances
  4. Assert the store returned the next position
  5. Advance cache and indexes
  6. Return None

Queries take the same lock and copy out a snapshot, so a reader sees the
ledger strictly before or strictly after any append.

Query semantics are those of a linear scan from position 0:
    list_by_user       - exact string match, insertion order
    find_by_reference  - first inserted match wins, later duplicates are
                         never returned
The user and reference indexes are an internal shortcut for that scan and
are rebuilt from the store on construction.

There is no update and no delete. A status change is a new record.
"""

import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from txnledger.core.exceptions import StorageError, TxnLedgerError, ValidationError
from txnledger.core.logging_setup import get_logger
from txnledger.core.models import TransactionRecord
from txnledger.storage.base import RecordStore, VerificationReport


logger = get_logger(__name__)

DEFAULT_LOCK_TIMEOUT = 5.0


class Ledger:
    """
    Ordered sequence of TransactionRecords over a RecordStore.

    Thread-safe via internal lock (single-process only).
    Construct once per store and pass it to whatever serves callers.
    """

    def __init__(
        self,
        store:        RecordStore,
        lock_timeout: Optional[float] = DEFAULT_LOCK_TIMEOUT,
    ) -> None:
        self.store        = store
        self.lock_timeout = lock_timeout

        self._lock:         threading.Lock           = threading.Lock()
        self._records:      List[TransactionRecord]  = []
        self._by_user:      Dict[str, List[int]]     = {}
        self._by_reference: Dict[str, int]           = {}

        self._restore_state()

    # ── Public API ────────────────────────────────────────────

    def append(
        self,
        txn_type:       str,
        purpose:        str,
        amount:         int,
        user:           str,
        reference:      str,
        balance_before: int,
        balance_after:  int,
        status:         str,
        description:    str,
        created_at:     str,
        updated_at:     str,
    ) -> None:
        """
        Append one record built exactly from the arguments.

        Returns nothing. Raises ValidationError for a wrongly typed field
        and StorageError when the store cannot complete the write.
        """
        record = TransactionRecord(
            txn_type=       txn_type,
            purpose=        purpose,
            amount=         amount,
            user=           user,
            reference=      reference,
            balance_before= balance_before,
            balance_after=  balance_after,
            status=         status,
            description=    description,
            created_at=     created_at,
            updated_at=     updated_at,
        )
        self.append_record(record)

    def append_record(self, record: TransactionRecord) -> None:
        """Append an already-built record."""
        if not isinstance(record, TransactionRecord):
            raise ValidationError(
                f"expected TransactionRecord, got {type(record).__name__}"
            )

        with self._locked("append"):
            expected = len(self._records)
            try:
                position = self.store.append(record.to_dict())
            except TxnLedgerError:
                raise
            except Exception as exc:
                logger.error("store append failed: %s", exc)
                raise StorageError(
                    f"Store append failed: {exc}",
                    {"collection": self.store.collection},
                ) from exc

            if position != expected:
                raise StorageError(
                    "Store returned an out-of-order position",
                    {"expected": expected, "got": position},
                )

            self._index(position, record)

        logger.debug(
            "appended position=%d user=%s reference=%s",
            position, record.user, record.reference,
        )

    def list_all(self) -> List[TransactionRecord]:
        """Every record in insertion order, as a new list."""
        with self._locked("list_all"):
            return list(self._records)

    def list_by_user(self, user: str) -> List[TransactionRecord]:
        """Records whose user equals `user` exactly, in insertion order."""
        with self._locked("list_by_user"):
            return [self._records[i] for i in self._by_user.get(user, ())]

    def find_by_reference(self, reference: str) -> Optional[TransactionRecord]:
        """First inserted record with this reference, or None."""
        with self._locked("find_by_reference"):
            position = self._by_reference.get(reference)
            return self._records[position] if position is not None else None

    def verify(self) -> VerificationReport:
        """Run the store's integrity check."""
        with self._locked("verify"):
            return self.store.verify()

    def stats(self) -> Dict[str, Any]:
        """Return current ledger state snapshot."""
        with self._locked("stats"):
            total = len(self._records)
            return {
                "collection":           self.store.collection,
                "total_records":        total,
                "distinct_users":       len(self._by_user),
                "distinct_references":  len(self._by_reference),
                "duplicate_references": total - len(self._by_reference),
            }

    def __len__(self) -> int:
        with self._locked("len"):
            return len(self._records)

    def __iter__(self) -> Iterator[TransactionRecord]:
        return iter(self.list_all())

    # ── Internal ──────────────────────────────────────────────

    @contextmanager
    def _locked(self, operation: str) -> Iterator[None]:
        timeout = -1 if self.lock_timeout is None else self.lock_timeout
        if not self._lock.acquire(timeout=timeout):
            logger.error(
                "%s timed out waiting for ledger lock after %ss",
                operation, self.lock_timeout,
            )
            raise StorageError(
                "Timed out waiting for ledger lock",
                {"operation": operation, "timeout": self.lock_timeout},
            )
        try:
            yield
        finally:
            self._lock.release()

    def _index(self, position: int, record: TransactionRecord) -> None:
        self._records.append(record)
        self._by_user.setdefault(record.user, []).append(position)
        # first match wins; later duplicates stay unreachable by reference
        self._by_reference.setdefault(record.reference, position)

    def _restore_state(self) -> None:
        """
        Rebuild cache and indexes from the store.
        Called once at construction. A record that no longer has the
        TransactionRecord shape is a storage failure.
        """
        try:
            count = len(self.store)
            for position in range(count):
                data = self.store.get(position)
                try:
                    record = TransactionRecord.from_dict(data)
                except ValidationError as exc:
                    raise StorageError(
                        f"Unreadable record at position {position}: {exc}",
                        {"collection": self.store.collection},
                    ) from exc
                self._index(position, record)
        except TxnLedgerError:
            raise
        except Exception as exc:
            raise StorageError(
                f"Failed to load ledger: {exc}",
                {"collection": self.store.collection},
            ) from exc

        logger.info(
            "ledger ready collection=%s records=%d",
            self.store.collection, len(self._records),
        )
