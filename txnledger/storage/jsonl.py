"""
txnledger/storage/jsonl.py

File-backed RecordStore - one JSON line per record.

Layout:
    <data_dir>/<collection>.jsonl

Line format:
    {
        "schema":     "1",
        "collection": "TRANSACTIONS",
        "position":   0, 1, 2, ...
        "prev_hash":  SHA-256(JCS(chain fields of previous line)) | "0" * 64
        "record":     { wire record dict }
        "signer":     64-char Ed25519 public key hex | null
        "signature":  base64url Ed25519 signature over JCS(chain fields) | null
    }

Chain fields are schema, collection, position, prev_hash, record and signer.
Only the signature sits outside them. Removing or swapping the signer of a
line therefore breaks the link from the next line.

append() MUST, in this order:
  1. Build the line from the current head (position, prev_hash)
  2. Sign it when a key is configured
  3. Write it, flush, fsync (when enabled)
  4. Advance in-memory state only after the write returned

A failed write raises StorageError and leaves in-memory state untouched.
The file is truncated back to its size before the write, so a line that
reached the disk but was not acknowledged never shadows the next append.
When that truncate fails too, the store refuses every later append until it
is reopened. There is no retry, and a torn line found on open is fatal.

Not thread-safe on its own. The Ledger serialises access.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from txnledger.core.canonical import GENESIS_HASH, canonical_hash, canonicalize
from txnledger.core.crypto import Ed25519KeyManager
from txnledger.core.exceptions import IntegrityError, StorageError
from txnledger.core.logging_setup import get_logger
from txnledger.storage.base import (
    DEFAULT_COLLECTION,
    RecordStore,
    VerificationReport,
    Violation,
)


STORE_SCHEMA = "1"

_REQUIRED_KEYS = ("schema", "collection", "position", "prev_hash", "record")

logger = get_logger(__name__)


def _chain_fields(entry: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "collection": entry["collection"],
        "position":   entry["position"],
        "prev_hash":  entry["prev_hash"],
        "record":     entry["record"],
        "schema":     entry["schema"],
        "signer":     entry.get("signer"),
    }


class JsonlStore(RecordStore):
    """
    Durable append-only store on a single JSONL file.

    State survives process restart by reading the file on __init__.
    """

    def __init__(
        self,
        data_dir:       str,
        collection:     str = DEFAULT_COLLECTION,
        fsync:          bool = True,
        signing_key:    Optional[Ed25519KeyManager] = None,
        verify_on_open: bool = True,
    ) -> None:
        super().__init__(collection)
        self.fsync       = fsync
        self.signing_key = signing_key

        self._entries:   List[Dict[str, Any]] = []
        self._head_hash: str                  = GENESIS_HASH
        self._broken:    Optional[str]        = None

        self._data_dir = Path(data_dir)
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(
                f"Cannot create data directory: {exc}",
                {"data_dir": str(self._data_dir)},
            ) from exc
        self.path = self._data_dir / f"{collection}.jsonl"

        self._load()

        if verify_on_open and self._entries:
            report = self.verify()
            if not report:
                first = report.violations[0]
                raise IntegrityError(
                    f"Ledger file failed verification: {first.detail}",
                    {
                        "path":       str(self.path),
                        "position":   first.at_position,
                        "violations": len(report.violations),
                    },
                )

    # ── RecordStore API ───────────────────────────────────────

    def append(self, record: Dict[str, Any]) -> int:
        position = len(self._entries)
        entry: Dict[str, Any] = {
            "schema":     STORE_SCHEMA,
            "collection": self.collection,
            "position":   position,
            "prev_hash":  self._head_hash,
            "record":     dict(record),
            "signer":     (
                self.signing_key.public_key_hex if self.signing_key is not None else None
            ),
            "signature":  None,
        }
        chain = _chain_fields(entry)

        if self.signing_key is not None:
            entry["signature"] = self.signing_key.sign(canonicalize(chain))

        self._write_line(entry)

        self._entries.append(entry)
        self._head_hash = canonical_hash(chain)
        return position

    def get(self, position: int) -> Dict[str, Any]:
        if position < 0:
            raise IndexError(f"position must be non-negative, got {position}")
        return dict(self._entries[position]["record"])

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def head_hash(self) -> str:
        """Hash the next appended line will reference as prev_hash."""
        return self._head_hash

    def verify(self) -> VerificationReport:
        """
        Re-check the hash chain and every signature from genesis.

        Unsigned lines are accepted only before the first signed line, so
        signing can be enabled on an existing ledger. With a signing key
        configured, every signed line must carry that key as signer.
        """
        report = VerificationReport(
            collection=self.collection,
            total_entries=len(self._entries),
        )
        expected_prev   = GENESIS_HASH
        expected_signer = (
            self.signing_key.public_key_hex if self.signing_key is not None else None
        )
        seen_signed = False

        for entry in self._entries:
            position = entry["position"]
            chain    = _chain_fields(entry)

            if entry["prev_hash"] != expected_prev:
                report.chain_valid = False
                report.violations.append(Violation(
                    at_position=    position,
                    violation_type= "chain_break",
                    detail=         (
                        f"prev_hash mismatch at position {position}: "
                        f"expected=...{expected_prev[-12:]}, "
                        f"got=...{str(entry['prev_hash'])[-12:]}"
                    ),
                ))

            problem = self._signature_problem(entry, chain, expected_signer, seen_signed)
            if entry.get("signature") or entry.get("signer"):
                report.signed_entries += 1
                seen_signed = True
            if problem:
                report.invalid_signatures += 1
                report.violations.append(Violation(
                    at_position=    position,
                    violation_type= "invalid_signature",
                    detail=         f"{problem} at position {position}",
                ))

            expected_prev = canonical_hash(chain)

        return report

    # ── Internal ──────────────────────────────────────────────

    @staticmethod
    def _signature_problem(
        entry:           Dict[str, Any],
        chain:           Dict[str, Any],
        expected_signer: Optional[str],
        seen_signed:     bool,
    ) -> Optional[str]:
        signature = entry.get("signature")
        signer    = entry.get("signer")

        if not signature and not signer:
            if seen_signed:
                return "missing signature after signed lines"
            return None
        if expected_signer is not None and signer != expected_signer:
            return "signature by an unexpected signer"
        if not signature or not Ed25519KeyManager.verify_detached(
            canonicalize(chain), signature, signer,
        ):
            return "signature does not verify"
        return None

    def _write_line(self, entry: Dict[str, Any]) -> None:
        position = entry["position"]
        if self._broken is not None:
            raise StorageError(
                "Store refuses appends after an unrecovered write failure; reopen it",
                {"path": str(self.path), "cause": self._broken},
            )

        try:
            data = (json.dumps(entry, ensure_ascii=False) + "\n").encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise StorageError(
                f"Failed to encode ledger entry: {exc}",
                {"path": str(self.path), "position": position},
            ) from exc

        offset: Optional[int] = None
        try:
            with open(self.path, "ab") as f:
                offset = f.tell()
                f.write(data)
                f.flush()
                if self.fsync:
                    os.fsync(f.fileno())
        except OSError as exc:
            logger.error(
                "ledger write failed collection=%s position=%s: %s",
                self.collection, position, exc,
            )
            if offset is not None:
                self._truncate_to(offset)
            raise StorageError(
                f"Failed to write ledger entry: {exc}",
                {"path": str(self.path), "position": position},
            ) from exc

    def _truncate_to(self, offset: int) -> None:
        """Drop whatever a failed write left past offset."""
        try:
            os.truncate(self.path, offset)
        except OSError as exc:
            self._broken = str(exc)
            logger.error(
                "could not roll back %s to %d bytes, store is now read-only: %s",
                self.path, offset, exc,
            )

    def _load(self) -> None:
        """
        Read every line of an existing file.
        Blank lines are skipped. Anything else unreadable is fatal.
        """
        if not self.path.exists():
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                lines = f.readlines()
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(
                f"Failed to read ledger file: {exc}",
                {"path": str(self.path)},
            ) from exc

        for line_num, line in enumerate(lines, 1):
            line = line.strip()
            if not line:
                continue

            try:
                entry = json.loads(line)
            except json.JSONDecodeError as exc:
                raise StorageError(
                    f"Invalid JSON at line {line_num}: {exc}",
                    {"path": str(self.path)},
                ) from exc

            self._check_entry_shape(entry, line_num)

            chain = _chain_fields(entry)
            self._entries.append(entry)
            self._head_hash = canonical_hash(chain)

        logger.info(
            "loaded %d entries from %s", len(self._entries), self.path,
        )

    def _check_entry_shape(self, entry: Any, line_num: int) -> None:
        if not isinstance(entry, dict):
            raise StorageError(
                f"Line {line_num} is not a JSON object",
                {"path": str(self.path)},
            )
        missing = [k for k in _REQUIRED_KEYS if k not in entry]
        if missing:
            raise StorageError(
                f"Line {line_num} is missing keys: {', '.join(missing)}",
                {"path": str(self.path)},
            )
        if entry["schema"] != STORE_SCHEMA:
            raise StorageError(
                f"Line {line_num} has unsupported schema {entry['schema']!r}",
                {"path": str(self.path), "expected": STORE_SCHEMA},
            )
        if entry["collection"] != self.collection:
            raise StorageError(
                f"Line {line_num} belongs to collection {entry['collection']!r}",
                {"path": str(self.path), "expected": self.collection},
            )
        if entry["position"] != len(self._entries):
            raise StorageError(
                f"Line {line_num} has position {entry['position']!r}, "
                f"expected {len(self._entries)}",
                {"path": str(self.path)},
            )
        if not isinstance(entry["record"], dict):
            raise StorageError(
                f"Line {line_num} record is not a JSON object",
                {"path": str(self.path)},
            )
