"""Shared fixtures for the txnledger test suite."""

import pytest

from txnledger.ledger import Ledger
from txnledger.storage import JsonlStore, MemoryStore


def make_fields(**overrides):
    """Keyword arguments for Ledger.append, Scenario A values by default."""
    fields = dict(
        txn_type=       "payment",
        purpose=        "repayment",
        amount=         20000,
        user=           "Bala",
        reference=      "value2",
        balance_before= 1000,
        balance_after=  3000,
        status=         "Done",
        description=    "value2",
        created_at=     "2024-03-01T10:00:00Z",
        updated_at=     "2024-03-01T10:00:00Z",
    )
    fields.update(overrides)
    return fields


def make_wire(**overrides):
    """The same record as a boundary dict (createdAt / updatedAt)."""
    fields = make_fields()
    wire = {
        k: v for k, v in fields.items() if k not in ("created_at", "updated_at")
    }
    wire["createdAt"] = fields["created_at"]
    wire["updatedAt"] = fields["updated_at"]
    wire.update(overrides)
    return wire


@pytest.fixture
def ledger():
    """An empty ledger over a MemoryStore."""
    return Ledger(MemoryStore())


@pytest.fixture
def jsonl_ledger(tmp_path):
    """An empty ledger over a JsonlStore in tmp_path."""
    return Ledger(JsonlStore(data_dir=str(tmp_path), fsync=False))
