"""
tests/test_ledger.py

Ledger behaviour, run against both stores.

  ORDER
    Append order is preserved, nothing dropped or duplicated
    N appends → N records

  QUERIES
    list_by_user is the exact-match subsequence in original order
    find_by_reference returns the first inserted match
    list_all returns a fresh list each call

  SCENARIOS
    A  one record, found by reference, "missing" not found
    B  interleaved users
    C  duplicate reference → first wins
    D  empty ledger
"""

import random

import pytest

from conftest import make_fields
from txnledger.core.exceptions import StorageError, ValidationError
from txnledger.core.models import TransactionRecord
from txnledger.ledger import Ledger
from txnledger.storage import MemoryStore


@pytest.fixture(params=["memory", "jsonl"])
def any_ledger(request, ledger, jsonl_ledger):
    return ledger if request.param == "memory" else jsonl_ledger


# ─────────────────────────────────────────────────────────────
# SCENARIOS
# ─────────────────────────────────────────────────────────────

class TestScenarios:

    def test_scenario_a_single_record(self, any_ledger):
        any_ledger.append(**make_fields())
        expected = TransactionRecord(**make_fields())

        assert any_ledger.list_all() == [expected]
        assert any_ledger.find_by_reference("value2") == expected
        assert any_ledger.find_by_reference("missing") is None

    def test_scenario_b_interleaved_users(self, any_ledger):
        for i, user in enumerate(["Bala", "Ada", "Bala", "Ada"]):
            any_ledger.append(**make_fields(user=user, reference=f"r{i}"))

        bala = any_ledger.list_by_user("Bala")
        assert [r.reference for r in bala] == ["r0", "r2"]
        assert all(r.user == "Bala" for r in bala)
        assert any_ledger.list_by_user("Carl") == []

    def test_scenario_c_duplicate_reference_first_wins(self, any_ledger):
        any_ledger.append(**make_fields(reference="dup", description="first"))
        any_ledger.append(**make_fields(reference="dup", description="second"))

        found = any_ledger.find_by_reference("dup")
        assert found.description == "first"
        assert len(any_ledger) == 2

    def test_scenario_d_empty_ledger(self, any_ledger):
        assert any_ledger.list_all() == []
        assert any_ledger.list_by_user("anything") == []
        assert any_ledger.find_by_reference("anything") is None
        assert len(any_ledger) == 0


# ─────────────────────────────────────────────────────────────
# PROPERTIES
# ─────────────────────────────────────────────────────────────

class TestOrderAndFilter:

    def test_append_order_and_length(self, any_ledger):
        rng = random.Random(7)
        appended = []
        for i in range(50):
            fields = make_fields(
                user=rng.choice(["Bala", "Ada", "Carl", "bala"]),
                reference=f"ref-{rng.randint(0, 20)}",
                amount=rng.randint(0, 10 ** 6),
            )
            any_ledger.append(**fields)
            appended.append(TransactionRecord(**fields))

        assert any_ledger.list_all() == appended
        assert len(any_ledger.list_all()) == 50

        for user in ("Bala", "Ada", "Carl", "bala", "nobody"):
            assert any_ledger.list_by_user(user) == [
                r for r in appended if r.user == user
            ]

        for i in range(21):
            ref = f"ref-{i}"
            first = next((r for r in appended if r.reference == ref), None)
            assert any_ledger.find_by_reference(ref) == first

    def test_user_match_is_exact(self, ledger):
        ledger.append(**make_fields(user="Bala"))
        assert ledger.list_by_user("bala") == []
        assert ledger.list_by_user(" Bala") == []
        assert ledger.list_by_user("Bala ") == []

    def test_list_all_is_a_copy(self, ledger):
        ledger.append(**make_fields())
        snapshot = ledger.list_all()
        snapshot.clear()
        snapshot = ledger.list_by_user("Bala")
        snapshot.append("junk")
        assert len(ledger.list_all()) == 1
        assert len(ledger.list_by_user("Bala")) == 1

    def test_append_returns_nothing(self, ledger):
        assert ledger.append(**make_fields()) is None

    def test_append_record(self, ledger):
        record = TransactionRecord(**make_fields(reference="built"))
        ledger.append_record(record)
        assert ledger.find_by_reference("built") is record

    def test_append_record_rejects_other_types(self, ledger):
        with pytest.raises(ValidationError):
            ledger.append_record({"reference": "x"})
        assert len(ledger) == 0

    def test_invalid_append_leaves_ledger_unchanged(self, ledger):
        with pytest.raises(ValidationError):
            ledger.append(**make_fields(amount=-1))
        assert ledger.list_all() == []

    def test_stats(self, ledger):
        ledger.append(**make_fields(user="Bala", reference="a"))
        ledger.append(**make_fields(user="Ada", reference="a"))
        ledger.append(**make_fields(user="Bala", reference="b"))
        assert ledger.stats() == {
            "collection":           "TRANSACTIONS",
            "total_records":        3,
            "distinct_users":       2,
            "distinct_references":  2,
            "duplicate_references": 1,
        }


# ─────────────────────────────────────────────────────────────
# STORE INTERACTION
# ─────────────────────────────────────────────────────────────

class _FailingStore(MemoryStore):

    def __init__(self):
        super().__init__()
        self.fail = False

    def append(self, record):
        if self.fail:
            raise OSError("disk full")
        return super().append(record)


class _SkippingStore(MemoryStore):

    def append(self, record):
        super().append(record)
        return super().append(record)


class TestStoreFailures:

    def test_store_failure_surfaces_as_storage_error(self):
        store  = _FailingStore()
        ledger = Ledger(store)
        ledger.append(**make_fields(reference="ok"))

        store.fail = True
        with pytest.raises(StorageError, match="disk full"):
            ledger.append(**make_fields(reference="lost"))

        assert [r.reference for r in ledger.list_all()] == ["ok"]
        assert ledger.find_by_reference("lost") is None

    def test_out_of_order_position_rejected(self):
        ledger = Ledger(_SkippingStore())
        with pytest.raises(StorageError, match="out-of-order"):
            ledger.append(**make_fields())

    def test_restore_rejects_malformed_stored_record(self):
        store = MemoryStore()
        store.append({"reference": "half"})
        with pytest.raises(StorageError, match="position 0"):
            Ledger(store)

    def test_restore_rebuilds_indexes(self):
        store = MemoryStore()
        first = Ledger(store)
        first.append(**make_fields(reference="dup", description="one"))
        first.append(**make_fields(reference="dup", description="two", user="Ada"))

        second = Ledger(store)
        assert second.find_by_reference("dup").description == "one"
        assert [r.description for r in second.list_by_user("Ada")] == ["two"]

    def test_lock_timeout_raises_instead_of_blocking(self, ledger):
        ledger.lock_timeout = 0.05
        ledger._lock.acquire()
        try:
            with pytest.raises(StorageError, match="Timed out"):
                ledger.append(**make_fields())
            with pytest.raises(StorageError):
                ledger.list_all()
        finally:
            ledger._lock.release()
        assert len(ledger) == 0
