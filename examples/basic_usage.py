"""
txnledger: Basic Usage Example

Demonstrates:
- Opening a durable ledger from configuration
- Appending records (including a later status change as a new record)
- The three read views
- Calling through the boundary the way remote callers do
- Verifying the stored chain
"""

import tempfile

from txnledger import LedgerConfig, LedgerService, open_ledger


def main():
    """Basic txnledger usage."""

    print("=" * 60)
    print("txnledger: Basic Usage Example")
    print("=" * 60)
    print()

    data_dir = tempfile.mkdtemp(prefix="txnledger-")
    ledger   = open_ledger(LedgerConfig(data_dir=data_dir, fsync=False))
    print(f"1. Ledger opened at {ledger.store.path}")

    ledger.append(
        txn_type="payment", purpose="repayment", amount=20000, user="Bala",
        reference="value2", balance_before=1000, balance_after=3000,
        status="Pending", description="loan repayment",
        created_at="2024-03-01T10:00:00Z", updated_at="2024-03-01T10:00:00Z",
    )
    ledger.append(
        txn_type="payment", purpose="deposit", amount=500, user="Ada",
        reference="ada-1", balance_before=0, balance_after=500,
        status="Done", description="first deposit",
        created_at="2024-03-01T11:00:00Z", updated_at="2024-03-01T11:00:00Z",
    )
    # no in-place update: the settled state is its own record
    ledger.append(
        txn_type="status_change", purpose="repayment", amount=20000, user="Bala",
        reference="value2-done", balance_before=1000, balance_after=3000,
        status="Done", description="settles value2",
        created_at="2024-03-01T12:00:00Z", updated_at="2024-03-01T12:00:00Z",
    )
    print(f"2. Appended {len(ledger)} records")

    print("3. Records for Bala:")
    for record in ledger.list_by_user("Bala"):
        print(f"     {record.reference:<12} {record.status:<8} {record.amount}")

    service = LedgerService(ledger)
    found = service.invoke("getTransactionById", {"reference": "ada-1"})
    print(f"4. getTransactionById('ada-1') -> {found['description']}")

    report = ledger.verify()
    print(f"5. Verification: {'VALID' if report else 'INVALID'} "
          f"({report.total_entries} entries)")


if __name__ == "__main__":
    main()
