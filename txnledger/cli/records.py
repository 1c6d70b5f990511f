"""
txnledger/cli/records.py

Record commands: append, list, by-user, find, call, stats.
"""

import json
from typing import Optional

import click

from txnledger.api import ALIASES, LedgerService
from txnledger.cli.context import (
    EXIT_NOT_FOUND,
    echo_json,
    fail,
    get_ledger,
)
from txnledger.core.exceptions import TxnLedgerError


@click.command(name="append")
@click.option("--txn-type", required=True, help='Transaction kind, e.g. "payment".')
@click.option("--purpose", required=True, help='Free-text purpose, e.g. "repayment".')
@click.option("--amount", required=True, help="Amount in base units (u64).")
@click.option("--user", required=True, help="Account the transaction belongs to.")
@click.option("--reference", required=True, help="Caller reference for the record.")
@click.option("--balance-before", required=True, help="Balance before (u64).")
@click.option("--balance-after", required=True, help="Balance after (u64).")
@click.option("--status", required=True, help='Lifecycle label, e.g. "Done".')
@click.option("--description", required=True, help="Free-text note.")
@click.option("--created-at", required=True, help="Creation timestamp, stored as given.")
@click.option("--updated-at", required=True, help="Update timestamp, stored as given.")
@click.pass_context
def append_command(
    ctx:            click.Context,
    txn_type:       str,
    purpose:        str,
    amount:         str,
    user:           str,
    reference:      str,
    balance_before: str,
    balance_after:  str,
    status:         str,
    description:    str,
    created_at:     str,
    updated_at:     str,
) -> None:
    """Append one transaction record."""
    ledger = get_ledger(ctx)
    try:
        ledger.append(
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
    except TxnLedgerError as exc:
        fail(str(exc))


@click.command(name="list")
@click.pass_context
def list_command(ctx: click.Context) -> None:
    """Print every record in insertion order."""
    echo_json([r.to_dict() for r in get_ledger(ctx).list_all()])


@click.command(name="by-user")
@click.argument("user")
@click.pass_context
def by_user_command(ctx: click.Context, user: str) -> None:
    """Print the records of USER (exact match) in insertion order."""
    echo_json([r.to_dict() for r in get_ledger(ctx).list_by_user(user)])


@click.command(name="find")
@click.argument("reference")
@click.pass_context
def find_command(ctx: click.Context, reference: str) -> None:
    """Print the first record with REFERENCE. Exit 1 when there is none."""
    record = get_ledger(ctx).find_by_reference(reference)
    if record is None:
        fail(f"no record with reference {reference!r}", EXIT_NOT_FOUND)
    echo_json(record.to_dict())


@click.command(name="call")
@click.argument("method")
@click.argument("args", required=False)
@click.pass_context
def call_command(ctx: click.Context, method: str, args: Optional[str]) -> None:
    """
    Invoke a boundary METHOD with a JSON ARGS object.

    \b
    Examples:
      txnledger call listAll
      txnledger call listByUser '{"user": "Bala"}'
      txnledger call setTransaction '{"txn_type": "payment", ...}'
    """
    try:
        parsed = json.loads(args) if args else {}
    except json.JSONDecodeError as exc:
        fail(f"ARGS is not valid JSON: {exc}")

    service = LedgerService(get_ledger(ctx))
    try:
        result = service.invoke(method, parsed)
    except TxnLedgerError as exc:
        fail(str(exc))

    # append returns nothing; a lookup miss prints null
    if result is not None or ALIASES.get(method, method) == "findByReference":
        echo_json(result)


@click.command(name="stats")
@click.pass_context
def stats_command(ctx: click.Context) -> None:
    """Print record counts for the ledger."""
    echo_json(get_ledger(ctx).stats())
