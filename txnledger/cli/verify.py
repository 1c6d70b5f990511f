"""
txnledger/cli/verify.py

txnledger verify - integrity check of a stored ledger.

Usage:
    txnledger verify                  Human output (default)
    txnledger verify --format json    Machine-readable JSON
    txnledger verify --quiet          Exit code only

Exit codes:
    0  Ledger fully valid (chain + signatures)
    1  Ledger has violations
    2  Error (unreadable file, bad config)

Opening the ledger already verifies it when verify_on_open is set, so this
command opens the store with verification deferred and reports every
violation instead of stopping at the first.
"""

import sys
from dataclasses import replace

import click

from txnledger.cli.context import (
    EXIT_ERROR,
    EXIT_NOT_FOUND,
    EXIT_OK,
    CliState,
    echo_json,
    fail,
)
from txnledger.config import build_store
from txnledger.core.exceptions import TxnLedgerError
from txnledger.storage import VerificationReport


def _row_ok(label: str, value: str) -> str:
    return f"  {click.style(f'{label:<16}', dim=True)}  {click.style('OK', fg='green')}    {value}"


def _row_fail(label: str, value: str) -> str:
    return f"  {click.style(f'{label:<16}', dim=True)}  {click.style('FAIL', fg='red')}  {value}"


def _output_human(report: VerificationReport, location: str) -> None:
    bar = "═" * 60
    click.echo()
    click.echo(click.style(f"  {bar}", bold=True))
    click.echo(click.style("  txnledger  ·  Ledger Verification", bold=True))
    click.echo(click.style(f"  {bar}", bold=True))
    click.echo()
    click.echo(f"  {'Ledger':<16}  {location}")
    click.echo(f"  {'Collection':<16}  {report.collection}")
    click.echo(f"  {'Entries':<16}  {report.total_entries:,}")
    click.echo()

    chain_v = [v for v in report.violations if v.violation_type == "chain_break"]
    if not chain_v:
        click.echo(_row_ok("Chain", "intact"))
    else:
        click.echo(_row_fail("Chain", f"{len(chain_v)} break(s) detected"))

    if report.invalid_signatures == 0:
        click.echo(_row_ok(
            "Signatures", f"{report.signed_entries:,} signed, all valid"
        ))
    else:
        click.echo(_row_fail(
            "Signatures", f"{report.invalid_signatures:,} INVALID"
        ))

    if report.violations:
        click.echo()
        for v in report.violations[:20]:
            click.echo(f"    [{v.at_position}] {v.violation_type}: {v.detail}")
        if len(report.violations) > 20:
            click.echo(f"    ... {len(report.violations) - 20} more")

    click.echo()
    verdict = (
        click.style("VALID", fg="green", bold=True)
        if report else click.style("INVALID", fg="red", bold=True)
    )
    click.echo(f"  Result: {verdict}")
    click.echo()


@click.command(name="verify")
@click.option(
    "--format", "fmt",
    type=click.Choice(["human", "json"], case_sensitive=False),
    default="human",
    show_default=True,
    help="Output format.",
)
@click.option(
    "--quiet",
    is_flag=True,
    default=False,
    help="Suppress all output. Use exit code only (0=valid, 1=invalid, 2=error).",
)
@click.pass_context
def verify_command(ctx: click.Context, fmt: str, quiet: bool) -> None:
    """Verify the ledger's hash chain and signatures."""
    state: CliState = ctx.find_object(CliState)
    config = replace(state.config, verify_on_open=False)

    try:
        store  = build_store(config)
        report = store.verify()
    except TxnLedgerError as exc:
        if quiet:
            sys.exit(EXIT_ERROR)
        fail(str(exc))

    code = EXIT_OK if report else EXIT_NOT_FOUND
    if quiet:
        sys.exit(code)

    location = str(getattr(store, "path", f"<{config.storage}>"))
    if fmt == "json":
        payload = report.to_dict()
        payload["ledger"] = location
        payload["valid"]  = bool(report)
        echo_json(payload)
    else:
        _output_human(report, location)

    sys.exit(code)
