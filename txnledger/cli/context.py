"""
Shared state and helpers for txnledger CLI commands.

Exit codes (POSIX-standard, shell-scriptable):
    0  Success
    1  Not found / ledger has violations
    2  Error  (bad config, bad input, storage failure)
"""

import json
import sys
from dataclasses import dataclass
from typing import Any, NoReturn, Optional

import click

from txnledger.config import LedgerConfig, open_ledger
from txnledger.core.exceptions import TxnLedgerError
from txnledger.ledger import Ledger


EXIT_OK        = 0
EXIT_NOT_FOUND = 1
EXIT_ERROR     = 2


@dataclass
class CliState:
    config: LedgerConfig
    ledger: Optional[Ledger] = None


def fail(message: str, code: int = EXIT_ERROR) -> NoReturn:
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(code)


def echo_json(value: Any) -> None:
    click.echo(json.dumps(value, indent=2, ensure_ascii=False))


def get_ledger(ctx: click.Context) -> Ledger:
    """Open the configured ledger on first use."""
    state: CliState = ctx.find_object(CliState)
    if state.ledger is None:
        try:
            state.ledger = open_ledger(state.config)
        except TxnLedgerError as exc:
            fail(f"cannot open ledger: {exc}")
    return state.ledger


pass_state = click.make_pass_decorator(CliState)
