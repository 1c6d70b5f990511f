"""
txnledger/cli/__init__.py

txnledger CLI - root Click command group.

Registered in pyproject.toml as:

    [project.scripts]
    txnledger = "txnledger.cli:cli"

Adding a new command:
    1. Create txnledger/cli/your_command.py with a @click.command()
    2. Import it here
    3. cli.add_command(your_command)
"""

from typing import Optional

import click

from txnledger.cli.context import CliState, fail
from txnledger.cli.keygen import keygen_command
from txnledger.cli.records import (
    append_command,
    by_user_command,
    call_command,
    find_command,
    list_command,
    stats_command,
)
from txnledger.cli.verify import verify_command
from txnledger.config import load_config
from txnledger.core.exceptions import ConfigError
from txnledger.core.logging_setup import configure_logging


@click.group()
@click.version_option(package_name="txnledger")
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML configuration file.",
)
@click.option("--data-dir", default=None, help="Directory holding ledger files.")
@click.option("--collection", default=None, help="Collection name (default TRANSACTIONS).")
@click.option(
    "--memory",
    is_flag=True,
    default=False,
    help="Use a throwaway in-memory store.",
)
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR.")
@click.pass_context
def cli(
    ctx:         click.Context,
    config_path: Optional[str],
    data_dir:    Optional[str],
    collection:  Optional[str],
    memory:      bool,
    log_level:   Optional[str],
) -> None:
    """
    txnledger - append-only transaction ledger.

    \b
    Quick start:
      txnledger append --txn-type payment --purpose repayment --amount 20000 \\
          --user Bala --reference value2 --balance-before 1000 \\
          --balance-after 3000 --status Done --description value2 \\
          --created-at 2024-01-01T00:00:00Z --updated-at 2024-01-01T00:00:00Z
      txnledger list
      txnledger by-user Bala
      txnledger find value2
      txnledger verify
    """
    try:
        config = load_config(
            path=       config_path,
            data_dir=   data_dir,
            collection= collection,
            storage=    "memory" if memory else None,
            log_level=  log_level,
        )
    except ConfigError as exc:
        fail(str(exc))

    configure_logging(config.log_level)
    ctx.obj = CliState(config=config)


cli.add_command(append_command)
cli.add_command(list_command)
cli.add_command(by_user_command)
cli.add_command(find_command)
cli.add_command(call_command)
cli.add_command(stats_command)
cli.add_command(verify_command)
cli.add_command(keygen_command)
