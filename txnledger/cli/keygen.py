"""txnledger keygen - create an Ed25519 operator key for signed writes."""

from pathlib import Path

import click

from txnledger.cli.context import fail
from txnledger.core.crypto import Ed25519KeyManager


@click.command(name="keygen")
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing key file.")
def keygen_command(path: str, force: bool) -> None:
    """
    Write a new Ed25519 private key (PEM) to PATH and print its public key.

    Point the signing_key setting at PATH to sign every appended line.
    """
    key_path = Path(path)
    if key_path.exists() and not force:
        fail(f"{key_path} already exists (use --force to overwrite)")

    key = Ed25519KeyManager.generate()
    try:
        key.save(key_path)
    except RuntimeError as exc:
        fail(str(exc))
    click.echo(key.public_key_hex)
