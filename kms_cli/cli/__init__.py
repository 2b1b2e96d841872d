from typing import Optional

import typer

from kms_cli import __version__
from kms_cli.cli.config import config_cli
from kms_cli.cli.key import key_cli
from kms_cli.cli.namespace import namespace_cli
from kms_cli.cli.secret import secret_cli
from kms_cli.cli.utilities import ConfigOption, ServerOption, configure_logging, execute

# Specify CLI structure
kms_cli = typer.Typer(help="Key management service client")
kms_cli.add_typer(config_cli, name="config")
kms_cli.add_typer(namespace_cli, name="ns")
kms_cli.add_typer(key_cli, name="key")
kms_cli.add_typer(secret_cli, name="secret")


def _print_version(value: bool):
    if value:
        typer.echo(f"kms-cli v{__version__}")
        raise typer.Exit()


@kms_cli.callback()
def main(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Log debug output to stderr"),
    version: bool = typer.Option(False, "--version", callback=_print_version, is_eager=True, help="Show the version"),
):
    configure_logging(verbose)


@kms_cli.command("encrypt")
def encrypt(
    ns: str,
    key: str,
    file: str,
    output: Optional[str] = typer.Option(None, "-o", "--output", help="Output file"),
    config: str = ConfigOption,
    server: Optional[str] = ServerOption,
):
    """Encrypt a file"""
    execute("encrypt", config, server, ns=ns, key=key, file=file, output=output)


@kms_cli.command("decrypt")
def decrypt(
    ns: str,
    key: str,
    file: str,
    output: Optional[str] = typer.Option(None, "-o", "--output", help="Output file"),
    config: str = ConfigOption,
    server: Optional[str] = ServerOption,
):
    """Decrypt a file"""
    execute("decrypt", config, server, ns=ns, key=key, file=file, output=output)


@kms_cli.command("hmac")
def hmac(ns: str, key: str, file: str, config: str = ConfigOption, server: Optional[str] = ServerOption):
    """Calculate hmac of a file"""
    execute("hmac", config, server, ns=ns, key=key, file=file)


@kms_cli.command("sign")
def sign(
    ns: str,
    key: str,
    hexhash: str,
    output: Optional[str] = typer.Option(None, "-o", "--output", help="Output file"),
    config: str = ConfigOption,
    server: Optional[str] = ServerOption,
):
    """Calculate signature of a hash"""
    execute("sign", config, server, ns=ns, key=key, hexhash=hexhash, output=output)


@kms_cli.command("verify")
def verify(
    ns: str,
    key: str,
    hexhash: str,
    sigfile: str,
    config: str = ConfigOption,
    server: Optional[str] = ServerOption,
):
    """Verify signature of a hash"""
    execute("verify", config, server, ns=ns, key=key, hexhash=hexhash, sigfile=sigfile)


@kms_cli.command("get-secret")
def get_secret(ns: str, key: str, config: str = ConfigOption, server: Optional[str] = ServerOption):
    """Read secret from namespace"""
    execute("get-secret", config, server, ns=ns, key=key)
