from typing import Optional

import typer

from kms_cli.cli.utilities import ConfigOption, ServerOption, execute

secret_cli = typer.Typer(help="Manage secrets in a namespace (namespace token)")


@secret_cli.command("list")
def secret_list(
    ns: str,
    show_all: bool = typer.Option(False, "-a", "--all", help="List disabled secrets"),
    config: str = ConfigOption,
    server: Optional[str] = ServerOption,
):
    """List secrets in a namespace"""
    execute("secret list", config, server, ns=ns, all=show_all)


@secret_cli.command("create")
def secret_create(
    ns: str,
    name: str,
    secretfile: str,
    config: str = ConfigOption,
    server: Optional[str] = ServerOption,
):
    """Create new secret"""
    execute("secret create", config, server, ns=ns, name=name, secretfile=secretfile)


@secret_cli.command("reset")
def secret_reset(
    ns: str,
    name: str,
    disable: bool = typer.Option(False, "-d", "--disable", help="Disable secret"),
    config: str = ConfigOption,
    server: Optional[str] = ServerOption,
):
    """Reset secret token"""
    execute("secret reset", config, server, ns=ns, name=name, disable=disable)
