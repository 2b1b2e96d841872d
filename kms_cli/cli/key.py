from typing import Optional

import typer

from kms_cli.cli.utilities import ConfigOption, ServerOption, execute

key_cli = typer.Typer(help="Manage keys in a namespace (namespace token)")


@key_cli.command("list")
def key_list(
    ns: str,
    show_all: bool = typer.Option(False, "-a", "--all", help="List disabled keys"),
    config: str = ConfigOption,
    server: Optional[str] = ServerOption,
):
    """List key in a namespace"""
    execute("key list", config, server, ns=ns, all=show_all)


@key_cli.command("create")
def key_create(
    ns: str,
    name: str,
    key_type: str = typer.Argument(..., metavar="TYPE"),
    config: str = ConfigOption,
    server: Optional[str] = ServerOption,
):
    """Create key in a namespace"""
    execute("key create", config, server, ns=ns, name=name, type=key_type)


@key_cli.command("import")
def key_import(
    ns: str,
    name: str,
    key_type: str = typer.Argument(..., metavar="TYPE"),
    keyfile: str = typer.Argument(...),
    config: str = ConfigOption,
    server: Optional[str] = ServerOption,
):
    """Import key (pem format) into a namespace"""
    execute("key import", config, server, ns=ns, name=name, type=key_type, keyfile=keyfile)


@key_cli.command("reset")
def key_reset(
    ns: str,
    name: str,
    disable: bool = typer.Option(False, "-d", "--disable", help="Disable key"),
    config: str = ConfigOption,
    server: Optional[str] = ServerOption,
):
    """Reset key token"""
    execute("key reset", config, server, ns=ns, name=name, disable=disable)
