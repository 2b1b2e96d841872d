from typing import Optional

import typer

from kms_cli.cli.utilities import ConfigOption, ServerOption, execute

namespace_cli = typer.Typer(help="Manage namespaces (root token)")


@namespace_cli.command("list")
def namespace_list(
    show_all: bool = typer.Option(False, "-a", "--all", help="List disabled namespace"),
    config: str = ConfigOption,
    server: Optional[str] = ServerOption,
):
    """List namespace"""
    execute("ns list", config, server, all=show_all)


@namespace_cli.command("create")
def namespace_create(name: str, config: str = ConfigOption, server: Optional[str] = ServerOption):
    """New namespace"""
    execute("ns create", config, server, name=name)


@namespace_cli.command("reset")
def namespace_reset(
    name: str,
    disable: bool = typer.Option(False, "-d", "--disable", help="Disable namespace"),
    config: str = ConfigOption,
    server: Optional[str] = ServerOption,
):
    """Reset namespace token"""
    execute("ns reset", config, server, name=name, disable=disable)
