from pathlib import Path
from typing import Iterable, Optional, Tuple

import typer

from kms_cli.cli.utilities import ConfigOption, ServerOption
from kms_cli.config import read_configuration
from kms_cli.core.tokens import KeyScope, NamespaceScope, RootScope, SecretScope, TokenScope, resolve_token
from kms_cli.exceptions import ConfigurationException
from kms_cli.models import TokenTree

config_cli = typer.Typer(help="Inspect the local configuration")

_MASK = "***"


def _scopes(tokens: TokenTree) -> Iterable[Tuple[str, TokenScope]]:
    yield "root", RootScope()

    for ns in sorted(tokens.namespaces):
        yield f"namespaces.{ns}", NamespaceScope(ns)

    for ns, keys in sorted(tokens.keys.items()):
        for key in sorted(keys or {}):
            yield f"keys.{ns}.{key}", KeyScope(ns, key)

    for ns, secrets in sorted(tokens.secrets.items()):
        for key in sorted(secrets or {}):
            yield f"secrets.{ns}.{key}", SecretScope(ns, key)


@config_cli.command("show")
def config_show(config: str = ConfigOption, server: Optional[str] = ServerOption):
    """Show the resolved server and which tokens are set, without revealing them"""
    try:
        configuration = read_configuration(config)
    except ConfigurationException as exc:
        typer.echo(exc)
        raise typer.Exit(code=1)

    typer.echo(f"server: {configuration.resolve_server(server)}")
    for location, scope in _scopes(configuration.tokens):
        token = resolve_token(configuration.tokens, scope)
        typer.echo(f"{location}: {_MASK if token else '(missing)'}")


@config_cli.command("path")
def config_path(config: str = ConfigOption):
    """Print the configuration file that commands will read"""
    typer.echo(Path(config).resolve())
