import logging
from typing import Optional

import typer

from kms_cli.constants import DEFAULT_CONFIG
from kms_cli.core import KmsStub
from kms_cli.core.dispatcher import Outcome, run_command
from kms_cli.exceptions import KmsException

# Options shared by every remote command
ConfigOption = typer.Option(DEFAULT_CONFIG, "-c", "--config", help="Config file")
ServerOption = typer.Option(None, "-s", "--server", help="Kms server [name:port]")


def configure_logging(verbose: bool) -> None:
    package_logger = logging.getLogger("kms_cli")
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    package_logger.addHandler(handler)


def execute(command: str, config: str, server: Optional[str], **args) -> None:
    """Run a registered command and translate its outcome into an exit status"""
    try:
        outcome = run_command(command, args, config_path=config, server=server, stub_factory=KmsStub)
    except KmsException as exc:
        # Only startup errors reach this point
        typer.echo(exc)
        raise typer.Exit(code=1)

    if outcome is not Outcome.RENDERED:
        raise typer.Exit(code=1)
