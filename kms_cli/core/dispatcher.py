import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

import typer

from kms_cli.config import read_configuration
from kms_cli.constants import DEFAULT_CONFIG
from kms_cli.core import KmsStub
from kms_cli.core.commands import COMMANDS, Args
from kms_cli.core.tokens import require_token
from kms_cli.exceptions import (
    InputFileException,
    InvalidArgumentException,
    MissingTokenException,
    OutputFileException,
    TransportException,
    UnknownProcedureException,
)
from kms_cli.models import Configuration
from kms_cli.render import spinner

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    RENDERED = "rendered"
    ABORTED = "aborted"
    FAILED = "failed"


@dataclass(frozen=True)
class DispatcherContext:
    """Per-invocation state handed to every command: the loaded configuration and the stub set"""

    config: Configuration
    stub: Any


async def dispatch(name: str, args: Args, context: DispatcherContext) -> Outcome:
    """
    Run a single command to completion
    :param name: The registered command name, e.g. `ns create`
    :param args: Parsed positional arguments and flags
    :param context: Configuration and stub shared by the invocation
    :return: How the command ended; only `RENDERED` is a success
    """
    command = COMMANDS[name]

    scope = command.scope(args)
    try:
        sender = require_token(context.config.tokens, scope)
        request = command.build(args, sender)
    except (MissingTokenException, InputFileException, InvalidArgumentException) as exc:
        logger.debug("%s aborted: %s", name, exc.type)
        typer.echo(exc)
        return Outcome.ABORTED

    logger.debug("%s -> %s (%s scope)", name, command.procedure, scope.kind)
    try:
        with spinner(f"Calling {command.procedure}"):
            response = await context.stub[command.procedure](request)
    except (TransportException, UnknownProcedureException) as exc:
        typer.echo(f"Error: {exc}")
        return Outcome.FAILED

    if not response.ok:
        typer.echo(response.error)
        return Outcome.FAILED

    try:
        command.render(response.data, request, args)
    except OutputFileException as exc:
        typer.echo(exc)
        return Outcome.FAILED

    return Outcome.RENDERED


async def _run(name: str, args: Args, config: Configuration, stub) -> Outcome:
    async with stub:
        return await dispatch(name, args, DispatcherContext(config=config, stub=stub))


def run_command(
    name: str,
    args: Args,
    config_path: str = DEFAULT_CONFIG,
    server: Optional[str] = None,
    stub_factory: Callable[..., Any] = KmsStub,
) -> Outcome:
    """Load configuration, synthesize the stub and dispatch; startup errors propagate to the caller"""
    config = read_configuration(config_path)
    address = config.resolve_server(server)
    stub = stub_factory(address, timeout=config.timeout)

    logger.debug("Running %s against %s", name, address)
    return asyncio.run(_run(name, args, config, stub))
