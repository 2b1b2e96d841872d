import sys
from typing import Any, Callable, Dict, Mapping

import typer
from halo import Halo
from rich import box
from rich.console import Console
from rich.table import Table

from kms_cli.exceptions import OutputFileException

Renderer = Callable[[Any, Dict[str, Any], Mapping[str, Any]], None]


def _cell(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)


def table(columns: Mapping[str, str]) -> Renderer:
    """List items as a table; inactive items are hidden unless `all` was requested"""

    def render(data, request, args):
        view = Table(box=box.SIMPLE, show_edge=False)
        for title in columns.values():
            view.add_column(title)

        for item in data:
            if not (args.get("all") or item.get("active")):
                continue
            view.add_row(*(_cell(item.get(field)) for field in columns))

        Console().print(view)
        typer.echo(f"{len(data)} items")

    return render


def transaction(disabled: str) -> Renderer:
    """Confirm an administrative call, echoing the freshly minted token"""

    def render(data, request, args):
        if args.get("disable"):
            typer.echo(disabled)
        else:
            typer.echo(f"Access token: {request['token']}")

    return render


def raw(data, request, args):
    output = args.get("output")
    if not output:
        typer.echo(data, nl=False)
        return

    try:
        with open(output, "wb") as output_file:
            output_file.write(data)
    except OSError as exc:
        raise OutputFileException(f"Write file {output} failed: {exc.strerror or exc}", path=output)


def hexadecimal(data, request, args):
    typer.echo(data.hex())


def boolean(data, request, args):
    typer.echo("true" if data else "false")


def text(data, request, args):
    typer.echo(data, nl=False)


def spinner(message: str) -> Halo:
    # Spinner frames go to stderr and only on a terminal, keeping stdout exact
    return Halo(text=message, spinner="dots", stream=sys.stderr, enabled=sys.stderr.isatty())
