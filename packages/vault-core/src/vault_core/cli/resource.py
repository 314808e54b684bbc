"""Custom-resource CLI command.

- handle: Dispatch a CloudFormation event read from a JSON file, the way
  the Lambda entrypoint would. Useful for replaying failed events.
"""

import asyncio
import json
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from vault_core.factory import create_registry
from vault_core.logs import configure_logging
from vault_core.resources import CustomResourceEvent, ResourceDispatcher, ResponseSender
from vault_core.settings import get_settings

console = Console()


def handle(
    event_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Event JSON file"),
    respond: bool = typer.Option(
        False, "--respond/--no-respond", help="Upload the response to the event's ResponseURL"
    ),
    deadline: float = typer.Option(
        None, "--deadline", help="Seconds allowed for the handler"
    ),
) -> None:
    """Dispatch a custom-resource event and print the response."""
    settings = get_settings()
    configure_logging(settings.log_level, rich=True)

    try:
        event = CustomResourceEvent.model_validate(json.loads(event_file.read_text()))
    except (ValueError, ValidationError) as e:
        console.print(f"[red]Invalid event: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    async def _handle() -> None:
        dispatcher = ResourceDispatcher(registry=create_registry(settings))
        response = await dispatcher.dispatch(
            event, deadline_seconds=deadline or settings.default_deadline_seconds
        )
        print(json.dumps(response.to_payload(), indent=2))
        if respond:
            await ResponseSender().send(event, response)

    asyncio.run(_handle())
