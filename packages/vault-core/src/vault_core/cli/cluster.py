"""Cluster CLI commands.

This module provides the commands that act on a server group directly:
- probe: Show each node's reachability, initialization and seal status
- init: Run one coordination pass (bootstrap once, persist, optionally unseal)

Both use the factory, so the AWS backends are only imported when run.
"""

import asyncio

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from vault_core.cluster import BootstrapRequest, check_threshold
from vault_core.factory import create_coordinator
from vault_core.logs import configure_logging
from vault_core.settings import get_settings
from vault_protocols import DEFAULT_PORT, DEFAULT_SCHEME, VaultOperatorError

console = Console()


def _status(value: bool, yes: str, no: str) -> str:
    return f"[green]{yes}[/green]" if value else f"[yellow]{no}[/yellow]"


def probe(
    group: str = typer.Argument(..., help="Auto Scaling group of the Vault servers"),
    scheme: str = typer.Option(DEFAULT_SCHEME, "--scheme", help="URL scheme (http, https)"),
    port: int = typer.Option(DEFAULT_PORT, "--port", "-p", help="Vault API port"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Probe every running node of a server group once."""
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level, rich=True)

    async def _probe() -> None:
        coordinator = create_coordinator(scheme, port, settings=settings)
        endpoints = await coordinator.resolver.resolve(group)
        snapshot = await coordinator.prober.probe(endpoints)

        table = Table(title=f"Vault nodes in {group}")
        table.add_column("Address", style="cyan")
        table.add_column("Reachable")
        table.add_column("Initialized")
        table.add_column("Sealed")
        table.add_column("Error", style="red")

        for endpoint, health in snapshot.entries.items():
            if not health.reachable:
                table.add_row(
                    endpoint.address, "[red]no[/red]", "-", "-", escape(str(health.error))
                )
                continue
            table.add_row(
                endpoint.address,
                "[green]yes[/green]",
                _status(health.initialized, "yes", "no"),
                _status(not health.sealed, "no", "yes"),
                escape(str(health.error)) if health.error else "",
            )

        console.print(table)

    try:
        asyncio.run(_probe())
    except VaultOperatorError as e:
        console.print(f"[red]{type(e).__name__}: {escape(str(e))}[/red]")
        raise typer.Exit(1)


def init_cluster(
    group: str = typer.Argument(..., help="Auto Scaling group of the Vault servers"),
    root_token_parameter: str = typer.Option(
        ..., "--root-token-parameter", help="SSM parameter for the root token"
    ),
    share_prefix: str = typer.Option(
        ..., "--share-prefix", help="SSM parameter prefix for the key shares"
    ),
    shares: int = typer.Option(1, "--shares", help="Number of key shares"),
    threshold: int = typer.Option(1, "--threshold", help="Shares required to unseal"),
    root_token_key: str = typer.Option(
        None, "--root-token-key", help="KMS key for the root token parameter"
    ),
    share_key: str = typer.Option(
        None, "--share-key", help="KMS key for the key-share parameters"
    ),
    unseal: bool = typer.Option(False, "--unseal", help="Unseal nodes after bootstrap"),
    scheme: str = typer.Option(DEFAULT_SCHEME, "--scheme", help="URL scheme (http, https)"),
    port: int = typer.Option(DEFAULT_PORT, "--port", "-p", help="Vault API port"),
    deadline: float = typer.Option(
        None, "--deadline", help="Seconds allowed to reach a healthy node set"
    ),
) -> None:
    """
    Initialize a Vault cluster and store its key material in SSM.

    Safe to re-run: an initialized cluster is only verified.
    """
    try:
        check_threshold(shares, threshold)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from None

    settings = get_settings()
    configure_logging(settings.log_level, rich=True)

    request = BootstrapRequest(
        secret_shares=shares,
        secret_threshold=threshold,
        root_token_parameter=root_token_parameter,
        share_parameter_prefix=share_prefix,
        root_token_encryption_key=root_token_key,
        share_encryption_key=share_key,
    )

    async def _init() -> None:
        coordinator = create_coordinator(scheme, port, settings=settings)
        outcome = await coordinator.run(
            group,
            request,
            should_unseal=unseal,
            deadline_seconds=deadline or settings.default_deadline_seconds,
        )

        if outcome.initialized_now:
            console.print(
                f"[green]Initialized via {outcome.bootstrap.bootstrap_endpoint}[/green]"
            )
        else:
            console.print("[dim]Cluster already initialized, nothing to do.[/dim]")
        console.print(f"  Verified nodes: {len(outcome.bootstrap.verified)}")
        console.print(f"  Root token: {outcome.root_token_parameter}")
        console.print(f"  Key shares: {', '.join(outcome.share_parameters)}")
        for endpoint, result in outcome.unseal.items():
            suffix = " (run deadline reached)" if result.timed_out else ""
            console.print(f"  {endpoint}: {result.state.value}{suffix}")

    try:
        asyncio.run(_init())
    except VaultOperatorError as e:
        console.print(f"[red]{type(e).__name__}: {escape(str(e))}[/red]")
        raise typer.Exit(1)
