"""Vault operator CLI - cluster initialization and custom resources for Vault."""

import typer

from vault_core.cli.cluster import init_cluster, probe
from vault_core.cli.resource import handle

app = typer.Typer(
    name="vault-operator",
    help="Cluster initialization and custom resources for Vault",
    no_args_is_help=True,
)

app.command("probe")(probe)
app.command("init")(init_cluster)
app.command("handle")(handle)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
