"""
Factory for the coordinator and resource registry.

Uses lazy imports so vault_core does not import the AWS backends
(boto3, SSM, Auto Scaling) until a command actually needs them.
"""

from typing import TYPE_CHECKING

from vault_core.settings import Settings
from vault_protocols import DEFAULT_PORT, DEFAULT_SCHEME

if TYPE_CHECKING:
    from vault_core.cluster import ClusterInitCoordinator
    from vault_core.resources import ResourceRegistry


def create_coordinator(
    scheme: str = DEFAULT_SCHEME,
    port: int = DEFAULT_PORT,
    settings: Settings | None = None,
) -> "ClusterInitCoordinator":
    """
    Create a coordinator wired to the AWS and Vault backends.

    Args:
        scheme: URL scheme of the Vault servers.
        port: Vault API port on each server.
        settings: Operator settings. Loaded from the environment if None.
    """
    # Lazy import to avoid loading boto3 unless needed
    from vault_aws.factory import create_coordinator as create_aws_coordinator

    return create_aws_coordinator(scheme, port, settings=settings)


def create_registry(settings: Settings | None = None) -> "ResourceRegistry":
    """Create the registry of every custom-resource handler."""
    # Lazy import to avoid loading boto3 unless needed
    from vault_aws.factory import create_registry as create_aws_registry

    return create_aws_registry(settings=settings)
