"""
Vault Operator Core Library

Cluster initialization and CloudFormation custom resources for HashiCorp
Vault clusters. This package provides:

- Cluster coordination: membership, probing, one-time bootstrap, unseal
- Reconciliation shim: custom-resource events, handlers and dispatch
- Settings, logging and secret redaction
- CLI infrastructure: Typer-based commands
"""

__version__ = "0.1.0"

from vault_core.cluster import (
    BootstrapRequest,
    ClusterInitCoordinator,
    InitOutcome,
)
from vault_core.resources import (
    CustomResourceEvent,
    CustomResourceResponse,
    ResourceDispatcher,
    ResourceRegistry,
)
from vault_core.settings import Settings, get_settings

__all__ = [
    "__version__",
    "BootstrapRequest",
    "ClusterInitCoordinator",
    "InitOutcome",
    "CustomResourceEvent",
    "CustomResourceResponse",
    "ResourceDispatcher",
    "ResourceRegistry",
    "Settings",
    "get_settings",
]
