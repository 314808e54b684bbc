"""
vault-aws - AWS and Vault backends for the Vault operator.

This package provides:
- VaultClient: Vault HTTP API client (httpx)
- VaultClusterBackend: SecretBackendProtocol over per-replica clients
- AutoScalingMembership: MembershipProtocol over EC2 Auto Scaling
- ParameterStore: SecretStoreProtocol over SSM Parameter Store
- Resource handlers for Init, VaultAudit, logical paths and VaultPolicy
- create_coordinator / create_registry: wiring for CLI and Lambda use
"""

from vault_aws.autoscaling import AutoScalingMembership
from vault_aws.backend import VaultAPIError, VaultClusterBackend
from vault_aws.factory import create_coordinator, create_registry
from vault_aws.ssm import ParameterStore
from vault_aws.vault_client import VaultClient

__all__ = [
    "VaultClient",
    "VaultAPIError",
    "VaultClusterBackend",
    "AutoScalingMembership",
    "ParameterStore",
    "create_coordinator",
    "create_registry",
]
