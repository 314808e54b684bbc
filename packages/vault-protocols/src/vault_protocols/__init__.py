"""
Protocol definitions for the Vault cluster operator.

This package provides the protocols, data types and error taxonomy shared
by the coordinator (vault-core) and its AWS collaborators (vault-aws). It
has zero dependencies on other vault-* packages.

Key protocols:
- MembershipProtocol: Lists running replicas of a server group
- SecretBackendProtocol: Per-replica Vault operations
- SecretStoreProtocol: Versioned secret storage with no-overwrite writes

Key types:
- ReplicaEndpoint, ReplicaHealth, ClusterSnapshot
- InitializationResult, NodeHealth, SealStatus
"""

from vault_protocols.backend import SecretBackendProtocol
from vault_protocols.errors import (
    BootstrapFailedError,
    ClusterStateMismatchError,
    CoordinationTimeoutError,
    GroupEmptyError,
    GroupNotFoundError,
    ImpossibleStateMismatchError,
    NodeUnreachableError,
    SecretAlreadyExistsError,
    SecretPersistFailedError,
    VaultOperatorError,
)
from vault_protocols.membership import MembershipProtocol
from vault_protocols.store import SecretStoreProtocol
from vault_protocols.types import (
    DEFAULT_PORT,
    DEFAULT_SCHEME,
    ClusterSnapshot,
    InitializationResult,
    NodeHealth,
    ReplicaEndpoint,
    ReplicaHealth,
    SealStatus,
)

__all__ = [
    # Protocols
    "MembershipProtocol",
    "SecretBackendProtocol",
    "SecretStoreProtocol",
    # Data types
    "ClusterSnapshot",
    "InitializationResult",
    "NodeHealth",
    "ReplicaEndpoint",
    "ReplicaHealth",
    "SealStatus",
    "DEFAULT_PORT",
    "DEFAULT_SCHEME",
    # Errors
    "VaultOperatorError",
    "GroupNotFoundError",
    "GroupEmptyError",
    "NodeUnreachableError",
    "ClusterStateMismatchError",
    "ImpossibleStateMismatchError",
    "BootstrapFailedError",
    "SecretAlreadyExistsError",
    "SecretPersistFailedError",
    "CoordinationTimeoutError",
]
