"""
Secret-backend protocol definition.

The SecretBackendProtocol is the coordinator's view of a Vault server. The
replica to talk to is an explicit parameter of every call, so concurrent
probes never share or retarget a client.
"""

from typing import Protocol, runtime_checkable

from vault_protocols.types import (
    InitializationResult,
    NodeHealth,
    ReplicaEndpoint,
    SealStatus,
)


@runtime_checkable
class SecretBackendProtocol(Protocol):
    """
    Protocol for per-replica Vault operations.

    All calls are network-bound and individually timeoutable. Transport
    failures are raised as NodeUnreachableError.
    """

    async def health(self, endpoint: ReplicaEndpoint) -> NodeHealth:
        """
        Query the replica's initialization and seal status.

        Args:
            endpoint: Replica to query.

        Returns:
            NodeHealth with the reported flags.
        """
        ...

    async def init_status(self, endpoint: ReplicaEndpoint) -> bool:
        """
        Query whether the replica reports itself initialized.

        Args:
            endpoint: Replica to query.

        Returns:
            True if the backing store has been initialized.
        """
        ...

    async def bootstrap(
        self, endpoint: ReplicaEndpoint, shares: int, threshold: int
    ) -> InitializationResult:
        """
        Initialize the cluster through this replica.

        Args:
            endpoint: Replica to send the initialization request to.
            shares: Number of key shares to split the master key into.
            threshold: Number of shares required to unseal.

        Returns:
            InitializationResult with the root token and key shares.
        """
        ...

    async def unseal_submit(self, endpoint: ReplicaEndpoint, share: str) -> SealStatus:
        """
        Submit one unseal key share to the replica.

        Args:
            endpoint: Replica to unseal.
            share: One key share.

        Returns:
            SealStatus after the submission.
        """
        ...
