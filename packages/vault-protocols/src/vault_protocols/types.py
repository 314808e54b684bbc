"""
Generic types for the cluster-initialization coordinator.

This module defines the data structures that flow through one coordination
run: replica endpoints, per-round health observations, the snapshot that
aggregates them, and the key material produced by a bootstrap.

All types use @dataclass. Everything here is owned by a single invocation
and discarded when it ends; nothing is cached between runs.
"""

from dataclasses import dataclass, field

from vault_protocols.errors import ClusterStateMismatchError

DEFAULT_SCHEME = "http"
DEFAULT_PORT = 8200


@dataclass(frozen=True)
class ReplicaEndpoint:
    """
    A single Vault server replica.

    Attributes:
        address: Network address of the replica (private IP or hostname).
        url: Connection URL derived from address, scheme and port
            (e.g., "http://10.0.1.12:8200").
    """

    address: str
    url: str

    @classmethod
    def from_address(
        cls,
        address: str,
        scheme: str = DEFAULT_SCHEME,
        port: int = DEFAULT_PORT,
    ) -> "ReplicaEndpoint":
        """Build an endpoint for address using the given scheme and port."""
        return cls(address=address, url=f"{scheme}://{address}:{port}")

    def __str__(self) -> str:
        return self.address


@dataclass
class NodeHealth:
    """Initialization and seal flags reported by one replica."""

    initialized: bool
    sealed: bool


@dataclass
class SealStatus:
    """
    Reply to an unseal-key submission.

    Attributes:
        sealed: Whether the node is still sealed after the submission.
        threshold: Number of shares required to unseal.
        shares: Total number of shares the master key was split into.
        progress: Number of shares accepted so far in the current attempt.
    """

    sealed: bool
    threshold: int = 0
    shares: int = 0
    progress: int = 0


@dataclass
class ReplicaHealth:
    """
    Health of one endpoint for one probe round.

    Attributes:
        endpoint: The probed replica.
        reachable: Whether the status query succeeded.
        initialized: Reported initialization flag (False when unreachable).
        sealed: Reported seal flag (True when unreachable).
        error: Failure for this entry. Either the reason the node was
            unreachable, or a ClusterStateMismatchError attached after
            cross-node validation.
    """

    endpoint: ReplicaEndpoint
    reachable: bool
    initialized: bool = False
    sealed: bool = True
    error: Exception | None = None


@dataclass
class ClusterSnapshot:
    """
    Health of every endpoint for one probe round, in probe order.

    Among reachable entries the initialized flag must be identical: the
    replicas share one storage backend, so initialization is a fact about
    the store rather than about any one node.
    """

    entries: dict[ReplicaEndpoint, ReplicaHealth] = field(default_factory=dict)

    @property
    def errors(self) -> dict[ReplicaEndpoint, Exception]:
        """Entries that carry an error, keyed by endpoint."""
        return {
            endpoint: health.error
            for endpoint, health in self.entries.items()
            if health.error is not None
        }

    @property
    def mismatches(self) -> list[ReplicaHealth]:
        """Entries flagged with a ClusterStateMismatchError."""
        return [
            health
            for health in self.entries.values()
            if isinstance(health.error, ClusterStateMismatchError)
        ]

    @property
    def healthy(self) -> list[ReplicaHealth]:
        """Reachable entries without errors, in probe order."""
        return [
            health
            for health in self.entries.values()
            if health.reachable and health.error is None
        ]

    @property
    def all_failed(self) -> bool:
        """True when every endpoint produced an error."""
        return bool(self.entries) and len(self.errors) == len(self.entries)


@dataclass
class InitializationResult:
    """
    Key material returned by a successful bootstrap.

    Produced at most once per run. The secret fields are excluded from
    repr so the object can never leak through logging or tracebacks.

    Attributes:
        root_token: Initial root token.
        key_shares: Unseal key shares in the order Vault returned them.
        share_count: Number of shares requested.
        threshold: Number of shares required to unseal.
    """

    root_token: str = field(repr=False)
    key_shares: list[str] = field(repr=False)
    share_count: int
    threshold: int

    @property
    def secrets(self) -> list[str]:
        """Every secret value held by this result."""
        return [self.root_token, *self.key_shares]
