"""
Shared fixtures for vault-core tests.

FakeCluster is an in-memory Vault cluster whose replicas share one
storage backend, so initializing through any node initializes all of
them. FakeStore is an in-memory secret store with no-overwrite semantics.
"""

import pytest

from vault_core.secrets import redactor
from vault_protocols import (
    InitializationResult,
    NodeHealth,
    NodeUnreachableError,
    ReplicaEndpoint,
    SealStatus,
    SecretAlreadyExistsError,
    VaultOperatorError,
)

ADDRESSES = ["10.0.1.10", "10.0.1.11", "10.0.1.12"]
ROOT_TOKEN = "hvs.root-token-value"


class FakeCluster:
    """SecretBackendProtocol implementation over shared in-memory state."""

    def __init__(self, addresses: list[str], initialized: bool = False):
        self.initialized = initialized
        self.sealed = {address: True for address in addresses}
        self.unreachable: set[str] = set()
        # Nodes whose init-status re-check reports uninitialized regardless
        self.stale: set[str] = set()
        self.threshold = 1
        self.shares: list[str] = []
        self.progress: dict[str, int] = {}
        self.bootstrap_calls: list[str] = []
        self.health_calls = 0
        self.unseal_calls: list[tuple[str, str]] = []
        self.rejected_shares: set[str] = set()

    def _check_reachable(self, endpoint: ReplicaEndpoint, step: str) -> None:
        if endpoint.address in self.unreachable:
            raise NodeUnreachableError(endpoint.address, step, "connection refused")

    async def health(self, endpoint: ReplicaEndpoint) -> NodeHealth:
        self.health_calls += 1
        self._check_reachable(endpoint, "health")
        return NodeHealth(
            initialized=self.initialized, sealed=self.sealed[endpoint.address]
        )

    async def init_status(self, endpoint: ReplicaEndpoint) -> bool:
        self._check_reachable(endpoint, "init-status")
        if endpoint.address in self.stale:
            return False
        return self.initialized

    async def bootstrap(
        self, endpoint: ReplicaEndpoint, shares: int, threshold: int
    ) -> InitializationResult:
        self.bootstrap_calls.append(endpoint.address)
        self._check_reachable(endpoint, "init")
        if self.initialized:
            raise VaultOperatorError("Vault is already initialized")
        self.initialized = True
        self.threshold = threshold
        self.shares = [f"unseal-share-{i}" for i in range(1, shares + 1)]
        return InitializationResult(
            root_token=ROOT_TOKEN,
            key_shares=list(self.shares),
            share_count=shares,
            threshold=threshold,
        )

    async def unseal_submit(self, endpoint: ReplicaEndpoint, share: str) -> SealStatus:
        self.unseal_calls.append((endpoint.address, share))
        self._check_reachable(endpoint, "unseal")
        if share in self.rejected_shares:
            raise VaultOperatorError("invalid key")
        if not self.sealed[endpoint.address]:
            return SealStatus(sealed=False, threshold=self.threshold, shares=len(self.shares))

        progress = self.progress.get(endpoint.address, 0) + 1
        if progress >= self.threshold:
            self.sealed[endpoint.address] = False
            self.progress[endpoint.address] = 0
            return SealStatus(sealed=False, threshold=self.threshold, shares=len(self.shares))

        self.progress[endpoint.address] = progress
        return SealStatus(
            sealed=True,
            threshold=self.threshold,
            shares=len(self.shares),
            progress=progress,
        )


class FakeStore:
    """SecretStoreProtocol implementation backed by a dict."""

    def __init__(self, fail_on: str | None = None):
        self.values: dict[str, str] = {}
        self.keys: dict[str, str | None] = {}
        self.puts: list[str] = []
        self.fail_on = fail_on

    async def put(
        self,
        name: str,
        value: str,
        overwrite: bool = False,
        encryption_key: str | None = None,
        description: str = "",
    ) -> int:
        self.puts.append(name)
        if name == self.fail_on:
            raise RuntimeError("ThrottlingException: Rate exceeded")
        if name in self.values and not overwrite:
            raise SecretAlreadyExistsError(name)
        self.values[name] = value
        self.keys[name] = encryption_key
        return 1

    async def get(self, name: str) -> tuple[str, int]:
        return self.values[name], 1


class FakeMembership:
    """MembershipProtocol implementation returning a fixed member list."""

    def __init__(self, addresses: list[str]):
        self.addresses = addresses
        self.calls: list[str] = []

    async def list_running_members(self, group: str) -> list[str]:
        self.calls.append(group)
        return list(self.addresses)


@pytest.fixture
def endpoints() -> list[ReplicaEndpoint]:
    return [ReplicaEndpoint.from_address(address) for address in ADDRESSES]


@pytest.fixture
def cluster() -> FakeCluster:
    return FakeCluster(ADDRESSES)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def membership() -> FakeMembership:
    return FakeMembership(list(ADDRESSES))


@pytest.fixture(autouse=True)
def clear_redactor():
    """Forget secrets registered by a test."""
    yield
    redactor.clear()
