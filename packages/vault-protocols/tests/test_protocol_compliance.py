"""
Protocol compliance tests.

Verifies that minimal implementations satisfy the runtime-checkable
protocols, and that incomplete ones do not.
"""

from vault_protocols import (
    InitializationResult,
    MembershipProtocol,
    NodeHealth,
    SealStatus,
    SecretBackendProtocol,
    SecretStoreProtocol,
)


class MinimalBackend:
    async def health(self, endpoint):
        return NodeHealth(initialized=False, sealed=True)

    async def init_status(self, endpoint):
        return False

    async def bootstrap(self, endpoint, shares, threshold):
        return InitializationResult("t", ["k"], shares, threshold)

    async def unseal_submit(self, endpoint, share):
        return SealStatus(sealed=False)


class MinimalStore:
    async def put(self, name, value, overwrite=False, encryption_key=None, description=""):
        return 1

    async def get(self, name):
        return "", 1


class MinimalMembership:
    async def list_running_members(self, group):
        return []


class TestProtocolCompliance:
    def test_backend(self):
        assert isinstance(MinimalBackend(), SecretBackendProtocol)

    def test_store(self):
        assert isinstance(MinimalStore(), SecretStoreProtocol)

    def test_membership(self):
        assert isinstance(MinimalMembership(), MembershipProtocol)

    def test_incomplete_backend_rejected(self):
        class HealthOnly:
            async def health(self, endpoint):
                return NodeHealth(initialized=False, sealed=True)

        assert not isinstance(HealthOnly(), SecretBackendProtocol)
