"""
Tests for the endpoint health prober.

These tests verify that HealthProber:
- Produces one entry per endpoint
- Converts failures and timeouts into unreachable entries
- Lets every probe finish before surfacing an unexpected error
- Flags reachable nodes that disagree with the first reachable node
"""

import asyncio

import pytest

from vault_core.cluster import HealthProber
from vault_protocols import (
    ClusterStateMismatchError,
    NodeUnreachableError,
    VaultOperatorError,
)


class TestProbe:
    @pytest.mark.asyncio
    async def test_all_nodes_healthy(self, cluster, endpoints):
        snapshot = await HealthProber(backend=cluster).probe(endpoints)

        assert list(snapshot.entries) == endpoints
        assert snapshot.errors == {}
        assert [h.endpoint for h in snapshot.healthy] == endpoints
        assert all(h.sealed and not h.initialized for h in snapshot.healthy)

    @pytest.mark.asyncio
    async def test_unreachable_node_gets_error_entry(self, cluster, endpoints):
        cluster.unreachable.add("10.0.1.11")

        snapshot = await HealthProber(backend=cluster).probe(endpoints)

        entry = snapshot.entries[endpoints[1]]
        assert not entry.reachable
        assert isinstance(entry.error, NodeUnreachableError)
        assert list(snapshot.errors) == [endpoints[1]]
        assert len(snapshot.healthy) == 2
        assert not snapshot.all_failed

    @pytest.mark.asyncio
    async def test_every_node_unreachable(self, cluster, endpoints):
        cluster.unreachable.update(e.address for e in endpoints)

        snapshot = await HealthProber(backend=cluster).probe(endpoints)

        assert snapshot.all_failed
        assert snapshot.healthy == []

    @pytest.mark.asyncio
    async def test_slow_node_times_out(self, cluster, endpoints):
        original = cluster.health

        async def slow_health(endpoint):
            if endpoint.address == "10.0.1.12":
                await asyncio.sleep(10)
            return await original(endpoint)

        cluster.health = slow_health
        prober = HealthProber(backend=cluster, timeout_seconds=0.05)

        snapshot = await prober.probe(endpoints)

        error = snapshot.entries[endpoints[2]].error
        assert isinstance(error, NodeUnreachableError)
        assert "timed out" in str(error)
        assert len(snapshot.healthy) == 2

    @pytest.mark.asyncio
    async def test_backend_error_becomes_unreachable_entry(self, cluster, endpoints):
        original = cluster.health

        async def rejecting_health(endpoint):
            if endpoint.address == "10.0.1.11":
                raise VaultOperatorError("permission denied")
            return await original(endpoint)

        cluster.health = rejecting_health

        snapshot = await HealthProber(backend=cluster).probe(endpoints)

        error = snapshot.entries[endpoints[1]].error
        assert isinstance(error, NodeUnreachableError)
        assert "permission denied" in str(error)
        assert len(snapshot.healthy) == 2

    @pytest.mark.asyncio
    async def test_unexpected_error_waits_for_other_probes(self, cluster, endpoints):
        original = cluster.health
        finished = []

        async def flaky_health(endpoint):
            if endpoint.address == "10.0.1.10":
                raise RuntimeError("bug in backend")
            await asyncio.sleep(0.05)
            finished.append(endpoint.address)
            return await original(endpoint)

        cluster.health = flaky_health

        with pytest.raises(RuntimeError, match="bug in backend"):
            await HealthProber(backend=cluster).probe(endpoints)

        assert sorted(finished) == ["10.0.1.11", "10.0.1.12"]

    @pytest.mark.asyncio
    async def test_disagreeing_node_is_flagged(self, cluster, endpoints):
        original = cluster.health

        async def split_brain(endpoint):
            health = await original(endpoint)
            if endpoint.address == "10.0.1.11":
                health.initialized = True
            return health

        cluster.health = split_brain

        snapshot = await HealthProber(backend=cluster).probe(endpoints)

        mismatches = snapshot.mismatches
        assert [m.endpoint for m in mismatches] == [endpoints[1]]
        error = mismatches[0].error
        assert isinstance(error, ClusterStateMismatchError)
        assert error.expected is False
        assert error.observed is True

    @pytest.mark.asyncio
    async def test_reference_is_first_reachable_node(self, cluster, endpoints):
        cluster.unreachable.add("10.0.1.10")
        original = cluster.health

        async def split_brain(endpoint):
            health = await original(endpoint)
            if endpoint.address == "10.0.1.11":
                health.initialized = True
            return health

        cluster.health = split_brain

        snapshot = await HealthProber(backend=cluster).probe(endpoints)

        # 10.0.1.11 is the reference, so 10.0.1.12 is the odd one out
        assert [m.endpoint for m in snapshot.mismatches] == [endpoints[2]]
