"""
Concurrent health probing of Vault replicas.

HealthProber queries every endpoint in parallel and assembles a
ClusterSnapshot. Each probe task returns its own ReplicaHealth and the
results are merged only after all tasks complete, so no mutable state is
shared between tasks.

After collection the snapshot is validated: the first reachable node's
initialized flag is the reference, and every later reachable node that
disagrees gets a ClusterStateMismatchError attached to its entry.
"""

import asyncio
import logging
from dataclasses import dataclass

from vault_protocols import (
    ClusterSnapshot,
    ClusterStateMismatchError,
    NodeUnreachableError,
    ReplicaEndpoint,
    ReplicaHealth,
    SecretBackendProtocol,
    VaultOperatorError,
)

logger = logging.getLogger(__name__)


@dataclass
class HealthProber:
    """
    Probes a set of endpoints concurrently.

    Attributes:
        backend: Secret backend used for the status queries.
        timeout_seconds: Upper bound for each individual status query.
    """

    backend: SecretBackendProtocol
    timeout_seconds: float = 10.0

    async def probe(self, endpoints: list[ReplicaEndpoint]) -> ClusterSnapshot:
        """
        Probe every endpoint and validate cross-node consistency.

        Args:
            endpoints: Endpoints to probe. Their order fixes which reachable
                node provides the reference initialized value.

        Returns:
            ClusterSnapshot with one entry per endpoint.

        Raises:
            Exception: An unexpected failure from the backend, re-raised
                once every probe task has finished.
        """
        results = await asyncio.gather(
            *(self._probe_one(e) for e in endpoints), return_exceptions=True
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            raise failures[0]
        snapshot = ClusterSnapshot(entries={h.endpoint: h for h in results})
        self._check_initialized_agreement(snapshot)
        return snapshot

    async def _probe_one(self, endpoint: ReplicaEndpoint) -> ReplicaHealth:
        """Query one endpoint, converting failures into an unreachable entry."""
        try:
            status = await asyncio.wait_for(
                self.backend.health(endpoint), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            error = NodeUnreachableError(
                endpoint.address,
                "health",
                f"timed out after {self.timeout_seconds:.1f}s",
            )
            logger.warning("%s", error)
            return ReplicaHealth(endpoint=endpoint, reachable=False, error=error)
        except NodeUnreachableError as e:
            logger.warning("%s", e)
            return ReplicaHealth(endpoint=endpoint, reachable=False, error=e)
        except VaultOperatorError as e:
            error = NodeUnreachableError(endpoint.address, "health", str(e))
            logger.warning("%s", error)
            return ReplicaHealth(endpoint=endpoint, reachable=False, error=error)

        logger.debug(
            "Node %s: initialized=%s sealed=%s",
            endpoint.address,
            status.initialized,
            status.sealed,
        )
        return ReplicaHealth(
            endpoint=endpoint,
            reachable=True,
            initialized=status.initialized,
            sealed=status.sealed,
        )

    def _check_initialized_agreement(self, snapshot: ClusterSnapshot) -> None:
        """Attach ClusterStateMismatchError to reachable nodes that disagree."""
        reference: bool | None = None
        for health in snapshot.entries.values():
            if not health.reachable:
                continue
            if reference is None:
                reference = health.initialized
                continue
            if health.initialized != reference:
                health.error = ClusterStateMismatchError(
                    health.endpoint.address,
                    expected=reference,
                    observed=health.initialized,
                )
                logger.error("%s", health.error)
