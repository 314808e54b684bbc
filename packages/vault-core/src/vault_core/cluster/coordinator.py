"""
Cluster-initialization coordinator.

Drives one coordination run end to end:

    resolve group -> probe until a stable healthy set -> bootstrap once and
    persist key material -> unseal each node (optional)

The probe loop stops when:
- no node reported an error: proceed with all nodes
- any node disagrees on initialization status: abort, not retryable
- some nodes failed: drop them and proceed with the survivors
- every node failed: wait a fixed interval and probe again, until the
  retry policy or the run deadline is exhausted

Nothing is cached between runs. Every run re-derives the cluster state
from Auto Scaling, Vault and the secret store.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field

from vault_protocols import (
    CoordinationTimeoutError,
    ReplicaEndpoint,
    ReplicaHealth,
)
from vault_core.cluster.membership import MembershipResolver
from vault_core.cluster.orchestrator import (
    BootstrapRequest,
    BootstrapState,
    InitializationOrchestrator,
)
from vault_core.cluster.prober import HealthProber
from vault_core.cluster.unseal import UnsealOutcome, UnsealSequencer
from vault_core.retry import RetryPolicy

logger = logging.getLogger(__name__)


@dataclass
class ProbeProgress:
    """Probe-loop counters, kept outside the loop so timeouts can report them."""

    attempts: int = 0
    started: float = field(default_factory=time.monotonic)

    @property
    def elapsed_seconds(self) -> float:
        return time.monotonic() - self.started


@dataclass
class InitOutcome:
    """
    Result of one coordination run.

    Attributes:
        group: Server group that was coordinated.
        healthy: Nodes that passed the probe loop.
        bootstrap: What the orchestrator did.
        unseal: Unseal outcome per node (empty if unsealing was skipped).
        root_token_parameter: Parameter name holding the root token.
        share_parameters: Parameter names holding the key shares.
    """

    group: str
    healthy: list[ReplicaHealth]
    bootstrap: BootstrapState
    unseal: dict[ReplicaEndpoint, UnsealOutcome]
    root_token_parameter: str
    share_parameters: list[str]

    @property
    def initialized_now(self) -> bool:
        """Whether this run performed the bootstrap."""
        return self.bootstrap.bootstrapped


@dataclass
class ClusterInitCoordinator:
    """
    Coordinates cluster bootstrap across a group of Vault replicas.

    Attributes:
        resolver: Resolves the group into endpoints.
        prober: Probes endpoints concurrently.
        orchestrator: Performs the one-time bootstrap.
        sequencer: Unseals nodes with freshly generated shares.
        retry_policy: Bounds the probe loop when every node is unreachable.

    Example:
        coordinator = create_coordinator(scheme="http", port=8200)
        outcome = await coordinator.run("vault-servers", request, should_unseal=True)
    """

    resolver: MembershipResolver
    prober: HealthProber
    orchestrator: InitializationOrchestrator
    sequencer: UnsealSequencer
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)

    async def run(
        self,
        group: str,
        request: BootstrapRequest,
        should_unseal: bool = False,
        deadline_seconds: float | None = None,
    ) -> InitOutcome:
        """
        Run one coordination pass.

        The deadline bounds membership resolution, the probe loop, the
        re-checks before the bootstrap and the unseal sequence. The
        bootstrap and the persistence of its key material are never
        cancelled, so the key material always reaches the secret store or
        fails loudly. Unsealing stops submitting shares once the budget is
        spent and reports the unfinished nodes.

        Args:
            group: Server group to coordinate.
            request: Desired shares, threshold and parameter names.
            should_unseal: Unseal nodes with freshly generated shares.
            deadline_seconds: Time budget for the run.

        Returns:
            InitOutcome describing the run.

        Raises:
            CoordinationTimeoutError: The budget ran out before a bootstrap
                was issued.
            VaultOperatorError: Any fatal error from the run's steps.
        """
        progress = ProbeProgress()
        discover = self._discover(group, progress)
        if deadline_seconds is None:
            healthy = await discover
        else:
            try:
                healthy = await asyncio.wait_for(discover, timeout=deadline_seconds)
            except asyncio.TimeoutError:
                raise self._deadline_exceeded(progress, deadline_seconds) from None

        try:
            state = await self.orchestrator.initialize_and_distribute(
                [h.endpoint for h in healthy],
                request,
                deadline_seconds=self._remaining(progress, deadline_seconds),
            )
        except asyncio.TimeoutError:
            raise self._deadline_exceeded(
                progress, deadline_seconds, "init-status"
            ) from None

        unseal: dict[ReplicaEndpoint, UnsealOutcome] = {}
        if should_unseal and state.result is not None and state.result.key_shares:
            sealed = [
                h.endpoint
                for h in healthy
                if h.sealed and h.endpoint in state.verified
            ]
            unseal = await self.sequencer.unseal(
                sealed,
                state.result.key_shares,
                deadline_seconds=self._remaining(progress, deadline_seconds),
            )
        elif should_unseal:
            logger.info("No key shares generated in this run, skipping unseal")

        return InitOutcome(
            group=group,
            healthy=healthy,
            bootstrap=state,
            unseal=unseal,
            root_token_parameter=request.root_token_parameter,
            share_parameters=request.share_parameters(),
        )

    @staticmethod
    def _remaining(
        progress: ProbeProgress, deadline_seconds: float | None
    ) -> float | None:
        if deadline_seconds is None:
            return None
        return max(0.0, deadline_seconds - progress.elapsed_seconds)

    @staticmethod
    def _deadline_exceeded(
        progress: ProbeProgress, deadline_seconds: float, step: str = "probe"
    ) -> CoordinationTimeoutError:
        error = CoordinationTimeoutError(
            progress.attempts, progress.elapsed_seconds, step=step
        )
        logger.error("Run deadline of %.1fs exceeded: %s", deadline_seconds, error)
        return error

    async def _discover(self, group: str, progress: ProbeProgress) -> list[ReplicaHealth]:
        endpoints = await self.resolver.resolve(group)
        return await self.await_healthy(endpoints, progress)

    async def await_healthy(
        self,
        endpoints: list[ReplicaEndpoint],
        progress: ProbeProgress | None = None,
    ) -> list[ReplicaHealth]:
        """
        Probe until a stable, non-empty healthy subset is obtained.

        Args:
            endpoints: Endpoints to probe.
            progress: Counters updated as rounds complete.

        Returns:
            Healthy nodes of the final round, in probe order.

        Raises:
            ClusterStateMismatchError: Reachable nodes disagree.
            CoordinationTimeoutError: Every node stayed unreachable.
        """
        progress = progress or ProbeProgress()

        while True:
            snapshot = await self.prober.probe(endpoints)
            progress.attempts += 1

            mismatches = snapshot.mismatches
            if mismatches:
                raise mismatches[0].error

            errors = snapshot.errors
            if not errors:
                return snapshot.healthy

            if not snapshot.all_failed:
                logger.warning(
                    "Proceeding without %d unreachable node(s): %s",
                    len(errors),
                    ", ".join(e.address for e in errors),
                )
                return snapshot.healthy

            if not self.retry_policy.should_retry(
                progress.attempts, progress.elapsed_seconds
            ):
                raise CoordinationTimeoutError(
                    progress.attempts, progress.elapsed_seconds
                )

            logger.info(
                "All %d node(s) unreachable (round %d), retrying in %.1fs",
                len(endpoints),
                progress.attempts,
                self.retry_policy.interval_seconds,
            )
            await asyncio.sleep(self.retry_policy.interval_seconds)
