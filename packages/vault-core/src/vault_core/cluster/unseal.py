"""
Per-node unseal sequencing.

Each node is unsealed independently: shares are submitted one at a time,
in the order the bootstrap produced them, until the node reports unsealed
or the shares run out. Submission errors are logged and the next share is
tried, since other processes may be unsealing the same node concurrently.
Once the run deadline passes no further shares are submitted and the
remaining nodes are reported as timed out.

Per-node state machine:
    SEALED -> (submit share) -> PARTIALLY_SEALED -> (threshold reached) -> UNSEALED
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum

from vault_protocols import ReplicaEndpoint, SecretBackendProtocol, VaultOperatorError

logger = logging.getLogger(__name__)


class SealState(str, Enum):
    """Seal state of a node during unsealing."""

    SEALED = "sealed"
    """No share accepted in the current attempt."""

    PARTIALLY_SEALED = "partially_sealed"
    """Some shares accepted, threshold not yet reached."""

    UNSEALED = "unsealed"
    """Threshold reached, node is serving."""


@dataclass
class UnsealOutcome:
    """
    Result of unsealing one node.

    Attributes:
        endpoint: The node.
        state: Terminal seal state.
        submitted: Number of shares submitted.
        errors: Error messages from failed submissions.
        timed_out: The run deadline stopped submission before the node
            was unsealed.
    """

    endpoint: ReplicaEndpoint
    state: SealState = SealState.SEALED
    submitted: int = 0
    errors: list[str] = field(default_factory=list)
    timed_out: bool = False

    @property
    def unsealed(self) -> bool:
        return self.state is SealState.UNSEALED


@dataclass
class UnsealSequencer:
    """
    Submits unseal shares to each node until it reports unsealed.

    Attributes:
        backend: Secret backend receiving the share submissions.
    """

    backend: SecretBackendProtocol

    async def unseal(
        self,
        endpoints: list[ReplicaEndpoint],
        shares: list[str],
        deadline_seconds: float | None = None,
    ) -> dict[ReplicaEndpoint, UnsealOutcome]:
        """
        Unseal every node in turn.

        Args:
            endpoints: Nodes to unseal, processed sequentially.
            shares: Key shares in bootstrap order.
            deadline_seconds: Time budget for the whole sequence. Once it
                runs out no further shares are submitted.

        Returns:
            Outcome per node. Nodes left sealed are reported, not raised.
        """
        expires = None
        if deadline_seconds is not None:
            expires = time.monotonic() + deadline_seconds

        outcomes = {}
        for endpoint in endpoints:
            outcomes[endpoint] = await self._unseal_node(endpoint, shares, expires)
        return outcomes

    async def _unseal_node(
        self, endpoint: ReplicaEndpoint, shares: list[str], expires: float | None
    ) -> UnsealOutcome:
        outcome = UnsealOutcome(endpoint=endpoint)

        for index, share in enumerate(shares, start=1):
            remaining = None if expires is None else expires - time.monotonic()
            if remaining is not None and remaining <= 0:
                outcome.timed_out = True
                break

            outcome.submitted += 1
            try:
                status = await asyncio.wait_for(
                    self.backend.unseal_submit(endpoint, share), timeout=remaining
                )
            except asyncio.TimeoutError:
                outcome.timed_out = True
                break
            except VaultOperatorError as e:
                logger.warning(
                    "Unseal share %d/%d rejected by %s: %s",
                    index,
                    len(shares),
                    endpoint,
                    e,
                )
                outcome.errors.append(str(e))
                continue

            if not status.sealed:
                outcome.state = SealState.UNSEALED
                logger.info("Node %s unsealed after %d share(s)", endpoint, index)
                return outcome

            outcome.state = (
                SealState.PARTIALLY_SEALED if status.progress > 0 else SealState.SEALED
            )
            logger.info(
                "Node %s unseal progress %d/%d",
                endpoint,
                status.progress,
                status.threshold,
            )

        if outcome.timed_out:
            logger.warning(
                "Run deadline reached with node %s still %s after %d share(s)",
                endpoint,
                outcome.state.value,
                outcome.submitted,
            )
            return outcome

        logger.warning(
            "Node %s still %s after %d share(s)",
            endpoint,
            outcome.state.value,
            len(shares),
        )
        return outcome
