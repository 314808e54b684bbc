"""
One-time cluster bootstrap and key-material distribution.

The orchestrator walks the healthy replicas sequentially and threads an
explicit BootstrapState through the walk:

- an initialized node is recorded as verified
- an uninitialized node before any bootstrap triggers exactly one
  initialization call, after which the root token and every key share are
  persisted with no-overwrite semantics
- an uninitialized node after a bootstrap in the same run is an impossible
  state (the replicas share one storage backend) and aborts the run

The bootstrap response is never logged. Persistence failures are fatal and
flagged critical: the key material exists only in memory at that point,
and re-issuing the bootstrap would fail against the initialized backend.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field

from vault_protocols import (
    BootstrapFailedError,
    ImpossibleStateMismatchError,
    InitializationResult,
    NodeUnreachableError,
    ReplicaEndpoint,
    SecretBackendProtocol,
    SecretPersistFailedError,
    SecretStoreProtocol,
    VaultOperatorError,
)
from vault_core.secrets import SecretRedactor, redactor

logger = logging.getLogger(__name__)


def share_parameter_name(prefix: str, index: int) -> str:
    """Parameter name for the key share at 1-based index."""
    return f"{prefix.rstrip('/')}/{index}"


def check_threshold(secret_shares: int, secret_threshold: int) -> None:
    """
    Validate a share/threshold pair.

    Raises:
        ValueError: If the threshold exceeds the share count, or is 1 while
            more than one share is requested.
    """
    if secret_threshold < 1 or secret_shares < 1:
        raise ValueError("SecretShares and SecretThreshold must be at least 1")
    if secret_threshold > secret_shares:
        raise ValueError(
            f"SecretThreshold ({secret_threshold}) must not exceed "
            f"SecretShares ({secret_shares})"
        )
    if secret_shares > 1 and secret_threshold < 2:
        raise ValueError(
            "SecretThreshold must be greater than 1 when SecretShares is greater than 1"
        )


@dataclass
class BootstrapRequest:
    """
    Desired bootstrap configuration.

    Attributes:
        secret_shares: Number of key shares to generate.
        secret_threshold: Number of shares required to unseal.
        root_token_parameter: Parameter name for the root token.
        share_parameter_prefix: Prefix for key-share parameter names;
            share i is stored under "{prefix}/{i}".
        root_token_encryption_key: Optional key reference for the root token.
        share_encryption_key: Optional key reference for the key shares.
    """

    secret_shares: int
    secret_threshold: int
    root_token_parameter: str
    share_parameter_prefix: str
    root_token_encryption_key: str | None = None
    share_encryption_key: str | None = None

    def share_parameters(self, count: int | None = None) -> list[str]:
        """Parameter names for the first count shares (all by default)."""
        total = self.secret_shares if count is None else count
        return [
            share_parameter_name(self.share_parameter_prefix, i)
            for i in range(1, total + 1)
        ]


@dataclass
class BootstrapState:
    """
    Run-scoped bootstrap state.

    Attributes:
        bootstrapped: Whether this run issued the initialization call.
        bootstrap_endpoint: Node the initialization was issued to.
        result: Key material captured from the bootstrap, if any.
        verified: Nodes confirmed initialized, in walk order.
    """

    bootstrapped: bool = False
    bootstrap_endpoint: ReplicaEndpoint | None = None
    result: InitializationResult | None = None
    verified: list[ReplicaEndpoint] = field(default_factory=list)


@dataclass
class InitializationOrchestrator:
    """
    Bootstraps the cluster at most once and persists the key material.

    Attributes:
        backend: Secret backend for status checks and the bootstrap call.
        store: Secret store receiving the root token and key shares.
        timeout_seconds: Upper bound for each status re-check.
        secret_redactor: Redactor that learns the generated secrets.

    Example:
        orchestrator = InitializationOrchestrator(backend=backend, store=store)
        state = await orchestrator.initialize_and_distribute(endpoints, request)
        if state.bootstrapped:
            print(f"initialized via {state.bootstrap_endpoint}")
    """

    backend: SecretBackendProtocol
    store: SecretStoreProtocol
    timeout_seconds: float = 10.0
    secret_redactor: SecretRedactor = field(default=redactor)

    async def initialize_and_distribute(
        self,
        healthy: list[ReplicaEndpoint],
        request: BootstrapRequest,
        deadline_seconds: float | None = None,
    ) -> BootstrapState:
        """
        Walk the healthy nodes, bootstrapping the first uninitialized one.

        Args:
            healthy: Nodes that passed the probe loop.
            request: Desired share count, threshold and parameter names.
            deadline_seconds: Time budget for the re-checks that precede the
                bootstrap. Once the bootstrap is issued the walk is not bounded.

        Returns:
            BootstrapState describing what this run did.

        Raises:
            ImpossibleStateMismatchError: A node is uninitialized after a
                bootstrap in this run.
            BootstrapFailedError: The initialization call failed.
            SecretPersistFailedError: Key material could not be stored.
            NodeUnreachableError: No node could be re-checked.
            asyncio.TimeoutError: The budget ran out before a bootstrap was
                issued.
        """
        state = BootstrapState()
        unreachable: list[NodeUnreachableError] = []
        expires = None
        if deadline_seconds is not None:
            expires = time.monotonic() + deadline_seconds

        for endpoint in healthy:
            budget = None
            if expires is not None and not state.bootstrapped:
                budget = expires - time.monotonic()
                if budget <= 0:
                    raise asyncio.TimeoutError()

            try:
                initialized = await self._recheck(endpoint, budget)
            except NodeUnreachableError as e:
                logger.warning("Dropping node %s for this run: %s", endpoint, e)
                unreachable.append(e)
                continue

            if initialized:
                if not state.bootstrapped:
                    logger.info("Node %s already initialized", endpoint)
                state.verified.append(endpoint)
                continue

            if state.bootstrapped:
                error = ImpossibleStateMismatchError(
                    endpoint.address, state.bootstrap_endpoint.address
                )
                logger.error("%s", error)
                raise error

            await self._bootstrap(endpoint, request, state)
            await self._persist(state.result, request)
            state.verified.append(endpoint)

        if unreachable and not state.verified:
            raise unreachable[0]

        return state

    async def _recheck(
        self, endpoint: ReplicaEndpoint, budget: float | None = None
    ) -> bool:
        """Re-read the node's initialized flag, bounded by the timeout and budget."""
        timeout = self.timeout_seconds
        if budget is not None and budget < timeout:
            timeout = budget
        try:
            return await asyncio.wait_for(
                self.backend.init_status(endpoint), timeout=timeout
            )
        except asyncio.TimeoutError:
            if timeout < self.timeout_seconds:
                raise
            raise NodeUnreachableError(
                endpoint.address,
                "init-status",
                f"timed out after {self.timeout_seconds:.1f}s",
            ) from None

    async def _bootstrap(
        self,
        endpoint: ReplicaEndpoint,
        request: BootstrapRequest,
        state: BootstrapState,
    ) -> None:
        """Issue the single initialization call and capture its result."""
        logger.info(
            "Initializing Vault via %s (shares=%d, threshold=%d)",
            endpoint,
            request.secret_shares,
            request.secret_threshold,
        )
        try:
            result = await self.backend.bootstrap(
                endpoint, request.secret_shares, request.secret_threshold
            )
        except VaultOperatorError as e:
            error = BootstrapFailedError(endpoint.address, str(e))
            logger.error("%s", error)
            raise error from e

        # DO NOT LOG THE RESULT
        self.secret_redactor.register(*result.secrets)
        state.bootstrapped = True
        state.bootstrap_endpoint = endpoint
        state.result = result
        logger.info(
            "Vault initialized via %s: received %d key share(s)",
            endpoint,
            len(result.key_shares),
        )

    async def _persist(
        self, result: InitializationResult, request: BootstrapRequest
    ) -> None:
        """Store the root token, then each key share, without overwriting."""
        await self._put(
            request.root_token_parameter,
            result.root_token,
            request.root_token_encryption_key,
            "Vault Root Token",
        )
        names = request.share_parameters(len(result.key_shares))
        for index, (name, share) in enumerate(zip(names, result.key_shares), start=1):
            await self._put(
                name,
                share,
                request.share_encryption_key,
                f"Vault Unseal Key {index} of {len(result.key_shares)}",
            )

    async def _put(
        self,
        name: str,
        value: str,
        encryption_key: str | None,
        description: str,
    ) -> None:
        try:
            version = await self.store.put(
                name,
                value,
                overwrite=False,
                encryption_key=encryption_key,
                description=description,
            )
        except Exception as e:
            error = SecretPersistFailedError(name, str(e) or type(e).__name__)
            logger.critical("%s; generated key material is held only in memory", error)
            raise error from e
        logger.info("Stored %s at %s (version %d)", description, name, version)
