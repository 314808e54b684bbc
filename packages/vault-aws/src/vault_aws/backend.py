"""
SecretBackendProtocol implementation over the Vault HTTP API.

VaultClusterBackend opens a fresh httpx client bound to the target replica
for every call. No client is shared between replicas or retargeted, so
concurrent probes of different nodes cannot interfere.

Transport failures and malformed responses become NodeUnreachableError.
HTTP error statuses become VaultAPIError, except for the health check,
where any failure means the node is unusable for this round.
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TypeVar

import httpx
from pydantic import ValidationError

from vault_aws.types import ErrorResponse
from vault_aws.vault_client import VaultClient
from vault_protocols import (
    InitializationResult,
    NodeHealth,
    NodeUnreachableError,
    ReplicaEndpoint,
    SealStatus,
    VaultOperatorError,
)

T = TypeVar("T")


class VaultAPIError(VaultOperatorError):
    """
    Raised when a Vault server rejects a request.

    Attributes:
        address: Address of the server
        step: Operation that failed
        status_code: HTTP status code
        errors: Error messages from the response body
    """

    def __init__(
        self, address: str, step: str, status_code: int, errors: list[str]
    ) -> None:
        self.address = address
        self.step = step
        self.status_code = status_code
        self.errors = errors
        detail = "; ".join(errors) or "no error detail"
        super().__init__(
            f"node {address} rejected {step} with HTTP {status_code}: {detail}"
        )


def error_messages(response: httpx.Response) -> list[str]:
    try:
        return ErrorResponse.model_validate(response.json()).errors
    except ValueError:
        return []


@dataclass
class VaultClusterBackend:
    """
    Per-replica Vault operations for the coordinator.

    Attributes:
        timeout_seconds: httpx timeout for each request.
        verify: TLS verification (bool or CA bundle path).
        transport: Optional httpx transport, used by tests.

    Example:
        backend = VaultClusterBackend(timeout_seconds=10.0)
        endpoint = ReplicaEndpoint.from_address("10.0.1.12")
        status = await backend.health(endpoint)
    """

    timeout_seconds: float = 10.0
    verify: bool | str = True
    transport: httpx.AsyncBaseTransport | None = None

    @asynccontextmanager
    async def connect(
        self, endpoint: ReplicaEndpoint, token: str | None = None
    ) -> AsyncIterator[VaultClient]:
        """Open a VaultClient bound to endpoint."""
        async with httpx.AsyncClient(
            base_url=endpoint.url,
            timeout=self.timeout_seconds,
            verify=self.verify,
            transport=self.transport,
        ) as http:
            yield VaultClient(http=http, token=token)

    async def _call(
        self,
        endpoint: ReplicaEndpoint,
        step: str,
        operation: Callable[[VaultClient], Awaitable[T]],
    ) -> T:
        try:
            async with self.connect(endpoint) as client:
                return await operation(client)
        except httpx.HTTPStatusError as e:
            raise VaultAPIError(
                endpoint.address,
                step,
                e.response.status_code,
                error_messages(e.response),
            ) from e
        except httpx.HTTPError as e:
            raise NodeUnreachableError(
                endpoint.address, step, f"{type(e).__name__}: {e}"
            ) from e
        except ValidationError as e:
            raise NodeUnreachableError(
                endpoint.address,
                step,
                f"malformed response ({e.error_count()} validation error(s))",
            ) from e

    async def health(self, endpoint: ReplicaEndpoint) -> NodeHealth:
        try:
            response = await self._call(endpoint, "health", VaultClient.health)
        except VaultAPIError as e:
            raise NodeUnreachableError(endpoint.address, "health", str(e)) from e
        return NodeHealth(initialized=response.initialized, sealed=response.sealed)

    async def init_status(self, endpoint: ReplicaEndpoint) -> bool:
        try:
            return await self._call(endpoint, "init-status", VaultClient.init_status)
        except VaultAPIError as e:
            raise NodeUnreachableError(endpoint.address, "init-status", str(e)) from e

    async def bootstrap(
        self, endpoint: ReplicaEndpoint, shares: int, threshold: int
    ) -> InitializationResult:
        response = await self._call(
            endpoint,
            "init",
            lambda client: client.initialize(shares, threshold),
        )
        return InitializationResult(
            root_token=response.root_token,
            key_shares=list(response.keys),
            share_count=shares,
            threshold=threshold,
        )

    async def unseal_submit(self, endpoint: ReplicaEndpoint, share: str) -> SealStatus:
        response = await self._call(
            endpoint, "unseal", lambda client: client.unseal(share)
        )
        return SealStatus(
            sealed=response.sealed,
            threshold=response.t,
            shares=response.n,
            progress=response.progress,
        )
