"""
Vault HTTP API client.

This module provides the VaultClient class for the Vault sys/ and logical
endpoints used by the operator: health, initialization, unseal, audit
devices, ACL policies and logical writes.

VaultClient receives an injected httpx.AsyncClient with base_url set to one
Vault server. All methods are async and fail loudly on HTTP errors.

Vault API Documentation:
- https://developer.hashicorp.com/vault/api-docs/system/health
- https://developer.hashicorp.com/vault/api-docs/system/init
- https://developer.hashicorp.com/vault/api-docs/system/unseal
"""

from dataclasses import dataclass, field
from typing import Any

import httpx

from vault_aws.types import (
    AuditDevice,
    HealthResponse,
    InitResponse,
    InitStatusResponse,
    SealStatusResponse,
    parse_audit_devices,
)

TOKEN_HEADER = "X-Vault-Token"

# Report every server state with a 2xx so status is read from the body
HEALTH_PARAMS = {
    "standbyok": "true",
    "perfstandbyok": "true",
    "uninitcode": "299",
    "sealedcode": "299",
    "standbycode": "299",
    "drsecondarycode": "299",
    "performancestandbycode": "299",
}


@dataclass
class VaultClient:
    """
    Vault API client with injected httpx client.

    Attributes:
        http: Pre-configured httpx.AsyncClient with base_url set to a Vault server.
        token: Optional Vault token sent as X-Vault-Token.

    Example:
        async with httpx.AsyncClient(base_url="http://10.0.1.12:8200") as http:
            client = VaultClient(http=http)
            health = await client.health()
            print(f"initialized={health.initialized} sealed={health.sealed}")
    """

    http: httpx.AsyncClient
    token: str | None = field(default=None, repr=False)

    def _headers(self) -> dict[str, str]:
        if self.token:
            return {TOKEN_HEADER: self.token}
        return {}

    # -------------------------------------------------------------------------
    # Cluster lifecycle
    # -------------------------------------------------------------------------

    async def health(self) -> HealthResponse:
        """
        Get the server's initialization and seal status.

        Calls GET /v1/sys/health with every status code mapped to 2xx.

        Raises:
            httpx.HTTPStatusError: On HTTP errors (4xx, 5xx responses).
            pydantic.ValidationError: On malformed response data.
        """
        response = await self.http.get("/v1/sys/health", params=HEALTH_PARAMS)
        response.raise_for_status()
        return HealthResponse.model_validate(response.json())

    async def init_status(self) -> bool:
        """
        Check whether the backing store is initialized.

        Calls GET /v1/sys/init.
        """
        response = await self.http.get("/v1/sys/init")
        response.raise_for_status()
        return InitStatusResponse.model_validate(response.json()).initialized

    async def initialize(self, secret_shares: int, secret_threshold: int) -> InitResponse:
        """
        Initialize a new Vault.

        Calls PUT /v1/sys/init. The response holds the root token and key
        shares and must never be logged.

        Args:
            secret_shares: Number of shares to split the master key into.
            secret_threshold: Number of shares required to reconstruct it.

        Raises:
            httpx.HTTPStatusError: On HTTP errors, including 400 when the
                server is already initialized.
        """
        response = await self.http.put(
            "/v1/sys/init",
            json={
                "secret_shares": secret_shares,
                "secret_threshold": secret_threshold,
            },
        )
        response.raise_for_status()
        return InitResponse.model_validate(response.json())

    async def unseal(self, key: str) -> SealStatusResponse:
        """
        Submit one unseal key share.

        Calls PUT /v1/sys/unseal.
        """
        response = await self.http.put("/v1/sys/unseal", json={"key": key})
        response.raise_for_status()
        return SealStatusResponse.model_validate(response.json())

    # -------------------------------------------------------------------------
    # Audit devices
    # -------------------------------------------------------------------------

    async def list_audit(self) -> dict[str, AuditDevice]:
        """
        List enabled audit devices keyed by path (with trailing slash).

        Calls GET /v1/sys/audit.
        """
        response = await self.http.get("/v1/sys/audit", headers=self._headers())
        response.raise_for_status()
        return parse_audit_devices(response.json())

    async def enable_audit(
        self,
        path: str,
        type: str,
        description: str = "",
        options: dict[str, str] | None = None,
        local: bool = False,
    ) -> None:
        """Enable an audit device. Calls PUT /v1/sys/audit/{path}."""
        response = await self.http.put(
            f"/v1/sys/audit/{path.strip('/')}",
            headers=self._headers(),
            json={
                "type": type,
                "description": description,
                "options": options or {},
                "local": local,
            },
        )
        response.raise_for_status()

    async def disable_audit(self, path: str) -> None:
        """Disable an audit device. Calls DELETE /v1/sys/audit/{path}."""
        response = await self.http.delete(
            f"/v1/sys/audit/{path.strip('/')}", headers=self._headers()
        )
        response.raise_for_status()

    # -------------------------------------------------------------------------
    # Policies
    # -------------------------------------------------------------------------

    async def put_policy(self, name: str, rules: str) -> None:
        """Create or replace an ACL policy. Calls PUT /v1/sys/policies/acl/{name}."""
        response = await self.http.put(
            f"/v1/sys/policies/acl/{name}",
            headers=self._headers(),
            json={"policy": rules},
        )
        response.raise_for_status()

    async def delete_policy(self, name: str) -> None:
        """Delete an ACL policy. Calls DELETE /v1/sys/policies/acl/{name}."""
        response = await self.http.delete(
            f"/v1/sys/policies/acl/{name}", headers=self._headers()
        )
        response.raise_for_status()

    # -------------------------------------------------------------------------
    # Logical paths
    # -------------------------------------------------------------------------

    async def write(self, path: str, data: dict[str, Any]) -> dict[str, Any] | None:
        """
        Write data to a logical path. Calls PUT /v1/{path}.

        Returns:
            The response body, or None for 204 No Content.
        """
        response = await self.http.put(
            f"/v1/{path.strip('/')}", headers=self._headers(), json=data
        )
        response.raise_for_status()
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def delete(self, path: str) -> None:
        """Delete a logical path. Calls DELETE /v1/{path}."""
        response = await self.http.delete(
            f"/v1/{path.strip('/')}", headers=self._headers()
        )
        response.raise_for_status()
