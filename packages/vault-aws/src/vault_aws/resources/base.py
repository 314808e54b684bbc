"""
Shared plumbing for the Vault resource handlers.

Resource properties are parsed into subclasses of ResourceProperties:
PascalCase names as sent by CloudFormation, empty strings treated as unset
and unknown properties rejected, so a misspelled property fails the
deployment instead of silently falling back to a default.

VaultApiAccess opens token-bound VaultClients against the configured Vault
address. The token is read from SSM, from the resource's TokenParameter
or the operator-wide default.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_pascal

from vault_aws.backend import VaultAPIError, error_messages
from vault_aws.vault_client import VaultClient
from vault_core.resources import ResourcePropertiesError
from vault_protocols import NodeUnreachableError, SecretStoreProtocol, VaultOperatorError

# Added by CloudFormation to every custom resource
SERVICE_TOKEN = "ServiceToken"


class TokenUnavailableError(VaultOperatorError):
    """Raised when the Vault token cannot be read from the secret store."""

    def __init__(self, parameter: str, reason: str) -> None:
        self.parameter = parameter
        self.reason = reason
        super().__init__(f"cannot read Vault token from {parameter}: {reason}")


class ResourceProperties(BaseModel):
    """Base model for custom-resource properties."""

    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        extra="forbid",
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_unset(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                key: value
                for key, value in data.items()
                if key != SERVICE_TOKEN and value != ""
            }
        return data


class VaultResourceProperties(ResourceProperties):
    """Properties shared by resources that talk to the Vault API."""

    token_parameter: str | None = None


@dataclass
class VaultApiAccess:
    """
    Opens authenticated Vault API clients for resource handlers.

    Attributes:
        store: Secret store holding the Vault token.
        vault_addr: Vault API address (e.g. "https://vault.internal:8200").
        timeout_seconds: httpx timeout for each request.
        verify: TLS verification (bool or CA bundle path).
        default_token_parameter: Token parameter used when a resource
            does not name one.
        transport: Optional httpx transport, used by tests.
    """

    store: SecretStoreProtocol
    vault_addr: str
    timeout_seconds: float = 30.0
    verify: bool | str = True
    default_token_parameter: str | None = None
    transport: httpx.AsyncBaseTransport | None = None

    @asynccontextmanager
    async def client(
        self, resource_type: str, token_parameter: str | None = None
    ) -> AsyncIterator[VaultClient]:
        """
        Open a VaultClient authenticated with the stored token.

        HTTP errors raised inside the block surface as VaultAPIError,
        transport errors as NodeUnreachableError.

        Raises:
            ResourcePropertiesError: If no token parameter is configured
            TokenUnavailableError: If the token cannot be read
        """
        parameter = token_parameter or self.default_token_parameter
        if not parameter:
            raise ResourcePropertiesError(
                resource_type, ["`TokenParameter`: Field required"]
            )

        try:
            token, _ = await self.store.get(parameter)
        except Exception as e:
            raise TokenUnavailableError(parameter, str(e) or type(e).__name__) from e

        try:
            async with httpx.AsyncClient(
                base_url=self.vault_addr,
                timeout=self.timeout_seconds,
                verify=self.verify,
                transport=self.transport,
            ) as http:
                yield VaultClient(http=http, token=token)
        except httpx.HTTPStatusError as e:
            request = e.request
            raise VaultAPIError(
                self.vault_addr,
                f"{request.method} {request.url.path}",
                e.response.status_code,
                error_messages(e.response),
            ) from e
        except httpx.HTTPError as e:
            raise NodeUnreachableError(
                self.vault_addr, resource_type, f"{type(e).__name__}: {e}"
            ) from e
