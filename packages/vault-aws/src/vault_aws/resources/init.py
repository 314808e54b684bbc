"""
Init / VaultInit resource: one-time cluster initialization.

Create and Update both run the cluster-initialization coordinator against
the server group; the run is idempotent, so re-running it against an
initialized cluster only verifies it. Delete leaves Vault and the stored
key material untouched.

Response data (available through Fn::GetAtt):
    RootTokenParameter          SSM name of the root token
    SecretShareParameterPrefix  Prefix of the key-share parameters
    SecretShareParameters       Comma-separated key-share parameter names
    SecretShares                Number of key shares
    SecretThreshold             Shares required to unseal
"""

import logging
from collections.abc import Callable
from typing import Literal

from pydantic import AliasChoices, Field, model_validator

from vault_aws.resources.base import ResourceProperties
from vault_core.cluster import (
    BootstrapRequest,
    ClusterInitCoordinator,
    InitOutcome,
    check_threshold,
)
from vault_core.resources import (
    HandlerResult,
    ResourcePropertiesError,
    ResourceRequest,
    parse_properties,
)
from vault_protocols import DEFAULT_PORT, DEFAULT_SCHEME

logger = logging.getLogger(__name__)

ROOT_TOKEN_PARAMETER_FORMAT = "/{stack}/Vault/Token/Root"
SHARE_PARAMETER_PREFIX_FORMAT = "/{stack}/Vault/Secret/Unseal"

CoordinatorFactory = Callable[[str, int], ClusterInitCoordinator]


class InitResourceProperties(ResourceProperties):
    """Properties of an Init / VaultInit resource."""

    server_group: str = Field(min_length=1)
    server_scheme: Literal["http", "https"] = DEFAULT_SCHEME
    server_port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)

    root_token_parameter_name: str | None = None
    root_token_encryption_key: str | None = None

    secret_share_parameter_prefix: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "SecretShareParameterPrefix", "SecretShareParameterName"
        ),
    )
    secret_share_encryption_key: str | None = None

    secret_shares: int = Field(default=1, ge=1, le=255)
    secret_threshold: int = Field(default=1, ge=1, le=255)

    should_unseal: bool = False

    @model_validator(mode="after")
    def _check_threshold(self) -> "InitResourceProperties":
        check_threshold(self.secret_shares, self.secret_threshold)
        return self

    def to_bootstrap_request(self, stack_name: str) -> BootstrapRequest:
        """
        Build the bootstrap request, applying stack-scoped parameter names.

        Raises:
            ValueError: If the root token would be stored at or beneath the
                key-share prefix.
        """
        root = self.root_token_parameter_name or ROOT_TOKEN_PARAMETER_FORMAT.format(
            stack=stack_name
        )
        prefix = self.secret_share_parameter_prefix or SHARE_PARAMETER_PREFIX_FORMAT.format(
            stack=stack_name
        )
        base = prefix.rstrip("/")
        if root.rstrip("/") == base or root.startswith(base + "/"):
            raise ValueError(
                f"RootTokenParameterName ({root}) must not equal or live beneath "
                f"SecretShareParameterPrefix ({prefix})"
            )
        return BootstrapRequest(
            secret_shares=self.secret_shares,
            secret_threshold=self.secret_threshold,
            root_token_parameter=root,
            share_parameter_prefix=base,
            root_token_encryption_key=self.root_token_encryption_key,
            share_encryption_key=self.secret_share_encryption_key,
        )


def init_response_data(outcome: InitOutcome, request: BootstrapRequest) -> dict[str, str]:
    return {
        "RootTokenParameter": outcome.root_token_parameter,
        "SecretShareParameterPrefix": request.share_parameter_prefix,
        "SecretShareParameters": ",".join(outcome.share_parameters),
        "SecretShares": str(request.secret_shares),
        "SecretThreshold": str(request.secret_threshold),
    }


class InitResourceHandler:
    """
    Handler for Init / VaultInit resources.

    Attributes:
        coordinator_factory: Builds a coordinator for (scheme, port).
        default_deadline_seconds: Run budget when the request carries none.
    """

    def __init__(
        self,
        coordinator_factory: CoordinatorFactory,
        default_deadline_seconds: float | None = None,
    ) -> None:
        self.coordinator_factory = coordinator_factory
        self.default_deadline_seconds = default_deadline_seconds

    async def create(self, request: ResourceRequest) -> HandlerResult:
        return await self.update(request)

    async def update(self, request: ResourceRequest) -> HandlerResult:
        resource_type = request.event.resource_name
        props = parse_properties(InitResourceProperties, resource_type, request.properties)
        try:
            bootstrap = props.to_bootstrap_request(request.event.stack_name)
        except ValueError as e:
            raise ResourcePropertiesError(resource_type, [str(e)]) from None

        deadline = request.deadline_seconds
        if deadline is None:
            deadline = self.default_deadline_seconds

        coordinator = self.coordinator_factory(props.server_scheme, props.server_port)
        outcome = await coordinator.run(
            props.server_group,
            bootstrap,
            should_unseal=props.should_unseal,
            deadline_seconds=deadline,
        )

        unsealed = sum(1 for u in outcome.unseal.values() if u.unsealed)
        timed_out = sum(1 for u in outcome.unseal.values() if u.timed_out)
        logger.info(
            "Group %s: %d healthy node(s), initialized_now=%s, unsealed %d, "
            "cut off by deadline %d",
            props.server_group,
            len(outcome.healthy),
            outcome.initialized_now,
            unsealed,
            timed_out,
        )
        return HandlerResult(data=init_response_data(outcome, bootstrap))

    async def delete(self, request: ResourceRequest) -> None:
        logger.info(
            "Deleting %s leaves Vault and its key material in place",
            request.physical_resource_id,
        )
