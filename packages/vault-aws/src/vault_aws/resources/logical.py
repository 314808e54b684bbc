"""VaultData / VaultLogical / VaultSecret / VaultPath resource: writes data to a logical path."""

import logging
from typing import Any

from pydantic import Field

from vault_aws.resources.base import VaultApiAccess, VaultResourceProperties
from vault_core.resources import HandlerResult, ResourceRequest, parse_properties
from vault_protocols import VaultOperatorError

logger = logging.getLogger(__name__)


class LogicalResourceProperties(VaultResourceProperties):
    path: str = Field(min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)


class LogicalResourceHandler:
    """Handler for logical-path writes."""

    def __init__(self, vault: VaultApiAccess) -> None:
        self.vault = vault

    async def create(self, request: ResourceRequest) -> HandlerResult:
        return await self.update(request)

    async def update(self, request: ResourceRequest) -> HandlerResult:
        resource_type = request.event.resource_name
        props = parse_properties(LogicalResourceProperties, resource_type, request.properties)

        async with self.vault.client(resource_type, props.token_parameter) as client:
            logger.info("Writing %d key(s) to %s", len(props.data), props.path)
            await client.write(props.path, props.data)
        return HandlerResult(data={"Path": props.path})

    async def delete(self, request: ResourceRequest) -> None:
        resource_type = request.event.resource_name
        try:
            props = parse_properties(
                LogicalResourceProperties, resource_type, request.properties
            )
            async with self.vault.client(resource_type, props.token_parameter) as client:
                logger.info("Deleting %s", props.path)
                await client.delete(props.path)
        except VaultOperatorError as e:
            logger.warning("Skipping delete of %s: %s", request.physical_resource_id, e)
