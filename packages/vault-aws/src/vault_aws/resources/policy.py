"""VaultPolicy resource: manages an ACL policy. Rules are passed through as opaque text."""

import logging

from pydantic import Field

from vault_aws.resources.base import VaultApiAccess, VaultResourceProperties
from vault_core.resources import HandlerResult, ResourceRequest, parse_properties
from vault_protocols import VaultOperatorError

logger = logging.getLogger(__name__)


class PolicyResourceProperties(VaultResourceProperties):
    name: str = Field(min_length=1)
    rules: str = Field(min_length=1)


class PolicyResourceHandler:
    """Handler for VaultPolicy resources."""

    def __init__(self, vault: VaultApiAccess) -> None:
        self.vault = vault

    async def create(self, request: ResourceRequest) -> HandlerResult:
        return await self.update(request)

    async def update(self, request: ResourceRequest) -> HandlerResult:
        resource_type = request.event.resource_name
        props = parse_properties(PolicyResourceProperties, resource_type, request.properties)

        async with self.vault.client(resource_type, props.token_parameter) as client:
            logger.info(
                "Writing policy %s (%s)", props.name, request.request_type.value.lower()
            )
            await client.put_policy(props.name, props.rules)
        return HandlerResult(data={"Name": props.name})

    async def delete(self, request: ResourceRequest) -> None:
        resource_type = request.event.resource_name
        try:
            props = parse_properties(
                PolicyResourceProperties, resource_type, request.properties
            )
            async with self.vault.client(resource_type, props.token_parameter) as client:
                logger.info("Deleting policy %s", props.name)
                await client.delete_policy(props.name)
        except VaultOperatorError as e:
            logger.warning("Skipping delete of %s: %s", request.physical_resource_id, e)
