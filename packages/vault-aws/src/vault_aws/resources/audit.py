"""
VaultAudit resource: enables or disables an audit device.

Enabling is idempotent: when a device is already mounted at the path, its
current configuration is reported and nothing is changed.
"""

import logging

from pydantic import Field, model_validator

from vault_aws.resources.base import VaultApiAccess, VaultResourceProperties
from vault_aws.types import AuditDevice
from vault_core.resources import HandlerResult, ResourceRequest, parse_properties
from vault_protocols import VaultOperatorError

logger = logging.getLogger(__name__)

AUDIT_TYPE_FILE = "file"
DEFAULT_FILE_OPTIONS = {"file_path": "/vault/logs/audit.log"}


class AuditResourceProperties(VaultResourceProperties):
    """
    Properties of a VaultAudit resource.

    Path defaults to the device type and always ends with "/". File
    devices without options log to /vault/logs/audit.log.
    """

    type: str = AUDIT_TYPE_FILE
    path: str = ""
    local: bool = False
    options: dict[str, str] = Field(default_factory=dict)
    description: str = ""
    disable: bool = False

    @model_validator(mode="after")
    def _apply_defaults(self) -> "AuditResourceProperties":
        path = self.path or self.type
        if not path.endswith("/"):
            path += "/"
        self.path = path
        if self.type == AUDIT_TYPE_FILE and not self.options:
            self.options = dict(DEFAULT_FILE_OPTIONS)
        return self


def audit_data(device: AuditDevice, path: str) -> dict[str, str]:
    return {
        "Type": device.type,
        "Path": path,
        "Local": str(device.local).lower(),
        "Description": device.description,
    }


class AuditResourceHandler:
    """Handler for VaultAudit resources."""

    def __init__(self, vault: VaultApiAccess) -> None:
        self.vault = vault

    async def create(self, request: ResourceRequest) -> HandlerResult:
        return await self.update(request)

    async def update(self, request: ResourceRequest) -> HandlerResult:
        resource_type = request.event.resource_name
        props = parse_properties(AuditResourceProperties, resource_type, request.properties)
        desired = AuditDevice(
            type=props.type,
            path=props.path,
            description=props.description,
            options=props.options,
            local=props.local,
        )

        async with self.vault.client(resource_type, props.token_parameter) as client:
            if props.disable:
                logger.info("Disabling audit device at %s", props.path)
                await client.disable_audit(props.path)
                return HandlerResult(data=audit_data(desired, props.path))

            existing = (await client.list_audit()).get(props.path)
            if existing is not None:
                logger.info(
                    "Audit device at %s already enabled (type=%s, local=%s)",
                    props.path,
                    existing.type,
                    existing.local,
                )
                return HandlerResult(data=audit_data(existing, props.path))

            logger.info(
                "Enabling audit device at %s (type=%s, local=%s)",
                props.path,
                props.type,
                props.local,
            )
            await client.enable_audit(
                props.path,
                props.type,
                description=props.description,
                options=props.options,
                local=props.local,
            )
        return HandlerResult(data=audit_data(desired, props.path))

    async def delete(self, request: ResourceRequest) -> None:
        resource_type = request.event.resource_name
        try:
            props = parse_properties(
                AuditResourceProperties, resource_type, request.properties
            )
            async with self.vault.client(resource_type, props.token_parameter) as client:
                logger.info("Disabling audit device at %s", props.path)
                await client.disable_audit(props.path)
        except VaultOperatorError as e:
            logger.warning("Skipping delete of %s: %s", request.physical_resource_id, e)
