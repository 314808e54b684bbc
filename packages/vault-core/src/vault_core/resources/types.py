"""
CloudFormation custom-resource request and response types.

These are the wire models exchanged with CloudFormation. Field names follow
the CloudFormation casing via aliases; Python code uses snake_case.

Based on: https://docs.aws.amazon.com/AWSCloudFormation/latest/UserGuide/crpg-ref.html
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal

CUSTOM_RESOURCE_PREFIX = "Custom::"


class RequestType(str, Enum):
    """Lifecycle request sent by CloudFormation."""

    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


class ResponseStatus(str, Enum):
    """Outcome reported back to CloudFormation."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class _CloudFormationModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        extra="ignore",
    )


class CustomResourceEvent(_CloudFormationModel):
    """
    Custom-resource request delivered to the Lambda function.

    Example event:
    {
        "RequestType": "Create",
        "ResponseURL": "https://cloudformation-custom-resource-response-....",
        "StackId": "arn:aws:cloudformation:us-east-1:123456789012:stack/vault/guid",
        "RequestId": "unique-id",
        "ResourceType": "Custom::VaultInit",
        "LogicalResourceId": "VaultInit",
        "ResourceProperties": {"ServiceToken": "arn:...", "ServerGroup": "vault"}
    }
    """

    request_type: RequestType
    response_url: str = Field(alias="ResponseURL")
    stack_id: str
    request_id: str
    resource_type: str
    logical_resource_id: str
    physical_resource_id: str | None = None
    resource_properties: dict[str, Any] = Field(default_factory=dict)
    old_resource_properties: dict[str, Any] | None = None

    @property
    def stack_name(self) -> str:
        """Stack name parsed from the stack ARN."""
        parts = self.stack_id.split("/")
        if len(parts) > 1:
            return parts[1]
        return self.stack_id

    @property
    def resource_name(self) -> str:
        """Resource type without the "Custom::" prefix."""
        return self.resource_type.removeprefix(CUSTOM_RESOURCE_PREFIX)


class CustomResourceResponse(_CloudFormationModel):
    """Response uploaded to the pre-signed ResponseURL."""

    status: ResponseStatus
    reason: str = ""
    physical_resource_id: str
    stack_id: str
    request_id: str
    logical_resource_id: str
    no_echo: bool = False
    data: dict[str, str] = Field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        """Serialize with CloudFormation field names."""
        return self.model_dump(by_alias=True, mode="json")
