"""
Resource handler interface for the reconciliation shim.

A handler converges one kind of custom resource. The dispatcher calls
create/update/delete with a ResourceRequest carrying the physical resource
id, which doubles as the idempotency key across retries of the same
logical resource.

Resource properties arrive from CloudFormation as strings. Handlers parse
them once, at this boundary, into a pydantic model; parse_properties
collects every invalid field into one ResourcePropertiesError instead of
falling back to defaults.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ValidationError

from vault_core.resources.types import CustomResourceEvent, RequestType
from vault_protocols import VaultOperatorError

PropertiesT = TypeVar("PropertiesT", bound=BaseModel)


class ResourcePropertiesError(VaultOperatorError):
    """
    Raised when resource properties fail validation.

    Contains all errors, giving operators complete feedback in one
    failed deployment.

    Attributes:
        resource_type: Resource type being configured
        errors: List of human-readable error messages
    """

    def __init__(self, resource_type: str, errors: list[str]) -> None:
        self.resource_type = resource_type
        self.errors = errors
        super().__init__(str(self))

    def __str__(self) -> str:
        error_list = "; ".join(self.errors)
        return f"Invalid properties for {self.resource_type}: {error_list}"


def parse_properties(
    model: type[PropertiesT], resource_type: str, properties: dict[str, Any]
) -> PropertiesT:
    """
    Validate raw resource properties against a pydantic model.

    Args:
        model: Properties model to validate against
        resource_type: Resource type name, used in error messages
        properties: Raw ResourceProperties from the event

    Returns:
        Validated model instance

    Raises:
        ResourcePropertiesError: If any property is missing or invalid
    """
    try:
        return model.model_validate(properties)
    except ValidationError as e:
        errors = [
            f"`{'.'.join(str(part) for part in err['loc']) or resource_type}`: {err['msg']}"
            for err in e.errors()
        ]
        raise ResourcePropertiesError(resource_type, errors) from None


@dataclass
class ResourceRequest:
    """
    One lifecycle call for a resource.

    Attributes:
        event: The CloudFormation event.
        physical_resource_id: Stable id of the resource instance.
        deadline_seconds: Time left for the handler to finish, if known.
    """

    event: CustomResourceEvent
    physical_resource_id: str
    deadline_seconds: float | None = None

    @property
    def request_type(self) -> RequestType:
        return self.event.request_type

    @property
    def properties(self) -> dict[str, Any]:
        return self.event.resource_properties


@dataclass
class HandlerResult:
    """
    Outcome of a successful create or update.

    Attributes:
        data: Attributes exposed to the template through Fn::GetAtt.
        no_echo: Mask the data in CloudFormation output.
    """

    data: dict[str, str] = field(default_factory=dict)
    no_echo: bool = False


@runtime_checkable
class ResourceHandler(Protocol):
    """Protocol for custom-resource handlers."""

    async def create(self, request: ResourceRequest) -> HandlerResult:
        """Converge a newly created resource."""
        ...

    async def update(self, request: ResourceRequest) -> HandlerResult:
        """Converge an updated resource."""
        ...

    async def delete(self, request: ResourceRequest) -> None:
        """Remove the resource, or do nothing if removal is not meaningful."""
        ...
