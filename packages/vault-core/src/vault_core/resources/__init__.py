"""
Reconciliation shim for CloudFormation custom resources.

This module provides:
- CustomResourceEvent / CustomResourceResponse: wire models
- ResourceHandler protocol, ResourceRequest, HandlerResult
- ResourceRegistry: type name -> handler
- ResourceDispatcher: event -> handler call -> response
- ResponseSender: uploads responses to CloudFormation
"""

from vault_core.resources.dispatch import (
    ResourceDispatcher,
    ResponseSender,
    invalid_event_response,
    new_physical_resource_id,
)
from vault_core.resources.handler import (
    HandlerResult,
    ResourceHandler,
    ResourcePropertiesError,
    ResourceRequest,
    parse_properties,
)
from vault_core.resources.registry import ResourceRegistry, UnknownResourceTypeError
from vault_core.resources.types import (
    CustomResourceEvent,
    CustomResourceResponse,
    RequestType,
    ResponseStatus,
)

__all__ = [
    "CustomResourceEvent",
    "CustomResourceResponse",
    "RequestType",
    "ResponseStatus",
    "HandlerResult",
    "ResourceHandler",
    "ResourcePropertiesError",
    "ResourceRequest",
    "parse_properties",
    "ResourceRegistry",
    "UnknownResourceTypeError",
    "ResourceDispatcher",
    "ResponseSender",
    "invalid_event_response",
    "new_physical_resource_id",
]
