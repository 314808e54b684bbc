"""
Dispatch of CloudFormation custom-resource events to handlers.

ResourceDispatcher turns a CustomResourceEvent into a handler call and
always produces a CustomResourceResponse: a handler exception becomes a
FAILED response with a redacted reason rather than an unanswered request,
which would leave the stack waiting for the CloudFormation timeout.

ResponseSender uploads the response to the event's pre-signed ResponseURL.
"""

import json
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import ValidationError

from vault_core.resources.handler import HandlerResult, ResourceRequest
from vault_core.resources.registry import ResourceRegistry
from vault_core.resources.types import (
    CustomResourceEvent,
    CustomResourceResponse,
    RequestType,
    ResponseStatus,
)
from vault_core.secrets import SecretRedactor, redactor
from vault_protocols import VaultOperatorError

logger = logging.getLogger(__name__)

# CloudFormation rejects responses larger than 4096 bytes
MAX_REASON_LENGTH = 1024


def new_physical_resource_id(event: CustomResourceEvent) -> str:
    """Generate a physical resource id for a newly created resource."""
    return f"{event.stack_name}-{event.logical_resource_id}-{uuid.uuid4().hex[:12]}"


def invalid_event_response(
    raw_event: dict[str, Any],
    error: ValidationError,
    secret_redactor: SecretRedactor = redactor,
) -> CustomResourceResponse:
    """
    Build the FAILED response for an event that could not be parsed.

    Whatever identifiers the raw event carries are echoed back so
    CloudFormation can match the response to its request.
    """
    problems = "; ".join(
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}"
        for item in error.errors()
    )
    reason = secret_redactor.redact_reason(f"Invalid custom-resource event: {problems}")
    logical_id = str(raw_event.get("LogicalResourceId") or "")
    physical_id = raw_event.get("PhysicalResourceId") or (
        f"{logical_id or 'invalid-event'}-{uuid.uuid4().hex[:12]}"
    )
    return CustomResourceResponse(
        status=ResponseStatus.FAILED,
        reason=reason[:MAX_REASON_LENGTH],
        physical_resource_id=str(physical_id),
        stack_id=str(raw_event.get("StackId") or ""),
        request_id=str(raw_event.get("RequestId") or ""),
        logical_resource_id=logical_id,
    )


@dataclass
class ResourceDispatcher:
    """
    Routes lifecycle events to registered handlers.

    Attributes:
        registry: Handlers keyed by resource type name.
        secret_redactor: Redacts failure reasons before they leave the process.

    Example:
        dispatcher = ResourceDispatcher(registry=create_registry())
        response = await dispatcher.dispatch(event)
        await ResponseSender().send(event, response)
    """

    registry: ResourceRegistry
    secret_redactor: SecretRedactor = field(default=redactor)

    async def dispatch(
        self,
        event: CustomResourceEvent,
        deadline_seconds: float | None = None,
    ) -> CustomResourceResponse:
        """
        Invoke the handler for event and build the response.

        Args:
            event: The CloudFormation event.
            deadline_seconds: Time budget passed on to the handler.

        Returns:
            SUCCESS response with the handler's data, or FAILED with a reason.
        """
        if event.request_type is RequestType.CREATE or not event.physical_resource_id:
            physical_id = new_physical_resource_id(event)
        else:
            physical_id = event.physical_resource_id

        request = ResourceRequest(
            event=event,
            physical_resource_id=physical_id,
            deadline_seconds=deadline_seconds,
        )
        logger.info(
            "%s %s (%s) as %s",
            event.request_type.value,
            event.resource_type,
            event.logical_resource_id,
            physical_id,
        )

        try:
            handler = self.registry.get(event.resource_name)
            if event.request_type is RequestType.CREATE:
                result = await handler.create(request)
            elif event.request_type is RequestType.UPDATE:
                result = await handler.update(request)
            else:
                await handler.delete(request)
                result = HandlerResult()
        except VaultOperatorError as e:
            logger.error(
                "%s %s failed (%s): %s",
                event.request_type.value,
                event.logical_resource_id,
                type(e).__name__,
                e,
            )
            return self._failed(event, physical_id, e)
        except Exception as e:
            logger.exception(
                "%s %s failed unexpectedly",
                event.request_type.value,
                event.logical_resource_id,
            )
            return self._failed(event, physical_id, e)

        logger.info(
            "%s %s succeeded", event.request_type.value, event.logical_resource_id
        )
        return CustomResourceResponse(
            status=ResponseStatus.SUCCESS,
            physical_resource_id=physical_id,
            stack_id=event.stack_id,
            request_id=event.request_id,
            logical_resource_id=event.logical_resource_id,
            no_echo=result.no_echo,
            data=result.data,
        )

    def _failed(
        self, event: CustomResourceEvent, physical_id: str, error: Exception
    ) -> CustomResourceResponse:
        reason = self.secret_redactor.redact_reason(
            f"{type(error).__name__}: {error}"
        )
        return CustomResourceResponse(
            status=ResponseStatus.FAILED,
            reason=reason[:MAX_REASON_LENGTH],
            physical_resource_id=physical_id,
            stack_id=event.stack_id,
            request_id=event.request_id,
            logical_resource_id=event.logical_resource_id,
        )


@dataclass
class ResponseSender:
    """
    Uploads custom-resource responses to CloudFormation.

    Attributes:
        http: Optional pre-configured httpx.AsyncClient. If None, a client
            with a 30s timeout is created per upload.
    """

    http: httpx.AsyncClient | None = None
    timeout_seconds: float = 30.0

    async def send(
        self, event: CustomResourceEvent, response: CustomResourceResponse
    ) -> None:
        """
        PUT the response to the event's ResponseURL.

        Raises:
            httpx.HTTPStatusError: On HTTP errors (4xx, 5xx responses).
        """
        await self.send_to(event.response_url, response)

    async def send_to(self, response_url: str, response: CustomResourceResponse) -> None:
        """PUT the response to a pre-signed URL."""
        body = json.dumps(response.to_payload())
        # The pre-signed URL is signed without a content type
        headers = {"Content-Type": ""}

        if self.http is not None:
            reply = await self.http.put(response_url, content=body, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as http:
                reply = await http.put(response_url, content=body, headers=headers)
        reply.raise_for_status()
        logger.info(
            "Sent %s response for %s",
            response.status.value,
            response.logical_resource_id or "unparsed event",
        )
