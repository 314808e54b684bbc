"""
AWS Lambda entrypoint for the CloudFormation custom resources.

Configure the function handler as "vault_core.lambda_handler.handle".

Every invocation answers CloudFormation: the dispatcher turns handler
failures into FAILED responses, and the handler's time budget is the
Lambda's remaining time minus a safety margin, so the response is sent
before the function is killed.
"""

import asyncio
import logging
from typing import Any

from pydantic import ValidationError

from vault_core.factory import create_registry
from vault_core.logs import configure_logging
from vault_core.resources import (
    CustomResourceEvent,
    ResourceDispatcher,
    ResponseSender,
    invalid_event_response,
)
from vault_core.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def remaining_budget(context: Any, settings: Settings) -> float:
    """Seconds the handler may spend before the response must be sent."""
    get_remaining = getattr(context, "get_remaining_time_in_millis", None)
    if get_remaining is None:
        return settings.default_deadline_seconds
    budget = get_remaining() / 1000.0 - settings.deadline_margin_seconds
    return max(budget, 0.0)


async def handle_event(
    raw_event: dict[str, Any],
    deadline_seconds: float,
    dispatcher: ResourceDispatcher,
    sender: ResponseSender,
) -> dict[str, Any]:
    """
    Dispatch one event and upload the response.

    An event that fails validation is still answered with FAILED when it
    carries a ResponseURL, so the stack does not wait for the
    CloudFormation timeout.

    Raises:
        ValidationError: If the event is invalid and has no ResponseURL.
    """
    try:
        event = CustomResourceEvent.model_validate(raw_event)
    except ValidationError as e:
        response_url = raw_event.get("ResponseURL")
        if not isinstance(response_url, str) or not response_url:
            raise
        logger.error("Rejecting invalid event: %d validation error(s)", e.error_count())
        response = invalid_event_response(raw_event, e)
        await sender.send_to(response_url, response)
        return response.to_payload()

    response = await dispatcher.dispatch(event, deadline_seconds=deadline_seconds)
    await sender.send(event, response)
    return response.to_payload()


def handle(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Lambda handler."""
    settings = get_settings()
    configure_logging(settings.log_level)

    dispatcher = ResourceDispatcher(registry=create_registry(settings))
    return asyncio.run(
        handle_event(
            event,
            remaining_budget(context, settings),
            dispatcher,
            ResponseSender(),
        )
    )
