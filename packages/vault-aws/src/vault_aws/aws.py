"""
boto3 plumbing shared by the AWS collaborators.

boto3 clients are synchronous; calls are pushed to the default executor so
they never block the event loop.
"""

import asyncio
import functools
from collections.abc import Callable
from typing import Any, TypeVar

import boto3
from botocore.config import Config

T = TypeVar("T")

# Standard retry mode backs off on throttling (SSM PutParameter is rate limited)
BOTO_CONFIG = Config(retries={"max_attempts": 5, "mode": "standard"})


async def run_sync(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking boto3 call in the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))


def create_session(region: str | None = None) -> boto3.Session:
    """Create a boto3 session, optionally pinned to a region."""
    if region:
        return boto3.Session(region_name=region)
    return boto3.Session()


def error_code(error: Exception) -> str:
    """AWS error code of a botocore ClientError, empty for other errors."""
    response = getattr(error, "response", None) or {}
    return response.get("Error", {}).get("Code", "")
