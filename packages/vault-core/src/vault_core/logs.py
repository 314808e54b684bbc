"""Logging setup for the Lambda entrypoint and the CLI."""

import logging

from rich.console import Console
from rich.logging import RichHandler

from vault_core.secrets import RedactingFilter, SecretRedactor, redactor

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(
    level: str = "INFO",
    rich: bool = False,
    secret_redactor: SecretRedactor | None = None,
) -> logging.Handler:
    """
    Install a redacting handler on the root logger.

    Replaces any handlers already installed (the Lambda runtime installs
    its own) so every record passes through the redacting filter.

    Args:
        level: Log level name
        rich: Render through rich (CLI) instead of a plain stream (Lambda)
        secret_redactor: Redactor to filter with, defaults to the shared one

    Returns:
        The installed handler
    """
    if rich:
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True), show_path=False
        )
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RedactingFilter(secret_redactor or redactor))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level.upper())

    # boto and httpx log request details at DEBUG
    for noisy in ("botocore", "boto3", "urllib3", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return handler
