"""
Secret redaction for log records and failure reasons.

Key material produced by a bootstrap must never reach a log stream or a
CloudFormation failure reason. This module provides:
- SecretRedactor: redacts sensitive keys, secret-looking patterns and
  registered literal values
- RedactingFilter: logging.Filter that passes every record, traceback
  included, through a redactor
- redactor: process-wide instance shared by the coordinator and logging

Per project patterns:
- Industry-standard detect-secrets library for free-text scanning
- Recursive handling of nested dictionaries
- Case-insensitive key matching for sensitive field names
"""

import logging
import re
import threading
from typing import Any

from detect_secrets.core.scan import scan_line
from detect_secrets.settings import transient_settings

REDACTED = "[REDACTED]"

# detect-secrets plugins that match concrete credential formats
REASON_PLUGINS = [
    {"name": "AWSKeyDetector"},
    {"name": "BasicAuthDetector"},
    {"name": "JwtTokenDetector"},
    {"name": "PrivateKeyDetector"},
]

MIN_SCANNED_SECRET_LENGTH = 8


class SecretRedactor:
    """
    Redacts secrets from dictionaries and strings.

    Uses three detection strategies:
    1. Key-based: Field names like 'root_token', 'keys', 'unseal_key'
    2. Pattern-based: Env var assignments (TOKEN=xxx), Bearer tokens,
       X-Vault-Token headers
    3. Value-based: Literal secrets registered at runtime (e.g., the root
       token and key shares of a fresh bootstrap)

    Example:
        redactor = SecretRedactor()
        redactor.register("hvs.abc123")
        redactor.redact_text("token hvs.abc123 accepted")
        # 'token [REDACTED] accepted'
    """

    # Sensitive key names (case-insensitive)
    SENSITIVE_KEYS = {
        "password",
        "secret",
        "secrets",
        "token",
        "tokens",
        "root_token",
        "client_token",
        "key",
        "keys",
        "keys_base64",
        "unseal_key",
        "unseal_keys",
        "recovery_keys",
        "recovery_keys_base64",
        "private_key",
        "authorization",
        "credentials",
        "x-vault-token",
    }

    ENV_VAR_PATTERNS = [
        re.compile(r"(API_KEY|TOKEN|PASSWORD|SECRET|KEY)=([^\s]+)", re.IGNORECASE),
    ]

    BEARER_PATTERN = re.compile(r"Bearer\s+([^\s]+)", re.IGNORECASE)

    VAULT_TOKEN_PATTERN = re.compile(r"(X-Vault-Token:?\s*)([^\s,]+)", re.IGNORECASE)

    def __init__(self) -> None:
        """Initialize with no registered secrets."""
        self._values: set[str] = set()
        self._lock = threading.Lock()

    def register(self, *values: str) -> None:
        """
        Register literal secret values to redact wherever they appear.

        Empty values are ignored.
        """
        with self._lock:
            self._values.update(v for v in values if v)

    def clear(self) -> None:
        """Forget all registered values."""
        with self._lock:
            self._values.clear()

    def redact_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Redact secrets from a dictionary.

        Recursively processes nested dictionaries and lists.

        Args:
            data: Dictionary potentially containing secrets

        Returns:
            Dictionary with secrets replaced by '[REDACTED]'
        """
        if not isinstance(data, dict):
            return data

        result = {}
        for key, value in data.items():
            if isinstance(value, dict):
                result[key] = self.redact_dict(value)
            elif isinstance(value, list):
                if key.lower() in self.SENSITIVE_KEYS:
                    result[key] = REDACTED
                else:
                    result[key] = [
                        self.redact_dict(item)
                        if isinstance(item, dict)
                        else self.redact_text(item)
                        if isinstance(item, str)
                        else item
                        for item in value
                    ]
            elif key.lower() in self.SENSITIVE_KEYS:
                result[key] = REDACTED
            elif isinstance(value, str):
                result[key] = self.redact_text(value)
            else:
                result[key] = value

        return result

    def redact_text(self, value: str) -> str:
        """
        Redact registered values and secret patterns from a string.

        Args:
            value: String potentially containing secrets

        Returns:
            String with secrets redacted
        """
        if not value:
            return value

        result = value

        with self._lock:
            values = sorted(self._values, key=len, reverse=True)
        for secret in values:
            result = result.replace(secret, REDACTED)

        for pattern in self.ENV_VAR_PATTERNS:
            result = pattern.sub(rf"\1={REDACTED}", result)

        result = self.BEARER_PATTERN.sub(f"Bearer {REDACTED}", result)
        result = self.VAULT_TOKEN_PATTERN.sub(rf"\g<1>{REDACTED}", result)

        return result

    def redact_reason(self, value: str) -> str:
        """
        Redact a free-text failure reason before it leaves the process.

        In addition to redact_text, runs the pattern-based detect-secrets
        plugins over each line and redacts anything they flag. Entropy and
        keyword plugins flag ordinary prose in adhoc scans, so they are not
        used here.
        """
        result = self.redact_text(value)
        if not result:
            return result

        with transient_settings({"plugins_used": REASON_PLUGINS}):
            found = {
                secret.secret_value
                for line in result.splitlines()
                for secret in scan_line(line)
                if secret.secret_value
                and len(secret.secret_value) >= MIN_SCANNED_SECRET_LENGTH
            }
        for secret in sorted(found, key=len, reverse=True):
            result = result.replace(secret, REDACTED)

        return result


class RedactingFilter(logging.Filter):
    """Logging filter that redacts every record's rendered message and traceback."""

    def __init__(self, secret_redactor: SecretRedactor) -> None:
        super().__init__()
        self.redactor = secret_redactor

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = self.redactor.redact_text(message)
        if redacted != message:
            record.msg = redacted
            record.args = None

        # Formatters reuse exc_text when set, so the redacted copy is what
        # every handler renders
        if record.exc_info and not record.exc_text:
            record.exc_text = _traceback_formatter.formatException(record.exc_info)
        if record.exc_text:
            record.exc_text = self.redactor.redact_text(record.exc_text)
        if record.stack_info:
            record.stack_info = self.redactor.redact_text(record.stack_info)
        return True


_traceback_formatter = logging.Formatter()

redactor = SecretRedactor()
