"""Environment-based configuration for the Vault operator."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Vault operator configuration.

    All settings can be overridden via environment variables with the
    VAULT_OPERATOR_ prefix. For example:
        VAULT_OPERATOR_PROBE_INTERVAL_SECONDS=2
        VAULT_OPERATOR_TOKEN_PARAMETER=/stack/Vault/Token/Root

    The Vault address also honours the standard VAULT_ADDR variable.
    """

    # Vault API used by resource handlers other than Init
    vault_addr: str = Field(
        default="http://127.0.0.1:8200",
        validation_alias=AliasChoices("VAULT_OPERATOR_VAULT_ADDR", "VAULT_ADDR"),
    )
    vault_timeout_seconds: float = 30.0
    vault_ca_cert: str | None = None

    # Cluster probing
    probe_timeout_seconds: float = 10.0
    probe_interval_seconds: float = 5.0
    probe_max_attempts: int | None = None

    # Deadlines
    deadline_margin_seconds: float = 10.0
    default_deadline_seconds: float = 600.0

    # Default SSM parameter holding the Vault token for peer handlers
    token_parameter: str | None = None

    aws_region: str | None = None
    log_level: str = "INFO"

    model_config = {"env_prefix": "VAULT_OPERATOR_"}

    @property
    def vault_verify(self) -> bool | str:
        """TLS verification argument for httpx clients."""
        return self.vault_ca_cert or True


def get_settings() -> Settings:
    """Load settings from the current environment."""
    return Settings()
