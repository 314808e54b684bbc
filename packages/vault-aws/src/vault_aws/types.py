"""
Vault HTTP API response types.

Pydantic models for parsing responses from the Vault sys/ endpoints used
by the operator. Internal types (NodeHealth, SealStatus, ...) are
dataclasses in vault_protocols.types.

Based on: https://developer.hashicorp.com/vault/api-docs/system
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """
    Response from GET /v1/sys/health.

    Example response:
    {
        "initialized": true,
        "sealed": false,
        "standby": false,
        "server_time_utc": 1516639589,
        "version": "1.15.2",
        "cluster_name": "vault-cluster-3bd69ca2"
    }
    """

    model_config = ConfigDict(extra="ignore")

    initialized: bool
    sealed: bool
    standby: bool = False
    version: str = ""
    cluster_name: str = ""


class InitStatusResponse(BaseModel):
    """Response from GET /v1/sys/init."""

    initialized: bool


class InitResponse(BaseModel):
    """
    Response from PUT /v1/sys/init.

    Holds the root token and key shares. Never log instances of this model.
    """

    model_config = ConfigDict(extra="ignore", hide_input_in_errors=True)

    keys: list[str] = Field(repr=False)
    keys_base64: list[str] = Field(default_factory=list, repr=False)
    root_token: str = Field(repr=False)


class SealStatusResponse(BaseModel):
    """
    Response from PUT /v1/sys/unseal and GET /v1/sys/seal-status.

    Example response:
    {"sealed": true, "t": 3, "n": 5, "progress": 1, "version": "1.15.2"}
    """

    model_config = ConfigDict(extra="ignore")

    sealed: bool
    t: int = 0  # threshold
    n: int = 0  # total shares
    progress: int = 0


class AuditDevice(BaseModel):
    """Single audit device from GET /v1/sys/audit."""

    model_config = ConfigDict(extra="ignore")

    type: str
    path: str = ""
    description: str = ""
    options: dict[str, str] = Field(default_factory=dict)
    local: bool = False


class ErrorResponse(BaseModel):
    """Error body returned by Vault on 4xx/5xx responses."""

    errors: list[str] = Field(default_factory=list)


def parse_audit_devices(payload: dict[str, Any]) -> dict[str, AuditDevice]:
    """
    Parse the GET /v1/sys/audit response into devices keyed by path.

    Recent Vault versions return the devices both at the top level and
    under "data" next to request metadata; older versions only at the top
    level. Entries that are not device objects are skipped.
    """
    source = payload.get("data") if isinstance(payload.get("data"), dict) else payload
    devices = {}
    for path, value in source.items():
        if isinstance(value, dict) and "type" in value:
            device = AuditDevice.model_validate({"path": path, **value})
            devices[device.path or path] = device
    return devices
