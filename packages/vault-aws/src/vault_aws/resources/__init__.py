"""
Custom-resource handlers backed by Vault and AWS.

- InitResourceHandler: Init / VaultInit (cluster initialization)
- AuditResourceHandler: VaultAudit
- LogicalResourceHandler: VaultData / VaultLogical / VaultSecret / VaultPath
- PolicyResourceHandler: VaultPolicy
"""

from vault_aws.resources.audit import AuditResourceHandler, AuditResourceProperties
from vault_aws.resources.base import (
    ResourceProperties,
    TokenUnavailableError,
    VaultApiAccess,
    VaultResourceProperties,
)
from vault_aws.resources.init import InitResourceHandler, InitResourceProperties
from vault_aws.resources.logical import LogicalResourceHandler, LogicalResourceProperties
from vault_aws.resources.policy import PolicyResourceHandler, PolicyResourceProperties

__all__ = [
    "ResourceProperties",
    "VaultResourceProperties",
    "VaultApiAccess",
    "TokenUnavailableError",
    "InitResourceHandler",
    "InitResourceProperties",
    "AuditResourceHandler",
    "AuditResourceProperties",
    "LogicalResourceHandler",
    "LogicalResourceProperties",
    "PolicyResourceHandler",
    "PolicyResourceProperties",
]
