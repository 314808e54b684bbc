"""
Factory functions wiring the AWS and Vault backends into the core.

The operator-core CLI and Lambda entrypoint reach this module through
vault_core.factory, without importing vault_aws directly.
"""

import functools

import boto3

from vault_aws.autoscaling import AutoScalingMembership
from vault_aws.aws import create_session
from vault_aws.backend import VaultClusterBackend
from vault_aws.resources import (
    AuditResourceHandler,
    InitResourceHandler,
    LogicalResourceHandler,
    PolicyResourceHandler,
    VaultApiAccess,
)
from vault_aws.ssm import ParameterStore
from vault_core.cluster import (
    ClusterInitCoordinator,
    HealthProber,
    InitializationOrchestrator,
    MembershipResolver,
    UnsealSequencer,
)
from vault_core.resources import ResourceRegistry
from vault_core.retry import RetryPolicy
from vault_core.settings import Settings, get_settings
from vault_protocols import DEFAULT_PORT, DEFAULT_SCHEME

LOGICAL_RESOURCE_TYPES = ("VaultData", "VaultLogical", "VaultSecret", "VaultPath")


def create_coordinator(
    scheme: str = DEFAULT_SCHEME,
    port: int = DEFAULT_PORT,
    settings: Settings | None = None,
    session: boto3.Session | None = None,
) -> ClusterInitCoordinator:
    """
    Create a cluster-initialization coordinator for one server group.

    Args:
        scheme: URL scheme of the Vault servers ("http" or "https").
        port: Vault API port on each server.
        settings: Operator settings. Loaded from the environment if None.
        session: Optional boto3 session. If None, one is created for
            settings.aws_region.

    Returns:
        ClusterInitCoordinator backed by Auto Scaling, Vault and SSM.

    Example:
        coordinator = create_coordinator(scheme="https", port=8200)
        outcome = await coordinator.run("vault-servers", request)
    """
    settings = settings or get_settings()
    session = session or create_session(settings.aws_region)

    backend = VaultClusterBackend(
        timeout_seconds=settings.vault_timeout_seconds,
        verify=settings.vault_verify,
    )
    return ClusterInitCoordinator(
        resolver=MembershipResolver(
            AutoScalingMembership.from_session(session), scheme=scheme, port=port
        ),
        prober=HealthProber(backend, timeout_seconds=settings.probe_timeout_seconds),
        orchestrator=InitializationOrchestrator(
            backend,
            ParameterStore.from_session(session),
            timeout_seconds=settings.probe_timeout_seconds,
        ),
        sequencer=UnsealSequencer(backend),
        retry_policy=RetryPolicy(
            interval_seconds=settings.probe_interval_seconds,
            max_attempts=settings.probe_max_attempts,
        ),
    )


def create_registry(
    settings: Settings | None = None,
    session: boto3.Session | None = None,
) -> ResourceRegistry:
    """
    Create the registry of every custom-resource handler.

    Args:
        settings: Operator settings. Loaded from the environment if None.
        session: Optional boto3 session shared by all handlers.

    Returns:
        ResourceRegistry with Init/VaultInit, VaultAudit, the logical-path
        types and VaultPolicy registered.
    """
    settings = settings or get_settings()
    session = session or create_session(settings.aws_region)

    vault = VaultApiAccess(
        store=ParameterStore.from_session(session),
        vault_addr=settings.vault_addr,
        timeout_seconds=settings.vault_timeout_seconds,
        verify=settings.vault_verify,
        default_token_parameter=settings.token_parameter,
    )

    registry = ResourceRegistry()
    registry.register(
        InitResourceHandler(
            functools.partial(_coordinator_for, settings=settings, session=session),
            default_deadline_seconds=settings.default_deadline_seconds,
        ),
        "Init",
        "VaultInit",
    )
    registry.register(AuditResourceHandler(vault), "VaultAudit")
    registry.register(LogicalResourceHandler(vault), *LOGICAL_RESOURCE_TYPES)
    registry.register(PolicyResourceHandler(vault), "VaultPolicy")
    return registry


def _coordinator_for(
    scheme: str, port: int, settings: Settings, session: boto3.Session
) -> ClusterInitCoordinator:
    return create_coordinator(scheme, port, settings=settings, session=session)
