"""Tests for the factory wiring."""

from unittest.mock import MagicMock

from vault_aws.factory import LOGICAL_RESOURCE_TYPES, create_coordinator, create_registry
from vault_aws.resources import (
    AuditResourceHandler,
    InitResourceHandler,
    LogicalResourceHandler,
    PolicyResourceHandler,
)
from vault_core.settings import Settings


class TestCreateCoordinator:
    def test_wires_settings(self):
        settings = Settings(
            probe_timeout_seconds=3.0, probe_interval_seconds=1.5, probe_max_attempts=4
        )

        coordinator = create_coordinator("https", 8300, settings=settings, session=MagicMock())

        assert coordinator.resolver.scheme == "https"
        assert coordinator.resolver.port == 8300
        assert coordinator.prober.timeout_seconds == 3.0
        assert coordinator.retry_policy.interval_seconds == 1.5
        assert coordinator.retry_policy.max_attempts == 4


class TestCreateRegistry:
    def test_registers_every_resource_type(self):
        registry = create_registry(settings=Settings(), session=MagicMock())

        assert set(registry.list_names()) == {
            "Init",
            "VaultInit",
            "VaultAudit",
            "VaultPolicy",
            *LOGICAL_RESOURCE_TYPES,
        }
        assert isinstance(registry.get("Init"), InitResourceHandler)
        assert registry.get("Init") is registry.get("VaultInit")
        assert isinstance(registry.get("VaultAudit"), AuditResourceHandler)
        assert isinstance(registry.get("VaultPolicy"), PolicyResourceHandler)
        handlers = {id(registry.get(name)) for name in LOGICAL_RESOURCE_TYPES}
        assert len(handlers) == 1
        assert isinstance(registry.get("VaultData"), LogicalResourceHandler)

    def test_init_handler_builds_coordinators(self):
        registry = create_registry(settings=Settings(), session=MagicMock())
        handler = registry.get("VaultInit")

        coordinator = handler.coordinator_factory("https", 8201)

        assert coordinator.resolver.port == 8201
