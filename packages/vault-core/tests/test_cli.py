"""Tests for the vault-operator CLI."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

from typer.testing import CliRunner

from vault_core.cli import cluster, resource
from vault_core.cli.main import app
from vault_core.resources import HandlerResult, ResourceRegistry
from vault_protocols import ClusterSnapshot, ReplicaEndpoint, ReplicaHealth

runner = CliRunner()

EVENT = {
    "RequestType": "Create",
    "ResponseURL": "https://example.com/response",
    "StackId": "arn:aws:cloudformation:us-east-1:123456789012:stack/vault/guid",
    "RequestId": "req-1",
    "ResourceType": "Custom::VaultPolicy",
    "LogicalResourceId": "AdminPolicy",
    "ResourceProperties": {"Name": "admin", "Rules": "path \"*\" {}"},
}


def _registry() -> ResourceRegistry:
    handler = MagicMock()
    handler.create = AsyncMock(return_value=HandlerResult(data={"Name": "admin"}))
    registry = ResourceRegistry()
    registry.register(handler, "VaultPolicy")
    return registry


class TestHandleCommand:
    def test_prints_response_without_sending(self, tmp_path):
        event_file = tmp_path / "event.json"
        event_file.write_text(json.dumps(EVENT))
        send = AsyncMock()

        with (
            patch.object(resource, "create_registry", return_value=_registry()),
            patch.object(resource, "configure_logging"),
            patch.object(resource.ResponseSender, "send", send),
        ):
            result = runner.invoke(app, ["handle", str(event_file)])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["Status"] == "SUCCESS"
        assert payload["Data"] == {"Name": "admin"}
        send.assert_not_awaited()

    def test_respond_uploads(self, tmp_path):
        event_file = tmp_path / "event.json"
        event_file.write_text(json.dumps(EVENT))
        send = AsyncMock()

        with (
            patch.object(resource, "create_registry", return_value=_registry()),
            patch.object(resource, "configure_logging"),
            patch.object(resource.ResponseSender, "send", send),
        ):
            result = runner.invoke(app, ["handle", str(event_file), "--respond"])

        assert result.exit_code == 0
        send.assert_awaited_once()

    def test_invalid_event(self, tmp_path):
        event_file = tmp_path / "event.json"
        event_file.write_text(json.dumps({"RequestType": "Create"}))

        with patch.object(resource, "configure_logging"):
            result = runner.invoke(app, ["handle", str(event_file)])

        assert result.exit_code == 1
        assert "Invalid event" in result.stdout


class TestInitCommand:
    def test_rejects_bad_threshold(self):
        result = runner.invoke(
            app,
            [
                "init",
                "vault-servers",
                "--root-token-parameter",
                "/vault/root",
                "--share-prefix",
                "/vault/unseal",
                "--shares",
                "3",
                "--threshold",
                "5",
            ],
        )

        assert result.exit_code == 2


class TestProbeCommand:
    def test_renders_table(self):
        endpoint = ReplicaEndpoint.from_address("10.0.1.10")
        coordinator = MagicMock()
        coordinator.resolver.resolve = AsyncMock(return_value=[endpoint])
        coordinator.prober.probe = AsyncMock(
            return_value=ClusterSnapshot(
                entries={
                    endpoint: ReplicaHealth(
                        endpoint=endpoint, reachable=True, initialized=True, sealed=False
                    )
                }
            )
        )

        with (
            patch.object(cluster, "create_coordinator", return_value=coordinator),
            patch.object(cluster, "configure_logging"),
        ):
            result = runner.invoke(app, ["probe", "vault-servers"])

        assert result.exit_code == 0
        assert "10.0.1.10" in result.stdout
