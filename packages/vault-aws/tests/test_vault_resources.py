"""
Tests for the VaultAudit, logical-path and VaultPolicy resources.

Handlers run against a MockTransport standing in for the Vault API and an
in-memory token store.
"""

import json

import pytest

from vault_aws.backend import VaultAPIError
from vault_aws.resources import (
    AuditResourceHandler,
    AuditResourceProperties,
    LogicalResourceHandler,
    PolicyResourceHandler,
    TokenUnavailableError,
    VaultApiAccess,
)
from vault_aws.vault_client import TOKEN_HEADER
from vault_core.resources import (
    CustomResourceEvent,
    ResourcePropertiesError,
    ResourceRequest,
    parse_properties,
)
from vault_protocols import NodeUnreachableError

VAULT_ADDR = "https://vault.internal:8200"
TOKEN_PARAMETER = "/vault/Vault/Token/Root"


def make_request(resource_type: str, properties: dict, request_type: str = "Create") -> ResourceRequest:
    event = CustomResourceEvent.model_validate(
        {
            "RequestType": request_type,
            "ResponseURL": "https://example.com/response",
            "StackId": "arn:aws:cloudformation:us-east-1:123456789012:stack/vault/guid",
            "RequestId": "req-1",
            "ResourceType": f"Custom::{resource_type}",
            "LogicalResourceId": resource_type,
            "PhysicalResourceId": f"vault-{resource_type}-0123456789ab",
            "ResourceProperties": {"ServiceToken": "arn:aws:lambda:...", **properties},
        }
    )
    return ResourceRequest(event=event, physical_resource_id=event.physical_resource_id)


def make_access(store, transport, default_token_parameter=TOKEN_PARAMETER) -> VaultApiAccess:
    return VaultApiAccess(
        store=store,
        vault_addr=VAULT_ADDR,
        default_token_parameter=default_token_parameter,
        transport=transport,
    )


class TestVaultApiAccess:
    @pytest.mark.asyncio
    async def test_token_from_resource_property(self, token_store, transport_factory):
        token_store.values["/other/token"] = "hvs.other"
        transport = transport_factory({("PUT", "/v1/sys/policies/acl/p"): {}})
        access = make_access(token_store, transport)

        async with access.client("VaultPolicy", "/other/token") as client:
            await client.put_policy("p", "rules")

        request = transport.requests[0]
        assert request.headers[TOKEN_HEADER] == "hvs.other"
        assert str(request.url) == f"{VAULT_ADDR}/v1/sys/policies/acl/p"

    @pytest.mark.asyncio
    async def test_missing_token_parameter(self, token_store, transport_factory):
        access = make_access(token_store, transport_factory(), default_token_parameter=None)

        with pytest.raises(ResourcePropertiesError, match="TokenParameter"):
            async with access.client("VaultPolicy"):
                pass

    @pytest.mark.asyncio
    async def test_unreadable_token(self, token_store, transport_factory):
        access = make_access(token_store, transport_factory())

        with pytest.raises(TokenUnavailableError, match="/missing"):
            async with access.client("VaultPolicy", "/missing"):
                pass

    @pytest.mark.asyncio
    async def test_http_errors_are_wrapped(self, token_store, transport_factory):
        transport = transport_factory(
            {("PUT", "/v1/sys/policies/acl/p"): {"status_code": 403, "json": {"errors": ["permission denied"]}}}
        )
        access = make_access(token_store, transport)

        with pytest.raises(VaultAPIError) as exc_info:
            async with access.client("VaultPolicy") as client:
                await client.put_policy("p", "rules")

        assert exc_info.value.status_code == 403
        assert exc_info.value.step == "PUT /v1/sys/policies/acl/p"
        assert "permission denied" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connection_errors_are_wrapped(self, token_store, failing_transport):
        access = make_access(token_store, failing_transport)

        with pytest.raises(NodeUnreachableError):
            async with access.client("VaultPolicy") as client:
                await client.put_policy("p", "rules")


class TestAuditProperties:
    def parse(self, properties: dict) -> AuditResourceProperties:
        return parse_properties(AuditResourceProperties, "VaultAudit", properties)

    def test_defaults(self):
        props = self.parse({})

        assert props.type == "file"
        assert props.path == "file/"
        assert props.options == {"file_path": "/vault/logs/audit.log"}
        assert props.local is False
        assert props.disable is False

    def test_path_gets_trailing_slash(self):
        assert self.parse({"Path": "audit-file"}).path == "audit-file/"

    def test_non_file_type_keeps_empty_options(self):
        props = self.parse({"Type": "syslog"})

        assert props.path == "syslog/"
        assert props.options == {}


class TestAuditResourceHandler:
    @pytest.mark.asyncio
    async def test_enables_missing_device(self, token_store, transport_factory):
        transport = transport_factory(
            {
                ("GET", "/v1/sys/audit"): {"json": {"data": {}}},
                ("PUT", "/v1/sys/audit/file"): {},
            }
        )
        handler = AuditResourceHandler(make_access(token_store, transport))

        result = await handler.create(make_request("VaultAudit", {"Local": "true"}))

        assert [r.method for r in transport.requests] == ["GET", "PUT"]
        body = json.loads(transport.requests[1].content)
        assert body == {
            "type": "file",
            "description": "",
            "options": {"file_path": "/vault/logs/audit.log"},
            "local": True,
        }
        assert result.data == {"Type": "file", "Path": "file/", "Local": "true", "Description": ""}

    @pytest.mark.asyncio
    async def test_existing_device_is_reported(self, token_store, transport_factory):
        transport = transport_factory(
            {
                ("GET", "/v1/sys/audit"): {
                    "json": {
                        "data": {
                            "file/": {
                                "type": "file",
                                "path": "file/",
                                "description": "managed elsewhere",
                                "options": {"file_path": "/var/log/vault.log"},
                                "local": False,
                            }
                        }
                    }
                }
            }
        )
        handler = AuditResourceHandler(make_access(token_store, transport))

        result = await handler.update(make_request("VaultAudit", {}, "Update"))

        assert [r.method for r in transport.requests] == ["GET"]
        assert result.data["Description"] == "managed elsewhere"

    @pytest.mark.asyncio
    async def test_disable(self, token_store, transport_factory):
        transport = transport_factory({("DELETE", "/v1/sys/audit/file"): {}})
        handler = AuditResourceHandler(make_access(token_store, transport))

        await handler.update(make_request("VaultAudit", {"Disable": "true"}, "Update"))

        assert [(r.method, r.url.path) for r in transport.requests] == [
            ("DELETE", "/v1/sys/audit/file")
        ]

    @pytest.mark.asyncio
    async def test_delete_is_best_effort(self, token_store, failing_transport):
        handler = AuditResourceHandler(make_access(token_store, failing_transport))

        await handler.delete(make_request("VaultAudit", {}, "Delete"))


class TestLogicalResourceHandler:
    @pytest.mark.asyncio
    async def test_writes_data(self, token_store, transport_factory):
        transport = transport_factory({("PUT", "/v1/secret/app/config"): {}})
        handler = LogicalResourceHandler(make_access(token_store, transport))

        result = await handler.create(
            make_request("VaultSecret", {"Path": "secret/app/config", "Data": {"user": "app"}})
        )

        assert json.loads(transport.requests[0].content) == {"user": "app"}
        assert result.data == {"Path": "secret/app/config"}

    @pytest.mark.asyncio
    async def test_path_required(self, token_store, transport_factory):
        transport = transport_factory()
        handler = LogicalResourceHandler(make_access(token_store, transport))

        with pytest.raises(ResourcePropertiesError, match="`Path`"):
            await handler.create(make_request("VaultData", {"Data": {"a": "b"}}))

        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_delete(self, token_store, transport_factory):
        transport = transport_factory({("DELETE", "/v1/secret/app/config"): {}})
        handler = LogicalResourceHandler(make_access(token_store, transport))

        await handler.delete(make_request("VaultPath", {"Path": "secret/app/config"}, "Delete"))

        assert transport.requests[0].method == "DELETE"

    @pytest.mark.asyncio
    async def test_delete_errors_are_skipped(self, token_store, transport_factory):
        handler = LogicalResourceHandler(make_access(token_store, transport_factory()))

        # Unknown path answers 404
        await handler.delete(make_request("VaultPath", {"Path": "secret/gone"}, "Delete"))


class TestPolicyResourceHandler:
    @pytest.mark.asyncio
    async def test_puts_rules_verbatim(self, token_store, transport_factory):
        rules = 'path "secret/*" {\n  capabilities = ["read"]\n}\n'
        transport = transport_factory({("PUT", "/v1/sys/policies/acl/reader"): {}})
        handler = PolicyResourceHandler(make_access(token_store, transport))

        result = await handler.create(
            make_request("VaultPolicy", {"Name": "reader", "Rules": rules})
        )

        assert json.loads(transport.requests[0].content) == {"policy": rules}
        assert result.data == {"Name": "reader"}

    @pytest.mark.asyncio
    async def test_rules_required(self, token_store, transport_factory):
        handler = PolicyResourceHandler(make_access(token_store, transport_factory()))

        with pytest.raises(ResourcePropertiesError, match="`Rules`"):
            await handler.create(make_request("VaultPolicy", {"Name": "reader"}))

    @pytest.mark.asyncio
    async def test_delete(self, token_store, transport_factory):
        transport = transport_factory({("DELETE", "/v1/sys/policies/acl/reader"): {}})
        handler = PolicyResourceHandler(make_access(token_store, transport))

        await handler.delete(
            make_request("VaultPolicy", {"Name": "reader", "Rules": "x"}, "Delete")
        )

        assert transport.requests[0].url.path == "/v1/sys/policies/acl/reader"
