"""Shared fixtures for vault-aws tests."""

import httpx
import pytest
from httpx import Request, Response


class MockTransport(httpx.AsyncBaseTransport):
    """
    Mock transport for testing Vault API responses.

    Maps (method, path) to response data and records every request.
    """

    def __init__(self, responses: dict[tuple[str, str], dict] | None = None):
        """
        Initialize with mapping of (method, path) to response data.

        Args:
            responses: Each value may have 'status_code' and 'json' keys.
                A missing 'json' key produces an empty body.
        """
        self.responses = responses or {}
        self.requests: list[Request] = []

    async def handle_async_request(self, request: Request) -> Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key in self.responses:
            data = self.responses[key]
            if "json" in data:
                return Response(
                    status_code=data.get("status_code", 200),
                    json=data["json"],
                    request=request,
                )
            return Response(status_code=data.get("status_code", 204), request=request)
        return Response(status_code=404, json={"errors": []}, request=request)


class FailingTransport(httpx.AsyncBaseTransport):
    """Transport whose every request fails to connect."""

    async def handle_async_request(self, request: Request) -> Response:
        raise httpx.ConnectError("connection refused", request=request)


class FakeStore:
    """SecretStoreProtocol implementation backed by a dict."""

    def __init__(self, values: dict[str, str] | None = None):
        self.values = values or {}

    async def put(self, name, value, overwrite=False, encryption_key=None, description=""):
        self.values[name] = value
        return 1

    async def get(self, name):
        if name not in self.values:
            raise LookupError(f"ParameterNotFound: {name}")
        return self.values[name], 1


@pytest.fixture
def transport_factory():
    return MockTransport


@pytest.fixture
def failing_transport() -> FailingTransport:
    return FailingTransport()


@pytest.fixture
def token_store() -> FakeStore:
    return FakeStore({"/vault/Vault/Token/Root": "hvs.root"})
