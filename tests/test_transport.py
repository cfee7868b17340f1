"""Tests for HttpxTransport."""
import json

import httpx
import pytest

from refyne_client import HttpxTransport
from refyne_client.transport import _is_ssl_verify_disabled_by_env


def make_transport(handler):
    return HttpxTransport(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestSend:
    @pytest.mark.asyncio
    async def test_returns_response(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                headers={"X-API-Version": "1.0.0"},
                json={"ok": True},
            )

        transport = make_transport(handler)
        response = await transport.send("GET", "https://api.test/x", {}, None, 5.0)

        assert response.status == 200
        assert response.ok is True
        assert response.headers["x-api-version"] == "1.0.0"
        assert json.loads(response.body) == {"ok": True}
        assert response.reason == "OK"

    @pytest.mark.asyncio
    async def test_forwards_method_headers_and_body(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["auth"] = request.headers["authorization"]
            seen["body"] = request.content
            return httpx.Response(201)

        transport = make_transport(handler)
        response = await transport.send(
            "POST", "https://api.test/x", {"Authorization": "Bearer k"}, b'{"a":1}', 5.0
        )

        assert response.status == 201
        assert seen == {"method": "POST", "auth": "Bearer k", "body": b'{"a":1}'}

    @pytest.mark.asyncio
    async def test_error_status_returned_not_raised(self):
        transport = make_transport(lambda request: httpx.Response(503, text="down"))
        response = await transport.send("GET", "https://api.test/x", {}, None, 5.0)
        assert response.status == 503
        assert response.ok is False

    @pytest.mark.asyncio
    async def test_transport_errors_propagate(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        transport = make_transport(handler)
        with pytest.raises(httpx.ConnectError):
            await transport.send("GET", "https://api.test/x", {}, None, 5.0)


class TestClose:
    @pytest.mark.asyncio
    async def test_send_after_close_raises(self):
        transport = make_transport(lambda request: httpx.Response(200))
        await transport.close()
        with pytest.raises(RuntimeError):
            await transport.send("GET", "https://api.test/x", {}, None, 5.0)

    @pytest.mark.asyncio
    async def test_caller_client_left_open(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        transport = HttpxTransport(client)
        await transport.close()
        assert client.is_closed is False
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self):
        transport = HttpxTransport()
        await transport.close()
        assert transport._client.is_closed is True


class TestSslEnv:
    def test_default_enabled(self, monkeypatch):
        monkeypatch.delenv("SSL_CERT_VERIFY", raising=False)
        assert _is_ssl_verify_disabled_by_env() is False

    def test_disabled(self, monkeypatch):
        monkeypatch.setenv("SSL_CERT_VERIFY", "0")
        assert _is_ssl_verify_disabled_by_env() is True

    def test_node_variable_ignored(self, monkeypatch):
        monkeypatch.delenv("SSL_CERT_VERIFY", raising=False)
        monkeypatch.setenv("NODE_TLS_REJECT_UNAUTHORIZED", "0")
        assert _is_ssl_verify_disabled_by_env() is False
