"""
Tests for the stdio and HTTP transports.

Tests cover:
- Newline-delimited JSON-RPC over stdio (responses, parse errors, notifications)
- POST /mcp and GET /health on the FastAPI app
"""

import io
import json

import pytest
from fastapi.testclient import TestClient

from coverity_mcp.modules.host import CapabilityServer, create_http_app, run_stdio, text_result
from coverity_mcp.modules.host.transports import SESSION_HEADER


@pytest.fixture
def capability_server():
    server = CapabilityServer("transport-test", "0.0.1")

    async def hello(params):
        return text_result("hello")

    server.register_tool("hello", description="Say hello", handler=hello)
    return server


@pytest.fixture
def http_client(capability_server):
    return TestClient(create_http_app(capability_server))


# =============================================================================
# stdio
# =============================================================================


class TestStdio:
    @pytest.mark.asyncio
    async def test_request_response_lines(self, capability_server):
        stdin = io.StringIO(
            "\n".join(
                [
                    json.dumps({"jsonrpc": "2.0", "id": 1, "method": "ping"}),
                    "",
                    json.dumps({"jsonrpc": "2.0", "method": "notifications/initialized"}),
                    "{broken json",
                    json.dumps(
                        {"jsonrpc": "2.0", "id": 2, "method": "tools/call", "params": {"name": "hello"}}
                    ),
                ]
            )
            + "\n"
        )
        stdout = io.StringIO()

        await run_stdio(capability_server, stdin=stdin, stdout=stdout)

        responses = [json.loads(line) for line in stdout.getvalue().splitlines()]
        assert len(responses) == 3
        assert responses[0] == {"jsonrpc": "2.0", "id": 1, "result": {}}
        assert responses[1]["id"] is None
        assert responses[1]["error"]["code"] == -32700
        assert responses[2]["result"]["content"][0]["text"] == "hello"

    @pytest.mark.asyncio
    async def test_stops_at_end_of_input(self, capability_server):
        stdout = io.StringIO()

        await run_stdio(capability_server, stdin=io.StringIO(""), stdout=stdout)

        assert stdout.getvalue() == ""


# =============================================================================
# HTTP
# =============================================================================


class TestHTTP:
    def test_health(self, http_client):
        response = http_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_initialize_sets_session_header(self, http_client):
        response = http_client.post(
            "/mcp",
            json={"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {}},
        )

        assert response.status_code == 200
        assert response.json()["result"]["serverInfo"]["name"] == "transport-test"
        assert response.headers[SESSION_HEADER]

    def test_tools_list(self, http_client):
        response = http_client.post("/mcp", json={"jsonrpc": "2.0", "id": 2, "method": "tools/list"})

        assert SESSION_HEADER not in response.headers
        assert [t["name"] for t in response.json()["result"]["tools"]] == ["hello"]

    def test_notification_is_accepted(self, http_client):
        response = http_client.post(
            "/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"}
        )

        assert response.status_code == 202
        assert response.content == b""

    def test_malformed_body(self, http_client):
        response = http_client.post(
            "/mcp", content=b"{nope", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32700

    def test_app_carries_server(self, http_client, capability_server):
        assert http_client.app.state.capability_server is capability_server
