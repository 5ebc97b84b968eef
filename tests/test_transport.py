"""Tests for the httpx transport."""

import httpx
import pytest

from sigv4_client.transport import HttpxTransport, TransportResponse


def make_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestHttpxTransport:
    """Tests for HttpxTransport."""

    def test_sends_method_headers_and_body(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["authorization"] = request.headers.get("Authorization")
            seen["host"] = request.headers.get("Host")
            seen["body"] = request.content
            return httpx.Response(200, json={"ok": True})

        transport = HttpxTransport(client=make_client(handler))
        response = transport.send(
            "https://lambda.us-west-2.amazonaws.com/2015-03-31/functions/f/invocations?Qualifier=prod",
            "POST",
            {"Authorization": "AWS4-HMAC-SHA256 Credential=..."},
            '{"key": "value"}',
        )

        assert isinstance(response, TransportResponse)
        assert response.status_code == 200
        assert seen["method"] == "POST"
        assert seen["url"].endswith("/invocations?Qualifier=prod")
        assert seen["authorization"] == "AWS4-HMAC-SHA256 Credential=..."
        assert seen["host"] == "lambda.us-west-2.amazonaws.com"
        assert seen["body"] == b'{"key": "value"}'

    def test_non_2xx_not_raised(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                404,
                headers={"X-Amz-Executed-Version": "$LATEST"},
                text='{"errorMessage": "not found"}',
            )

        transport = HttpxTransport(client=make_client(handler))
        response = transport.send("https://example.com/", "GET", {}, "")

        assert response.status_code == 404
        assert response.text == '{"errorMessage": "not found"}'
        assert response.headers["x-amz-executed-version"] == "$LATEST"

    def test_request_errors_propagate(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport = HttpxTransport(client=make_client(handler))

        with pytest.raises(httpx.ConnectError):
            transport.send("https://example.com/", "GET", {}, "")

    def test_context_manager_closes_owned_client(self):
        with HttpxTransport(timeout_seconds=5) as transport:
            client = transport._client
            assert transport.timeout_seconds == 5

        assert client.is_closed

    def test_caller_client_left_open(self):
        client = make_client(lambda request: httpx.Response(200))

        with HttpxTransport(client=client):
            pass

        assert not client.is_closed
        client.close()
