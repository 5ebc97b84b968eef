"""
Transport Mock for Local Testing.

This module provides a recording implementation of the ``Transport``
protocol so signed requests can be inspected without network access.

The mock:
- Records every request it is asked to send
- Returns queued responses in order (200 with an empty body when the queue is empty)
- Builds Lambda Invoke style responses with executed-version and log headers

Usage:
    from tests.mocks import TransportMock

    transport = TransportMock()
    transport.add_lambda_response({"ok": True}, log_tail="START RequestId ...")

    client = LambdaClient(config, transport=transport)
    client.invoke("my-function", {})

    assert transport.last_request.method == "POST"
"""

import base64
import json
from dataclasses import dataclass, field
from typing import Any, Optional

from sigv4_client.transport import TransportResponse


@dataclass
class RecordedRequest:
    """A request captured by the transport mock."""
    url: str
    method: str
    headers: dict[str, str]
    body: str


@dataclass
class TransportMock:
    """
    Recording transport for tests.

    Attributes:
        requests: Requests sent so far, oldest first
        responses: Responses still to be returned
    """
    requests: list[RecordedRequest] = field(default_factory=list)
    responses: list[TransportResponse] = field(default_factory=list)

    def add_response(
        self,
        status_code: int = 200,
        headers: Optional[dict[str, str]] = None,
        json_data: Any = None,
        text: str = "",
    ) -> TransportResponse:
        """Queue a response; ``json_data`` takes precedence over ``text``."""
        response = TransportResponse(
            status_code=status_code,
            headers=headers or {},
            text=json.dumps(json_data) if json_data is not None else text,
        )
        self.responses.append(response)
        return response

    def add_lambda_response(
        self,
        payload: Any,
        status_code: int = 200,
        executed_version: str = "$LATEST",
        log_tail: Optional[str] = None,
    ) -> TransportResponse:
        """Queue a response shaped like Lambda Invoke's."""
        headers = {
            "Content-Type": "application/json",
            "X-Amz-Executed-Version": executed_version,
        }
        if log_tail is not None:
            headers["X-Amz-Log-Result"] = base64.b64encode(
                log_tail.encode("utf-8")
            ).decode("ascii")
        return self.add_response(status_code=status_code, headers=headers, json_data=payload)

    def send(
        self,
        url: str,
        method: str,
        headers: dict[str, str],
        body: str,
    ) -> TransportResponse:
        self.requests.append(
            RecordedRequest(url=url, method=method, headers=dict(headers), body=body)
        )
        if self.responses:
            return self.responses.pop(0)
        return TransportResponse(status_code=200)

    @property
    def last_request(self) -> Optional[RecordedRequest]:
        return self.requests[-1] if self.requests else None
