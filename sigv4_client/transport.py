"""
HTTP transport for signed requests.

The signing pipeline hands its output to any object implementing the
``Transport`` protocol. ``HttpxTransport`` is the default implementation and
never raises on non-2xx responses, since callers need to read the error body.
"""

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional, Protocol

import httpx

logger = logging.getLogger(__name__)


@dataclass
class TransportResponse:
    """Raw HTTP response returned by a transport."""
    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    text: str = ""


class Transport(Protocol):
    """Sends a fully signed request and returns the raw response."""

    def send(
        self,
        url: str,
        method: str,
        headers: Mapping[str, str],
        body: str,
    ) -> TransportResponse:
        ...


class HttpxTransport:
    """
    Transport backed by ``httpx.Client``.

    Attributes:
        timeout_seconds: Request timeout passed to httpx
    """

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the transport.

        Args:
            timeout_seconds: Request timeout
            client: Optional pre-configured httpx client (owned by the caller)
        """
        self.timeout_seconds = timeout_seconds
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout_seconds)

    def send(
        self,
        url: str,
        method: str,
        headers: Mapping[str, str],
        body: str,
    ) -> TransportResponse:
        """
        Send the request.

        Raises:
            httpx.RequestError: On connection or timeout failures
        """
        response = self._client.request(
            method,
            url,
            headers=dict(headers),
            content=body.encode("utf-8") if body else None,
        )
        logger.debug("%s %s -> %d", method, url, response.status_code)
        return TransportResponse(
            status_code=response.status_code,
            headers=response.headers,
            text=response.text,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
