"""
Test mocks for the sigv4-client test suite.

Available Mocks:
- TransportMock: Recording transport that returns queued responses
- RecordedRequest: A request captured by TransportMock
"""

from .transport_mock import RecordedRequest, TransportMock

__all__ = [
    "RecordedRequest",
    "TransportMock",
]
