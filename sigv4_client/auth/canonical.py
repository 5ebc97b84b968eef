"""
Canonical request construction for AWS SigV4.

This module implements Task 1 of the SigV4 signing process: turning the parts
of an HTTP request into the canonical form that both the client and AWS hash.
Every function here is pure so each rule can be tested on its own.

Usage:
    from sigv4_client.auth.canonical import canonical_query_string, canonical_request_hash

    query_string = canonical_query_string({"Version": "2010-05-08", "Action": "ListUsers"})
    canonical = canonical_request_hash(
        method="GET",
        path="/",
        headers={"Host": "iam.amazonaws.com", "X-Amz-Date": "20150830T123600Z"},
        query_string=query_string,
        payload="",
    )
    print(canonical.canonical_request_hash, canonical.signed_headers)
"""

import hashlib
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional
from urllib.parse import quote

# RFC 3986 unreserved characters; quote() always leaves A-Z a-z 0-9 "_.-~" alone
_UNRESERVED = "-_.~"

_WHITESPACE_RUN = re.compile(r"\s{2,}")


@dataclass(frozen=True)
class CanonicalForm:
    """Derived canonical request artifacts for a single signing operation."""
    canonical_query_string: str
    canonical_headers: str
    signed_headers: str
    canonical_request: str
    canonical_request_hash: str


def uri_encode(value: str) -> str:
    """Percent-encode everything except RFC 3986 unreserved characters."""
    return quote(value, safe=_UNRESERVED)


def _query_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def canonical_query_string(query: Optional[Mapping[str, Any]]) -> str:
    """
    Build the canonical query string.

    Each pair is encoded as ``key=value`` first and the encoded tokens are
    sorted as whole strings, so the result does not depend on the order the
    mapping was built in.

    Args:
        query: Query parameters; ``None`` values become empty strings

    Returns:
        Canonical query string (empty when there are no parameters)
    """
    if not query:
        return ""

    tokens = [
        f"{uri_encode(str(key).strip())}={uri_encode(_query_value(value))}"
        for key, value in query.items()
    ]
    return "&".join(sorted(tokens))


def canonical_headers(headers: Mapping[str, str]) -> tuple[str, str]:
    """
    Build the canonical headers block and the signed headers list.

    Header names are trimmed and lowercased; values are trimmed and any run
    of two or more whitespace characters becomes a single space. Names that
    only differ by case are merged into one entry with comma-joined values.

    Args:
        headers: Request headers

    Returns:
        Tuple of (canonical headers block, signed headers string)
    """
    merged: dict[str, list[str]] = {}
    for key, value in headers.items():
        name = key.strip().lower()
        merged.setdefault(name, []).append(
            _WHITESPACE_RUN.sub(" ", str(value).strip())
        )

    names = sorted(merged)
    block = "".join(f"{name}:{','.join(merged[name])}\n" for name in names)
    return block, ";".join(names)


def normalized_path(path: str) -> str:
    """Encode each ``/``-separated segment of the path independently."""
    return "/".join(uri_encode(segment) for segment in path.split("/"))


def hash_payload(payload: str) -> str:
    """Create SHA256 hash of the payload."""
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def canonical_request_hash(
    method: str,
    path: str,
    headers: Mapping[str, str],
    query_string: str,
    payload: str,
) -> CanonicalForm:
    """
    Create the canonical request and its SHA256 hash.

    Args:
        method: Uppercase HTTP method
        path: Request path (unencoded segments are encoded here)
        headers: Headers to sign, including Host and X-Amz-Date
        query_string: Output of canonical_query_string()
        payload: Raw request payload

    Returns:
        CanonicalForm with the hashed canonical request and signed headers
    """
    headers_block, signed_headers = canonical_headers(headers)

    canonical_request = "\n".join([
        method,
        normalized_path(path),
        query_string,
        headers_block,
        signed_headers,
        hash_payload(payload),
    ])

    return CanonicalForm(
        canonical_query_string=query_string,
        canonical_headers=headers_block,
        signed_headers=signed_headers,
        canonical_request=canonical_request,
        canonical_request_hash=hashlib.sha256(
            canonical_request.encode("utf-8")
        ).hexdigest(),
    )
