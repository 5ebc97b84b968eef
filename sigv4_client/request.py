"""
Signed AWS REST requests.

This module assembles a SigV4-signed request from loose parameters and hands
it to a transport. The work is split into four stages that each take the
previous stage's output:

1. normalize_request       - resolve credentials, region, host, method, payload
2. build_canonical_request - add Host/X-Amz-Date and canonicalize (Task 1)
3. build_signing_context   - string to sign and signature (Tasks 2 and 3)
4. attach_signature        - Authorization header and final URL (Task 4)

Usage:
    from sigv4_client import AWSConfig, sign_and_send

    config = AWSConfig.from_env()
    response = sign_and_send(
        "lambda",
        path="/2015-03-31/functions",
        config=config,
    )
    print(response.status_code, response.text)
"""

import datetime
import json
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, NamedTuple, Optional
from urllib.parse import urlsplit

from .auth.canonical import CanonicalForm, canonical_query_string, canonical_request_hash
from .auth.sigv4 import (
    AWSCredentials,
    SigningContext,
    build_authorization_header,
    build_credential_scope,
    build_string_to_sign,
    calculate_signature,
    derive_signing_key,
    format_amz_date,
    format_date_stamp,
)
from .config import AWSConfig, ConfigurationError
from .tracing import add_request_span_attributes, get_tracer
from .transport import HttpxTransport, Transport, TransportResponse

logger = logging.getLogger(__name__)


class GlobalEndpoint(NamedTuple):
    """A service served from one host regardless of the requested region."""
    host: str
    signing_region: str


GLOBAL_ENDPOINTS: Mapping[str, GlobalEndpoint] = MappingProxyType({
    "cloudfront": GlobalEndpoint("cloudfront.amazonaws.com", "us-east-1"),
    "health": GlobalEndpoint("health.us-east-1.amazonaws.com", "us-east-1"),
    "iam": GlobalEndpoint("iam.amazonaws.com", "us-east-1"),
    "importexport": GlobalEndpoint("importexport.amazonaws.com", "us-east-1"),
    "shield": GlobalEndpoint("shield.us-east-1.amazonaws.com", "us-east-1"),
    "waf": GlobalEndpoint("waf.amazonaws.com", "us-east-1"),
})


@dataclass
class RequestDescriptor:
    """A normalized request that has not been signed yet."""
    method: str
    path: str
    service: str
    region: str
    host: str
    credentials: AWSCredentials
    query: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    payload: str = ""
    signing_region: str = ""

    def __post_init__(self):
        if not self.signing_region:
            self.signing_region = self.region


@dataclass
class SignedRequest:
    """A signed request ready to hand to a transport."""
    method: str
    url: str
    headers: dict[str, str]
    body: str
    service: str
    region: str
    canonical: CanonicalForm
    context: SigningContext


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def resolve_host(service: str, region: str) -> GlobalEndpoint:
    """
    Return the endpoint host and signing region for a service.

    Args:
        service: Lowercase service name
        region: Lowercase region name

    Returns:
        GlobalEndpoint for the service in the region
    """
    endpoint = GLOBAL_ENDPOINTS.get(service)
    if endpoint is not None:
        return endpoint
    return GlobalEndpoint(f"{service}.{region}.amazonaws.com", region)


def _resolve_credentials(
    config: AWSConfig,
    access_key_id: Optional[str],
    secret_access_key: Optional[str],
    session_token: Optional[str],
) -> AWSCredentials:
    defaults = config.credentials

    access_key = access_key_id or (defaults.access_key if defaults else "")
    if not access_key:
        raise ConfigurationError("AWS access key id not specified")

    secret_key = secret_access_key or (defaults.secret_key if defaults else "")
    if not secret_key:
        raise ConfigurationError("AWS secret access key not specified")

    # A session token only belongs to the key pair it was issued with
    if session_token is None and defaults and access_key == defaults.access_key:
        session_token = defaults.session_token

    return AWSCredentials(
        access_key=access_key,
        secret_key=secret_key,
        session_token=session_token or None,
    )


def normalize_request(
    config: AWSConfig,
    service: str,
    region: Optional[str] = None,
    path: Optional[str] = None,
    query: Optional[Mapping[str, Any]] = None,
    method: Optional[str] = None,
    headers: Optional[Mapping[str, str]] = None,
    payload: Any = "",
    access_key_id: Optional[str] = None,
    secret_access_key: Optional[str] = None,
    session_token: Optional[str] = None,
) -> RequestDescriptor:
    """
    Resolve defaults and normalize the request parameters.

    Args:
        config: Default region and credentials
        service: AWS service name (e.g. "lambda", "iam")
        region: AWS region; overrides config.region
        path: Request path without query (default "/")
        query: Query string parameters
        method: HTTP method (default "GET")
        headers: Extra headers; copied, never modified
        payload: Request body; non-string values are serialized as JSON
        access_key_id: Overrides the configured access key
        secret_access_key: Overrides the configured secret key
        session_token: Session token for temporary credentials

    Returns:
        RequestDescriptor ready for canonicalization

    Raises:
        ConfigurationError: If credentials, service or region are missing
    """
    credentials = _resolve_credentials(
        config, access_key_id, secret_access_key, session_token
    )

    if not service:
        raise ConfigurationError("AWS service not specified")
    service = service.lower()

    region = (region or config.region or "").lower()
    if not region:
        raise ConfigurationError("AWS region not specified")

    path = path or "/"
    if not path.startswith("/"):
        path = "/" + path

    if payload is None:
        payload = ""
    elif not isinstance(payload, str):
        payload = json.dumps(payload)

    endpoint = resolve_host(service, region)

    return RequestDescriptor(
        method=(method or "GET").upper(),
        path=path,
        service=service,
        region=region,
        host=endpoint.host,
        credentials=credentials,
        query=dict(query or {}),
        headers=dict(headers or {}),
        payload=payload,
        signing_region=endpoint.signing_region,
    )


def _set_header(headers: dict[str, str], name: str, value: str) -> None:
    """Set a header, replacing any existing spelling of the same name."""
    for key in [k for k in headers if k.lower() == name.lower()]:
        del headers[key]
    headers[name] = value


def build_canonical_request(
    request: RequestDescriptor,
    now: datetime.datetime,
) -> CanonicalForm:
    """Set the signing headers on the request and canonicalize it."""
    _set_header(request.headers, "Host", request.host)
    _set_header(request.headers, "X-Amz-Date", format_amz_date(now))
    if request.credentials.session_token:
        _set_header(
            request.headers, "X-Amz-Security-Token", request.credentials.session_token
        )

    canonical = canonical_request_hash(
        method=request.method,
        path=request.path,
        headers=request.headers,
        query_string=canonical_query_string(request.query),
        payload=request.payload,
    )
    logger.debug("Canonical request:\n%s", canonical.canonical_request)
    return canonical


def build_signing_context(
    request: RequestDescriptor,
    canonical: CanonicalForm,
    now: datetime.datetime,
) -> SigningContext:
    """Build the string to sign and compute its signature."""
    date_stamp = format_date_stamp(now)
    amz_date = format_amz_date(now)
    credential_scope = build_credential_scope(
        date_stamp, request.signing_region, request.service
    )
    string_to_sign = build_string_to_sign(
        amz_date, credential_scope, canonical.canonical_request_hash
    )
    logger.debug("String to sign:\n%s", string_to_sign)

    signing_key = derive_signing_key(
        request.credentials.secret_key,
        date_stamp,
        request.signing_region,
        request.service,
    )

    return SigningContext(
        date_stamp=date_stamp,
        amz_date=amz_date,
        credential_scope=credential_scope,
        string_to_sign=string_to_sign,
        signature=calculate_signature(string_to_sign, signing_key),
    )


def attach_signature(
    request: RequestDescriptor,
    canonical: CanonicalForm,
    context: SigningContext,
) -> SignedRequest:
    """Add the Authorization header and build the final request."""
    request.headers["Authorization"] = build_authorization_header(
        request.credentials.access_key,
        context.credential_scope,
        canonical.signed_headers,
        context.signature,
    )

    # The transport sets Host itself
    headers = {k: v for k, v in request.headers.items() if k.lower() != "host"}

    url = f"https://{request.host}{request.path}"
    if canonical.canonical_query_string:
        url += f"?{canonical.canonical_query_string}"

    return SignedRequest(
        method=request.method,
        url=url,
        headers=headers,
        body=request.payload,
        service=request.service,
        region=request.signing_region,
        canonical=canonical,
        context=context,
    )


def sign_request(
    service: str,
    region: Optional[str] = None,
    path: str = "/",
    query: Optional[Mapping[str, Any]] = None,
    method: str = "GET",
    headers: Optional[Mapping[str, str]] = None,
    payload: Any = "",
    access_key_id: Optional[str] = None,
    secret_access_key: Optional[str] = None,
    session_token: Optional[str] = None,
    *,
    config: Optional[AWSConfig] = None,
    now: Optional[datetime.datetime] = None,
) -> SignedRequest:
    """
    Sign a request without sending it.

    Accepts the same arguments as sign_and_send(). ``now`` fixes the signing
    time; it defaults to the current UTC time.

    Returns:
        SignedRequest with the Authorization header attached

    Raises:
        ConfigurationError: If credentials, service or region are missing
    """
    now = now or _utcnow()

    request = normalize_request(
        config or AWSConfig(),
        service,
        region=region,
        path=path,
        query=query,
        method=method,
        headers=headers,
        payload=payload,
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        session_token=session_token,
    )
    canonical = build_canonical_request(request, now)
    context = build_signing_context(request, canonical, now)
    return attach_signature(request, canonical, context)


def sign_and_send(
    service: str,
    region: Optional[str] = None,
    path: str = "/",
    query: Optional[Mapping[str, Any]] = None,
    method: str = "GET",
    headers: Optional[Mapping[str, str]] = None,
    payload: Any = "",
    access_key_id: Optional[str] = None,
    secret_access_key: Optional[str] = None,
    session_token: Optional[str] = None,
    *,
    config: Optional[AWSConfig] = None,
    transport: Optional[Transport] = None,
    now: Optional[datetime.datetime] = None,
) -> TransportResponse:
    """
    Authenticate and send an AWS API request.

    Args:
        service: AWS service name (e.g. "lambda", "iam")
        region: AWS region (default: config.region)
        path: Request path without query (default "/")
        query: Query string parameters
        method: HTTP method (default "GET")
        headers: Extra headers; Host and X-Amz-Date are added automatically
        payload: Request body; non-string values are serialized as JSON
        access_key_id: Overrides the configured access key
        secret_access_key: Overrides the configured secret key
        session_token: Session token for temporary credentials
        config: Default region and credentials
        transport: Transport to send with (default: a one-off HttpxTransport)
        now: Signing time (default: current UTC time)

    Returns:
        The transport's response, unmodified. Non-2xx statuses are not raised.

    Raises:
        ConfigurationError: If credentials, service or region are missing
        httpx.RequestError: If the default transport cannot reach the endpoint
    """
    with get_tracer().start_as_current_span("aws.sign_and_send") as span:
        signed = sign_request(
            service,
            region=region,
            path=path,
            query=query,
            method=method,
            headers=headers,
            payload=payload,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            config=config,
            now=now,
        )
        add_request_span_attributes(
            span,
            service=signed.service,
            region=signed.region,
            method=signed.method,
            host=urlsplit(signed.url).hostname,
        )

        if transport is None:
            with HttpxTransport() as default_transport:
                response = default_transport.send(
                    signed.url, signed.method, signed.headers, signed.body
                )
        else:
            response = transport.send(
                signed.url, signed.method, signed.headers, signed.body
            )

        add_request_span_attributes(span, status_code=response.status_code)
        return response
