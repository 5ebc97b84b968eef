"""SigV4 Client - AWS Signature Version 4 request signing and a Lambda invoke client."""

from .auth import (
    ALGORITHM,
    AWSCredentials,
    CanonicalForm,
    SigningContext,
    calculate_signature,
    canonical_headers,
    canonical_query_string,
    canonical_request_hash,
    derive_signing_key,
    get_aws_credentials,
    normalized_path,
)
from .config import AWSConfig, ConfigurationError
from .lambda_client import (
    InvocationResult,
    LambdaClient,
    ServiceInvocationError,
    invoke_function,
)
from .request import (
    GLOBAL_ENDPOINTS,
    RequestDescriptor,
    SignedRequest,
    sign_and_send,
    sign_request,
)
from .transport import HttpxTransport, Transport, TransportResponse

__all__ = [
    # Configuration
    "AWSConfig",
    "AWSCredentials",
    "ConfigurationError",
    "get_aws_credentials",
    # Canonicalization and signing
    "ALGORITHM",
    "CanonicalForm",
    "SigningContext",
    "calculate_signature",
    "canonical_headers",
    "canonical_query_string",
    "canonical_request_hash",
    "derive_signing_key",
    "normalized_path",
    # Request assembly
    "GLOBAL_ENDPOINTS",
    "RequestDescriptor",
    "SignedRequest",
    "sign_and_send",
    "sign_request",
    # Transport
    "HttpxTransport",
    "Transport",
    "TransportResponse",
    # Lambda
    "InvocationResult",
    "LambdaClient",
    "ServiceInvocationError",
    "invoke_function",
]
