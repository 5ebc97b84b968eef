"""
Authentication utilities for the SigV4 client.

This module provides the canonical request builder and the SigV4 signature
engine used to authenticate AWS REST API calls.
"""

from .canonical import (
    CanonicalForm,
    canonical_headers,
    canonical_query_string,
    canonical_request_hash,
    hash_payload,
    normalized_path,
    uri_encode,
)
from .sigv4 import (
    ALGORITHM,
    AWSCredentials,
    SigningContext,
    build_authorization_header,
    build_credential_scope,
    build_string_to_sign,
    calculate_signature,
    derive_signing_key,
    format_amz_date,
    format_date_stamp,
    get_aws_credentials,
)

__all__ = [
    "ALGORITHM",
    "AWSCredentials",
    "CanonicalForm",
    "SigningContext",
    "build_authorization_header",
    "build_credential_scope",
    "build_string_to_sign",
    "calculate_signature",
    "canonical_headers",
    "canonical_query_string",
    "canonical_request_hash",
    "derive_signing_key",
    "format_amz_date",
    "format_date_stamp",
    "get_aws_credentials",
    "hash_payload",
    "normalized_path",
    "uri_encode",
]
