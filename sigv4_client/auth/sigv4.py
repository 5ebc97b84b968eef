"""
AWS SigV4 signature engine.

This module covers Tasks 2-4 of the Signature Version 4 process: the string
to sign, the HMAC-SHA256 signing key derivation chain, the final signature,
and the Authorization header value. It also resolves credentials through the
standard boto3 credential chain.

Reference:
    https://docs.aws.amazon.com/general/latest/gr/sigv4-create-string-to-sign.html
    https://docs.aws.amazon.com/general/latest/gr/sigv4-calculate-signature.html

Usage:
    from sigv4_client.auth.sigv4 import derive_signing_key, calculate_signature

    key = derive_signing_key(secret_key, "20150830", "us-east-1", "iam")
    signature = calculate_signature(string_to_sign, key)
"""

import datetime
import hashlib
import hmac
from dataclasses import dataclass
from typing import Optional

import boto3

ALGORITHM = "AWS4-HMAC-SHA256"

SCOPE_TERMINATOR = "aws4_request"


@dataclass(frozen=True)
class AWSCredentials:
    """AWS credentials for SigV4 signing."""
    access_key: str
    secret_key: str
    session_token: Optional[str] = None


@dataclass(frozen=True)
class SigningContext:
    """Values derived while signing, each built from the previous one."""
    date_stamp: str
    amz_date: str
    credential_scope: str
    string_to_sign: str
    signature: str


def get_aws_credentials(profile_name: Optional[str] = None) -> AWSCredentials:
    """
    Get AWS credentials from the environment or profile.

    Args:
        profile_name: Optional AWS profile name to use

    Returns:
        AWSCredentials object with access key, secret key, and optional session token

    Raises:
        ValueError: If credentials cannot be obtained
    """
    try:
        if profile_name:
            session = boto3.Session(profile_name=profile_name)
        else:
            session = boto3.Session()

        credentials = session.get_credentials()
    except Exception as e:
        raise ValueError(f"Failed to get AWS credentials: {e}") from e

    if credentials is None:
        raise ValueError("No AWS credentials found")

    frozen_credentials = credentials.get_frozen_credentials()

    return AWSCredentials(
        access_key=frozen_credentials.access_key,
        secret_key=frozen_credentials.secret_key,
        session_token=frozen_credentials.token,
    )


def _sign(key: bytes, msg: str) -> bytes:
    """Create HMAC-SHA256 signature."""
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def _as_utc(dt: datetime.datetime) -> datetime.datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(datetime.timezone.utc)


def format_amz_date(dt: datetime.datetime) -> str:
    """Format a timestamp as YYYYMMDDTHHMMSSZ (naive values are taken as UTC)."""
    return _as_utc(dt).strftime("%Y%m%dT%H%M%SZ")


def format_date_stamp(dt: datetime.datetime) -> str:
    """Format a timestamp as YYYYMMDD (naive values are taken as UTC)."""
    return _as_utc(dt).strftime("%Y%m%d")


def derive_signing_key(
    secret_key: str,
    date_stamp: str,
    region: str,
    service: str,
) -> bytes:
    """
    Derive the signing key for SigV4.

    Each HMAC step uses the raw digest of the previous step as its key.

    Args:
        secret_key: AWS secret access key
        date_stamp: Date in YYYYMMDD format
        region: AWS region (e.g. "us-east-1")
        service: AWS service name (e.g. "lambda", "iam")

    Returns:
        Derived signing key
    """
    k_date = _sign(f"AWS4{secret_key}".encode("utf-8"), date_stamp)
    k_region = _sign(k_date, region)
    k_service = _sign(k_region, service)
    return _sign(k_service, SCOPE_TERMINATOR)


def calculate_signature(string_to_sign: str, signing_key: bytes) -> str:
    """Compute the lowercase hex HMAC-SHA256 of the string to sign."""
    return hmac.new(
        signing_key,
        string_to_sign.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def build_credential_scope(date_stamp: str, region: str, service: str) -> str:
    return f"{date_stamp}/{region}/{service}/{SCOPE_TERMINATOR}"


def build_string_to_sign(
    amz_date: str,
    credential_scope: str,
    canonical_request_hash: str,
) -> str:
    """
    Create the string to sign for SigV4.

    Args:
        amz_date: Timestamp in YYYYMMDDTHHMMSSZ format
        credential_scope: Output of build_credential_scope()
        canonical_request_hash: Hex SHA256 of the canonical request

    Returns:
        String to sign
    """
    return "\n".join([
        ALGORITHM,
        amz_date,
        credential_scope,
        canonical_request_hash,
    ])


def build_authorization_header(
    access_key: str,
    credential_scope: str,
    signed_headers: str,
    signature: str,
) -> str:
    return (
        f"{ALGORITHM} "
        f"Credential={access_key}/{credential_scope}, "
        f"SignedHeaders={signed_headers}, "
        f"Signature={signature}"
    )
