"""Configuration for the SigV4 client."""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from .auth.sigv4 import AWSCredentials, get_aws_credentials

load_dotenv()

DEFAULT_REGION = "us-west-1"

DEFAULT_API_VERSIONS = {
    "lambda": "2015-03-31",
}


class ConfigurationError(ValueError):
    """Raised when required signing configuration is missing."""


@dataclass
class AWSConfig:
    """
    Default region, credentials and API versions for AWS calls.

    The embedding application builds one instance and passes it to the
    signing and client functions; they only read it.
    """

    region: str = DEFAULT_REGION
    credentials: Optional[AWSCredentials] = None
    api_versions: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_API_VERSIONS)
    )

    def api_version(self, service: str) -> str:
        """Return the configured API version for a service."""
        version = self.api_versions.get(service)
        if not version:
            raise ConfigurationError(f"AWS API version for '{service}' not specified")
        return version

    @classmethod
    def from_env(cls) -> "AWSConfig":
        """Load configuration from environment variables."""
        credentials = None
        access_key = os.getenv("AWS_ACCESS_KEY_ID", "")
        secret_key = os.getenv("AWS_SECRET_ACCESS_KEY", "")
        if access_key and secret_key:
            credentials = AWSCredentials(
                access_key=access_key,
                secret_key=secret_key,
                session_token=os.getenv("AWS_SESSION_TOKEN") or None,
            )

        api_versions = dict(DEFAULT_API_VERSIONS)
        if os.getenv("LAMBDA_API_VERSION"):
            api_versions["lambda"] = os.environ["LAMBDA_API_VERSION"]

        return cls(
            region=os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or DEFAULT_REGION,
            credentials=credentials,
            api_versions=api_versions,
        )

    @classmethod
    def from_profile(
        cls,
        profile_name: Optional[str] = None,
        region: Optional[str] = None,
    ) -> "AWSConfig":
        """
        Resolve credentials through the boto3 credential chain.

        Args:
            profile_name: Optional AWS profile name
            region: Optional default region (falls back to the environment)

        Returns:
            AWSConfig with resolved credentials

        Raises:
            ValueError: If credentials cannot be obtained
        """
        config = cls.from_env()
        config.credentials = get_aws_credentials(profile_name)
        if region:
            config.region = region
        return config
