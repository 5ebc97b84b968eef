"""Tests for the configuration module."""

import os
from unittest.mock import patch

import pytest

from sigv4_client.auth import AWSCredentials
from sigv4_client.config import AWSConfig, ConfigurationError


class TestAWSConfig:
    """Tests for AWSConfig class."""

    def test_default_values(self):
        """Test that default values are set correctly."""
        config = AWSConfig()

        assert config.region == "us-west-1"
        assert config.credentials is None
        assert config.api_versions == {"lambda": "2015-03-31"}

    def test_api_versions_not_shared(self):
        first = AWSConfig()
        first.api_versions["lambda"] = "changed"

        assert AWSConfig().api_versions["lambda"] == "2015-03-31"

    def test_api_version_lookup(self):
        assert AWSConfig().api_version("lambda") == "2015-03-31"

    def test_api_version_missing(self):
        with pytest.raises(ConfigurationError, match="'sqs'"):
            AWSConfig().api_version("sqs")

    def test_configuration_error_is_value_error(self):
        assert issubclass(ConfigurationError, ValueError)


class TestAWSConfigFromEnv:
    """Tests for AWSConfig.from_env."""

    def test_from_env_with_defaults(self):
        """Test from_env uses defaults when env vars not set."""
        with patch.dict(os.environ, {}, clear=True):
            config = AWSConfig.from_env()

        assert config.region == "us-west-1"
        assert config.credentials is None
        assert config.api_versions == {"lambda": "2015-03-31"}

    def test_from_env_with_custom_values(self):
        """Test from_env reads environment variables correctly."""
        env_vars = {
            "AWS_REGION": "eu-west-1",
            "AWS_ACCESS_KEY_ID": "AKIDEXAMPLE",
            "AWS_SECRET_ACCESS_KEY": "secret",
            "AWS_SESSION_TOKEN": "token",
            "LAMBDA_API_VERSION": "2099-01-01",
        }

        with patch.dict(os.environ, env_vars, clear=True):
            config = AWSConfig.from_env()

        assert config.region == "eu-west-1"
        assert config.credentials == AWSCredentials("AKIDEXAMPLE", "secret", "token")
        assert config.api_versions["lambda"] == "2099-01-01"

    def test_from_env_default_region_fallback(self):
        with patch.dict(os.environ, {"AWS_DEFAULT_REGION": "ap-south-1"}, clear=True):
            assert AWSConfig.from_env().region == "ap-south-1"

    def test_from_env_requires_both_keys(self):
        with patch.dict(os.environ, {"AWS_ACCESS_KEY_ID": "AKIDEXAMPLE"}, clear=True):
            assert AWSConfig.from_env().credentials is None


class TestAWSConfigFromProfile:
    """Tests for AWSConfig.from_profile."""

    def test_from_profile_resolves_credentials(self):
        resolved = AWSCredentials("AKIAPROFILE", "secret", "token")

        with patch.dict(os.environ, {}, clear=True):
            with patch(
                "sigv4_client.config.get_aws_credentials", return_value=resolved
            ) as mock_get:
                config = AWSConfig.from_profile("dev", region="us-east-2")

        mock_get.assert_called_once_with("dev")
        assert config.credentials is resolved
        assert config.region == "us-east-2"

    def test_from_profile_propagates_errors(self):
        with patch(
            "sigv4_client.config.get_aws_credentials",
            side_effect=ValueError("No AWS credentials found"),
        ):
            with pytest.raises(ValueError, match="No AWS credentials found"):
                AWSConfig.from_profile()
