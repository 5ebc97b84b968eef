"""
Pytest configuration and fixtures for sigv4-client tests.

The credentials and timestamp below are the ones AWS uses in its published
Signature Version 4 examples, so signatures computed with them can be
compared with known values.
"""

import datetime
import os
from unittest.mock import patch

import pytest

from sigv4_client.auth import AWSCredentials
from sigv4_client.config import AWSConfig
from tests.mocks import TransportMock

EXAMPLE_ACCESS_KEY = "AKIDEXAMPLE"
EXAMPLE_SECRET_KEY = "wJalrXUtnFEMI/K7MDENG+bPxRfiCYEXAMPLEKEY"
EXAMPLE_TIME = datetime.datetime(2015, 8, 30, 12, 36, 0, tzinfo=datetime.timezone.utc)


# ============================================================================
# Signing Fixtures
# ============================================================================

@pytest.fixture
def credentials() -> AWSCredentials:
    return AWSCredentials(access_key=EXAMPLE_ACCESS_KEY, secret_key=EXAMPLE_SECRET_KEY)


@pytest.fixture
def aws_config(credentials: AWSCredentials) -> AWSConfig:
    """AWSConfig with the example credentials and us-west-2 as default region."""
    return AWSConfig(region="us-west-2", credentials=credentials)


@pytest.fixture
def fixed_now() -> datetime.datetime:
    return EXAMPLE_TIME


@pytest.fixture
def transport() -> TransportMock:
    return TransportMock()


@pytest.fixture
def frozen_clock():
    """Patch the signer's clock to the example timestamp."""
    with patch("sigv4_client.request._utcnow", return_value=EXAMPLE_TIME):
        yield EXAMPLE_TIME


# ============================================================================
# Environment-based Fixtures
# ============================================================================

@pytest.fixture
def lambda_function_name() -> str:
    """
    Get the name of a deployed Lambda function from the environment.

    Raises:
        pytest.skip: If LAMBDA_FUNCTION_NAME is not set
    """
    name = os.environ.get("LAMBDA_FUNCTION_NAME")
    if not name:
        pytest.skip("LAMBDA_FUNCTION_NAME not set - skipping integration tests")
    return name


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires AWS credentials)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is passed."""
    if config.getoption("--run-integration", default=False):
        return

    skip_integration = pytest.mark.skip(
        reason="Integration tests skipped. Use --run-integration to run."
    )

    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests (requires AWS credentials)",
    )
