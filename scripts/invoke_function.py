#!/usr/bin/env python3
"""
Lambda invocation script for the SigV4 client.

This script invokes a Lambda function through the REST API, signing the
request with the SigV4 signer in this repository instead of boto3.

Usage:
    python invoke_function.py --function-name my-function --payload '{"key": "value"}'
    python invoke_function.py --function-name my-function --log-type Tail --json
    python invoke_function.py --function-name my-function --qualifier prod --region eu-west-1
    python invoke_function.py --verify-auth  # Call STS GetCallerIdentity with a signed request

Authentication:
    Credentials are resolved in this order:
    - --profile (boto3 credential chain for the named profile)
    - Environment variables (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY, AWS_SESSION_TOKEN)
    - The default boto3 credential chain (~/.aws/credentials, instance role)

    Required IAM permissions:
    - lambda:InvokeFunction
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sigv4_client import (
    AWSConfig,
    ConfigurationError,
    HttpxTransport,
    LambdaClient,
    ServiceInvocationError,
    sign_and_send,
)
from sigv4_client.tracing import init_tracing, traced


def load_config(profile_name: Optional[str] = None, region: Optional[str] = None) -> AWSConfig:
    """
    Build the AWS configuration for this run.

    Environment credentials win unless a profile is given; otherwise the
    boto3 credential chain is consulted.
    """
    config = AWSConfig.from_env()
    if profile_name or config.credentials is None:
        config = AWSConfig.from_profile(profile_name)
    if region:
        config.region = region
    return config


@traced(name="cli.verify_auth", attributes={"aws.service": "sts"})
def verify_aws_credentials(config: AWSConfig, transport: HttpxTransport) -> dict:
    """
    Verify AWS credentials by calling STS GetCallerIdentity.

    Returns:
        Dictionary with credential verification results
    """
    response = sign_and_send(
        "sts",
        query={"Action": "GetCallerIdentity", "Version": "2011-06-15"},
        headers={"Accept": "application/json"},
        config=config,
        transport=transport,
    )

    if response.status_code != 200:
        return {"valid": False, "identity": None, "error": response.text}

    identity = (
        json.loads(response.text)
        .get("GetCallerIdentityResponse", {})
        .get("GetCallerIdentityResult", {})
    )
    return {
        "valid": True,
        "identity": {
            "account": identity.get("Account"),
            "arn": identity.get("Arn"),
            "user_id": identity.get("UserId"),
        },
        "error": None,
    }


def main():
    parser = argparse.ArgumentParser(
        description="Invoke an AWS Lambda function with a SigV4-signed REST request"
    )
    parser.add_argument(
        "--function-name",
        help="Function name, name:alias, or function ARN",
    )
    parser.add_argument(
        "--payload",
        default="",
        help="JSON payload to send to the function",
    )
    parser.add_argument(
        "--region",
        default=None,
        help="AWS region (default: AWS_REGION or us-west-1)",
    )
    parser.add_argument(
        "--profile",
        default=None,
        help="AWS profile name to use for credentials",
    )
    parser.add_argument(
        "--qualifier",
        default=None,
        help="Version or alias to invoke",
    )
    parser.add_argument(
        "--invocation-type",
        choices=["RequestResponse", "Event", "DryRun"],
        default=None,
        help="Invocation type (default: RequestResponse)",
    )
    parser.add_argument(
        "--log-type",
        choices=["None", "Tail"],
        default=None,
        help="Set to Tail to include the execution log",
    )
    parser.add_argument(
        "--client-context",
        default=None,
        help="JSON object passed to the function's context",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output response as JSON",
    )
    parser.add_argument(
        "--verify-auth",
        action="store_true",
        help="Verify IAM credentials and exit",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log canonical requests and strings to sign",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    init_tracing(service_name="sigv4-client-cli")

    if not args.verify_auth and not args.function_name:
        parser.error("--function-name is required (or use --verify-auth)")

    try:
        config = load_config(args.profile, args.region)
    except ValueError as e:
        print(f"\nAWS credential error: {e}")
        sys.exit(1)

    with HttpxTransport() as transport:
        if args.verify_auth:
            result = verify_aws_credentials(config, transport)
            if result["valid"]:
                print("\nCredentials are valid!")
                print(f"   Account: {result['identity']['account']}")
                print(f"   ARN: {result['identity']['arn']}")
                print(f"   User ID: {result['identity']['user_id']}")
            else:
                print(f"\nCredential verification failed: {result['error']}")
                sys.exit(1)
            return

        client = LambdaClient(config, transport=transport)
        try:
            result = client.invoke(
                args.function_name,
                args.payload,
                client_context=json.loads(args.client_context) if args.client_context else None,
                invocation_type=args.invocation_type,
                log_type=args.log_type,
                qualifier=args.qualifier,
            )
        except (ConfigurationError, ServiceInvocationError) as e:
            print(f"\nError: {e}")
            sys.exit(1)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, default=str))
    else:
        print(f"\nStatus: {result.status_code} (version {result.executed_version})")
        if result.log_result:
            print(f"\nLog tail:\n{result.log_result}")
        print(f"\nPayload:\n{json.dumps(result.payload, indent=2, default=str)}")


if __name__ == "__main__":
    main()
