"""
AWS Lambda Invoke client.

This module provides a client for the Lambda ``Invoke`` REST API built on
the SigV4 request signer.

Reference:
    https://docs.aws.amazon.com/lambda/latest/dg/API_Invoke.html

Usage:
    from sigv4_client import AWSConfig, LambdaClient

    client = LambdaClient(AWSConfig.from_env())

    result = client.invoke("my-function", {"key": "value"})
    print(result.payload)

    # Include the last 4 KB of the execution log
    result = client.invoke("my-function:prod", {}, log_type="Tail")
    print(result.log_result)
"""

import base64
import json
import logging
from dataclasses import dataclass
from typing import Any, Literal, Mapping, Optional
from urllib.parse import quote

from .config import AWSConfig
from .request import sign_and_send
from .tracing import add_request_span_attributes, get_tracer
from .transport import Transport

logger = logging.getLogger(__name__)

InvocationType = Literal["Event", "RequestResponse", "DryRun"]
LogType = Literal["None", "Tail"]

CONTENT_TYPE = "application/json; charset=utf-8"


class ServiceInvocationError(Exception):
    """Raised when a function invocation returns a non-2xx status."""

    def __init__(
        self,
        message: str,
        status_code: int,
        result: Optional["InvocationResult"] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.result = result
        super().__init__(message)


@dataclass
class InvocationResult:
    """Result of a Lambda invocation."""
    status_code: int
    executed_version: Optional[str] = None
    log_result: Optional[str] = None
    payload: Any = None

    @property
    def success(self) -> bool:
        return 200 <= self.status_code <= 299

    def to_dict(self) -> dict[str, Any]:
        """Convert to the Lambda API's field names."""
        return {
            "StatusCode": self.status_code,
            "ExecutedVersion": self.executed_version,
            "LogResult": self.log_result,
            "Payload": self.payload,
        }


def _get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup."""
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


def _parse_payload(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def _error_message(result: InvocationResult) -> str:
    payload = result.payload
    if isinstance(payload, dict):
        message = payload.get("errorMessage") or payload.get("message")
        if message:
            return str(message)
    return f"Function invocation failed with status {result.status_code}"


class LambdaClient:
    """
    Client for invoking Lambda functions over the REST API.

    Attributes:
        config: Region, credentials and API versions used for every call
        transport: Transport used to send requests (None uses httpx per call)
    """

    SERVICE = "lambda"

    def __init__(
        self,
        config: Optional[AWSConfig] = None,
        transport: Optional[Transport] = None,
    ):
        """
        Initialize the Lambda client.

        Args:
            config: AWS configuration (defaults to AWSConfig.from_env())
            transport: Optional transport shared across calls
        """
        self.config = config or AWSConfig.from_env()
        self.transport = transport

    def _invocation_path(self, function_name: str) -> str:
        version = self.config.api_version(self.SERVICE)
        return f"/{version}/functions/{quote(function_name, safe=':')}/invocations"

    def invoke(
        self,
        function_name: str,
        payload: Any = "",
        client_context: Optional[dict[str, Any]] = None,
        invocation_type: Optional[InvocationType] = None,
        log_type: Optional[LogType] = None,
        qualifier: Optional[str] = None,
        region: Optional[str] = None,
    ) -> InvocationResult:
        """
        Invoke a Lambda function.

        Args:
            function_name: Function name, name with alias, or (partial) ARN
            payload: JSON text or a JSON-serializable value
            client_context: Data passed to the function's context object
            invocation_type: "RequestResponse" (default), "Event" or "DryRun"
            log_type: "Tail" to include the execution log in the result
            qualifier: Version or alias to invoke
            region: Overrides the configured region

        Returns:
            InvocationResult with status, executed version, log and payload

        Raises:
            ServiceInvocationError: If Lambda returns a non-2xx status
            ConfigurationError: If credentials, region or API version are missing
        """
        query: dict[str, str] = {}
        if client_context is not None:
            query["ClientContext"] = base64.b64encode(
                json.dumps(client_context).encode("utf-8")
            ).decode("ascii")
        if invocation_type:
            query["InvocationType"] = invocation_type
        if log_type:
            query["LogType"] = log_type
        if qualifier:
            query["Qualifier"] = qualifier

        with get_tracer().start_as_current_span("lambda.invoke") as span:
            span.set_attribute("lambda.function_name", function_name)
            add_request_span_attributes(
                span,
                service=self.SERVICE,
                region=region or self.config.region,
                method="POST",
            )

            response = sign_and_send(
                self.SERVICE,
                region=region,
                path=self._invocation_path(function_name),
                query=query,
                method="POST",
                headers={"Content-Type": CONTENT_TYPE},
                payload=payload,
                config=self.config,
                transport=self.transport,
            )

            log_result = _get_header(response.headers, "X-Amz-Log-Result")
            result = InvocationResult(
                status_code=response.status_code,
                executed_version=_get_header(response.headers, "X-Amz-Executed-Version"),
                log_result=(
                    base64.b64decode(log_result).decode("utf-8", errors="replace")
                    if log_result else None
                ),
                payload=_parse_payload(response.text),
            )
            add_request_span_attributes(span, status_code=result.status_code)

            if not result.success:
                logger.error(
                    "Lambda invocation of %s failed:\n%s",
                    function_name,
                    json.dumps(result.to_dict(), indent=2, default=str),
                )
                raise ServiceInvocationError(
                    _error_message(result),
                    status_code=result.status_code,
                    result=result,
                )

            return result


def invoke_function(
    config: AWSConfig,
    function_name: str,
    payload: Any = "",
    client_context: Optional[dict[str, Any]] = None,
    invocation_type: Optional[InvocationType] = None,
    log_type: Optional[LogType] = None,
    qualifier: Optional[str] = None,
    transport: Optional[Transport] = None,
) -> InvocationResult:
    """
    Invoke a Lambda function with a one-off client.

    See LambdaClient.invoke() for the arguments.
    """
    return LambdaClient(config, transport=transport).invoke(
        function_name,
        payload,
        client_context=client_context,
        invocation_type=invocation_type,
        log_type=log_type,
        qualifier=qualifier,
    )
