"""Client for the external workflow analysis service."""

from typing import Any

import httpx
from loguru import logger
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from .constants import (
    DEFAULT_CALLER_METADATA,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    WORKFLOW_SUCCESS_STATUS,
    LogMessage,
    WorkflowKey,
)
from .exceptions import AnalysisServiceError

REQUEST_HEADERS = {
    "Accept": "application/json, text/plain, */*",
    "Content-Type": "application/json",
}


class WorkflowResponse(BaseModel):
    """Envelope returned by the workflow service."""

    model_config = ConfigDict(extra="allow")

    status: str | None = None
    result: dict[str, Any] | None = None


class WorkflowClient:
    """Submits sessions to the workflow service and returns its analysis.

    The client owns its HTTP connection pool unless one is passed in; use it
    as an async context manager to release the pool.

    Attributes:
        invoke_url: Workflow invocation endpoint.
        workflow_id: Identifier of the analysis workflow to run.
        caller_metadata: Extra ``input_args`` sent with every request.
        timeout: Seconds before a request is abandoned.
        max_attempts: Attempts per request on transport errors.
    """

    def __init__(
        self,
        *,
        invoke_url: str,
        workflow_id: str,
        username: str | None = None,
        password: str | None = None,
        caller_metadata: dict[str, str] | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_wait: wait_base | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the WorkflowClient.

        Args:
            invoke_url: Workflow invocation endpoint.
            workflow_id: Identifier of the analysis workflow to run.
            username: Basic auth user name, passed through untouched.
            password: Basic auth password, passed through untouched.
            caller_metadata: Extra ``input_args``, defaults to fixed metadata.
            timeout: Seconds before a request is abandoned.
            max_attempts: Attempts per request; retries only on transport errors.
            retry_wait: tenacity wait strategy between attempts.
            http_client: Existing client to reuse instead of creating one.
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        self.invoke_url = invoke_url
        self.workflow_id = workflow_id
        self.caller_metadata = dict(
            DEFAULT_CALLER_METADATA if caller_metadata is None else caller_metadata
        )
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_wait = retry_wait or wait_exponential(multiplier=1, min=2, max=10)
        self.auth = (username, password or "") if username else None

        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout)
        )

    async def __aenter__(self) -> "WorkflowClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self.http_client.aclose()

    def _build_payload(self, *, session_id: str) -> dict[str, Any]:
        return {
            WorkflowKey.ID: self.workflow_id,
            WorkflowKey.INPUT_ARGS: {
                WorkflowKey.HUMAN_MSG: session_id,
                **self.caller_metadata,
            },
        }

    async def _post(self, *, payload: dict[str, Any]) -> httpx.Response:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.retry_wait,
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        )
        return await retrying(
            self.http_client.post,
            self.invoke_url,
            json=payload,
            headers=REQUEST_HEADERS,
            auth=self.auth,
            timeout=self.timeout,
        )

    async def analyze(self, *, session_id: str) -> dict[str, Any]:
        """Run the analysis workflow for one session.

        Args:
            session_id: Identifier of the session to analyze.

        Returns:
            dict[str, Any]: The raw analysis found under the response's ``result`` key.

        Raises:
            AnalysisServiceError: On timeout, transport error, non-2xx status,
                a non-success workflow status, or a malformed response body.
        """
        logger.info(LogMessage.INVOKING_WORKFLOW.format(session_id))
        payload = self._build_payload(session_id=session_id)
        logger.debug(f"Sending request to {self.invoke_url} with payload {payload}")

        try:
            response = await self._post(payload=payload)
        except httpx.TimeoutException as e:
            raise AnalysisServiceError(
                f"Request timed out after {self.timeout}s"
            ) from e
        except httpx.HTTPError as e:
            raise AnalysisServiceError(
                f"Request exception: {type(e).__name__}: {e}"
            ) from e

        logger.debug(LogMessage.WORKFLOW_STATUS.format(response.status_code))
        if not response.is_success:
            logger.debug(f"Response text: {response.text}")
            raise AnalysisServiceError(f"HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise AnalysisServiceError("Malformed response: body is not JSON") from e

        try:
            envelope = WorkflowResponse.model_validate(body)
        except PydanticValidationError as e:
            raise AnalysisServiceError(
                f"Malformed response: {e.error_count()} invalid field(s)"
            ) from e

        if (
            envelope.status is not None
            and envelope.status.lower() != WORKFLOW_SUCCESS_STATUS
        ):
            raise AnalysisServiceError(f"Workflow returned status '{envelope.status}'")

        if envelope.result is None:
            raise AnalysisServiceError(
                f"Malformed response: missing '{WorkflowKey.RESULT}'"
            )

        return envelope.result
