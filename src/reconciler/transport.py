"""HTTP transport for resource-management style APIs.

HttpResourceClient implements RemoteClientProtocol over httpx for APIs
that address objects by their identifier path and report long-running
operations through response headers:

- ``GET {id}``: 200 with the object, 404 when it does not exist
- ``PUT {id}`` / ``PATCH {id}`` / ``DELETE {id}``: 200/204 when done
  synchronously, 201/202 with ``Azure-AsyncOperation`` or ``Location``
  when the operation continues in the background
- an ``Azure-AsyncOperation`` URL returns ``{"status": "...", "error": {...}}``
- a ``Location`` URL returns 202 while running and 200/204 once done

Transient failures (timeouts, network errors, 429, 5xx) are retried
here with exponential backoff and jitter. The reconciliation engine
never retries.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx

from .client import RemoteSnapshot
from .exceptions import RemoteRequestError
from .polling import (
    PendingOperation,
    PollPolicy,
    RemoteStatus,
    StatusCheck,
    StatusCheckFn,
    poll_until_done,
)

if TYPE_CHECKING:
    from .context import OperationContext
    from .identifiers import ResourceIdentifier

logger = logging.getLogger(__name__)

ASYNC_OPERATION_HEADER = "Azure-AsyncOperation"
LOCATION_HEADER = "Location"
RETRY_AFTER_HEADER = "Retry-After"

MAX_BACKOFF_SECONDS = 60.0


@dataclass(frozen=True)
class HttpClientConfig:
    """
    Configuration for HttpResourceClient.

    Attributes:
        api_version: Value of the ``api-version`` query parameter
        base_url: Management endpoint
        timeout: Per-request timeout (seconds)
        max_retries: Retries for transient failures of a single request
        retry_delay: Base delay for retry backoff (seconds)
        headers: Extra headers sent with every request (e.g. authorization)
        poll_policy: Backoff between status checks of long-running operations
    """

    api_version: str
    base_url: str = "https://management.azure.com"
    timeout: float = 30.0
    max_retries: int = 3
    retry_delay: float = 1.0
    headers: Mapping[str, str] = field(default_factory=dict)
    poll_policy: PollPolicy = field(default_factory=PollPolicy)

    def __post_init__(self) -> None:
        if not self.api_version:
            raise ValueError("api_version is required")
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")


def _error_message(response: httpx.Response) -> str:
    """Extract ``error.message`` from a JSON error body, if any."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:500]
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            code = error.get("code")
            message = error.get("message", "")
            return f"{code}: {message}" if code else str(message)
    return response.text[:500]


def _json_object(response: httpx.Response, method: str, url: str) -> dict[str, Any]:
    """
    Decode a response body that must be a JSON object.

    Raises:
        RemoteRequestError: If the body is not valid JSON or not an object
    """
    try:
        body = response.json()
    except ValueError as e:
        raise RemoteRequestError(
            f"{method} {url} returned a body that is not valid JSON",
            status_code=response.status_code,
            response_body=response.text[:500],
        ) from e
    if not isinstance(body, dict):
        raise RemoteRequestError(
            f"{method} {url} returned a JSON {type(body).__name__}, expected an object",
            status_code=response.status_code,
            response_body=response.text[:500],
        )
    return body


class HttpResourceClient:
    """
    Generic remote client for one resource collection.

    Subclasses (or callers) turn typed payloads into JSON bodies; this
    class only moves JSON and polls operations.

    Example:
        async with HttpResourceClient(HttpClientConfig(api_version="2021-08-01")) as client:
            snapshot = await client.get(resource_id)
    """

    def __init__(
        self,
        config: HttpClientConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            config: Client configuration
            http_client: Pre-built httpx client (injected for testing). The
                caller keeps ownership; ``close()`` will not close it.
        """
        self.config = config
        self._client = http_client
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                    **self.config.headers,
                },
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> HttpResourceClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    def _calculate_backoff(self, attempt: int, retry_after: float | None) -> float:
        if retry_after is not None:
            return min(retry_after, MAX_BACKOFF_SECONDS)
        base_delay = self.config.retry_delay * (2**attempt)
        # +/-25% jitter
        jitter = base_delay * 0.25 * (2 * random.random() - 1)
        return min(base_delay + jitter, MAX_BACKOFF_SECONDS)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        json: Mapping[str, Any] | None = None,
        expected: tuple[int, ...] = (200, 201, 202, 204),
        with_api_version: bool = True,
    ) -> httpx.Response:
        """
        Send one request, retrying transient failures.

        Args:
            method: HTTP method
            url: Identifier path (relative to ``base_url``) or absolute URL
            json: JSON body
            expected: Status codes returned to the caller instead of raised
            with_api_version: Append the ``api-version`` query parameter

        Raises:
            RemoteRequestError: On a non-retryable error or after max retries
        """
        client = await self._get_client()
        params = {"api-version": self.config.api_version} if with_api_version else None

        for attempt in range(self.config.max_retries + 1):
            retry_after: float | None = None
            cause: BaseException | None = None
            try:
                response = await client.request(method, url, params=params, json=json)
            except httpx.TimeoutException as e:
                error = RemoteRequestError(f"{method} {url} timed out: {e}", retryable=True)
                cause = e
            except httpx.NetworkError as e:
                error = RemoteRequestError(f"{method} {url} network error: {e}", retryable=True)
                cause = e
            else:
                if response.status_code in expected:
                    return response
                retryable = response.status_code == 429 or response.status_code >= 500
                error = RemoteRequestError(
                    f"{method} {url} failed: {_error_message(response)}",
                    status_code=response.status_code,
                    response_body=response.text[:500],
                    retryable=retryable,
                )
                header = response.headers.get(RETRY_AFTER_HEADER)
                if header and header.isdigit():
                    retry_after = float(header)

            if not error.retryable or attempt >= self.config.max_retries:
                raise error from cause

            backoff = self._calculate_backoff(attempt, retry_after)
            logger.warning(
                "Retry %d/%d for %s %s after %.2fs: %s",
                attempt + 1,
                self.config.max_retries,
                method,
                url,
                backoff,
                error,
            )
            await asyncio.sleep(backoff)

        raise RemoteRequestError(f"{method} {url} failed")  # pragma: no cover

    # -------------------------------------------------------------------------
    # RemoteClientProtocol
    # -------------------------------------------------------------------------

    async def get(self, resource_id: ResourceIdentifier) -> RemoteSnapshot:
        """Fetch ``resource_id``; 404 yields an absent snapshot."""
        response = await self._request("GET", str(resource_id), expected=(200, 404))
        if response.status_code == 404:
            return RemoteSnapshot.absent(str(resource_id))
        properties = _json_object(response, "GET", str(resource_id))
        return RemoteSnapshot(resource_id=str(resource_id), properties=properties)

    async def create_or_update_and_poll(
        self,
        resource_id: ResourceIdentifier,
        payload: Mapping[str, Any],
        ctx: OperationContext,
    ) -> None:
        response = await self._request("PUT", str(resource_id), json=payload)
        await self._wait(response, PendingOperation("create", str(resource_id)), ctx)

    async def update_and_poll(
        self,
        resource_id: ResourceIdentifier,
        patch: Mapping[str, Any],
        ctx: OperationContext,
    ) -> None:
        response = await self._request("PATCH", str(resource_id), json=patch)
        await self._wait(response, PendingOperation("update", str(resource_id)), ctx)

    async def delete_and_poll(
        self,
        resource_id: ResourceIdentifier,
        ctx: OperationContext,
    ) -> None:
        response = await self._request(
            "DELETE", str(resource_id), expected=(200, 202, 204, 404)
        )
        if response.status_code in (204, 404):
            return
        await self._wait(response, PendingOperation("delete", str(resource_id)), ctx)

    # -------------------------------------------------------------------------
    # Long-running operations
    # -------------------------------------------------------------------------

    async def _wait(
        self,
        response: httpx.Response,
        operation: PendingOperation,
        ctx: OperationContext,
    ) -> None:
        """Poll the operation started by ``response`` until it finishes."""
        async_url = response.headers.get(ASYNC_OPERATION_HEADER)
        location_url = response.headers.get(LOCATION_HEADER)

        check: StatusCheckFn
        if async_url:
            check = functools.partial(self._check_async_operation, async_url)
        elif location_url and response.status_code in (201, 202):
            check = functools.partial(self._check_location, location_url)
        else:
            initial = self._status_from_body(response)
            if initial.status is RemoteStatus.IN_PROGRESS:
                check = functools.partial(
                    self._check_resource, operation.resource_id, operation.kind
                )
            else:
                check = functools.partial(self._finished, initial)

        logger.info(
            "Submitted %s of %s (operation %s)",
            operation.kind,
            operation.resource_id,
            operation.operation_id,
        )
        await poll_until_done(operation, check, ctx, self.config.poll_policy)
        logger.info(
            "Completed %s of %s after %d status checks in %.1fs",
            operation.kind,
            operation.resource_id,
            operation.attempts,
            operation.elapsed,
        )

    async def _finished(self, result: StatusCheck) -> StatusCheck:
        return result

    def _status_from_body(self, response: httpx.Response) -> StatusCheck:
        if response.status_code == 204 or not response.content:
            return StatusCheck(RemoteStatus.SUCCEEDED)
        try:
            body = response.json()
        except ValueError:
            return StatusCheck(RemoteStatus.SUCCEEDED)
        state = None
        if isinstance(body, dict):
            state = (body.get("properties") or {}).get("provisioningState")
        if state is None:
            return StatusCheck(RemoteStatus.SUCCEEDED)
        return StatusCheck(RemoteStatus.from_api(state))

    async def _check_async_operation(self, url: str) -> StatusCheck:
        response = await self._request("GET", url, expected=(200,), with_api_version=False)
        body = _json_object(response, "GET", url)
        status = RemoteStatus.from_api(body.get("status"))
        error = body.get("error")
        message = None
        if isinstance(error, dict):
            message = f"{error.get('code', 'Error')}: {error.get('message', '')}"
        return StatusCheck(status, message)

    async def _check_location(self, url: str) -> StatusCheck:
        response = await self._request(
            "GET", url, expected=(200, 201, 202, 204), with_api_version=False
        )
        if response.status_code == 202:
            return StatusCheck(RemoteStatus.IN_PROGRESS)
        return StatusCheck(RemoteStatus.SUCCEEDED)

    async def _check_resource(self, resource_url: str, kind: str) -> StatusCheck:
        response = await self._request("GET", resource_url, expected=(200, 404))
        if response.status_code == 404:
            if kind == "delete":
                return StatusCheck(RemoteStatus.SUCCEEDED)
            return StatusCheck(RemoteStatus.FAILED, f"{resource_url} disappeared during {kind}")
        return self._status_from_body(response)
