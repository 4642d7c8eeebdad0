"""
HTTP binding to the Carbon Calculator REST API.

ApiClient owns everything below the façades: base URL, timeout, request
signing, JSON encoding and decoding of the error envelope. Façades call
``request()`` with a path and a JSON-compatible payload and get back the
decoded JSON body, or a ServiceError.

The underlying transport is an httpx.AsyncClient. Tests inject one bound
to the sandbox through ASGITransport, so the same code path runs in
tests and against the real service.
"""

import json
import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from carbon_calculator.config import settings
from carbon_calculator.exceptions import LOCAL_SOURCE, ServiceError
from carbon_calculator.schemas.error import ErrorResponse, ServiceErrorEntry
from carbon_calculator.security import create_request_token

logger = logging.getLogger(__name__)


class ApiClient:
    """
    Async client for the Carbon Calculator API.

    Usage:
        async with ApiClient() as api_client:
            body = await api_client.request("GET", "/payment-cards/abc/transaction-footprints")

    Args:
        base_url: Defaults to settings.API_BASE_URL.
        consumer_key: Defaults to settings.CONSUMER_KEY.
        signing_secret: Defaults to settings.SIGNING_SECRET.
        timeout: Seconds; defaults to settings.REQUEST_TIMEOUT_SECONDS.
        http_client: Pre-built httpx.AsyncClient. When given, base_url and
            timeout are taken from it and the caller remains responsible
            for closing it.
    """

    def __init__(
        self,
        base_url: str | None = None,
        consumer_key: str | None = None,
        signing_secret: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.consumer_key = consumer_key or settings.CONSUMER_KEY
        self._signing_secret = signing_secret or settings.SIGNING_SECRET
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout if timeout is not None else settings.REQUEST_TIMEOUT_SECONDS,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """
        Send one signed request and return the decoded JSON body.

        Returns:
            The parsed JSON response, or None for an empty (204) response.

        Raises:
            ServiceError: On transport failure or any non-2xx response.
        """
        content = b"" if json_body is None else json.dumps(json_body).encode()
        token = create_request_token(
            content,
            consumer_key=self.consumer_key,
            signing_secret=self._signing_secret,
        )
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        if content:
            headers["Content-Type"] = "application/json"

        logger.debug("%s %s params=%s", method, path, params)
        try:
            response = await self._http.request(
                method,
                path,
                content=content or None,
                params=params,
                headers=headers,
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ServiceError(
                f"{method} {path} failed: {exc}",
                [
                    ServiceErrorEntry(
                        source=LOCAL_SOURCE,
                        reason_code="TRANSPORT_ERROR",
                        description=str(exc) or type(exc).__name__,
                        recoverable=True,
                    )
                ],
            ) from exc

        logger.debug("%s %s -> %s", method, path, response.status_code)
        if response.is_error:
            raise self._service_error(method, path, response)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ServiceError.local(
                "INVALID_RESPONSE", f"{method} {path} returned a non-JSON body"
            ) from exc

    @staticmethod
    def _service_error(method: str, path: str, response: httpx.Response) -> ServiceError:
        """Decode the error envelope of a failed response."""
        try:
            entries = ErrorResponse.model_validate(response.json()).errors.error
        except (ValueError, ValidationError):
            entries = [
                ServiceErrorEntry(
                    source=response.request.url.host or LOCAL_SOURCE,
                    reason_code=f"HTTP_{response.status_code}",
                    description=response.text[:500] or response.reason_phrase,
                )
            ]
        return ServiceError(
            f"{method} {path} returned HTTP {response.status_code}",
            entries,
            status_code=response.status_code,
        )


def parse_response(model: Any, body: Any) -> Any:
    """
    Validate a decoded response body against a schema type.

    Raises:
        ServiceError: With reason INVALID_RESPONSE if the body doesn't match.
    """
    try:
        return TypeAdapter(model).validate_python(body)
    except ValidationError as exc:
        raise ServiceError.local(
            "INVALID_RESPONSE", f"Unexpected response body: {exc.error_count()} validation error(s)"
        ) from exc
