"""Flow executor API client wrapper with request logging and error translation."""

import ssl
import time
from collections.abc import Callable
from functools import wraps
from typing import Any

import httpx
import structlog

from .auth.stages import ChallengeStage, IdentificationStage, parse_stage
from .errors import ConfigError, UpstreamTimeoutError, UpstreamTransportError

logger = structlog.get_logger()


def flow_request_logger(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to log flow executor API calls."""

    @wraps(func)
    async def wrapper(self: "FlowExecutorClient", *args: Any, **kwargs: Any) -> Any:
        # Generate correlation ID for request tracking
        correlation_id = f"flow-{int(time.time() * 1000)}-{id(args) % 10000}"
        method_name = func.__name__

        logger.debug(
            f"Flow API call started: {method_name}",
            correlation_id=correlation_id,
            method=method_name,
            api_url=self.api_url,
            flow_slug=self.flow_slug,
            timeout_seconds=self.timeout,
        )

        start_time = time.time()
        try:
            result = await func(self, *args, **kwargs)
            duration_ms = round((time.time() - start_time) * 1000, 2)

            logger.debug(
                f"Flow API call completed: {method_name}",
                correlation_id=correlation_id,
                method=method_name,
                duration_ms=duration_ms,
            )
            return result

        except Exception as e:
            duration_ms = round((time.time() - start_time) * 1000, 2)
            logger.error(
                f"Flow API call failed: {method_name}",
                correlation_id=correlation_id,
                method=method_name,
                duration_ms=duration_ms,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    return wrapper


def flow_error_handler(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to translate httpx failures into upstream errors."""

    @wraps(func)
    async def wrapper(self: "FlowExecutorClient", *args: Any, **kwargs: Any) -> Any:
        try:
            return await func(self, *args, **kwargs)

        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(
                f"Flow executor request timed out after {self.timeout}s"
            ) from e

        except httpx.HTTPStatusError as e:
            raise UpstreamTransportError(
                f"Flow executor returned HTTP {e.response.status_code}"
            ) from e

        except httpx.HTTPError as e:
            raise UpstreamTransportError(f"Flow executor request failed: {e}") from e

        except ValueError as e:
            # JSON decoding failure
            raise UpstreamTransportError(
                f"Flow executor returned an invalid body: {e}"
            ) from e

    return wrapper


class FlowExecutorClient:
    """Client for one flow execution against the identity provider API.

    The underlying httpx client keeps cookies, so every request made through one
    instance belongs to the same flow session. Use one instance per attempt.
    """

    def __init__(
        self,
        base_url: str,
        flow_slug: str,
        timeout: float = 10,
        verify: ssl.SSLContext | bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = f"{base_url.rstrip('/')}/api/v3"
        self.flow_slug = flow_slug
        self.timeout = timeout

        self.http_client = httpx.AsyncClient(
            timeout=timeout,
            verify=verify,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "FlowExecutorClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.http_client.aclose()

    @property
    def executor_url(self) -> str:
        return f"{self.api_url}/flows/executor/{self.flow_slug}/"

    async def _send(self, method: str, url: str, **kwargs: Any) -> Any:
        request_start = time.time()
        response = await self.http_client.request(method, url, **kwargs)
        request_duration_ms = round((time.time() - request_start) * 1000, 2)

        logger.debug(
            "Flow HTTP response",
            method=method,
            url=url,
            status_code=response.status_code,
            duration_ms=request_duration_ms,
            content_type=response.headers.get("content-type", "unknown"),
        )

        response.raise_for_status()
        return response.json()

    @flow_request_logger
    @flow_error_handler
    async def get_stage(self) -> ChallengeStage:
        """Fetch the current challenge of the flow."""
        payload = await self._send("GET", self.executor_url, params={"query": ""})
        return parse_stage(payload)

    @flow_request_logger
    @flow_error_handler
    async def solve_identification(
        self, stage: IdentificationStage, username: str, password: str
    ) -> ChallengeStage:
        """Submit username and password for an identification stage."""
        body = {
            "component": stage.component,
            "uid_field": username,
            "password": password,
        }
        payload = await self._send(
            "POST", self.executor_url, params={"query": ""}, json=body
        )
        return parse_stage(payload)

    @flow_request_logger
    @flow_error_handler
    async def get_profile(self) -> dict[str, Any]:
        """Fetch the profile of the user the flow session is logged in as."""
        payload = await self._send("GET", f"{self.api_url}/core/users/me/")
        if not isinstance(payload, dict):
            raise ValueError("profile response is not an object")
        return payload


def build_verify(ca_cert_path: str | None, verify_tls: bool = True) -> ssl.SSLContext | bool:
    """Build the httpx ``verify`` value from TLS settings."""
    if ca_cert_path:
        try:
            return ssl.create_default_context(cafile=ca_cert_path)
        except OSError as e:
            raise ConfigError(f"Unable to load CA certificate {ca_cert_path}: {e}") from e
    if not verify_tls:
        logger.warning(
            "TLS certificate verification disabled - this is insecure and should only be used for development"
        )
        return False
    return True
