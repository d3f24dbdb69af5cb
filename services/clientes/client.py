"""
HTTPX client for the customer API, with retries and exponential backoff + jitter.

Connection errors are retried for every method. Server errors (5xx) and read
timeouts are only retried for idempotent methods, so a create is never sent
twice after the server may already have processed it.
"""

import random
import time
from typing import Any, Dict, Optional

import httpx
import structlog

from .log_config import log_api_call
from .settings import settings

logger = structlog.get_logger(__name__)

# Retryable status codes (5xx server errors)
RETRYABLE_STATUS_CODES = {500, 502, 503, 504}

# Errors raised before the request reached the server
CONNECTION_EXCEPTIONS = (
    httpx.ConnectTimeout,
    httpx.ConnectError,
)

# Retryable exceptions (connection and timeout errors)
RETRYABLE_EXCEPTIONS = CONNECTION_EXCEPTIONS + (httpx.ReadTimeout,)

IDEMPOTENT_METHODS = {"GET", "PUT", "DELETE"}

AUTH_STATUS_CODES = {401, 403}


class ClienteAPIError(Exception):
    """Base exception for customer API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ClienteAPIAuthError(ClienteAPIError):
    """Authentication error (401/403)."""
    pass


class RetryableHTTPError(ClienteAPIError):
    """Raised when max retries are exceeded."""
    pass


def calculate_backoff_delay(attempt: int, base_delay: float = 0.5, max_delay: float = 60.0) -> float:
    """
    Calculate exponential backoff delay with jitter.

    Args:
        attempt: Current retry attempt (0-based)
        base_delay: Base delay in seconds
        max_delay: Maximum delay in seconds

    Returns:
        Delay in seconds with jitter applied
    """
    # Exponential backoff: base_delay * (2 ^ attempt)
    delay = base_delay * (2 ** attempt)
    delay = min(delay, max_delay)

    # Add jitter (0-20% of delay)
    jitter = random.uniform(0, 0.2 * delay)
    return delay + jitter


def extract_error_message(response: httpx.Response) -> Optional[str]:
    """Return the API's "message" field from an error response, if any."""
    try:
        body = response.json()
    except ValueError:
        return None

    if isinstance(body, dict):
        message = body.get("message")
        if message:
            return str(message)
    return None


class HTTPClient:
    """
    HTTP client with automatic retries and exponential backoff.

    Features:
    - Retries on connection errors, and on 5xx/read timeouts for idempotent methods
    - Exponential backoff with jitter
    - Structured logging of retry attempts
    - API error messages surfaced through ClienteAPIError
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 0.5,
        max_delay: float = 60.0,
        timeout: float = 30.0,
        **client_kwargs
    ):
        """
        Initialize HTTP client.

        Args:
            max_retries: Maximum number of retry attempts
            base_delay: Base delay for exponential backoff (seconds)
            max_delay: Maximum delay between retries (seconds)
            timeout: Request timeout in seconds
            **client_kwargs: Additional arguments for httpx.Client (base_url, headers...)
        """
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay

        client_kwargs.setdefault("timeout", timeout)
        self._client = httpx.Client(**client_kwargs)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._client.close()

    def close(self):
        """Close the underlying HTTP client."""
        self._client.close()

    def _is_retryable_error(
        self,
        method: str,
        response: Optional[httpx.Response] = None,
        exception: Optional[Exception] = None
    ) -> bool:
        """Check if an error is retryable for the given method."""
        idempotent = method.upper() in IDEMPOTENT_METHODS

        if exception:
            if isinstance(exception, CONNECTION_EXCEPTIONS):
                return True
            return idempotent and isinstance(exception, RETRYABLE_EXCEPTIONS)

        if response is not None:
            return idempotent and response.status_code in RETRYABLE_STATUS_CODES

        return False

    def _sleep_before_retry(self, attempt: int, method: str, url: str, **context) -> None:
        delay = calculate_backoff_delay(attempt, self.base_delay, self.max_delay)
        logger.warning(
            "HTTP request failed, retrying",
            method=method,
            url=url,
            attempt=attempt + 1,
            retry_after=delay,
            **context
        )
        time.sleep(delay)

    def _make_request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Make HTTP request with retry logic."""
        last_exception = None
        last_response = None

        for attempt in range(self.max_retries + 1):
            try:
                logger.debug(
                    "Making HTTP request",
                    method=method,
                    url=url,
                    attempt=attempt + 1,
                    max_attempts=self.max_retries + 1
                )

                start_time = time.monotonic()
                response = self._client.request(method, url, **kwargs)
            except Exception as exc:
                if not self._is_retryable_error(method, exception=exc):
                    logger.error(
                        "HTTP request failed with non-retryable exception",
                        method=method,
                        url=url,
                        exception=str(exc)
                    )
                    raise

                last_exception = exc
                if attempt < self.max_retries:
                    self._sleep_before_retry(attempt, method, url, exception=str(exc))
                    continue
                break

            log_api_call(
                logger,
                method,
                url,
                status_code=response.status_code,
                duration_ms=(time.monotonic() - start_time) * 1000,
                attempt=attempt + 1
            )

            if self._is_retryable_error(method, response=response):
                last_response = response
                if attempt < self.max_retries:
                    self._sleep_before_retry(attempt, method, url, status_code=response.status_code)
                    continue
                break

            if response.status_code >= 400:
                logger.debug(
                    "HTTP error response body",
                    method=method,
                    url=url,
                    response_text=response.text[:500]
                )

            return response

        # Max retries exceeded
        if last_exception:
            logger.error(
                "Max retries exceeded, last exception",
                method=method,
                url=url,
                max_retries=self.max_retries,
                exception=str(last_exception)
            )
            raise RetryableHTTPError(f"Max retries exceeded: {last_exception}") from last_exception

        logger.error(
            "Max retries exceeded, last response",
            method=method,
            url=url,
            max_retries=self.max_retries,
            status_code=last_response.status_code
        )
        raise RetryableHTTPError(
            f"Max retries exceeded: HTTP {last_response.status_code}",
            status_code=last_response.status_code
        )

    def request_json(
        self,
        method: str,
        url: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Any]:
        """
        Make a request and return the decoded JSON body.

        Args:
            method: HTTP method
            url: Request URL (relative to base_url when one is configured)
            json: Optional JSON body
            params: Optional query parameters
            headers: Optional request headers

        Returns:
            JSON response as dictionary ({} for an empty body)

        Raises:
            ClienteAPIAuthError: On 401/403
            ClienteAPIError: For other non-retryable HTTP errors
            RetryableHTTPError: When max retries are exceeded
            ValueError: When response is not valid JSON
        """
        response = self._make_request(method, url, json=json, params=params, headers=headers)

        if response.status_code >= 400:
            message = extract_error_message(response) or f"HTTP {response.status_code}"
            if response.status_code in AUTH_STATUS_CODES:
                raise ClienteAPIAuthError(message, status_code=response.status_code)
            raise ClienteAPIError(message, status_code=response.status_code)

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as exc:
            logger.error(
                "Failed to parse JSON response",
                url=url,
                status_code=response.status_code,
                response_text=response.text[:500]
            )
            raise ValueError(f"Invalid JSON response: {exc}") from exc

    def get_json(self, url: str, **kwargs) -> Dict[str, Any]:
        """GET and decode JSON."""
        return self.request_json("GET", url, **kwargs)

    def post_json(self, url: str, json: Dict[str, Any], **kwargs) -> Dict[str, Any]:
        """POST a JSON body and decode the JSON reply."""
        return self.request_json("POST", url, json=json, **kwargs)

    def put_json(self, url: str, json: Dict[str, Any], **kwargs) -> Dict[str, Any]:
        """PUT a JSON body and decode the JSON reply."""
        return self.request_json("PUT", url, json=json, **kwargs)

    def delete_json(self, url: str, **kwargs) -> Dict[str, Any]:
        """DELETE and decode the JSON reply."""
        return self.request_json("DELETE", url, **kwargs)


def create_client(config=None) -> HTTPClient:
    """
    Build an HTTPClient bound to the customer API from settings.

    Args:
        config: Settings instance (defaults to the cached application settings)
    """
    if config is None:
        config = settings()

    return HTTPClient(
        max_retries=config.api_max_retries,
        timeout=config.api_timeout,
        base_url=config.api_base_url,
        headers=config.get_api_headers(),
    )
