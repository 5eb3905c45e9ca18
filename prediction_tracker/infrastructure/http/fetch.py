from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Mapping, TypeVar

import requests

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_MS = 12_000
MAX_RETRY_DELAY_MS = 3_000

_RETRYABLE_HINTS = ("network", "timeout", "abort")


class FetchError(Exception):
    """Base class for transport-level failures raised by `fetch_json`."""


class HttpError(FetchError):
    def __init__(self, status: int, url: str | None = None):
        super().__init__(f"HTTP {status}")
        self.status = status
        self.url = url


class FetchTimeoutError(FetchError):
    pass


class NetworkError(FetchError):
    pass


class InvalidPayloadError(FetchError):
    def __init__(self, url: str | None = None):
        super().__init__("Invalid JSON payload")
        self.url = url


async def fetch_json(
    url: str,
    *,
    headers: Mapping[str, str] | None = None,
    params: Mapping[str, Any] | None = None,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    session: Any | None = None,
) -> Any:
    """GET `url` and decode its JSON body.

    Each call carries its own deadline: the request timeout is handed to
    `requests` and the thread running it is abandoned once `timeout_ms`
    elapses, so a retry never waits on a previous attempt.
    """
    timeout_s = max(timeout_ms, 1) / 1000
    http = session or requests

    def _get() -> requests.Response:
        return http.get(
            url,
            headers=dict(headers or {}),
            params=dict(params or {}),
            timeout=timeout_s,
        )

    try:
        response = await asyncio.wait_for(asyncio.to_thread(_get), timeout=timeout_s)
    except (asyncio.TimeoutError, requests.Timeout) as error:
        raise FetchTimeoutError(f"Request timeout after {timeout_ms}ms") from error
    except requests.RequestException as error:
        raise NetworkError(f"Network error: {error}") from error

    if not 200 <= response.status_code < 300:
        raise HttpError(response.status_code, url)

    try:
        return response.json()
    except ValueError as error:
        raise InvalidPayloadError(url) from error


def is_retryable(error: BaseException) -> bool:
    status = getattr(error, "status", None)
    if isinstance(status, int) and (status == 429 or status >= 500):
        return True

    message = str(error).lower()
    return any(hint in message for hint in _RETRYABLE_HINTS)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    max_retries: int = 1,
    initial_delay_ms: int = 700,
) -> T:
    """Run `operation`, retrying retryable failures with capped exponential backoff.

    `max_retries` is a ceiling: at most `max_retries + 1` attempts are made and
    the last failure propagates. Non-retryable failures propagate at once.
    """
    delay_ms = initial_delay_ms
    retries_left = max(0, int(max_retries))

    while True:
        try:
            return await operation()
        except Exception as error:
            if retries_left <= 0 or not is_retryable(error):
                raise

            logger.warning("Retrying after failure (%s), next attempt in %dms", error, delay_ms)
            await asyncio.sleep(delay_ms / 1000)
            retries_left -= 1
            delay_ms = min(delay_ms * 2, MAX_RETRY_DELAY_MS)
