from .fetch import (
    FetchError,
    FetchTimeoutError,
    HttpError,
    InvalidPayloadError,
    NetworkError,
    fetch_json,
    is_retryable,
    with_retry,
)

__all__ = [
    "FetchError",
    "HttpError",
    "FetchTimeoutError",
    "NetworkError",
    "InvalidPayloadError",
    "fetch_json",
    "is_retryable",
    "with_retry",
]
