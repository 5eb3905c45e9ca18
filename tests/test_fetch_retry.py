from __future__ import annotations

import time
import unittest
from unittest.mock import patch

import requests

from prediction_tracker.infrastructure.http import (
    FetchTimeoutError,
    HttpError,
    InvalidPayloadError,
    NetworkError,
    fetch_json,
    is_retryable,
    with_retry,
)


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, invalid_json: bool = False):
        self.status_code = status_code
        self._payload = payload
        self._invalid_json = invalid_json

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls: list[dict] = []

    def get(self, url, headers=None, params=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "params": params, "timeout": timeout})
        outcome = self.responses.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class SlowSession:
    def get(self, url, headers=None, params=None, timeout=None):
        time.sleep(0.3)
        return FakeResponse(200, {"late": True})


class TestFetchJson(unittest.IsolatedAsyncioTestCase):
    async def test_returns_decoded_payload_and_forwards_request_options(self):
        session = FakeSession([FakeResponse(200, {"ok": True})])

        payload = await fetch_json(
            "https://example.test/data",
            headers={"x-api-key": "k"},
            params={"id": 1},
            timeout_ms=2500,
            session=session,
        )

        self.assertEqual(payload, {"ok": True})
        self.assertEqual(session.calls[0]["headers"], {"x-api-key": "k"})
        self.assertEqual(session.calls[0]["params"], {"id": 1})
        self.assertEqual(session.calls[0]["timeout"], 2.5)

    async def test_non_success_status_raises_http_error(self):
        session = FakeSession([FakeResponse(503)])

        with self.assertRaises(HttpError) as ctx:
            await fetch_json("https://example.test/data", session=session)

        self.assertEqual(ctx.exception.status, 503)
        self.assertEqual(str(ctx.exception), "HTTP 503")

    async def test_requests_timeout_maps_to_fetch_timeout(self):
        session = FakeSession([requests.Timeout("read timed out")])

        with self.assertRaises(FetchTimeoutError) as ctx:
            await fetch_json("https://example.test/data", timeout_ms=100, session=session)

        self.assertIn("timeout", str(ctx.exception).lower())

    async def test_deadline_is_enforced_even_if_transport_hangs(self):
        with self.assertRaises(FetchTimeoutError):
            await fetch_json("https://example.test/slow", timeout_ms=50, session=SlowSession())

    async def test_connection_error_maps_to_network_error(self):
        session = FakeSession([requests.ConnectionError("connection refused")])

        with self.assertRaises(NetworkError) as ctx:
            await fetch_json("https://example.test/data", session=session)

        self.assertTrue(str(ctx.exception).startswith("Network error"))

    async def test_invalid_json_is_not_retryable(self):
        session = FakeSession([FakeResponse(200, invalid_json=True)])

        with self.assertRaises(InvalidPayloadError) as ctx:
            await fetch_json("https://api.allora.network/v2/data", session=session)

        self.assertEqual(str(ctx.exception), "Invalid JSON payload")
        self.assertEqual(ctx.exception.url, "https://api.allora.network/v2/data")
        self.assertFalse(is_retryable(ctx.exception))


class TestRetryClassification(unittest.TestCase):
    def test_server_errors_and_rate_limits_are_retryable(self):
        self.assertTrue(is_retryable(HttpError(500)))
        self.assertTrue(is_retryable(HttpError(503)))
        self.assertTrue(is_retryable(HttpError(429)))

    def test_client_errors_are_not_retryable(self):
        self.assertFalse(is_retryable(HttpError(400)))
        self.assertFalse(is_retryable(HttpError(404)))

    def test_message_hints_are_retryable(self):
        self.assertTrue(is_retryable(NetworkError("Network error: reset")))
        self.assertTrue(is_retryable(FetchTimeoutError("Request timeout after 10ms")))
        self.assertTrue(is_retryable(RuntimeError("The operation was aborted")))
        self.assertFalse(is_retryable(RuntimeError("boom")))


class TestWithRetry(unittest.IsolatedAsyncioTestCase):
    def _operation(self, outcomes):
        calls = []

        async def operation():
            calls.append(1)
            outcome = outcomes.pop(0)
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome

        return operation, calls

    async def test_fails_after_single_retry_when_server_keeps_failing(self):
        operation, calls = self._operation([HttpError(503), HttpError(503), {"never": "reached"}])

        with self.assertRaises(HttpError):
            await with_retry(operation, max_retries=1, initial_delay_ms=1)

        self.assertEqual(len(calls), 2)

    async def test_recovers_on_retry(self):
        operation, calls = self._operation([HttpError(503), {"value": 1}])

        result = await with_retry(operation, max_retries=1, initial_delay_ms=1)

        self.assertEqual(result, {"value": 1})
        self.assertEqual(len(calls), 2)

    async def test_not_found_is_attempted_once(self):
        operation, calls = self._operation([HttpError(404), {"value": 1}])

        with self.assertRaises(HttpError) as ctx:
            await with_retry(operation, max_retries=3, initial_delay_ms=1)

        self.assertEqual(ctx.exception.status, 404)
        self.assertEqual(len(calls), 1)

    async def test_zero_retries_propagates_first_failure(self):
        operation, calls = self._operation([HttpError(500)])

        with self.assertRaises(HttpError):
            await with_retry(operation, max_retries=0, initial_delay_ms=1)

        self.assertEqual(len(calls), 1)

    async def test_backoff_doubles_and_is_capped(self):
        operation, calls = self._operation([HttpError(502)] * 4 + ["ok"])
        delays: list[float] = []

        async def fake_sleep(seconds):
            delays.append(seconds)

        with patch("prediction_tracker.infrastructure.http.fetch.asyncio.sleep", new=fake_sleep):
            result = await with_retry(operation, max_retries=4, initial_delay_ms=800)

        self.assertEqual(result, "ok")
        self.assertEqual(len(calls), 5)
        self.assertEqual(delays, [0.8, 1.6, 3.0, 3.0])


if __name__ == "__main__":
    unittest.main()
