"""Retrying HTTP Client - GET with per-attempt timeout and jittered retries.

Responsibilities:
- One GET per attempt, fresh connection each time
- Timeout race against the in-flight call
- Fixed-base jittered delay between attempts
- Turning every expected failure into None instead of an exception
- Response-time metrics and per-failure alerts
"""

import asyncio
import json
import random
import time
from typing import Optional

import requests

try:
    from .skill_config import RETRY_BASE_DELAY_MS, RETRY_JITTER_MS, RetryPolicy
except ImportError:
    from skill_config import RETRY_BASE_DELAY_MS, RETRY_JITTER_MS, RetryPolicy  # noqa: E402


class AttemptFailed(Exception):
    """A single attempt failed; the client decides whether to retry."""


class RetryingHttpClient:
    """GET client that retries failed attempts and never raises for them."""

    def __init__(
        self,
        worker,
        metrics,
        sleep=None,
        rng=None,
        session_factory=requests.Session,
        base_delay_ms: int = RETRY_BASE_DELAY_MS,
        jitter_ms: int = RETRY_JITTER_MS,
    ):
        """Initialize RetryingHttpClient.

        Args:
            worker: AgentWorker for logging
            metrics: Metrics sink (emit_metric / publish_alert)
            sleep: Async sleep used between attempts (worker.session_tasks.sleep in OpenHome)
            rng: Random source with uniform(a, b), used for jitter
            session_factory: Creates one requests.Session per attempt
            base_delay_ms: Fixed part of the retry delay
            jitter_ms: Upper bound of the random part of the retry delay
        """
        self.worker = worker
        self.metrics = metrics
        self.sleep = sleep or asyncio.sleep
        self.rng = rng or random.Random()
        self.session_factory = session_factory
        self.base_delay_ms = base_delay_ms
        self.jitter_ms = jitter_ms

    async def get(
        self,
        policy: RetryPolicy,
        path: str,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
    ):
        """GET https://<policy.hostname><path>.

        Args:
            policy: Hostname, per-attempt timeout and number of attempts
            path: Request path
            params: Query-string parameters
            headers: Extra request headers

        Returns:
            Parsed JSON body, or None once all attempts failed
        """
        url = f"https://{policy.hostname}{path}"
        request_headers = dict(headers or {})
        request_headers["Accept"] = "application/json"
        attempts_left = max(policy.max_retries, 1)

        self.worker.editor_logging_handler.info(
            f"[HowFar] ==> [{url}], timeout is {policy.timeout_millis} ms, "
            f"{attempts_left} attempts"
        )

        while True:
            started = time.monotonic()
            try:
                result = await self._attempt(url, params or {}, request_headers, policy)
            except AttemptFailed as e:
                self._report_failure(policy.hostname, str(e))
                attempts_left -= 1
                if attempts_left < 1:
                    self.worker.editor_logging_handler.warning(
                        f"[HowFar] {policy.hostname} request failed, no more retries"
                    )
                    self._record_response_time(policy.hostname, started)
                    return None
                delay_ms = self.base_delay_ms + self.rng.uniform(0, self.jitter_ms)
                self.worker.editor_logging_handler.info(
                    f"[HowFar] {policy.hostname} request failed, "
                    f"retrying in {delay_ms:.0f} ms"
                )
                await self.sleep(delay_ms / 1000)
                continue

            self._record_response_time(policy.hostname, started)
            return result

    async def _attempt(self, url: str, params: dict, headers: dict, policy: RetryPolicy):
        timeout_s = policy.timeout_millis / 1000
        session = self.session_factory()
        try:
            try:
                response = await asyncio.wait_for(
                    asyncio.to_thread(
                        session.get, url, params=params, headers=headers, timeout=timeout_s
                    ),
                    timeout=timeout_s,
                )
            except (asyncio.TimeoutError, requests.exceptions.Timeout):
                raise AttemptFailed(
                    f"{policy.hostname} request timed out after {policy.timeout_millis} ms"
                )
            except requests.exceptions.RequestException as e:
                raise AttemptFailed(f"{policy.hostname} request failed to send: {e}")

            self.worker.editor_logging_handler.info(
                f"[HowFar] {policy.hostname} - Response Code: {response.status_code}"
            )
            if response.status_code != 200:
                raise AttemptFailed(
                    f"{policy.hostname} request - status code is {response.status_code}"
                )
            try:
                return response.json()
            except (json.JSONDecodeError, ValueError) as e:
                raise AttemptFailed(f"{policy.hostname} returned invalid JSON: {e}")
        finally:
            # Releases pooled connections only; a response arriving after the timer is discarded
            session.close()

    def _report_failure(self, hostname: str, description: str):
        error_type = f"HttpsGet-{hostname}"
        self.worker.editor_logging_handler.error(f"[HowFar] [{error_type}] {description}")
        self.metrics.emit_metric("LoggedError", "Count", 1, "ErrorType", error_type)
        self.metrics.publish_alert(error_type, description)

    def _record_response_time(self, hostname: str, started: float):
        elapsed_ms = round((time.monotonic() - started) * 1000, 2)
        self.worker.editor_logging_handler.info(
            f"[HowFar] {hostname} - Response Time: {elapsed_ms} ms"
        )
        self.metrics.emit_metric(
            "HTTP-ResponseTime", "Milliseconds", elapsed_ms, "Hostname", hostname
        )
