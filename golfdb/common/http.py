"""Shared HTTP session for the OSM services: throttling, timeouts, retries.

Overpass and Nominatim both publish usage policies expressed as a maximum
request rate, so every call names the service it targets and waits on that
service's throttle before going out.
"""

from __future__ import annotations

import random
import threading
import time
from dataclasses import dataclass
from types import TracebackType
from typing import Any

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from golfdb.common.constants import USER_AGENT
from golfdb.common.errors import StageError

RETRYABLE_STATUS_CODES = {408, 425, 429, 500, 502, 503, 504}
DEFAULT_SERVICE_RATES = {"overpass": 1.0, "nominatim": 0.9}


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 20.0
    read: float = 120.0


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 5
    multiplier: float = 1.0
    max_wait: float = 30.0


class HttpRequestError(StageError):
    error_code = "HTTP_ERROR"


class RetryableHttpError(HttpRequestError):
    pass


class Throttle:
    """Spaces calls at least ``1 / rate_per_sec`` seconds apart."""

    def __init__(self, rate_per_sec: float) -> None:
        if rate_per_sec <= 0:
            raise ValueError("rate_per_sec must be positive")
        self.interval = 1.0 / rate_per_sec
        self.next_slot = 0.0
        self.lock = threading.Lock()

    def wait(self) -> float:
        with self.lock:
            now = time.monotonic()
            delay = max(0.0, self.next_slot - now)
            self.next_slot = max(now, self.next_slot) + self.interval
        if delay:
            time.sleep(delay)
        return delay


class HttpClient:
    def __init__(
        self,
        *,
        timeout: TimeoutConfig | None = None,
        retry: RetryConfig | None = None,
        service_rates: dict[str, float] | None = None,
    ) -> None:
        self.timeout = timeout or TimeoutConfig()
        self.retry = retry or RetryConfig()
        self.session = requests.Session()
        rates = {**DEFAULT_SERVICE_RATES, **(service_rates or {})}
        self.throttles = {service: Throttle(rate) for service, rate in rates.items()}

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _headers(self, headers: dict[str, str] | None) -> dict[str, str]:
        out = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        if headers:
            out.update(headers)
        return out

    def _check_status(self, response: requests.Response, url: str) -> None:
        status = response.status_code
        if status in RETRYABLE_STATUS_CODES:
            raise RetryableHttpError(f"Retryable HTTP status {status} from {url}")
        if status >= 400:
            raise HttpRequestError(f"HTTP status {status} from {url}")

    def _send(
        self,
        method: str,
        url: str,
        *,
        service: str,
        params: dict[str, Any] | None,
        data: dict[str, Any] | None,
        headers: dict[str, str] | None,
        timeout: TimeoutConfig,
    ) -> Any:
        throttle = self.throttles.get(service)
        if throttle is not None:
            throttle.wait()

        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                data=data,
                headers=self._headers(headers),
                timeout=(timeout.connect, timeout.read),
            )
        except requests.RequestException as exc:
            raise RetryableHttpError(f"Transport failure for {url}: {exc}") from exc
        self._check_status(response, url)

        try:
            return response.json()
        except ValueError as exc:
            raise HttpRequestError(f"Invalid JSON payload from {url}") from exc

    def request_json(
        self,
        method: str,
        url: str,
        *,
        service: str,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
        cooldown: tuple[float, float] | None = None,
    ) -> Any:
        """Send one request, retrying transport errors and retryable statuses.

        ``cooldown`` adds a random pause after a successful heavy query so
        shared mirrors are not hammered back to back.
        """

        @retry(
            stop=stop_after_attempt(self.retry.max_attempts),
            wait=wait_exponential_jitter(
                initial=self.retry.multiplier,
                max=self.retry.max_wait,
                jitter=1.0,
            ),
            retry=retry_if_exception_type(RetryableHttpError),
            reraise=True,
        )
        def _attempt() -> Any:
            return self._send(
                method,
                url,
                service=service,
                params=params,
                data=data,
                headers=headers,
                timeout=timeout or self.timeout,
            )

        payload = _attempt()
        if cooldown is not None:
            time.sleep(random.uniform(*cooldown))
        return payload

    def get_json(
        self,
        url: str,
        *,
        service: str,
        params: dict[str, Any] | None = None,
        timeout: TimeoutConfig | None = None,
    ) -> Any:
        return self.request_json("GET", url, service=service, params=params, timeout=timeout)

    def post_form_json(
        self,
        url: str,
        *,
        service: str,
        data: dict[str, Any],
        timeout: TimeoutConfig | None = None,
        cooldown: tuple[float, float] | None = None,
    ) -> Any:
        return self.request_json(
            "POST",
            url,
            service=service,
            data=data,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=timeout,
            cooldown=cooldown,
        )
