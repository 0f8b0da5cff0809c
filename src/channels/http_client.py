import time
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Protocol

import requests


@dataclass(frozen=True)
class HttpResponse:
    status_code: int
    body: bytes
    headers: Mapping[str, str]


class HttpError(Exception):
    pass


Transport = Callable[[str, str, Mapping[str, str]], HttpResponse]


class TextClient(Protocol):
    def request_text(
        self, url: str, headers: Optional[Mapping[str, str]] = None
    ) -> str: ...


def requests_transport(timeout_seconds: float = 15.0) -> Transport:
    def _send(method: str, url: str, headers: Mapping[str, str]) -> HttpResponse:
        try:
            response = requests.request(
                method,
                url,
                headers=dict(headers),
                timeout=timeout_seconds,
                allow_redirects=True,
            )
        except requests.RequestException as exc:
            raise HttpError(str(exc)) from exc
        return HttpResponse(
            status_code=response.status_code,
            body=response.content,
            headers=dict(response.headers.items()),
        )

    return _send


class SimpleHttpClient:
    def __init__(
        self,
        transport: Transport,
        rate_limit_per_second: float = 5.0,
        max_retries: int = 2,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], float] = time.monotonic,
    ) -> None:
        self._transport = transport
        self._interval = 1.0 / rate_limit_per_second if rate_limit_per_second > 0 else 0.0
        self._max_retries = max_retries
        self._sleep = sleep
        self._now = now
        self._next_allowed_time = 0.0

    def _wait_for_rate_limit(self) -> None:
        current = self._now()
        if self._next_allowed_time > current:
            self._sleep(self._next_allowed_time - current)

    def _mark_request_time(self) -> None:
        self._next_allowed_time = self._now() + self._interval

    def request_text(self, url: str, headers: Optional[Mapping[str, str]] = None) -> str:
        attempt = 0
        request_headers = dict(headers or {})

        while True:
            self._wait_for_rate_limit()
            try:
                response = self._transport("GET", url, request_headers)
            except Exception as error:
                if attempt >= self._max_retries:
                    raise HttpError(str(error)) from error
                attempt += 1
                self._sleep(float(attempt))
                continue

            self._mark_request_time()

            if 200 <= response.status_code < 300:
                return response.body.decode("utf-8", errors="replace")

            if response.status_code in {429, 500, 502, 503, 504} and attempt < self._max_retries:
                attempt += 1
                self._sleep(float(attempt))
                continue

            raise HttpError(f"GET {url} failed with status {response.status_code}")


def build_http_client(
    timeout_seconds: float = 15.0,
    max_retries: int = 2,
    rate_limit_per_second: float = 5.0,
) -> SimpleHttpClient:
    return SimpleHttpClient(
        transport=requests_transport(timeout_seconds),
        rate_limit_per_second=rate_limit_per_second,
        max_retries=max_retries,
    )
