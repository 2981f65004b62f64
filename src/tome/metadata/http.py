# ABOUTME: HTTP client used by remote metadata lookups (Open Library).
# ABOUTME: Rate limits requests, retries transient failures, and accepts a fake transport in tests.

import logging
import time
from typing import Any, Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)

_USER_AGENT = "tome/0.1.0 (personal book collection manager)"
_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
# Upper bound on a server-requested Retry-After wait, in seconds.
_MAX_RETRY_AFTER = 30.0


class MetadataFetchError(Exception):
    """Raised when a request to a remote metadata service fails.

    ``status_code`` carries the last HTTP status seen, or ``None`` when the
    request never produced a response (DNS failure, timeout, ...).
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for JSON GET requests against metadata APIs."""

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]: ...


class TomeHttpClient:
    """httpx-backed client with a minimum request interval and retry with backoff.

    Open Library asks clients to be polite, so requests are spaced out by
    ``min_request_interval`` seconds and 429/5xx responses are retried with
    exponential backoff.
    """

    def __init__(
        self,
        *,
        min_request_interval: float = 0.1,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "headers": {"User-Agent": _USER_AGENT},
            "timeout": timeout,
            "follow_redirects": True,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)
        self._min_interval = min_request_interval
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._last_request_time: float = 0.0

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        """GET ``url`` and return the decoded JSON body.

        Raises:
            MetadataFetchError: On transport errors, non-retryable statuses,
                undecodable bodies, or when retries are exhausted.
        """
        attempts = 1 + self._max_retries
        last_status: int | None = None
        for attempt in range(attempts):
            self._rate_limit()
            try:
                response = self._client.get(url, params=params)
            except httpx.HTTPError as exc:
                raise MetadataFetchError(f"Request failed: {url}: {exc}") from exc

            last_status = response.status_code
            if response.status_code == 200:
                try:
                    return response.json()
                except ValueError as exc:
                    raise MetadataFetchError(
                        f"Invalid JSON from {url}", status_code=200
                    ) from exc

            if response.status_code not in _RETRYABLE_STATUS_CODES:
                raise MetadataFetchError(
                    f"HTTP {response.status_code} from {url}",
                    status_code=response.status_code,
                )

            if attempt < attempts - 1:
                delay = self._backoff(attempt, response)
                logger.warning(
                    "HTTP %d from %s, retrying in %.1fs (attempt %d/%d)",
                    response.status_code,
                    url,
                    delay,
                    attempt + 1,
                    self._max_retries,
                )
                time.sleep(delay)

        raise MetadataFetchError(
            f"HTTP {last_status} from {url} after {attempts} attempts",
            status_code=last_status,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "TomeHttpClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _backoff(self, attempt: int, response: httpx.Response) -> float:
        """Seconds to wait before retrying: Retry-After when given, else exponential."""
        retry_after = response.headers.get("retry-after", "")
        if retry_after.isdigit():
            return min(float(retry_after), _MAX_RETRY_AFTER)
        return self._retry_delay * (2**attempt)

    def _rate_limit(self) -> None:
        """Sleep if needed to keep at least min_request_interval between requests."""
        if self._min_interval <= 0:
            return
        elapsed = time.monotonic() - self._last_request_time
        if self._last_request_time > 0 and elapsed < self._min_interval:
            time.sleep(self._min_interval - elapsed)
        self._last_request_time = time.monotonic()
