"""HTTP endpoint fetcher with timeout and bounded retries."""

import logging
import time
from typing import Awaitable, Callable, Dict, Optional

import httpx

from navtracker.core.config import settings
from navtracker.core.exceptions import (
    ClientClosedFailure,
    FetchError,
    HttpStatusFailure,
    NetworkFailure,
    TimeoutFailure,
)
from navtracker.monitoring.metrics import (
    fetch_attempts_total,
    fetch_failures_total,
    fetch_latency_seconds,
)
from navtracker.services.retry import retry_with_backoff

logger = logging.getLogger(__name__)


def build_auth_headers(
    header: Optional[str] = None, token: Optional[str] = None
) -> Dict[str, str]:
    """Headers attached to every upstream request."""
    header = header or settings.api_auth_header
    token = token if token is not None else settings.api_auth_token
    if not token:
        return {}
    return {header: token}


def extract_error_detail(response: httpx.Response) -> Optional[str]:
    """Read the service's own error explanation from a non-2xx body."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    for key in ("details", "detail"):
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


class EndpointFetcher:
    """Performs GET requests against the upstream data service."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        backoff_multiplier: Optional[float] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ) -> None:
        """
        Initialize the fetcher.

        Args:
            client: Shared HTTP client; created on connect when omitted.
            timeout: Per-attempt timeout in seconds.
            max_attempts: Attempts per fetch.
            retry_delay: Delay between attempts in seconds.
            backoff_multiplier: Delay growth factor per attempt.
            sleep: Awaitable sleep used between attempts.
        """
        self.client = client
        self._owns_client = client is None
        self.timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self.max_attempts = max_attempts if max_attempts is not None else settings.max_attempts
        self.retry_delay = retry_delay if retry_delay is not None else settings.retry_delay_seconds
        self.backoff_multiplier = (
            backoff_multiplier if backoff_multiplier is not None else settings.retry_backoff_multiplier
        )
        self._sleep = sleep
        self._closed = False

    async def connect(self) -> None:
        """Create the HTTP client if none was supplied."""
        self._closed = False
        if self.client is None:
            self.client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=build_auth_headers(),
            )
            self._owns_client = True

    async def disconnect(self) -> None:
        """
        Close the HTTP client if this fetcher created it.

        Pending and later fetches fail with ClientClosedFailure until
        connect() is called again.
        """
        self._closed = True
        if self.client is not None and self._owns_client:
            await self.client.aclose()
            self.client = None

    async def _attempt(self, url: str) -> httpx.Response:
        """Run one GET and classify its failure."""
        client = self.client
        if self._closed or client is None:
            raise ClientClosedFailure("HTTP client closed", url)
        start_time = time.time()
        try:
            response = await client.get(url, timeout=self.timeout)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            fetch_attempts_total.labels(outcome="timeout").inc()
            raise TimeoutFailure(
                f"Request timed out after {self.timeout}s", url) from e
        except httpx.HTTPStatusError as e:
            fetch_attempts_total.labels(outcome="http_status").inc()
            status_code = e.response.status_code
            detail = extract_error_detail(e.response)
            logger.warning(
                f"HTTP {status_code} from {url}: {e.response.text[:200]}")
            raise HttpStatusFailure(
                f"HTTP {status_code} from {url}", url,
                status_code=status_code, detail=detail) from e
        except httpx.RequestError as e:
            fetch_attempts_total.labels(outcome="network").inc()
            raise NetworkFailure(
                f"{type(e).__name__}: {str(e) or 'connection failed'}", url) from e
        except RuntimeError as e:
            # httpx refuses to send on a client closed mid-cycle
            if not self._closed:
                raise
            fetch_attempts_total.labels(outcome="client_closed").inc()
            raise ClientClosedFailure("HTTP client closed", url) from e
        finally:
            fetch_latency_seconds.observe(time.time() - start_time)

        fetch_attempts_total.labels(outcome="ok").inc()
        return response

    async def fetch(
        self,
        url: str,
        max_attempts: Optional[int] = None,
        base_delay: Optional[float] = None,
    ) -> httpx.Response:
        """
        Fetch a URL, retrying failed attempts.

        Args:
            url: Absolute endpoint URL.
            max_attempts: Overrides the configured attempt count.
            base_delay: Overrides the configured retry delay.

        Returns:
            The successful response.

        Raises:
            FetchError: Classified failure of the last attempt.
        """
        if self._closed:
            raise ClientClosedFailure("HTTP client closed", url)
        if self.client is None:
            await self.connect()

        attempts = max_attempts if max_attempts is not None else self.max_attempts

        async def attempt() -> httpx.Response:
            return await self._attempt(url)

        try:
            return await retry_with_backoff(
                attempt,
                max_attempts=attempts,
                delay=base_delay if base_delay is not None else self.retry_delay,
                backoff_multiplier=self.backoff_multiplier,
                exceptions=(FetchError,),
                sleep=self._sleep,
                label=url,
                give_up=lambda e: isinstance(e, ClientClosedFailure),
            )
        except FetchError as e:
            e.attempts = attempts
            fetch_failures_total.labels(kind=e.kind).inc()
            raise
