"""Collects one NAV / price sample per cycle."""

import asyncio
import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Tuple

from navtracker.core.config import settings
from navtracker.core.exceptions import CollectionError, FetchError, InvalidPayloadFailure
from navtracker.models.sample import Sample
from navtracker.services.fetcher import EndpointFetcher

logger = logging.getLogger(__name__)


def normalize_base_url(base_url: str) -> str:
    """Strip trailing slashes so path composition never doubles them."""
    return base_url.strip().rstrip("/")


def compose_url(base_url: str, path: str) -> str:
    """Join a base URL and an absolute endpoint path."""
    return f"{normalize_base_url(base_url)}/{path.lstrip('/')}"


def extract_number(
    payload: Any, field: str, url: str, reject_falsy: bool = False
) -> float:
    """
    Pull a required numeric field out of a decoded JSON body.

    Args:
        payload: Decoded JSON body.
        field: Name of the required field.
        url: Endpoint the body came from.
        reject_falsy: Also reject ``0``, matching the legacy truthiness check.

    Returns:
        The field value as a float.

    Raises:
        InvalidPayloadFailure: If the field is missing, non-numeric or non-finite.
    """
    if not isinstance(payload, dict):
        raise InvalidPayloadFailure(
            f"Expected a JSON object, got {type(payload).__name__}", url, field)
    if field not in payload or payload[field] is None:
        raise InvalidPayloadFailure(f"Missing field '{field}'", url, field)

    value = payload[field]
    # bool is an int subclass but never a valid reading
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidPayloadFailure(
            f"Field '{field}' is not a number: {value!r}", url, field)
    try:
        number = float(value)
    except OverflowError as e:
        raise InvalidPayloadFailure(
            f"Field '{field}' is out of range", url, field) from e
    if not math.isfinite(number):
        raise InvalidPayloadFailure(
            f"Field '{field}' is not finite: {value!r}", url, field)
    if reject_falsy and not number:
        raise InvalidPayloadFailure(f"Field '{field}' is zero", url, field)
    return number


class SampleCollector:
    """Fetches both readings for a cycle and builds a Sample."""

    def __init__(
        self,
        fetcher: EndpointFetcher,
        concurrent: Optional[bool] = None,
        reject_falsy: Optional[bool] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Initialize the collector.

        Args:
            fetcher: Endpoint fetcher used for both legs.
            concurrent: Fetch both legs at once instead of one after the other.
            reject_falsy: Treat a zero reading as an invalid payload.
            clock: Source of sample timestamps.
        """
        self.fetcher = fetcher
        self.concurrent = settings.concurrent_fetch if concurrent is None else concurrent
        self.reject_falsy = settings.reject_falsy_values if reject_falsy is None else reject_falsy
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.nav_field = settings.nav_field
        self.price_field = settings.price_field
        self.nav_path = settings.nav_path
        self.price_path = settings.price_path

    def endpoint_urls(self, base_url: str) -> Tuple[str, str]:
        """Return the NAV and price endpoint URLs for a base URL."""
        return compose_url(base_url, self.nav_path), compose_url(base_url, self.price_path)

    async def _read(self, url: str, field: str) -> float:
        """Fetch one endpoint and validate its numeric field."""
        logger.debug(f"Fetching data from: {url}")
        response = await self.fetcher.fetch(url)
        try:
            payload = response.json()
        except ValueError as e:
            raise InvalidPayloadFailure(
                f"Malformed JSON: {str(e)}", url, field,
                status_code=response.status_code) from e
        return extract_number(payload, field, url, reject_falsy=self.reject_falsy)

    async def _run_leg(self, url: str, field: str) -> Tuple[Optional[float], Optional[FetchError]]:
        try:
            return await self._read(url, field), None
        except FetchError as e:
            return None, e

    async def collect(self, base_url: Optional[str] = None) -> Sample:
        """
        Run one sampling cycle against the upstream service.

        Args:
            base_url: Service base URL; trailing slashes are ignored.

        Returns:
            A new Sample stamped with the collection time.

        Raises:
            CollectionError: If either leg failed.
        """
        nav_url, price_url = self.endpoint_urls(base_url or settings.api_base_url)

        if self.concurrent:
            results = await asyncio.gather(
                self._run_leg(nav_url, self.nav_field),
                self._run_leg(price_url, self.price_field),
                return_exceptions=True,
            )
            # Both legs have settled; surface anything unclassified.
            for result in results:
                if isinstance(result, BaseException):
                    raise result
            (nav, nav_error), (price, price_error) = results
        else:
            nav, nav_error = await self._run_leg(nav_url, self.nav_field)
            price, price_error = await self._run_leg(price_url, self.price_field)

        if nav_error is not None or price_error is not None:
            raise CollectionError(nav_error=nav_error, price_error=price_error)

        sample = Sample(timestamp=self.clock(), nav=nav, price=price)
        logger.debug(
            f"Collected sample nav={sample.nav} price={sample.price} "
            f"difference={sample.difference}")
        return sample
