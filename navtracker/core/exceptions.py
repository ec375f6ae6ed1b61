"""Custom exceptions for the tracker."""

from typing import Optional


class NavTrackerError(Exception):
    """Base class for tracker failures."""

    def user_message(self) -> str:
        """Human-readable description shown instead of a stack trace."""
        return str(self) or "Failed to fetch data"


class FetchError(NavTrackerError):
    """Raised when an endpoint could not be fetched after all attempts."""

    kind = "fetch"

    def __init__(
        self,
        message: str,
        url: str,
        status_code: Optional[int] = None,
        attempts: int = 1,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.attempts = attempts

    def describe(self) -> dict:
        """Structured form used in logs and API responses."""
        return {
            "kind": self.kind,
            "url": self.url,
            "status_code": self.status_code,
            "attempts": self.attempts,
            "message": str(self),
        }


class NetworkFailure(FetchError):
    """Raised on connection-level failures."""

    kind = "network"

    def user_message(self) -> str:
        return "Network error: unable to reach the data service"


class ClientClosedFailure(NetworkFailure):
    """Raised when the HTTP client was closed while a fetch was pending."""

    kind = "client_closed"

    def user_message(self) -> str:
        return "The tracker is shutting down"


class TimeoutFailure(FetchError):
    """Raised when a request exceeds its timeout."""

    kind = "timeout"

    def user_message(self) -> str:
        return "The data service timed out, please try again"


class HttpStatusFailure(FetchError):
    """Raised when the endpoint answers with a non-2xx status."""

    kind = "http_status"

    def __init__(
        self,
        message: str,
        url: str,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ) -> None:
        super().__init__(message, url, status_code=status_code)
        self.detail = detail

    def describe(self) -> dict:
        return {**super().describe(), "detail": self.detail}

    def user_message(self) -> str:
        # The service's own explanation wins when it sent one.
        if self.detail:
            return self.detail
        code = self.status_code
        if code == 401:
            return "Unauthorized: the data service rejected our credentials (401)"
        if code == 403:
            return "Forbidden: access to the data service was denied (403)"
        if code == 404:
            return f"Endpoint not found (404): {self.url}"
        if code is not None and code >= 500:
            return f"The data service is unavailable ({code})"
        return f"Unexpected response from the data service ({code})"


class InvalidPayloadFailure(FetchError):
    """Raised when a response body lacks a valid numeric field."""

    kind = "invalid_payload"

    def __init__(self, message: str, url: str, field: str, status_code: Optional[int] = None) -> None:
        super().__init__(message, url, status_code=status_code)
        self.field = field

    def user_message(self) -> str:
        return f"Invalid {self.field} data structure"


class CollectionError(NavTrackerError):
    """Raised when a sampling cycle could not produce a sample.

    Both legs are recorded; a leg that succeeded is ``None``.
    """

    def __init__(
        self,
        nav_error: Optional[FetchError] = None,
        price_error: Optional[FetchError] = None,
    ) -> None:
        self.nav_error = nav_error
        self.price_error = price_error
        super().__init__(self._summary())

    @property
    def failed_legs(self) -> list[str]:
        legs = []
        if self.nav_error is not None:
            legs.append("nav")
        if self.price_error is not None:
            legs.append("price")
        return legs

    def _summary(self) -> str:
        parts = []
        if self.nav_error is not None:
            parts.append(f"nav: {self.nav_error.kind}: {self.nav_error}")
        if self.price_error is not None:
            parts.append(f"price: {self.price_error.kind}: {self.price_error}")
        return "; ".join(parts) or "collection failed"

    def user_message(self) -> str:
        # Report the first failing leg; both are kept for diagnosis.
        first = self.nav_error or self.price_error
        if first is None:
            return "Failed to fetch data"
        return first.user_message()

    def describe(self) -> dict:
        return {
            "failed_legs": self.failed_legs,
            "nav": self.nav_error.describe() if self.nav_error else None,
            "price": self.price_error.describe() if self.price_error else None,
        }


class SchedulerError(NavTrackerError):
    """Raised on invalid scheduler lifecycle use."""

    pass
