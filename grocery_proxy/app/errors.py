"""Error taxonomy shared by the pricing engine and the HTTP layer."""
from typing import Any, Optional


class PriceProxyError(Exception):
    """Base error. ``public_message`` is what callers see in the JSON envelope."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def public_message(self) -> str:
        return self.message


class ValidationError(PriceProxyError):
    """A required query parameter is missing or empty."""

    status_code = 400


class UnsupportedProviderError(PriceProxyError):
    # Caller-correctable, so reported as 400 rather than 500.
    status_code = 400

    def __init__(self, store: Any):
        super().__init__(f"store must be one of coles, woolworths (got {store!r})")
        self.store = store


class ConfigurationError(PriceProxyError):
    """Credential missing; raised before any network attempt."""

    status_code = 500


class UpstreamError(PriceProxyError):
    """A provider call timed out, failed to connect, or returned a bad response."""

    status_code = 500

    def __init__(
        self,
        store: str,
        message: str,
        status: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.store = store
        self.status = status
        self.body = body

    @property
    def public_message(self) -> str:
        return "Upstream provider request failed"
