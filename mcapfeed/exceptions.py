"""Errors raised while talking to upstream market data providers."""
from typing import Optional


class ProviderError(Exception):
    """Base class for every failure inside a provider adapter."""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider


class TransportError(ProviderError):
    """Network unreachable, connection reset or timeout."""


class UpstreamStatusError(ProviderError):
    """Provider answered with a non-2xx status."""

    def __init__(self, message: str, status: int, provider: Optional[str] = None):
        super().__init__(message, provider)
        self.status = status

    @property
    def retryable(self) -> bool:
        return self.status == 429 or self.status >= 500


class EmptyPayloadError(ProviderError):
    """Provider answered but had nothing for us (no pools, pairs or candles)."""


class MalformedPayloadError(ProviderError):
    """Response body was not JSON or did not have the expected shape."""
