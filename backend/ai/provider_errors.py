"""Provider error taxonomy for text-completion calls."""
import logging
from enum import Enum
from typing import Any, Optional

import httpx


logger = logging.getLogger(__name__)


class ProviderErrorCode(str, Enum):
    """Categories surfaced to callers of a completion provider."""
    INVALID_API_KEY = "invalid_api_key"
    RATE_LIMITED = "rate_limited"
    INSUFFICIENT_QUOTA = "insufficient_quota"
    NETWORK_ERROR = "network_error"
    PROVIDER_ERROR = "provider_error"


class ProviderError(Exception):
    """A categorized failure from a completion provider."""

    def __init__(
        self,
        code: ProviderErrorCode,
        message: str,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.original_error = original_error

    def __repr__(self) -> str:
        return f"ProviderError(code={self.code.value!r}, message={self.message!r})"


def provider_error_from_status(status: int, body: Any = None) -> ProviderError:
    """
    Map an HTTP status (and optional decoded error body) to a ProviderError.

    Args:
        status: HTTP status code from the provider
        body: Decoded JSON body; `error.message` is used when present

    Returns:
        ProviderError with the matching code
    """
    if status == 401:
        return ProviderError(ProviderErrorCode.INVALID_API_KEY, "Invalid API key")
    if status == 429:
        return ProviderError(ProviderErrorCode.RATE_LIMITED, "Rate limit exceeded")
    if status in (402, 403):
        return ProviderError(ProviderErrorCode.INSUFFICIENT_QUOTA, "Insufficient quota or access denied")

    message = None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        message = body["error"].get("message")
    return ProviderError(ProviderErrorCode.PROVIDER_ERROR, message or f"HTTP {status}")


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def categorize_exception(exc: BaseException) -> ProviderError:
    """
    Categorize any exception raised while calling a provider.

    ProviderError passes through unchanged. httpx timeouts and transport
    failures are network errors, and HTTPStatusError goes through the status
    mapping. Anything else is a generic provider error.
    """
    if isinstance(exc, ProviderError):
        return exc

    if isinstance(exc, (httpx.TimeoutException, httpx.TransportError)):
        return ProviderError(ProviderErrorCode.NETWORK_ERROR, "Network request failed", exc)

    if isinstance(exc, httpx.HTTPStatusError):
        error = provider_error_from_status(exc.response.status_code, _response_body(exc.response))
        error.original_error = exc
        return error

    logger.error(f"Unexpected provider failure: {type(exc).__name__}: {exc}")
    return ProviderError(ProviderErrorCode.PROVIDER_ERROR, f"Provider error: {exc}", exc)
