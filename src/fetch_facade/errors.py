"""
Error taxonomy for fetch_facade.

Every failure path surfaces as a single ``HttpError`` type. Callers branch on
the flags (``is_network_error``, ``is_timeout_error``, ``is_cancel_error``)
or on ``status`` instead of on exception subclasses.
"""
from typing import Any, Optional

import httpx

from .types import HttpResponse, RequestConfig


class ErrorCode:
    """Well-known ``HttpError.code`` values."""

    NETWORK = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    CANCELED = "CANCELED"
    UNKNOWN = "UNKNOWN_ERROR"

    @staticmethod
    def for_status(status: int) -> str:
        return f"HTTP_{status}"


DEFAULT_CANCEL_REASON = "Request cancelled"


class HttpError(Exception):
    """A failed request."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        config: Optional[RequestConfig] = None,
        response: Optional[HttpResponse[Any]] = None,
        is_network_error: bool = False,
        is_timeout_error: bool = False,
        is_cancel_error: bool = False,
        reason: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        flags = [is_network_error, is_timeout_error, is_cancel_error]
        if sum(1 for flag in flags if flag) > 1:
            raise ValueError("HttpError can carry at most one of network/timeout/cancel flags")
        if response is not None and is_network_error:
            raise ValueError("HttpError with a response cannot be a network error")

        self.message = message
        self.code = code
        self.config = config
        self.response = response
        self.is_network_error = is_network_error
        self.is_timeout_error = is_timeout_error
        self.is_cancel_error = is_cancel_error
        # Why the request was cancelled; None for other failures
        self.reason = reason if is_cancel_error else None

    @property
    def status(self) -> Optional[int]:
        """Response status, if a response was received."""
        return self.response.status if self.response is not None else None

    def __repr__(self) -> str:
        return (
            f"HttpError(message={self.message!r}, code={self.code!r}, "
            f"status={self.status!r}, network={self.is_network_error}, "
            f"timeout={self.is_timeout_error}, cancel={self.is_cancel_error})"
        )


def create_network_error(
    config: Optional[RequestConfig] = None,
    cause: Optional[BaseException] = None,
) -> HttpError:
    message = f"Network Error: {cause}" if cause else "Network Error: Unable to connect to the server"
    error = HttpError(message, code=ErrorCode.NETWORK, config=config, is_network_error=True)
    error.__cause__ = cause
    return error


def create_timeout_error(
    config: Optional[RequestConfig] = None,
    timeout: Optional[float] = None,
    cause: Optional[BaseException] = None,
) -> HttpError:
    if timeout is not None:
        message = f"Timeout Error: Request timed out after {timeout}s"
    else:
        message = "Timeout Error: Request timed out"
    error = HttpError(message, code=ErrorCode.TIMEOUT, config=config, is_timeout_error=True)
    error.__cause__ = cause
    return error


def create_cancel_error(
    reason: Optional[str] = None,
    config: Optional[RequestConfig] = None,
) -> HttpError:
    reason = reason or DEFAULT_CANCEL_REASON
    return HttpError(
        reason,
        code=ErrorCode.CANCELED,
        config=config,
        is_cancel_error=True,
        reason=reason,
    )


def create_status_error(response: HttpResponse[Any]) -> HttpError:
    """Error for a response received with a non-success status."""
    message = f"Request failed with status {response.status}"
    if response.status_text:
        message = f"{message} ({response.status_text})"
    return HttpError(
        message,
        code=ErrorCode.for_status(response.status),
        config=response.config,
        response=response,
    )


def normalize_error(error: BaseException, config: Optional[RequestConfig] = None) -> HttpError:
    """Coerce any failure into an ``HttpError``, preserving ``config``.

    ``HttpError`` instances are returned as-is (their config is filled in when
    missing); transport exceptions are mapped onto the taxonomy flags and
    everything else becomes ``UNKNOWN_ERROR`` with the cause chained.
    """
    if isinstance(error, HttpError):
        if error.config is None:
            error.config = config
        return error

    if isinstance(error, httpx.TimeoutException) or isinstance(error, TimeoutError):
        return create_timeout_error(config, config.timeout if config else None, cause=error)

    if isinstance(error, (httpx.TransportError, ConnectionError, OSError)):
        return create_network_error(config, cause=error)

    wrapped = HttpError(str(error) or type(error).__name__, code=ErrorCode.UNKNOWN, config=config)
    wrapped.__cause__ = error
    return wrapped
