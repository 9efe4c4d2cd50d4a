"""
Error taxonomy and remote API error mapping for docksync.
"""

import asyncio
import functools
import time
from typing import Any, Callable, Optional, Tuple, Type

import httpx
import requests
from github import GithubException

from .logger import logger


####
##      EXCEPTION CLASSES
#####
class SyncError(Exception):
    """Base exception for every failure docksync surfaces to callers."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.original_error is not None:
            return f"{self.message} (Original: {self.original_error})"
        return self.message


class InvalidInputError(SyncError):
    """Raised for a malformed URL, a missing name or an empty file set."""


class AuthenticationError(SyncError):
    """Raised when the remote host rejects the credential."""


class RemoteNotFoundError(SyncError):
    """Raised when a repository or path does not exist on the remote host."""


class RemoteConflictError(SyncError):
    """Raised when the remote host reports a duplicate name or path."""


class RateLimitError(SyncError):
    """Raised when the remote host's rate limit is exceeded."""


class TransportError(SyncError):
    """Raised when a request never produced a usable response."""


class StateTransitionError(SyncError):
    """Raised on an illegal publish state transition."""


class RunInProgressError(SyncError):
    """Raised when a run is started while another is in flight."""


####
##      REMOTE ERROR MAPPING
#####
def _remote_message(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        message = payload.get("message")
        errors = payload.get("errors")
        if message and isinstance(errors, list) and errors:
            first = errors[0]
            detail = first.get("message") if isinstance(first, dict) else str(first)
            if detail:
                return f"{message}: {detail}"
        return message
    if isinstance(payload, str) and payload:
        return payload
    return None


def _httpx_message(error: httpx.HTTPStatusError) -> Optional[str]:
    try:
        return _remote_message(error.response.json())
    except ValueError:
        return error.response.text or None


def error_for_status(status: int, message: str, original: Optional[Exception] = None) -> SyncError:
    """
    Translate an HTTP status returned by the remote host into a SyncError.

    Args:
        status: HTTP status code
        message: Remote API message, or a generic description
        original: The exception being translated

    Returns:
        The matching SyncError subclass instance
    """
    lowered = message.lower()
    if status == 429 or (status == 403 and "rate limit" in lowered):
        return RateLimitError(message, original)
    if status in (401, 403):
        return AuthenticationError(message, original)
    if status == 404:
        return RemoteNotFoundError(message, original)
    if status in (409, 422):
        return RemoteConflictError(message, original)
    return SyncError(message, original)


def translate_error(error: Exception) -> SyncError:
    """Map any exception raised by a remote call onto the taxonomy."""

    if isinstance(error, SyncError):
        return error

    if isinstance(error, GithubException):
        message = _remote_message(getattr(error, "data", None)) or str(error)
        return error_for_status(error.status, message, error)

    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        message = _httpx_message(error) or f"HTTP {status} from {error.request.url}"
        return error_for_status(status, message, error)

    if isinstance(error, httpx.RequestError):
        text = str(error)
        if "429" in text or "rate limit" in text.lower():
            return RateLimitError(f"Rate limit exceeded: {text}", error)
        return TransportError(f"Network error: {text or type(error).__name__}", error)

    # PyGithub surfaces transport failures as requests exceptions
    if isinstance(error, (ConnectionError, TimeoutError, requests.exceptions.RequestException)):
        return TransportError(f"Network error: {error}", error)

    return SyncError(f"Unexpected error: {error}", error)


def handle_api_error(func: Callable) -> Callable:
    """
    Decorator translating remote API exceptions into SyncError subclasses.

    Works for both plain functions and coroutine functions.
    """

    if asyncio.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                raise translate_error(e) from e

        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            raise translate_error(e) from e

    return wrapper


RETRYABLE_ERRORS: Tuple[Type[Exception], ...] = (
    httpx.RequestError,
    RateLimitError,
    TransportError,
    ConnectionError,
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
)

# Writes are retried only when the request never reached the server
WRITE_RETRYABLE_ERRORS: Tuple[Type[Exception], ...] = (
    httpx.ConnectError,
    httpx.ConnectTimeout,
    RateLimitError,
    requests.exceptions.ConnectionError,
)


def retry_on_error(
    max_retries: int = 3,
    delay: float = 0.0,
    retryable: Tuple[Type[Exception], ...] = RETRYABLE_ERRORS
) -> Callable:
    """
    Decorator retrying a synchronous callable on transient failures.

    Args:
        max_retries: Retries after the first attempt
        delay: Seconds to wait between attempts
        retryable: Exception types that trigger a retry
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except retryable as e:
                    if attempt >= max_retries:
                        raise
                    logger.warning(
                        f"Attempt {attempt + 1} of {func.__name__} failed: {e}"
                    )
                    if delay:
                        time.sleep(delay)

        return wrapper

    return decorator


__all__ = [
    "SyncError",
    "InvalidInputError",
    "AuthenticationError",
    "RemoteNotFoundError",
    "RemoteConflictError",
    "RateLimitError",
    "TransportError",
    "StateTransitionError",
    "RunInProgressError",
    "error_for_status",
    "translate_error",
    "handle_api_error",
    "retry_on_error",
    "RETRYABLE_ERRORS",
    "WRITE_RETRYABLE_ERRORS",
]
