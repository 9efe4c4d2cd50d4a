"""
Retry policy applied at the remote-call boundary.
"""

import asyncio
import random
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Tuple, Type

from .error_handler import RETRYABLE_ERRORS
from .logger import logger


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 30.0
    backoff_factor: float = 2.0
    retryable_errors: Tuple[Type[Exception], ...] = field(
        default_factory=lambda: RETRYABLE_ERRORS
    )


class RetryManager:
    """
    Executes coroutines with exponential backoff on transient failures.

    Only transport failures and rate-limit responses are retried; anything
    the remote host answered definitively (auth, not found, conflict) is
    raised on the first attempt.
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential_base: float = 2.0,
        jitter: bool = True,
        retryable_errors: Tuple[Type[Exception], ...] = RETRYABLE_ERRORS
    ):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter
        self.retryable_errors = retryable_errors

    @classmethod
    def from_config(cls, config: RetryConfig) -> "RetryManager":
        return cls(
            max_retries=config.max_retries,
            base_delay=config.initial_delay,
            max_delay=config.max_delay,
            exponential_base=config.backoff_factor,
            retryable_errors=config.retryable_errors,
        )

    def _calculate_delay(self, attempt: int) -> float:
        """
        Delay before the retry following ``attempt`` (zero based).

        Jitter spreads the delay by up to 20% in either direction.
        """
        delay = min(self.base_delay * (self.exponential_base ** attempt), self.max_delay)
        if self.jitter:
            delay *= random.uniform(0.8, 1.2)
        return max(delay, 0.0)

    async def execute(
        self,
        func: Callable[..., Awaitable[Any]],
        *args,
        exceptions: Optional[Tuple[Type[Exception], ...]] = None,
        **kwargs
    ) -> Any:
        """
        Await ``func(*args, **kwargs)``, retrying on retryable errors.

        Args:
            func: Coroutine function to call
            exceptions: Overrides the retryable error types for this call

        Returns:
            Whatever ``func`` returns

        Raises:
            The last exception once all attempts are exhausted
        """
        retryable = exceptions or self.retryable_errors
        attempts = self.max_retries + 1

        for attempt in range(attempts):
            try:
                return await func(*args, **kwargs)
            except retryable as e:
                if attempt + 1 >= attempts:
                    logger.error(f"All {attempts} attempts failed, giving up")
                    raise

                delay = self._calculate_delay(attempt)
                logger.warning(
                    f"Attempt {attempt + 1} failed: {e}. Retrying in {delay:.2f}s"
                )
                await asyncio.sleep(delay)


__all__ = [
    "RetryConfig",
    "RetryManager",
]
