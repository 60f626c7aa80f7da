"""
Retry logic with exponential backoff for Gemini HTTP calls.

Handles:
- Rate limits (429 errors)
- Transient failures (500, 502, 503, 504)
- Network timeouts and connection errors

Retry policy belongs to the HTTP client wrapper only. Callers above the
client see a single call that either returns text or raises.
"""

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Optional

import httpx

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_retries: int = 2,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential_base: float = 2.0,
        jitter: bool = True
    ):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter


class RetryHandler:
    """
    Handles retry logic with exponential backoff for async HTTP calls.

    Features:
    - Exponential backoff with jitter
    - Configurable retry count and delays
    - Only transport errors and retryable status codes are retried
    """

    def __init__(self, config: Optional[RetryConfig] = None):
        self.config = config or RetryConfig()

    def should_retry(self, error: Exception) -> bool:
        """
        Determine if error is retryable.

        Args:
            error: Exception raised by the wrapped call

        Returns:
            True if should retry, False otherwise
        """
        if isinstance(error, httpx.HTTPStatusError):
            return error.response.status_code in RETRYABLE_STATUS_CODES

        # Timeouts, connection resets, DNS failures
        if isinstance(error, httpx.TransportError):
            return True

        return False

    def calculate_delay(self, attempt: int) -> float:
        """
        Calculate delay before next retry.

        Args:
            attempt: Current attempt number (0-indexed)

        Returns:
            Delay in seconds
        """
        delay = self.config.base_delay * (self.config.exponential_base ** attempt)
        delay = min(delay, self.config.max_delay)

        if self.config.jitter:
            delay += random.uniform(0, delay * 0.1)

        return delay

    async def execute_with_retry(
        self,
        func: Callable[..., Awaitable[Any]],
        *args,
        **kwargs
    ) -> Any:
        """
        Await ``func`` with retry logic.

        Args:
            func: Coroutine function to execute
            *args: Positional arguments for function
            **kwargs: Keyword arguments for function

        Returns:
            Function result

        Raises:
            Exception: The last error once retries are exhausted, or the
                first non-retryable error
        """
        for attempt in range(self.config.max_retries + 1):
            try:
                result = await func(*args, **kwargs)

                if attempt > 0:
                    logger.info(f"✅ Retry successful after {attempt} attempt(s)")

                return result

            except Exception as e:
                if not self.should_retry(e):
                    raise

                if attempt >= self.config.max_retries:
                    logger.error(f"❌ Max retries ({self.config.max_retries}) exceeded: {e}")
                    raise

                delay = self.calculate_delay(attempt)
                logger.warning(
                    f"⚠️ Attempt {attempt + 1}/{self.config.max_retries + 1} failed: {e}. "
                    f"Retrying in {delay:.2f}s..."
                )
                await asyncio.sleep(delay)
