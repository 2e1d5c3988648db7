"""Cascade Retry — re-runs the unfinished part of a cascade after a partial failure.

Invariants:
    - Only PartialCascadeFailureError is retried; every other error propagates at once
    - Retries call the failure's `resume` (remaining idempotent steps), never the
      primary write again
    - At most max_retries resume attempts; the last failure is re-raised unchanged
    - Exponential backoff with ±25% jitter, capped at max_delay_ms

Design Decisions:
    - Wrapper above RelationshipService over retries inside it: the core reports
      partial failure, this layer decides policy
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from classroom.core.errors import PartialCascadeFailureError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CascadeRetrier:
    """Runs relationship operations and resumes cascades that fail half-way."""

    def __init__(
        self,
        max_retries: int = 3,
        base_delay_ms: int = 50,
        max_delay_ms: int = 2_000,
    ):
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def run(
        self, operation: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any,
    ) -> T:
        try:
            return await operation(*args, **kwargs)
        except PartialCascadeFailureError as e:
            return await self._resume(e)

    async def _resume(self, failure: PartialCascadeFailureError):
        for attempt in range(self.max_retries):
            if failure.resume is None:
                break
            delay = self._backoff(attempt)
            logger.warning(
                f"Resuming {failure.operation} after {delay}ms",
                extra={
                    "operation": failure.operation,
                    "failed_step": failure.failed_step,
                    "attempt": attempt + 1,
                },
            )
            await asyncio.sleep(delay / 1000)
            try:
                return await failure.resume()
            except PartialCascadeFailureError as e:
                failure = e
        logger.error(
            f"Cascade for {failure.operation} still incomplete after retries",
            extra={
                "error_code": failure.code,
                "operation": failure.operation,
                "failed_step": failure.failed_step,
            },
        )
        raise failure

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311
