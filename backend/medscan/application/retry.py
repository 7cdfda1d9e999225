from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-delay retry: ``max_attempts`` total tries, ``delay_seconds`` between them."""

    max_attempts: int = 1
    delay_seconds: float = 0.0
    sleep: SleepFn = field(default=asyncio.sleep, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must not be negative")

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        retry_on: tuple[type[BaseException], ...],
        label: str = "operation",
    ) -> T:
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except retry_on as exc:
                if attempt >= self.max_attempts:
                    raise
                logger.warning(
                    "%s failed (attempt %d/%d): %s; retrying in %.1fs",
                    label,
                    attempt,
                    self.max_attempts,
                    exc,
                    self.delay_seconds,
                )
                await self.sleep(self.delay_seconds)
        raise AssertionError("unreachable")  # pragma: no cover
