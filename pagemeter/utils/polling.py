"""
Bounded polling primitive for in-page reads.

``poll_until`` repeatedly awaits a probe until it yields a value or the
attempt budget / deadline is exhausted.  It never blocks past
``timeout_ms``, even when a single probe hangs.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

from pagemeter.utils import errors, logger

log = logger.create_logger("Poll")

T = TypeVar("T")


async def poll_until(
    probe: Callable[[], Awaitable[T | None]],
    *,
    interval_ms: int,
    timeout_ms: int,
    max_attempts: int | None = None,
    context: str | None = None,
) -> T | None:
    """
    Await *probe* until it returns a non-``None`` value.

    Args:
        probe: Zero-argument coroutine factory.  ``None`` means "not yet".
            A probe that raises counts as a miss for that attempt.
        interval_ms: Sleep between attempts.
        timeout_ms: Hard ceiling for the whole poll, probes included.
        max_attempts: Optional cap on the number of probes.
        context: Label used in log lines.

    Returns:
        The first non-``None`` probe result, or ``None`` when the
        deadline or attempt budget runs out.
    """
    attempts = 0
    try:
        async with asyncio.timeout(timeout_ms / 1000):
            while max_attempts is None or attempts < max_attempts:
                attempts += 1
                try:
                    value = await probe()
                except Exception as exc:
                    log.debug("Probe failed", {"context": context, "attempt": attempts, "error": errors.get_error_message(exc)})
                    value = None
                if value is not None:
                    return value
                if max_attempts is not None and attempts >= max_attempts:
                    break
                await asyncio.sleep(interval_ms / 1000)
    except TimeoutError:
        log.debug("Poll deadline reached", {"context": context, "attempts": attempts, "timeoutMs": timeout_ms})
        return None

    log.debug("Poll attempts exhausted", {"context": context, "attempts": attempts})
    return None
