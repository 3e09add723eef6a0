"""
Sequential measurement of many URLs.

URLs are measured one at a time so at most one browser session is open.
A failing URL, launch failures included, is recorded and logged and
never stops the remaining sweep.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable

import pydantic

from pagemeter import config
from pagemeter.measurement import engine
from pagemeter.models import result
from pagemeter.utils import errors, logger

log = logger.create_logger("Sweep")

MeasureFn = Callable[[str, config.MeasurementSettings | None], Awaitable[result.MeasurementResult]]
ResultCallback = Callable[[result.MeasurementResult], Awaitable[None]]


class SweepOutcome(pydantic.BaseModel):
    """What happened to one URL in a sweep."""

    url: str
    ok: bool
    measurement: result.MeasurementResult | None = None
    error: str | None = None


async def sweep(
    urls: Iterable[str],
    *,
    settings: config.MeasurementSettings | None = None,
    measure_fn: MeasureFn = engine.measure,
    on_result: ResultCallback | None = None,
) -> list[SweepOutcome]:
    """Measure each URL in turn.

    Args:
        urls: Targets, measured in the given order.
        settings: Passed through to every measurement.
        measure_fn: Measurement coroutine, ``engine.measure`` by default.
        on_result: Awaited with each successful result (e.g. to persist it).
            A failing callback marks that URL as failed.

    Returns:
        One outcome per URL, in input order.
    """
    outcomes: list[SweepOutcome] = []
    targets = list(urls)
    log.section(f"Sweep: {len(targets)} URLs")

    for url in targets:
        try:
            measurement = await measure_fn(url, settings)
            if on_result is not None:
                await on_result(measurement)
        except Exception as exc:
            message = errors.get_error_message(exc)
            log.error("Measurement failed", {"url": url, "error": message})
            outcomes.append(SweepOutcome(url=url, ok=False, error=message))
            continue
        outcomes.append(SweepOutcome(url=url, ok=True, measurement=measurement))

    failed = sum(1 for o in outcomes if not o.ok)
    log.info("Sweep finished", {"measured": len(outcomes) - failed, "failed": failed})
    return outcomes
