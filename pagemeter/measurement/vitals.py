"""
Core web vitals collection via the ``web-vitals`` library.

The IIFE bundle is injected into the page only when ``window.webVitals``
is missing.  Each metric callback reaches Python through an exposed page
binding; collection ends as soon as every metric has reported or when
the deadline elapses, whichever happens first.  Both outcomes yield a
valid, possibly partial, report.
"""

from __future__ import annotations

import asyncio

from playwright import async_api

from pagemeter import config
from pagemeter.models import timing
from pagemeter.utils import errors, logger

log = logger.create_logger("Vitals")

BINDING_NAME = "__pagemeterReportVital"

SUBSCRIBE_JS = """async ({ src, binding }) => {
    if (!window.webVitals) {
        await new Promise((resolve, reject) => {
            const script = document.createElement('script');
            script.src = src;
            script.onload = resolve;
            script.onerror = () => reject(new Error('Failed to load ' + src));
            document.head.appendChild(script);
        });
    }
    const report = (metric) => window[binding](metric.name, metric.value);
    const { onCLS, onFID, onLCP, onFCP, onTTFB } = window.webVitals;
    for (const subscribe of [onCLS, onFID, onLCP, onFCP, onTTFB]) {
        if (typeof subscribe === 'function') subscribe(report, { reportAllChanges: true });
    }
    return true;
}"""


class VitalsCollector:
    """Races web-vitals callbacks against a hard deadline."""

    def __init__(
        self,
        settings: config.MeasurementSettings,
        metrics: tuple[str, ...] = timing.VITAL_NAMES,
    ) -> None:
        self._settings = settings
        self._metrics = metrics
        self._report: timing.VitalsReport = {}
        self._complete = asyncio.Event()

    def on_metric(self, name: str, value: float) -> None:
        """Binding target: store one metric value and count it once."""
        if name not in self._metrics:
            return
        try:
            self._report[name] = float(value)
        except (TypeError, ValueError):
            log.debug("Ignoring non-numeric vital", {"metric": name})
            return
        # reportAllChanges may report a metric repeatedly; only distinct names count.
        if len(self._report) >= len(self._metrics):
            self._complete.set()

    async def collect(self, page: async_api.Page) -> timing.VitalsReport:
        """Inject, subscribe and wait for the metric set.

        Returns:
            Metric name to value.  Empty when the script could not be
            loaded; partial when the deadline elapsed first.
        """
        timeout_ms = self._settings.vitals_timeout_ms
        log.start_timer("vitals")
        try:
            async with asyncio.timeout(timeout_ms / 1000):
                await page.expose_function(BINDING_NAME, self.on_metric)
                await page.evaluate(
                    SUBSCRIBE_JS,
                    {"src": self._settings.vitals_script_url, "binding": BINDING_NAME},
                )
                await self._complete.wait()
        except TimeoutError:
            log.info(
                "Vitals deadline reached",
                {"reported": len(self._report), "expected": len(self._metrics), "timeoutMs": timeout_ms},
            )
        except Exception as exc:
            log.warn("Web vitals unavailable", {"error": errors.get_error_message(exc)})
            log.end_timer("vitals", "Vitals collection abandoned")
            return {}

        log.end_timer("vitals", "Vitals collected")
        return dict(self._report)
