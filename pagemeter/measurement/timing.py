"""
In-page performance timing extraction.

Reads the paint, navigation and resource timing APIs of the loaded
page.  Each read owns its own recovery boundary: a failing
``page.evaluate`` degrades only its own field (``None``, an empty
snapshot or an empty list).
"""

from __future__ import annotations

from typing import Any

from playwright import async_api

from pagemeter import config
from pagemeter.models import timing
from pagemeter.utils import errors, logger, polling, serialization

log = logger.create_logger("Timing")

# ============================================================================
# In-page scripts
# ============================================================================

FCP_PROBE_JS = """() => {
    const entry = performance
        .getEntriesByType('paint')
        .find((p) => p.name === 'first-contentful-paint');
    return entry ? entry.startTime : null;
}"""

NAVIGATION_TIMING_JS = """() => {
    const [nav] = performance.getEntriesByType('navigation');
    if (!nav) return {};
    return {
        dnsLookup: nav.domainLookupEnd - nav.domainLookupStart,
        tcpConnect: nav.connectEnd - nav.connectStart,
        ttfb: nav.responseStart - nav.requestStart,
        response: nav.responseEnd - nav.responseStart,
        domContentLoaded: nav.domContentLoadedEventEnd,
        totalLoad: nav.loadEventEnd || performance.now(),
    };
}"""

RESOURCE_TIMING_JS = """() => performance.getEntriesByType('resource').map((r) => ({
    name: r.name,
    type: r.initiatorType,
    startTime: r.startTime,
    duration: r.duration,
    transferSize: r.transferSize,
    encodedBodySize: r.encodedBodySize,
}))"""


# ============================================================================
# Projection helpers
# ============================================================================


def build_navigation_snapshot(raw: Any) -> timing.NavigationTimingSnapshot:
    """Turn the raw in-page navigation object into a rounded snapshot."""
    if not isinstance(raw, dict) or not raw:
        return timing.NavigationTimingSnapshot()
    return timing.NavigationTimingSnapshot(
        dns_lookup=serialization.round2(raw.get("dnsLookup")),
        tcp_connect=serialization.round2(raw.get("tcpConnect")),
        ttfb=serialization.round2(raw.get("ttfb")),
        response=serialization.round2(raw.get("response")),
        dom_content_loaded=serialization.round2(raw.get("domContentLoaded")),
        total_load=serialization.round2(raw.get("totalLoad")),
    )


def build_resource_entries(raw: Any) -> list[timing.ResourceTimingEntry]:
    """Project raw resource timing entries, rounding numbers to two decimals.

    Malformed entries, including ones with non-numeric timings or sizes,
    are skipped.
    """
    if not isinstance(raw, list):
        return []
    entries: list[timing.ResourceTimingEntry] = []
    for item in raw:
        if not isinstance(item, dict) or not item.get("name"):
            continue
        try:
            entry = timing.ResourceTimingEntry(
                name=str(item["name"]),
                type=str(item.get("type") or "other"),
                start_time=serialization.round2(item.get("startTime")) or 0.0,
                duration=serialization.round2(item.get("duration")) or 0.0,
                transfer_size_kb=serialization.bytes_to_kb(item.get("transferSize")),
                encoded_body_size_kb=serialization.bytes_to_kb(item.get("encodedBodySize")),
            )
        except (TypeError, ValueError) as exc:
            log.debug("Skipping malformed resource timing entry", {"name": str(item["name"]), "error": errors.get_error_message(exc)})
            continue
        entries.append(entry)
    return entries


# ============================================================================
# Extractor
# ============================================================================


class TimingExtractor:
    """Reads paint, navigation and resource timing from a loaded page."""

    def __init__(self, page: async_api.Page, settings: config.MeasurementSettings) -> None:
        self._page = page
        self._settings = settings

    async def first_contentful_paint(self) -> float | None:
        """Poll for the first-contentful-paint entry, ``None`` if it never appears."""

        async def probe() -> float | None:
            value = await self._page.evaluate(FCP_PROBE_JS)
            return float(value) if isinstance(value, (int, float)) else None

        fcp = await polling.poll_until(
            probe,
            interval_ms=self._settings.fcp_poll_interval_ms,
            timeout_ms=self._settings.fcp_poll_ceiling_ms,
            max_attempts=self._settings.fcp_poll_attempts,
            context="first-contentful-paint",
        )
        if fcp is None:
            log.info("No first-contentful-paint entry recorded")
        return fcp

    async def navigation_timing(self) -> timing.NavigationTimingSnapshot:
        """Read the navigation entry; empty snapshot when absent or unreadable."""
        try:
            raw = await self._page.evaluate(NAVIGATION_TIMING_JS)
            return build_navigation_snapshot(raw)
        except Exception as exc:
            log.warn("Navigation timing unavailable", {"error": errors.get_error_message(exc)})
            return timing.NavigationTimingSnapshot()

    async def resource_timing(self) -> list[timing.ResourceTimingEntry]:
        """Read every resource timing entry; empty list on failure."""
        try:
            raw = await self._page.evaluate(RESOURCE_TIMING_JS)
            return build_resource_entries(raw)
        except Exception as exc:
            log.warn("Resource timing unavailable", {"error": errors.get_error_message(exc)})
            return []
