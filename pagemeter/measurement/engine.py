"""
Measurement pipeline for a single URL.

``measure`` launches one browser session, attaches the network
listeners, navigates, extracts timing data and web vitals, and
assembles a :class:`MeasurementResult`.  Only a session launch failure
escapes; every later step degrades its own field and the pipeline
carries on.  The session is released on every exit path.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime

from pagemeter import config
from pagemeter.browser import content_capture, network_tracker, session as browser_session
from pagemeter.measurement import aggregate, timing, vitals
from pagemeter.models import result
from pagemeter.utils import errors, logger, url as url_mod

log = logger.create_logger("Measure")


async def _capture_main_document(session: browser_session.BrowserSession) -> result.MainDocument:
    try:
        html = await session.get_page_content()
    except Exception as exc:
        log.warn("Could not read rendered document", {"error": errors.get_error_message(exc)})
        html = ""
    return aggregate.build_main_document(html)


async def measure(
    url: str,
    settings: config.MeasurementSettings | None = None,
) -> result.MeasurementResult:
    """Measure *url* in a fresh headless browser session.

    Args:
        url: Absolute URL of the page to measure.
        settings: Timeouts and launch options; defaults to the
            environment-derived settings.

    Returns:
        The assembled report.  Fields whose extraction failed hold
        their defaults (``None``, ``{}`` or ``[]``).

    Raises:
        SessionLaunchError: The browser could not be started.
    """
    settings = settings or config.get_settings()
    started = time.monotonic()
    timestamp = datetime.now(UTC).isoformat()

    log.section(f"Measuring: {url}")
    log.start_timer("measure")

    async with browser_session.open_session(settings) as session:
        page = session.page
        tracker = network_tracker.NetworkTracker()
        capture = content_capture.ContentCapture(settings.content_capture_limit_bytes)
        # Must precede navigation: earlier events are never replayed.
        tracker.attach(page)
        capture.attach(page)

        try:
            log.start_timer("navigation")
            nav_result = await session.navigate_to(url, "domcontentloaded", settings.navigation_timeout_ms)
            log.end_timer("navigation", "Navigation finished")
            if nav_result.success:
                log.info("Navigation result", {"hostname": url_mod.extract_domain(url), "statusCode": nav_result.status_code})
                await session.wait_for_readiness(settings.readiness_selector, settings.readiness_timeout_ms)

            await session.wait_for_timeout(settings.settle_delay_ms)

            extractor = timing.TimingExtractor(page, settings)
            fcp = await extractor.first_contentful_paint()
            navigation_timing = await extractor.navigation_timing()
            resource_timing_entries = await extractor.resource_timing()

            vitals_report = await vitals.VitalsCollector(settings).collect(page)

            await tracker.drain(settings.capture_drain_timeout_ms)
            await capture.drain(settings.capture_drain_timeout_ms)
            main_document = await _capture_main_document(session)
        finally:
            tracker.detach()
            capture.detach()

    load_time_ms = int((time.monotonic() - started) * 1000)
    measurement = aggregate.build_result(
        url=url,
        timestamp=timestamp,
        fcp=fcp,
        navigation_timing=navigation_timing,
        load_time_ms=load_time_ms,
        records=tracker.records,
        resource_timing_entries=resource_timing_entries,
        vitals_report=vitals_report,
        captured_resources=capture.resources,
        main_document=main_document,
    )

    log.end_timer("measure", "Measurement complete")
    log.success(
        "Measurement summary",
        {
            "url": url,
            "fcp": measurement.fcp,
            "resources": measurement.resource_count,
            "captured": len(measurement.captured_resources),
            "totalSizeKB": measurement.total_size_kb,
            "vitals": len(measurement.vitals_report),
        },
    )
    return measurement
