"""
Request lifecycle tracking.

Records every request the page issues and completes the matching
record when Playwright reports ``requestfinished``.  Listeners must be
attached before navigation starts: events fired earlier are lost.
"""

from __future__ import annotations

import asyncio
import re
import time
from typing import Any

from playwright import async_api

from pagemeter.models import network
from pagemeter.utils import errors, logger, serialization

log = logger.create_logger("NetworkTracker")

_LEADING_DIGITS = re.compile(r"\s*(\d+)")


def _now_ms() -> int:
    return int(time.time() * 1000)


def parse_content_length(value: str | None) -> int:
    """Parse a ``content-length`` header value, returning 0 when absent or non-numeric."""
    if not value:
        return 0
    match = _LEADING_DIGITS.match(value)
    return int(match.group(1)) if match else 0


class NetworkTracker:
    """
    Collects a :class:`~pagemeter.models.network.RequestRecord` per request.

    Completions are matched by request identity (the Playwright
    ``Request`` object is shared by the ``request`` and
    ``requestfinished`` events).  When the identity is unknown the
    first outstanding record with the same URL is used instead.
    """

    def __init__(self) -> None:
        self._records: list[network.RequestRecord] = []
        self._by_key: dict[Any, int] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self._page: async_api.Page | None = None

    @property
    def records(self) -> list[network.RequestRecord]:
        return self._records

    # ==========================================================================
    # Pure bookkeeping
    # ==========================================================================

    def record_request(
        self,
        key: Any,
        url: str,
        resource_type: str,
        started_at: int | None = None,
    ) -> network.RequestRecord:
        """Append a record for a newly issued request."""
        record = network.RequestRecord(
            url=url,
            resource_type=resource_type,
            start_time=started_at if started_at is not None else _now_ms(),
        )
        if key is not None:
            self._by_key[key] = len(self._records)
        self._records.append(record)
        return record

    def _find_outstanding(self, key: Any, url: str) -> network.RequestRecord | None:
        idx = self._by_key.pop(key, None) if key is not None else None
        if idx is not None:
            record = self._records[idx]
            return None if record.is_complete else record
        for record in self._records:
            if record.url == url and not record.is_complete:
                return record
        return None

    def record_finished(
        self,
        key: Any,
        url: str,
        content_length: str | None,
        ended_at: int | None = None,
    ) -> network.RequestRecord | None:
        """Complete the matching outstanding record.

        Returns:
            The completed record, or ``None`` when nothing matched.
            Already completed records are never touched again.
        """
        record = self._find_outstanding(key, url)
        if record is None:
            log.debug("No outstanding request to complete", {"url": url})
            return None
        record.end_time = ended_at if ended_at is not None else _now_ms()
        record.duration_ms = record.end_time - record.start_time
        record.size_kb = serialization.bytes_to_kb(parse_content_length(content_length))
        return record

    # ==========================================================================
    # Event channel
    # ==========================================================================

    def attach(self, page: async_api.Page) -> None:
        """Subscribe to the page's request events."""
        self._page = page
        page.on("request", self._on_request)
        page.on("requestfinished", self._on_request_finished)

    def _on_request(self, request: async_api.Request) -> None:
        try:
            self.record_request(request, request.url, request.resource_type)
        except Exception as exc:
            log.warn("Failed to record request", {"error": errors.get_error_message(exc)})

    def _on_request_finished(self, request: async_api.Request) -> None:
        ended_at = _now_ms()
        try:
            task = asyncio.get_running_loop().create_task(self._complete(request, ended_at))
        except Exception as exc:
            log.warn("Failed to schedule request completion", {"error": errors.get_error_message(exc)})
            return
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _complete(self, request: async_api.Request, ended_at: int) -> None:
        content_length: str | None = None
        try:
            response = await request.response()
            if response is not None:
                content_length = response.headers.get("content-length")
        except Exception as exc:
            log.debug("Response headers unavailable", {"url": request.url, "error": errors.get_error_message(exc)})
        try:
            self.record_finished(request, request.url, content_length, ended_at)
        except Exception as exc:
            log.warn("Failed to complete request", {"error": errors.get_error_message(exc)})

    async def drain(self, timeout_ms: int) -> None:
        """Wait, bounded by *timeout_ms*, for scheduled completions to finish."""
        pending = {t for t in self._tasks if not t.done()}
        if not pending:
            return
        _, still_pending = await asyncio.wait(pending, timeout=timeout_ms / 1000)
        if still_pending:
            log.debug("Request completions still pending after drain", {"pending": len(still_pending)})

    def detach(self) -> None:
        """Unsubscribe from the page and cancel leftover completion work."""
        page, self._page = self._page, None
        if page is not None:
            for event, handler in (("request", self._on_request), ("requestfinished", self._on_request_finished)):
                try:
                    page.remove_listener(event, handler)
                except Exception as exc:
                    log.debug("Listener removal failed", {"event": event, "error": errors.get_error_message(exc)})
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
