"""Tests for pagemeter.browser.network_tracker — request lifecycle matching."""

from __future__ import annotations

import pytest
from fakes import FakePage, FakeRequest, run

from pagemeter.browser.network_tracker import NetworkTracker, parse_content_length


class TestParseContentLength:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("1024", 1024),
            (" 2048", 2048),
            ("12abc", 12),
            ("abc", 0),
            ("", 0),
            (None, 0),
        ],
    )
    def test_parsing(self, value: str | None, expected: int) -> None:
        assert parse_content_length(value) == expected


class TestRecordFinished:
    def test_completes_matching_record(self) -> None:
        tracker = NetworkTracker()
        key = object()
        tracker.record_request(key, "https://example.com/app.js", "script", started_at=1000)

        record = tracker.record_finished(key, "https://example.com/app.js", "2048", ended_at=1250)

        assert record is not None
        assert record.end_time == 1250
        assert record.duration_ms == 250
        assert record.size_kb == 2.0

    def test_missing_content_length_counts_as_zero(self) -> None:
        tracker = NetworkTracker()
        tracker.record_request("k", "https://example.com/a", "fetch", started_at=0)
        record = tracker.record_finished("k", "https://example.com/a", None, ended_at=5)
        assert record is not None
        assert record.size_kb == 0.0

    def test_unknown_request_is_noop(self) -> None:
        tracker = NetworkTracker()
        tracker.record_request("k", "https://example.com/a", "fetch", started_at=0)

        assert tracker.record_finished(None, "https://example.com/other", "10") is None
        assert not tracker.records[0].is_complete

    def test_completion_is_idempotent(self) -> None:
        tracker = NetworkTracker()
        tracker.record_request("k", "https://example.com/a", "fetch", started_at=0)
        tracker.record_finished("k", "https://example.com/a", "1024", ended_at=10)

        assert tracker.record_finished("k", "https://example.com/a", "4096", ended_at=99) is None
        record = tracker.records[0]
        assert record.end_time == 10
        assert record.size_kb == 1.0

    def test_url_fallback_takes_first_outstanding(self) -> None:
        tracker = NetworkTracker()
        url = "https://example.com/poll"
        tracker.record_request(None, url, "xhr", started_at=0)
        tracker.record_request(None, url, "xhr", started_at=50)

        first = tracker.record_finished(None, url, "0", ended_at=100)
        second = tracker.record_finished(None, url, "0", ended_at=120)
        third = tracker.record_finished(None, url, "0", ended_at=130)

        assert first is tracker.records[0]
        assert second is tracker.records[1]
        assert third is None
        assert [r.duration_ms for r in tracker.records] == [100, 70]

    def test_identity_wins_over_url_order(self) -> None:
        tracker = NetworkTracker()
        url = "https://example.com/poll"
        early, late = object(), object()
        tracker.record_request(early, url, "xhr", started_at=0)
        tracker.record_request(late, url, "xhr", started_at=40)

        tracker.record_finished(late, url, "0", ended_at=60)

        assert not tracker.records[0].is_complete
        assert tracker.records[1].duration_ms == 20


class TestEventChannel:
    def test_tracks_requests_through_page_events(self) -> None:
        async def scenario() -> NetworkTracker:
            page = FakePage()
            tracker = NetworkTracker()
            tracker.attach(page)
            request = FakeRequest("https://example.com/big.js", "script", response_headers={"content-length": "51200"})
            page.emit("request", request)
            page.emit("requestfinished", request)
            await tracker.drain(1000)
            tracker.detach()
            assert page.listener_count() == 0
            return tracker

        tracker = run(scenario())
        assert len(tracker.records) == 1
        record = tracker.records[0]
        assert record.resource_type == "script"
        assert record.is_complete
        assert record.size_kb == 50.0

    def test_response_failure_still_completes_with_zero_size(self) -> None:
        async def scenario() -> NetworkTracker:
            page = FakePage()
            tracker = NetworkTracker()
            tracker.attach(page)
            request = FakeRequest("https://example.com/a", "fetch", response_error=RuntimeError("Target closed"))
            page.emit("request", request)
            page.emit("requestfinished", request)
            await tracker.drain(1000)
            return tracker

        record = run(scenario()).records[0]
        assert record.is_complete
        assert record.size_kb == 0.0

    def test_broken_request_does_not_raise(self) -> None:
        class BrokenRequest:
            @property
            def url(self) -> str:
                raise RuntimeError("request disposed")

        async def scenario() -> NetworkTracker:
            page = FakePage()
            tracker = NetworkTracker()
            tracker.attach(page)
            page.emit("request", BrokenRequest())
            page.emit("request", FakeRequest("https://example.com/ok.css", "stylesheet"))
            return tracker

        tracker = run(scenario())
        assert [r.url for r in tracker.records] == ["https://example.com/ok.css"]

    def test_unmatched_finish_event_is_ignored(self) -> None:
        async def scenario() -> NetworkTracker:
            page = FakePage()
            tracker = NetworkTracker()
            tracker.attach(page)
            page.emit("requestfinished", FakeRequest("https://example.com/never-seen", response_headers={}))
            await tracker.drain(1000)
            return tracker

        assert run(scenario()).records == []

    def test_detach_without_attach(self) -> None:
        NetworkTracker().detach()
