"""Shared fixtures for the test suite."""

from __future__ import annotations

import pytest

from pagemeter import config
from pagemeter.models import network

# ── Settings ────────────────────────────────────────────────────


@pytest.fixture()
def fast_settings() -> config.MeasurementSettings:
    """Settings with every wait shrunk to a few milliseconds."""
    return config.MeasurementSettings(
        navigation_timeout_ms=100,
        readiness_timeout_ms=10,
        settle_delay_ms=0,
        fcp_poll_attempts=3,
        fcp_poll_interval_ms=5,
        vitals_timeout_ms=50,
        capture_drain_timeout_ms=200,
    )


# ── Model factories ─────────────────────────────────────────────


@pytest.fixture()
def sample_records() -> list[network.RequestRecord]:
    """Three completed requests of mixed types."""
    return [
        network.RequestRecord(url="https://example.com/", resource_type="document", start_time=0, end_time=120, size_kb=12.5, duration_ms=120),
        network.RequestRecord(url="https://example.com/app.js", resource_type="script", start_time=10, end_time=90, size_kb=40.25, duration_ms=80),
        network.RequestRecord(url="https://cdn.example.com/logo.png", resource_type="image", start_time=15, end_time=60, size_kb=7.33, duration_ms=45),
    ]


@pytest.fixture()
def sample_captured() -> list[network.CapturedResource]:
    """One text and one binary captured resource."""
    return [
        network.CapturedResource(
            url="https://example.com/app.js",
            file_name="app.js",
            classified_type="javascript",
            content="console.log(1)",
            size_kb=0.01,
            content_type="application/javascript",
        ),
        network.CapturedResource(
            url="https://cdn.example.com/logo.png",
            file_name="logo.png",
            classified_type="image",
            content="",
            size_kb=48.83,
            content_type="image/png",
        ),
    ]
