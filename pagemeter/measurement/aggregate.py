"""
Assembly of the final measurement report.

Pure functions only: by the time these run every upstream field already
carries a safe default, so nothing here can fail on partial data.
"""

from __future__ import annotations

import collections
from collections.abc import Sequence

from pagemeter.models import network, result, timing
from pagemeter.utils import serialization


def total_size_kb(records: Sequence[network.RequestRecord]) -> float:
    """Sum of tracked request sizes, rounded to two decimals."""
    return round(sum(r.size_kb for r in records), 2)


def count_resource_types(records: Sequence[network.RequestRecord]) -> dict[str, int]:
    """Number of tracked requests per Playwright resource type."""
    return dict(collections.Counter(r.resource_type for r in records))


def build_main_document(html: str) -> result.MainDocument:
    """Snapshot of the rendered document with its UTF-8 size."""
    return result.MainDocument(html=html, size_kb=serialization.bytes_to_kb(len(html.encode("utf-8"))))


def build_result(
    *,
    url: str,
    timestamp: str,
    fcp: float | None,
    navigation_timing: timing.NavigationTimingSnapshot,
    load_time_ms: int,
    records: Sequence[network.RequestRecord],
    resource_timing_entries: Sequence[timing.ResourceTimingEntry],
    vitals_report: timing.VitalsReport,
    captured_resources: Sequence[network.CapturedResource],
    main_document: result.MainDocument,
) -> result.MeasurementResult:
    """Merge every measured view into one :class:`MeasurementResult`.

    The request records, resource timing entries and captured resources
    come from different sources and are kept side by side, never
    reconciled.
    """
    return result.MeasurementResult(
        url=url,
        timestamp=timestamp,
        fcp=fcp,
        navigation_timing=navigation_timing,
        real_load_time=navigation_timing.total_load,
        load_time_ms=load_time_ms,
        total_size_kb=total_size_kb(records),
        resource_count=len(records),
        resource_type_counts=count_resource_types(records),
        resource_timing_entries=list(resource_timing_entries),
        vitals_report=dict(vitals_report),
        captured_resources=list(captured_resources),
        main_document=main_document,
    )
