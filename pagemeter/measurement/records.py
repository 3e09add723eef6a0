"""
Row projections handed to the storage layer.

A measurement is stored as one metrics row plus one file row per
captured resource and one for the rendered main document.  These
helpers only shape the data; writing it is the caller's job.
"""

from __future__ import annotations

import json
from typing import Any

import pydantic

from pagemeter.models import result
from pagemeter.utils import serialization

MAIN_DOCUMENT_FILE_NAME = "index.html"
MAIN_DOCUMENT_FILE_TYPE = "document"


class MetricsRow(pydantic.BaseModel):
    """Column values for one stored measurement."""

    url: str
    fcp: float | None
    real_load_time: float | None
    load_time: int
    total_size_kb: float
    resource_count: int
    performance: str
    web_vitals: str


class FileRow(pydantic.BaseModel):
    """Column values for one stored file."""

    file_name: str
    file_type: str
    file_content: str
    content_size_kb: float
    real_load_time: float | None


def to_metrics_row(measurement: result.MeasurementResult) -> MetricsRow:
    """Project *measurement* onto the metrics table columns."""
    return MetricsRow(
        url=measurement.url,
        fcp=measurement.fcp,
        real_load_time=measurement.real_load_time,
        load_time=measurement.load_time_ms,
        total_size_kb=measurement.total_size_kb,
        resource_count=measurement.resource_count,
        performance=json.dumps(measurement.navigation_timing.model_dump(by_alias=True, exclude_none=True)),
        web_vitals=json.dumps(measurement.vitals_report),
    )


def to_file_rows(measurement: result.MeasurementResult) -> list[FileRow]:
    """One row per captured resource, then the main document when it has HTML."""
    rows = [
        FileRow(
            file_name=resource.file_name,
            file_type=resource.classified_type,
            file_content=resource.content,
            content_size_kb=resource.size_kb,
            real_load_time=measurement.real_load_time,
        )
        for resource in measurement.captured_resources
    ]
    if measurement.main_document.html:
        rows.append(
            FileRow(
                file_name=MAIN_DOCUMENT_FILE_NAME,
                file_type=MAIN_DOCUMENT_FILE_TYPE,
                file_content=measurement.main_document.html,
                content_size_kb=measurement.main_document.size_kb,
                real_load_time=measurement.real_load_time,
            )
        )
    return rows


def summarize_files(rows: list[FileRow]) -> list[dict[str, Any]]:
    """Group file rows by type: count, total size and mean load time, largest groups first."""
    groups: dict[str, dict[str, Any]] = {}
    for row in rows:
        group = groups.setdefault(row.file_type, {"fileType": row.file_type, "count": 0, "totalSizeKB": 0.0, "_loads": []})
        group["count"] += 1
        group["totalSizeKB"] += row.content_size_kb
        if row.real_load_time is not None:
            group["_loads"].append(row.real_load_time)

    summary = []
    for group in groups.values():
        loads = group.pop("_loads")
        group["totalSizeKB"] = round(group["totalSizeKB"], 2)
        group["avgLoadTime"] = serialization.round2(sum(loads) / len(loads)) if loads else None
        summary.append(group)
    summary.sort(key=lambda g: g["count"], reverse=True)
    return summary
