"""Pydantic models for the assembled measurement report."""

from __future__ import annotations

from typing import Any

import pydantic

from pagemeter.models import network, timing
from pagemeter.utils import serialization


class MainDocument(pydantic.BaseModel):
    """The fully rendered HTML of the measured page."""

    model_config = pydantic.ConfigDict(
        alias_generator=serialization.snake_to_camel, populate_by_name=True
    )

    html: str = ""
    size_kb: float = pydantic.Field(default=0.0, alias="sizeKB")


class MeasurementResult(pydantic.BaseModel):
    """Everything measured for one URL in one call.

    ``resource_count`` always equals the number of tracked requests,
    regardless of how many bodies were captured.
    """

    model_config = pydantic.ConfigDict(
        alias_generator=serialization.snake_to_camel, populate_by_name=True
    )

    url: str
    timestamp: str
    fcp: float | None = None
    navigation_timing: timing.NavigationTimingSnapshot = pydantic.Field(
        default_factory=timing.NavigationTimingSnapshot
    )
    real_load_time: float | None = None
    load_time_ms: int = 0
    total_size_kb: float = pydantic.Field(default=0.0, alias="totalSizeKB")
    resource_count: int = 0
    resource_type_counts: dict[str, int] = pydantic.Field(default_factory=dict)
    resource_timing_entries: list[timing.ResourceTimingEntry] = pydantic.Field(default_factory=list)
    vitals_report: timing.VitalsReport = pydantic.Field(default_factory=dict)
    captured_resources: list[network.CapturedResource] = pydantic.Field(default_factory=list)
    main_document: MainDocument = pydantic.Field(default_factory=MainDocument)

    @pydantic.field_serializer("navigation_timing")
    def _serialize_navigation_timing(
        self, snapshot: timing.NavigationTimingSnapshot, info: pydantic.SerializationInfo
    ) -> dict[str, Any]:
        # Absent phases are dropped so an empty snapshot reads as {}.
        return snapshot.model_dump(by_alias=bool(info.by_alias), exclude_none=True)
