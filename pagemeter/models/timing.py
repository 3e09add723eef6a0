"""Pydantic models for in-page performance timing data."""

from __future__ import annotations

import pydantic

from pagemeter.utils import serialization

VITAL_NAMES: tuple[str, ...] = ("CLS", "FID", "LCP", "FCP", "TTFB")

# Metric name -> value; any subset of VITAL_NAMES.
VitalsReport = dict[str, float]


class NavigationTimingSnapshot(pydantic.BaseModel):
    """Phase breakdown of the page load, in milliseconds.

    Every field is ``None`` when the page exposed no navigation entry;
    such a snapshot serializes to ``{}``.
    """

    model_config = pydantic.ConfigDict(
        alias_generator=serialization.snake_to_camel, populate_by_name=True
    )

    dns_lookup: float | None = None
    tcp_connect: float | None = None
    ttfb: float | None = None
    response: float | None = None
    dom_content_loaded: float | None = None
    total_load: float | None = None

    @property
    def is_empty(self) -> bool:
        return all(v is None for v in self.model_dump().values())


class ResourceTimingEntry(pydantic.BaseModel):
    """One entry from ``performance.getEntriesByType("resource")``."""

    model_config = pydantic.ConfigDict(
        alias_generator=serialization.snake_to_camel, populate_by_name=True
    )

    name: str
    type: str
    start_time: float = 0.0
    duration: float = 0.0
    transfer_size_kb: float = pydantic.Field(default=0.0, alias="transferSizeKB")
    encoded_body_size_kb: float = pydantic.Field(default=0.0, alias="encodedBodySizeKB")
