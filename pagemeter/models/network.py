"""Pydantic models for tracked network requests and captured resource bodies."""

from __future__ import annotations

from typing import Literal

import pydantic

from pagemeter.utils import serialization

ResourceClass = Literal[
    "javascript",
    "stylesheet",
    "image",
    "font",
    "json",
    "video",
    "audio",
    "xml",
    "pdf",
    "text",
    "application",
    "other",
]


class RequestRecord(pydantic.BaseModel):
    """Lifecycle of one network request issued by the page.

    Created when the request is issued and completed exactly once by
    the matching ``requestfinished`` event.
    """

    model_config = pydantic.ConfigDict(
        alias_generator=serialization.snake_to_camel, populate_by_name=True
    )

    url: str
    resource_type: str
    start_time: int
    end_time: int | None = None
    size_kb: float = pydantic.Field(default=0.0, alias="sizeKB")
    duration_ms: int = 0

    @property
    def is_complete(self) -> bool:
        return self.end_time is not None


class CapturedResource(pydantic.BaseModel):
    """A response body kept for later inspection, keyed by URL."""

    model_config = pydantic.ConfigDict(
        alias_generator=serialization.snake_to_camel, populate_by_name=True
    )

    url: str
    file_name: str
    classified_type: ResourceClass
    content: str = ""
    size_kb: float = pydantic.Field(default=0.0, alias="sizeKB")
    content_type: str = ""
