"""
Selective capture of response bodies.

Every response except the main HTML document and source maps is
buffered and classified.  Text is stored only for text-like content
types, truncated to a fixed byte cap; binary resources keep their size
and type metadata with empty content.
"""

from __future__ import annotations

import asyncio
from typing import Any

from playwright import async_api

from pagemeter.models import network
from pagemeter.utils import errors, logger, serialization, url as url_mod

log = logger.create_logger("ContentCapture")

DEFAULT_CAPTURE_LIMIT_BYTES = 100_000

# Checked in order; the first substring found in the content type wins.
_CONTENT_TYPE_CLASSES: tuple[tuple[tuple[str, ...], network.ResourceClass], ...] = (
    (("javascript",), "javascript"),
    (("css",), "stylesheet"),
    (("image",), "image"),
    (("font",), "font"),
    (("json",), "json"),
    (("video",), "video"),
    (("audio",), "audio"),
    (("xml", "rss"), "xml"),
    (("pdf",), "pdf"),
    (("text",), "text"),
)

EXTENSION_CLASSES: dict[str, network.ResourceClass] = {
    "js": "javascript",
    "mjs": "javascript",
    "css": "stylesheet",
    "png": "image",
    "jpg": "image",
    "jpeg": "image",
    "gif": "image",
    "svg": "image",
    "webp": "image",
    "avif": "image",
    "ico": "image",
    "ttf": "font",
    "otf": "font",
    "woff": "font",
    "woff2": "font",
    "eot": "font",
    "json": "json",
    "mp4": "video",
    "webm": "video",
    "mp3": "audio",
    "wav": "audio",
    "ogg": "audio",
    "pdf": "pdf",
    "xml": "xml",
}

CONTENT_ALLOW_LIST: tuple[str, ...] = ("javascript", "css", "json", "xml", "text", "html")


# ============================================================================
# Policy
# ============================================================================


def classify(content_type: str, file_name: str) -> network.ResourceClass:
    """Classify a resource by content type, falling back to its file extension.

    The extension table is consulted when the content type is absent or
    only says ``application/...`` (e.g. ``application/octet-stream``).
    """
    ct = content_type.lower()
    for needles, resource_class in _CONTENT_TYPE_CLASSES:
        if any(n in ct for n in needles):
            return resource_class

    by_extension = EXTENSION_CLASSES.get(url_mod.file_extension(file_name))
    if by_extension:
        return by_extension
    if "application" in ct:
        return "application"
    return "other"


def should_store_content(content_type: str) -> bool:
    """True when the body is text-like and worth storing."""
    ct = content_type.lower()
    return any(t in ct for t in CONTENT_ALLOW_LIST)


def is_excluded(response_url: str, is_main_document: bool) -> bool:
    """Skip the navigation's own HTML document and source maps."""
    return is_main_document or url_mod.is_source_map(response_url)


def decode_truncated(body: bytes, limit: int) -> str:
    """Decode at most *limit* bytes of *body* as UTF-8.

    A multi-byte sequence split by the cut is dropped rather than
    replaced, so the encoded result never exceeds *limit* bytes.
    """
    return body[:limit].decode("utf-8", errors="ignore")


def build_captured_resource(
    response_url: str,
    content_type: str,
    body: bytes,
    limit: int = DEFAULT_CAPTURE_LIMIT_BYTES,
) -> network.CapturedResource:
    """Build the captured record for one buffered response body."""
    file_name = url_mod.file_name_from_url(response_url)
    content = decode_truncated(body, limit) if should_store_content(content_type) else ""
    return network.CapturedResource(
        url=response_url,
        file_name=file_name,
        classified_type=classify(content_type, file_name),
        content=content,
        size_kb=serialization.bytes_to_kb(len(body)),
        content_type=content_type,
    )


# ============================================================================
# Listener
# ============================================================================


def _is_main_document(response: async_api.Response) -> bool:
    try:
        request = response.request
        if not request.is_navigation_request():
            return False
        return request.frame.parent_frame is None
    except Exception:
        # Service-worker requests have no frame; they are never the main document.
        return False


class ContentCapture:
    """Buffers and classifies response bodies, last write per URL wins."""

    def __init__(self, limit_bytes: int = DEFAULT_CAPTURE_LIMIT_BYTES) -> None:
        self._limit = limit_bytes
        self._by_url: dict[str, network.CapturedResource] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self._page: async_api.Page | None = None
        self.failures = 0

    @property
    def resources(self) -> list[network.CapturedResource]:
        return list(self._by_url.values())

    def attach(self, page: async_api.Page) -> None:
        """Subscribe to the page's responses."""
        self._page = page
        page.on("response", self._on_response)

    def _on_response(self, response: async_api.Response) -> None:
        try:
            if is_excluded(response.url, _is_main_document(response)):
                return
            task = asyncio.get_running_loop().create_task(self.capture(response))
        except Exception as exc:
            log.warn("Failed to schedule response capture", {"error": errors.get_error_message(exc)})
            return
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def capture(self, response: Any) -> network.CapturedResource | None:
        """Read and record one response body; failures only drop this resource."""
        response_url = response.url
        try:
            content_type = response.headers.get("content-type", "")
            body = await response.body()
        except Exception as exc:
            self.failures += 1
            log.warn("Could not read response body", {"url": response_url, "error": errors.get_error_message(exc)})
            return None

        resource = build_captured_resource(response_url, content_type, body, self._limit)
        self._by_url[response_url] = resource
        log.debug(
            "Captured resource",
            {"file": resource.file_name, "type": resource.classified_type, "sizeKB": resource.size_kb},
        )
        return resource

    async def drain(self, timeout_ms: int) -> None:
        """Wait, bounded by *timeout_ms*, for in-flight body reads."""
        pending = {t for t in self._tasks if not t.done()}
        if not pending:
            return
        _, still_pending = await asyncio.wait(pending, timeout=timeout_ms / 1000)
        if still_pending:
            log.debug("Body reads still pending after drain", {"pending": len(still_pending)})

    def detach(self) -> None:
        """Unsubscribe from the page and cancel unfinished body reads."""
        page, self._page = self._page, None
        if page is not None:
            try:
                page.remove_listener("response", self._on_response)
            except Exception as exc:
                log.debug("Listener removal failed", {"error": errors.get_error_message(exc)})
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
