"""
Browser session management for a single measurement.

Each BrowserSession owns one isolated Chromium instance, context and
page.  ``open_session`` wraps the lifecycle in an async context
manager so the browser is released exactly once on every exit path.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
from collections.abc import AsyncIterator
from typing import Literal

from playwright import async_api

from pagemeter import config
from pagemeter.models import browser
from pagemeter.utils import errors, logger

log = logger.create_logger("BrowserSession")

WaitUntil = Literal["commit", "domcontentloaded", "load", "networkidle"]


def resolve_executable_path(settings: config.MeasurementSettings) -> str | None:
    """Return the configured Chromium binary, or ``None`` for Playwright's bundled one.

    Raises:
        SessionLaunchError: A path is configured but does not exist.
    """
    path = settings.browser_executable_path
    if not path:
        return None
    if not os.path.exists(path):
        raise errors.SessionLaunchError(f"Configured browser executable not found: {path}", executable_path=path)
    return path


class BrowserSession:
    """
    Manages an isolated browser session for a single URL measurement.
    """

    def __init__(self, settings: config.MeasurementSettings) -> None:
        """Initialise a new, not yet launched, browser session."""
        self._settings = settings
        self._playwright: async_api.Playwright | None = None
        self._browser: async_api.Browser | None = None
        self._context: async_api.BrowserContext | None = None
        self._page: async_api.Page | None = None
        self._closed = False

    # ==========================================================================
    # State Getters
    # ==========================================================================

    @property
    def page(self) -> async_api.Page:
        """Return the active Playwright page."""
        if not self._page:
            raise RuntimeError("No browser session active")
        return self._page

    @property
    def is_closed(self) -> bool:
        return self._closed

    # ==========================================================================
    # Browser Lifecycle
    # ==========================================================================

    async def launch_browser(self) -> None:
        """Launch headless Chromium with a fixed viewport and sandbox disabled.

        Raises:
            SessionLaunchError: Playwright or Chromium failed to start.
        """
        settings = self._settings
        executable_path = resolve_executable_path(settings)
        log.info("Launching browser", {"executablePath": executable_path or "bundled", "headless": settings.headless})

        try:
            self._playwright = await async_api.async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=settings.headless,
                executable_path=executable_path,
                args=settings.launch_args(),
            )
            self._context = await self._browser.new_context(
                viewport={"width": settings.viewport_width, "height": settings.viewport_height},
            )
            self._page = await self._context.new_page()
        except Exception as exc:
            raise errors.SessionLaunchError(
                f"Browser launch failed: {errors.get_error_message(exc)}", executable_path=executable_path
            ) from exc

        log.debug("Browser launched", {"viewport": f"{settings.viewport_width}x{settings.viewport_height}"})

    # ==========================================================================
    # Navigation
    # ==========================================================================

    async def navigate_to(
        self,
        url: str,
        wait_until: WaitUntil = "domcontentloaded",
        timeout: int | None = None,
    ) -> browser.NavigationResult:
        """Navigate to *url*; failures are reported in the result, never raised."""
        timeout = timeout if timeout is not None else self._settings.navigation_timeout_ms
        log.debug("Navigating", {"url": url, "waitUntil": wait_until, "timeout": timeout})
        try:
            response = await self.page.goto(url, wait_until=wait_until, timeout=timeout)
        except Exception as error:
            log.warn("Navigation error, continuing with current page state", {"url": url, "error": errors.get_error_message(error)})
            return browser.NavigationResult(success=False, error_message=errors.get_error_message(error))

        status_code = response.status if response else None
        final_url = self.page.url
        if final_url and final_url != url:
            log.info("Redirected", {"from": url, "to": final_url})
        return browser.NavigationResult(
            success=True,
            status_code=status_code,
            status_text=response.status_text if response else None,
            final_url=final_url,
        )

    async def wait_for_readiness(self, selector: str | None = None, timeout: int | None = None) -> bool:
        """Best-effort wait for an application readiness marker.

        Returns:
            True if the selector appeared in time; a miss is not an error.
        """
        selector = selector if selector is not None else self._settings.readiness_selector
        timeout = timeout if timeout is not None else self._settings.readiness_timeout_ms
        if not selector:
            return False
        try:
            await self.page.wait_for_selector(selector, timeout=timeout)
            return True
        except Exception:
            log.debug("Readiness selector not found", {"selector": selector, "timeoutMs": timeout})
            return False

    async def wait_for_timeout(self, ms: int) -> None:
        """Let late paint and network events land before timings are read.

        Sleeps on the event loop; Playwright's ``page.wait_for_timeout``
        is a debugging aid.
        """
        await asyncio.sleep(ms / 1000)

    # ==========================================================================
    # Data Capture
    # ==========================================================================

    async def get_page_content(self) -> str:
        """Get the full rendered HTML of the current page."""
        return await self.page.content()

    # ==========================================================================
    # Cleanup
    # ==========================================================================

    async def close(self) -> None:
        """Close the browser and release all resources. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        context, browser_, playwright = self._context, self._browser, self._playwright
        self._page = self._context = self._browser = self._playwright = None

        # Innermost first: context, then browser, then the driver.
        for name, release in (
            ("context", context.close if context else None),
            ("browser", browser_.close if browser_ else None),
            ("playwright", playwright.stop if playwright else None),
        ):
            if release is None:
                continue
            try:
                await release()
            except Exception as exc:
                log.debug("Release failed, continuing teardown", {"resource": name, "error": errors.get_error_message(exc)})

        log.debug("Browser session released", {"launched": browser_ is not None})


@contextlib.asynccontextmanager
async def open_session(settings: config.MeasurementSettings) -> AsyncIterator[BrowserSession]:
    """Launch a session, yield it, and always close it afterwards.

    A failed launch still releases whatever was started before the
    failure, then re-raises :class:`SessionLaunchError`.
    """
    session = BrowserSession(settings)
    try:
        await session.launch_browser()
        yield session
    finally:
        await session.close()
