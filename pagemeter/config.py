"""
Measurement configuration.

Centralises every timeout, capture limit and browser launch setting
used by the engine.  Uses ``pydantic_settings.BaseSettings`` so each
field can be overridden with a ``PAGEMETER_``-prefixed environment
variable (e.g. ``PAGEMETER_NAVIGATION_TIMEOUT_MS=30000``).
"""

from __future__ import annotations

import functools

import pydantic
import pydantic_settings

WEB_VITALS_SCRIPT_URL = "https://unpkg.com/web-vitals@3/dist/web-vitals.iife.js"

# Required for running Chromium inside containers.
SANDBOX_DISABLED_ARGS: tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
)


class MeasurementSettings(pydantic_settings.BaseSettings):
    """Timeouts, limits and launch options for one measurement.

    Attributes:
        navigation_timeout_ms: Hard limit for ``page.goto``.
        readiness_selector: Selector awaited after navigation (best effort).
        readiness_timeout_ms: Limit for the readiness selector wait.
        settle_delay_ms: Fixed delay letting late paint events land.
        fcp_poll_attempts: Paint-timing probes before giving up.
        fcp_poll_interval_ms: Delay between paint-timing probes.
        vitals_timeout_ms: Deadline for the web-vitals collection.
        vitals_script_url: Remote web-vitals IIFE bundle.
        content_capture_limit_bytes: Cap on stored resource text.
        capture_drain_timeout_ms: Limit for finishing pending body reads.
        viewport_width: Page viewport width.
        viewport_height: Page viewport height.
        headless: Launch Chromium without a UI.
        browser_executable_path: Explicit Chromium binary, if any.
    """

    model_config = pydantic_settings.SettingsConfigDict(env_prefix="PAGEMETER_", extra="ignore")

    navigation_timeout_ms: int = pydantic.Field(default=15000, gt=0)
    readiness_selector: str = "main"
    readiness_timeout_ms: int = pydantic.Field(default=10000, ge=0)
    settle_delay_ms: int = pydantic.Field(default=2000, ge=0)
    fcp_poll_attempts: int = pydantic.Field(default=20, gt=0)
    fcp_poll_interval_ms: int = pydantic.Field(default=100, gt=0)
    vitals_timeout_ms: int = pydantic.Field(default=15000, gt=0)
    vitals_script_url: str = WEB_VITALS_SCRIPT_URL
    content_capture_limit_bytes: int = pydantic.Field(default=100_000, gt=0)
    capture_drain_timeout_ms: int = pydantic.Field(default=3000, ge=0)
    viewport_width: int = pydantic.Field(default=1366, gt=0)
    viewport_height: int = pydantic.Field(default=768, gt=0)
    headless: bool = True
    browser_executable_path: str | None = None

    @property
    def fcp_poll_ceiling_ms(self) -> int:
        """Upper bound for the whole first-contentful-paint poll."""
        return self.fcp_poll_attempts * self.fcp_poll_interval_ms

    def launch_args(self) -> list[str]:
        """Chromium command-line flags for a containerised launch."""
        return list(SANDBOX_DISABLED_ARGS)


@functools.lru_cache(maxsize=1)
def get_settings() -> MeasurementSettings:
    """Return the process-wide settings, read once from the environment."""
    return MeasurementSettings()
