"""Tests for pagemeter.config — environment-backed measurement settings."""

from __future__ import annotations

import pydantic
import pytest

from pagemeter import config


class TestMeasurementSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PAGEMETER_NAVIGATION_TIMEOUT_MS", raising=False)
        settings = config.MeasurementSettings()
        assert settings.navigation_timeout_ms == 15000
        assert settings.readiness_selector == "main"
        assert settings.settle_delay_ms == 2000
        assert settings.vitals_timeout_ms == 15000
        assert settings.content_capture_limit_bytes == 100_000
        assert (settings.viewport_width, settings.viewport_height) == (1366, 768)
        assert settings.headless is True

    def test_fcp_poll_ceiling(self) -> None:
        settings = config.MeasurementSettings(fcp_poll_attempts=20, fcp_poll_interval_ms=100)
        assert settings.fcp_poll_ceiling_ms == 2000

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PAGEMETER_NAVIGATION_TIMEOUT_MS", "30000")
        monkeypatch.setenv("PAGEMETER_BROWSER_EXECUTABLE_PATH", "/usr/bin/chromium")
        settings = config.MeasurementSettings()
        assert settings.navigation_timeout_ms == 30000
        assert settings.browser_executable_path == "/usr/bin/chromium"

    def test_rejects_non_positive_timeout(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            config.MeasurementSettings(navigation_timeout_ms=0)

    def test_rejects_zero_poll_interval(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            config.MeasurementSettings(fcp_poll_interval_ms=0)

    def test_launch_args_disable_sandbox(self) -> None:
        args = config.MeasurementSettings().launch_args()
        assert "--no-sandbox" in args
        assert "--disable-setuid-sandbox" in args


class TestGetSettings:
    def test_cached(self) -> None:
        config.get_settings.cache_clear()
        try:
            assert config.get_settings() is config.get_settings()
        finally:
            config.get_settings.cache_clear()
