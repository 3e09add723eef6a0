"""Tests for pagemeter.utils.logger — console output and stage timers."""

from __future__ import annotations

import pytest

from pagemeter.utils.logger import create_logger, format_duration


class TestFormatDuration:
    def test_milliseconds(self) -> None:
        assert format_duration(850.7) == "850ms"

    def test_seconds(self) -> None:
        assert format_duration(2500) == "2.50s"

    def test_minutes(self) -> None:
        assert format_duration(64_200) == "1m 4.2s"


class TestLogger:
    def test_context_and_data_in_line(self, capsys: pytest.CaptureFixture[str]) -> None:
        create_logger("Vitals").info("Collected", {"metrics": 5})
        err = capsys.readouterr().err
        assert "[Vitals]" in err
        assert "Collected" in err
        assert "metrics=" in err

    def test_level_threshold(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        monkeypatch.setenv("PAGEMETER_LOG_LEVEL", "warn")
        log = create_logger("Measure")
        log.debug("hidden detail")
        log.info("hidden info")
        log.warn("shown warning")
        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown warning" in err

    def test_timer_returns_elapsed(self) -> None:
        log = create_logger("Measure")
        log.start_timer("navigation")
        assert log.end_timer("navigation") >= 0

    def test_unknown_timer(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert create_logger("Measure").end_timer("never-started") == 0.0
        assert 'Timer "never-started" was not started' in capsys.readouterr().err
