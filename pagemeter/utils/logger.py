"""
Logging utility with timestamps and timing support.
Provides structured, colourful console output for tracking measurement stages.

Timers are stored in a ``contextvars.ContextVar`` so that measurements
running in separate asyncio tasks do not clobber each other's timings.
The minimum level printed is read from ``PAGEMETER_LOG_LEVEL``.
"""

from __future__ import annotations

import contextvars
import os
import sys
import time
from datetime import UTC, datetime
from typing import NamedTuple

# ============================================================================
# Per-task state
# ============================================================================

_timers_var: contextvars.ContextVar[dict[str, tuple[float, str]]] = contextvars.ContextVar("_timers_var")


def _get_timers() -> dict[str, tuple[float, str]]:
    """Return the per-context timer dict, creating it on first access."""
    try:
        return _timers_var.get()
    except LookupError:
        timers: dict[str, tuple[float, str]] = {}
        _timers_var.set(timers)
        return timers


# ============================================================================
# Levels and ANSI Colours
# ============================================================================

_RESET = "\033[0m"
_BRIGHT = "\033[1m"
_DIM = "\033[2m"
_GRAY = "\033[90m"
_BLUE = "\033[34m"


class _Style(NamedTuple):
    rank: int
    colour: str
    symbol: str


# Level name -> (threshold rank, colour, glyph).
_STYLES: dict[str, _Style] = {
    "debug": _Style(10, _GRAY, "•"),
    "timing": _Style(15, "\033[35m", "⏱"),
    "info": _Style(20, "\033[36m", "ℹ"),
    "success": _Style(20, "\033[32m", "✓"),
    "warn": _Style(30, "\033[33m", "⚠"),
    "error": _Style(40, "\033[31m", "✗"),
}


def _threshold() -> int:
    """Return the rank below which lines are dropped (``PAGEMETER_LOG_LEVEL``)."""
    style = _STYLES.get(os.environ.get("PAGEMETER_LOG_LEVEL", "debug").lower())
    return style.rank if style else _STYLES["debug"].rank


def _clock() -> str:
    now = datetime.now(UTC)
    return f"{now:%H:%M:%S}.{now.microsecond // 1000:03d}"


def format_duration(ms: float) -> str:
    """Render *ms* as ``850ms``, ``2.35s`` or ``1m 4.2s``."""
    if ms < 1000:
        return f"{int(ms)}ms"
    if ms < 60000:
        return f"{ms / 1000:.2f}s"
    minutes, rest = divmod(ms, 60000)
    return f"{int(minutes)}m {rest / 1000:.1f}s"


def _paint(value: object) -> str:
    """Colour one structured-data value for the console."""
    if value is None:
        return f"{_DIM}None{_RESET}"
    if isinstance(value, bool):
        return f"{_STYLES['success'].colour if value else _STYLES['error'].colour}{value}{_RESET}"
    if isinstance(value, (int, float)):
        return f"{_STYLES['warn'].colour}{value}{_RESET}"
    if isinstance(value, str):
        shown = value if len(value) <= 200 else value[:197] + "..."
        return f'{_STYLES["success"].colour}"{shown}"{_RESET}'
    if isinstance(value, (list, tuple)):
        return f"{_STYLES['info'].colour}[{len(value)} items]{_RESET}"
    if isinstance(value, dict):
        return f"{_STYLES['info'].colour}{{{len(value)} keys}}{_RESET}"
    return str(value)


# ============================================================================
# Logger Class
# ============================================================================


class Logger:
    """Console logger tagged with a component name, with stage timers."""

    def __init__(self, context: str = "Meter") -> None:
        self._context = context

    @property
    def context(self) -> str:
        return self._context

    def _emit(self, level: str, message: str, data: dict[str, object] | None = None) -> None:
        style = _STYLES.get(level, _STYLES["info"])
        if style.rank < _threshold():
            return
        line = f"{_GRAY}[{_clock()}]{_RESET} {style.colour}{style.symbol}{_RESET} {_BRIGHT}[{self._context}]{_RESET} {message}"
        if data:
            line += " " + " ".join(f"{_DIM}{k}={_RESET}{_paint(v)}" for k, v in data.items())
        print(line, file=sys.stderr)

    def info(self, message: str, data: dict[str, object] | None = None) -> None:
        self._emit("info", message, data)

    def success(self, message: str, data: dict[str, object] | None = None) -> None:
        self._emit("success", message, data)

    def warn(self, message: str, data: dict[str, object] | None = None) -> None:
        self._emit("warn", message, data)

    def error(self, message: str, data: dict[str, object] | None = None) -> None:
        self._emit("error", message, data)

    def debug(self, message: str, data: dict[str, object] | None = None) -> None:
        self._emit("debug", message, data)

    def start_timer(self, label: str) -> None:
        """Start timing a measurement stage named *label*."""
        _get_timers()[f"{self._context}:{label}"] = (time.monotonic() * 1000, _clock())
        self._emit("timing", f"Starting: {label}")

    def end_timer(self, label: str, message: str | None = None) -> float:
        """Stop the *label* timer, log the elapsed time and return it in ms.

        An unknown label logs a warning and returns ``0.0``.
        """
        entry = _get_timers().pop(f"{self._context}:{label}", None)
        if entry is None:
            self.warn(f'Timer "{label}" was not started')
            return 0.0

        started_ms, started_at = entry
        elapsed = time.monotonic() * 1000 - started_ms
        took = f"{_STYLES['timing'].colour}{format_duration(elapsed)}{_RESET}"
        self._emit("timing", f"{message or f'Completed: {label}'} {_DIM}took{_RESET} {took} {_DIM}(started {started_at}){_RESET}")
        return elapsed

    def section(self, title: str) -> None:
        """Print a banner separating one measurement from the next."""
        if _STYLES["info"].rank < _threshold():
            return
        rule = f"{_BLUE}{'─' * 60}{_RESET}"
        print(f"\n{rule}\n{_BLUE}{_BRIGHT}  {title}{_RESET}\n{rule}\n", file=sys.stderr)


def create_logger(context: str) -> Logger:
    """Return a :class:`Logger` tagged with *context*."""
    return Logger(context)
