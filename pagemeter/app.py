"""
Service entry point — FastAPI app exposing on-demand measurements.
Authentication and persistence live in the calling service, not here.
"""

from __future__ import annotations

import contextlib
import os
from collections.abc import AsyncGenerator
from typing import Any

import dotenv
import fastapi
import pydantic
import uvicorn

from pagemeter import config
from pagemeter.measurement import engine, sweep
from pagemeter.utils import errors, logger, url as url_mod

dotenv.load_dotenv()

log = logger.create_logger("Server")

HOST = os.environ.get("UVICORN_HOST", "0.0.0.0")
PORT = int(os.environ.get("UVICORN_PORT", "3000"))


class MeasureRequest(pydantic.BaseModel):
    """Body of ``POST /api/metrics``."""

    url: str = ""


class SweepRequest(pydantic.BaseModel):
    """Body of ``POST /api/sweep``."""

    urls: list[str] = pydantic.Field(default_factory=list)


def _require_url(value: str) -> str:
    url = value.strip()
    if not url:
        raise fastapi.HTTPException(status_code=400, detail="Missing 'url' field")
    if not url_mod.is_absolute_http_url(url):
        raise fastapi.HTTPException(status_code=400, detail=f"Not an absolute http(s) URL: {url}")
    return url


@contextlib.asynccontextmanager
async def lifespan(_app: fastapi.FastAPI) -> AsyncGenerator[None]:
    """Log server start on startup."""
    log.section("pagemeter server started")
    log.info("Settings", config.get_settings().model_dump(exclude={"vitals_script_url"}))
    yield


app = fastapi.FastAPI(title="pagemeter", lifespan=lifespan)


# ============================================================================
# API Routes
# ============================================================================


@app.post("/api/metrics")
async def measure_endpoint(body: MeasureRequest) -> dict[str, Any]:
    """Measure one URL and return the camelCase report."""
    url = _require_url(body.url)
    log.info("Incoming measurement request", {"url": url})
    try:
        measurement = await engine.measure(url, config.get_settings())
    except errors.SessionLaunchError as exc:
        log.error("Browser launch failed", {"error": errors.get_error_message(exc)})
        raise fastapi.HTTPException(status_code=503, detail=errors.get_error_message(exc)) from exc
    return measurement.model_dump(by_alias=True)


@app.post("/api/sweep")
async def sweep_endpoint(body: SweepRequest) -> list[dict[str, Any]]:
    """Measure every URL sequentially; per-URL failures are reported inline."""
    urls = [_require_url(u) for u in body.urls]
    outcomes = await sweep.sweep(urls, settings=config.get_settings(), measure_fn=engine.measure)
    return [
        {
            "url": o.url,
            "ok": o.ok,
            "error": o.error,
            "measurement": o.measurement.model_dump(by_alias=True) if o.measurement else None,
        }
        for o in outcomes
    ]


# ============================================================================
# Start Server
# ============================================================================


def main() -> None:
    """Entry point for running the server."""
    log.success(f"Server listening on {HOST}:{PORT}")
    uvicorn.run("pagemeter.app:app", host=HOST, port=PORT)


if __name__ == "__main__":
    main()
