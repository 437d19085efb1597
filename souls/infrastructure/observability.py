"""Observability — access log middleware and the Souls log formatter.

Invariants:
    - One access record per HTTP request: method, path, status, duration,
      response size, and client address (the fields the first API version's
      morgan log line carried)
    - Soul-scoped records carry soul_name / action / error_code as extras
    - Extras outside LOG_FIELDS never reach the output, so a stray
      password= extra cannot leak

Design Decisions:
    - Access log as a plain @app.middleware("http") coroutine: the status and
      size are only known after call_next, and no per-request state is kept
    - Requests that raise are logged by the error handlers, not here
"""

import json
import logging
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable

from fastapi import Request, Response

ACCESS_LOGGER = "souls.access"

SOUL_FIELDS: tuple[str, ...] = ("soul_name", "action", "error_code")
REQUEST_FIELDS: tuple[str, ...] = (
    "method", "path", "status_code", "duration_ms", "response_bytes", "client",
)
LOG_FIELDS: tuple[str, ...] = SOUL_FIELDS + REQUEST_FIELDS

access_logger = logging.getLogger(ACCESS_LOGGER)


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in LOG_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Access log line per request, e.g. "POST /api/v1/souls/login 200 3.1ms"."""
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = round((time.perf_counter() - started) * 1000, 1)

    size = response.headers.get("content-length")
    access_logger.info(
        f"{request.method} {request.url.path} {response.status_code} {duration_ms}ms",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
            "response_bytes": int(size) if size is not None else None,
            "client": request.client.host if request.client else None,
        },
    )
    return response


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Install one root handler: JSON, or a single text line for local runs."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
