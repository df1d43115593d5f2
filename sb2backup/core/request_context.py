from __future__ import annotations

import logging
import re
import time
import uuid

from fastapi import Request, Response

logger = logging.getLogger("sb2backup.http")

# Client ids end up in a response header and the log file, so only short tokens are echoed.
_CLIENT_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")


def resolve_request_id(header_value: str | None) -> str:
    if header_value and _CLIENT_REQUEST_ID.fullmatch(header_value):
        return header_value
    return uuid.uuid4().hex


async def request_logging_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    request_id = resolve_request_id(request.headers.get("X-Request-ID"))
    request.state.request_id = request_id
    started = time.perf_counter()

    response: Response = await call_next(request)

    elapsed_ms = (time.perf_counter() - started) * 1000
    response.headers["X-Request-ID"] = request_id
    logger.info(
        "%s %s -> %s in %.1fms request_id=%s",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
        request_id,
    )
    return response
