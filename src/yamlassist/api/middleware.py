"""Middleware: request timing and body size limits."""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

_DOCUMENT_PATHS = ("/lint", "/completions", "/validate")
_MAX_BODY_DOCUMENT = 5 * 1024 * 1024  # 5 MB for document endpoints
_MAX_BODY_DEFAULT = 64 * 1024  # 64 KB for everything else


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Add X-Request-Duration header with processing time."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = (time.monotonic() - start) * 1000
        response.headers["X-Request-Duration-Ms"] = f"{duration_ms:.1f}"
        return response


class RequestBodyLimitMiddleware(BaseHTTPMiddleware):
    """Reject request bodies that exceed size limits.

    Document endpoints allow up to 5 MB; all other endpoints are capped at
    64 KB.  The Content-Length header is checked first, then the streamed
    byte count, so oversized bodies are never buffered whole.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        limit = _MAX_BODY_DOCUMENT if path.endswith(_DOCUMENT_PATHS) else _MAX_BODY_DEFAULT
        too_large = JSONResponse(
            status_code=413,
            content={"detail": f"Request body too large (max {limit // 1024} KB)"},
        )

        content_length = request.headers.get("content-length")
        if content_length is not None and content_length.isdigit() and int(content_length) > limit:
            return too_large

        if request.method in ("POST", "PUT", "PATCH"):
            chunks: list[bytes] = []
            total = 0
            async for chunk in request.stream():
                total += len(chunk)
                if total > limit:
                    return too_large
                chunks.append(chunk)
            # Cache consumed body so downstream can call request.body()
            request._body = b"".join(chunks)  # noqa: SLF001

        return await call_next(request)
