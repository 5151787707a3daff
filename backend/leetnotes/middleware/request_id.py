"""
LeetNotes Backend — Request ID Middleware
===========================================

What:  Gives every request a short correlation id, echoed in `X-Request-ID`.
How:   Reuses a client-supplied `X-Request-ID` when present, otherwise an
       8-char uuid4 prefix. Stored in a ContextVar so loggers and exception
       handlers can read it, and on `request.state` for route handlers.

The id appears in every error body as `request_id`, so a failed fetch or
generate call reported from the frontend can be matched to server logs.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local; concurrent requests share a thread but not this value
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_CLIENT_ID_LENGTH = 64


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID", "").strip()[:MAX_CLIENT_ID_LENGTH] or new_request_id()

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
