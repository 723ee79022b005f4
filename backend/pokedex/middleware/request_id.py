"""
Pokédex API: Request ID Middleware
===================================

What:  Gives every request a short correlation id and returns it in the
       X-Request-ID response header.
How:   Reuses the id a client sends in X-Request-ID, otherwise generates
       one. The id is stored in a ContextVar, read by the access logger and
       by the exception handlers that build the error envelope.
Who:   Outermost middleware; registered last in main.create_app().
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on the same loop each see their own id.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Assigns a request id.

    Behavior:
        1. X-Request-ID present on the request → use it
        2. Otherwise → first 8 hex chars of a uuid4
        3. Store in request_id_var and request.state.request_id
        4. Echo in the response's X-Request-ID header
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
