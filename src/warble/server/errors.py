"""Error handling for warble requests.

Maps HTTPError exceptions and unexpected failures to Responses, using
registered error handlers or plain-text defaults.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from warble._internal.invoke import invoke
from warble.errors import HTTPError
from warble.http.request import Request
from warble.http.response import Response
from warble.rendering.pipeline import RenderPipeline
from warble.server.negotiation import negotiate

logger = logging.getLogger("warble.server")

type ErrorHandlers = dict[int | type, Callable[..., Any]]


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    pipeline: RenderPipeline | None,
) -> Response:
    """Invoke a user-registered error handler.

    Error handlers may accept zero, one (request), or two (request, exc)
    args, and may return anything a route handler can, including ``Tag``.
    """
    params = list(inspect.signature(handler).parameters.values())
    args = (request, exc)[: len(params)]
    result = await invoke(handler, *args)
    return await negotiate(result, pipeline=pipeline)


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    pipeline: RenderPipeline | None,
    debug: bool,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc, pipeline)
        # Keep the error status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    response = Response(body=detail, status=exc.status, content_type="text/plain; charset=utf-8")
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    pipeline: RenderPipeline | None,
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(500) or error_handlers.get(type(exc))
    if handler is not None:
        return await call_error_handler(handler, request, exc, pipeline)

    body = f"Internal Server Error\n\n{type(exc).__name__}: {exc}" if debug else "Internal Server Error"
    return Response(body=body, status=500, content_type="text/plain; charset=utf-8")
