"""ASGI handler — translates ASGI scope/messages to warble types.

The only component that touches raw ASGI directly. Converts scope dicts
to typed Request objects, dispatches through middleware and routing,
and sends the Response back through ASGI send().
"""

import inspect
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from warble._internal.asgi import Receive, Scope, Send
from warble._internal.invoke import invoke
from warble.errors import HTTPError
from warble.http.request import Request
from warble.http.response import Response
from warble.middleware.protocol import Next
from warble.rendering.pipeline import RenderPipeline
from warble.routing.route import RouteMatch
from warble.routing.router import Router
from warble.server.errors import ErrorHandlers, handle_http_error, handle_internal_error
from warble.server.negotiation import negotiate
from warble.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: ErrorHandlers,
    pipeline: RenderPipeline | None,
    debug: bool,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    async def dispatch(req: Request) -> Response:
        match = router.match(req.method, req.path)
        return await _invoke_handler(match, req, pipeline=pipeline)

    # Wrap middleware around the dispatch, first registered outermost
    handler: Next = dispatch
    for mw in reversed(middleware):

        async def make_next(req: Request, _mw: Any = mw, _next: Next = handler) -> Response:
            return await _mw(req, _next)

        handler = make_next

    try:
        response = await handler(request)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, pipeline, debug)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, pipeline, debug)

    await send_response(response, send, head=request.method == "HEAD")


async def _invoke_handler(
    match: RouteMatch,
    request: Request,
    *,
    pipeline: RenderPipeline | None,
) -> Response:
    """Call the matched route handler and negotiate its return value."""
    request = replace(request, path_params=match.path_params)
    kwargs = _build_handler_kwargs(match.route.handler, request, match.path_params)
    result = await invoke(match.route.handler, **kwargs)
    return await negotiate(result, pipeline=pipeline)


def _build_handler_kwargs(
    handler: Callable[..., Any],
    request: Request,
    path_params: dict[str, Any],
) -> dict[str, Any]:
    """Inspect the handler signature and build kwargs.

    ``request`` (by name or ``Request`` annotation) receives the request;
    other parameters are filled from path parameters by name.
    """
    sig = inspect.signature(handler, eval_str=True)
    kwargs: dict[str, Any] = {}
    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif name in path_params:
            kwargs[name] = path_params[name]
    return kwargs
