"""Content negotiation — maps handler return values to Responses.

isinstance-based dispatch, no magic, fully predictable. ``Tag`` values
go through the render pipeline, which is why negotiation is async.
"""

import json as json_module
from typing import Any

from warble.errors import ConfigurationError
from warble.http.response import Redirect, Response
from warble.rendering.pipeline import RenderPipeline
from warble.rendering.returns import Tag


async def negotiate(value: Any, *, pipeline: RenderPipeline | None = None) -> Response:
    """Convert a route handler's return value to a Response.

    Dispatch order:

    1. ``Response``            -> pass through
    2. ``Redirect``            -> 302 with Location header
    3. ``Tag``                 -> render pipeline -> full HTML page
    4. ``str``                 -> 200, text/html
    5. ``bytes``               -> 200, application/octet-stream
    6. ``dict`` / ``list``     -> 200, application/json
    7. ``(value, int)``        -> negotiate value, override status
    8. ``(value, int, dict)``  -> negotiate value, override status + headers
    """
    match value:
        case Response():
            return value
        case Redirect():
            return (
                Response(body="")
                .with_status(value.status)
                .with_header("Location", value.url)
                .with_headers(dict(value.headers))
            )
        case Tag():
            if pipeline is None:
                msg = "Tag return type requires the render pipeline. Return it from an App route."
                raise ConfigurationError(msg)
            return await pipeline.render(value.to_request())
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(
                body=json_module.dumps(value, default=str),
                content_type="application/json; charset=utf-8",
            )
        case (inner, int() as status):
            response = await negotiate(inner, pipeline=pipeline)
            return response.with_status(status)
        case (inner, int() as status, dict() as headers):
            response = await negotiate(inner, pipeline=pipeline)
            return response.with_status(status).with_headers(headers)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                "Return Tag, str, dict, bytes, Response, or Redirect."
            )
            raise TypeError(msg)
