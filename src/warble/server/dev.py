"""Development server.

Starts a pounce ASGI server with the live warble App object. Tag sources
reload through the app's own watcher, so pounce's code reload stays off
unless an import string is given.
"""


def run_dev_server(
    app: object,
    host: str,
    port: int,
    *,
    app_path: str | None = None,
    log_level: str = "info",
) -> None:
    """Start a pounce dev server for *app*.

    Args:
        app: ASGI callable (warble App instance).
        host: Bind host address.
        port: Bind port number.
        app_path: Optional ``"module:attribute"`` import string. When
            provided, pounce reimports the app when Python files change.
        log_level: Log level (debug, info, warning, error, critical).
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        reload=app_path is not None,
        log_level=log_level,
    )
    server = Server(config, app, app_path=app_path)
    server.run()
