"""ASGI server layer — request handling, errors, and the dev server."""
