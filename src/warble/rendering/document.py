"""HTML document assembly for rendered tags.

Wraps a rendered tag in a full page: title from the state snapshot,
header markup, fingerprinted stylesheet links, the tag markup, a
bootstrap script carrying the snapshot and tag name for the client, and
fingerprinted script tags.
"""

import html
import json
from collections.abc import Mapping, Sequence
from typing import Any

# Characters that must not appear raw inside an inline <script>
_SCRIPT_ESCAPES = {
    ord("<"): "\\u003c",
    ord(">"): "\\u003e",
    ord("&"): "\\u0026",
    0x2028: "\\u2028",
    0x2029: "\\u2029",
}


def script_json(value: Any) -> str:
    """Serialize *value* as JSON that is safe inside an inline script."""
    return json.dumps(value, ensure_ascii=False).translate(_SCRIPT_ESCAPES)


def page_title(state: Any) -> str:
    """The snapshot's ``title``, from a mapping key or an attribute."""
    if isinstance(state, Mapping):
        title = state.get("title")
    else:
        title = getattr(state, "title", None)
    return "" if title is None else str(title)


def asset_url(path: str, fingerprint: str, path_prefix: str = "") -> str:
    """Build a cache-busted asset URL.

    Root-relative paths get *path_prefix* prepended; absolute and
    protocol-relative URLs are left alone.
    """
    url = path
    if path_prefix and path.startswith("/") and not path.startswith("//"):
        url = path_prefix.rstrip("/") + path
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}h={fingerprint}"


def build_document(
    *,
    tag_name: str,
    markup: str,
    state: Any,
    stylesheets: Sequence[str] = (),
    scripts: Sequence[str] = (),
    fingerprints: Mapping[str, str],
    head: str = "",
    path_prefix: str = "",
) -> str:
    """Assemble the full HTML page for a rendered tag.

    *fingerprints* maps every path in *stylesheets* and *scripts* to its
    fingerprint. *head* is raw markup and is not escaped.
    """
    links = "".join(
        f'<link rel="stylesheet" href="{html.escape(asset_url(p, fingerprints[p], path_prefix))}">'
        for p in stylesheets
    )
    script_tags = "".join(
        f'<script src="{html.escape(asset_url(p, fingerprints[p], path_prefix))}"></script>'
        for p in scripts
    )
    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <title>{html.escape(page_title(state))}</title>
    {head}
    {links}
  </head>
  <body>
    {markup}
    <script>
      window.state = {script_json(state)};
      window.tagName = {script_json(tag_name)};
    </script>
    {script_tags}
  </body>
</html>"""
