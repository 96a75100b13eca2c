"""
Message viewer mounted under a path prefix of the gateway.

Messages are fetched from the node one at a time through the same one-shot
pull source the invite routes use. Errors stay inside the viewer: they never
take the gateway down.
"""

import html
import json
import logging
import re
from typing import Any
from urllib.parse import quote

from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse

from gateway.pull import first, one_shot

logger = logging.getLogger(__name__)

# Sigil-prefixed keys: %msg, @feed, &blob
KEY_PATTERN = re.compile(r"[%@&][A-Za-z0-9+/]+=*\.[a-z0-9]+")


def _link_keys(text: str, base: str) -> str:
    def repl(match: re.Match) -> str:
        key = match.group(0)
        return f"<a href='{html.escape(base + quote(key, safe='@&=+.'))}'>{html.escape(key)}</a>"

    parts = []
    pos = 0
    for match in KEY_PATTERN.finditer(text):
        parts.append(html.escape(text[pos:match.start()], quote=False))
        parts.append(repl(match))
        pos = match.end()
    parts.append(html.escape(text[pos:], quote=False))
    return "".join(parts)


def _page(title: str, body: str) -> str:
    return f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8">
  <title>{html.escape(title)}</title>
  <link rel="stylesheet" href="/style.css">
</head>
<body>
  <main class="card">
{body}
  </main>
</body>
</html>"""


def make_viewer(node: Any, base: str = "/view/") -> FastAPI:
    """Build the viewer app; ``base`` is the prefix it is mounted at, with trailing slash."""
    viewer = FastAPI(title="Message viewer", docs_url=None, redoc_url=None, openapi_url=None)

    @viewer.get("/", response_class=HTMLResponse)
    async def viewer_index():
        body = (
            "    <h2>Viewer</h2>\n"
            f"    <p class='muted'>Open <code>{html.escape(base)}&lt;message key&gt;</code> to view a message.</p>\n"
            f"    <p>Node: {_link_keys(node.id, base)}</p>"
        )
        return HTMLResponse(content=_page("Viewer", body))

    @viewer.get("/{key:path}", response_class=HTMLResponse)
    async def view_message(key: str):
        if not hasattr(node, "get_message"):
            raise HTTPException(status_code=404, detail="Node does not serve messages")

        try:
            message = await first(one_shot(lambda cb: node.get_message(key, cb)))
        except Exception as e:
            logger.error(f"Failed to load message {key}: {e}")
            raise HTTPException(status_code=502, detail="Failed to load message from node")

        if message is None:
            raise HTTPException(status_code=404, detail="Message not found")

        pretty = json.dumps(message, indent=2, sort_keys=True, ensure_ascii=False)
        body = (
            f"    <h2>{html.escape(key)}</h2>\n"
            f"    <pre>{_link_keys(pretty, base)}</pre>\n"
            f"    <p><a href='{html.escape(base)}'>Viewer</a></p>"
        )
        return HTMLResponse(content=_page(key, body))

    return viewer
