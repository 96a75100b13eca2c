import html

from gateway.qr import QRSVG


def _layout(title: str, body: str) -> str:
    return f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{html.escape(title)}</title>
  <link rel="stylesheet" href="/style.css">
</head>
<body>
{body}
</body>
</html>"""


def _qr_svg(code: QRSVG) -> str:
    return (
        f"<svg class='qr' xmlns='http://www.w3.org/2000/svg' viewBox='0 0 {int(code.size)} {int(code.size)}'"
        " shape-rendering='crispEdges'>"
        f"<path d='{html.escape(code.path)}'/>"
        "</svg>"
    )


def render_index(node_id: str, code: QRSVG) -> str:
    body = f"""  <main class="card">
    <h2>This node</h2>
    <p class="muted">Scan to follow this node from your client.</p>
    {_qr_svg(code)}
    <p><code class="id">{html.escape(node_id)}</code></p>
    <p><a class="button" href="/invited">Get an invitation</a></p>
  </main>"""
    return _layout("Node identity", body)


def render_invited(invitation: str, code: QRSVG) -> str:
    body = f"""  <main class="card">
    <h2>You are invited</h2>
    <p class="muted">This invitation can be used once. Scan it or paste it into your client.</p>
    {_qr_svg(code)}
    <p><code class="invitation">{html.escape(invitation)}</code></p>
    <p><a href="/">Back</a></p>
  </main>"""
    return _layout("Invitation", body)
