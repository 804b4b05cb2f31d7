"""Static demo page served outside the proxy route."""

from html import escape

from core.config import Config

_PAGE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>CORS Gateway</title>
  <style>
    body {{ font-family: Arial, sans-serif; margin: 20px; }}
    code {{ background: #f5f5f5; padding: 2px 4px; border-radius: 2px; }}
    .result {{ background: #f5f5f5; padding: 10px; font-family: monospace; white-space: pre-wrap; }}
  </style>
</head>
<body>
  <h1>CORS Gateway</h1>
  <p>Call <code>{prefix}?apiurl=&lt;absolute URL&gt;</code> to forward a request.</p>
  <h2>Allowed targets</h2>
  <ul>{targets}</ul>
  <h2>Allowed origins</h2>
  <ul>{origins}</ul>
  <button onclick="tryGateway()">Fetch first target</button>
  <div id="result" class="result"></div>
  <script>
    async function tryGateway() {{
      const out = document.getElementById('result');
      try {{
        const response = await fetch('{prefix}?apiurl={first_target}');
        out.textContent = response.status + ' ' + response.statusText + '\\n' + await response.text();
      }} catch (error) {{
        out.textContent = 'Blocked: ' + error.message;
      }}
    }}
  </script>
</body>
</html>
"""


def render_demo_page(config: Config) -> str:
    """Render the demo page for the configured allow-lists."""
    targets = config.targets.allowed_targets
    return _PAGE.format(
        prefix=escape(config.proxy.prefix),
        targets="".join(f"<li>{escape(t)}</li>" for t in targets),
        origins="".join(f"<li>{escape(o)}</li>" for o in config.cors.allowed_origins),
        first_target=escape(targets[0] + "/get" if targets else ""),
    )
