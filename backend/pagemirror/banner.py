"""Fixed header injected into every served mirror page."""

import re

BODY_OPEN_RE = re.compile(r"<body[^>]*>", re.IGNORECASE)

MIRROR_HEADER = """
    <!-- page mirror header -->
    <style>.toc-fixed{top:3rem!important;}@media (max-width: 1280px) {
    .toc-fixed {left:0!important;}}</style>
    <div id="pagemirror-header" style="
      position: fixed;
      top: 0;
      left: 0;
      right: 0;
      height: 40px;
      background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
      color: white;
      z-index: 9999;
      display: flex;
      align-items: center;
      justify-content: space-between;
      padding: 0 20px;
      box-shadow: 0 2px 10px rgba(0,0,0,0.1);
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
    ">
      <div style="font-size: 16px; font-weight: bold;">Page Mirror</div>
    </div>
"""


def inject_banner(html: str) -> str:
    """Insert MIRROR_HEADER right after the first <body> tag, or prepend it."""
    match = BODY_OPEN_RE.search(html)
    if not match:
        return MIRROR_HEADER + html
    return html[:match.end()] + MIRROR_HEADER + html[match.end():]
