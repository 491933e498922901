from __future__ import annotations
import html
import logging
import time
from typing import Any, Optional

from src.css.utils import load_css

timing_logger = logging.getLogger("uvicorn.error")

SITE_NAME = "DigitalLab"
NAV_LINKS: tuple[tuple[str, str, str], ...] = (
    ("reviews", "Reviews", "/reviews"),
    ("faq", "FAQ", "/faq"),
    ("influencers", "Influencers", "/influencers"),
    ("add", "Add Blog", "/add"),
)

_ICON_PATHS: dict[str, str] = {
    "reviews": (
        '<path d="M4 5a2 2 0 0 1 2-2h8l6 6v10a2 2 0 0 1-2 2H6a2 2 0 0 1-2-2V5z"/>'
        '<path d="M14 3v6h6"/>'
        '<path d="M8 13h8"/>'
        '<path d="M8 17h6"/>'
    ),
    "faq": (
        '<circle cx="12" cy="12" r="9"/>'
        '<path d="M9.5 9a2.5 2.5 0 1 1 3.5 2.3c-.6.3-1 .9-1 1.6V14"/>'
        '<path d="M12 17h.01"/>'
    ),
    "influencers": '<path d="M15 13a4 4 0 1 0-6 0c-2.67.89-5 2.8-5 5v2h16v-2c0-2.2-2.33-4.11-5-5z"/>',
    "add": '<path d="M12 5v14"/><path d="M5 12h14"/>',
}

FORCE_LIGHT_MODE_SCRIPT = """
<script>
(function() {
  const url = new URL(window.location.href);
  if (url.searchParams.get("__theme") !== "light") {
    url.searchParams.set("__theme", "light");
    window.history.replaceState(null, "", url.toString());
  }
  document.documentElement.classList.remove("dark");
  if (document.body) {
    document.body.classList.remove("dark");
  }
})();
</script>
""".strip()


def _log_timing(event_name: str, start: float, **fields: object) -> None:
    elapsed_ms = (time.perf_counter() - start) * 1000.0
    if fields:
        field_text = " ".join(f"{key}={value}" for key, value in fields.items())
        timing_logger.info("header.timing event=%s ms=%.2f %s", event_name, elapsed_ms, field_text)
        return
    timing_logger.info("header.timing event=%s ms=%.2f", event_name, elapsed_ms)


def _nav_icon_markup(key: str) -> str:
    path = _ICON_PATHS.get(key)
    if not path:
        return ""
    return (
        '<span class="hdr-link-icon" aria-hidden="true">'
        f'<svg viewBox="0 0 24 24" focusable="false" aria-hidden="true">{path}</svg>'
        "</span>"
    )


def active_key_for_path(path: str) -> str:
    normalized = "/" + (path or "").strip().strip("/").split("/", 1)[0]
    for key, _, href in NAV_LINKS:
        if normalized == href:
            return key
    return ""


def with_light_mode_head(head: Optional[str]) -> str:
    if head and head.strip():
        return f"{head}\n{FORCE_LIGHT_MODE_SCRIPT}"
    return FORCE_LIGHT_MODE_SCRIPT


def _header_html(path: str) -> str:
    css = load_css("header.css")
    active_key = active_key_for_path(path)
    links = []
    for key, label, href in NAV_LINKS:
        is_active = key == active_key
        active_class = " is-active" if is_active else ""
        aria_current = ' aria-current="page"' if is_active else ""
        links.append(
            f'<a href="{html.escape(href)}/" class="hdr-link{active_class}"{aria_current}>'
            f"{_nav_icon_markup(key)}<span>{html.escape(label)}</span></a>"
        )
    return f"""<style>
{css}
</style>
<div class="hdr-wrap">
  <div class="hdr">
    <a href="/" class="site-logo" aria-label="Home">Digital<span>Lab</span> Admin</a>
    <nav class="hdr-nav" aria-label="Main navigation">
      {''.join(links)}
    </nav>
  </div>
</div>
"""


def render_header(path: str = "/", request: Any = None, *args, **kwargs) -> str:
    start = time.perf_counter()
    header_html = _header_html(path or "/")
    _log_timing("render_header.total", start, path=path or "/", html_bytes=len(header_html))
    return header_html
