from __future__ import annotations

import html
import logging
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote

import gradio as gr

from src.action_state import ActionKind
from src.content_gateway import ImageAttachment
from src.entity_store import StoreCounts
from src.notifications import NotificationFeed, NotificationKind

logger = logging.getLogger(__name__)

PAGES_DIR = Path(__file__).resolve().parent
CONSOLE_CSS_PATH = PAGES_DIR / "css" / "console.css"
CONSOLE_ACTIONS_JS_PATH = PAGES_DIR / "js" / "console_actions.js"
HIDDEN_CLASS = "console-hidden"
AVATAR_FALLBACK_URL = "https://ui-avatars.com/api/?name={name}&background=ea580c&color=fff&size=150"
_TOAST_ICONS = {
    NotificationKind.SUCCESS: "✅",
    NotificationKind.ERROR: "❌",
    NotificationKind.INFO: "ℹ️",
}


def read_asset(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.warning("Missing console asset at %s", path)
        return ""


def load_console_css(extra: Optional[Path] = None) -> str:
    css = read_asset(CONSOLE_CSS_PATH)
    if extra is not None:
        css = f"{css}\n{read_asset(extra)}"
    return css


def load_console_actions_js() -> str:
    return read_asset(CONSOLE_ACTIONS_JS_PATH)


class ConsoleRegistry:
    """Per-session console instances for one page, keyed by the Gradio session hash."""

    def __init__(self, factory: Callable[[], object]) -> None:
        self._factory = factory
        self._consoles: Dict[str, object] = {}
        self._lock = threading.Lock()

    def get(self, session_key: str):
        with self._lock:
            console = self._consoles.get(session_key)
            if console is None:
                console = self._factory()
                self._consoles[session_key] = console
            return console

    def find(self, session_key: str):
        with self._lock:
            return self._consoles.get(session_key)

    def reset(self, session_key: str):
        with self._lock:
            console = self._factory()
            self._consoles[session_key] = console
            return console

    def drop(self, session_key: str) -> None:
        with self._lock:
            self._consoles.pop(session_key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._consoles)


def session_key(request: object) -> str:
    key = getattr(request, "session_hash", None)
    return str(key) if key else "anonymous"


def _extract_upload_path(uploaded: object) -> str:
    if not uploaded:
        return ""
    if isinstance(uploaded, Path):
        return str(uploaded)
    if isinstance(uploaded, str):
        return uploaded
    if isinstance(uploaded, dict):
        return str(uploaded.get("path") or uploaded.get("name") or "")
    path_attr = getattr(uploaded, "path", None) or getattr(uploaded, "name", None)
    if path_attr:
        return str(path_attr)
    return ""


def attachment_from_upload(uploaded: object) -> Tuple[Optional[ImageAttachment], Optional[str]]:
    upload_path = _extract_upload_path(uploaded)
    if not upload_path:
        return None, None
    try:
        return ImageAttachment.from_path(upload_path), None
    except OSError:
        logger.warning("Could not read uploaded file %s", upload_path, exc_info=True)
        return None, "Uploaded image could not be read."


def attachments_from_uploads(uploaded: object) -> Tuple[List[ImageAttachment], Optional[str]]:
    if not uploaded:
        return [], None
    items = uploaded if isinstance(uploaded, (list, tuple)) else [uploaded]
    attachments: List[ImageAttachment] = []
    for item in items:
        attachment, error = attachment_from_upload(item)
        if error:
            return [], error
        if attachment is not None:
            attachments.append(attachment)
    return attachments, None


def avatar_url(image_ref: Optional[str], name: str, base_url: str = "") -> str:
    ref = (image_ref or "").strip()
    if not ref:
        return AVATAR_FALLBACK_URL.format(name=quote(name or "?"))
    if ref.startswith(("http://", "https://", "/", "data:")) or not base_url:
        return ref
    return f"{base_url.rstrip('/')}/{quote(ref)}"


def busy_states(tracker, override: Optional[Dict[str, ActionKind]] = None) -> Dict[str, ActionKind]:
    states = tracker.snapshot()
    if override:
        states.update(override)
    return states


def field_error(errors: Dict[str, str], key: str) -> str:
    message = errors.get(key)
    return f"⚠️ {message}" if message else ""


def render_toasts(feed: NotificationFeed, scope: str) -> str:
    items = feed.active()
    if not items:
        return '<div class="console-toasts"></div>'
    chunks: List[str] = []
    for item in items:
        icon = _TOAST_ICONS.get(item.kind, "")
        chunks.append(
            f'<div class="console-toast console-toast--{item.kind.value}" role="status">'
            f'<span class="console-toast__icon">{icon}</span>'
            f'<span class="console-toast__text">{html.escape(item.message)}</span>'
            f'<button class="console-toast__close" data-console-scope="{scope}" '
            f'data-console-action="dismiss" data-entity-id="{item.id}" title="Dismiss">×</button>'
            "</div>"
        )
    return f'<div class="console-toasts">{"".join(chunks)}</div>'


def render_moderation_stats(counts: StoreCounts, published: Optional[int] = None) -> str:
    cells = [
        ("Total", counts.total, "total"),
        ("Approved", counts.approved, "approved"),
        ("Pending", counts.pending, "pending"),
    ]
    if published is not None:
        cells.append(("Published", published, "published"))
    return _render_stat_cells(cells)


def render_showing_stats(visible: int, total: int, label: str, search_term: str = "") -> str:
    if not total:
        return ""
    suffix = f' for "{html.escape(search_term)}"' if search_term else ""
    return f'<div class="console-showing">Showing {visible} of {total} {html.escape(label)}{suffix}</div>'


def _render_stat_cells(cells: Sequence[Tuple[str, int, str]]) -> str:
    chunks = [
        f'<div class="console-stat console-stat--{modifier}">'
        f'<div class="console-stat__label">{label}</div>'
        f'<div class="console-stat__value">{value}</div>'
        "</div>"
        for label, value, modifier in cells
    ]
    return f'<div class="console-stats">{"".join(chunks)}</div>'


def render_empty_state(*, load_failed: bool, has_entities: bool, plural: str) -> str:
    if load_failed:
        title = f"Could not load {plural}"
        hint = "The content service did not answer. Use Refresh once it is back."
    elif not has_entities:
        title = f"No {plural} yet"
        hint = "Create the first one to get started."
    else:
        title = f"No {plural} found"
        hint = "Try adjusting your search or filter criteria."
    return (
        '<div class="console-empty">'
        f'<p class="console-empty__title">{html.escape(title)}</p>'
        f'<p class="console-empty__hint">{html.escape(hint)}</p>'
        "</div>"
    )


def action_button(
    scope: str,
    action: str,
    entity_id: str,
    label: str,
    *,
    title: str,
    busy: bool = False,
    disabled: bool = False,
    variant: str = "",
) -> str:
    classes = ["console-action", f"console-action--{action}"]
    if variant:
        classes.append(f"console-action--{variant}")
    if busy:
        classes.append("is-busy")
    disabled_attr = " disabled" if (busy or disabled) else ""
    text = '<span class="console-spinner" aria-hidden="true"></span>' if busy else label
    return (
        f'<button class="{" ".join(classes)}" data-console-scope="{scope}" '
        f'data-console-action="{action}" data-entity-id="{html.escape(entity_id, quote=True)}" '
        f'title="{html.escape(title, quote=True)}"{disabled_attr}>{text}</button>'
    )


def render_total_stats(total: int, label: str) -> str:
    return _render_stat_cells([(f"Total {label}", total, "total")])


def current_toasts(registry: ConsoleRegistry, request: object, scope: str):
    """Toast column for a live session; sessions already unloaded get no update."""
    console = registry.find(session_key(request))
    if console is None:
        return gr.update()
    return render_toasts(console.feed, scope)


def dismiss_toast(feed: NotificationFeed, toast_id: object, scope: str) -> str:
    try:
        feed.dismiss(int(str(toast_id or "").strip()))
    except ValueError:
        logger.debug("Ignoring dismiss for malformed toast id %r", toast_id)
    return render_toasts(feed, scope)
