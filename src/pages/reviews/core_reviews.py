from __future__ import annotations

import html
import logging
from typing import Dict, Optional

import gradio as gr

from src.action_state import ActionKind
from src.console import ActionOutcome, ContentConsole, build_review_console
from src.entities import Review, format_date
from src.forms import MIN_REVIEW_LENGTH, FieldErrors, ReviewFormInput
from src.pages.console_common import (
    ConsoleRegistry,
    action_button,
    attachment_from_upload,
    avatar_url,
    busy_states,
    current_toasts,
    dismiss_toast,
    field_error,
    render_empty_state,
    render_moderation_stats,
    render_showing_stats,
    render_toasts,
    session_key,
)
from src.pages.header import render_header
from src.settings import load_settings

logger = logging.getLogger(__name__)

PAGE_PATH = "/reviews"
SCOPE = "reviews"
FORM_FIELDS = ("name", "email", "role", "review", "image")


def _new_review_console() -> ContentConsole:
    return build_review_console(load_settings())


_REGISTRY = ConsoleRegistry(_new_review_console)


def _console(request: gr.Request) -> ContentConsole:
    return _REGISTRY.get(session_key(request))


def _uploads_base() -> str:
    return load_settings().uploads_base_url


def _header_reviews(request: gr.Request):
    return render_header(path=PAGE_PATH, request=request)


# -- rendering ------------------------------------------------------------------


def _status_badge(review: Review) -> str:
    if review.approved:
        return '<span class="console-badge console-badge--approved">Approved</span>'
    return '<span class="console-badge console-badge--pending">Pending</span>'


def _render_review_card(review: Review, state: ActionKind) -> str:
    busy = state is not ActionKind.IDLE
    name = html.escape(review.name or "Anonymous")
    buttons = [
        action_button(SCOPE, "view", review.id, "👁️", title="View details", disabled=busy),
        action_button(SCOPE, "edit", review.id, "✏️", title="Edit review", disabled=busy),
    ]
    if not review.approved:
        buttons.append(
            action_button(
                SCOPE,
                "approve",
                review.id,
                "✅",
                title="Approve review",
                busy=state is ActionKind.APPROVING,
                disabled=busy,
                variant="positive",
            )
        )
    buttons.append(
        action_button(
            SCOPE,
            "delete",
            review.id,
            "🗑️",
            title="Delete review",
            busy=state is ActionKind.DELETING,
            disabled=busy,
            variant="danger",
        )
    )
    created = format_date(review.created_at)
    return f"""
<article class="console-card" data-entity-id="{html.escape(review.id, quote=True)}">
  <div class="console-card__head">
    <div class="console-card__identity">
      <img class="console-card__avatar" src="{html.escape(avatar_url(review.image_ref, review.name, _uploads_base()), quote=True)}" alt="{name}" loading="lazy"/>
      <div>
        <p class="console-card__title">{name}</p>
        <p class="console-card__subtitle">{html.escape(review.role)}</p>
        <p class="console-card__meta">{html.escape(review.email)}</p>
      </div>
    </div>
    {_status_badge(review)}
  </div>
  <div class="console-card__body">{html.escape(review.review_text)}</div>
  <div class="console-card__foot">
    <span class="console-card__meta">{html.escape(created)}</span>
    <div class="console-card__actions">{''.join(buttons)}</div>
  </div>
</article>
""".strip()


def _render_review_cards(console: ContentConsole, busy: Optional[Dict[str, ActionKind]] = None) -> str:
    visible = console.visible()
    if not visible:
        return render_empty_state(
            load_failed=console.load_failed,
            has_entities=bool(len(console.store)),
            plural=console.labels.plural,
        )
    states = busy_states(console.tracker, busy)
    cards = [_render_review_card(review, states.get(review.id, ActionKind.IDLE)) for review in visible]
    return f'<div class="console-grid">{"".join(cards)}</div>'


def _render_showing(console: ContentConsole) -> str:
    return render_showing_stats(
        len(console.visible()),
        len(console.store),
        console.labels.plural,
        console.search_term,
    )


def _render_stats(console: ContentConsole) -> str:
    return render_moderation_stats(console.counts(), console.published_count())


def _list_outputs(
    console: ContentConsole,
    *,
    busy: Optional[Dict[str, ActionKind]] = None,
    with_stats: bool = True,
):
    stats = _render_stats(console) if with_stats else gr.update()
    return (
        stats,
        _render_showing(console),
        _render_review_cards(console, busy),
        render_toasts(console.feed, SCOPE),
    )


def _render_review_details(review: Review) -> str:
    status = "Approved" if review.approved else "Pending approval"
    created = format_date(review.created_at) or "Unknown"
    return f"""
<div class="console-details">
  <div class="console-card__identity">
    <img class="console-card__avatar" src="{html.escape(avatar_url(review.image_ref, review.name, _uploads_base()), quote=True)}" alt=""/>
    <div>
      <h3 class="console-card__title">{html.escape(review.name)}</h3>
      <p class="console-card__subtitle">{html.escape(review.role)}</p>
      <p class="console-card__meta">{html.escape(review.email)}</p>
    </div>
  </div>
  <p>{_status_badge(review)} <span class="console-card__meta">{html.escape(status)} · submitted {html.escape(created)}</span></p>
  <p class="console-details__text">{html.escape(review.review_text)}</p>
</div>
""".strip()


def review_counter(text: str) -> str:
    count = len((text or "").strip())
    return f"{count}/{MIN_REVIEW_LENGTH} characters minimum"


def _submit_label(console: ContentConsole) -> str:
    return "Update Review" if console.editing_id else "Create Review"


def _field_errors(errors: FieldErrors):
    return tuple(field_error(errors, key) for key in FORM_FIELDS)


# -- page load / filters -------------------------------------------------------


def _load_reviews_page(request: gr.Request):
    console = _REGISTRY.reset(session_key(request))
    console.mount()
    logger.info(
        "reviews.load session=%s total=%d failed=%s",
        session_key(request),
        len(console.store),
        console.load_failed,
    )
    return _list_outputs(console)


def _refresh_reviews(request: gr.Request):
    console = _console(request)
    console.refresh()
    return _list_outputs(console)


def _change_status_filter(status_filter: str, request: gr.Request):
    console = _console(request)
    console.set_status_filter(status_filter)
    return _render_showing(console), _render_review_cards(console)


def _change_search(search_term: str, request: gr.Request):
    console = _console(request)
    console.set_search_term(search_term)
    return _render_showing(console), _render_review_cards(console)


# -- row actions ----------------------------------------------------------------


def _approve_review(entity_id: str, request: gr.Request):
    console = _console(request)
    selected = str(entity_id or "").strip()
    if not selected or console.tracker.is_busy(selected):
        yield _list_outputs(console, with_stats=False)
        return
    yield _list_outputs(console, busy={selected: ActionKind.APPROVING}, with_stats=False)
    outcome = console.approve(selected)
    yield _list_outputs(console, with_stats=outcome is ActionOutcome.SUCCEEDED)


def _request_delete(entity_id: str, request: gr.Request):
    console = _console(request)
    selected = str(entity_id or "").strip()
    review = console.store.get(selected)
    if review is None or console.tracker.is_busy(selected):
        if review is None and selected:
            console.feed.error("That review no longer exists. Refresh the list.")
        return gr.update(visible=False), "", "", render_toasts(console.feed, SCOPE)
    prompt = (
        f"Are you sure you want to delete the review from **{review.name or 'Anonymous'}**? "
        "This cannot be undone."
    )
    return gr.update(visible=True), prompt, selected, render_toasts(console.feed, SCOPE)


def _cancel_delete():
    return gr.update(visible=False), "", ""


def _confirm_delete(pending_id: str, request: gr.Request):
    console = _console(request)
    selected = str(pending_id or "").strip()
    if not selected or console.tracker.is_busy(selected):
        yield (gr.update(visible=False), "", gr.update(), *_list_outputs(console, with_stats=False))
        return
    yield (
        gr.update(visible=False),
        "",
        gr.update(),
        *_list_outputs(console, busy={selected: ActionKind.DELETING}, with_stats=False),
    )
    outcome = console.delete(selected)
    yield (
        gr.update(visible=False),
        "",
        gr.update(visible=console.viewing_id is not None),
        *_list_outputs(console, with_stats=outcome is ActionOutcome.SUCCEEDED),
    )


def _open_view(entity_id: str, request: gr.Request):
    console = _console(request)
    review = console.view(str(entity_id or "").strip())
    if review is None:
        console.feed.error("That review no longer exists. Refresh the list.")
        return gr.update(visible=False), "", render_toasts(console.feed, SCOPE)
    return gr.update(visible=True), _render_review_details(review), render_toasts(console.feed, SCOPE)


def _close_view(request: gr.Request):
    _console(request).close_view()
    return gr.update(visible=False), ""


# -- form -------------------------------------------------------------------------


def _form_outputs(
    console: ContentConsole,
    *,
    title: str,
    values: Dict[str, str],
    preview: Optional[str],
):
    return (
        gr.update(visible=console.form_open),
        f"### {title}",
        values.get("name", ""),
        values.get("email", ""),
        values.get("role", ""),
        values.get("review", ""),
        None,
        preview,
        review_counter(values.get("review", "")),
        *_field_errors({}),
        gr.update(value=_submit_label(console), interactive=not console.tracker.submitting),
        render_toasts(console.feed, SCOPE),
    )


def _open_create_review(request: gr.Request):
    console = _console(request)
    console.open_create()
    return _form_outputs(console, title="Add New Review", values={}, preview=None)


def _open_edit_review(entity_id: str, request: gr.Request):
    console = _console(request)
    review = console.open_edit(str(entity_id or "").strip())
    if review is None:
        return _form_outputs(console, title="Edit Review", values={}, preview=None)
    preview = avatar_url(review.image_ref, review.name, _uploads_base()) if review.image_ref else None
    return _form_outputs(console, title="Edit Review", values=review.form_values(), preview=preview)


def _close_review_form(request: gr.Request):
    _console(request).close_form()
    return gr.update(visible=False), *_field_errors({})


def _preview_review_image(upload, request: gr.Request):
    console = _console(request)
    attachment, read_error = attachment_from_upload(upload)
    if read_error:
        return field_error({"image": read_error}, "image"), None
    if attachment is None:
        review = console.store.get(console.editing_id) if console.editing_id else None
        if review is not None and review.image_ref:
            return "", avatar_url(review.image_ref, review.name, _uploads_base())
        return "", None
    errors = console.form.validate(ReviewFormInput(image=attachment), creating=console.editing_id is None)
    if "image" in errors:
        return field_error(errors, "image"), None
    return "", _upload_preview_path(upload)


def _upload_preview_path(upload) -> Optional[str]:
    if isinstance(upload, str):
        return upload
    return getattr(upload, "name", None) or getattr(upload, "path", None)


def _submit_outputs(
    console: ContentConsole,
    *,
    errors: Optional[FieldErrors] = None,
    submitting: bool = False,
    with_list: bool = False,
):
    if submitting:
        submit_update = gr.update(value="Saving...", interactive=False)
    else:
        submit_update = gr.update(value=_submit_label(console), interactive=True)
    if with_list:
        stats, showing, cards, toasts = _list_outputs(console)
    else:
        stats, showing, cards = gr.update(), gr.update(), gr.update()
        toasts = render_toasts(console.feed, SCOPE)
    return (
        gr.update(visible=console.form_open),
        *_field_errors(errors or {}),
        submit_update,
        stats,
        showing,
        cards,
        toasts,
    )


def _submit_review(name: str, email: str, role: str, review: str, upload, request: gr.Request):
    console = _console(request)
    attachment, read_error = attachment_from_upload(upload)
    form = ReviewFormInput(
        name=name or "",
        email=email or "",
        role=role or "",
        review=review or "",
        image=attachment,
    )
    errors = console.form.validate(form, creating=console.editing_id is None)
    if read_error:
        errors["image"] = read_error
    if errors:
        yield _submit_outputs(console, errors=errors)
        return
    if console.tracker.submitting:
        yield _submit_outputs(console, submitting=True)
        return

    yield _submit_outputs(console, submitting=True)
    outcome = console.submit(form)
    if outcome.status is ActionOutcome.IGNORED:
        yield _submit_outputs(console, submitting=True)
        return
    yield _submit_outputs(console, errors=outcome.errors, with_list=outcome.succeeded)


# -- notifications / session --------------------------------------------------------


def _tick_toasts(request: gr.Request):
    return current_toasts(_REGISTRY, request, SCOPE)


def _dismiss_toast(toast_id: str, request: gr.Request):
    return dismiss_toast(_console(request).feed, toast_id, SCOPE)


def _drop_reviews_session(request: gr.Request):
    _REGISTRY.drop(session_key(request))
