from __future__ import annotations

import html
import logging
from typing import Dict, Optional

import gradio as gr

from src.action_state import ActionKind
from src.console import ActionOutcome, ContentConsole, build_faq_console
from src.entities import Faq, format_date
from src.forms import FaqFormInput, FieldErrors
from src.pages.console_common import (
    ConsoleRegistry,
    action_button,
    busy_states,
    current_toasts,
    dismiss_toast,
    field_error,
    render_empty_state,
    render_showing_stats,
    render_toasts,
    render_total_stats,
    session_key,
)
from src.pages.header import render_header
from src.settings import load_settings

logger = logging.getLogger(__name__)

PAGE_PATH = "/faq"
SCOPE = "faq"
FORM_FIELDS = ("question", "answer")


def _new_faq_console() -> ContentConsole:
    return build_faq_console(load_settings())


_REGISTRY = ConsoleRegistry(_new_faq_console)


def _console(request: gr.Request) -> ContentConsole:
    return _REGISTRY.get(session_key(request))


def _header_faq(request: gr.Request):
    return render_header(path=PAGE_PATH, request=request)


def _render_faq_card(faq: Faq, state: ActionKind) -> str:
    busy = state is not ActionKind.IDLE
    buttons = [
        action_button(SCOPE, "edit", faq.id, "✏️", title="Edit FAQ", disabled=busy),
        action_button(
            SCOPE,
            "delete",
            faq.id,
            "🗑️",
            title="Delete FAQ",
            busy=state is ActionKind.DELETING,
            disabled=busy,
            variant="danger",
        ),
    ]
    return f"""
<article class="console-card" data-entity-id="{html.escape(faq.id, quote=True)}">
  <div class="console-card__head">
    <p class="console-card__title">{html.escape(faq.question)}</p>
    <div class="console-card__actions">{''.join(buttons)}</div>
  </div>
  <div class="console-card__body">{html.escape(faq.answer)}</div>
  <span class="console-card__meta">{html.escape(format_date(faq.created_at))}</span>
</article>
""".strip()


def _render_faq_cards(console: ContentConsole, busy: Optional[Dict[str, ActionKind]] = None) -> str:
    visible = console.visible()
    if not visible:
        return render_empty_state(
            load_failed=console.load_failed,
            has_entities=bool(len(console.store)),
            plural=console.labels.plural,
        )
    states = busy_states(console.tracker, busy)
    cards = [_render_faq_card(faq, states.get(faq.id, ActionKind.IDLE)) for faq in visible]
    return f'<div class="console-grid">{"".join(cards)}</div>'


def _list_outputs(console: ContentConsole, *, busy: Optional[Dict[str, ActionKind]] = None):
    return (
        render_total_stats(len(console.store), console.labels.plural),
        render_showing_stats(
            len(console.visible()), len(console.store), console.labels.plural, console.search_term
        ),
        _render_faq_cards(console, busy),
        render_toasts(console.feed, SCOPE),
    )


def _field_errors(errors: FieldErrors):
    return tuple(field_error(errors, key) for key in FORM_FIELDS)


def _submit_label(console: ContentConsole) -> str:
    return "Update FAQ" if console.editing_id else "Create FAQ"


def _load_faq_page(request: gr.Request):
    console = _REGISTRY.reset(session_key(request))
    console.mount()
    logger.info("faq.load session=%s total=%d failed=%s", session_key(request), len(console.store), console.load_failed)
    return _list_outputs(console)


def _refresh_faq(request: gr.Request):
    console = _console(request)
    console.refresh()
    return _list_outputs(console)


def _change_faq_search(search_term: str, request: gr.Request):
    console = _console(request)
    console.set_search_term(search_term)
    _, showing, cards, _ = _list_outputs(console)
    return showing, cards


def _request_delete_faq(entity_id: str, request: gr.Request):
    console = _console(request)
    selected = str(entity_id or "").strip()
    faq = console.store.get(selected)
    if faq is None or console.tracker.is_busy(selected):
        if faq is None and selected:
            console.feed.error("That FAQ no longer exists. Refresh the list.")
        return gr.update(visible=False), "", "", render_toasts(console.feed, SCOPE)
    prompt = f"Are you sure you want to delete **{faq.question}**?"
    return gr.update(visible=True), prompt, selected, render_toasts(console.feed, SCOPE)


def _cancel_delete_faq():
    return gr.update(visible=False), "", ""


def _confirm_delete_faq(pending_id: str, request: gr.Request):
    console = _console(request)
    selected = str(pending_id or "").strip()
    if not selected or console.tracker.is_busy(selected):
        yield (gr.update(visible=False), "", *_list_outputs(console))
        return
    yield (gr.update(visible=False), "", *_list_outputs(console, busy={selected: ActionKind.DELETING}))
    outcome = console.delete(selected)
    logger.info("faq.delete id=%s outcome=%s", selected, outcome.value)
    yield (gr.update(visible=False), "", *_list_outputs(console))


def _form_outputs(console: ContentConsole, *, title: str, values: Dict[str, str]):
    return (
        gr.update(visible=console.form_open),
        f"### {title}",
        values.get("question", ""),
        values.get("answer", ""),
        *_field_errors({}),
        gr.update(value=_submit_label(console), interactive=not console.tracker.submitting),
        render_toasts(console.feed, SCOPE),
    )


def _open_create_faq(request: gr.Request):
    console = _console(request)
    console.open_create()
    return _form_outputs(console, title="Add New FAQ", values={})


def _open_edit_faq(entity_id: str, request: gr.Request):
    console = _console(request)
    faq = console.open_edit(str(entity_id or "").strip())
    return _form_outputs(console, title="Edit FAQ", values=faq.form_values() if faq else {})


def _close_faq_form(request: gr.Request):
    _console(request).close_form()
    return gr.update(visible=False), *_field_errors({})


def _submit_outputs(console: ContentConsole, *, errors: Optional[FieldErrors] = None, submitting: bool = False, with_list: bool = False):
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


def _submit_faq(question: str, answer: str, request: gr.Request):
    console = _console(request)
    form = FaqFormInput(question=question or "", answer=answer or "")
    errors = console.form.validate(form, creating=console.editing_id is None)
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


def _tick_faq_toasts(request: gr.Request):
    return current_toasts(_REGISTRY, request, SCOPE)


def _dismiss_faq_toast(toast_id: str, request: gr.Request):
    return dismiss_toast(_console(request).feed, toast_id, SCOPE)


def _drop_faq_session(request: gr.Request):
    _REGISTRY.drop(session_key(request))
