from __future__ import annotations

import html
import logging
from typing import Dict, Optional

import gradio as gr

from src.action_state import ActionKind
from src.console import ActionOutcome, ContentConsole, build_influencer_console
from src.entities import Influencer
from src.forms import FieldErrors, InfluencerFormInput
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
    render_showing_stats,
    render_toasts,
    render_total_stats,
    session_key,
)
from src.pages.header import render_header
from src.settings import load_settings

logger = logging.getLogger(__name__)

PAGE_PATH = "/influencers"
SCOPE = "influencers"
FORM_FIELDS = ("name", "desc", "pic")


def _new_influencer_console() -> ContentConsole:
    return build_influencer_console(load_settings())


_REGISTRY = ConsoleRegistry(_new_influencer_console)


def _console(request: gr.Request) -> ContentConsole:
    return _REGISTRY.get(session_key(request))


def _picture_url(influencer: Influencer) -> str:
    return avatar_url(influencer.pic, influencer.name, load_settings().uploads_base_url)


def _header_influencers(request: gr.Request):
    return render_header(path=PAGE_PATH, request=request)


def _render_keywords(keywords) -> str:
    return "".join(f'<span class="console-chip">{html.escape(word)}</span>' for word in keywords)


def _render_influencer_card(influencer: Influencer, state: ActionKind) -> str:
    busy = state is not ActionKind.IDLE
    name = html.escape(influencer.name)
    buttons = [
        action_button(SCOPE, "edit", influencer.id, "✏️", title="Edit influencer", disabled=busy),
        action_button(
            SCOPE,
            "delete",
            influencer.id,
            "🗑️",
            title="Delete influencer",
            busy=state is ActionKind.DELETING,
            disabled=busy,
            variant="danger",
        ),
    ]
    return f"""
<article class="console-card" data-entity-id="{html.escape(influencer.id, quote=True)}">
  <div class="console-card__head">
    <div class="console-card__identity">
      <img class="console-card__avatar" src="{html.escape(_picture_url(influencer), quote=True)}" alt="{name}" loading="lazy"/>
      <p class="console-card__title">{name}</p>
    </div>
    <div class="console-card__actions">{''.join(buttons)}</div>
  </div>
  <div class="console-card__body">{html.escape(influencer.desc)}</div>
  <div>{_render_keywords(influencer.keywords)}</div>
</article>
""".strip()


def _render_influencer_cards(console: ContentConsole, busy: Optional[Dict[str, ActionKind]] = None) -> str:
    visible = console.visible()
    if not visible:
        return render_empty_state(
            load_failed=console.load_failed,
            has_entities=bool(len(console.store)),
            plural=console.labels.plural,
        )
    states = busy_states(console.tracker, busy)
    cards = [_render_influencer_card(item, states.get(item.id, ActionKind.IDLE)) for item in visible]
    return f'<div class="console-grid">{"".join(cards)}</div>'


def _list_outputs(console: ContentConsole, *, busy: Optional[Dict[str, ActionKind]] = None):
    return (
        render_total_stats(len(console.store), console.labels.plural),
        render_showing_stats(
            len(console.visible()), len(console.store), console.labels.plural, console.search_term
        ),
        _render_influencer_cards(console, busy),
        render_toasts(console.feed, SCOPE),
    )


def _field_errors(errors: FieldErrors):
    return tuple(field_error(errors, key) for key in FORM_FIELDS)


def _submit_label(console: ContentConsole) -> str:
    return "Update Influencer" if console.editing_id else "Create Influencer"


def _load_influencers_page(request: gr.Request):
    console = _REGISTRY.reset(session_key(request))
    console.mount()
    logger.info(
        "influencers.load session=%s total=%d failed=%s",
        session_key(request),
        len(console.store),
        console.load_failed,
    )
    return _list_outputs(console)


def _refresh_influencers(request: gr.Request):
    console = _console(request)
    console.refresh()
    return _list_outputs(console)


def _change_influencer_search(search_term: str, request: gr.Request):
    console = _console(request)
    console.set_search_term(search_term)
    _, showing, cards, _ = _list_outputs(console)
    return showing, cards


def _request_delete_influencer(entity_id: str, request: gr.Request):
    console = _console(request)
    selected = str(entity_id or "").strip()
    influencer = console.store.get(selected)
    if influencer is None or console.tracker.is_busy(selected):
        if influencer is None and selected:
            console.feed.error("That influencer no longer exists. Refresh the list.")
        return gr.update(visible=False), "", "", render_toasts(console.feed, SCOPE)
    prompt = f"Are you sure you want to delete **{influencer.name}**?"
    return gr.update(visible=True), prompt, selected, render_toasts(console.feed, SCOPE)


def _cancel_delete_influencer():
    return gr.update(visible=False), "", ""


def _confirm_delete_influencer(pending_id: str, request: gr.Request):
    console = _console(request)
    selected = str(pending_id or "").strip()
    if not selected or console.tracker.is_busy(selected):
        yield (gr.update(visible=False), "", *_list_outputs(console))
        return
    yield (gr.update(visible=False), "", *_list_outputs(console, busy={selected: ActionKind.DELETING}))
    console.delete(selected)
    yield (gr.update(visible=False), "", *_list_outputs(console))


def _form_outputs(console: ContentConsole, *, title: str, values: Dict[str, str], preview: Optional[str]):
    return (
        gr.update(visible=console.form_open),
        f"### {title}",
        values.get("name", ""),
        values.get("desc", ""),
        values.get("keywords", ""),
        None,
        preview,
        *_field_errors({}),
        gr.update(value=_submit_label(console), interactive=not console.tracker.submitting),
        render_toasts(console.feed, SCOPE),
    )


def _open_create_influencer(request: gr.Request):
    console = _console(request)
    console.open_create()
    return _form_outputs(console, title="Add New Influencer", values={}, preview=None)


def _open_edit_influencer(entity_id: str, request: gr.Request):
    console = _console(request)
    influencer = console.open_edit(str(entity_id or "").strip())
    if influencer is None:
        return _form_outputs(console, title="Edit Influencer", values={}, preview=None)
    preview = _picture_url(influencer) if influencer.pic else None
    return _form_outputs(
        console,
        title="Edit Influencer",
        values=influencer.form_values(),
        preview=preview,
    )


def _close_influencer_form(request: gr.Request):
    _console(request).close_form()
    return gr.update(visible=False), *_field_errors({})


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


def _submit_influencer(name: str, desc: str, keywords: str, upload, request: gr.Request):
    console = _console(request)
    attachment, read_error = attachment_from_upload(upload)
    form = InfluencerFormInput(name=name or "", desc=desc or "", keywords=keywords or "", pic=attachment)
    errors = console.form.validate(form, creating=console.editing_id is None)
    if read_error:
        errors["pic"] = read_error
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


def _tick_influencer_toasts(request: gr.Request):
    return current_toasts(_REGISTRY, request, SCOPE)


def _dismiss_influencer_toast(toast_id: str, request: gr.Request):
    return dismiss_toast(_console(request).feed, toast_id, SCOPE)


def _drop_influencers_session(request: gr.Request):
    _REGISTRY.drop(session_key(request))
