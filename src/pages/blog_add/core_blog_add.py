from __future__ import annotations

import logging
from typing import Optional

import gradio as gr

from src.console import ActionOutcome, ContentConsole, build_blog_console
from src.entities import DEFAULT_BLOG_CATEGORY
from src.forms import MAX_EXCERPT_LENGTH, BlogFormInput, FieldErrors
from src.pages.console_common import (
    ConsoleRegistry,
    attachments_from_uploads,
    current_toasts,
    dismiss_toast,
    field_error,
    render_toasts,
    session_key,
)
from src.pages.header import render_header
from src.settings import load_settings

logger = logging.getLogger(__name__)

PAGE_PATH = "/add"
SCOPE = "blog"
FORM_FIELDS = ("title", "excerpt", "content", "category", "images")


def _new_blog_console() -> ContentConsole:
    return build_blog_console(load_settings())


_REGISTRY = ConsoleRegistry(_new_blog_console)


def _console(request: gr.Request) -> ContentConsole:
    return _REGISTRY.get(session_key(request))


def _header_blog_add(request: gr.Request):
    return render_header(path=PAGE_PATH, request=request)


def excerpt_counter(text: str) -> str:
    return f"{len(text or '')}/{MAX_EXCERPT_LENGTH} characters"


def _field_errors(errors: FieldErrors):
    return tuple(field_error(errors, key) for key in FORM_FIELDS)


def _load_blog_add_page(request: gr.Request):
    console = _REGISTRY.reset(session_key(request))
    console.mount()
    return render_toasts(console.feed, SCOPE)


def _reset_outputs():
    return ("", "", "", DEFAULT_BLOG_CATEGORY, None, excerpt_counter(""))


def _submit_outputs(
    console: ContentConsole,
    *,
    errors: Optional[FieldErrors] = None,
    submitting: bool = False,
    reset: bool = False,
):
    submit_update = gr.update(
        value="Publishing..." if submitting else "Publish Blog Post",
        interactive=not submitting,
    )
    fields = _reset_outputs() if reset else tuple(gr.update() for _ in range(6))
    return (
        *fields,
        *_field_errors(errors or {}),
        submit_update,
        render_toasts(console.feed, SCOPE),
    )


def _submit_blog_post(title: str, excerpt: str, content: str, category: str, uploads, request: gr.Request):
    console = _console(request)
    images, read_error = attachments_from_uploads(uploads)
    form = BlogFormInput(
        title=title or "",
        excerpt=excerpt or "",
        content=content or "",
        category=category or DEFAULT_BLOG_CATEGORY,
        images=images,
    )
    errors = console.form.validate(form, creating=True)
    if read_error:
        errors["images"] = read_error
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
    if outcome.succeeded:
        logger.info("blog_add.published title=%r images=%d", form.title.strip(), len(images))
    yield _submit_outputs(console, errors=outcome.errors, reset=outcome.succeeded)


def _clear_blog_form():
    return (*_reset_outputs(), *_field_errors({}))


def _tick_blog_toasts(request: gr.Request):
    return current_toasts(_REGISTRY, request, SCOPE)


def _dismiss_blog_toast(toast_id: str, request: gr.Request):
    return dismiss_toast(_console(request).feed, toast_id, SCOPE)


def _drop_blog_session(request: gr.Request):
    _REGISTRY.drop(session_key(request))
