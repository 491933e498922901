from __future__ import annotations

import logging

import gradio as gr

from src.page_timing import timed_page_load
from src.pages.console_common import HIDDEN_CLASS, load_console_actions_js, load_console_css
from src.pages.header import with_light_mode_head
from src.pages.reviews.core_reviews import (
    PAGE_PATH,
    SCOPE,
    _approve_review,
    _cancel_delete,
    _change_search,
    _change_status_filter,
    _close_review_form,
    _close_view,
    _confirm_delete,
    _dismiss_toast,
    _drop_reviews_session,
    _header_reviews,
    _load_reviews_page,
    _open_create_review,
    _open_edit_review,
    _open_view,
    _preview_review_image,
    _refresh_reviews,
    _request_delete,
    _submit_review,
    _tick_toasts,
    review_counter,
)
from src.view_filter import STATUS_FILTER_CHOICES, StatusFilter

logger = logging.getLogger(__name__)


def _actions_head() -> str:
    script = load_console_actions_js()
    if not script:
        return ""
    return f"<script>\n({script})();\n</script>"


def _hidden_textbox(name: str) -> gr.Textbox:
    return gr.Textbox(
        value="",
        show_label=False,
        container=False,
        interactive=True,
        elem_id=f"{SCOPE}-{name}",
        elem_classes=[HIDDEN_CLASS],
    )


def _hidden_trigger(action: str) -> gr.Button:
    return gr.Button(action, elem_id=f"{SCOPE}-{action}-trigger", elem_classes=[HIDDEN_CLASS])


def make_reviews_app() -> gr.Blocks:
    with gr.Blocks(
        title="Reviews Management",
        css=load_console_css() or None,
        head=with_light_mode_head(_actions_head()),
    ) as app:
        hdr = gr.HTML()
        toasts_html = gr.HTML(elem_id=f"{SCOPE}-toasts")
        with gr.Column(elem_id=f"{SCOPE}-shell"):
            with gr.Row(elem_classes=["console-toolbar"]):
                gr.Markdown("## Reviews Management\nManage and moderate customer reviews")
                refresh_btn = gr.Button("🔄 Refresh", variant="secondary", scale=0, min_width=120)
                add_btn = gr.Button("➕ Add Review", variant="primary", scale=0, min_width=140)
            stats_html = gr.HTML()
            with gr.Row(elem_classes=["console-toolbar"]):
                search_box = gr.Textbox(
                    label="Search",
                    placeholder="Search by name, role, or email...",
                    scale=4,
                )
                status_filter = gr.Radio(
                    choices=list(STATUS_FILTER_CHOICES),
                    value=StatusFilter.ALL.value,
                    label="Status",
                    scale=2,
                )
            showing_html = gr.HTML()
            cards_html = gr.HTML(elem_id=f"{SCOPE}-cards")

            selected_id = _hidden_textbox("selected-id")
            toast_id = _hidden_textbox("toast-id")
            view_trigger = _hidden_trigger("view")
            edit_trigger = _hidden_trigger("edit")
            approve_trigger = _hidden_trigger("approve")
            delete_trigger = _hidden_trigger("delete")
            dismiss_trigger = _hidden_trigger("dismiss")
            pending_delete_id = gr.State("")

        with gr.Column(visible=False, elem_classes=["modal-overlay"]) as form_modal:
            with gr.Column(elem_classes=["modal-content"]):
                form_title = gr.Markdown("### Add New Review")
                with gr.Row():
                    with gr.Column():
                        name_input = gr.Textbox(label="Name *", placeholder="Enter name")
                        name_error = gr.Markdown(elem_classes=["field-error"])
                    with gr.Column():
                        email_input = gr.Textbox(label="Email *", placeholder="Enter email")
                        email_error = gr.Markdown(elem_classes=["field-error"])
                role_input = gr.Textbox(label="Role *", placeholder="e.g., CEO at Company")
                role_error = gr.Markdown(elem_classes=["field-error"])
                review_input = gr.Textbox(
                    label="Review *",
                    placeholder="Write the review...",
                    lines=5,
                )
                review_count = gr.Markdown(review_counter(""))
                review_error = gr.Markdown(elem_classes=["field-error"])
                with gr.Row():
                    image_input = gr.File(
                        label="Image (optional, max 5MB)",
                        file_types=["image"],
                        type="filepath",
                    )
                    image_preview = gr.Image(label="Preview", interactive=False, height=160)
                image_error = gr.Markdown(elem_classes=["field-error"])
                with gr.Row():
                    cancel_form_btn = gr.Button("Cancel", variant="secondary")
                    submit_btn = gr.Button("Create Review", variant="primary")

        with gr.Column(visible=False, elem_classes=["modal-overlay"]) as view_modal:
            with gr.Column(elem_classes=["modal-content"]):
                gr.Markdown("### Review Details")
                view_html = gr.HTML()
                close_view_btn = gr.Button("Close", variant="secondary")

        with gr.Column(visible=False, elem_classes=["modal-overlay"]) as delete_modal:
            with gr.Column(elem_classes=["modal-content"]):
                gr.Markdown("### Delete review")
                delete_prompt = gr.Markdown()
                with gr.Row():
                    delete_cancel_btn = gr.Button("Cancel", variant="secondary")
                    delete_confirm_btn = gr.Button("Delete", variant="stop")

        toast_timer = gr.Timer(1.0)

        list_outputs = [stats_html, showing_html, cards_html, toasts_html]
        form_outputs = [
            form_modal,
            form_title,
            name_input,
            email_input,
            role_input,
            review_input,
            image_input,
            image_preview,
            review_count,
            name_error,
            email_error,
            role_error,
            review_error,
            image_error,
            submit_btn,
            toasts_html,
        ]
        error_outputs = [name_error, email_error, role_error, review_error, image_error]

        app.load(timed_page_load(PAGE_PATH, _header_reviews), outputs=[hdr])
        app.load(timed_page_load(PAGE_PATH, _load_reviews_page), outputs=list_outputs)
        app.unload(_drop_reviews_session)

        refresh_btn.click(
            timed_page_load(PAGE_PATH, _refresh_reviews, label="refresh_reviews"),
            outputs=list_outputs,
        )
        status_filter.change(
            timed_page_load(PAGE_PATH, _change_status_filter, label="change_status_filter"),
            inputs=[status_filter],
            outputs=[showing_html, cards_html],
            show_progress="hidden",
        )
        search_box.change(
            timed_page_load(PAGE_PATH, _change_search, label="change_search"),
            inputs=[search_box],
            outputs=[showing_html, cards_html],
            show_progress="hidden",
        )

        approve_trigger.click(
            timed_page_load(PAGE_PATH, _approve_review, label="approve_review"),
            inputs=[selected_id],
            outputs=list_outputs,
            concurrency_limit=None,
            show_progress="hidden",
        )
        delete_trigger.click(
            timed_page_load(PAGE_PATH, _request_delete, label="request_delete"),
            inputs=[selected_id],
            outputs=[delete_modal, delete_prompt, pending_delete_id, toasts_html],
        )
        delete_cancel_btn.click(
            _cancel_delete,
            outputs=[delete_modal, delete_prompt, pending_delete_id],
        )
        delete_confirm_btn.click(
            timed_page_load(PAGE_PATH, _confirm_delete, label="confirm_delete"),
            inputs=[pending_delete_id],
            outputs=[delete_modal, pending_delete_id, view_modal, *list_outputs],
            concurrency_limit=None,
            show_progress="hidden",
        )
        view_trigger.click(
            timed_page_load(PAGE_PATH, _open_view, label="open_view"),
            inputs=[selected_id],
            outputs=[view_modal, view_html, toasts_html],
        )
        close_view_btn.click(_close_view, outputs=[view_modal, view_html])

        add_btn.click(
            timed_page_load(PAGE_PATH, _open_create_review, label="open_create_review"),
            outputs=form_outputs,
        )
        edit_trigger.click(
            timed_page_load(PAGE_PATH, _open_edit_review, label="open_edit_review"),
            inputs=[selected_id],
            outputs=form_outputs,
        )
        cancel_form_btn.click(_close_review_form, outputs=[form_modal, *error_outputs])
        review_input.change(
            review_counter,
            inputs=[review_input],
            outputs=[review_count],
            show_progress="hidden",
        )
        image_input.change(
            _preview_review_image,
            inputs=[image_input],
            outputs=[image_error, image_preview],
            show_progress="hidden",
        )
        submit_btn.click(
            timed_page_load(PAGE_PATH, _submit_review, label="submit_review"),
            inputs=[name_input, email_input, role_input, review_input, image_input],
            outputs=[form_modal, *error_outputs, submit_btn, *list_outputs],
            concurrency_limit=None,
        )

        toast_timer.tick(_tick_toasts, outputs=[toasts_html], show_progress="hidden")
        dismiss_trigger.click(
            _dismiss_toast,
            inputs=[toast_id],
            outputs=[toasts_html],
            show_progress="hidden",
        )

    return app
