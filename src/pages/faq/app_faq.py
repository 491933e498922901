from __future__ import annotations

import gradio as gr

from src.page_timing import timed_page_load
from src.pages.console_common import HIDDEN_CLASS, load_console_actions_js, load_console_css
from src.pages.faq.core_faq import (
    PAGE_PATH,
    SCOPE,
    _cancel_delete_faq,
    _change_faq_search,
    _close_faq_form,
    _confirm_delete_faq,
    _dismiss_faq_toast,
    _drop_faq_session,
    _header_faq,
    _load_faq_page,
    _open_create_faq,
    _open_edit_faq,
    _refresh_faq,
    _request_delete_faq,
    _submit_faq,
    _tick_faq_toasts,
)
from src.pages.header import with_light_mode_head


def make_faq_app() -> gr.Blocks:
    script = load_console_actions_js()
    head = f"<script>\n({script})();\n</script>" if script else ""
    with gr.Blocks(
        title="FAQ Management",
        css=load_console_css() or None,
        head=with_light_mode_head(head),
    ) as app:
        hdr = gr.HTML()
        toasts_html = gr.HTML(elem_id=f"{SCOPE}-toasts")
        with gr.Row(elem_classes=["console-toolbar"]):
            gr.Markdown("## FAQ Management\nQuestions and answers shown on the public site")
            refresh_btn = gr.Button("🔄 Refresh", variant="secondary", scale=0, min_width=120)
            add_btn = gr.Button("➕ Add FAQ", variant="primary", scale=0, min_width=120)
        stats_html = gr.HTML()
        search_box = gr.Textbox(label="Search", placeholder="Search questions and answers...")
        showing_html = gr.HTML()
        cards_html = gr.HTML(elem_id=f"{SCOPE}-cards")

        selected_id = gr.Textbox(value="", show_label=False, container=False, elem_id=f"{SCOPE}-selected-id", elem_classes=[HIDDEN_CLASS])
        toast_id = gr.Textbox(value="", show_label=False, container=False, elem_id=f"{SCOPE}-toast-id", elem_classes=[HIDDEN_CLASS])
        edit_trigger = gr.Button("edit", elem_id=f"{SCOPE}-edit-trigger", elem_classes=[HIDDEN_CLASS])
        delete_trigger = gr.Button("delete", elem_id=f"{SCOPE}-delete-trigger", elem_classes=[HIDDEN_CLASS])
        dismiss_trigger = gr.Button("dismiss", elem_id=f"{SCOPE}-dismiss-trigger", elem_classes=[HIDDEN_CLASS])
        pending_delete_id = gr.State("")

        with gr.Column(visible=False, elem_classes=["modal-overlay"]) as form_modal:
            with gr.Column(elem_classes=["modal-content"]):
                form_title = gr.Markdown("### Add New FAQ")
                question_input = gr.Textbox(label="Question *", placeholder="Enter the question")
                question_error = gr.Markdown(elem_classes=["field-error"])
                answer_input = gr.Textbox(label="Answer *", placeholder="Enter the answer", lines=6)
                answer_error = gr.Markdown(elem_classes=["field-error"])
                with gr.Row():
                    cancel_form_btn = gr.Button("Cancel", variant="secondary")
                    submit_btn = gr.Button("Create FAQ", variant="primary")

        with gr.Column(visible=False, elem_classes=["modal-overlay"]) as delete_modal:
            with gr.Column(elem_classes=["modal-content"]):
                gr.Markdown("### Delete FAQ")
                delete_prompt = gr.Markdown()
                with gr.Row():
                    delete_cancel_btn = gr.Button("Cancel", variant="secondary")
                    delete_confirm_btn = gr.Button("Delete", variant="stop")

        toast_timer = gr.Timer(1.0)

        list_outputs = [stats_html, showing_html, cards_html, toasts_html]
        error_outputs = [question_error, answer_error]
        form_outputs = [
            form_modal,
            form_title,
            question_input,
            answer_input,
            *error_outputs,
            submit_btn,
            toasts_html,
        ]

        app.load(timed_page_load(PAGE_PATH, _header_faq), outputs=[hdr])
        app.load(timed_page_load(PAGE_PATH, _load_faq_page), outputs=list_outputs)
        app.unload(_drop_faq_session)

        refresh_btn.click(timed_page_load(PAGE_PATH, _refresh_faq, label="refresh_faq"), outputs=list_outputs)
        search_box.change(
            timed_page_load(PAGE_PATH, _change_faq_search, label="change_faq_search"),
            inputs=[search_box],
            outputs=[showing_html, cards_html],
            show_progress="hidden",
        )
        delete_trigger.click(
            timed_page_load(PAGE_PATH, _request_delete_faq, label="request_delete_faq"),
            inputs=[selected_id],
            outputs=[delete_modal, delete_prompt, pending_delete_id, toasts_html],
        )
        delete_cancel_btn.click(_cancel_delete_faq, outputs=[delete_modal, delete_prompt, pending_delete_id])
        delete_confirm_btn.click(
            timed_page_load(PAGE_PATH, _confirm_delete_faq, label="confirm_delete_faq"),
            inputs=[pending_delete_id],
            outputs=[delete_modal, pending_delete_id, *list_outputs],
            concurrency_limit=None,
            show_progress="hidden",
        )
        add_btn.click(timed_page_load(PAGE_PATH, _open_create_faq, label="open_create_faq"), outputs=form_outputs)
        edit_trigger.click(
            timed_page_load(PAGE_PATH, _open_edit_faq, label="open_edit_faq"),
            inputs=[selected_id],
            outputs=form_outputs,
        )
        cancel_form_btn.click(_close_faq_form, outputs=[form_modal, *error_outputs])
        submit_btn.click(
            timed_page_load(PAGE_PATH, _submit_faq, label="submit_faq"),
            inputs=[question_input, answer_input],
            outputs=[form_modal, *error_outputs, submit_btn, *list_outputs],
            concurrency_limit=None,
        )
        toast_timer.tick(_tick_faq_toasts, outputs=[toasts_html], show_progress="hidden")
        dismiss_trigger.click(_dismiss_faq_toast, inputs=[toast_id], outputs=[toasts_html], show_progress="hidden")

    return app
