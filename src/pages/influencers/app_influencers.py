from __future__ import annotations

import gradio as gr

from src.page_timing import timed_page_load
from src.pages.console_common import HIDDEN_CLASS, load_console_actions_js, load_console_css
from src.pages.header import with_light_mode_head
from src.pages.influencers.core_influencers import (
    PAGE_PATH,
    SCOPE,
    _cancel_delete_influencer,
    _change_influencer_search,
    _close_influencer_form,
    _confirm_delete_influencer,
    _dismiss_influencer_toast,
    _drop_influencers_session,
    _header_influencers,
    _load_influencers_page,
    _open_create_influencer,
    _open_edit_influencer,
    _refresh_influencers,
    _request_delete_influencer,
    _submit_influencer,
    _tick_influencer_toasts,
)


def make_influencers_app() -> gr.Blocks:
    script = load_console_actions_js()
    head = f"<script>\n({script})();\n</script>" if script else ""
    with gr.Blocks(
        title="Influencer Management",
        css=load_console_css() or None,
        head=with_light_mode_head(head),
    ) as app:
        hdr = gr.HTML()
        toasts_html = gr.HTML(elem_id=f"{SCOPE}-toasts")
        with gr.Row(elem_classes=["console-toolbar"]):
            gr.Markdown("## Influencer Management\nProfiles featured on the public site")
            refresh_btn = gr.Button("🔄 Refresh", variant="secondary", scale=0, min_width=120)
            add_btn = gr.Button("➕ Add Influencer", variant="primary", scale=0, min_width=160)
        stats_html = gr.HTML()
        search_box = gr.Textbox(label="Search", placeholder="Search by name, description, or keyword...")
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
                form_title = gr.Markdown("### Add New Influencer")
                name_input = gr.Textbox(label="Name *")
                name_error = gr.Markdown(elem_classes=["field-error"])
                desc_input = gr.Textbox(label="Description *", lines=4)
                desc_error = gr.Markdown(elem_classes=["field-error"])
                keywords_input = gr.Textbox(label="Keywords", placeholder="Comma separated, e.g. tech, ai, startups")
                with gr.Row():
                    pic_input = gr.File(label="Picture (max 5MB)", file_types=["image"], type="filepath")
                    pic_preview = gr.Image(label="Current picture", interactive=False, height=160)
                pic_error = gr.Markdown(elem_classes=["field-error"])
                with gr.Row():
                    cancel_form_btn = gr.Button("Cancel", variant="secondary")
                    submit_btn = gr.Button("Create Influencer", variant="primary")

        with gr.Column(visible=False, elem_classes=["modal-overlay"]) as delete_modal:
            with gr.Column(elem_classes=["modal-content"]):
                gr.Markdown("### Delete influencer")
                delete_prompt = gr.Markdown()
                with gr.Row():
                    delete_cancel_btn = gr.Button("Cancel", variant="secondary")
                    delete_confirm_btn = gr.Button("Delete", variant="stop")

        toast_timer = gr.Timer(1.0)

        list_outputs = [stats_html, showing_html, cards_html, toasts_html]
        error_outputs = [name_error, desc_error, pic_error]
        form_outputs = [
            form_modal,
            form_title,
            name_input,
            desc_input,
            keywords_input,
            pic_input,
            pic_preview,
            *error_outputs,
            submit_btn,
            toasts_html,
        ]

        app.load(timed_page_load(PAGE_PATH, _header_influencers), outputs=[hdr])
        app.load(timed_page_load(PAGE_PATH, _load_influencers_page), outputs=list_outputs)
        app.unload(_drop_influencers_session)

        refresh_btn.click(
            timed_page_load(PAGE_PATH, _refresh_influencers, label="refresh_influencers"),
            outputs=list_outputs,
        )
        search_box.change(
            timed_page_load(PAGE_PATH, _change_influencer_search, label="change_influencer_search"),
            inputs=[search_box],
            outputs=[showing_html, cards_html],
            show_progress="hidden",
        )
        delete_trigger.click(
            timed_page_load(PAGE_PATH, _request_delete_influencer, label="request_delete_influencer"),
            inputs=[selected_id],
            outputs=[delete_modal, delete_prompt, pending_delete_id, toasts_html],
        )
        delete_cancel_btn.click(_cancel_delete_influencer, outputs=[delete_modal, delete_prompt, pending_delete_id])
        delete_confirm_btn.click(
            timed_page_load(PAGE_PATH, _confirm_delete_influencer, label="confirm_delete_influencer"),
            inputs=[pending_delete_id],
            outputs=[delete_modal, pending_delete_id, *list_outputs],
            concurrency_limit=None,
            show_progress="hidden",
        )
        add_btn.click(
            timed_page_load(PAGE_PATH, _open_create_influencer, label="open_create_influencer"),
            outputs=form_outputs,
        )
        edit_trigger.click(
            timed_page_load(PAGE_PATH, _open_edit_influencer, label="open_edit_influencer"),
            inputs=[selected_id],
            outputs=form_outputs,
        )
        cancel_form_btn.click(_close_influencer_form, outputs=[form_modal, *error_outputs])
        submit_btn.click(
            timed_page_load(PAGE_PATH, _submit_influencer, label="submit_influencer"),
            inputs=[name_input, desc_input, keywords_input, pic_input],
            outputs=[form_modal, *error_outputs, submit_btn, *list_outputs],
            concurrency_limit=None,
        )
        toast_timer.tick(_tick_influencer_toasts, outputs=[toasts_html], show_progress="hidden")
        dismiss_trigger.click(
            _dismiss_influencer_toast,
            inputs=[toast_id],
            outputs=[toasts_html],
            show_progress="hidden",
        )

    return app
