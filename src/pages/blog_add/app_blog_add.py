from __future__ import annotations

import gradio as gr

from src.entities import BLOG_CATEGORIES, DEFAULT_BLOG_CATEGORY
from src.forms import MAX_BLOG_IMAGES
from src.page_timing import timed_page_load
from src.pages.blog_add.core_blog_add import (
    PAGE_PATH,
    SCOPE,
    _clear_blog_form,
    _dismiss_blog_toast,
    _drop_blog_session,
    _header_blog_add,
    _load_blog_add_page,
    _submit_blog_post,
    _tick_blog_toasts,
    excerpt_counter,
)
from src.pages.console_common import HIDDEN_CLASS, load_console_actions_js, load_console_css
from src.pages.header import with_light_mode_head


def make_blog_add_app() -> gr.Blocks:
    script = load_console_actions_js()
    head = f"<script>\n({script})();\n</script>" if script else ""
    with gr.Blocks(
        title="Add Blog Post",
        css=load_console_css() or None,
        head=with_light_mode_head(head),
    ) as app:
        hdr = gr.HTML()
        toasts_html = gr.HTML(elem_id=f"{SCOPE}-toasts")
        gr.Markdown("## Add Blog Post\nWrite a new article for the public blog")
        with gr.Column(elem_id=f"{SCOPE}-form"):
            title_input = gr.Textbox(label="Title *", placeholder="Enter blog title")
            title_error = gr.Markdown(elem_classes=["field-error"])
            excerpt_input = gr.Textbox(label="Excerpt *", placeholder="Short summary shown on the blog list", lines=2)
            excerpt_count = gr.Markdown(excerpt_counter(""))
            excerpt_error = gr.Markdown(elem_classes=["field-error"])
            content_input = gr.Textbox(label="Content *", placeholder="Write the article...", lines=12)
            content_error = gr.Markdown(elem_classes=["field-error"])
            category_input = gr.Dropdown(
                choices=list(BLOG_CATEGORIES),
                value=DEFAULT_BLOG_CATEGORY,
                label="Category *",
            )
            category_error = gr.Markdown(elem_classes=["field-error"])
            images_input = gr.File(
                label=f"Images * (1 to {MAX_BLOG_IMAGES}, max 5MB each)",
                file_types=["image"],
                file_count="multiple",
                type="filepath",
            )
            images_error = gr.Markdown(elem_classes=["field-error"])
            with gr.Row():
                clear_btn = gr.Button("Clear", variant="secondary")
                submit_btn = gr.Button("Publish Blog Post", variant="primary")

        toast_id = gr.Textbox(value="", show_label=False, container=False, elem_id=f"{SCOPE}-toast-id", elem_classes=[HIDDEN_CLASS])
        dismiss_trigger = gr.Button("dismiss", elem_id=f"{SCOPE}-dismiss-trigger", elem_classes=[HIDDEN_CLASS])
        toast_timer = gr.Timer(1.0)

        field_outputs = [title_input, excerpt_input, content_input, category_input, images_input, excerpt_count]
        error_outputs = [title_error, excerpt_error, content_error, category_error, images_error]

        app.load(timed_page_load(PAGE_PATH, _header_blog_add), outputs=[hdr])
        app.load(timed_page_load(PAGE_PATH, _load_blog_add_page), outputs=[toasts_html])
        app.unload(_drop_blog_session)

        excerpt_input.change(excerpt_counter, inputs=[excerpt_input], outputs=[excerpt_count], show_progress="hidden")
        clear_btn.click(_clear_blog_form, outputs=[*field_outputs, *error_outputs])
        submit_btn.click(
            timed_page_load(PAGE_PATH, _submit_blog_post, label="submit_blog_post"),
            inputs=[title_input, excerpt_input, content_input, category_input, images_input],
            outputs=[*field_outputs, *error_outputs, submit_btn, toasts_html],
        )
        toast_timer.tick(_tick_blog_toasts, outputs=[toasts_html], show_progress="hidden")
        dismiss_trigger.click(_dismiss_blog_toast, inputs=[toast_id], outputs=[toasts_html], show_progress="hidden")

    return app
