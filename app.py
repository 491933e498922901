import logging

import gradio as gr
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.pages.blog_add.app_blog_add import make_blog_add_app
from src.pages.faq.app_faq import make_faq_app
from src.pages.influencers.app_influencers import make_influencers_app
from src.pages.reviews.app_reviews import make_reviews_app
from src.settings import load_settings

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title="DigitalLab Admin Console")

DEFAULT_PAGE = "/reviews"


@app.get("/_routes")
def _routes():
    return [getattr(r, "path", str(r)) for r in app.router.routes]


@app.get("/")
async def root_redirect() -> RedirectResponse:
    return RedirectResponse(url=f"{DEFAULT_PAGE}/")


settings = load_settings()
logger.info("Admin console using backend %s", settings.api_base_url)

# --- Console pages
reviews_app     = make_reviews_app()
faq_app         = make_faq_app()
influencers_app = make_influencers_app()
blog_add_app    = make_blog_add_app()

gr.mount_gradio_app(app, reviews_app,     "/reviews")
gr.mount_gradio_app(app, faq_app,         "/faq")
gr.mount_gradio_app(app, influencers_app, "/influencers")
gr.mount_gradio_app(app, blog_add_app,    "/add")
