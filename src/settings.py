from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

_REPO_ROOT = Path(__file__).resolve().parents[1]
SECRETS_DIR = _REPO_ROOT / "secrets"

DEFAULT_BACKEND_URL = "http://localhost:4000"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 15.0
DEFAULT_TOAST_SECONDS = 5.0
DEFAULT_MAX_IMAGE_BYTES = 5 * 1024 * 1024


def env_file_path(env: str) -> Path:
    return SECRETS_DIR / f"env.{env}"


def get_setting(name: str, default: Optional[str] = None) -> str:
    """
    Resolution order:
      1) NAME (process env, usually populated from secrets/env.<env>)
      2) default
      3) else raise RuntimeError
    """
    if (v := os.getenv(name)) is not None and v.strip():
        return v.strip()
    if default is not None:
        return default
    raise RuntimeError(f"Missing setting {name}")


def _float_setting(name: str, default: float) -> float:
    raw_value = get_setting(name, default=str(default))
    try:
        parsed = float(raw_value)
    except (TypeError, ValueError):
        logger.warning("Invalid %s=%r; using default %s.", name, raw_value, default)
        return default
    if parsed <= 0:
        logger.warning("Non-positive %s=%r; using default %s.", name, raw_value, default)
        return default
    return parsed


def _int_setting(name: str, default: int) -> int:
    raw_value = get_setting(name, default=str(default))
    try:
        parsed = int(raw_value)
    except (TypeError, ValueError):
        logger.warning("Invalid %s=%r; using default %s.", name, raw_value, default)
        return default
    if parsed <= 0:
        logger.warning("Non-positive %s=%r; using default %s.", name, raw_value, default)
        return default
    return parsed


@dataclass(frozen=True)
class ConsoleSettings:
    api_base_url: str = DEFAULT_BACKEND_URL
    review_path: str = "/api/review"
    faq_path: str = "/api/faq"
    influencer_path: str = "/api/influencers"
    blog_path: str = "/api/blogs"
    uploads_base_url: str = f"{DEFAULT_BACKEND_URL}/uploads"
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    toast_seconds: float = DEFAULT_TOAST_SECONDS
    max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES

    def resource_url(self, path: str) -> str:
        return f"{self.api_base_url.rstrip('/')}/{path.strip('/')}"


@lru_cache(maxsize=1)
def load_settings() -> ConsoleSettings:
    base_url = get_setting("DIGITALLAB_BACKEND_URL", default=DEFAULT_BACKEND_URL).rstrip("/")
    settings = ConsoleSettings(
        api_base_url=base_url,
        review_path=get_setting("DIGITALLAB_REVIEW_PATH", default="/api/review"),
        faq_path=get_setting("DIGITALLAB_FAQ_PATH", default="/api/faq"),
        influencer_path=get_setting("DIGITALLAB_INFLUENCER_PATH", default="/api/influencers"),
        blog_path=get_setting("DIGITALLAB_BLOG_PATH", default="/api/blogs"),
        uploads_base_url=get_setting("DIGITALLAB_UPLOADS_URL", default=f"{base_url}/uploads").rstrip("/"),
        request_timeout_seconds=_float_setting(
            "DIGITALLAB_REQUEST_TIMEOUT_SECONDS", DEFAULT_REQUEST_TIMEOUT_SECONDS
        ),
        toast_seconds=_float_setting("DIGITALLAB_TOAST_SECONDS", DEFAULT_TOAST_SECONDS),
        max_image_bytes=_int_setting("DIGITALLAB_MAX_IMAGE_BYTES", DEFAULT_MAX_IMAGE_BYTES),
    )
    logger.info("Console settings loaded: backend=%s", settings.api_base_url)
    return settings
