from __future__ import annotations

from contextlib import contextmanager
import contextvars
from dataclasses import dataclass
import functools
import inspect
import logging
import time
from typing import Callable, Generator, Optional, TypeVar

DEFAULT_LOGGER_NAME = "uvicorn.error"
logger = logging.getLogger(DEFAULT_LOGGER_NAME)

T = TypeVar("T")

_CURRENT_TIMING: contextvars.ContextVar["PageTiming | None"] = contextvars.ContextVar(
    "page_timing", default=None
)


@dataclass
class PageTiming:
    page: str
    callback: str
    start: float
    remote_seconds: float = 0.0
    remote_calls: int = 0

    def add_remote(self, seconds: float) -> None:
        self.remote_seconds += seconds
        self.remote_calls += 1


def has_active_timing() -> bool:
    return _CURRENT_TIMING.get() is not None


def record_remote_time(seconds: float) -> None:
    timing = _CURRENT_TIMING.get()
    if timing is None:
        return
    timing.add_remote(seconds)


@contextmanager
def page_load_timing(
    page: str, callback: str, log: Optional[logging.Logger] = None
) -> Generator[PageTiming, None, None]:
    start = time.perf_counter()
    timing = PageTiming(page=page, callback=callback, start=start)
    token = _CURRENT_TIMING.set(timing)
    try:
        yield timing
    finally:
        total = time.perf_counter() - start
        remote_seconds = timing.remote_seconds
        local = total - remote_seconds
        if local < 0:
            local = 0.0
        resolved_log = log or logger
        resolved_log.info(
            "page_load.timing page=%s callback=%s total_ms=%.2f remote_ms=%.2f local_ms=%.2f remote_calls=%d",
            page,
            callback,
            total * 1000,
            remote_seconds * 1000,
            local * 1000,
            timing.remote_calls,
        )
        _CURRENT_TIMING.reset(token)


def timed_page_load(
    page: str,
    func: Callable[..., T],
    label: Optional[str] = None,
    log: Optional[logging.Logger] = None,
) -> Callable[..., T]:
    callback = label or func.__name__
    resolved_logger = log or logging.getLogger(DEFAULT_LOGGER_NAME)

    if inspect.isgeneratorfunction(func):
        # Gradio may resume a generator on another worker thread, so each step
        # gets its own timing context instead of one spanning the yields.
        @functools.wraps(func)
        def _wrapped_steps(*args, **kwargs):
            steps = func(*args, **kwargs)
            step = 0
            while True:
                with page_load_timing(page, f"{callback}[{step}]", resolved_logger):
                    try:
                        value = next(steps)
                    except StopIteration:
                        return
                yield value
                step += 1

        return _wrapped_steps  # type: ignore[return-value]

    @functools.wraps(func)
    def _wrapped(*args, **kwargs) -> T:
        with page_load_timing(page, callback, resolved_logger):
            return func(*args, **kwargs)

    return _wrapped
