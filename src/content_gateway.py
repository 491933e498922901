"""
HTTP client for the content service REST resources.

Each resource (reviews, FAQs, influencers, blogs) lives under its own path
on the backend and exposes the same verbs:

    GET    /              -> list of records
    GET    /approved      -> approved records (moderated resources only)
    PATCH  /{id}/approve  -> updated record
    DELETE /{id}          -> acknowledgement
    PUT    /{id}          -> updated record (multipart or JSON body)
    POST   /              -> created record (multipart or JSON body)

Multipart bodies are always built through `files=` so `requests` writes the
Content-Type header with its boundary; the gateway never sets it by hand.
"""
from __future__ import annotations

import logging
import mimetypes
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests

from src.page_timing import record_remote_time

logger = logging.getLogger(__name__)
timing_logger = logging.getLogger("uvicorn.error")

PAYLOAD_MULTIPART = "multipart"
PAYLOAD_JSON = "json"


class ContentGatewayError(Exception):
    """Base class for failures talking to the content service."""

    def __init__(self, message: str, *, operation: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation


class RemoteTransportError(ContentGatewayError):
    """The request never reached the server or the response never arrived."""


class RemoteOperationError(ContentGatewayError):
    """The server answered with a non-success status (or an unreadable body)."""

    def __init__(
        self,
        status: int,
        message: str,
        *,
        operation: str = "",
        server_message: Optional[str] = None,
    ) -> None:
        super().__init__(message, operation=operation)
        self.status = status
        self.server_message = server_message

    def __str__(self) -> str:
        return f"HTTP {self.status}: {self.message}"


@dataclass(frozen=True)
class ImageAttachment:
    filename: str
    content_type: str
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_path(cls, path: str | Path) -> "ImageAttachment":
        source = Path(path)
        guessed = mimetypes.guess_type(source.name)[0]
        return cls(
            filename=source.name,
            content_type=guessed or "application/octet-stream",
            data=source.read_bytes(),
        )


@dataclass
class SubmissionPayload:
    fields: Dict[str, str] = field(default_factory=dict)
    files: List[Tuple[str, ImageAttachment]] = field(default_factory=list)

    def field_names(self) -> List[str]:
        return [*self.fields.keys(), *(name for name, _ in self.files)]

    def request_kwargs(self, encoding: str) -> Dict[str, Any]:
        if encoding == PAYLOAD_JSON:
            if self.files:
                raise ValueError("JSON payloads cannot carry file attachments.")
            return {"json": dict(self.fields)}
        # (None, value) parts keep plain fields in the multipart body even when
        # no file is attached; a bare `data=` would fall back to urlencoding.
        parts: List[Tuple[str, Tuple[Optional[str], Any, Optional[str]]]] = [
            (name, (None, value, None)) for name, value in self.fields.items()
        ]
        for name, attachment in self.files:
            parts.append((name, (attachment.filename, attachment.data, attachment.content_type)))
        return {"files": parts}


def _generic_failure_message(operation: str, response: requests.Response) -> str:
    reason = (response.reason or "").strip()
    if reason:
        return f"Failed to {operation}: {response.status_code} {reason}"
    return f"Failed to {operation}: HTTP {response.status_code}"


def _server_message(response: requests.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return None


class ContentGateway:
    def __init__(
        self,
        base_url: str,
        resource_path: str,
        *,
        entity_label: str = "item",
        payload_encoding: str = PAYLOAD_MULTIPART,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if payload_encoding not in (PAYLOAD_MULTIPART, PAYLOAD_JSON):
            raise ValueError(f"Unsupported payload encoding: {payload_encoding}")
        self.root_url = f"{base_url.rstrip('/')}/{resource_path.strip('/')}"
        self.entity_label = entity_label
        self.payload_encoding = payload_encoding
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, suffix: str) -> str:
        return f"{self.root_url}{suffix}"

    @staticmethod
    def _id_segment(entity_id: object) -> str:
        value = "" if entity_id is None else str(entity_id).strip()
        if not value:
            raise ValueError("An entity id is required.")
        return quote(value, safe="")

    def _request(self, method: str, suffix: str, *, operation: str, **kwargs) -> Any:
        url = self._url(suffix)
        start = time.perf_counter()
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            elapsed = time.perf_counter() - start
            record_remote_time(elapsed)
            logger.warning("%s %s failed before a response arrived: %s", method, url, exc)
            raise RemoteTransportError(
                f"Failed to {operation}: the content service is unreachable.",
                operation=operation,
            ) from exc

        elapsed = time.perf_counter() - start
        record_remote_time(elapsed)
        timing_logger.info(
            "content_gateway.request method=%s url=%s status=%s ms=%.2f",
            method,
            url,
            response.status_code,
            elapsed * 1000,
        )

        if not response.ok:
            server_message = _server_message(response)
            raise RemoteOperationError(
                response.status_code,
                server_message or _generic_failure_message(operation, response),
                operation=operation,
                server_message=server_message,
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteOperationError(
                response.status_code,
                f"Failed to {operation}: the response was not valid JSON.",
                operation=operation,
            ) from exc

    def list(self) -> Any:
        return self._request("GET", "/", operation=f"fetch {self.entity_label}s")

    def get_approved(self) -> Any:
        return self._request("GET", "/approved", operation=f"fetch approved {self.entity_label}s")

    def approve(self, entity_id: object) -> Any:
        return self._request(
            "PATCH",
            f"/{self._id_segment(entity_id)}/approve",
            operation=f"approve {self.entity_label}",
        )

    def delete(self, entity_id: object) -> Any:
        return self._request(
            "DELETE",
            f"/{self._id_segment(entity_id)}",
            operation=f"delete {self.entity_label}",
        )

    def update(self, entity_id: object, payload: SubmissionPayload) -> Any:
        return self._request(
            "PUT",
            f"/{self._id_segment(entity_id)}",
            operation=f"update {self.entity_label}",
            **payload.request_kwargs(self.payload_encoding),
        )

    def create(self, payload: SubmissionPayload) -> Any:
        return self._request(
            "POST",
            "/",
            operation=f"create {self.entity_label}",
            **payload.request_kwargs(self.payload_encoding),
        )
