from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple


def _text(record: Mapping[str, Any], key: str) -> str:
    value = record.get(key)
    return "" if value is None else str(value)


def _record_id(record: Mapping[str, Any]) -> str:
    raw = record.get("_id", record.get("id"))
    return "" if raw is None else str(raw)


def parse_timestamp(value: object) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def format_date(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.strftime("%Y-%m-%d")


def _is_truthy(value: object) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Review:
    id: str
    name: str
    role: str
    email: str
    review_text: str
    image_ref: Optional[str] = None
    approved: bool = False
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Review":
        return cls(
            id=_record_id(record),
            name=_text(record, "name"),
            role=_text(record, "role"),
            email=_text(record, "email"),
            review_text=_text(record, "review"),
            image_ref=_text(record, "image") or None,
            approved=_is_truthy(record.get("approved")),
            created_at=parse_timestamp(record.get("createdAt")),
        )

    def form_values(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "review": self.review_text,
        }


@dataclass(frozen=True)
class Faq:
    id: str
    question: str
    answer: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Faq":
        return cls(
            id=_record_id(record),
            question=_text(record, "question"),
            answer=_text(record, "answer"),
            created_at=parse_timestamp(record.get("createdAt")),
        )

    def form_values(self) -> Dict[str, str]:
        return {"question": self.question, "answer": self.answer}


@dataclass(frozen=True)
class Influencer:
    id: str
    name: str
    desc: str
    keywords: Tuple[str, ...] = field(default_factory=tuple)
    pic: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Influencer":
        raw_keywords = record.get("keywords") or ()
        if isinstance(raw_keywords, str):
            raw_keywords = raw_keywords.split(",")
        keywords = tuple(str(k).strip() for k in raw_keywords if str(k).strip())
        return cls(
            id=_record_id(record),
            name=_text(record, "name"),
            desc=_text(record, "desc"),
            keywords=keywords,
            pic=_text(record, "pic") or None,
            created_at=parse_timestamp(record.get("createdAt")),
        )

    def form_values(self) -> Dict[str, str]:
        return {"name": self.name, "desc": self.desc, "keywords": ", ".join(self.keywords)}


BLOG_CATEGORIES: Tuple[str, ...] = (
    "Technology",
    "Artificial Intelligence",
    "Business",
    "Finance",
    "Marketing",
    "Data Automation",
)
DEFAULT_BLOG_CATEGORY = BLOG_CATEGORIES[0]
