from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Sequence, Tuple, TypeVar

E = TypeVar("E")

REVIEW_SEARCH_FIELDS: Tuple[str, ...] = ("name", "role", "email")
FAQ_SEARCH_FIELDS: Tuple[str, ...] = ("question", "answer")
INFLUENCER_SEARCH_FIELDS: Tuple[str, ...] = ("name", "desc", "keywords")


class StatusFilter(str, Enum):
    ALL = "all"
    APPROVED = "approved"
    PENDING = "pending"

    @classmethod
    def parse(cls, value: "StatusFilter | str | None") -> "StatusFilter":
        if isinstance(value, cls):
            return value
        normalized = str(value or cls.ALL.value).strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown status filter: {value!r}") from None


STATUS_FILTER_CHOICES: Sequence[Tuple[str, str]] = (
    ("All", StatusFilter.ALL.value),
    ("Approved", StatusFilter.APPROVED.value),
    ("Pending", StatusFilter.PENDING.value),
)


def _matches_status(entity: object, status: StatusFilter) -> bool:
    if status is StatusFilter.ALL:
        return True
    approved = bool(getattr(entity, "approved", False))
    return approved if status is StatusFilter.APPROVED else not approved


def _field_values(entity: object, field_name: str) -> Iterable[str]:
    value = getattr(entity, field_name, None)
    if value is None:
        return ()
    if isinstance(value, (list, tuple, set, frozenset)):
        return (str(item) for item in value if item is not None)
    return (str(value),)


def _matches_term(entity: object, needle: str, fields: Sequence[str]) -> bool:
    return any(
        needle in candidate.casefold()
        for field_name in fields
        for candidate in _field_values(entity, field_name)
    )


def compute_visible(
    collection: Iterable[E],
    status_filter: StatusFilter | str = StatusFilter.ALL,
    search_term: str = "",
    fields: Sequence[str] = REVIEW_SEARCH_FIELDS,
) -> List[E]:
    """Return the displayed subset of `collection`, preserving its order.

    The status filter runs first; the search term then keeps entities where any
    of `fields` contains it, case-insensitively. An empty term keeps everything.
    """
    status = StatusFilter.parse(status_filter)
    visible = [entity for entity in collection if _matches_status(entity, status)]
    if search_term:
        needle = search_term.casefold()
        visible = [entity for entity in visible if _matches_term(entity, needle, fields)]
    return visible
