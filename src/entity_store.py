from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Generic, Mapping, Optional, Protocol, Tuple, TypeVar

logger = logging.getLogger(__name__)

E = TypeVar("E")


class ListsRecords(Protocol):
    def list(self) -> Any: ...


@dataclass(frozen=True)
class StoreCounts:
    total: int
    approved: int
    pending: int


class EntityStore(Generic[E]):
    """
    Ordered, read-only snapshot of the current resource collection.

    The snapshot is only ever swapped as a whole; entities are never patched
    in place, so a refresh is the only way an update becomes visible.
    """

    def __init__(self, parse: Callable[[Mapping[str, Any]], E]) -> None:
        self._parse = parse
        self._entities: Tuple[E, ...] = ()
        self._lock = threading.Lock()
        self._generation = 0

    @property
    def entities(self) -> Tuple[E, ...]:
        with self._lock:
            return self._entities

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def __len__(self) -> int:
        return len(self.entities)

    def _coerce(self, records: Any) -> Tuple[E, ...]:
        if not isinstance(records, (list, tuple)):
            logger.warning(
                "Expected a list of records, got %s; treating as empty.",
                type(records).__name__,
            )
            return ()
        parsed = []
        for record in records:
            if not isinstance(record, Mapping):
                logger.warning("Skipping non-object record: %r", record)
                continue
            parsed.append(self._parse(record))
        return tuple(parsed)

    def replace(self, records: Any) -> Tuple[E, ...]:
        entities = self._coerce(records)
        with self._lock:
            self._entities = entities
            self._generation += 1
        return entities

    def refresh(self, gateway: ListsRecords) -> Tuple[E, ...]:
        """Fetch the full collection and replace the snapshot in server order.

        Gateway errors propagate and leave the current snapshot untouched.
        """
        records = gateway.list()
        return self.replace(records)

    def clear(self) -> None:
        with self._lock:
            self._entities = ()
            self._generation += 1

    def get(self, entity_id: object) -> Optional[E]:
        key = str(entity_id)
        for entity in self.entities:
            if str(getattr(entity, "id", "")) == key:
                return entity
        return None

    def counts(self) -> StoreCounts:
        entities = self.entities
        approved = sum(1 for entity in entities if getattr(entity, "approved", False))
        return StoreCounts(total=len(entities), approved=approved, pending=len(entities) - approved)
