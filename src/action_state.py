from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from enum import Enum
from typing import Dict, Iterator

logger = logging.getLogger(__name__)


class ActionKind(str, Enum):
    IDLE = "idle"
    APPROVING = "approving"
    DELETING = "deleting"


class ActionInProgressError(RuntimeError):
    def __init__(self, entity_id: str, current: ActionKind) -> None:
        super().__init__(f"Entity {entity_id} is already {current.value}.")
        self.entity_id = entity_id
        self.current = current


class ActionStateTracker:
    """
    Busy/idle state per entity id, plus one shared `submitting` flag for the form.

    Ids with no entry are idle. Busy entries are removed when the action
    settles, so the mapping only ever holds in-flight work.
    """

    def __init__(self) -> None:
        self._states: Dict[str, ActionKind] = {}
        self._submitting = False
        self._lock = threading.Lock()

    @staticmethod
    def _key(entity_id: object) -> str:
        return str(entity_id)

    def state_of(self, entity_id: object) -> ActionKind:
        with self._lock:
            return self._states.get(self._key(entity_id), ActionKind.IDLE)

    def is_busy(self, entity_id: object) -> bool:
        return self.state_of(entity_id) is not ActionKind.IDLE

    def snapshot(self) -> Dict[str, ActionKind]:
        with self._lock:
            return dict(self._states)

    def begin(self, entity_id: object, kind: ActionKind) -> bool:
        if kind is ActionKind.IDLE:
            raise ValueError("Cannot begin an idle action.")
        key = self._key(entity_id)
        with self._lock:
            if key in self._states:
                return False
            self._states[key] = kind
        return True

    def finish(self, entity_id: object) -> None:
        with self._lock:
            self._states.pop(self._key(entity_id), None)

    @contextmanager
    def track(self, entity_id: object, kind: ActionKind) -> Iterator[None]:
        key = self._key(entity_id)
        if not self.begin(key, kind):
            raise ActionInProgressError(key, self.state_of(key))
        try:
            yield
        finally:
            self.finish(key)

    @property
    def submitting(self) -> bool:
        with self._lock:
            return self._submitting

    def begin_submit(self) -> bool:
        with self._lock:
            if self._submitting:
                return False
            self._submitting = True
        return True

    def finish_submit(self) -> None:
        with self._lock:
            self._submitting = False

    @contextmanager
    def track_submit(self) -> Iterator[None]:
        if not self.begin_submit():
            raise ActionInProgressError("form", ActionKind.IDLE)
        try:
            yield
        finally:
            self.finish_submit()
