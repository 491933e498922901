"""
Console state machine shared by every admin screen.

A `ContentConsole` owns one resource's Entity Store, Filter State, Action
State and Notification Feed, and runs every remote action through the same
boundary: mark busy, call the gateway, refetch the full collection on
success, notify, release the busy flag. Gateway failures stop here; they are
logged and turned into a notification and never reach the UI layer.
"""
from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Generic, List, Mapping, Optional, Sequence, TypeVar

import requests

from src.action_state import ActionInProgressError, ActionKind, ActionStateTracker
from src.content_gateway import (
    PAYLOAD_JSON,
    PAYLOAD_MULTIPART,
    ContentGateway,
    ContentGatewayError,
    RemoteOperationError,
)
from src.entities import Faq, Influencer, Review
from src.entity_store import EntityStore, StoreCounts
from src.forms import (
    FieldErrors,
    FormController,
    blog_payload,
    faq_payload,
    influencer_payload,
    review_payload,
    validate_blog_form,
    validate_faq_form,
    validate_influencer_form,
    validate_review_form,
)
from src.notifications import NotificationFeed
from src.settings import ConsoleSettings
from src.view_filter import (
    FAQ_SEARCH_FIELDS,
    INFLUENCER_SEARCH_FIELDS,
    REVIEW_SEARCH_FIELDS,
    StatusFilter,
    compute_visible,
)

logger = logging.getLogger(__name__)

E = TypeVar("E")
F = TypeVar("F")


class ActionOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    INVALID = "invalid"
    IGNORED = "ignored"


@dataclass(frozen=True)
class ConsoleLabels:
    singular: str
    plural: str

    @property
    def title(self) -> str:
        return self.singular[:1].upper() + self.singular[1:]

    @property
    def plural_title(self) -> str:
        return self.plural[:1].upper() + self.plural[1:]


@dataclass
class SubmitOutcome:
    status: ActionOutcome
    errors: FieldErrors = field(default_factory=dict)
    response: Any = None

    @property
    def succeeded(self) -> bool:
        return self.status is ActionOutcome.SUCCEEDED


def _response_message(response: Any) -> Optional[str]:
    if isinstance(response, Mapping):
        message = response.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return None


class ContentConsole(Generic[E, F]):
    def __init__(
        self,
        gateway: ContentGateway,
        *,
        parse: Callable[[Mapping[str, Any]], E],
        form: FormController[F],
        labels: ConsoleLabels,
        search_fields: Sequence[str] = (),
        moderated: bool = False,
        listable: bool = True,
        announce_empty: bool = False,
        requires_success_flag: bool = False,
        feed: Optional[NotificationFeed] = None,
        tracker: Optional[ActionStateTracker] = None,
    ) -> None:
        self.gateway = gateway
        self.store: EntityStore[E] = EntityStore(parse)
        self.form = form
        self.labels = labels
        self.search_fields = tuple(search_fields)
        self.moderated = moderated
        self.listable = listable
        self.announce_empty = announce_empty
        self.requires_success_flag = requires_success_flag
        self.feed = feed or NotificationFeed()
        self.tracker = tracker or ActionStateTracker()
        self.status_filter = StatusFilter.ALL
        self.search_term = ""
        self.loaded = False
        self.load_failed = False
        self.form_open = False
        self.editing_id: Optional[str] = None
        self.viewing_id: Optional[str] = None
        self._published: Optional[tuple] = None

    # -- Entity Store ---------------------------------------------------------

    def mount(self) -> bool:
        if not self.listable:
            self.loaded = True
            return True
        return self.refresh(initial=True)

    def refresh(self, *, initial: bool = False) -> bool:
        try:
            self.store.refresh(self.gateway)
        except ContentGatewayError as exc:
            logger.warning("Failed to fetch %s: %s", self.labels.plural, exc)
            if initial:
                self.store.clear()
                self.load_failed = True
            self.feed.error(
                f"Failed to fetch {self.labels.plural}. Make sure your backend is running."
            )
            return False
        self.loaded = True
        self.load_failed = False
        if initial and self.announce_empty and not len(self.store):
            self.feed.info(f"No {self.labels.plural} found. Add your first {self.labels.singular}!")
        return True

    def counts(self) -> StoreCounts:
        return self.store.counts()

    def published_count(self) -> Optional[int]:
        """Number of entities the public site shows, straight from the approved listing.

        Fetched at most once per store snapshot, and never while the collection
        itself failed to load.
        """
        if not self.moderated or self.load_failed:
            return None
        generation = self.store.generation
        if self._published is not None and self._published[0] == generation:
            return self._published[1]
        try:
            records = self.gateway.get_approved()
        except ContentGatewayError as exc:
            logger.warning("Failed to fetch approved %s: %s", self.labels.plural, exc)
            count = None
        else:
            count = len(records) if isinstance(records, list) else None
        self._published = (generation, count)
        return count

    # -- View Filter ----------------------------------------------------------

    def set_status_filter(self, value: StatusFilter | str) -> None:
        self.status_filter = StatusFilter.parse(value)

    def set_search_term(self, term: Optional[str]) -> None:
        self.search_term = term or ""

    def visible(self) -> List[E]:
        status = self.status_filter if self.moderated else StatusFilter.ALL
        return compute_visible(self.store.entities, status, self.search_term, self.search_fields)

    # -- Row actions ----------------------------------------------------------

    def _failure_message(self, exc: ContentGatewayError, verb: str) -> str:
        if isinstance(exc, RemoteOperationError) and exc.server_message:
            return exc.server_message
        return f"Failed to {verb} {self.labels.singular}. Please try again."

    def _success_message(self, response: Any, past: str) -> str:
        return _response_message(response) or f"{self.labels.title} {past} successfully!"

    def _run_row_action(
        self,
        entity_id: str,
        kind: ActionKind,
        call: Callable[[str], Any],
        verb: str,
        past: str,
    ) -> ActionOutcome:
        entity_id = str(entity_id or "").strip()
        if not entity_id:
            return ActionOutcome.IGNORED
        try:
            with self.tracker.track(entity_id, kind):
                try:
                    response = call(entity_id)
                except ContentGatewayError as exc:
                    logger.warning("Failed to %s %s %s: %s", verb, self.labels.singular, entity_id, exc)
                    self.feed.error(self._failure_message(exc, verb))
                    return ActionOutcome.FAILED
                self.refresh()
                self.feed.success(self._success_message(response, past))
                return ActionOutcome.SUCCEEDED
        except ActionInProgressError as exc:
            logger.info("Ignoring %s on %s: already %s", verb, entity_id, exc.current.value)
            return ActionOutcome.IGNORED

    def approve(self, entity_id: str) -> ActionOutcome:
        if not self.moderated:
            raise RuntimeError(f"{self.labels.plural_title} are not moderated.")
        return self._run_row_action(entity_id, ActionKind.APPROVING, self.gateway.approve, "approve", "approved")

    def delete(self, entity_id: str) -> ActionOutcome:
        outcome = self._run_row_action(entity_id, ActionKind.DELETING, self.gateway.delete, "delete", "deleted")
        if outcome is ActionOutcome.SUCCEEDED and self.viewing_id == str(entity_id).strip():
            self.viewing_id = None
        return outcome

    # -- Form -----------------------------------------------------------------

    def open_create(self) -> None:
        self.editing_id = None
        self.form_open = True

    def open_edit(self, entity_id: str) -> Optional[E]:
        entity = self.store.get(entity_id)
        if entity is None:
            self.feed.error(f"That {self.labels.singular} no longer exists. Refresh the list.")
            return None
        self.editing_id = str(entity_id)
        self.form_open = True
        return entity

    def close_form(self) -> None:
        self.form_open = False
        self.editing_id = None

    def view(self, entity_id: str) -> Optional[E]:
        entity = self.store.get(entity_id)
        self.viewing_id = str(entity_id) if entity is not None else None
        return entity

    def close_view(self) -> None:
        self.viewing_id = None

    def _complete_submission(self, editing_id: Optional[str]) -> None:
        if self.listable:
            self.refresh()
        # The operator may have opened another form while this one was in flight.
        if self.form_open and self.editing_id == editing_id:
            self.close_form()

    def _reports_success(self, response: Any) -> bool:
        if not isinstance(response, Mapping):
            return not self.requires_success_flag
        if self.requires_success_flag:
            return response.get("success") is True
        return response.get("success") is not False

    def submit(
        self,
        form_input: F,
        on_success: Optional[Callable[[Any], None]] = None,
    ) -> SubmitOutcome:
        editing_id = self.editing_id
        creating = editing_id is None
        prepared = self.form.prepare(form_input, creating=creating)
        if not prepared.ok:
            return SubmitOutcome(ActionOutcome.INVALID, errors=prepared.errors)

        verb = "create" if creating else "update"
        try:
            with self.tracker.track_submit():
                try:
                    if creating:
                        response = self.gateway.create(prepared.payload)
                    else:
                        response = self.gateway.update(editing_id, prepared.payload)
                    if not self._reports_success(response):
                        raise RemoteOperationError(
                            200,
                            _response_message(response) or f"Failed to {verb} {self.labels.singular}",
                            operation=f"{verb} {self.labels.singular}",
                            server_message=_response_message(response),
                        )
                except ContentGatewayError as exc:
                    logger.warning("Failed to %s %s: %s", verb, self.labels.singular, exc)
                    self.feed.error(self._failure_message(exc, verb))
                    return SubmitOutcome(ActionOutcome.FAILED)
                self._complete_submission(editing_id)
                self.feed.success(self._success_message(response, f"{verb}d"))
                if on_success is not None:
                    on_success(response)
                return SubmitOutcome(ActionOutcome.SUCCEEDED, response=response)
        except ActionInProgressError:
            logger.info("Ignoring %s submit: a submission is already in flight", self.labels.singular)
            return SubmitOutcome(ActionOutcome.IGNORED)


def _gateway(
    settings: ConsoleSettings,
    path: str,
    label: str,
    encoding: str,
    session: Optional[requests.Session],
) -> ContentGateway:
    return ContentGateway(
        settings.api_base_url,
        path,
        entity_label=label,
        payload_encoding=encoding,
        timeout=settings.request_timeout_seconds,
        session=session,
    )


def build_review_console(
    settings: ConsoleSettings, session: Optional[requests.Session] = None
) -> ContentConsole:
    return ContentConsole(
        _gateway(settings, settings.review_path, "review", PAYLOAD_MULTIPART, session),
        parse=Review.from_record,
        form=FormController(
            functools.partial(validate_review_form, max_image_bytes=settings.max_image_bytes),
            review_payload,
        ),
        labels=ConsoleLabels("review", "reviews"),
        search_fields=REVIEW_SEARCH_FIELDS,
        moderated=True,
        feed=NotificationFeed(settings.toast_seconds),
    )


def build_faq_console(
    settings: ConsoleSettings, session: Optional[requests.Session] = None
) -> ContentConsole:
    return ContentConsole(
        _gateway(settings, settings.faq_path, "FAQ", PAYLOAD_JSON, session),
        parse=Faq.from_record,
        form=FormController(validate_faq_form, faq_payload),
        labels=ConsoleLabels("FAQ", "FAQs"),
        search_fields=FAQ_SEARCH_FIELDS,
        announce_empty=True,
        feed=NotificationFeed(settings.toast_seconds),
    )


def build_influencer_console(
    settings: ConsoleSettings, session: Optional[requests.Session] = None
) -> ContentConsole:
    return ContentConsole(
        _gateway(settings, settings.influencer_path, "influencer", PAYLOAD_MULTIPART, session),
        parse=Influencer.from_record,
        form=FormController(
            functools.partial(validate_influencer_form, max_image_bytes=settings.max_image_bytes),
            influencer_payload,
        ),
        labels=ConsoleLabels("influencer", "influencers"),
        search_fields=INFLUENCER_SEARCH_FIELDS,
        feed=NotificationFeed(settings.toast_seconds),
    )


def build_blog_console(
    settings: ConsoleSettings, session: Optional[requests.Session] = None
) -> ContentConsole:
    return ContentConsole(
        _gateway(settings, settings.blog_path, "blog post", PAYLOAD_MULTIPART, session),
        parse=dict,
        form=FormController(
            functools.partial(validate_blog_form, max_image_bytes=settings.max_image_bytes),
            blog_payload,
        ),
        labels=ConsoleLabels("blog post", "blog posts"),
        listable=False,
        requires_success_flag=True,
        feed=NotificationFeed(settings.toast_seconds),
    )
