"""
Shared fixtures: an in-memory stand-in for the content service and consoles
wired to it.
"""

import itertools
from types import SimpleNamespace

import pytest

from src.console import ConsoleLabels, ContentConsole, build_blog_console, build_influencer_console
from src.content_gateway import ImageAttachment, RemoteOperationError, SubmissionPayload
from src.entities import Faq, Review
from src.forms import FormController, faq_payload, review_payload, validate_faq_form, validate_review_form
from src.notifications import NotificationFeed
from src.settings import ConsoleSettings
from src.view_filter import FAQ_SEARCH_FIELDS, REVIEW_SEARCH_FIELDS


class FakeGateway:
    """In-memory implementation of the gateway interface.

    `fail_next(op, exc)` makes the next call of `op` raise; `before(op, fn)`
    runs `fn` inside the next call of `op`, before it completes, which lets a
    test start a second action while the first is still in flight.
    """

    def __init__(self, records=None):
        self.records = [dict(record) for record in records or []]
        self.calls = []
        self._failures = {}
        self._hooks = {}
        self._responses = {}
        self._ids = itertools.count(100)

    def fail_next(self, op, exc):
        self._failures[op] = exc

    def before(self, op, fn):
        self._hooks[op] = fn

    def respond_next(self, op, response):
        self._responses[op] = response

    def _enter(self, op, *args):
        self.calls.append((op, *args))
        hook = self._hooks.pop(op, None)
        if hook is not None:
            hook()
        exc = self._failures.pop(op, None)
        if exc is not None:
            raise exc

    def _find(self, entity_id):
        for record in self.records:
            if str(record.get("_id")) == str(entity_id):
                return record
        raise RemoteOperationError(404, "Review not found", server_message="Review not found")

    def call_names(self):
        return [call[0] for call in self.calls]

    def list(self):
        self._enter("list")
        return [dict(record) for record in self.records]

    def get_approved(self):
        self._enter("get_approved")
        return [dict(record) for record in self.records if record.get("approved")]

    def approve(self, entity_id):
        self._enter("approve", entity_id)
        record = self._find(entity_id)
        record["approved"] = True
        return self._responses.pop("approve", dict(record))

    def delete(self, entity_id):
        self._enter("delete", entity_id)
        record = self._find(entity_id)
        self.records.remove(record)
        return self._responses.pop("delete", {})

    def update(self, entity_id, payload: SubmissionPayload):
        self._enter("update", entity_id, payload)
        record = self._find(entity_id)
        record.update(payload.fields)
        return self._responses.pop("update", dict(record))

    def create(self, payload: SubmissionPayload):
        self._enter("create", payload)
        record = {"_id": str(next(self._ids)), "approved": False, **payload.fields}
        self.records.append(record)
        return self._responses.pop("create", dict(record))


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def review_records():
    return [
        {
            "_id": "1",
            "name": "Ana",
            "role": "CEO at Acme",
            "email": "ana@acme.io",
            "review": "Great work on our platform.",
            "approved": False,
            "createdAt": "2024-03-01T10:00:00Z",
        },
        {
            "_id": "2",
            "name": "Bo",
            "role": "CTO at Widgets",
            "email": "bo@widgets.com",
            "review": "Delivered ahead of schedule.",
            "approved": True,
            "createdAt": "2024-03-02T10:00:00Z",
        },
    ]


@pytest.fixture
def fake_gateway(review_records):
    return FakeGateway(review_records)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def review_console(fake_gateway, clock):
    return ContentConsole(
        fake_gateway,
        parse=Review.from_record,
        form=FormController(validate_review_form, review_payload),
        labels=ConsoleLabels("review", "reviews"),
        search_fields=REVIEW_SEARCH_FIELDS,
        moderated=True,
        feed=NotificationFeed(5.0, clock=clock),
    )


@pytest.fixture
def faq_console(clock):
    gateway = FakeGateway(
        [
            {"_id": "f1", "question": "What do you build?", "answer": "Automation tooling."},
            {"_id": "f2", "question": "Where are you based?", "answer": "Remote first."},
        ]
    )
    return ContentConsole(
        gateway,
        parse=Faq.from_record,
        form=FormController(validate_faq_form, faq_payload),
        labels=ConsoleLabels("FAQ", "FAQs"),
        search_fields=FAQ_SEARCH_FIELDS,
        announce_empty=True,
        feed=NotificationFeed(5.0, clock=clock),
    )


@pytest.fixture
def png_image():
    return ImageAttachment("avatar.png", "image/png", b"\x89PNG\r\n\x1a\n" + b"0" * 64)


@pytest.fixture
def stub_request():
    return SimpleNamespace(session_hash="session-abc")


@pytest.fixture
def influencer_records():
    return [
        {"_id": "i1", "name": "Lia Moreno", "desc": "Fitness coach", "keywords": ["fitness", "wellness"], "pic": "lia.png"},
        {"_id": "i2", "name": "Tom Reyes", "desc": "Tech reviewer", "keywords": "gadgets, ai", "pic": ""},
    ]


@pytest.fixture
def influencer_console(influencer_records, clock):
    console = build_influencer_console(ConsoleSettings(api_base_url="http://api.test"))
    console.gateway = FakeGateway(influencer_records)
    console.feed = NotificationFeed(5.0, clock=clock)
    return console


@pytest.fixture
def blog_console(clock):
    console = build_blog_console(ConsoleSettings(api_base_url="http://api.test"))
    console.gateway = FakeGateway()
    console.feed = NotificationFeed(5.0, clock=clock)
    return console


@pytest.fixture
def png_file(tmp_path):
    path = tmp_path / "upload.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n" + b"0" * 64)
    return str(path)
