"""
Reviews page handlers, called the way Gradio calls them: plain arguments plus
a request object carrying the session hash.
"""

from types import SimpleNamespace

import pytest

from src.content_gateway import RemoteTransportError
from src.pages.console_common import ConsoleRegistry
from src.pages.reviews import core_reviews


@pytest.fixture
def reviews_page(monkeypatch, review_console):
    monkeypatch.setattr(core_reviews, "_REGISTRY", ConsoleRegistry(lambda: review_console))
    return core_reviews


def _card_ids(cards_html):
    return [chunk.split('"', 1)[0] for chunk in cards_html.split('<article class="console-card" data-entity-id="')[1:]]


class TestLoad:
    def test_load_renders_stats_and_cards(self, reviews_page, stub_request):
        stats, showing, cards, toasts = reviews_page._load_reviews_page(stub_request)

        assert "Published" in stats
        assert 'console-stat--pending"><div class="console-stat__label">Pending</div><div class="console-stat__value">1<' in stats
        assert "Showing 2 of 2 reviews" in showing
        assert _card_ids(cards) == ["1", "2"]
        assert "console-toast" not in toasts.replace("console-toasts", "")

    def test_load_failure_shows_error_state(self, reviews_page, stub_request, fake_gateway):
        fake_gateway.fail_next("list", RemoteTransportError("down"))
        stats, showing, cards, toasts = reviews_page._load_reviews_page(stub_request)

        assert "Could not load reviews" in cards
        assert "Failed to fetch reviews" in toasts

    def test_filter_and_search(self, reviews_page, stub_request):
        reviews_page._load_reviews_page(stub_request)

        showing, cards = reviews_page._change_status_filter("approved", stub_request)
        assert _card_ids(cards) == ["2"]
        assert "Showing 1 of 2 reviews" in showing

        showing, cards = reviews_page._change_search("nobody", stub_request)
        assert "No reviews found" in cards


class TestRowActions:
    def test_approve_renders_busy_then_refreshed(self, reviews_page, stub_request, fake_gateway):
        reviews_page._load_reviews_page(stub_request)

        steps = list(reviews_page._approve_review("1", stub_request))

        assert len(steps) == 2
        busy_cards = steps[0][2]
        assert "console-spinner" in busy_cards
        assert 'data-console-action="approve" data-entity-id="1"' in busy_cards
        final_stats, _, final_cards, final_toasts = steps[1]
        assert "console-spinner" not in final_cards
        assert 'data-console-action="approve"' not in final_cards
        assert "Review approved successfully!" in final_toasts
        assert fake_gateway.call_names().count("approve") == 1

    def test_delete_asks_for_confirmation_first(self, reviews_page, stub_request, fake_gateway):
        reviews_page._load_reviews_page(stub_request)

        modal, prompt, pending, _ = reviews_page._request_delete("2", stub_request)

        assert modal["visible"] is True
        assert "Bo" in prompt
        assert pending == "2"
        assert "delete" not in fake_gateway.call_names()

        steps = list(reviews_page._confirm_delete(pending, stub_request))
        assert _card_ids(steps[-1][5]) == ["1"]
        assert fake_gateway.call_names().count("delete") == 1

    def test_delete_of_unknown_id_reports_error(self, reviews_page, stub_request):
        reviews_page._load_reviews_page(stub_request)

        modal, _, pending, toasts = reviews_page._request_delete("404", stub_request)

        assert modal["visible"] is False
        assert pending == ""
        assert "no longer exists" in toasts


class TestForm:
    def test_short_review_is_blocked(self, reviews_page, stub_request, fake_gateway):
        reviews_page._load_reviews_page(stub_request)
        reviews_page._open_create_review(stub_request)

        steps = list(
            reviews_page._submit_review("Cy", "cy@example.com", "PM", "too short", None, stub_request)
        )

        assert len(steps) == 1
        review_error = steps[0][4]
        assert review_error == "⚠️ Review must be at least 10 characters"
        assert "create" not in fake_gateway.call_names()

    def test_create_closes_form_and_refreshes(self, reviews_page, stub_request, fake_gateway):
        reviews_page._load_reviews_page(stub_request)
        reviews_page._open_create_review(stub_request)

        steps = list(
            reviews_page._submit_review("Cy", "cy@example.com", "PM", "Would hire again.", None, stub_request)
        )

        saving = steps[0][6]
        assert saving["interactive"] is False
        final = steps[-1]
        assert final[0]["visible"] is False
        assert len(_card_ids(final[9])) == 3

    def test_edit_prefills_values(self, reviews_page, stub_request):
        reviews_page._load_reviews_page(stub_request)

        outputs = reviews_page._open_edit_review("1", stub_request)

        assert outputs[0]["visible"] is True
        assert outputs[1] == "### Edit Review"
        assert outputs[2:6] == ("Ana", "ana@acme.io", "CEO at Acme", "Great work on our platform.")

    def test_review_counter(self):
        assert core_reviews.review_counter("  abc ") == "3/10 characters minimum"


class TestToasts:
    def test_tick_without_session_is_a_no_op(self, reviews_page):
        update = reviews_page._tick_toasts(SimpleNamespace(session_hash="gone"))
        assert "value" not in update

    def test_dismiss(self, reviews_page, stub_request, review_console):
        reviews_page._load_reviews_page(stub_request)
        toast = review_console.feed.error("Something failed")

        html = reviews_page._dismiss_toast(str(toast.id), stub_request)

        assert "Something failed" not in html

    def test_unload_drops_session(self, reviews_page, stub_request):
        reviews_page._load_reviews_page(stub_request)
        reviews_page._drop_reviews_session(stub_request)
        assert len(reviews_page._REGISTRY) == 0
