import pytest

from src.content_gateway import RemoteTransportError
from src.entities import Review
from src.entity_store import EntityStore


@pytest.fixture
def store():
    return EntityStore(Review.from_record)


class TestEntityStore:
    def test_replace_keeps_server_order(self, store, review_records):
        store.replace(list(reversed(review_records)))
        assert [e.id for e in store.entities] == ["2", "1"]

    def test_refresh_parses_records(self, store, fake_gateway):
        entities = store.refresh(fake_gateway)

        assert entities[0].name == "Ana"
        assert entities[0].review_text == "Great work on our platform."
        assert entities[1].approved is True
        assert entities[0].created_at.year == 2024

    def test_failed_refresh_keeps_previous_snapshot(self, store, fake_gateway):
        store.refresh(fake_gateway)
        generation = store.generation
        fake_gateway.fail_next("list", RemoteTransportError("down"))

        with pytest.raises(RemoteTransportError):
            store.refresh(fake_gateway)

        assert len(store) == 2
        assert store.generation == generation

    def test_non_list_response_is_empty(self, store):
        assert store.replace({"message": "unexpected"}) == ()

    def test_non_object_records_are_skipped(self, store, review_records):
        store.replace([review_records[0], "garbage", None])
        assert [e.id for e in store.entities] == ["1"]

    def test_get_and_counts(self, store, review_records):
        store.replace(review_records)

        assert store.get("2").name == "Bo"
        assert store.get("404") is None
        counts = store.counts()
        assert (counts.total, counts.approved, counts.pending) == (2, 1, 1)

    def test_clear(self, store, review_records):
        store.replace(review_records)
        store.clear()
        assert store.entities == ()
