import pytest

from src.action_state import ActionInProgressError, ActionKind, ActionStateTracker


@pytest.fixture
def tracker():
    return ActionStateTracker()


class TestRowStates:
    def test_unknown_ids_are_idle(self, tracker):
        assert tracker.state_of("missing") is ActionKind.IDLE
        assert not tracker.is_busy("missing")
        assert tracker.snapshot() == {}

    def test_begin_and_finish(self, tracker):
        assert tracker.begin("7", ActionKind.DELETING)
        assert tracker.state_of("7") is ActionKind.DELETING

        tracker.finish("7")
        assert tracker.state_of("7") is ActionKind.IDLE

    def test_second_begin_on_busy_id_is_refused(self, tracker):
        tracker.begin("7", ActionKind.APPROVING)
        assert not tracker.begin("7", ActionKind.DELETING)
        assert tracker.state_of("7") is ActionKind.APPROVING

    def test_ids_are_independent(self, tracker):
        tracker.begin("3", ActionKind.APPROVING)
        tracker.begin("9", ActionKind.DELETING)
        tracker.finish("3")

        assert tracker.state_of("3") is ActionKind.IDLE
        assert tracker.state_of("9") is ActionKind.DELETING

    def test_cannot_begin_idle(self, tracker):
        with pytest.raises(ValueError):
            tracker.begin("1", ActionKind.IDLE)

    def test_int_and_str_ids_share_a_key(self, tracker):
        tracker.begin(42, ActionKind.APPROVING)
        assert tracker.is_busy("42")


class TestTrack:
    def test_releases_after_failure(self, tracker):
        with pytest.raises(RuntimeError):
            with tracker.track("1", ActionKind.APPROVING):
                assert tracker.is_busy("1")
                raise RuntimeError("network down")
        assert tracker.state_of("1") is ActionKind.IDLE

    def test_reentrant_track_raises(self, tracker):
        with tracker.track("1", ActionKind.DELETING):
            with pytest.raises(ActionInProgressError) as excinfo:
                with tracker.track("1", ActionKind.APPROVING):
                    pass
            assert excinfo.value.current is ActionKind.DELETING
            # the outer action keeps its state
            assert tracker.state_of("1") is ActionKind.DELETING
        assert not tracker.is_busy("1")


class TestSubmitting:
    def test_submit_flag(self, tracker):
        assert not tracker.submitting
        with tracker.track_submit():
            assert tracker.submitting
            with pytest.raises(ActionInProgressError):
                with tracker.track_submit():
                    pass
        assert not tracker.submitting

    def test_submit_flag_does_not_touch_rows(self, tracker):
        tracker.begin("5", ActionKind.APPROVING)
        with tracker.track_submit():
            pass
        assert tracker.state_of("5") is ActionKind.APPROVING
