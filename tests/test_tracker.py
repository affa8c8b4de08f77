"""
Unit tests for the playback statistics tracker.
"""

import pytest

from conftest import FakeClock
from styngr.errors import AlreadyTrackingError, InvalidStateError, NotTrackingError
from styngr.models.statistics import TrackEvent
from styngr.music.state import SessionState
from styngr.music.tracker import PlaybackTracker

USER = 7


@pytest.fixture
def clock():
    return FakeClock(1000.0)


@pytest.fixture
def tracker(clock):
    return PlaybackTracker(SessionState(), clock=clock)


class TestStartTrack:
    def test_creates_fresh_record(self, tracker):
        statistics = tracker.start_track(USER)
        assert statistics.started == 1000.0
        assert statistics.total_paused == 0
        assert statistics.paused is None
        assert statistics.ended is None
        assert tracker.is_tracking(USER)

    def test_twice_raises(self, tracker):
        tracker.start_track(USER)
        with pytest.raises(AlreadyTrackingError):
            tracker.start_track(USER)

    def test_users_are_independent(self, tracker):
        tracker.start_track(USER)
        tracker.start_track(USER + 1)
        assert tracker.is_tracking(USER + 1)


class TestRecordEvent:
    @pytest.mark.parametrize("event", list(TrackEvent))
    def test_every_event_requires_a_record(self, tracker, event):
        with pytest.raises(NotTrackingError):
            tracker.record_event(USER, event)

    def test_unknown_event_is_rejected(self, tracker):
        tracker.start_track(USER)
        with pytest.raises(InvalidStateError):
            tracker.record_event(USER, "STOPPED")

    def test_accepts_event_strings(self, tracker, clock):
        tracker.start_track(USER)
        clock.advance(5)
        statistics = tracker.record_event(USER, "PAUSED")
        assert statistics.paused == 1005.0

    def test_played_resets_start(self, tracker, clock):
        tracker.start_track(USER)
        clock.advance(3)
        statistics = tracker.record_event(USER, TrackEvent.PLAYED)
        assert statistics.started == 1003.0

    def test_played_after_ended_raises(self, tracker, clock):
        tracker.start_track(USER)
        clock.advance(10)
        tracker.record_event(USER, TrackEvent.ENDED)
        with pytest.raises(InvalidStateError):
            tracker.record_event(USER, TrackEvent.PLAYED)

    def test_double_pause_raises(self, tracker, clock):
        tracker.start_track(USER)
        tracker.record_event(USER, TrackEvent.PAUSED)
        clock.advance(1)
        with pytest.raises(InvalidStateError):
            tracker.record_event(USER, TrackEvent.PAUSED)

    def test_resume_without_pause_raises(self, tracker):
        tracker.start_track(USER)
        with pytest.raises(InvalidStateError):
            tracker.record_event(USER, TrackEvent.RESUMED)

    def test_resume_before_pause_raises(self, tracker, clock):
        """Clock moved backwards while paused."""
        tracker.start_track(USER)
        clock.advance(20)
        tracker.record_event(USER, TrackEvent.PAUSED)
        clock.advance(-5)
        with pytest.raises(InvalidStateError):
            tracker.record_event(USER, TrackEvent.RESUMED)

    def test_resume_accumulates_pauses(self, tracker, clock):
        tracker.start_track(USER)
        for pause_length in (4, 6, 10):
            clock.advance(10)
            tracker.record_event(USER, TrackEvent.PAUSED)
            clock.advance(pause_length)
            statistics = tracker.record_event(USER, TrackEvent.RESUMED)

        assert statistics.total_paused == 20
        assert statistics.paused is None

    def test_ended_before_started_raises(self, tracker, clock):
        tracker.start_track(USER)
        clock.advance(-1)
        with pytest.raises(InvalidStateError):
            tracker.record_event(USER, TrackEvent.ENDED)


class TestEndTrack:
    def test_without_record_raises(self, tracker):
        with pytest.raises(NotTrackingError):
            tracker.end_track(USER)

    def test_removes_record(self, tracker, clock):
        tracker.start_track(USER)
        clock.advance(30)
        tracker.end_track(USER)
        assert not tracker.is_tracking(USER)

    def test_duration_excludes_pauses(self, tracker, clock):
        tracker.start_track(USER)
        clock.advance(5)
        tracker.record_event(USER, TrackEvent.PLAYED)  # started = 1005
        clock.advance(50)
        tracker.record_event(USER, TrackEvent.PAUSED)
        clock.advance(15)
        tracker.record_event(USER, TrackEvent.RESUMED)
        clock.advance(35)
        tracker.record_event(USER, TrackEvent.ENDED)  # ended = 1105
        clock.advance(100)  # ignored, already ended

        statistics = tracker.end_track(USER)
        assert statistics.started == 1005
        assert statistics.ended == 1105
        assert statistics.duration == (1105 - 1005) - 15

    def test_uses_now_when_not_ended(self, tracker, clock):
        tracker.start_track(USER)
        clock.advance(42)
        statistics = tracker.end_track(USER)
        assert statistics.ended == 1042
        assert statistics.duration == 42

    def test_negative_duration_is_an_error(self, tracker, clock):
        tracker.start_track(USER)
        clock.advance(-30)
        with pytest.raises(InvalidStateError):
            tracker.end_track(USER)

    def test_discard_drops_record(self, tracker):
        tracker.start_track(USER)
        tracker.discard(USER)
        assert not tracker.is_tracking(USER)
        tracker.discard(USER)  # no-op
