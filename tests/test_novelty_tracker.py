"""Unit tests for novelty tracking."""

import pytest

from ozb_deal_notifier.components.novelty_tracker import (
    NoveltyTracker,
    compute_new,
    is_bootstrap,
    next_state,
)
from ozb_deal_notifier.models.state import NoveltyState

from conftest import make_record


def snapshot(*guids):
    return [make_record(guid) for guid in guids]


def guids(records):
    return [r.guid for r in records]


class TestComputeNew:
    """Test cases for selecting unseen records."""

    def test_records_before_cursor(self):
        state = NoveltyState(last_guid="c", seen_guids=["c", "d"])
        assert guids(compute_new(snapshot("a", "b", "c", "d"), state)) == ["a", "b"]

    def test_cursor_at_top_means_nothing_new(self):
        state = NoveltyState(last_guid="a", seen_guids=["a", "b"])
        assert compute_new(snapshot("a", "b"), state) == []

    def test_seen_records_above_cursor_are_excluded(self):
        state = NoveltyState(last_guid="c", seen_guids=["b", "c"])
        assert guids(compute_new(snapshot("a", "b", "c"), state)) == ["a"]

    def test_missing_cursor_falls_back_to_seen_list(self):
        state = NoveltyState(last_guid="gone", seen_guids=["b", "c"])
        assert guids(compute_new(snapshot("a", "b", "c", "x"), state)) == ["a", "x"]

    def test_rotated_cursor_with_empty_seen_returns_everything(self):
        state = NoveltyState(last_guid="gone", seen_guids=[])
        assert guids(compute_new(snapshot("a", "b"), state)) == ["a", "b"]

    def test_no_duplicate_announcements(self):
        state = NoveltyState(last_guid="b", seen_guids=["a", "b"])
        assert compute_new(snapshot("a", "b", "c"), state) == []


class TestNextState:
    """Test cases for computing the state to persist."""

    def test_merges_newest_first(self):
        state = NoveltyState(last_guid="c", seen_guids=["c", "d"])
        updated = next_state(snapshot("a", "b", "c"), state)

        assert updated.last_guid == "a"
        assert updated.seen_guids == ["a", "b", "c", "d"]

    def test_cap_keeps_newest(self):
        state = NoveltyState(last_guid="x", seen_guids=["x", "y", "z"])
        updated = next_state(snapshot("a", "b"), state, cap=3)

        assert updated.seen_guids == ["a", "b", "x"]
        updated.validate(cap=3)

    def test_empty_snapshot_keeps_state(self):
        state = NoveltyState(last_guid="a", seen_guids=["a"])
        assert next_state([], state) is state

    def test_duplicate_guids_in_snapshot(self):
        updated = next_state(snapshot("a", "a", "b"), NoveltyState())
        assert updated.seen_guids == ["a", "b"]

    @pytest.mark.parametrize("cap", [1, 2, 5, 200])
    def test_invariants_hold(self, cap):
        state = NoveltyState(last_guid="q", seen_guids=["q", "r", "s", "t"])
        updated = next_state(snapshot("a", "b", "c", "q"), state, cap=cap)

        assert len(updated.seen_guids) <= cap
        assert len(set(updated.seen_guids)) == len(updated.seen_guids)
        assert updated.last_guid == "a"


class TestNoveltyTracker:
    """Test cases for NoveltyTracker.select."""

    def test_is_bootstrap(self):
        assert is_bootstrap(NoveltyState())
        assert not is_bootstrap(NoveltyState(last_guid="a"))
        assert not is_bootstrap(NoveltyState(seen_guids=["a"]))

    def test_bootstrap_stores_baseline_without_sending(self):
        selection = NoveltyTracker().select(snapshot("a", "b"), NoveltyState())

        assert selection.bootstrap is True
        assert selection.new_records == []
        assert selection.next_state.last_guid == "a"
        assert selection.next_state.seen_guids == ["a", "b"]

    def test_bootstrap_is_idempotent(self):
        tracker = NoveltyTracker()
        first = tracker.select(snapshot("a", "b"), NoveltyState())
        second = tracker.select(snapshot("a", "b"), first.next_state)

        assert second.bootstrap is False
        assert second.new_records == []
        assert second.next_state == first.next_state

    def test_first_run_send(self):
        selection = NoveltyTracker(send_on_first_run=True).select(
            snapshot("a", "b"), NoveltyState()
        )

        assert selection.bootstrap is False
        assert guids(selection.new_records) == ["a", "b"]

    def test_new_records_after_baseline(self):
        tracker = NoveltyTracker()
        baseline = tracker.select(snapshot("b", "c"), NoveltyState()).next_state
        selection = tracker.select(snapshot("a", "b", "c"), baseline)

        assert guids(selection.new_records) == ["a"]
        assert selection.next_state.last_guid == "a"

    def test_forced_run_returns_everything(self):
        state = NoveltyState(last_guid="a", seen_guids=["a", "b"])
        selection = NoveltyTracker().select(snapshot("a", "b"), state, force=True)

        assert selection.forced is True
        assert guids(selection.new_records) == ["a", "b"]
        assert selection.next_state.seen_guids == ["a", "b"]

    def test_forced_run_preserves_older_seen(self):
        state = NoveltyState(last_guid="c", seen_guids=["c", "d"])
        selection = NoveltyTracker().select(snapshot("a", "b"), state, force=True)

        assert selection.next_state.seen_guids == ["a", "b", "c", "d"]

    def test_cap_respected_across_runs(self):
        tracker = NoveltyTracker(cap=3)
        state = NoveltyState()
        for batch in (("c", "d"), ("b", "c", "d"), ("a", "b", "c")):
            state = tracker.select(snapshot(*batch), state).next_state
            state.validate(cap=3)

        assert state.seen_guids == ["a", "b", "c"]
