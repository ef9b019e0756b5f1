"""
Novelty tracking for the OzBargain Deal Notifier.

Decides which records in a freshly fetched snapshot have not been announced
yet, and computes the state to persist afterwards. Everything here is a pure
function of (snapshot, state); persistence lives in services.state_store.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence

from ..models.deal import DealRecord
from ..models.state import NoveltyState

logger = logging.getLogger(__name__)

DEFAULT_SEEN_LIMIT = 200


@dataclass
class NoveltySelection:
    """Records selected for announcement plus the state to store afterwards."""

    new_records: List[DealRecord]
    next_state: NoveltyState
    bootstrap: bool = False
    forced: bool = False


def compute_new(
    snapshot: Sequence[DealRecord], state: NoveltyState
) -> List[DealRecord]:
    """
    Records in the snapshot that are newer than the stored cursor.

    Args:
        snapshot: Current feed records, newest first
        state: State stored by the previous run

    Returns:
        New records, newest first
    """
    seen = set(state.seen_guids)

    if state.last_guid:
        for index, record in enumerate(snapshot):
            if record.guid == state.last_guid:
                return [r for r in snapshot[:index] if r.guid not in seen]
        logger.info(
            f"Last announced guid {state.last_guid!r} is no longer in the feed, "
            "falling back to the seen list"
        )

    if not seen:
        return list(snapshot)

    return [r for r in snapshot if r.guid not in seen]


def next_state(
    snapshot: Sequence[DealRecord],
    state: NoveltyState,
    cap: int = DEFAULT_SEEN_LIMIT,
) -> NoveltyState:
    """
    State to persist once a snapshot has been processed.

    Args:
        snapshot: Current feed records, newest first
        state: State stored by the previous run
        cap: Maximum number of guids kept in the seen list

    Returns:
        New state; unchanged when the snapshot is empty
    """
    if not snapshot:
        return state

    merged: List[str] = []
    present = set()
    for guid in [r.guid for r in snapshot] + list(state.seen_guids):
        if guid not in present:
            present.add(guid)
            merged.append(guid)

    return NoveltyState(last_guid=snapshot[0].guid, seen_guids=merged[: max(cap, 0)])


def is_bootstrap(state: NoveltyState) -> bool:
    """True when no state has ever been stored."""
    return state.is_empty


class NoveltyTracker:
    """Selects unseen records and produces the next persisted state."""

    def __init__(self, cap: int = DEFAULT_SEEN_LIMIT, send_on_first_run: bool = False):
        """
        Initialize novelty tracker.

        Args:
            cap: Maximum number of guids kept in the seen list
            send_on_first_run: Announce the whole feed on the very first run
        """
        self.cap = cap
        self.send_on_first_run = send_on_first_run

    def select(
        self,
        snapshot: Sequence[DealRecord],
        state: NoveltyState,
        force: bool = False,
    ) -> NoveltySelection:
        """
        Choose the records to announce for this run.

        A forced run announces the whole snapshot. A first-ever run stores a
        baseline and announces nothing unless send_on_first_run is set.
        Either way the next state is derived from the previous one.
        """
        updated = next_state(snapshot, state, self.cap)

        if force:
            return NoveltySelection(
                new_records=list(snapshot),
                next_state=updated,
                forced=True,
            )

        if is_bootstrap(state) and not self.send_on_first_run:
            return NoveltySelection(
                new_records=[],
                next_state=updated,
                bootstrap=True,
            )

        return NoveltySelection(
            new_records=compute_new(snapshot, state),
            next_state=updated,
        )
