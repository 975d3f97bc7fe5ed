"""Draft synchronization client.

There is no push channel, so each client polls the authoritative draft
session on a fixed interval and reconciles its cached view:

- server cursor ahead of the local cursor: fetch only the missing picks
- session entered in_progress: copy the stored draft order once
- session reset or restarted (cursor went backwards, status back to
  pending/open, a new session number or draft order, or the server's copy of
  the last cached pick differs): drop the cache and bootstrap again

The cache is never advanced ahead of the server; picks go through the
DraftStateMachine and show up locally on the next poll.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol

from .config import get_poll_interval
from .models import DraftOrderEntry, DraftPick, DraftStatus, LeagueDraftState, PickResult

logger = logging.getLogger('fantasy_cricket.sync')


def order_fingerprint(order: List[DraftOrderEntry]) -> tuple:
    return tuple(e.participant_id for e in order)


class DraftStateSource(Protocol):
    """Read-only view of the authoritative session (a LeagueStore satisfies it)."""

    def get_league_draft_state(self, league_id: str) -> LeagueDraftState: ...

    def list_draft_picks(
        self, league_id: str, start: Optional[int] = None, end: Optional[int] = None
    ) -> List[DraftPick]: ...


@dataclass
class SyncUpdate:
    """What changed during one poll."""
    new_picks: List[DraftPick] = field(default_factory=list)
    order_loaded: bool = False
    status_changed: bool = False
    reset: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.new_picks) or self.order_loaded or self.status_changed or self.reset


class DraftSyncClient:
    """Polling client holding a read-only cached projection of one draft."""

    def __init__(
        self,
        source: DraftStateSource,
        league_id: str,
        participant_id: Optional[str] = None,
        poll_interval: Optional[float] = None,
    ):
        self.source = source
        self.league_id = league_id
        self.participant_id = participant_id
        self.poll_interval = poll_interval if poll_interval is not None else get_poll_interval()

        self.status: Optional[DraftStatus] = None
        self.draft_order: List[DraftOrderEntry] = []
        self.picks: List[DraftPick] = []
        self.order_fetches = 0
        self.session: Optional[int] = None

    @property
    def cursor(self) -> int:
        """Number of picks known locally."""
        return len(self.picks)

    def _clear(self) -> None:
        self.draft_order = []
        self.picks = []

    def poll_once(self) -> SyncUpdate:
        """Fetch the session once and reconcile the local view."""
        server = self.source.get_league_draft_state(self.league_id)
        update = SyncUpdate()

        has_cache = bool(self.draft_order or self.picks)
        went_back = server.current_pick < self.cursor
        reopened = server.status in (DraftStatus.PENDING, DraftStatus.OPEN) and has_cache
        restarted = has_cache and self.session is not None and server.session != self.session
        reordered = bool(self.draft_order and server.draft_order) and (
            order_fingerprint(server.draft_order) != order_fingerprint(self.draft_order)
        )
        if went_back or reopened or restarted or reordered:
            self._resync(update)
        self.session = server.session

        if server.status != self.status:
            update.status_changed = self.status is not None or update.reset
            logger.debug(f'League {self.league_id}: status {self.status} -> {server.status}')
            self.status = server.status

        self._load_order(server, update)

        if server.current_pick > self.cursor:
            fetched = self._fetch_picks(server.current_pick)
            if not self._matches_cache(fetched):
                self._resync(update)
                self._load_order(server, update)
                fetched = self._fetch_picks(server.current_pick)
            for pick in fetched:
                # Only extend contiguously; a gap is filled on a later poll
                if pick.pick_number != self.cursor + 1:
                    continue
                self.picks.append(pick)
                update.new_picks.append(pick)
            if update.new_picks:
                logger.info(
                    f'League {self.league_id}: {len(update.new_picks)} new pick(s), '
                    f'now at {self.cursor}/{len(self.draft_order)}'
                )

        return update

    def _resync(self, update: SyncUpdate) -> None:
        logger.info(f'League {self.league_id}: draft was reset on the server, resyncing')
        self._clear()
        update.reset = True

    def _load_order(self, server: LeagueDraftState, update: SyncUpdate) -> None:
        if server.status in (DraftStatus.IN_PROGRESS, DraftStatus.COMPLETED) and not self.draft_order:
            self.draft_order = list(server.draft_order)
            self.order_fetches += 1
            update.order_loaded = True
            logger.info(f'League {self.league_id}: loaded draft order ({len(self.draft_order)} picks)')

    def _fetch_picks(self, end: int) -> List[DraftPick]:
        """Picks after the local cursor, starting at the last cached pick so it can be checked."""
        start = self.cursor if self.picks else 1
        fetched = self.source.list_draft_picks(self.league_id, start=start, end=end)
        return sorted(fetched, key=lambda p: p.pick_number)

    def _matches_cache(self, fetched: List[DraftPick]) -> bool:
        """False when the server's copy of the last cached pick differs from ours."""
        if not self.picks:
            return True
        last = self.picks[-1]
        for pick in fetched:
            if pick.pick_number == last.pick_number:
                return (pick.participant_id, pick.player_id) == (last.participant_id, last.player_id)
        return True

    def current_turn(self) -> Optional[DraftOrderEntry]:
        """Order entry on the clock according to the local view."""
        if self.status != DraftStatus.IN_PROGRESS:
            return None
        if self.cursor < len(self.draft_order):
            return self.draft_order[self.cursor]
        return None

    def is_my_turn(self) -> bool:
        turn = self.current_turn()
        return turn is not None and turn.participant_id == self.participant_id

    def is_complete(self) -> bool:
        return self.status == DraftStatus.COMPLETED and self.cursor >= len(self.draft_order)

    def picked_player_ids(self) -> set[str]:
        return {p.player_id for p in self.picks}

    def run(
        self,
        max_polls: Optional[int] = None,
        stop_event: Optional[threading.Event] = None,
        on_update: Optional[Callable[[SyncUpdate], None]] = None,
    ) -> int:
        """
        Poll until the draft completes, stop_event is set, or max_polls is hit.

        A failed poll is logged and retried on the next interval; missed
        intervals are caught up in one fetch.

        Returns:
            Number of polls performed
        """
        polls = 0
        while max_polls is None or polls < max_polls:
            if stop_event is not None and stop_event.is_set():
                break
            polls += 1
            try:
                update = self.poll_once()
            except Exception as e:
                logger.warning(f'League {self.league_id}: poll failed ({e}), retrying')
            else:
                if on_update is not None and update.changed:
                    on_update(update)
                if self.is_complete():
                    break

            if max_polls is not None and polls >= max_polls:
                break
            if stop_event is not None:
                if stop_event.wait(self.poll_interval):
                    break
            else:
                time.sleep(self.poll_interval)
        return polls

    def submit_pick(self, machine, player_id: str) -> PickResult:
        """
        Submit a pick for this client's participant through the state machine.

        The local view only changes through the poll that follows, whether
        the pick was accepted or rejected.
        """
        if self.participant_id is None:
            raise ValueError('Client has no participant_id; it can only observe the draft')
        result = machine.make_pick(self.participant_id, player_id)
        self.poll_once()
        return result
