"""State machine governing a single draw round."""

from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Callable, Optional

from .sampling import rolling_sample, sample_without_replacement
from .screen import ScreenLifecycleGuard
from ..errors import PreconditionNotMet, PreconditionReason
from ..models import DrawState, Phase, RoundState, WinnerRecord
from ..store.ledger import WinnerLedger
from ..store.roster import RosterStore

logger = logging.getLogger(__name__)


class DrawSession:
    """Round lifecycle for the currently open draw screen.

    ``IDLE`` (no screen) -> ``ARMED`` (screen open, no round yet) ->
    ``DRAWING`` (names rolling, nothing selected yet) -> ``STOPPED``
    (winners committed). Closing the screen returns to ``IDLE`` from any
    phase.

    Each opened screen allows exactly one round: once a round is committed,
    or the screen is closed, :attr:`has_committed_this_screen` stays ``True``
    until :meth:`open_screen` runs again.

    Parameters
    ----------
    roster : RosterStore
        Participants to draw from.
    ledger : WinnerLedger
        History used to exclude previous winners and to receive new ones.
    guard : ScreenLifecycleGuard
        Tells whether a draw screen is currently open.
    rng : Optional[random.Random], default: None
        Random source for selection and the rolling display.
    clock : Optional[Callable[[], datetime]], default: None
        Returns the commit timestamp; defaults to local ``datetime.now``.
    """

    def __init__(
        self,
        roster: RosterStore,
        ledger: WinnerLedger,
        guard: ScreenLifecycleGuard,
        *,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._roster = roster
        self._ledger = ledger
        self._guard = guard
        self._rng = rng or random.Random()
        self._clock = clock or datetime.now

        self.phase = Phase.IDLE
        self.has_committed_this_screen = False
        self.requested_quota = 1
        self.prize_name: Optional[str] = None
        self._current: list[WinnerRecord] = []

    @property
    def current_round_winners(self) -> tuple[WinnerRecord, ...]:
        return tuple(self._current)

    def remaining_pool(self) -> list[str]:
        return self._ledger.remaining_pool(self._roster.all())

    def open_screen(self) -> None:
        """Arm the session for a freshly opened screen.

        Raises
        ------
        PreconditionNotMet
            If the session is not ``IDLE``.
        """
        if self.phase is not Phase.IDLE:
            raise PreconditionNotMet(PreconditionReason.SCREEN_ALREADY_OPEN)
        self.has_committed_this_screen = False
        self._current.clear()
        self.phase = Phase.ARMED

    def start_round(self, requested_quota: int, prize_name: Optional[str] = None) -> None:
        """Begin a round that will draw ``requested_quota`` winners.

        Parameters
        ----------
        requested_quota : int
            Number of winners wanted; values below 1 are treated as 1.
        prize_name : Optional[str], default: None
            Tier the round is drawn for. Keeps the previous tier when omitted.

        Raises
        ------
        PreconditionNotMet
            If no screen is open, a round is already running, the screen has
            already used its round, or nobody is left to draw. The session is
            unchanged in every case.
        """
        if not self._guard.is_open() or self.phase is Phase.IDLE:
            raise PreconditionNotMet(PreconditionReason.SCREEN_NOT_OPEN)
        if self.phase is Phase.DRAWING:
            raise PreconditionNotMet(PreconditionReason.ROUND_IN_PROGRESS)
        if self.has_committed_this_screen or self.phase is not Phase.ARMED:
            raise PreconditionNotMet(PreconditionReason.ROUND_ALREADY_DRAWN)
        if not self.remaining_pool():
            raise PreconditionNotMet(PreconditionReason.NO_REMAINING_PARTICIPANTS)

        self.requested_quota = max(1, int(requested_quota))
        if prize_name is not None:
            self.prize_name = prize_name
        self._current.clear()
        self.phase = Phase.DRAWING
        logger.debug("Round started for %s (quota %d)", self.prize_name, self.requested_quota)

    def stop_round(self) -> tuple[WinnerRecord, ...]:
        """Select and commit the winners of the running round.

        Eligibility is evaluated now, not when the round started. Does
        nothing and returns an empty tuple when no round is running.

        Returns
        -------
        tuple[WinnerRecord, ...]
            ``min(requested_quota, len(remaining_pool))`` records in draw
            order, already appended to the ledger.
        """
        if self.phase is not Phase.DRAWING:
            return ()

        names = sample_without_replacement(
            self.remaining_pool(), self.requested_quota, self._rng
        )
        now = self._clock()
        prize = self.prize_name or ""
        records = [WinnerRecord(prize, name, now) for name in names]

        self._ledger.append(records)
        self._current = records
        self.has_committed_this_screen = True
        self.phase = Phase.STOPPED
        logger.info("Round for %s committed %d winners", prize, len(records))
        return tuple(records)

    def close_screen(self) -> None:
        """Return to ``IDLE`` because the screen went away.

        A running round is aborted without touching the ledger. Closing
        always consumes the screen's round.
        """
        if self.phase is Phase.DRAWING:
            self._current.clear()
            logger.info("Round for %s aborted by closing the screen", self.prize_name)
        self.has_committed_this_screen = True
        self.phase = Phase.IDLE

    def clear_current_round(self) -> None:
        self._current.clear()

    def display_names(self, limit: int = 50) -> list[str]:
        """Names for the rolling display.

        While drawing: a random sample (with replacement) of eligible names.
        Before a round: every eligible name. After a round: its winners.
        """
        if self.phase is Phase.DRAWING:
            return rolling_sample(self.remaining_pool(), limit, self._rng)
        if not self._current:
            return self.remaining_pool()
        return [record.participant_name for record in self._current]

    def state(self) -> RoundState:
        return RoundState(
            phase=self.phase,
            has_committed_this_screen=self.has_committed_this_screen,
            current_round_winners=self.current_round_winners,
        )


def can_start_round(state: DrawState) -> bool:
    """Whether :meth:`DrawSession.start_round` would succeed in ``state``."""
    return (
        state.screen_open
        and state.phase is Phase.ARMED
        and not state.has_committed_this_screen
        and state.remaining_participants > 0
    )


def can_stop_round(state: DrawState) -> bool:
    return state.phase is Phase.DRAWING


def can_export(state: DrawState) -> bool:
    return state.winner_count > 0


__all__ = [
    "DrawSession",
    "can_export",
    "can_start_round",
    "can_stop_round",
]
