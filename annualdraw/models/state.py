"""Round lifecycle states and immutable state snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .records import PrizeTier, WinnerRecord


class Phase(str, Enum):
    """Lifecycle phase of a :class:`~annualdraw.draw.session.DrawSession`."""

    IDLE = "idle"
    ARMED = "armed"
    DRAWING = "drawing"
    STOPPED = "stopped"


@dataclass(frozen=True)
class RoundState:
    """Snapshot of the draw session's own fields."""

    phase: Phase
    has_committed_this_screen: bool
    current_round_winners: tuple[WinnerRecord, ...]


@dataclass(frozen=True)
class DrawState:
    """Snapshot of everything a bound UI needs to render the lottery.

    Attributes
    ----------
    phase : Phase
        Current round phase.
    has_committed_this_screen : bool
        ``True`` once the open screen has used its single round.
    screen_open : bool
        Whether a draw screen is currently open.
    current_round_winners : tuple[WinnerRecord, ...]
        Winners of the round shown on the open screen.
    title : str
        Session title.
    tiers : tuple[PrizeTier, ...]
        Configured tiers in display order.
    selected_tier : Optional[str]
        Tier the next round is drawn for.
    draw_count : int
        Number of winners the next round requests.
    total_participants : int
        Roster size.
    remaining_participants : int
        Roster entries that have not won yet.
    winner_count : int
        Number of records in the ledger.
    """

    phase: Phase
    has_committed_this_screen: bool
    screen_open: bool
    current_round_winners: tuple[WinnerRecord, ...]
    title: str
    tiers: tuple[PrizeTier, ...]
    selected_tier: Optional[str]
    draw_count: int
    total_participants: int
    remaining_participants: int
    winner_count: int


@dataclass(frozen=True)
class StateChanged:
    """Event published after every mutating coordinator operation."""

    operation: str
    state: DrawState


__all__ = ["DrawState", "Phase", "RoundState", "StateChanged"]
