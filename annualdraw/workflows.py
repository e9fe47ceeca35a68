from typing import Callable, Iterable, Optional, Sequence
from pathlib import Path
import logging
import random
from datetime import datetime

from .draw.screen import ScreenHandle, ScreenLifecycleGuard
from .draw.session import DrawSession, can_export, can_start_round, can_stop_round
from .models import DrawState, ParsedConfig, PrizeTier, StateChanged, WinnerRecord
from .settings import ROLLING_DISPLAY_LIMIT, data_paths
from .store.config import (
    DEFAULT_PRIZE_TIERS,
    DEFAULT_SELECTED_TIER,
    DEFAULT_TITLE,
    load_config_file,
    parse_config,
    render_default_config,
    write_config_file,
)
from .store.ledger import WinnerLedger
from .store.roster import DEFAULT_ROSTER, RosterStore, load_roster_file

logger = logging.getLogger(__name__)

Listener = Callable[[StateChanged], None]


class LotteryCoordinator:
    """Application-level facade for one lottery session.

    Owns the roster, the winner ledger, the prize configuration, the screen
    guard and the draw session, and exposes the operations a front end binds
    to. After every mutating operation a :class:`StateChanged` event carrying
    a fresh :class:`DrawState` snapshot is published to subscribers.

    All mutating operations are expected to be called from a single control
    thread.

    Parameters
    ----------
    roster : Optional[RosterStore], default: None
        Participants. Defaults to the demo roster.
    ledger : Optional[WinnerLedger], default: None
        Winner history. Defaults to a memory-only ledger.
    config_path : Optional[Path], default: None
        Where a full reset writes the default configuration. ``None`` skips
        writing.
    rng : Optional[random.Random], default: None
        Random source forwarded to the draw session.
    clock : Optional[Callable[[], datetime]], default: None
        Timestamp source forwarded to the draw session.
    """

    def __init__(
        self,
        *,
        roster: Optional[RosterStore] = None,
        ledger: Optional[WinnerLedger] = None,
        config_path: Optional[Path] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.roster = roster if roster is not None else RosterStore(DEFAULT_ROSTER)
        self.ledger = ledger if ledger is not None else WinnerLedger()
        self.config_path = Path(config_path) if config_path is not None else None
        self.guard = ScreenLifecycleGuard()
        self.session = DrawSession(
            self.roster, self.ledger, self.guard, rng=rng, clock=clock
        )

        self._listeners: list[Listener] = []
        self._title = DEFAULT_TITLE
        self._tiers: tuple[PrizeTier, ...] = DEFAULT_PRIZE_TIERS
        self._selected_tier: Optional[str] = None
        self._draw_count = 1
        self.select_tier(DEFAULT_SELECTED_TIER)

    @classmethod
    def from_data_dir(
        cls,
        data_dir: Optional[Path] = None,
        *,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "LotteryCoordinator":
        """Build a coordinator from ``data.conf``, ``user.txt`` and ``result.csv``.

        Missing or unreadable files fall back to the built-in defaults: the
        default title and tiers, the demo roster, and an empty history.
        """

        config_path, roster_path, ledger_path = data_paths(data_dir)

        names = load_roster_file(roster_path)
        roster = RosterStore(names if names else DEFAULT_ROSTER)
        ledger = WinnerLedger.load(ledger_path)

        coordinator = cls(
            roster=roster,
            ledger=ledger,
            config_path=config_path,
            rng=rng,
            clock=clock,
        )
        parsed = load_config_file(config_path)
        if parsed is not None:
            coordinator.apply_config(parsed)
        logger.info(
            "Loaded lottery data: %d participants, %d previous winners",
            roster.size(),
            ledger.count(),
        )
        return coordinator

    # -------- events --------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, operation: str) -> DrawState:
        state = self.snapshot()
        event = StateChanged(operation=operation, state=state)
        for listener in list(self._listeners):
            listener(event)
        return state

    # -------- configuration --------
    @property
    def title(self) -> str:
        return self._title

    @property
    def tiers(self) -> tuple[PrizeTier, ...]:
        return self._tiers

    @property
    def selected_tier(self) -> Optional[str]:
        return self._selected_tier

    @property
    def draw_count(self) -> int:
        return self._draw_count

    @draw_count.setter
    def draw_count(self, value: int) -> None:
        self._draw_count = value if value > 0 else 1

    def quota_for(self, name: str) -> Optional[int]:
        for tier in self._tiers:
            if tier.name == name:
                return tier.quota
        return None

    def select_tier(self, name: str) -> None:
        """Select the tier for the next round.

        When ``name`` has a configured quota, :attr:`draw_count` follows it.
        A round already in progress keeps the tier and quota it started with.
        """
        self._selected_tier = name
        quota = self.quota_for(name)
        if quota is not None and quota > 0:
            self.draw_count = quota
        self._publish("select_tier")

    def set_draw_count(self, value: int) -> None:
        self.draw_count = value
        self._publish("set_draw_count")

    def apply_config(self, parsed: ParsedConfig) -> None:
        """Apply a parsed configuration.

        The title is replaced when set. When at least one tier is present the
        tier list is replaced wholesale and its first tier becomes selected;
        a config without tiers leaves the current ones in place.
        """
        if parsed.title:
            self._title = parsed.title
        if parsed.tiers:
            self._tiers = parsed.tiers
            first = parsed.tiers[0]
            self._selected_tier = first.name
            self.draw_count = first.quota
        self._publish("apply_config")

    def load_config_lines(self, lines: Iterable[object]) -> ParsedConfig:
        parsed = parse_config(lines)
        self.apply_config(parsed)
        return parsed

    # -------- roster --------
    @property
    def total_participants(self) -> int:
        return self.roster.size()

    @property
    def remaining_participants(self) -> int:
        return len(self.session.remaining_pool())

    def import_roster(self, names: Iterable[object]) -> int:
        """Replace the roster and return the number of imported names.

        Winner history is kept, so previous winners stay ineligible.
        """
        self.roster.replace_all(names)
        self.session.clear_current_round()
        self._publish("import_roster")
        return self.roster.size()

    def import_roster_file(self, path: Path) -> Optional[int]:
        """Import one name per line from ``path``.

        Returns ``None`` and leaves the roster untouched when the file is
        missing or unreadable.
        """
        names = load_roster_file(path)
        if names is None:
            logger.warning("Roster file %s could not be imported", path)
            return None
        return self.import_roster(names)

    # -------- draw screen and rounds --------
    def show_draw_screen(self) -> ScreenHandle:
        """Open the draw screen, or return the handle of the one already open.

        Only a newly opened screen re-arms the round; showing an open screen
        again keeps its round state.
        """
        current = self.guard.current
        if current is not None:
            return current
        handle = self.guard.mark_opened()
        self.session.open_screen()
        self._publish("open_screen")
        return handle

    def close_draw_screen(self, handle: ScreenHandle) -> bool:
        """Close the screen identified by ``handle``.

        A round still rolling is aborted without any ledger write. Returns
        ``False`` for a stale handle.
        """
        if self.guard.current != handle:
            return False
        self.session.close_screen()
        self.guard.mark_closed(handle)
        self._publish("close_screen")
        return True

    def start_round(self) -> None:
        """Start a round for the selected tier with :attr:`draw_count` winners.

        Raises
        ------
        PreconditionNotMet
            See :meth:`DrawSession.start_round`.
        """
        self.session.start_round(self._draw_count, self._selected_tier)
        self._publish("start_round")

    def stop_round(self) -> tuple[WinnerRecord, ...]:
        """Stop the running round and return its committed winners."""
        if not can_stop_round(self.snapshot()):
            return ()
        records = self.session.stop_round()
        self._publish("stop_round")
        return records

    def tick(self) -> list[str]:
        """Names for one frame of the rolling display. Cosmetic only."""
        return self.session.display_names(ROLLING_DISPLAY_LIMIT)

    # -------- reset and results --------
    def reset_to_defaults(self, confirm: Optional[Callable[[], bool]] = None) -> bool:
        """Restore the default title and tiers and wipe all winners.

        Also deletes the result file and rewrites the config file with the
        defaults. Nothing happens when ``confirm`` is given and returns a
        falsy value.

        Returns
        -------
        bool
            ``True`` if the reset ran.
        """
        if confirm is not None and not confirm():
            logger.debug("Reset declined")
            return False

        self._title = DEFAULT_TITLE
        self._tiers = DEFAULT_PRIZE_TIERS
        self._selected_tier = DEFAULT_SELECTED_TIER
        self.draw_count = self.quota_for(DEFAULT_SELECTED_TIER) or 1

        self.session.clear_current_round()
        self.ledger.clear()
        if self.config_path is not None:
            write_config_file(
                self.config_path, render_default_config(self._title, self._tiers)
            )

        logger.info("Lottery reset to defaults")
        self._publish("reset")
        return True

    def export_results(self, destination: Path) -> Path:
        """Copy the result file to ``destination`` without overwriting.

        Raises
        ------
        ExportError
            If there is nothing to export or the target exists.
        """
        return self.ledger.export_to(destination)

    def all_winners(self) -> tuple[WinnerRecord, ...]:
        return self.ledger.records()

    def winners_summary(self) -> str:
        """Text listing of every winner as ``[prize] name`` lines."""
        records = self.ledger.records()
        if not records:
            return "当前还没有任何中奖记录。"
        lines = ["全部中奖名单："]
        lines.extend(f"[{r.prize_name}] {r.participant_name}" for r in records)
        return "\n".join(lines)

    # -------- derived state --------
    def snapshot(self) -> DrawState:
        round_state = self.session.state()
        return DrawState(
            phase=round_state.phase,
            has_committed_this_screen=round_state.has_committed_this_screen,
            screen_open=self.guard.is_open(),
            current_round_winners=round_state.current_round_winners,
            title=self._title,
            tiers=self._tiers,
            selected_tier=self._selected_tier,
            draw_count=self._draw_count,
            total_participants=self.total_participants,
            remaining_participants=self.remaining_participants,
            winner_count=self.ledger.count(),
        )

    def can_start_round(self) -> bool:
        return can_start_round(self.snapshot())

    def can_stop_round(self) -> bool:
        return can_stop_round(self.snapshot())

    def can_export(self) -> bool:
        return can_export(self.snapshot())


def run_round(
    coordinator: LotteryCoordinator,
    tier: Optional[str] = None,
    count: Optional[int] = None,
) -> Sequence[WinnerRecord]:
    """Open a screen, draw one round and close the screen again.

    Convenience for scripted draws. ``tier`` and ``count`` override the
    current selection when given.

    Raises
    ------
    PreconditionNotMet
        If the round cannot start; the screen is closed again before the
        error propagates.
    """
    if tier is not None:
        coordinator.select_tier(tier)
    if count is not None:
        coordinator.set_draw_count(count)

    handle = coordinator.show_draw_screen()
    try:
        coordinator.start_round()
        return coordinator.stop_round()
    finally:
        coordinator.close_draw_screen(handle)
