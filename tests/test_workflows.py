from __future__ import annotations

import random
import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from annualdraw.errors import ExportError, PreconditionNotMet, PreconditionReason
from annualdraw.models import Phase, PrizeTier, StateChanged, WinnerRecord
from annualdraw.store import (
    DEFAULT_PRIZE_TIERS,
    DEFAULT_ROSTER,
    DEFAULT_TITLE,
    RosterStore,
    WinnerLedger,
    render_default_config,
)
from annualdraw.workflows import LotteryCoordinator, run_round

WHEN = datetime(2026, 1, 23, 20, 0, 0)


def _coordinator(names=("Alice", "Bob", "Carol"), ledger=None, config_path=None):
    return LotteryCoordinator(
        roster=RosterStore(names),
        ledger=ledger or WinnerLedger(),
        config_path=config_path,
        rng=random.Random(11),
        clock=lambda: WHEN,
    )


class CoordinatorDefaultsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        coordinator = LotteryCoordinator()
        self.assertEqual(coordinator.title, DEFAULT_TITLE)
        self.assertEqual(coordinator.tiers, DEFAULT_PRIZE_TIERS)
        self.assertEqual(coordinator.selected_tier, "三等奖")
        self.assertEqual(coordinator.draw_count, 10)
        self.assertEqual(coordinator.roster.all(), DEFAULT_ROSTER)
        self.assertEqual(coordinator.remaining_participants, 5)

    def test_select_tier_follows_configured_quota(self) -> None:
        coordinator = _coordinator()
        coordinator.select_tier("一等奖")
        self.assertEqual(coordinator.draw_count, 3)
        coordinator.select_tier("未配置")
        self.assertEqual(coordinator.selected_tier, "未配置")
        self.assertEqual(coordinator.draw_count, 3)

    def test_quota_lookup(self) -> None:
        coordinator = _coordinator()
        self.assertEqual(coordinator.quota_for("一等奖"), 3)
        self.assertIsNone(coordinator.quota_for("missing"))

    def test_draw_count_minimum_is_one(self) -> None:
        coordinator = _coordinator()
        coordinator.set_draw_count(0)
        self.assertEqual(coordinator.draw_count, 1)
        coordinator.set_draw_count(-5)
        self.assertEqual(coordinator.draw_count, 1)

    def test_load_config_lines(self) -> None:
        coordinator = _coordinator()
        coordinator.load_config_lines(["Title=Demo", "A=2", "B"])
        self.assertEqual(coordinator.title, "Demo")
        self.assertEqual(coordinator.tiers, (PrizeTier("A", 2), PrizeTier("B", 1)))
        self.assertEqual(coordinator.selected_tier, "A")
        self.assertEqual(coordinator.draw_count, 2)

    def test_config_without_tiers_keeps_current_tiers(self) -> None:
        coordinator = _coordinator()
        coordinator.load_config_lines(["Title=Only a title"])
        self.assertEqual(coordinator.title, "Only a title")
        self.assertEqual(coordinator.tiers, DEFAULT_PRIZE_TIERS)
        self.assertEqual(coordinator.selected_tier, "三等奖")


class CoordinatorRoundTests(unittest.TestCase):
    def test_round_requires_open_screen(self) -> None:
        coordinator = _coordinator()
        self.assertFalse(coordinator.can_start_round())
        with self.assertRaises(PreconditionNotMet) as ctx:
            coordinator.start_round()
        self.assertEqual(ctx.exception.reason, PreconditionReason.SCREEN_NOT_OPEN)
        self.assertEqual(coordinator.ledger.count(), 0)

    def test_end_to_end_round(self) -> None:
        coordinator = _coordinator()
        coordinator.load_config_lines(["A=2"])

        handle = coordinator.show_draw_screen()
        self.assertTrue(coordinator.can_start_round())
        coordinator.start_round()
        self.assertTrue(coordinator.can_stop_round())
        self.assertFalse(coordinator.can_start_round())

        winners = coordinator.stop_round()
        names = {w.participant_name for w in winners}
        self.assertEqual(len(names), 2)
        self.assertTrue(names <= {"Alice", "Bob", "Carol"})
        self.assertEqual(coordinator.remaining_participants, 1)
        self.assertTrue(coordinator.can_export())

        with self.assertRaises(PreconditionNotMet) as ctx:
            coordinator.start_round()
        self.assertEqual(ctx.exception.reason, PreconditionReason.ROUND_ALREADY_DRAWN)
        self.assertEqual(coordinator.ledger.count(), 2)

        # Showing the open screen again does not re-arm it.
        self.assertEqual(coordinator.show_draw_screen(), handle)
        self.assertFalse(coordinator.can_start_round())

        # A newly opened screen does.
        self.assertTrue(coordinator.close_draw_screen(handle))
        coordinator.show_draw_screen()
        self.assertTrue(coordinator.can_start_round())

    def test_close_while_drawing_writes_nothing(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "result.csv"
            coordinator = _coordinator(ledger=WinnerLedger(path))
            handle = coordinator.show_draw_screen()
            coordinator.start_round()
            coordinator.close_draw_screen(handle)

            self.assertEqual(coordinator.ledger.count(), 0)
            self.assertFalse(path.exists())
            self.assertEqual(coordinator.snapshot().phase, Phase.IDLE)

    def test_stale_handle_is_ignored(self) -> None:
        coordinator = _coordinator()
        first = coordinator.show_draw_screen()
        coordinator.close_draw_screen(first)
        second = coordinator.show_draw_screen()
        self.assertFalse(coordinator.close_draw_screen(first))
        self.assertEqual(coordinator.guard.current, second)

    def test_stop_without_round_is_a_no_op(self) -> None:
        coordinator = _coordinator()
        self.assertEqual(coordinator.stop_round(), ())

    def test_tier_and_quota_are_fixed_when_round_starts(self) -> None:
        coordinator = _coordinator(names=[f"P{i}" for i in range(20)])
        coordinator.select_tier("一等奖")
        coordinator.show_draw_screen()
        coordinator.start_round()
        coordinator.select_tier("幸运奖")
        winners = coordinator.stop_round()
        self.assertEqual(len(winners), 3)
        self.assertTrue(all(w.prize_name == "一等奖" for w in winners))

    def test_tick_is_cosmetic(self) -> None:
        coordinator = _coordinator()
        coordinator.show_draw_screen()
        coordinator.start_round()
        for _ in range(5):
            names = coordinator.tick()
            self.assertTrue(set(names) <= {"Alice", "Bob", "Carol"})
        self.assertEqual(coordinator.ledger.count(), 0)

    def test_run_round_closes_screen(self) -> None:
        coordinator = _coordinator()
        winners = run_round(coordinator, tier="一等奖")
        self.assertEqual(len(winners), 3)
        self.assertFalse(coordinator.guard.is_open())
        with self.assertRaises(PreconditionNotMet):
            run_round(coordinator)
        self.assertFalse(coordinator.guard.is_open())

    def test_no_repeat_winners_across_rounds(self) -> None:
        coordinator = _coordinator(names=[f"P{i}" for i in range(25)])
        for tier in ("特等奖", "一等奖", "二等奖", "三等奖", "幸运奖"):
            try:
                run_round(coordinator, tier=tier)
            except PreconditionNotMet:
                break
        names = [r.participant_name for r in coordinator.all_winners()]
        self.assertEqual(len(names), 25)
        self.assertEqual(len(set(names)), 25)


class CoordinatorRosterTests(unittest.TestCase):
    def test_import_keeps_winner_history(self) -> None:
        coordinator = _coordinator()
        coordinator.ledger.append([WinnerRecord("特等奖", "Alice", WHEN)])
        imported = coordinator.import_roster(["Alice", " Dave ", ""])
        self.assertEqual(imported, 2)
        self.assertEqual(coordinator.total_participants, 2)
        self.assertEqual(coordinator.remaining_participants, 1)

    def test_import_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "names.txt"
            path.write_text("张三\n李四\n\n", encoding="utf-8")
            coordinator = _coordinator()
            self.assertEqual(coordinator.import_roster_file(path), 2)

    def test_import_missing_file_keeps_roster(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            coordinator = _coordinator()
            with self.assertLogs("annualdraw.workflows", level="WARNING"):
                result = coordinator.import_roster_file(Path(tmpdir) / "missing.txt")
        self.assertIsNone(result)
        self.assertEqual(coordinator.roster.all(), ("Alice", "Bob", "Carol"))


class CoordinatorResetTests(unittest.TestCase):
    def test_declined_reset_changes_nothing(self) -> None:
        coordinator = _coordinator()
        coordinator.load_config_lines(["Title=Custom", "A=2"])
        run_round(coordinator)
        self.assertFalse(coordinator.reset_to_defaults(confirm=lambda: False))
        self.assertEqual(coordinator.title, "Custom")
        self.assertEqual(coordinator.ledger.count(), 2)

    def test_reset_restores_defaults_and_clears_results(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "data.conf"
            result_path = Path(tmpdir) / "result.csv"
            coordinator = _coordinator(
                ledger=WinnerLedger(result_path), config_path=config_path
            )
            coordinator.load_config_lines(["Title=Custom", "A=2"])
            run_round(coordinator)
            self.assertTrue(result_path.exists())

            self.assertTrue(coordinator.reset_to_defaults(confirm=lambda: True))

            self.assertEqual(coordinator.ledger.count(), 0)
            self.assertFalse(result_path.exists())
            self.assertEqual(coordinator.tiers, DEFAULT_PRIZE_TIERS)
            self.assertEqual(coordinator.title, DEFAULT_TITLE)
            self.assertEqual(coordinator.selected_tier, "三等奖")
            self.assertEqual(coordinator.draw_count, 10)
            self.assertEqual(coordinator.snapshot().current_round_winners, ())
            self.assertEqual(
                config_path.read_text(encoding="utf-8"), render_default_config()
            )


class CoordinatorDataDirTests(unittest.TestCase):
    def test_loads_all_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            data_dir = Path(tmpdir)
            (data_dir / "data.conf").write_text(
                "# 配置\nTitle=Gala\n一等奖=2\n二等奖=4\n", encoding="utf-8"
            )
            (data_dir / "user.txt").write_text("Alice\nBob\nCarol\n", encoding="utf-8")
            WinnerLedger(data_dir / "result.csv").append(
                [WinnerRecord("特等奖", "Bob", WHEN)]
            )

            coordinator = LotteryCoordinator.from_data_dir(data_dir)

            self.assertEqual(coordinator.title, "Gala")
            self.assertEqual([t.name for t in coordinator.tiers], ["一等奖", "二等奖"])
            self.assertEqual(coordinator.selected_tier, "一等奖")
            self.assertEqual(coordinator.draw_count, 2)
            self.assertEqual(coordinator.total_participants, 3)
            self.assertEqual(coordinator.remaining_participants, 2)
            self.assertTrue(coordinator.ledger.has_won("Bob"))

    def test_undecodable_bytes_do_not_discard_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            data_dir = Path(tmpdir)
            (data_dir / "user.txt").write_bytes(b"Alice\nBob\nCar\xffol")
            (data_dir / "data.conf").write_bytes(b"Title=Gala\nA=2\nB\xff=3")
            coordinator = LotteryCoordinator.from_data_dir(data_dir)
        self.assertEqual(coordinator.total_participants, 3)
        self.assertEqual(coordinator.roster.all()[:2], ("Alice", "Bob"))
        self.assertEqual(coordinator.title, "Gala")
        self.assertEqual(coordinator.tiers[0], PrizeTier("A", 2))
        self.assertEqual(len(coordinator.tiers), 2)

    def test_empty_directory_uses_demo_state(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            coordinator = LotteryCoordinator.from_data_dir(Path(tmpdir))
        self.assertEqual(coordinator.roster.all(), DEFAULT_ROSTER)
        self.assertEqual(coordinator.tiers, DEFAULT_PRIZE_TIERS)
        self.assertEqual(coordinator.title, DEFAULT_TITLE)

    def test_empty_roster_file_uses_demo_roster(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "user.txt").write_text("\n  \n", encoding="utf-8")
            coordinator = LotteryCoordinator.from_data_dir(Path(tmpdir))
        self.assertEqual(coordinator.roster.all(), DEFAULT_ROSTER)


class CoordinatorResultsTests(unittest.TestCase):
    def test_export_and_summary(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            coordinator = _coordinator(ledger=WinnerLedger(tmp / "result.csv"))
            self.assertFalse(coordinator.can_export())
            self.assertEqual(coordinator.winners_summary(), "当前还没有任何中奖记录。")
            with self.assertRaises(ExportError):
                coordinator.export_results(tmp / "out.csv")

            winners = run_round(coordinator, tier="特等奖")
            self.assertTrue(coordinator.can_export())
            self.assertEqual(
                coordinator.winners_summary(),
                f"全部中奖名单：\n[特等奖] {winners[0].participant_name}",
            )

            target = coordinator.export_results(tmp / "out.csv")
            self.assertEqual(target.read_bytes(), (tmp / "result.csv").read_bytes())
            with self.assertRaises(ExportError):
                coordinator.export_results(tmp / "out.csv")


class CoordinatorEventTests(unittest.TestCase):
    def test_events_carry_fresh_snapshots(self) -> None:
        coordinator = _coordinator()
        events: list[StateChanged] = []
        unsubscribe = coordinator.subscribe(events.append)

        handle = coordinator.show_draw_screen()
        coordinator.start_round()
        coordinator.stop_round()
        coordinator.close_draw_screen(handle)

        self.assertEqual(
            [e.operation for e in events],
            ["open_screen", "start_round", "stop_round", "close_screen"],
        )
        self.assertEqual(events[1].state.phase, Phase.DRAWING)
        self.assertEqual(events[2].state.phase, Phase.STOPPED)
        self.assertEqual(events[2].state.winner_count, 3)

        unsubscribe()
        coordinator.set_draw_count(2)
        self.assertEqual(len(events), 4)

    def test_refused_operation_publishes_nothing(self) -> None:
        coordinator = _coordinator()
        events: list[StateChanged] = []
        coordinator.subscribe(events.append)
        with self.assertRaises(PreconditionNotMet):
            coordinator.start_round()
        self.assertEqual(events, [])


if __name__ == "__main__":
    unittest.main()
