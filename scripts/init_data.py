from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from annualdraw.settings import DEFAULT_DATA_DIR, data_paths
from annualdraw.store import DEFAULT_ROSTER, render_default_config, write_config_file
from annualdraw.workflows import LotteryCoordinator


def init_data_dir(data_dir: Path) -> None:
    """Write a default ``data.conf`` and the demo ``user.txt`` where missing."""
    config_path, roster_path, _ = data_paths(data_dir)
    if not config_path.exists():
        write_config_file(config_path, render_default_config())
    if not roster_path.exists():
        roster_path.parent.mkdir(parents=True, exist_ok=True)
        roster_path.write_text("\n".join(DEFAULT_ROSTER) + "\n", encoding="utf-8")


def print_summary(data_dir: Path) -> None:
    """Load the data directory and report what a session would start with."""
    coordinator = LotteryCoordinator.from_data_dir(data_dir)
    state = coordinator.snapshot()
    print("Title:", state.title)
    print("Tiers:", ", ".join(f"{t.name}={t.quota}" for t in state.tiers))
    print(
        f"Participants: {state.total_participants} "
        f"(remaining {state.remaining_participants}, winners {state.winner_count})"
    )


def main(argv: Optional[list[str]] = None) -> None:
    """Initialise the data directory (default from ``LOTTERY_DATA_DIR``)."""
    logging.basicConfig(level=logging.INFO)
    args = sys.argv[1:] if argv is None else argv
    data_dir = Path(args[0]) if args else DEFAULT_DATA_DIR
    init_data_dir(data_dir)
    print_summary(data_dir)


if __name__ == "__main__":
    main()
