"""Configuration, roster and winner ledger storage."""

from .config import (
    DEFAULT_PRIZE_TIERS,
    DEFAULT_SELECTED_TIER,
    DEFAULT_TITLE,
    load_config_file,
    parse_config,
    render_default_config,
    write_config_file,
)
from .ledger import LEDGER_HEADER, WinnerLedger
from .roster import DEFAULT_ROSTER, RosterStore, clean_names, load_roster_file

__all__ = [
    "DEFAULT_PRIZE_TIERS",
    "DEFAULT_ROSTER",
    "DEFAULT_SELECTED_TIER",
    "DEFAULT_TITLE",
    "LEDGER_HEADER",
    "RosterStore",
    "WinnerLedger",
    "clean_names",
    "load_config_file",
    "load_roster_file",
    "parse_config",
    "render_default_config",
    "write_config_file",
]
