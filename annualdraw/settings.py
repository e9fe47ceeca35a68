import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from .utils import resolve_relative_path

# Get data directory
load_dotenv()
# Project root directory (repo root)
ROOT_DIR = Path(__file__).resolve().parents[1]
DEFAULT_DATA_DIR = resolve_relative_path(
    os.getenv("LOTTERY_DATA_DIR", "./data"), ROOT_DIR
)

CONFIG_FILENAME = "data.conf"
ROSTER_FILENAME = "user.txt"
LEDGER_FILENAME = "result.csv"


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


# Cosmetic "rolling names" animation; never affects selection.
ROLLING_INTERVAL_MS = _get_int("ROLLING_INTERVAL_MS", 80)
ROLLING_DISPLAY_LIMIT = _get_int("ROLLING_DISPLAY_LIMIT", 50)


def data_paths(data_dir: Optional[Path] = None) -> tuple[Path, Path, Path]:
    """Return the ``(config, roster, ledger)`` file paths inside ``data_dir``."""
    base = Path(data_dir) if data_dir is not None else DEFAULT_DATA_DIR
    return (
        base / CONFIG_FILENAME,
        base / ROSTER_FILENAME,
        base / LEDGER_FILENAME,
    )
