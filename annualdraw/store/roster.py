"""Participant roster."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence

logger = logging.getLogger(__name__)

# Placeholder roster used when no ``user.txt`` is available.
DEFAULT_ROSTER: tuple[str, ...] = ("张三", "李四", "王五", "赵六", "孙七")


def clean_names(names: Iterable[object]) -> list[str]:
    """Trim entries and drop blanks and non-strings, keeping order.

    Duplicates are kept; the roster does not enforce unique names.
    """

    cleaned: list[str] = []
    for raw in names:
        if not isinstance(raw, str):
            continue
        name = raw.strip()
        if name:
            cleaned.append(name)
    return cleaned


class RosterStore:
    """Ordered list of participant names."""

    def __init__(self, names: Optional[Iterable[object]] = None) -> None:
        self._names: list[str] = clean_names(names or ())

    def replace_all(self, names: Iterable[object]) -> None:
        """Replace the roster with the cleaned ``names``.

        Any remaining pool computed from the previous roster is stale after
        this call.
        """
        self._names = clean_names(names)
        logger.debug("Roster replaced with %d participants", len(self._names))

    def size(self) -> int:
        return len(self._names)

    def all(self) -> Sequence[str]:
        return tuple(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self):
        return iter(self._names)


def load_roster_file(path: Path) -> Optional[list[str]]:
    """Read one participant name per line from ``path``.

    Returns ``None`` when the file is missing or unreadable (the latter is
    logged), otherwise the cleaned names, possibly empty. Undecodable bytes
    are replaced so a bad line never discards the rest of the file.
    """

    path = Path(path)
    if not path.exists():
        return None
    try:
        text = path.read_text(encoding="utf-8-sig", errors="replace")
    except OSError:
        logger.exception("Failed to read roster file %s", path)
        return None
    return clean_names(text.splitlines())


__all__ = ["DEFAULT_ROSTER", "RosterStore", "clean_names", "load_roster_file"]
