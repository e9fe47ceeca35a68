"""Value objects shared by the configuration, roster and ledger stores."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class PrizeTier:
    """A named prize category with a configured winner quota.

    Attributes
    ----------
    name : str
        Display name of the tier, e.g. ``"一等奖"``. Unique within a config.
    quota : int
        Number of winners a round for this tier should draw. Always positive.
    """

    name: str
    quota: int = 1

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("prize tier name must be a non-empty string")
        if self.quota <= 0:
            raise ValueError("prize tier quota must be positive")


@dataclass(frozen=True)
class WinnerRecord:
    """One committed winner.

    Records are created only by a committed round and never mutated.

    Attributes
    ----------
    prize_name : str
        Tier the participant won.
    participant_name : str
        Exact roster entry that was drawn.
    timestamp : Optional[datetime]
        Local time at which the round was committed. ``None`` only for
        records restored from a result file whose time column is unreadable.
    """

    prize_name: str
    participant_name: str
    timestamp: Optional[datetime]


@dataclass(frozen=True)
class ParsedConfig:
    """Result of parsing a ``data.conf`` file.

    Attributes
    ----------
    title : Optional[str]
        Session title, ``None`` when the file does not set one.
    tiers : tuple[PrizeTier, ...]
        Tiers in order of first appearance.
    """

    title: Optional[str] = None
    tiers: tuple[PrizeTier, ...] = field(default_factory=tuple)


__all__ = ["ParsedConfig", "PrizeTier", "WinnerRecord"]
