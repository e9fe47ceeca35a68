"""Tracks the single "big screen" display session."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..errors import PreconditionNotMet, PreconditionReason

logger = logging.getLogger(__name__)

_handle_ids = itertools.count(1)


@dataclass(frozen=True)
class ScreenHandle:
    """Identifies one opened draw screen.

    Returned by :meth:`ScreenLifecycleGuard.mark_opened` and passed back to
    close it, so a late close event from an old screen cannot close a newer
    one.
    """

    id: int = field(default_factory=lambda: next(_handle_ids))
    opened_at: datetime = field(default_factory=datetime.now)


class ScreenLifecycleGuard:
    """Whether a draw screen is currently open.

    Independent of the round phase: showing an already open screen again
    leaves it untouched, only opening a new screen instance produces a new
    handle.
    """

    def __init__(self) -> None:
        self._current: Optional[ScreenHandle] = None

    def is_open(self) -> bool:
        return self._current is not None

    @property
    def current(self) -> Optional[ScreenHandle]:
        return self._current

    def mark_opened(self) -> ScreenHandle:
        """Open a new screen and return its handle.

        Raises
        ------
        PreconditionNotMet
            If a screen is already open.
        """
        if self._current is not None:
            raise PreconditionNotMet(PreconditionReason.SCREEN_ALREADY_OPEN)
        self._current = ScreenHandle()
        logger.debug("Draw screen %d opened", self._current.id)
        return self._current

    def mark_closed(self, handle: ScreenHandle) -> bool:
        """Close the screen identified by ``handle``.

        Returns ``False`` and changes nothing when ``handle`` is not the
        currently open screen.
        """
        if self._current is None or handle != self._current:
            return False
        logger.debug("Draw screen %d closed", handle.id)
        self._current = None
        return True


__all__ = ["ScreenHandle", "ScreenLifecycleGuard"]
