"""Exception types raised by the lottery core."""

from __future__ import annotations

from enum import Enum


class LotteryError(Exception):
    """Base class for errors surfaced to callers of :mod:`annualdraw`."""


class PreconditionReason(str, Enum):
    """Why an operation was refused."""

    SCREEN_NOT_OPEN = "screen_not_open"
    SCREEN_ALREADY_OPEN = "screen_already_open"
    ROUND_ALREADY_DRAWN = "round_already_drawn"
    ROUND_IN_PROGRESS = "round_in_progress"
    NO_REMAINING_PARTICIPANTS = "no_remaining_participants"


_MESSAGES = {
    PreconditionReason.SCREEN_NOT_OPEN: "Open the draw screen before starting a round.",
    PreconditionReason.SCREEN_ALREADY_OPEN: "The draw screen is already open.",
    PreconditionReason.ROUND_ALREADY_DRAWN: (
        "This draw screen has already run its round; reopen the screen to draw again."
    ),
    PreconditionReason.ROUND_IN_PROGRESS: "A round is already in progress.",
    PreconditionReason.NO_REMAINING_PARTICIPANTS: (
        "There is nobody left to draw; import a roster first."
    ),
}


class PreconditionNotMet(LotteryError):
    """An operation was requested in a state that does not allow it.

    The state machine is left untouched when this is raised; callers
    typically render :attr:`message` as user feedback.

    Attributes
    ----------
    reason : PreconditionReason
        Machine readable cause.
    message : str
        Human readable explanation.
    """

    def __init__(self, reason: PreconditionReason, message: str | None = None) -> None:
        self.reason = reason
        self.message = message or _MESSAGES[reason]
        super().__init__(self.message)


class ExportError(LotteryError):
    """Exporting the result file failed (missing source or existing target)."""


__all__ = [
    "ExportError",
    "LotteryError",
    "PreconditionNotMet",
    "PreconditionReason",
]
