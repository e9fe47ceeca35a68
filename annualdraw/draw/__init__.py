"""Round state machine, screen lifecycle and random selection."""

from .sampling import rolling_sample, sample_without_replacement
from .screen import ScreenHandle, ScreenLifecycleGuard
from .session import DrawSession, can_export, can_start_round, can_stop_round

__all__ = [
    "DrawSession",
    "ScreenHandle",
    "ScreenLifecycleGuard",
    "can_export",
    "can_start_round",
    "can_stop_round",
    "rolling_sample",
    "sample_without_replacement",
]
