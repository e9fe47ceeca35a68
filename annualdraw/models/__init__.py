from .records import ParsedConfig, PrizeTier, WinnerRecord
from .state import DrawState, Phase, RoundState, StateChanged

__all__ = [
    "DrawState",
    "ParsedConfig",
    "Phase",
    "PrizeTier",
    "RoundState",
    "StateChanged",
    "WinnerRecord",
]
