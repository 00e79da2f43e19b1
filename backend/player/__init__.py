from .controller import MediaElement, PlayerPhase, SeamlessPlayer
from .timeline import PartSource, Timeline, format_time

__all__ = [
    "MediaElement",
    "PlayerPhase",
    "SeamlessPlayer",
    "PartSource",
    "Timeline",
    "format_time",
]
