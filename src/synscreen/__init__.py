"""Audio-to-image synesthesia pipeline."""

from synscreen.config import SynscreenConfig
from synscreen.core.note import Note, Pitch
from synscreen.io.track import PlaybackState, Track, TrackLoader
from synscreen.pipeline import Synesthetizer, TickResult
from synscreen.render.palette import ColorPalette, load_palette

__version__ = "0.1.0"
__all__ = [
    "SynscreenConfig",
    "Note",
    "Pitch",
    "PlaybackState",
    "Track",
    "TrackLoader",
    "Synesthetizer",
    "TickResult",
    "ColorPalette",
    "load_palette",
]
