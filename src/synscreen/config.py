"""
Configuration for the synscreen pipeline.

Frame geometry, analysis rate and the audible band are fixed by default
but can be overridden per pipeline instance.
"""

from dataclasses import dataclass
from pathlib import Path

FRAME_WIDTH = 1600
FRAME_HEIGHT = 900

# Visual frames per second the sample window is sized for
TARGET_FPS = 12.0

# Lowest and highest piano-adjacent frequencies (C0 and B8)
C0_FREQ = 16.35
B8_FREQ = 7902.13


@dataclass
class SynscreenConfig:
    """Settings shared by every stage of the pipeline."""

    width: int = FRAME_WIDTH
    height: int = FRAME_HEIGHT
    target_fps: float = TARGET_FPS

    # Spectral band kept by the analyzer
    min_frequency: float = C0_FREQ
    max_frequency: float = B8_FREQ

    # None loads the bundled colors.json
    palette_path: Path | None = None
