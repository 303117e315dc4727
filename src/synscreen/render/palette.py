"""
Pitch-class color mapping.

Maps a continuous midi value onto a 12-entry palette (one color per
pitch class, C through B) with circular interpolation, then fades the
color toward transparent black according to loudness.
"""

import json
import logging
import math
import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from synscreen.errors import PaletteError

logger = logging.getLogger(__name__)

DEFAULT_PALETTE_PATH = Path(__file__).with_name("colors.json")

PITCH_CLASS_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")

TRANSPARENT = np.zeros(4, dtype=np.float64)


def _interpolate(left: np.ndarray, right: np.ndarray, left_weight: float) -> np.ndarray:
    """Weighted channel sum of two RGBA colors, clamped to 0..255."""
    mixed = left * left_weight + right * (1.0 - left_weight)
    return np.clip(mixed, 0, 255).astype(np.uint8).astype(np.float64)


def parse_hex_color(value: str) -> tuple[int, int, int, int]:
    """
    Parse a ``#RRGGBB`` string into an opaque RGBA tuple.

    Raises:
        PaletteError: If the string is not exactly 7 characters of
            ``#`` followed by hex digits.
    """
    if not isinstance(value, str) or not _HEX_COLOR.match(value):
        raise PaletteError(f"Invalid palette color: {value!r} (expected #RRGGBB)")
    return (int(value[1:3], 16), int(value[3:5], 16), int(value[5:7], 16), 255)


@dataclass(frozen=True)
class ColorPalette:
    """Twelve opaque colors, indexed by pitch class."""

    colors: tuple[tuple[int, int, int, int], ...]

    def __post_init__(self):
        if len(self.colors) != 12:
            raise PaletteError(f"Palette needs exactly 12 colors, got {len(self.colors)}")

    @classmethod
    def from_hex(cls, entries: Sequence[str]) -> "ColorPalette":
        """Build a palette from a list of ``#RRGGBB`` strings."""
        if isinstance(entries, (str, bytes)) or not isinstance(entries, Sequence):
            raise PaletteError("Palette must be a list of 12 hex colors")
        if len(entries) != 12:
            raise PaletteError(f"Palette needs exactly 12 colors, got {len(entries)}")
        return cls(colors=tuple(parse_hex_color(entry) for entry in entries))

    def __getitem__(self, index: int) -> tuple[int, int, int, int]:
        return self.colors[index]

    def interpolate_pitch_class(self, diatonic: float) -> tuple[int, int, int, int]:
        """
        Blend the two palette entries surrounding a continuous pitch class.

        Args:
            diatonic: Pitch class, wrapped into [0, 12).

        Returns:
            RGBA tuple.
        """
        diatonic = diatonic % 12.0
        lower = int(math.floor(diatonic)) % 12
        upper = int(math.ceil(diatonic)) % 12
        fractional = diatonic % 1.0

        color = _interpolate(
            np.asarray(self.colors[upper], dtype=np.float64),
            np.asarray(self.colors[lower], dtype=np.float64),
            fractional,
        )
        return tuple(int(c) for c in color)

    def color_for(self, midi: float, amplitude: float) -> tuple[int, int, int, int]:
        """
        Color of a note with the given peak midi value and amplitude.

        The pitch-class color is blended toward transparent black with
        weight ``sqrt(amplitude) * 0.5`` on the color, so quiet notes
        fade out and loud notes saturate.
        """
        base = np.asarray(self.interpolate_pitch_class(midi % 12.0), dtype=np.float64)
        weight = math.sqrt(max(amplitude, 0.0)) * 0.5
        color = _interpolate(base, TRANSPARENT, weight)
        return tuple(int(c) for c in color)


def load_palette(path: str | Path | None = None) -> ColorPalette:
    """
    Load a palette from a JSON list of 12 ``#RRGGBB`` strings.

    Args:
        path: Palette file. None loads the bundled default.

    Returns:
        ColorPalette.

    Raises:
        PaletteError: If the file is unreadable or malformed.
    """
    path = Path(path) if path is not None else DEFAULT_PALETTE_PATH

    try:
        with open(path, "r", encoding="utf-8") as f:
            entries = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise PaletteError(f"Failed to read palette {path}: {e}") from e

    palette = ColorPalette.from_hex(entries)
    logger.debug("Loaded palette from %s", path)
    return palette
