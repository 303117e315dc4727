"""
Frame compositor.

Paints notes as diamond glyphs onto an RGBA canvas, keeps the previous
canvas around in overlay mode and serves one-shot snapshot requests.
"""

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import numpy as np
from PIL import Image, ImageDraw

from synscreen.config import FRAME_HEIGHT, FRAME_WIDTH
from synscreen.core.note import Note
from synscreen.errors import SnapshotError
from synscreen.render.palette import ColorPalette

logger = logging.getLogger(__name__)

# Highest midi value mapped onto the frame width
MIDI_SPAN = 127.0

# width * height of a glyph stays near this area
GLYPH_AREA = 2500


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class NoteGlyph:
    """Placement, size and color of one note's diamond."""

    x: int
    y: int
    width: int
    height: int
    color: tuple[int, int, int, int]

    @classmethod
    def for_note(
        cls,
        note: Note,
        palette: ColorPalette,
        frame_width: int = FRAME_WIDTH,
        frame_height: int = FRAME_HEIGHT,
    ) -> "NoteGlyph":
        """
        Lay out a note: louder notes get taller and narrower diamonds,
        higher notes sit further right, all on the vertical centre line.
        """
        height = math.ceil(note.peak_amplitude * 100) + 3
        width = (GLYPH_AREA // height) * 2 if height > 0 else 0
        return cls(
            x=_round_half_up(frame_width * (note.midi / MIDI_SPAN)),
            y=_round_half_up(frame_height / 2),
            width=width,
            height=height,
            color=palette.color_for(note.midi, note.peak_amplitude),
        )

    @property
    def is_degenerate(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def polygon(self) -> list[tuple[int, int]]:
        """Diamond corners relative to the glyph's top-left corner."""
        w, h = self.width, self.height
        return [(0, h // 2), (w // 2, 0), (w, h // 2), (w // 2, h)]

    def render(self) -> Image.Image:
        """Rasterize the diamond on its own transparent tile."""
        tile = Image.new("RGBA", (self.width, self.height), (0, 0, 0, 0))
        ImageDraw.Draw(tile).polygon(self.polygon(), fill=self.color)
        return tile


@dataclass
class ComposedFrame:
    """Output of one compositor pass."""

    frame: np.ndarray
    snapshot_path: Path | None = None
    snapshot_error: SnapshotError | None = None


class FrameCompositor:
    """
    Owns the working raster and the persisted overlay canvas.

    Callers only ever see read-only numpy copies of the canvas.
    """

    def __init__(
        self,
        palette: ColorPalette,
        width: int = FRAME_WIDTH,
        height: int = FRAME_HEIGHT,
    ):
        self.palette = palette
        self.width = width
        self.height = height

        self._overlay_enabled = False
        self._persisted: Image.Image | None = None
        self._snapshot_request: Path | None = None
        self._last_frame = self._freeze(self._blank_canvas())

    @property
    def overlay_enabled(self) -> bool:
        return self._overlay_enabled

    @property
    def pending_snapshot(self) -> Path | None:
        return self._snapshot_request

    @property
    def last_frame(self) -> np.ndarray:
        """Most recent frame returned by ``compose``."""
        return self._last_frame

    def _blank_canvas(self) -> Image.Image:
        return Image.new("RGBA", (self.width, self.height), (0, 0, 0, 0))

    @staticmethod
    def _freeze(canvas: Image.Image) -> np.ndarray:
        frame = np.array(canvas, dtype=np.uint8)
        frame.setflags(write=False)
        return frame

    def set_overlay(self, enabled: bool):
        """Switch overlay mode; switching it off drops the trail at once."""
        if enabled == self._overlay_enabled:
            return
        self._overlay_enabled = enabled
        if not enabled:
            self.clear_overlay()
            logger.info("Overlay cleared.")

    def clear_overlay(self):
        self._persisted = None

    def request_snapshot(self, path: str | Path):
        """Ask for the next composed frame to be written to ``path``."""
        self._snapshot_request = Path(path)

    def begin_canvas(self) -> Image.Image:
        """Starting canvas for a tick."""
        if self._overlay_enabled and self._persisted is not None:
            return self._persisted.copy()
        return self._blank_canvas()

    def draw_note(self, canvas: Image.Image, note: Note):
        """Alpha-composite one note's glyph onto the canvas."""
        glyph = NoteGlyph.for_note(note, self.palette, self.width, self.height)
        if glyph.is_degenerate:
            return

        x0 = glyph.x - glyph.width // 2
        y0 = glyph.y - glyph.height // 2

        # Clip the tile to the canvas
        left = max(x0, 0)
        top = max(y0, 0)
        right = min(x0 + glyph.width, self.width)
        bottom = min(y0 + glyph.height, self.height)
        if right <= left or bottom <= top:
            return

        canvas.alpha_composite(
            glyph.render(),
            dest=(left, top),
            source=(left - x0, top - y0, right - x0, bottom - y0),
        )

    def _write_snapshot(self, canvas: Image.Image) -> tuple[Path | None, SnapshotError | None]:
        path = self._snapshot_request
        if path is None:
            return None, None

        # Cleared up front: a failing path is not retried every tick
        self._snapshot_request = None

        try:
            canvas.save(path, format="PNG")
        except (OSError, ValueError) as e:
            error = SnapshotError(f"Failed to write snapshot {path}: {e}")
            logger.warning("%s", error)
            return None, error

        logger.info("Snapshot saved to %s", path)
        return path, None

    def compose(self, notes: Iterable[Note]) -> ComposedFrame:
        """
        Run one compositor pass.

        Args:
            notes: Notes in painting order (quietest first).

        Returns:
            ComposedFrame with the read-only frame and snapshot outcome.
        """
        canvas = self.begin_canvas()

        for note in notes:
            self.draw_note(canvas, note)

        if self._overlay_enabled:
            self._persisted = canvas.copy()

        snapshot_path, snapshot_error = self._write_snapshot(canvas)

        self._last_frame = self._freeze(canvas)
        return ComposedFrame(
            frame=self._last_frame,
            snapshot_path=snapshot_path,
            snapshot_error=snapshot_error,
        )
