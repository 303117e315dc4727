"""Color mapping and frame compositing."""

from synscreen.render.compositor import FrameCompositor, NoteGlyph
from synscreen.render.palette import ColorPalette, load_palette

__all__ = ["ColorPalette", "FrameCompositor", "NoteGlyph", "load_palette"]
