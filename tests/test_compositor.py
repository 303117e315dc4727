"""Tests for glyph geometry and the frame compositor."""

import numpy as np
import pytest
from PIL import Image

from synscreen.config import FRAME_HEIGHT, FRAME_WIDTH
from synscreen.core.note import Note, Pitch
from synscreen.errors import SnapshotError
from synscreen.render.compositor import FrameCompositor, NoteGlyph


def _note(midi: float, amplitude: float) -> Note:
    return Note(Pitch.from_midi(midi), amplitude)


class TestNoteGlyph:
    """Tests for glyph placement and size."""

    def test_geometry(self, palette):
        glyph = NoteGlyph.for_note(_note(60.0, 0.5), palette)

        assert glyph.height == 53
        assert glyph.width == 94
        assert glyph.x == 756
        assert glyph.y == 450

    def test_quiet_note_is_wide_and_flat(self, palette):
        glyph = NoteGlyph.for_note(_note(60.0, 0.0), palette)

        assert glyph.height == 3
        assert glyph.width == 1666

    def test_very_loud_note_is_degenerate(self, palette):
        glyph = NoteGlyph.for_note(_note(60.0, 30.0), palette)

        assert glyph.width == 0
        assert glyph.is_degenerate

    def test_x_follows_midi(self, palette):
        assert NoteGlyph.for_note(_note(0.0, 1.0), palette).x == 0
        assert NoteGlyph.for_note(_note(127.0, 1.0), palette).x == FRAME_WIDTH
        assert NoteGlyph.for_note(_note(69.0, 1.0), palette).x == 869

    def test_color_from_palette(self, palette):
        glyph = NoteGlyph.for_note(_note(69.0, 4.0), palette)
        assert glyph.color == palette[9]

    def test_diamond_corners(self, palette):
        glyph = NoteGlyph.for_note(_note(60.0, 4.0), palette)
        w, h = glyph.width, glyph.height

        assert glyph.polygon() == [(0, h // 2), (w // 2, 0), (w, h // 2), (w // 2, h)]

    def test_render_tile(self, palette):
        glyph = NoteGlyph.for_note(_note(60.0, 4.0), palette)
        tile = glyph.render()

        assert tile.size == (glyph.width, glyph.height)
        assert tile.getpixel((glyph.width // 2, glyph.height // 2)) == glyph.color
        # Corners of the tile lie outside the diamond
        assert tile.getpixel((0, 0)) == (0, 0, 0, 0)


class TestFrameCompositor:
    """Tests for drawing, overlay persistence and frame output."""

    @pytest.fixture
    def compositor(self, palette):
        return FrameCompositor(palette)

    def test_blank_frame(self, compositor):
        frame = compositor.compose([]).frame

        assert frame.shape == (FRAME_HEIGHT, FRAME_WIDTH, 4)
        assert frame.dtype == np.uint8
        assert not np.any(frame)

    def test_frame_is_read_only(self, compositor):
        frame = compositor.compose([]).frame

        with pytest.raises(ValueError):
            frame[0, 0, 0] = 1

    def test_draws_note_at_centre_line(self, compositor, palette):
        note = _note(60.0, 4.0)
        frame = compositor.compose([note]).frame

        assert tuple(frame[450, 756]) == palette[0]
        assert not np.any(frame[0, 0])

    def test_degenerate_note_skipped(self, compositor):
        frame = compositor.compose([_note(60.0, 30.0)]).frame
        assert not np.any(frame)

    def test_glyph_clipped_at_left_edge(self, compositor, palette):
        frame = compositor.compose([_note(0.0, 4.0)]).frame
        assert tuple(frame[450, 0]) == palette[0]

    def test_glyph_clipped_at_right_edge(self, compositor, palette):
        frame = compositor.compose([_note(127.0, 4.0)]).frame
        assert tuple(frame[450, FRAME_WIDTH - 1]) == palette[7]

    def test_later_notes_drawn_on_top(self, compositor):
        loud = _note(60.0, 4.0)
        quiet = _note(60.0, 1.0)
        frame = compositor.compose([loud, quiet]).frame

        bottom = Image.new("RGBA", (1, 1), compositor.palette.color_for(60.0, 4.0))
        top = Image.new("RGBA", (1, 1), compositor.palette.color_for(60.0, 1.0))
        expected = Image.alpha_composite(bottom, top).getpixel((0, 0))

        assert tuple(frame[450, 756]) == expected

    def test_without_overlay_frames_start_blank(self, compositor):
        compositor.compose([_note(60.0, 4.0)])
        frame = compositor.compose([]).frame

        assert not np.any(frame)

    def test_overlay_persists_previous_frame(self, compositor):
        compositor.set_overlay(True)
        first = compositor.compose([_note(60.0, 4.0)]).frame
        second = compositor.compose([]).frame

        np.testing.assert_array_equal(second, first)

    def test_overlay_accumulates(self, compositor, palette):
        compositor.set_overlay(True)
        compositor.compose([_note(60.0, 4.0)])
        frame = compositor.compose([_note(69.0, 4.0)]).frame

        assert tuple(frame[450, 756]) == palette[0]
        assert tuple(frame[450, 869]) == palette[9]

    def test_overlay_off_discards_trail(self, compositor):
        compositor.set_overlay(True)
        compositor.compose([_note(60.0, 4.0)])

        compositor.set_overlay(False)
        compositor.set_overlay(True)
        frame = compositor.compose([]).frame

        assert not np.any(frame)

    def test_last_frame_tracks_output(self, compositor):
        result = compositor.compose([_note(60.0, 4.0)])
        assert compositor.last_frame is result.frame


class TestSnapshots:
    """Tests for the single-slot snapshot mailbox."""

    @pytest.fixture
    def compositor(self, palette):
        return FrameCompositor(palette)

    def test_snapshot_written_once(self, compositor, tmp_path):
        path = tmp_path / "shot.png"
        compositor.request_snapshot(path)

        result = compositor.compose([_note(60.0, 4.0)])

        assert result.snapshot_path == path
        assert result.snapshot_error is None
        assert compositor.pending_snapshot is None

        with Image.open(path) as img:
            assert img.mode == "RGBA"
            assert img.size == (FRAME_WIDTH, FRAME_HEIGHT)
            np.testing.assert_array_equal(np.array(img), result.frame)

        path.unlink()
        follow_up = compositor.compose([])
        assert follow_up.snapshot_path is None
        assert not path.exists()

    def test_later_request_replaces_pending(self, compositor, tmp_path):
        first = tmp_path / "first.png"
        second = tmp_path / "second.png"
        compositor.request_snapshot(first)
        compositor.request_snapshot(second)

        result = compositor.compose([])

        assert result.snapshot_path == second
        assert second.exists()
        assert not first.exists()

    def test_failed_write_reported_and_cleared(self, compositor, tmp_path):
        compositor.request_snapshot(tmp_path / "missing" / "shot.png")

        result = compositor.compose([])

        assert isinstance(result.snapshot_error, SnapshotError)
        assert result.snapshot_path is None
        assert compositor.pending_snapshot is None
        assert compositor.compose([]).snapshot_error is None

    def test_snapshot_includes_overlay_trail(self, compositor, tmp_path, palette):
        compositor.set_overlay(True)
        compositor.compose([_note(60.0, 4.0)])

        path = tmp_path / "trail.png"
        compositor.request_snapshot(path)
        compositor.compose([])

        with Image.open(path) as img:
            assert img.getpixel((756, 450)) == palette[0]
