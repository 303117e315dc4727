"""
Main visualization pipeline.

Orchestrates one tick: sample the audible window, analyze its spectrum,
cluster bins into notes and composite the notes into a frame.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from synscreen.config import SynscreenConfig
from synscreen.core.analyzer import SpectralAnalyzer
from synscreen.core.clusterer import ToneClusterer
from synscreen.core.note import Note
from synscreen.core.sampler import FrameSampler
from synscreen.errors import SnapshotError, TransformError
from synscreen.io.track import PlaybackState, Track
from synscreen.render.compositor import FrameCompositor
from synscreen.render.palette import PITCH_CLASS_NAMES, ColorPalette, load_palette

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """Everything one tick produced."""

    frame: np.ndarray
    notes: list[Note] = field(default_factory=list)
    # Set when a snapshot was written this tick
    snapshot_path: Path | None = None
    snapshot_error: SnapshotError | None = None
    # Set when analysis failed; ``frame`` is then the previous frame
    error: TransformError | None = None

    @property
    def skipped(self) -> bool:
        return self.error is not None


class Synesthetizer:
    """
    Audio-to-image pipeline.

    Combines sampling, spectral analysis, tone clustering and
    compositing behind a single ``tick`` call. Driven from a single
    thread; all state is owned by the instance.
    """

    def __init__(
        self,
        config: SynscreenConfig | None = None,
        palette: ColorPalette | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            config: Pipeline settings. Defaults to SynscreenConfig().
            palette: Color palette. Loaded from ``config.palette_path``
                (or the bundled palette) when omitted.

        Raises:
            PaletteError: If the palette resource is malformed.
        """
        self.cfg = config or SynscreenConfig()

        self.palette = palette or load_palette(self.cfg.palette_path)
        self.sampler = FrameSampler(target_fps=self.cfg.target_fps)
        self.analyzer = SpectralAnalyzer(
            min_frequency=self.cfg.min_frequency,
            max_frequency=self.cfg.max_frequency,
        )
        self.clusterer = ToneClusterer()
        self.compositor = FrameCompositor(
            self.palette,
            width=self.cfg.width,
            height=self.cfg.height,
        )

        self.current_notes: list[Note] = []

    @property
    def samples_per_frame(self) -> int:
        return self.sampler.samples_per_frame

    def load_track(self, track: Track) -> int:
        """
        Prepare for a newly loaded track.

        Args:
            track: Fully decoded track.

        Returns:
            The analysis window length chosen for the track.
        """
        samples_per_frame = self.sampler.configure(track.sample_rate)
        logger.info(
            "Track %s: %d Hz, %d samples per frame (%.2f fps)",
            track.meta.name,
            track.sample_rate,
            samples_per_frame,
            track.sample_rate / samples_per_frame,
        )
        return samples_per_frame

    def request_snapshot(self, path: str | Path):
        """Write the next frame to ``path``; replaces any unserved request."""
        self.compositor.request_snapshot(path)
        logger.info("Snapshot requested.")

    def clear_overlay(self):
        self.compositor.clear_overlay()

    def analyze(self, track: Track, position: float) -> list[Note]:
        """
        Find the notes audible at a playback position.

        Args:
            track: Track being played.
            position: Playback position in seconds.

        Returns:
            Notes sorted ascending by peak amplitude.

        Raises:
            TransformError: If the spectral transform rejects the window.
        """
        if self.sampler.samples_per_frame == 0:
            self.load_track(track)

        frame = self.sampler.extract(track.mono, track.sample_rate, position)
        bins = self.analyzer.spectrum(frame, track.sample_rate)
        return self.clusterer.cluster(bins)

    def tick(
        self,
        playback: PlaybackState | None = None,
        overlay_enabled: bool = False,
    ) -> TickResult:
        """
        Produce the frame for the current moment.

        Args:
            playback: Current playback state; None or a stopped state
                renders without analysis.
            overlay_enabled: Whether frames accumulate into a trail.

        Returns:
            TickResult. Transform and snapshot failures are reported in
            the result rather than raised.
        """
        self.compositor.set_overlay(overlay_enabled)

        notes: list[Note] = []
        if playback is not None and playback.is_active:
            try:
                notes = self.analyze(playback.track, playback.position)
            except TransformError as e:
                logger.warning("Skipping frame at %.3fs: %s", playback.position, e)
                return TickResult(
                    frame=self.compositor.last_frame,
                    notes=self.current_notes,
                    error=e,
                )

        self.current_notes = notes
        if notes:
            loudest = notes[-1]
            logger.debug(
                "%d notes, loudest %s (midi %.2f, amplitude %.3f)",
                len(notes),
                PITCH_CLASS_NAMES[int(loudest.midi) % 12],
                loudest.midi,
                loudest.peak_amplitude,
            )

        composed = self.compositor.compose(notes)

        return TickResult(
            frame=composed.frame,
            notes=notes,
            snapshot_path=composed.snapshot_path,
            snapshot_error=composed.snapshot_error,
        )
