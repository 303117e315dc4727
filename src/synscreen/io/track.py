"""
Track model and background loading.

Decoding happens on a worker thread; the pipeline only ever sees a
fully materialized Track.
"""

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

import librosa
import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackMeta:
    """Display names of a track, known before decoding finishes."""

    file_name: str
    name: str

    @classmethod
    def from_path(cls, path: str | Path) -> "TrackMeta":
        path = Path(path)
        return cls(
            file_name=path.name or "<unreadable file name>",
            name=path.stem or "Unknown",
        )


@dataclass
class Track:
    """
    Decoded audio, kept at its native sample rate.

    ``samples`` is either mono ``(n,)`` or channel-first
    ``(channels, n)``, the layout librosa returns with ``mono=False``.
    """

    samples: np.ndarray
    sample_rate: int
    meta: TrackMeta = field(
        default_factory=lambda: TrackMeta(file_name="<memory>", name="Untitled")
    )

    def __post_init__(self):
        self.samples = np.asarray(self.samples, dtype=np.float32)
        if self.samples.ndim not in (1, 2):
            raise ValueError(f"Expected 1-D or 2-D samples, got shape {self.samples.shape}")

    @property
    def n_channels(self) -> int:
        return 1 if self.samples.ndim == 1 else self.samples.shape[0]

    @property
    def n_samples(self) -> int:
        return self.samples.shape[-1]

    @property
    def duration(self) -> float:
        return self.n_samples / self.sample_rate

    def channel(self, index: int = 0) -> np.ndarray:
        """One channel of the track; mono tracks return their only channel."""
        if self.samples.ndim == 1:
            return self.samples
        return self.samples[index]

    @property
    def mono(self) -> np.ndarray:
        """First channel, used as the mono reduction for analysis."""
        return self.channel(0)


@dataclass
class PlaybackState:
    """What the playback subsystem reports at a tick."""

    track: Track | None = None
    position: float = 0.0
    stopped: bool = True

    @property
    def is_active(self) -> bool:
        return self.track is not None and not self.stopped


class TrackLoader:
    """
    Loads audio files on a background thread.

    Only one load is tracked at a time: starting a new load abandons
    the result of any unfinished one.
    """

    def __init__(self, sample_rate: int | None = None):
        """
        Initialize the loader.

        Args:
            sample_rate: Resample to this rate. None keeps the file's rate.
        """
        self.sample_rate = sample_rate
        self._active: tuple[TrackMeta, threading.Thread, dict] | None = None

    @property
    def is_loading(self) -> bool:
        return self._active is not None

    def _decode(self, path: Path, meta: TrackMeta, outcome: dict):
        try:
            samples, sr = librosa.load(path, sr=self.sample_rate, mono=False)
            outcome["track"] = Track(samples=samples, sample_rate=int(sr), meta=meta)
            logger.info("Loaded %s", meta.file_name)
        except Exception as e:
            outcome["error"] = e

    def load_from_file(self, path: str | Path) -> TrackMeta:
        """
        Start decoding an audio file.

        Args:
            path: Audio file (wav, mp3, flac).

        Returns:
            TrackMeta for the file being loaded.
        """
        path = Path(path)
        meta = TrackMeta.from_path(path)
        outcome: dict = {}

        worker = threading.Thread(
            target=self._decode,
            args=(path, meta, outcome),
            name=f"track-loader-{meta.name}",
            daemon=True,
        )
        self._active = (meta, worker, outcome)
        worker.start()

        return meta

    def check_loaded(self) -> Track | None:
        """
        Poll the current load.

        Returns:
            The Track once decoding has finished, exactly once. None while
            still loading, when nothing is loading, or when decoding failed.
        """
        if self._active is None:
            return None

        meta, worker, outcome = self._active
        if worker.is_alive():
            return None

        self._active = None
        if "error" in outcome:
            logger.error("There was a problem loading %s: %s", meta.file_name, outcome["error"])
            return None
        return outcome.get("track")

    def wait(self, timeout: float | None = None) -> Track | None:
        """Block until the current load finishes, then behave like ``check_loaded``."""
        if self._active is not None:
            self._active[1].join(timeout)
        return self.check_loaded()
