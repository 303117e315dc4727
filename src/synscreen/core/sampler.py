"""
Frame sampling module.

Picks the analysis window size for a track and extracts one
Hann-windowed slice of samples per visual tick.
"""

import math

import numpy as np
from scipy import signal as scipy_signal

from synscreen.config import TARGET_FPS
from synscreen.errors import TransformError


class FrameSampler:
    """
    Cuts the audible window out of a track at a playback position.

    The window length is a power of two (required by the spectral
    transform) chosen so that ``sample_rate / samples_per_frame`` lands
    as close as possible to the target visual frame rate.
    """

    def __init__(self, target_fps: float = TARGET_FPS):
        """
        Initialize the sampler.

        Args:
            target_fps: Visual frame rate the window size aims for.
        """
        self.target_fps = target_fps
        self.samples_per_frame = 0

    def compute_samples_per_frame(self, sample_rate: int) -> int:
        """
        Find the power-of-two window whose frame rate is nearest the target.

        Starts at 2 and keeps doubling while the doubled window moves the
        frame rate strictly closer to the target.

        Args:
            sample_rate: Sample rate of the track.

        Returns:
            Window length in samples.
        """
        size = 2
        while True:
            current_diff = abs(sample_rate / size - self.target_fps)
            doubled_diff = abs(sample_rate / (size * 2) - self.target_fps)
            if doubled_diff < current_diff:
                size *= 2
            else:
                return size

    def configure(self, sample_rate: int) -> int:
        """Size the window for a newly loaded track."""
        self.samples_per_frame = self.compute_samples_per_frame(sample_rate)
        return self.samples_per_frame

    def extract(
        self,
        samples: np.ndarray,
        sample_rate: int,
        position: float,
    ) -> np.ndarray:
        """
        Extract the windowed slice starting at a playback position.

        Args:
            samples: Mono sample array of the whole track.
            sample_rate: Sample rate of the track.
            position: Playback position in seconds.

        Returns:
            float32 array of exactly ``samples_per_frame`` values. The
            tail is zero-padded past the end of the track.

        Raises:
            TransformError: If the position is not a finite number.
        """
        if not math.isfinite(position):
            raise TransformError(f"Playback position must be finite, got {position}")

        frame = np.zeros(self.samples_per_frame, dtype=np.float32)

        start = max(int(position * sample_rate), 0)
        end = min(start + self.samples_per_frame, len(samples))

        if end > start:
            chunk = np.asarray(samples[start:end], dtype=np.float32)
            # Periodic Hann over the samples actually taken
            window = scipy_signal.get_window("hann", len(chunk), fftbins=True)
            frame[: len(chunk)] = chunk * window

        return frame
