"""
Spectral analysis module.

Turns one windowed frame of samples into (frequency, amplitude) bins
restricted to the audible piano band.
"""

from dataclasses import dataclass

import numpy as np
from scipy import fft as scipy_fft

from synscreen.config import B8_FREQ, C0_FREQ
from synscreen.errors import TransformError

MIN_FFT_SIZE = 4


@dataclass(frozen=True)
class SpectrumBin:
    """One spectral bin."""

    frequency: float
    amplitude: float


class SpectralAnalyzer:
    """
    Computes the magnitude spectrum of a windowed frame.

    Magnitudes are divided by sqrt(N). Only bins whose centre frequency
    falls within [min_frequency, max_frequency] are returned; the upper
    edge is lowered to Nyquist for low sample rates.
    """

    def __init__(
        self,
        min_frequency: float = C0_FREQ,
        max_frequency: float = B8_FREQ,
    ):
        """
        Initialize the analyzer.

        Args:
            min_frequency: Lowest frequency kept, in Hz.
            max_frequency: Highest frequency kept, in Hz.
        """
        self.min_frequency = min_frequency
        self.max_frequency = max_frequency

    def _validate(self, frame: np.ndarray, sample_rate: int):
        n = len(frame)
        if n < MIN_FFT_SIZE:
            raise TransformError(f"need at least {MIN_FFT_SIZE} samples, got {n}")
        if n & (n - 1):
            raise TransformError(f"sample count must be a power of two, got {n}")
        if sample_rate <= 0:
            raise TransformError(f"invalid sample rate: {sample_rate}")
        if not np.all(np.isfinite(frame)):
            raise TransformError("frame contains NaN or infinite samples")

    def spectrum(self, frame: np.ndarray, sample_rate: int) -> list[SpectrumBin]:
        """
        Compute the band-limited spectrum of a frame.

        Args:
            frame: Windowed samples, power-of-two length.
            sample_rate: Sample rate of the source track.

        Returns:
            Bins in ascending frequency order.

        Raises:
            TransformError: If the frame violates the transform preconditions.
        """
        frame = np.asarray(frame, dtype=np.float64)
        self._validate(frame, sample_rate)

        n = len(frame)
        magnitudes = np.abs(scipy_fft.rfft(frame)) / np.sqrt(n)
        frequencies = scipy_fft.rfftfreq(n, d=1.0 / sample_rate)

        upper = min(self.max_frequency, sample_rate / 2)
        mask = (frequencies >= self.min_frequency) & (frequencies <= upper)

        return [
            SpectrumBin(frequency=float(fr), amplitude=float(amp))
            for fr, amp in zip(frequencies[mask], magnitudes[mask])
        ]
