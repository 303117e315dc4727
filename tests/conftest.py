"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from synscreen.io.track import Track, TrackMeta
from synscreen.render.palette import load_palette

# Default sample rate for test audio
TEST_SR = 44100


@pytest.fixture
def sample_rate() -> int:
    """Default sample rate for tests."""
    return TEST_SR


@pytest.fixture
def pure_sine(sample_rate: int) -> tuple[np.ndarray, int]:
    """
    Generate a 1 second 440Hz sine wave (A4 note) at amplitude 0.5.

    Returns:
        Tuple of (audio_signal, sample_rate).
    """
    duration = 1.0
    t = np.linspace(0, duration, int(sample_rate * duration), endpoint=False)
    y = 0.5 * np.sin(2 * np.pi * 440.0 * t)
    return y.astype(np.float32), sample_rate


@pytest.fixture
def sine_track(pure_sine) -> Track:
    """The pure sine wrapped as a loaded track."""
    y, sr = pure_sine
    return Track(samples=y, sample_rate=sr, meta=TrackMeta(file_name="a4.wav", name="a4"))


@pytest.fixture
def stereo_track(sample_rate: int) -> Track:
    """Stereo track: 440Hz sine on the left, 1kHz sine on the right."""
    duration = 1.0
    t = np.linspace(0, duration, int(sample_rate * duration), endpoint=False)
    left = 0.5 * np.sin(2 * np.pi * 440.0 * t)
    right = 0.5 * np.sin(2 * np.pi * 1000.0 * t)
    return Track(samples=np.stack([left, right]), sample_rate=sample_rate)


@pytest.fixture
def silent_track(sample_rate: int) -> Track:
    """One second of digital silence."""
    return Track(samples=np.zeros(sample_rate, dtype=np.float32), sample_rate=sample_rate)


@pytest.fixture
def palette():
    """The bundled palette."""
    return load_palette()


@pytest.fixture
def temp_audio_file(tmp_path, pure_sine):
    """Create a temporary audio file for testing file I/O."""
    import soundfile as sf

    y, sr = pure_sine
    audio_path = tmp_path / "a4.wav"
    sf.write(audio_path, y, sr)
    return audio_path
