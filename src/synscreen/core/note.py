"""
Pitch and note model.

A Note absorbs nearby spectral bins into bounded midi and amplitude
ranges, remembering its loudest constituent as the peak.
"""

import math
from dataclasses import dataclass

from synscreen.errors import NoteInclusionError

# A4 reference: 440 Hz is midi note 69
A4_FREQ = 440.0
A4_MIDI = 69.0


def _distance_from_range(value: float, bounds: tuple[float, float]) -> float:
    """Gap between a value and the nearer bound, 0 if inside."""
    low, high = bounds
    if low <= value <= high:
        return 0.0
    if value > high:
        return value - high
    return low - value


def _extend_range(value: float, bounds: tuple[float, float]) -> tuple[float, float]:
    """Move only the bound the value lies beyond."""
    low, high = bounds
    if value > high:
        return (low, value)
    if value < low:
        return (value, high)
    return bounds


def _range_width(bounds: tuple[float, float]) -> float:
    return bounds[1] - bounds[0]


@dataclass(frozen=True, eq=False)
class Pitch:
    """A frequency together with its continuous midi number."""

    frequency: float
    midi: float

    @classmethod
    def from_frequency(cls, frequency: float) -> "Pitch":
        return cls(
            frequency=float(frequency),
            midi=12.0 * math.log2(frequency / A4_FREQ) + A4_MIDI,
        )

    @classmethod
    def from_midi(cls, midi: float) -> "Pitch":
        return cls(
            frequency=A4_FREQ * 2.0 ** ((midi - A4_MIDI) / 12.0),
            midi=float(midi),
        )

    def __eq__(self, other):
        if not isinstance(other, Pitch):
            return NotImplemented
        return self.frequency == other.frequency

    def __hash__(self):
        return hash(self.frequency)


class Note:
    """
    One perceived tone within a single analysis tick.

    Ranges are closed (low, high) tuples. Their widths never exceed
    MAX_MIDI_RANGE and MAX_AMPLITUDE_RANGE; a bin that would widen a
    range past its limit is rejected and the note is left untouched.
    """

    MAX_MIDI_RANGE = 1.0
    MAX_AMPLITUDE_RANGE = 0.25

    def __init__(self, pitch: Pitch, amplitude: float):
        amplitude = float(amplitude)
        self.peak_pitch = pitch
        self.peak_amplitude = amplitude
        self.amp_range = (amplitude, amplitude)
        self.midi_range = (pitch.midi, pitch.midi)

    def __repr__(self) -> str:
        return (
            f"Note(midi={self.midi:.3f}, amplitude={self.peak_amplitude:.4f}, "
            f"midi_range={self.midi_range}, amp_range={self.amp_range})"
        )

    @property
    def midi(self) -> float:
        return self.peak_pitch.midi

    @property
    def frequency(self) -> float:
        return self.peak_pitch.frequency

    @property
    def amplitude(self) -> float:
        return self.peak_amplitude

    def distance_from_midi(self, midi: float) -> float:
        """Distance in midi units from ``midi`` to this note's range."""
        return _distance_from_range(midi, self.midi_range)

    def try_include(self, pitch: Pitch, amplitude: float) -> None:
        """
        Absorb a spectral bin into this note.

        Args:
            pitch: Pitch of the bin.
            amplitude: Amplitude of the bin.

        Raises:
            NoteInclusionError: If either range would grow past its limit.
        """
        amplitude = float(amplitude)

        midi_span = _distance_from_range(pitch.midi, self.midi_range) + _range_width(self.midi_range)
        amp_span = _distance_from_range(amplitude, self.amp_range) + _range_width(self.amp_range)

        if midi_span > self.MAX_MIDI_RANGE or amp_span > self.MAX_AMPLITUDE_RANGE:
            raise NoteInclusionError(
                f"midi {pitch.midi:.3f} / amplitude {amplitude:.4f} out of reach of {self!r}"
            )

        self.amp_range = _extend_range(amplitude, self.amp_range)
        self.midi_range = _extend_range(pitch.midi, self.midi_range)

        if amplitude > self.peak_amplitude:
            self.peak_amplitude = amplitude
            self.peak_pitch = pitch
