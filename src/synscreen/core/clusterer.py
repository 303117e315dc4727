"""
Tone clustering module.

Groups spectral bins into a handful of Notes by greedy nearest-neighbour
merging in midi space.
"""

from typing import Iterable

from synscreen.core.analyzer import SpectrumBin
from synscreen.core.note import Note, Pitch
from synscreen.errors import NoteInclusionError


class ToneClusterer:
    """
    Greedy single-pass clusterer.

    Each bin goes to the note whose midi range is nearest; ties go to the
    earliest note. A bin the nearest note refuses starts a new note. The
    result is order dependent, so bins are consumed exactly as given.
    """

    def cluster(self, bins: Iterable[SpectrumBin]) -> list[Note]:
        """
        Cluster bins into notes.

        Args:
            bins: Spectral bins in arrival order.

        Returns:
            Notes sorted ascending by peak amplitude, loudest last.
        """
        notes: list[Note] = []

        for spectrum_bin in bins:
            pitch = Pitch.from_frequency(spectrum_bin.frequency)
            amplitude = spectrum_bin.amplitude

            closest = None
            closest_distance = 0.0
            for note in notes:
                distance = note.distance_from_midi(pitch.midi)
                if closest is None or distance < closest_distance:
                    closest = note
                    closest_distance = distance

            if closest is None:
                notes.append(Note(pitch, amplitude))
                continue

            try:
                closest.try_include(pitch, amplitude)
            except NoteInclusionError:
                notes.append(Note(pitch, amplitude))

        # Painter's order: louder notes end up on top
        notes.sort(key=lambda note: note.peak_amplitude)
        return notes
