"""Exception types raised by the synscreen pipeline."""


class SynscreenError(Exception):
    """Base class for all synscreen errors."""


class PaletteError(SynscreenError):
    """The color palette resource is malformed."""


class TransformError(SynscreenError):
    """The spectral transform could not run on the given window."""


class SnapshotError(SynscreenError):
    """Writing a snapshot image failed."""


class NoteInclusionError(SynscreenError):
    """A spectral bin does not fit into a note's bounded ranges."""
