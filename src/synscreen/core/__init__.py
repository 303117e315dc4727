"""Core audio analysis modules."""

from synscreen.core.analyzer import SpectralAnalyzer
from synscreen.core.clusterer import ToneClusterer
from synscreen.core.sampler import FrameSampler

__all__ = ["FrameSampler", "SpectralAnalyzer", "ToneClusterer"]
