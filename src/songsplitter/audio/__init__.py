# this_file: audio/__init__.py
"""Audio analysis and export module for songsplitter."""

from .analyzer import SongAnalyzer
from .decoder import AudioDecoder, DecodedAudio
from .exporter import ExportBatch, SegmentExporter
from .loudness import EnergyProfile, LoudnessProfileBuilder
from .scorer import Candidate, CandidateScorer
from .segmenter import QuietRegion, SongSegmenter

__all__ = [
    "AudioDecoder",
    "Candidate",
    "CandidateScorer",
    "DecodedAudio",
    "EnergyProfile",
    "ExportBatch",
    "LoudnessProfileBuilder",
    "QuietRegion",
    "SegmentExporter",
    "SongAnalyzer",
    "SongSegmenter",
]
