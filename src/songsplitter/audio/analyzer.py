# this_file: src/songsplitter/audio/analyzer.py
"""Song boundary detection from a loudness contour."""

import numpy as np
from loguru import logger

from ..config import DetectionSettings
from ..exceptions import InputError
from ..splits.models import Split
from .decoder import DecodedAudio
from .loudness import EnergyProfile, LoudnessProfileBuilder
from .scorer import Candidate, CandidateScorer
from .segmenter import SongSegmenter


def validate_input(pcm: np.ndarray, sample_rate: int, total_duration: float | None = None) -> None:
    """Fail fast on audio that cannot be analyzed or exported.

    Raises:
        InputError: If the buffer is empty, the sample rate is not positive
            or the duration is not positive
    """
    if sample_rate is None or sample_rate <= 0:
        raise InputError(f"Sample rate must be positive, got {sample_rate}")
    if pcm is None or np.asarray(pcm).size == 0:
        raise InputError("PCM buffer is empty")
    if total_duration is not None and total_duration <= 0:
        raise InputError(f"Duration must be positive, got {total_duration}")


class SongAnalyzer:
    """Detects songs in a long recording.

    Runs the loudness profile, candidate scoring and segmentation stages in
    sequence. Every stage is pure; a run either returns a (possibly empty)
    list of splits or raises InputError.
    """

    def __init__(
        self,
        window_seconds: float = 0.5,
        log=None,
    ):
        """Initialize the analyzer.

        Args:
            window_seconds: RMS window length in seconds
            log: Logger handed to every stage (default: loguru logger)
        """
        self.log = log if log is not None else logger.bind(component="analyzer")
        self.profile_builder = LoudnessProfileBuilder(window_seconds, log=log)
        self.scorer = CandidateScorer(log=log)
        self.segmenter = SongSegmenter(log=log)

        # Intermediate results of the last run, for inspection
        self.last_profile: EnergyProfile | None = None
        self.last_candidates: list[Candidate] = []

    def analyze(
        self,
        pcm: np.ndarray,
        sample_rate: int,
        settings: DetectionSettings | None = None,
        total_duration: float | None = None,
    ) -> list[Split]:
        """Propose one split per song.

        Args:
            pcm: 1-D analysis channel, float samples in [-1, 1]
            sample_rate: Sample rate in Hz
            settings: Detection settings (default: DetectionSettings())
            total_duration: Recording length in seconds (default: len(pcm) / sample_rate)

        Returns:
            Splits sorted by start time

        Raises:
            InputError: On empty audio, bad sample rate or non-positive duration
        """
        settings = settings or DetectionSettings()
        validate_input(pcm, sample_rate, total_duration)
        if total_duration is None:
            total_duration = len(pcm) / sample_rate

        self.log.debug(f"Analyzing {total_duration:.2f}s at {sample_rate}Hz with {settings}")

        profile = self.profile_builder.build(pcm, sample_rate, settings.smoothing_window_seconds)
        candidates = self.scorer.score(profile, settings)
        splits = self.segmenter.segment(candidates, total_duration, settings)

        self.last_profile = profile
        self.last_candidates = candidates

        self.log.info(f"Found {len(splits)} songs")
        return splits

    def analyze_audio(
        self,
        audio: DecodedAudio,
        settings: DetectionSettings | None = None,
        channel: str = "first",
    ) -> list[Split]:
        """Propose splits for decoded audio, analyzing a single channel.

        Args:
            audio: Decoded audio
            settings: Detection settings
            channel: "first" or "mix", see DecodedAudio.analysis_channel

        Returns:
            Splits sorted by start time
        """
        return self.analyze(
            audio.analysis_channel(channel), audio.sample_rate, settings, audio.duration
        )
