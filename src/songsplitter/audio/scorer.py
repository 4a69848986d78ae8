# this_file: src/songsplitter/audio/scorer.py
"""Confidence scoring of potential song boundaries."""

from dataclasses import dataclass

import numpy as np
from loguru import logger

from ..config import DetectionSettings
from .loudness import EnergyProfile


@dataclass(frozen=True)
class Candidate:
    """A scored potential boundary between two songs."""

    time: float
    confidence: float


class CandidateScorer:
    """Scores every interior window of an energy profile as a split point.

    Four independent tests add to a window's confidence:

    - quiet: smoothed level below the absolute or relative threshold (+0.3)
    - valley: strict local minimum of the smoothed level (+0.2)
    - sustained drop: under half the mean level on both sides (+0.3)
    - spacing: far enough from the previous accepted candidate (+0.2)

    Windows scoring above ``ACCEPT_THRESHOLD`` become candidates.
    """

    ACCEPT_THRESHOLD = 0.4

    QUIET_WEIGHT = 0.3
    VALLEY_WEIGHT = 0.2
    DROP_WEIGHT = 0.3
    SPACING_WEIGHT = 0.2

    def __init__(self, log=None):
        self.log = log if log is not None else logger.bind(component="scorer")

    def score(self, profile: EnergyProfile, settings: DetectionSettings) -> list[Candidate]:
        """Find candidate split points in a loudness profile.

        Args:
            profile: Energy profile of the recording
            settings: Detection settings

        Returns:
            Candidates in time order
        """
        smoothed = profile.smoothed
        n = len(smoothed)
        if n < 3:
            return []

        threshold = self.quiet_threshold(smoothed, settings)
        span = profile.smoothing_window_samples
        prefix = np.concatenate(([0.0], np.cumsum(smoothed)))
        min_gap = settings.min_song_duration * 0.5

        candidates: list[Candidate] = []
        for i in range(1, n - 1):
            time = profile.time_of(i)
            current = smoothed[i]
            confidence = 0.0

            if current < threshold:
                confidence += self.QUIET_WEIGHT

            if current < smoothed[i - 1] and current < smoothed[i + 1]:
                confidence += self.VALLEY_WEIGHT

            look_behind = min(span, i)
            look_ahead = min(span, n - i)
            if look_behind > 0 and look_ahead > 0:
                avg_before = (prefix[i] - prefix[i - look_behind]) / look_behind
                avg_after = (prefix[i + look_ahead] - prefix[i]) / look_ahead
                if current < avg_before * 0.5 and current < avg_after * 0.5:
                    confidence += self.DROP_WEIGHT

            if not candidates or time - candidates[-1].time > min_gap:
                confidence += self.SPACING_WEIGHT

            if confidence > self.ACCEPT_THRESHOLD:
                candidates.append(Candidate(time=time, confidence=confidence))

        self.log.debug(f"Scored {n - 2} windows, threshold {threshold:.5f}: {len(candidates)} candidates")
        return candidates

    @staticmethod
    def quiet_threshold(smoothed: np.ndarray, settings: DetectionSettings) -> float:
        """Level below which a window counts as quiet.

        The larger of the absolute sensitivity and a threshold relative to
        the mean and spread of the whole recording.
        """
        avg = float(np.mean(smoothed))
        std = float(np.std(smoothed))
        relative = max(avg * 0.15, avg - std * 0.8)
        return max(settings.threshold_linear, relative)
