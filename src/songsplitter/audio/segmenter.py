# this_file: src/songsplitter/audio/segmenter.py
"""Conversion of boundary candidates into song regions."""

from dataclasses import dataclass

from loguru import logger

from ..config import DetectionSettings
from ..splits.models import Split, default_name
from .scorer import Candidate


@dataclass
class QuietRegion:
    """A time interval judged to be silence between songs."""

    start: float
    end: float


class SongSegmenter:
    """Turns scored candidates into quiet regions and then into songs."""

    REGION_THRESHOLD = 0.6

    def __init__(self, log=None):
        self.log = log if log is not None else logger.bind(component="segmenter")

    def quiet_regions(
        self,
        candidates: list[Candidate],
        total_duration: float,
        settings: DetectionSettings,
    ) -> list[QuietRegion]:
        """Build merged quiet regions around high-confidence candidates.

        Candidates are expected in time order; each region is merged into the
        previous one when they touch or overlap.

        Args:
            candidates: Candidates from CandidateScorer
            total_duration: Recording length in seconds
            settings: Detection settings

        Returns:
            Quiet regions in time order
        """
        half = settings.min_silence_duration / 2
        regions: list[QuietRegion] = []

        for candidate in candidates:
            if candidate.confidence <= self.REGION_THRESHOLD:
                continue

            start = max(0.0, candidate.time - half)
            end = min(total_duration, candidate.time + half)

            if regions and start <= regions[-1].end:
                regions[-1].end = max(regions[-1].end, end)
            else:
                regions.append(QuietRegion(start=start, end=end))

        return regions

    def segment(
        self,
        candidates: list[Candidate],
        total_duration: float,
        settings: DetectionSettings,
    ) -> list[Split]:
        """Split a recording into songs separated by quiet regions.

        Args:
            candidates: Candidates from CandidateScorer
            total_duration: Recording length in seconds
            settings: Detection settings

        Returns:
            Splits named "Song 1", "Song 2", ... sorted by start time
        """
        regions = self.quiet_regions(candidates, total_duration, settings)
        min_song = settings.min_song_duration

        splits: list[Split] = []
        song_start = 0.0

        for region in regions:
            # Too close to the previous song: skip without moving song_start
            if region.start - song_start < min_song:
                continue
            splits.append(Split(default_name(len(splits) + 1), song_start, region.start))
            song_start = region.end

        if total_duration - song_start >= min_song:
            splits.append(Split(default_name(len(splits) + 1), song_start, total_duration))

        self.log.debug(
            f"{len(regions)} quiet regions from {len(candidates)} candidates -> {len(splits)} songs"
        )
        return splits
