# this_file: tests/test_songsplitter/audio/test_scorer.py
"""Unit tests for CandidateScorer."""

from __future__ import annotations

import numpy as np
import pytest


def make_profile(smoothed, smoothing_window_samples: int = 2, window_samples: int = 1, sample_rate: int = 1):
    """Build an EnergyProfile directly from smoothed values."""
    from songsplitter.audio.loudness import EnergyProfile

    values = np.asarray(smoothed, dtype=np.float64)
    return EnergyProfile(
        rms=values.copy(),
        smoothed=values,
        window_samples=window_samples,
        sample_rate=sample_rate,
        smoothing_window_samples=smoothing_window_samples,
    )


class TestCandidateScorer:
    """Tests for CandidateScorer class."""

    def test_score_when_flat_profile_then_no_candidates(self) -> None:
        from songsplitter.audio.scorer import CandidateScorer
        from songsplitter.config import DetectionSettings

        profile = make_profile([0.5] * 50)

        candidates = CandidateScorer().score(profile, DetectionSettings())

        assert candidates == []

    def test_score_when_profile_too_short_then_no_candidates(self) -> None:
        from songsplitter.audio.scorer import CandidateScorer
        from songsplitter.config import DetectionSettings

        assert CandidateScorer().score(make_profile([0.0, 0.0]), DetectionSettings()) == []

    def test_score_when_single_deep_valley_then_all_four_tests_pass(self) -> None:
        from songsplitter.audio.scorer import CandidateScorer
        from songsplitter.config import DetectionSettings

        values = [1.0] * 10 + [0.01] + [1.0] * 10
        profile = make_profile(values, smoothing_window_samples=4)

        candidates = CandidateScorer().score(profile, DetectionSettings())

        assert len(candidates) == 1
        assert candidates[0].time == 10.0
        # quiet + valley + sustained drop + spacing
        assert candidates[0].confidence == pytest.approx(1.0)

    def test_score_when_first_and_last_index_then_never_scored(self) -> None:
        from songsplitter.audio.scorer import CandidateScorer
        from songsplitter.config import DetectionSettings

        values = [0.0] + [1.0] * 10 + [0.0]
        candidates = CandidateScorer().score(make_profile(values), DetectionSettings())

        times = [c.time for c in candidates]
        assert 0.0 not in times
        assert 11.0 not in times

    def test_score_when_quiet_without_spacing_then_below_acceptance(self) -> None:
        from songsplitter.audio.scorer import CandidateScorer
        from songsplitter.config import DetectionSettings

        # Two valleys 5 s apart; min_song_duration 30 -> spacing needs > 15 s
        values = [1.0] * 10 + [0.01] + [1.0] * 4 + [0.9] + [1.0] * 10
        profile = make_profile(values, smoothing_window_samples=1)

        candidates = CandidateScorer().score(profile, DetectionSettings(min_song_duration=30))

        # The second valley is a local minimum (0.2) but not quiet and too close
        assert [c.time for c in candidates] == [10.0]

    def test_score_when_far_apart_then_both_get_spacing_bonus(self) -> None:
        from songsplitter.audio.scorer import CandidateScorer
        from songsplitter.config import DetectionSettings

        values = [1.0] * 10 + [0.01] + [1.0] * 20 + [0.01] + [1.0] * 10
        profile = make_profile(values, smoothing_window_samples=4)

        candidates = CandidateScorer().score(profile, DetectionSettings(min_song_duration=30))

        assert [c.time for c in candidates] == [10.0, 31.0]
        assert all(c.confidence == pytest.approx(1.0) for c in candidates)

    def test_score_when_spacing_measured_from_accepted_candidates_only(self) -> None:
        from songsplitter.audio.scorer import CandidateScorer
        from songsplitter.config import DetectionSettings

        # Index 1 is a local minimum only: 0.2 valley + 0.2 spacing = 0.4, not accepted
        values = [1.0, 0.99, 1.0] + [1.0] * 3 + [0.01] + [1.0] * 10
        profile = make_profile(values, smoothing_window_samples=2)

        candidates = CandidateScorer().score(profile, DetectionSettings(min_song_duration=30))

        assert [c.time for c in candidates] == [6.0]
        # Still gets the spacing bonus since index 1 was never accepted
        assert candidates[0].confidence == pytest.approx(1.0)

    def test_score_when_sensitivity_high_then_absolute_threshold_applies(self) -> None:
        from songsplitter.audio.scorer import CandidateScorer
        from songsplitter.config import DetectionSettings

        # A shallow, wide dip: only the quiet test plus spacing can fire
        values = [0.2] * 20 + [0.15] * 5 + [0.2] * 20
        profile = make_profile(values, smoothing_window_samples=2)

        loose = CandidateScorer().score(profile, DetectionSettings(sensitivity_db=-10))
        strict = CandidateScorer().score(profile, DetectionSettings(sensitivity_db=-60))

        # -10 dB is 0.316 linear: everything is "quiet", first interior index accepted
        assert loose and loose[0].time == 1.0
        assert len(loose) > len(strict)

    def test_quiet_threshold_when_uniform_then_equals_level(self) -> None:
        from songsplitter.audio.scorer import CandidateScorer
        from songsplitter.config import DetectionSettings

        threshold = CandidateScorer.quiet_threshold(np.full(10, 0.5), DetectionSettings())

        assert threshold == 0.5

    def test_quiet_threshold_when_quiet_recording_then_absolute_floor(self) -> None:
        from songsplitter.audio.scorer import CandidateScorer
        from songsplitter.config import DetectionSettings

        settings = DetectionSettings(sensitivity_db=-20)
        threshold = CandidateScorer.quiet_threshold(np.full(10, 0.001), settings)

        assert threshold == pytest.approx(0.1)

    def test_score_when_zero_smoothing_width_then_drop_test_skipped(self) -> None:
        from songsplitter.audio.scorer import CandidateScorer
        from songsplitter.config import DetectionSettings

        values = [1.0] * 10 + [0.01] + [1.0] * 10
        profile = make_profile(values, smoothing_window_samples=0)

        candidates = CandidateScorer().score(profile, DetectionSettings())

        assert candidates[0].confidence == pytest.approx(0.7)

    def test_score_when_candidate_times_then_use_window_stride(self) -> None:
        from songsplitter.audio.scorer import CandidateScorer
        from songsplitter.config import DetectionSettings

        values = [1.0] * 10 + [0.01] + [1.0] * 10
        profile = make_profile(values, window_samples=4000, sample_rate=8000)

        candidates = CandidateScorer().score(profile, DetectionSettings())

        assert candidates[0].time == 5.0
