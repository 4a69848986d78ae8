# this_file: src/songsplitter/audio/loudness.py
"""RMS loudness profile of a PCM buffer."""

from dataclasses import dataclass

import numpy as np
from loguru import logger


@dataclass(frozen=True)
class EnergyProfile:
    """Fixed-stride RMS energy of a recording and its moving average.

    Attributes:
        rms: Raw RMS value per window
        smoothed: Centered moving average of ``rms`` (same length)
        window_samples: Stride (and window length) in samples
        sample_rate: Sample rate of the source PCM
        smoothing_window_samples: Moving average width, in windows
    """

    rms: np.ndarray
    smoothed: np.ndarray
    window_samples: int
    sample_rate: int
    smoothing_window_samples: int

    def __len__(self) -> int:
        return len(self.rms)

    @property
    def window_seconds(self) -> float:
        return self.window_samples / self.sample_rate

    def time_of(self, index: int) -> float:
        """Start time in seconds of window ``index``."""
        return (index * self.window_samples) / self.sample_rate


class LoudnessProfileBuilder:
    """Builds an EnergyProfile from mono PCM."""

    # Number of windows squared and averaged per numpy pass
    CHUNK_WINDOWS = 4096

    def __init__(self, window_seconds: float = 0.5, log=None):
        """Initialize the profile builder.

        Args:
            window_seconds: Length of one RMS window in seconds
            log: Logger to report through (default: loguru logger)
        """
        self.window_seconds = window_seconds
        self.log = log if log is not None else logger.bind(component="loudness")

    def build(
        self, pcm: np.ndarray, sample_rate: int, smoothing_window_seconds: float
    ) -> EnergyProfile:
        """Compute the RMS profile and its smoothed version.

        Args:
            pcm: 1-D float samples in [-1, 1]
            sample_rate: Sample rate in Hz
            smoothing_window_seconds: Width of the moving average in seconds

        Returns:
            EnergyProfile
        """
        samples = np.asarray(pcm)
        if samples.ndim != 1:
            raise ValueError(f"Expected mono samples, got shape {samples.shape}")

        window_samples = max(1, int(self.window_seconds * sample_rate))
        rms = self._window_rms(samples, window_samples)

        smoothing_window_samples = int(
            np.floor(smoothing_window_seconds * sample_rate / window_samples)
        )
        smoothed = self._smooth(rms, smoothing_window_samples // 2)

        self.log.debug(
            f"Loudness profile: {len(rms)} windows of {window_samples} samples, "
            f"smoothing over {smoothing_window_samples} windows"
        )
        return EnergyProfile(
            rms=rms,
            smoothed=smoothed,
            window_samples=window_samples,
            sample_rate=int(sample_rate),
            smoothing_window_samples=smoothing_window_samples,
        )

    def _window_rms(self, samples: np.ndarray, window_samples: int) -> np.ndarray:
        """RMS of consecutive windows; the last window may be shorter."""
        full_windows = len(samples) // window_samples
        remainder = len(samples) - full_windows * window_samples
        rms = np.empty(full_windows + (1 if remainder else 0), dtype=np.float64)

        # Process in chunks so the float64 copy stays small for long recordings
        for first in range(0, full_windows, self.CHUNK_WINDOWS):
            last = min(first + self.CHUNK_WINDOWS, full_windows)
            chunk = samples[first * window_samples : last * window_samples].astype(np.float64)
            rms[first:last] = np.sqrt(np.mean((chunk * chunk).reshape(-1, window_samples), axis=1))

        if remainder:
            tail = samples[full_windows * window_samples :].astype(np.float64)
            rms[-1] = np.sqrt(np.mean(tail * tail))

        return rms

    @staticmethod
    def _smooth(values: np.ndarray, half_width: int) -> np.ndarray:
        """Centered moving average that shrinks at the profile edges."""
        n = len(values)
        if n == 0:
            return values.copy()
        index = np.arange(n)
        lo = np.maximum(0, index - half_width)
        hi = np.minimum(n, index + half_width + 1)
        prefix = np.concatenate(([0.0], np.cumsum(values)))
        return (prefix[hi] - prefix[lo]) / (hi - lo)
