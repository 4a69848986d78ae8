# this_file: src/songsplitter/audio/decoder.py
"""Audio decoding via pedalboard."""

import io
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from loguru import logger
from pedalboard.io import AudioFile

from ..exceptions import InputError


@dataclass
class DecodedAudio:
    """Decoded PCM owned by one processing session.

    Attributes:
        samples: float32 samples shaped (channels, frames)
        sample_rate: Sample rate in Hz
        num_channels: Number of channels
        duration: Duration in seconds
    """

    samples: np.ndarray
    sample_rate: int
    num_channels: int
    duration: float

    @classmethod
    def from_samples(cls, samples: np.ndarray, sample_rate: int) -> "DecodedAudio":
        """Wrap a raw sample array, mono (frames,) or (channels, frames)."""
        data = np.asarray(samples, dtype=np.float32)
        if data.ndim == 1:
            data = data.reshape(1, -1)
        frames = data.shape[1]
        duration = frames / sample_rate if sample_rate > 0 else 0.0
        return cls(
            samples=data, sample_rate=int(sample_rate), num_channels=data.shape[0], duration=duration
        )

    @property
    def frames(self) -> int:
        return self.samples.shape[1]

    def analysis_channel(self, mode: str = "first") -> np.ndarray:
        """Return the single channel used for split detection.

        Args:
            mode: "first" for channel 0, "mix" for the mean of all channels

        Returns:
            1-D float32 array (a view of channel 0 for "first")
        """
        if mode == "first" or self.num_channels == 1:
            return self.samples[0]
        if mode == "mix":
            return np.mean(self.samples, axis=0, dtype=np.float32)
        raise ValueError(f"Unknown analysis channel mode: {mode}")


class AudioDecoder:
    """Decodes audio files into float PCM."""

    def __init__(self, log=None):
        self.log = log if log is not None else logger.bind(component="decoder")

    def decode(self, source: str | Path | bytes) -> DecodedAudio:
        """Decode an audio file or in-memory file contents.

        Args:
            source: Path to an audio file, or its raw bytes

        Returns:
            DecodedAudio with samples in [-1, 1]

        Raises:
            InputError: If the file holds no audio frames
        """
        if isinstance(source, bytes):
            handle = AudioFile(io.BytesIO(source))
            label = f"<{len(source)} bytes>"
        else:
            handle = AudioFile(str(source))
            label = str(source)

        with handle as f:
            sample_rate = int(f.samplerate)
            audio_data = f.read(f.frames)

        if audio_data.size == 0:
            raise InputError(f"No audio frames in {label}")

        audio = DecodedAudio.from_samples(audio_data, sample_rate)
        self.log.debug(
            f"Decoded {label}: {audio.duration:.2f}s at {sample_rate}Hz, "
            f"{audio.num_channels} channel(s)"
        )
        return audio
