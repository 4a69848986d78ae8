# this_file: src/songsplitter/audio/exporter.py
"""Per-split PCM extraction and WAV encoding."""

import os
import re
import struct
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import NamedTuple

import numpy as np
from loguru import logger

from ..splits.models import Split
from .analyzer import validate_input

WAV_EXTENSION = ".wav"
WAV_HEADER_SIZE = 44
BITS_PER_SAMPLE = 16
PCM_FORMAT_TAG = 1


def safe_filename(name: str) -> str:
    """Filename for a split: every non-alphanumeric character becomes '_'."""
    return re.sub(r"[^A-Za-z0-9]", "_", name) + WAV_EXTENSION


def encode_wav(samples: np.ndarray, sample_rate: int) -> bytes:
    """Encode float samples as a canonical 16-bit PCM WAV file.

    Args:
        samples: float samples shaped (channels, frames), or (frames,) for mono
        sample_rate: Sample rate in Hz

    Returns:
        WAV file contents (44-byte header followed by interleaved samples)
    """
    data = np.asarray(samples, dtype=np.float64)
    if data.ndim == 1:
        data = data.reshape(1, -1)
    channels, frames = data.shape

    block_align = channels * BITS_PER_SAMPLE // 8
    byte_rate = sample_rate * block_align
    data_size = frames * block_align

    header = struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        WAV_HEADER_SIZE - 8 + data_size,
        b"WAVE",
        b"fmt ",
        16,
        PCM_FORMAT_TAG,
        channels,
        sample_rate,
        byte_rate,
        block_align,
        BITS_PER_SAMPLE,
        b"data",
        data_size,
    )

    pcm = np.rint(np.clip(data, -1.0, 1.0) * 32767).astype("<i2")
    # Frame-major order interleaves the channels
    return header + pcm.T.tobytes()


class ExportedSegment(NamedTuple):
    """One encoded split, ready to be written or archived."""

    filename: str
    data: bytes


class ExportBatch:
    """Lazy sequence of encoded splits.

    Each iteration re-reads the source buffer and encodes one split at a
    time, so iterating twice yields the same output and only one encoded
    split is held at once.
    """

    def __init__(
        self,
        samples: np.ndarray,
        sample_rate: int,
        splits: Sequence[Split],
        log=None,
    ):
        self.samples = samples
        self.sample_rate = sample_rate
        self.splits = list(splits)
        self.log = log if log is not None else logger.bind(component="exporter")

    def __len__(self) -> int:
        return len(self.splits)

    def __iter__(self) -> Iterator[ExportedSegment]:
        for split in self.splits:
            yield self.encode(split)

    def encode(self, split: Split) -> ExportedSegment:
        """Extract and encode a single split."""
        segment = self.extract(split)
        self.log.debug(
            f"Encoding {split.name!r}: {split.start_time:.2f}s - {split.end_time:.2f}s "
            f"({segment.shape[1]} frames)"
        )
        return ExportedSegment(safe_filename(split.name), encode_wav(segment, self.sample_rate))

    def extract(self, split: Split) -> np.ndarray:
        """Copy the split's samples; positions past the buffer end are silence.

        Returns:
            float32 array shaped (channels, frames)
        """
        start_sample, end_sample = split.sample_range(self.sample_rate)
        length = max(0, end_sample - start_sample)
        channels, available = self.samples.shape

        segment = np.zeros((channels, length), dtype=np.float32)
        src_start = min(max(0, start_sample), available)
        src_end = min(max(0, start_sample + length), available)
        if src_end > src_start:
            offset = src_start - start_sample
            segment[:, offset : offset + src_end - src_start] = self.samples[:, src_start:src_end]
        return segment


class SegmentExporter:
    """Exports splits of a PCM buffer as independent WAV files."""

    def __init__(self, log=None):
        self.log = log if log is not None else logger.bind(component="exporter")

    def export(
        self,
        pcm: np.ndarray,
        sample_rate: int,
        num_channels: int,
        splits: Sequence[Split],
    ) -> ExportBatch:
        """Prepare the encoded output for every split, in the given order.

        Args:
            pcm: Samples shaped (channels, frames), or (frames,) for mono
            sample_rate: Sample rate in Hz
            num_channels: Number of channels in ``pcm``
            splits: Splits to export, normally SplitStore.all()

        Returns:
            ExportBatch yielding (filename, wav bytes) pairs

        Raises:
            InputError: If the buffer is empty or the sample rate is not positive
        """
        validate_input(pcm, sample_rate)
        samples = np.asarray(pcm)
        if samples.ndim == 1:
            samples = samples.reshape(1, -1)
        if samples.shape[0] != num_channels:
            raise ValueError(
                f"Buffer has {samples.shape[0]} channels, expected {num_channels}"
            )
        return ExportBatch(samples, sample_rate, splits, log=self.log)

    def write(self, batch: Iterable[ExportedSegment], output_dir: str | Path) -> list[Path]:
        """Write every encoded split into a directory.

        Args:
            batch: Batch from export(), or any iterable of its segments
            output_dir: Directory to save the files in (created if missing)

        Returns:
            Paths of the written files
        """
        os.makedirs(output_dir, exist_ok=True)

        paths = []
        for segment in batch:
            path = Path(output_dir) / segment.filename
            path.write_bytes(segment.data)
            paths.append(path)

        self.log.info(f"Created {len(paths)} files in {output_dir}")
        return paths
