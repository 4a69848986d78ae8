# this_file: src/songsplitter/utils/cache.py
"""Cache of decoded PCM keyed by file identity."""

import hashlib
import json
import time
from pathlib import Path

import numpy as np
from loguru import logger

from ..audio.decoder import DecodedAudio


class AudioCache:
    """Stores decoded audio on disk so a file is decoded only once.

    Each entry is a ``<key>.npy`` sample array next to a ``<key>.json``
    metadata file. The key is derived from the file name, size, modification
    time and first bytes.
    """

    DATA_SUFFIX = ".npy"
    META_SUFFIX = ".json"
    # Bytes of file content mixed into the identity
    PREFIX_BYTES = 1024

    def __init__(self, cache_dir: str | Path, log=None):
        """Initialize the cache.

        Args:
            cache_dir: Directory holding cache entries (created on first write)
            log: Logger to report through (default: loguru logger)
        """
        self.cache_dir = Path(cache_dir)
        self.log = log if log is not None else logger.bind(component="cache")

    def identity(self, file_path: str | Path) -> str:
        """Compute the cache key of a file.

        Args:
            file_path: Path to the source audio file

        Returns:
            Hex digest identifying the file
        """
        path = Path(file_path)
        stat = path.stat()
        hasher = hashlib.sha256()
        hasher.update(f"{path.name}-{stat.st_size}-{stat.st_mtime_ns}".encode())
        with open(path, "rb") as f:
            hasher.update(f.read(self.PREFIX_BYTES))
        return hasher.hexdigest()

    def get(self, file_path: str | Path) -> DecodedAudio | None:
        """Look up decoded audio for a file.

        Entries whose recorded name, size or modification time no longer match
        the file are removed.

        Args:
            file_path: Path to the source audio file

        Returns:
            Cached audio, or None on a miss
        """
        path = Path(file_path)
        key = self.identity(path)
        meta_file = self._meta_path(key)
        data_file = self._data_path(key)

        if not meta_file.exists() or not data_file.exists():
            return None

        try:
            with open(meta_file, encoding="utf-8") as f:
                meta = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.log.warning(f"Unreadable cache entry {key[:8]}: {e}")
            self.remove(key)
            return None

        stat = path.stat()
        if (
            meta.get("file_name") != path.name
            or meta.get("file_size") != stat.st_size
            or meta.get("file_modified") != stat.st_mtime_ns
        ):
            self.log.debug(f"Stale cache entry for {path.name}, removing")
            self.remove(key)
            return None

        samples = np.load(data_file)
        self.log.debug(f"Cache hit for {path.name} ({key[:8]})")
        return DecodedAudio(
            samples=samples,
            sample_rate=int(meta["sample_rate"]),
            num_channels=int(meta["num_channels"]),
            duration=float(meta["duration"]),
        )

    def put(self, file_path: str | Path, audio: DecodedAudio) -> str:
        """Store decoded audio for a file.

        Args:
            file_path: Path to the source audio file
            audio: Its decoded audio

        Returns:
            Cache key of the entry
        """
        path = Path(file_path)
        key = self.identity(path)
        stat = path.stat()
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        np.save(self._data_path(key), audio.samples)
        meta = {
            "file_name": path.name,
            "file_size": stat.st_size,
            "file_modified": stat.st_mtime_ns,
            "sample_rate": audio.sample_rate,
            "num_channels": audio.num_channels,
            "duration": audio.duration,
            "cached_at": time.time(),
        }
        with open(self._meta_path(key), "w", encoding="utf-8") as f:
            json.dump(meta, f, indent=2)

        self.log.debug(f"Cached {path.name} as {key[:8]}")
        return key

    def remove(self, key: str) -> None:
        self._data_path(key).unlink(missing_ok=True)
        self._meta_path(key).unlink(missing_ok=True)

    def clear_old(self, max_age_days: float = 7) -> int:
        """Remove entries cached more than ``max_age_days`` ago.

        Args:
            max_age_days: Maximum age in days

        Returns:
            Number of entries removed
        """
        if not self.cache_dir.exists():
            return 0

        cutoff = time.time() - max_age_days * 24 * 60 * 60
        removed = 0

        for meta_file in self.cache_dir.glob(f"*{self.META_SUFFIX}"):
            key = meta_file.stem
            try:
                with open(meta_file, encoding="utf-8") as f:
                    cached_at = json.load(f).get("cached_at", 0)
            except (OSError, json.JSONDecodeError) as e:
                self.log.warning(f"Could not read cache entry {key[:8]}: {e}")
                cached_at = 0

            if cached_at < cutoff:
                self.remove(key)
                removed += 1

        if removed > 0:
            self.log.info(f"Cleaned up {removed} old cache entries")
        return removed

    def info(self) -> dict:
        """Number of entries and approximate size of the cached samples."""
        if not self.cache_dir.exists():
            return {"count": 0, "size_mb": 0.0}

        data_files = list(self.cache_dir.glob(f"*{self.DATA_SUFFIX}"))
        total_bytes = sum(f.stat().st_size for f in data_files)
        return {"count": len(data_files), "size_mb": total_bytes / (1024 * 1024)}

    def _data_path(self, key: str) -> Path:
        return self.cache_dir / f"{key}{self.DATA_SUFFIX}"

    def _meta_path(self, key: str) -> Path:
        return self.cache_dir / f"{key}{self.META_SUFFIX}"
