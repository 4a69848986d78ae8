# this_file: src/songsplitter/utils/archive.py
"""Zip bundling of exported splits."""

import zipfile
from collections.abc import Iterable
from pathlib import Path

from loguru import logger


def _unique_name(filename: str, used: set[str]) -> str:
    """Return filename, or filename with a numeric suffix if already used."""
    if filename not in used:
        return filename
    path = Path(filename)
    for i in range(2, 10_000):
        candidate = f"{path.stem}_{i}{path.suffix}"
        if candidate not in used:
            return candidate
    raise RuntimeError(f"Could not find a unique archive name for: {filename}")


def bundle(segments: Iterable[tuple[str, bytes]], archive_path: str | Path) -> Path:
    """Write (filename, bytes) pairs into a single zip archive.

    WAV data is already uncompressed PCM, so entries are stored without
    compression.

    Args:
        segments: Pairs such as the ones yielded by an ExportBatch
        archive_path: Path of the zip file to create

    Returns:
        Path to the archive
    """
    archive_path = Path(archive_path)
    archive_path.parent.mkdir(parents=True, exist_ok=True)

    used: set[str] = set()
    with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_STORED) as zf:
        for filename, data in segments:
            name = _unique_name(filename, used)
            if name != filename:
                logger.warning(f"Duplicate file name {filename}, stored as {name}")
            used.add(name)
            zf.writestr(name, data)

    logger.info(f"Bundled {len(used)} files into {archive_path}")
    return archive_path
