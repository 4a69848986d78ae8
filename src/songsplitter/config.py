# this_file: src/songsplitter/config.py
"""Detection settings and configuration loading."""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path

import toml
from dotenv import load_dotenv
from loguru import logger

load_dotenv()

DEFAULT_CACHE_DIR = Path.home() / ".cache" / "songsplitter"

# Documented ranges, (low, high) per setting
SETTING_RANGES = {
    "sensitivity_db": (-60.0, -10.0),
    "smoothing_window_seconds": (1.0, 15.0),
    "min_silence_duration": (0.5, 10.0),
    "min_song_duration": (10.0, 120.0),
}


@dataclass(frozen=True)
class DetectionSettings:
    """Parameters of one split detection run.

    Attributes:
        sensitivity_db: Absolute quietness threshold in dBFS
        smoothing_window_seconds: Width of the moving average over the RMS profile
        min_silence_duration: Length of the quiet region built around a boundary
        min_song_duration: Shortest region that is reported as a song
    """

    sensitivity_db: float = -30.0
    smoothing_window_seconds: float = 5.0
    min_silence_duration: float = 5.0
    min_song_duration: float = 30.0

    @property
    def threshold_linear(self) -> float:
        """Sensitivity converted from dB to linear amplitude."""
        return 10 ** (self.sensitivity_db / 20)

    def clamped(self) -> "DetectionSettings":
        """Return a copy with every value clamped to its documented range."""
        values = {}
        for name, (low, high) in SETTING_RANGES.items():
            values[name] = max(low, min(high, float(getattr(self, name))))
        return replace(self, **values)

    def to_dict(self) -> dict:
        """Convert to a plain dict."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_settings(path: str | Path | None = None, **overrides) -> DetectionSettings:
    """Build detection settings from a TOML file and explicit overrides.

    Values are resolved in order: overrides (ignoring ``None``), the
    ``[detection]`` table of the TOML file, then the defaults. When ``path``
    is not given, ``SONGSPLITTER_CONFIG`` is consulted.

    Args:
        path: Optional path to a TOML settings file
        **overrides: Setting values that take precedence over the file

    Returns:
        DetectionSettings

    Raises:
        FileNotFoundError: If an explicit settings file does not exist
    """
    values: dict = {}
    config_path = path or os.getenv("SONGSPLITTER_CONFIG")

    if config_path:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Settings file not found: {config_path}")
        with open(config_path, encoding="utf-8") as f:
            data = toml.load(f)
        table = data.get("detection", data)
        known = {f.name for f in fields(DetectionSettings)}
        for key, value in table.items():
            if key in known:
                values[key] = float(value)
            elif not isinstance(value, dict):
                logger.warning(f"Ignoring unknown setting '{key}' in {config_path}")
        logger.debug(f"Loaded settings from {config_path}: {values}")

    values.update({k: float(v) for k, v in overrides.items() if v is not None})
    return DetectionSettings(**values)


def cache_dir() -> Path:
    """Directory used by the decoded audio cache."""
    env_dir = os.getenv("SONGSPLITTER_CACHE_DIR")
    return Path(env_dir) if env_dir else DEFAULT_CACHE_DIR
