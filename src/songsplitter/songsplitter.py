#!/usr/bin/env -S uv run -s
# /// script
# dependencies = ["python-dotenv", "fire", "rich", "loguru", "numpy", "pedalboard", "toml", "pathvalidate"]
# ///
# this_file: src/songsplitter/songsplitter.py

"""
songsplitter - split long rehearsal or concert recordings into songs.

Detects the quiet gaps between songs from the loudness contour, proposes one
split per song and exports every split as its own WAV file.
"""

import json as json_module
import sys
from pathlib import Path

from loguru import logger
from pathvalidate import sanitize_filename
from rich.console import Console

from .audio import AudioDecoder, DecodedAudio, SegmentExporter, SongAnalyzer
from .config import DetectionSettings, cache_dir, load_settings
from .exceptions import SongSplitterError
from .splits import SplitStore
from .utils import AudioCache, ProgressTracker, bundle, format_time

# Initialize console for rich output
console = Console()


class SongSplitter:
    """Decode, detect and export pipeline for one or more recordings."""

    def __init__(
        self,
        settings: DetectionSettings | None = None,
        channel: str = "first",
        use_cache: bool = True,
        verbose: bool = False,
    ):
        """Initialize the pipeline.

        Args:
            settings: Detection settings (clamped to their documented ranges)
            channel: Analysis channel, "first" or "mix"
            use_cache: Reuse decoded audio from the cache
            verbose: Enable verbose logging output
        """
        self.settings = (settings or DetectionSettings()).clamped()
        self.channel = channel
        self.verbose = verbose
        self._setup_logging()

        self.decoder = AudioDecoder()
        self.analyzer = SongAnalyzer()
        self.exporter = SegmentExporter()
        self.cache = AudioCache(cache_dir()) if use_cache else None
        self.progress_tracker = ProgressTracker(console)

    def _setup_logging(self):
        """Configure logging based on verbose flag."""
        logger.remove()  # Remove default handler

        if self.verbose:
            logger.add(
                sys.stderr,
                format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
                level="DEBUG",
            )
        else:
            logger.add(sys.stderr, format="<level>{message}</level>", level="INFO")

    def load(self, input_path: str | Path) -> DecodedAudio:
        """Decode a recording, going through the cache when enabled.

        Args:
            input_path: Path to the audio file

        Returns:
            Decoded audio
        """
        if self.cache is not None:
            cached = self.cache.get(input_path)
            if cached is not None:
                logger.info(f"Loaded {Path(input_path).name} from cache")
                return cached

        with self.progress_tracker.track_operation(f"Decoding {Path(input_path).name}..."):
            audio = self.decoder.decode(input_path)

        if self.cache is not None:
            try:
                self.cache.put(input_path, audio)
            except OSError as e:
                logger.warning(f"Could not cache decoded audio: {e}")

        return audio

    def detect(self, audio: DecodedAudio) -> SplitStore:
        """Run split detection and return a fresh store holding the result."""
        with self.progress_tracker.track_operation("Detecting splits..."):
            splits = self.analyzer.analyze_audio(audio, self.settings, self.channel)
        return SplitStore(audio.duration, splits)

    def export(
        self,
        audio: DecodedAudio,
        store: SplitStore,
        output: str | Path,
        archive: bool = False,
    ) -> list[Path]:
        """Export every split of the store.

        Args:
            audio: Decoded audio the splits refer to
            store: Splits to export
            output: Output directory, or zip path when ``archive`` is set
            archive: Bundle the files into a single zip archive

        Returns:
            Paths of the written files (the archive alone when ``archive``)
        """
        batch = self.exporter.export(
            audio.samples, audio.sample_rate, audio.num_channels, store.all()
        )

        with self.progress_tracker.track_splits(len(batch)) as advance:

            def tracked():
                for segment in batch:
                    yield segment
                    advance(segment.filename)

            if archive:
                return [bundle(tracked(), output)]
            return self.exporter.write(tracked(), output)


def _settings(
    config: str | Path | None,
    sensitivity_db: float | None,
    smoothing: float | None,
    min_silence: float | None,
    min_song: float | None,
) -> DetectionSettings:
    return load_settings(
        config,
        sensitivity_db=sensitivity_db,
        smoothing_window_seconds=smoothing,
        min_silence_duration=min_silence,
        min_song_duration=min_song,
    )


def _default_output(input_path: Path, archive: bool) -> Path:
    """Output next to the working directory, named after the input."""
    stem = sanitize_filename(input_path.stem) or "recording"
    return Path.cwd() / (f"{stem}_splits.zip" if archive else f"{stem}_splits")


def _require_file(input: str | Path) -> Path:
    input_path = Path(input)
    if not input_path.is_file():
        console.print(f"[red]Error: Input file not found: {input}[/red]")
        sys.exit(1)
    return input_path


def _report(splitter: SongSplitter, audio: DecodedAudio, store: SplitStore, destination: Path) -> None:
    covered = sum(s.duration for s in store)
    splitter.progress_tracker.print_summary(
        {
            "Songs": len(store),
            "Recording": format_time(audio.duration),
            "Exported audio": format_time(covered),
            "Output": destination,
        }
    )
    console.print(f"\n[green]✓ Exported {len(store)} songs to {destination}[/green]")


def detect(
    input: str | Path,
    config: str | Path | None = None,
    sensitivity_db: float | None = None,
    smoothing: float | None = None,
    min_silence: float | None = None,
    min_song: float | None = None,
    channel: str = "first",
    save: str | Path | None = None,
    json: bool = False,
    no_cache: bool = False,
    verbose: bool = False,
) -> None:
    """Detect songs in a recording and list them.

    Args:
        input: Path to the recording
        config: TOML file with a [detection] table
        sensitivity_db: Quietness threshold in dB (-60 to -10, default: -30)
        smoothing: Smoothing window in seconds (1 to 15, default: 5)
        min_silence: Quiet region length in seconds (0.5 to 10, default: 5)
        min_song: Minimum song length in seconds (10 to 120, default: 30)
        channel: Analysis channel, "first" or "mix" (default: first)
        save: Save the splits as JSON for later editing and export
        json: Print the splits as JSON instead of a table
        no_cache: Decode the file even if cached
        verbose: Enable verbose logging output
    """
    input_path = _require_file(input)
    try:
        splitter = SongSplitter(
            _settings(config, sensitivity_db, smoothing, min_silence, min_song),
            channel=channel,
            use_cache=not no_cache,
            verbose=verbose,
        )
        audio = splitter.load(input_path)
        store = splitter.detect(audio)
    except (SongSplitterError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    if save:
        store.save(save)
        console.print(f"[dim]Saved splits to {save}[/dim]")

    if json:
        print(json_module.dumps([s.to_dict() for s in store], indent=2))
    else:
        splitter.progress_tracker.print_splits(store.all(), title=input_path.name)


def split(
    input: str | Path,
    output: str | Path | None = None,
    zip: bool = False,
    config: str | Path | None = None,
    sensitivity_db: float | None = None,
    smoothing: float | None = None,
    min_silence: float | None = None,
    min_song: float | None = None,
    channel: str = "first",
    no_cache: bool = False,
    verbose: bool = False,
) -> None:
    """Detect songs in a recording and export each one as a WAV file.

    Args:
        input: Path to the recording
        output: Output directory, or zip path with --zip (default: <input>_splits)
        zip: Bundle the WAV files into a single zip archive
        config: TOML file with a [detection] table
        sensitivity_db: Quietness threshold in dB (-60 to -10, default: -30)
        smoothing: Smoothing window in seconds (1 to 15, default: 5)
        min_silence: Quiet region length in seconds (0.5 to 10, default: 5)
        min_song: Minimum song length in seconds (10 to 120, default: 30)
        channel: Analysis channel, "first" or "mix" (default: first)
        no_cache: Decode the file even if cached
        verbose: Enable verbose logging output
    """
    input_path = _require_file(input)
    output_path = Path(output) if output else _default_output(input_path, zip)

    try:
        splitter = SongSplitter(
            _settings(config, sensitivity_db, smoothing, min_silence, min_song),
            channel=channel,
            use_cache=not no_cache,
            verbose=verbose,
        )
        audio = splitter.load(input_path)
        store = splitter.detect(audio)
        if len(store) == 0:
            console.print("[yellow]No songs detected, nothing to export[/yellow]")
            return
        splitter.progress_tracker.print_splits(store.all(), title=input_path.name)
        paths = splitter.export(audio, store, output_path, archive=zip)
    except (SongSplitterError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    _report(splitter, audio, store, paths[0] if zip else output_path)


def export(
    input: str | Path,
    splits: str | Path,
    output: str | Path | None = None,
    zip: bool = False,
    no_cache: bool = False,
    verbose: bool = False,
) -> None:
    """Export previously saved (and possibly edited) splits of a recording.

    Args:
        input: Path to the recording
        splits: JSON file written by `detect --save`
        output: Output directory, or zip path with --zip (default: <input>_splits)
        zip: Bundle the WAV files into a single zip archive
        no_cache: Decode the file even if cached
        verbose: Enable verbose logging output
    """
    input_path = _require_file(input)
    output_path = Path(output) if output else _default_output(input_path, zip)

    try:
        splitter = SongSplitter(use_cache=not no_cache, verbose=verbose)
        store = SplitStore.load(splits)
        audio = splitter.load(input_path)
        if abs(store.total_duration - audio.duration) > 0.01:
            logger.warning(
                f"Splits were made for {store.total_duration:.2f}s of audio, "
                f"{input_path.name} is {audio.duration:.2f}s"
            )
        paths = splitter.export(audio, store, output_path, archive=zip)
    except (SongSplitterError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    _report(splitter, audio, store, paths[0] if zip else output_path)


def cache(
    clean: bool = False,
    max_age_days: float = 7,
    json: bool = False,
) -> None:
    """Show or clean the decoded audio cache.

    Args:
        clean: Remove entries older than max_age_days
        max_age_days: Maximum age in days for cleanup (default: 7)
        json: Output as JSON
    """
    audio_cache = AudioCache(cache_dir())

    if clean:
        removed = audio_cache.clear_old(max_age_days)
        console.print(f"[green]Removed {removed} cache entries older than {max_age_days} days[/green]")
        return

    info = audio_cache.info()
    if json:
        print(json_module.dumps({"path": str(audio_cache.cache_dir), **info}, indent=2))
    else:
        console.print(f"[bold]Cache:[/bold] {audio_cache.cache_dir}")
        console.print(f"  {info['count']} files, ~{info['size_mb']:.1f} MB")
