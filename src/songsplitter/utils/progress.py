# this_file: src/songsplitter/utils/progress.py
"""Progress tracking utilities."""

from contextlib import contextmanager

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from ..splits.models import Split


def format_time(seconds: float) -> str:
    """Format seconds as m:ss."""
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"


class ProgressTracker:
    """Unified progress tracking for the application."""

    def __init__(self, console: Console | None = None):
        """Initialize progress tracker.

        Args:
            console: Console to draw on (default: a new stdout console)
        """
        self.console = console or Console()

    @contextmanager
    def track_splits(self, total: int, description: str = "Exporting splits"):
        """Show a bar advancing once per exported split.

        Yields:
            Function advancing the bar; pass ``name`` to show the current split
        """
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
        ) as progress:
            task = progress.add_task(description, total=total)

            def advance(name: str | None = None):
                label = f"{description}: {name}" if name else description
                progress.update(task, advance=1, description=label)

            yield advance

    @contextmanager
    def track_operation(self, description: str):
        """Spinner for one step of unknown length (decoding, detection).

        The spinner is removed once the step is done.
        """
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        ) as progress:
            progress.add_task(description, total=None)
            yield progress

    def print_splits(self, splits: list[Split] | tuple[Split, ...], title: str = "Splits"):
        """Print splits as a table."""
        table = Table(title=f"{title} ({len(splits)})")
        table.add_column("#", justify="right")
        table.add_column("Name", style="cyan")
        table.add_column("Start", justify="right")
        table.add_column("End", justify="right")
        table.add_column("Length", justify="right")
        for number, split in enumerate(splits, 1):
            table.add_row(
                str(number),
                split.name,
                format_time(split.start_time),
                format_time(split.end_time),
                format_time(split.duration),
            )
        self.console.print(table)

    def print_summary(self, stats: dict, title: str = "Summary"):
        """Print label: value lines under a heading."""
        self.console.print(f"\n[bold green]{title}:[/bold green]")
        width = max((len(str(key)) for key in stats), default=0)
        for key, value in stats.items():
            label = f"{key}:"
            self.console.print(f"  [cyan]{label:<{width + 1}}[/cyan] {value}")
