"""
Shared CLI utilities: progress display and summaries.
"""
import datetime
from typing import Dict

from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn, TimeElapsedColumn
from rich.live import Live
from rich.console import Group
from rich.text import Text
from rich.table import Table
from rich import box

from ..constants import PROGRESS_REFRESH_RATE
from ..models import DubResult
from ..reconciler import DubReconciler, PHASE_LISTING, PHASE_STATUS
from ..logging import get_logger, console

logger = get_logger(__name__)

PHASE_DESCRIPTIONS = {
    PHASE_LISTING: "[bold cyan]Checking dubbed anime pages...",
    PHASE_STATUS: "[bold green]Checking if dubs are complete...",
}


def run_with_progress(reconciler: DubReconciler) -> DubResult:
    """
    Runs the reconciler with a two line progress display.

    Line 1 is the progress bar of the current phase, line 2 the item that
    was processed last.
    """
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=console
    )
    status_text = Text("Initializing...", style="dim")
    display_group = Group(progress, status_text)
    tasks: Dict[str, int] = {}

    def update_progress(phase: str, completed: int, total: int, detail: str) -> None:
        if phase not in tasks:
            tasks[phase] = progress.add_task(PHASE_DESCRIPTIONS.get(phase, phase), total=total)
        task_id = tasks[phase]
        progress.update(task_id, completed=completed, total=total)

        task = progress.tasks[task_id]
        time_remaining = "-"
        if task.time_remaining is not None:
            time_remaining = str(datetime.timedelta(seconds=int(task.time_remaining)))
        status_text.plain = f"{time_remaining} | {detail}"

    previous_callback = reconciler.progress_callback
    reconciler.progress_callback = update_progress
    try:
        with Live(display_group, console=console, refresh_per_second=PROGRESS_REFRESH_RATE):
            return reconciler.run()
    finally:
        reconciler.progress_callback = previous_callback


def print_summary(result: DubResult, language: str, output_path: str) -> None:
    table = Table(title=f"Dub Summary ({language})", box=box.SIMPLE)
    table.add_column("Set", style="cyan", no_wrap=True)
    table.add_column("MAL ids", style="green", justify="right")

    complete = len(result.dubbed) - len(result.incomplete)
    table.add_row("Dubbed", str(len(result.dubbed)))
    table.add_row("  complete", str(complete))
    table.add_row("  incomplete", str(len(result.incomplete)))

    console.print(table)
    console.print(f"[dim]Saved to {output_path}[/dim]")
