"""
Commandes CLI de demarrage et de synchronisation (browse, sync).
"""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)

from cinecat.adapters.cli.display import (
    format_outcome,
    render_catalog_table,
    render_sync_summary,
)
from cinecat.adapters.cli.helpers import console, suppress_loguru, with_container
from cinecat.core.errors import ConfigMissing
from cinecat.services.catalog_view import SortKey
from cinecat.services.sync import FileOutcome, SyncRun


def _print_status(line: str) -> None:
    console.print(f"[dim]{line}[/dim]")


async def _run_with_progress(container, directories: list[Path], concurrency: Optional[int]) -> SyncRun:
    """Scan + synchronisation avec barre de progression Rich."""
    startup = container.startup_service()

    with suppress_loguru():
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
            transient=False,
        ) as progress:
            task = progress.add_task("[cyan]Synchronisation...", total=None)

            def on_status(line: str) -> None:
                progress.console.print(f"[dim]{line}[/dim]")

            def on_progress(outcome: FileOutcome, run: SyncRun) -> None:
                """Callback de progression."""
                progress.update(task, total=len(run.paths), completed=run.total)
                progress.console.print(format_outcome(outcome))

            run = await startup.sync_directories(
                directories,
                concurrency_limit=concurrency,
                on_status=on_status,
                on_progress=on_progress,
            )
            progress.update(task, total=len(run.paths), completed=run.total)

    return run


def browse(
    sort: Annotated[
        SortKey,
        typer.Option("--sort", "-s", help="Ordre de tri"),
    ] = SortKey.TITLE,
) -> None:
    """Charge le catalogue, synchronise si active, puis affiche le catalogue."""
    asyncio.run(_browse_async(sort))


@with_container
async def _browse_async(container, sort: SortKey) -> None:
    """Implementation async de la commande browse (sequence de demarrage)."""
    startup = container.startup_service()

    def on_progress(outcome: FileOutcome, run: SyncRun) -> None:
        console.print(format_outcome(outcome))

    try:
        with suppress_loguru():
            run = await startup.run(on_status=_print_status, on_progress=on_progress)
    except ConfigMissing as e:
        # Le catalogue reste consultable sans cle API
        console.print(f"[yellow]{escape(str(e))}[/yellow]")
        run = None
    if run is not None:
        console.print(render_sync_summary(run))

    entries = container.catalog_view().project(sort_key=sort)
    if not entries:
        console.print("[yellow]The catalog is empty.[/yellow]")
        return
    console.print(render_catalog_table(entries))


def sync(
    directories: Annotated[
        Optional[list[Path]],
        typer.Argument(help="Repertoires a scanner (defaut : repertoires configures)"),
    ] = None,
    concurrency: Annotated[
        Optional[int],
        typer.Option("--concurrency", "-c", min=1, help="Nombre de fichiers traites en parallele"),
    ] = None,
) -> None:
    """Scanne les repertoires et ajoute les nouveaux films au catalogue."""
    asyncio.run(_sync_async(directories, concurrency))


@with_container
async def _sync_async(container, directories: Optional[list[Path]], concurrency: Optional[int]) -> None:
    """Implementation async de la commande sync."""
    targets = list(directories) if directories else container.user_config().scan_directories
    if not targets:
        console.print("[yellow]No scan directory configured.[/yellow]")
        console.print("[dim]Use 'cinecat config add-dir <DIR>' or pass directories.[/dim]")
        return

    run = await _run_with_progress(container, targets, concurrency)

    console.print()
    console.print(render_sync_summary(run))
    if run.failed:
        console.print("[dim]Failed files will be retried on the next sync.[/dim]")
