"""
Commandes CLI de desambiguisation et d'ajout manuel (candidates, add, apply,
refresh, refresh-all).

Toutes interrogent TMDB : elles echouent avec un message clair si aucune
cle API n'est configuree.
"""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)
from rich.status import Status

from cinecat.adapters.cli.display import (
    format_refresh_outcome,
    render_candidates_table,
    render_entry_panel,
    render_refresh_summary,
)
from cinecat.adapters.cli.helpers import console, suppress_loguru, with_container
from cinecat.services.bulk_refresh import RefreshOutcome, RefreshRun


def candidates(
    title: Annotated[str, typer.Argument(help="Titre a rechercher")],
) -> None:
    """Liste les candidats TMDB pour un titre."""
    asyncio.run(_candidates_async(title))


@with_container
async def _candidates_async(container, title: str) -> None:
    resolver = container.resolver()

    with suppress_loguru(), Status(f"[cyan]Searching '{title}'...", console=console):
        found = await resolver.list_candidates(title)

    if not found:
        console.print(f"[yellow]No candidate for '{title}'.[/yellow]")
        return
    console.print(render_candidates_table(found))
    console.print("[dim]Use 'cinecat apply <ENTRY_ID> <TMDB_ID>' to fix an entry.[/dim]")


def add(
    title: Annotated[str, typer.Argument(help="Titre a rechercher")],
    tmdb_id: Annotated[
        Optional[int],
        typer.Option("--id", help="Candidat choisi (defaut : le plus pertinent)"),
    ] = None,
    file_path: Annotated[
        Optional[Path],
        typer.Option("--file", exists=True, dir_okay=False, help="Fichier video associe"),
    ] = None,
) -> None:
    """Ajoute un film au catalogue, avec ou sans fichier (wishlist)."""
    asyncio.run(_add_async(title, tmdb_id, file_path))


@with_container
async def _add_async(
    container, title: str, tmdb_id: Optional[int], file_path: Optional[Path]
) -> None:
    resolver = container.resolver()

    with suppress_loguru(), Status("[cyan]Fetching metadata...", console=console):
        entry = await resolver.add_manual(title, candidate_id=tmdb_id, file_path=file_path)

    where = f" <- {entry.file_path}" if entry.file_path else " (wishlist)"
    console.print(f"[green]Added:[/green] {entry.title} ({entry.release_year or '-'}) #{entry.id}{where}")


def apply(
    entry_id: Annotated[int, typer.Argument(help="ID de l'entree a corriger")],
    tmdb_id: Annotated[int, typer.Argument(help="ID TMDB du candidat choisi")],
) -> None:
    """Remplace les metadonnees d'une entree par celles d'un autre film."""
    asyncio.run(_apply_async(entry_id, tmdb_id))


@with_container
async def _apply_async(container, entry_id: int, tmdb_id: int) -> None:
    resolver = container.resolver()

    with suppress_loguru(), Status("[cyan]Fetching metadata...", console=console):
        entry = await resolver.apply_candidate(entry_id, tmdb_id)

    console.print(render_entry_panel(entry))


def refresh(
    entry_id: Annotated[int, typer.Argument(help="ID de l'entree a rafraichir")],
) -> None:
    """Recharge les metadonnees d'une entree depuis TMDB."""
    asyncio.run(_refresh_async(entry_id))


@with_container
async def _refresh_async(container, entry_id: int) -> None:
    resolver = container.resolver()

    with suppress_loguru(), Status("[cyan]Refreshing...", console=console):
        entry = await resolver.refresh(entry_id)

    console.print(f"[green]Refreshed:[/green] {entry.title} ({entry.release_year or '-'})")


def refresh_all(
    concurrency: Annotated[
        Optional[int],
        typer.Option("--concurrency", "-c", min=1, help="Nombre d'entrees traitees en parallele"),
    ] = None,
) -> None:
    """Recharge les metadonnees de toutes les entrees depuis TMDB."""
    asyncio.run(_refresh_all_async(concurrency))


@with_container
async def _refresh_all_async(container, concurrency: Optional[int]) -> None:
    store = container.catalog_store()
    if len(store) == 0:
        console.print("[yellow]The catalog is empty.[/yellow]")
        return

    refresher = container.bulk_refresher()

    with suppress_loguru():
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("[cyan]Refreshing...", total=len(store))

            def on_progress(outcome: RefreshOutcome, run: RefreshRun) -> None:
                progress.update(task, completed=run.total)
                progress.console.print(format_refresh_outcome(outcome))

            run = await refresher.refresh_all(
                concurrency_limit=concurrency, on_progress=on_progress
            )

    console.print()
    console.print(render_refresh_summary(run))
