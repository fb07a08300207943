"""
Commandes CLI de consultation et de gestion du catalogue.

Aucune de ces commandes n'a besoin de la cle API TMDB.
"""

import asyncio
from datetime import date, datetime
from pathlib import Path
from typing import Annotated, Optional

import typer

from cinecat.adapters.cli.display import (
    render_catalog_table,
    render_entry_panel,
    render_statistics,
)
from cinecat.adapters.cli.helpers import console, with_container
from cinecat.core.entities.catalog import WatchLogEntry
from cinecat.core.errors import NotFound
from cinecat.services.catalog_view import SortKey
from cinecat.services.metadata_editor import MetadataEdit, split_list


def list_movies(
    filter_text: Annotated[
        Optional[str],
        typer.Option("--filter", "-f", help="Sous-chaine recherchee dans le titre"),
    ] = None,
    genre: Annotated[
        Optional[str],
        typer.Option("--genre", "-g", help="Genre exact (\"All\" = tous)"),
    ] = None,
    sort: Annotated[
        SortKey,
        typer.Option("--sort", "-s", help="Ordre de tri"),
    ] = SortKey.TITLE,
    genres: Annotated[
        bool,
        typer.Option("--genres", help="Liste les genres disponibles"),
    ] = False,
) -> None:
    """Affiche le catalogue filtre et trie."""
    asyncio.run(_list_async(filter_text, genre, sort, genres))


@with_container
async def _list_async(
    container, filter_text: Optional[str], genre: Optional[str], sort: SortKey, genres: bool
) -> None:
    views = container.catalog_view()

    if genres:
        for name in views.available_genres():
            console.print(name)
        return

    entries = views.project(filter_text=filter_text, genre=genre, sort_key=sort)
    if not entries:
        console.print("[yellow]No movie matches.[/yellow]")
        return

    console.print(render_catalog_table(entries))
    console.print(f"[dim]{len(entries)} movie(s)[/dim]")


def show(
    entry_id: Annotated[int, typer.Argument(help="ID de l'entree dans le catalogue")],
) -> None:
    """Affiche la fiche detaillee d'un film."""
    asyncio.run(_show_async(entry_id))


@with_container
async def _show_async(container, entry_id: int) -> None:
    entry = container.catalog_store().get(entry_id)
    if entry is None:
        raise NotFound("entry", entry_id)

    poster_file = None
    if entry.poster_reference:
        poster_file = container.config().poster_dir / entry.poster_reference
    console.print(render_entry_panel(entry, poster_file))


def remove(
    entry_id: Annotated[int, typer.Argument(help="ID de l'entree a retirer")],
) -> None:
    """Retire un film du catalogue (le fichier video n'est pas touche)."""
    asyncio.run(_remove_async(entry_id))


@with_container
async def _remove_async(container, entry_id: int) -> None:
    removed = container.catalog_store().remove(entry_id)
    console.print(f"[green]Removed:[/green] {removed.title} (#{removed.id})")


def associate(
    entry_id: Annotated[int, typer.Argument(help="ID de l'entree")],
    file_path: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, help="Fichier video a associer"),
    ],
) -> None:
    """Associe un fichier video a une entree (par exemple un film de la wishlist)."""
    asyncio.run(_associate_async(entry_id, file_path))


@with_container
async def _associate_async(container, entry_id: int, file_path: Path) -> None:
    entry = container.catalog_store().associate_file(entry_id, file_path)
    console.print(f"[green]Associated:[/green] {entry.title} <- {entry.file_path}")


def _parse_date(value: Optional[str]) -> date:
    if not value:
        return date.today()
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise typer.BadParameter(f"expected YYYY-MM-DD, got '{value}'")


def watch(
    entry_id: Annotated[int, typer.Argument(help="ID de l'entree")],
    on: Annotated[
        Optional[str],
        typer.Option("--on", help="Date du visionnage (YYYY-MM-DD, defaut : aujourd'hui)"),
    ] = None,
    rating: Annotated[
        Optional[float],
        typer.Option("--rating", "-r", min=0.0, max=10.0, help="Note personnelle sur 10"),
    ] = None,
    comments: Annotated[
        str,
        typer.Option("--comments", "-m", help="Commentaire libre"),
    ] = "",
) -> None:
    """Ajoute un visionnage au journal d'un film."""
    watched_on = _parse_date(on)
    asyncio.run(_watch_async(entry_id, watched_on, rating, comments))


@with_container
async def _watch_async(
    container, entry_id: int, watched_on: date, rating: Optional[float], comments: str
) -> None:
    log_entry = WatchLogEntry(watched_on=watched_on, rating=rating, comments=comments)
    entry = container.catalog_store().add_watch_log(entry_id, log_entry)
    console.print(
        f"[green]Logged:[/green] {entry.title} watched on {watched_on.isoformat()} "
        f"({len(entry.watch_log)} viewing(s))"
    )


def stats(
    top: Annotated[
        int,
        typer.Option("--top", "-t", min=0, help="Nombre de films les mieux notes affiches"),
    ] = 10,
) -> None:
    """Affiche les statistiques du catalogue."""
    asyncio.run(_stats_async(top))


@with_container
async def _stats_async(container, top: int) -> None:
    statistics = container.statistics().compute(top_n=top)
    if statistics.total == 0:
        console.print("[yellow]No statistics available: the catalog is empty.[/yellow]")
        return
    console.print(render_statistics(statistics))


def edit(
    entry_id: Annotated[int, typer.Argument(help="ID de l'entree a modifier")],
    title: Annotated[Optional[str], typer.Option("--title", help="Titre")] = None,
    year: Annotated[
        Optional[int], typer.Option("--year", min=0, help="Annee de sortie (0 = inconnue)")
    ] = None,
    director: Annotated[Optional[str], typer.Option("--director", help="Realisateur")] = None,
    genres: Annotated[
        Optional[str], typer.Option("--genres", help="Genres separes par des virgules")
    ] = None,
    rating: Annotated[
        Optional[float], typer.Option("--rating", help="Note sur 10 (bornee a 0-10)")
    ] = None,
    runtime: Annotated[
        Optional[int], typer.Option("--runtime", min=0, help="Duree en minutes (0 = inconnue)")
    ] = None,
    description: Annotated[Optional[str], typer.Option("--description", help="Resume")] = None,
    cast: Annotated[
        Optional[str], typer.Option("--cast", help="Acteurs separes par des virgules")
    ] = None,
) -> None:
    """Modifie a la main les metadonnees d'une entree."""
    changes = MetadataEdit(
        title=title,
        release_year=year,
        director=director,
        genres=split_list(genres) if genres is not None else None,
        rating_score=rating,
        runtime_minutes=runtime,
        description=description,
        cast_names=split_list(cast) if cast is not None else None,
    )
    asyncio.run(_edit_async(entry_id, changes))


@with_container
async def _edit_async(container, entry_id: int, changes: MetadataEdit) -> None:
    if changes.is_empty():
        console.print("[yellow]Nothing to change.[/yellow]")
        return
    entry = container.metadata_editor().edit(entry_id, changes)
    console.print(render_entry_panel(entry))
