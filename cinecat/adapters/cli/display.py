"""
Rendu Rich du catalogue, des fiches et des candidats.

Fonctions pures : elles construisent des renderables a partir des
entites, l'appelant decide ou les afficher.
"""

from pathlib import Path
from typing import Optional

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from cinecat.core.entities.catalog import CatalogEntry
from cinecat.core.ports.api_clients import CandidateMatch
from cinecat.services.bulk_refresh import RefreshOutcome, RefreshRun, RefreshStatus
from cinecat.services.statistics import CatalogStatistics
from cinecat.services.sync import FileOutcome, SyncRun, SyncStatus

IMDB_TITLE_URL = "https://www.imdb.com/title/{}"


def _year(year: Optional[int]) -> str:
    return str(year) if year else "-"


def render_catalog_table(entries: list[CatalogEntry]) -> Table:
    """Tableau du catalogue (une ligne par film)."""
    table = Table(show_lines=False, header_style="bold cyan")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Title")
    table.add_column("Year", justify="right")
    table.add_column("Rating", justify="right")
    table.add_column("Genres")
    table.add_column("File")

    for entry in entries:
        file_cell = (
            Text(entry.file_path.name, style="green")
            if entry.file_path
            else Text("wishlist", style="yellow")
        )
        table.add_row(
            str(entry.id),
            entry.title,
            _year(entry.release_year),
            f"{entry.rating_score:.1f}",
            ", ".join(entry.genres),
            file_cell,
        )
    return table


def render_entry_panel(entry: CatalogEntry, poster_file: Optional[Path] = None) -> Panel:
    """Fiche detaillee d'un film."""
    lines = [
        f"[bold]TMDB:[/bold] {entry.tmdb_id or '-'}",
        f"[bold]Director:[/bold] {entry.director}",
        f"[bold]Genres:[/bold] {', '.join(entry.genres) or '-'}",
        f"[bold]Rating:[/bold] {entry.rating_score:.1f}/10",
        f"[bold]Runtime:[/bold] {entry.runtime_minutes} min"
        if entry.runtime_minutes
        else "[bold]Runtime:[/bold] -",
    ]
    if entry.external_reference_id:
        imdb_url = IMDB_TITLE_URL.format(entry.external_reference_id)
        lines.append(f"[bold]IMDb:[/bold] {entry.external_reference_id} ({imdb_url})")
    lines.append(f"[bold]File:[/bold] {entry.file_path or 'none (wishlist)'}")
    if poster_file is not None:
        lines.append(f"[bold]Poster:[/bold] {poster_file}")
    lines.append(f"[bold]Added:[/bold] {entry.added_at:%Y-%m-%d %H:%M}")

    if entry.cast_members:
        lines.append("")
        lines.append("[bold]Cast:[/bold]")
        for member in entry.cast_members:
            role = f" as {member.character}" if member.character else ""
            lines.append(f"  {member.name}{role}")

    if entry.description:
        lines.append("")
        lines.append(entry.description)

    if entry.watch_log:
        lines.append("")
        lines.append("[bold]Watch log:[/bold]")
        for log in entry.watch_log:
            rating = f" {log.rating:.1f}/10" if log.rating is not None else ""
            comments = f" - {log.comments}" if log.comments else ""
            lines.append(f"  {log.watched_on.isoformat()}{rating}{comments}")

    title = f"{entry.title} ({_year(entry.release_year)}) [dim]#{entry.id}[/dim]"
    return Panel("\n".join(lines), title=title, border_style="cyan")


def render_candidates_table(candidates: list[CandidateMatch]) -> Table:
    """Candidats d'une recherche, numerotes a partir de 1."""
    table = Table(header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("TMDB ID", justify="right")
    table.add_column("Title")
    table.add_column("Year", justify="right")
    table.add_column("Rating", justify="right")

    for number, candidate in enumerate(candidates, start=1):
        table.add_row(
            str(number),
            str(candidate.id),
            candidate.title,
            _year(candidate.release_year),
            f"{candidate.rating_score:.1f}",
        )
    return table


def format_outcome(outcome: FileOutcome) -> str:
    """Ligne de progression coloree pour un fichier."""
    if outcome.status == SyncStatus.ADDED:
        return f"  [green]✓[/green] {outcome.path.name} -> {outcome.title}"
    if outcome.status == SyncStatus.SKIPPED:
        return f"  [dim]- {outcome.path.name} ({outcome.reason})[/dim]"
    return f"  [red]✗[/red] {outcome.path.name} - {outcome.reason}"


def render_sync_summary(run: SyncRun) -> str:
    """Resume final d'une synchronisation."""
    parts = [f"[green]{run.added}[/green] added", f"[yellow]{run.skipped}[/yellow] skipped"]
    if run.failed:
        parts.append(f"[red]{run.failed}[/red] failed")
    else:
        parts.append("0 failed")
    return "[bold]Summary:[/bold] " + ", ".join(parts)


def format_refresh_outcome(outcome: RefreshOutcome) -> str:
    """Ligne de progression coloree pour une entree rafraichie."""
    if outcome.status == RefreshStatus.REFRESHED:
        return f"  [green]✓[/green] #{outcome.entry_id} {outcome.title}"
    if outcome.status == RefreshStatus.SKIPPED:
        return f"  [dim]- #{outcome.entry_id} {outcome.title} ({outcome.reason})[/dim]"
    return f"  [red]✗[/red] #{outcome.entry_id} {outcome.title} - {outcome.reason}"


def render_refresh_summary(run: RefreshRun) -> str:
    """Resume final d'un rafraichissement global."""
    failed = f"[red]{run.failed}[/red] failed" if run.failed else "0 failed"
    return (
        f"[bold]Summary:[/bold] [green]{run.refreshed}[/green] refreshed, "
        f"[yellow]{run.skipped}[/yellow] skipped, {failed}"
    )


def render_statistics(stats: CatalogStatistics) -> Group:
    """Vue d'ensemble, genres, decennies et meilleurs films."""
    runtime = f"{stats.average_runtime:.0f} min" if stats.average_runtime is not None else "-"
    rating = f"{stats.average_rating:.1f}/10" if stats.average_rating is not None else "-"
    overview = "\n".join([
        f"[bold]Movies:[/bold] {stats.total} ({stats.wishlist} in wishlist)",
        f"[bold]Average runtime:[/bold] {runtime}",
        f"[bold]Average rating:[/bold] {rating}",
        f"[bold]Years:[/bold] {_year(stats.oldest_year)} - {_year(stats.newest_year)}",
    ])

    genres = Table(title="Genres", header_style="bold cyan")
    genres.add_column("Genre")
    genres.add_column("Movies", justify="right")
    for name, count in stats.genre_counts:
        genres.add_row(name, str(count))

    decades = Table(title="Decades", header_style="bold cyan")
    decades.add_column("Decade")
    decades.add_column("Movies", justify="right")
    for decade, count in stats.decade_counts:
        decades.add_row(f"{decade}s", str(count))

    top = Table(title="Top rated", header_style="bold cyan")
    top.add_column("#", justify="right", style="dim")
    top.add_column("Title")
    top.add_column("Year", justify="right")
    top.add_column("Rating", justify="right")
    for rank, entry in enumerate(stats.top_rated, start=1):
        top.add_row(str(rank), entry.title, _year(entry.release_year), f"{entry.rating_score:.1f}")

    return Group(Panel(overview, title="Catalog statistics", border_style="cyan"), genres, decades, top)
