"""
Commandes CLI de gestion des preferences utilisateur (config.json).
"""

from pathlib import Path
from typing import Annotated

import typer

from cinecat.adapters.cli.helpers import console, fail
from cinecat.config import UserConfig, load_user_config, save_user_config
from cinecat.container import Container
from cinecat.core.errors import CinecatError


# Application Typer pour les commandes de configuration
config_app = typer.Typer(
    name="config",
    help="Gestion de la configuration (cle API, repertoires de scan)",
    rich_markup_mode="rich",
)


def _config_path() -> Path:
    return Container().config().config_file


def _load() -> tuple[Path, UserConfig]:
    path = _config_path()
    try:
        return path, load_user_config(path)
    except CinecatError as e:
        fail(e)


def _mask(key: str) -> str:
    if not key:
        return "[yellow]not set[/yellow]"
    if len(key) <= 8:
        return "****"
    return f"{key[:4]}...{key[-4:]}"


@config_app.command("show")
def config_show() -> None:
    """Affiche la configuration utilisateur."""
    path, user_config = _load()
    console.print(f"[bold]Config file:[/bold] {path}")
    console.print(f"[bold]API key:[/bold] {_mask(user_config.api_key)}")
    console.print(
        f"[bold]Auto scan on startup:[/bold] {'yes' if user_config.auto_scan_on_startup else 'no'}"
    )
    if user_config.scan_directories:
        console.print("[bold]Scan directories:[/bold]")
        for directory in user_config.scan_directories:
            console.print(f"  {directory}")
    else:
        console.print("[bold]Scan directories:[/bold] [yellow]none[/yellow]")


@config_app.command("set-key")
def config_set_key(
    key: Annotated[str, typer.Argument(help="Cle API TMDB (v3) ou Read Access Token (v4)")],
) -> None:
    """Enregistre la cle API TMDB."""
    path, user_config = _load()
    key = key.strip()
    if not key:
        raise typer.BadParameter("the API key cannot be empty")
    save_user_config(user_config.model_copy(update={"api_key": key}), path)
    console.print("[green]API key saved.[/green]")


@config_app.command("add-dir")
def config_add_dir(
    directory: Annotated[
        Path,
        typer.Argument(exists=True, file_okay=False, help="Repertoire de videos a scanner"),
    ],
) -> None:
    """Ajoute un repertoire de scan."""
    path, user_config = _load()
    directory = directory.expanduser().absolute()
    if directory in user_config.scan_directories:
        console.print(f"[yellow]Already configured:[/yellow] {directory}")
        return
    directories = [*user_config.scan_directories, directory]
    save_user_config(user_config.model_copy(update={"scan_directories": directories}), path)
    console.print(f"[green]Added:[/green] {directory}")


@config_app.command("remove-dir")
def config_remove_dir(
    directory: Annotated[Path, typer.Argument(help="Repertoire a retirer")],
) -> None:
    """Retire un repertoire de scan."""
    path, user_config = _load()
    directory = directory.expanduser().absolute()
    if directory not in user_config.scan_directories:
        console.print(f"[yellow]Not configured:[/yellow] {directory}")
        raise typer.Exit(code=1)
    directories = [d for d in user_config.scan_directories if d != directory]
    save_user_config(user_config.model_copy(update={"scan_directories": directories}), path)
    console.print(f"[green]Removed:[/green] {directory}")


@config_app.command("auto-scan")
def config_auto_scan(
    enabled: Annotated[bool, typer.Argument(help="on/off, true/false")],
) -> None:
    """Active ou desactive le scan automatique au demarrage."""
    path, user_config = _load()
    save_user_config(user_config.model_copy(update={"auto_scan_on_startup": enabled}), path)
    console.print(f"Automatic scan on startup: [bold]{'enabled' if enabled else 'disabled'}[/bold]")
