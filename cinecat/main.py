"""
Point d'entree CLI de Cinecat.

Configure le logging et fournit les commandes CLI.
"""

from typing import Annotated

import typer
from loguru import logger

from . import __version__
from .adapters.cli.commands import (
    add,
    apply,
    associate,
    browse,
    candidates,
    config_app,
    edit,
    list_movies,
    refresh,
    refresh_all,
    remove,
    show,
    stats,
    sync,
    watch,
)
from .config import Settings
from .container import Container
from .logging_config import configure_logging

app = typer.Typer(
    name="cinecat",
    help="Catalogue personnel de films",
    no_args_is_help=True,
)

# Niveaux de log console selon la verbosite
_VERBOSITY_LEVELS = {1: "INFO", 2: "DEBUG"}


def _configure_from_settings(settings: Settings, log_level: str | None = None) -> None:
    configure_logging(
        log_level=log_level or settings.log_level,
        log_file=settings.log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
    )


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Augmenter la verbosite (-v, -vv)"
        ),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Mode silencieux (erreurs uniquement)"),
    ] = False,
) -> None:
    """Cinecat - catalogue de films enrichi par TMDB."""
    if quiet:
        _configure_from_settings(Container().config(), "ERROR")
    elif verbose:
        _configure_from_settings(Container().config(), _VERBOSITY_LEVELS.get(verbose, "DEBUG"))


# Demarrage et synchronisation
app.command()(browse)
app.command()(sync)

# Catalogue
# Note: "list" masquerait le builtin, donc on utilise name= explicitement
app.command(name="list")(list_movies)
app.command()(show)
app.command()(remove)
app.command()(associate)
app.command()(watch)
app.command()(edit)
app.command()(stats)

# Desambiguisation et ajout manuel
app.command()(candidates)
app.command()(add)
app.command()(apply)
app.command()(refresh)
app.command(name="refresh-all")(refresh_all)

# Monter config_app comme sous-commande
app.add_typer(config_app, name="config")


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    settings = Container().config()
    typer.echo(f"Configuration : {settings.config_file}")
    typer.echo(f"Catalogue : {settings.catalog_file}")
    typer.echo(f"Affiches : {settings.poster_dir}")
    typer.echo(f"Cache API : {settings.api_cache_dir}")
    typer.echo(f"Workers : {settings.concurrency_limit}")
    typer.echo(f"Langue TMDB : {settings.language}")
    typer.echo(f"Niveau de log : {settings.log_level}")
    typer.echo(f"Fichier de log : {settings.log_file}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"Cinecat v{__version__}")


def main() -> None:
    """Point d'entree de l'application."""
    # Charge la configuration et configure le logging
    settings = Settings()
    _configure_from_settings(settings)

    logger.debug("Demarrage de Cinecat", version=__version__)

    # Lance la CLI
    app()


if __name__ == "__main__":
    main()
