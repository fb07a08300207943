"""
Utilitaires partages pour les commandes CLI de Cinecat.

Ce module fournit :
- console : instance Rich Console partagee
- suppress_loguru : context manager pour desactiver/reactiver les logs loguru
- with_container : decorateur injectant un container avec catalogue charge
- fail : affichage d'une erreur metier et sortie en code 1
"""

from contextlib import contextmanager
from functools import wraps
from typing import NoReturn

import typer
from loguru import logger as loguru_logger
from rich.console import Console
from rich.markup import escape

from cinecat.container import Container
from cinecat.core.errors import CinecatError

console = Console()


@contextmanager
def suppress_loguru():
    """
    Context manager pour desactiver les logs loguru pendant l'affichage Rich.

    Usage:
        with suppress_loguru():
            console.print(...)
    """
    loguru_logger.disable("cinecat")
    try:
        yield
    finally:
        loguru_logger.enable("cinecat")


def fail(error: CinecatError) -> NoReturn:
    """Affiche une erreur metier et termine la commande en code 1."""
    console.print(f"[red]Error:[/red] {escape(str(error))}")
    raise typer.Exit(code=1)


async def close_metadata_client(container: Container) -> None:
    """Ferme le client TMDB (sans effet si aucune cle n'est configuree)."""
    try:
        client = container.tmdb_client()
    except CinecatError:
        return
    await client.close()
    container.api_cache().close()


def with_container(func):
    """
    Decorateur qui injecte un container initialise en premier argument.

    Charge le catalogue (CorruptStore est fatal et remonte tel quel a la
    CLI), convertit les CinecatError en message + code 1 et ferme le client
    TMDB en fin de commande.

    Usage:
        @with_container
        async def my_command(container, ...):
            store = container.catalog_store()
    """
    @wraps(func)
    async def wrapper(*args, **kwargs):
        container = Container()
        try:
            container.catalog_store().load()
            return await func(container, *args, **kwargs)
        except CinecatError as e:
            fail(e)
        finally:
            await close_metadata_client(container)
    return wrapper
