"""Sous-package CLI commands - re-exporte les commandes publiques."""

from cinecat.adapters.cli.commands.sync_commands import (
    browse,
    sync,
)
from cinecat.adapters.cli.commands.catalog_commands import (
    associate,
    edit,
    list_movies,
    remove,
    show,
    stats,
    watch,
)
from cinecat.adapters.cli.commands.resolve_commands import (
    add,
    apply,
    candidates,
    refresh,
    refresh_all,
)
from cinecat.adapters.cli.commands.config_commands import (
    config_app,
)

__all__ = [
    # demarrage / synchronisation
    "browse",
    "sync",
    # catalogue
    "list_movies",
    "show",
    "remove",
    "associate",
    "watch",
    "edit",
    "stats",
    # desambiguisation
    "candidates",
    "add",
    "apply",
    "refresh",
    "refresh_all",
    # configuration
    "config_app",
]
