"""
Container d'injection de dependances via dependency-injector.

Fournit une gestion centralisee des dependances pour la CLI.
Le client TMDB n'est construit qu'a la premiere utilisation : les commandes
de consultation du catalogue fonctionnent sans cle API.
"""

from dependency_injector import containers, providers

from .adapters.api.cache import APICache
from .adapters.api.tmdb_client import TMDBClient
from .adapters.persistence.json_catalog_store import JsonCatalogStore
from .adapters.persistence.poster_cache import PosterCache
from .config import Settings, load_user_config, resolve_api_key
from .services.bulk_refresh import BulkRefresher
from .services.catalog_view import CatalogViewService
from .services.entry_assembler import EntryAssembler
from .services.metadata_editor import MetadataEditor
from .services.resolver import DisambiguationResolver
from .services.scanner import DirectoryScanner
from .services.startup import StartupService
from .services.statistics import StatisticsService
from .services.sync import SyncCoordinator


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        container.catalog_store().load()  # Charge le catalogue une fois
        views = container.catalog_view()
        resolver = container.resolver()  # Leve ConfigMissing sans cle API
    """

    # Configuration - singletons charges une seule fois
    config = providers.Singleton(Settings)
    user_config = providers.Singleton(load_user_config, path=config.provided.config_file)

    # Catalogue - Singleton : un seul proprietaire, un seul ecrivain
    catalog_store = providers.Singleton(
        JsonCatalogStore,
        catalog_file=config.provided.catalog_file,
    )

    # Cache API - Singleton partage
    api_cache = providers.Singleton(
        APICache,
        cache_dir=config.provided.api_cache_dir,
    )

    # Client API - Singleton, cle resolue a la construction (ConfigMissing si absente)
    api_key = providers.Callable(resolve_api_key, settings=config, user_config=user_config)
    tmdb_client = providers.Singleton(
        TMDBClient,
        api_key=api_key,
        cache=api_cache,
        language=config.provided.language,
        timeout=config.provided.request_timeout,
        max_attempts=config.provided.api_max_attempts,
    )

    poster_cache = providers.Singleton(
        PosterCache,
        poster_dir=config.provided.poster_dir,
        client=tmdb_client,
    )

    # Services
    scanner = providers.Singleton(DirectoryScanner)
    entry_assembler = providers.Singleton(
        EntryAssembler,
        client=tmdb_client,
        posters=poster_cache,
    )
    sync_coordinator = providers.Factory(
        SyncCoordinator,
        store=catalog_store,
        assembler=entry_assembler,
        concurrency_limit=config.provided.concurrency_limit,
    )
    catalog_view = providers.Singleton(CatalogViewService, store=catalog_store)
    resolver = providers.Factory(
        DisambiguationResolver,
        store=catalog_store,
        client=tmdb_client,
        assembler=entry_assembler,
    )
    bulk_refresher = providers.Factory(
        BulkRefresher,
        store=catalog_store,
        resolver=resolver,
        concurrency_limit=config.provided.concurrency_limit,
    )

    # Services sans client TMDB
    statistics = providers.Factory(StatisticsService, store=catalog_store)
    metadata_editor = providers.Factory(MetadataEditor, store=catalog_store)

    startup_service = providers.Factory(
        StartupService,
        store=catalog_store,
        user_config=user_config,
        scanner=scanner,
        coordinator_factory=sync_coordinator.provider,
    )
