"""
Sequence de demarrage et synchronisation des repertoires configures.

Au lancement : chargement du catalogue, puis, si autoScanOnStartup est
actif et qu'au moins un repertoire est configure, scan + synchronisation
avant le premier affichage. Chaque etape emet une ligne de statut.
"""

from pathlib import Path
from typing import Callable, Iterable, Optional

from loguru import logger

from cinecat.config import UserConfig
from cinecat.core.ports.catalog_store import ICatalogStore
from cinecat.services.scanner import DirectoryScanner
from cinecat.services.sync import ProgressCallback, SyncCoordinator, SyncRun

StatusCallback = Callable[[str], None]


class StartupService:
    """
    Orchestration scan -> synchronisation pour le demarrage et la CLI.

    Example:
        startup = StartupService(store, user_config, scanner, lambda: coordinator)
        run = await startup.run(on_status=print)
    """

    def __init__(
        self,
        store: ICatalogStore,
        user_config: UserConfig,
        scanner: DirectoryScanner,
        coordinator_factory: Callable[[], SyncCoordinator],
    ) -> None:
        """
        Args:
            store: Catalogue (deja charge)
            user_config: Preferences utilisateur
            scanner: Scanner de repertoires
            coordinator_factory: Construit le coordinateur a la demande ;
                peut lever ConfigMissing si aucune cle API n'est configuree
        """
        self._store = store
        self._user_config = user_config
        self._scanner = scanner
        self._coordinator_factory = coordinator_factory

    def should_auto_scan(self) -> bool:
        return self._user_config.auto_scan_on_startup and bool(
            self._user_config.scan_directories
        )

    async def run(
        self,
        on_status: Optional[StatusCallback] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Optional[SyncRun]:
        """
        Execute la sequence de demarrage.

        Le catalogue doit deja etre charge (CorruptStore est leve au chargement).

        Returns:
            Le SyncRun si une synchronisation a eu lieu, None sinon
        """
        emit = on_status or (lambda _line: None)
        emit(f"Catalog loaded: {len(self._store)} movie(s)")

        if not self._user_config.auto_scan_on_startup:
            emit("Automatic scan disabled")
            return None
        if not self._user_config.scan_directories:
            emit("No scan directory configured")
            return None

        return await self.sync_directories(
            self._user_config.scan_directories, on_status=on_status, on_progress=on_progress
        )

    async def sync_directories(
        self,
        directories: Iterable[Path],
        concurrency_limit: Optional[int] = None,
        on_status: Optional[StatusCallback] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SyncRun:
        """Scanne des repertoires puis synchronise les fichiers trouves."""
        emit = on_status or (lambda _line: None)
        directories = list(directories)

        emit(f"Scanning {len(directories)} director{'y' if len(directories) == 1 else 'ies'}")
        report = self._scanner.scan(directories)
        for warning in report.warnings:
            emit(f"Skipped {warning.directory}: {warning.reason}")
        emit(f"Found {len(report.paths)} video file(s)")

        emit("Fetching metadata")
        coordinator = self._coordinator_factory()
        run = await coordinator.synchronize(
            report.paths, concurrency_limit=concurrency_limit, on_progress=on_progress
        )
        emit(f"Sync complete: {run.added} added, {run.skipped} skipped, {run.failed} failed")
        logger.info(f"Repertoires synchronises: {run.added} ajoute(s), {run.failed} echec(s)")
        return run
