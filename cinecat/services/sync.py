"""
Coordinateur de synchronisation du catalogue.

Orchestre : dedoublonnage par chemin -> pool fixe de workers -> recherche,
details, ID externe et affiche pour chaque nouveau fichier -> insertion
dans le catalogue une entree a la fois.

Garanties :
- Dedoublonnage par chemin uniquement : deux fichiers du meme film (deux
  copies dans deux repertoires) donnent deux entrees distinctes.
- Idempotence : un chemin deja catalogue n'est jamais retelecharge ; une
  seconde synchronisation sans nouveau fichier ne modifie pas le catalogue.
- Au plus `concurrency_limit` pipelines par fichier en cours simultanement.
- Chaque chemin recu est compte exactement une fois (ajoute, ignore ou en echec).
- Un fichier en echec n'interrompt jamais les autres ; il sera retente
  au prochain scan.
"""

import asyncio
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Optional

from loguru import logger

from cinecat.core.entities.catalog import CatalogEntry
from cinecat.core.errors import CinecatError
from cinecat.core.ports.catalog_store import ICatalogStore
from cinecat.services.entry_assembler import EntryAssembler
from cinecat.services.scanner import derive_search_title
from cinecat.services.worker_pool import (
    DEFAULT_CONCURRENCY_LIMIT,
    check_limit,
    run_bounded,
)


class SyncStatus(str, Enum):
    """Issue du traitement d'un fichier."""

    ADDED = "added"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class FileOutcome:
    """Resultat pour un fichier, avec une ligne de statut pour la progression."""

    path: Path
    status: SyncStatus
    entry_id: Optional[int] = None
    title: Optional[str] = None
    reason: Optional[str] = None

    @property
    def line(self) -> str:
        if self.status == SyncStatus.ADDED:
            return f"[added] {self.path.name} -> {self.title} (id {self.entry_id})"
        if self.status == SyncStatus.SKIPPED:
            return f"[skipped] {self.path.name}: {self.reason}"
        return f"[failed] {self.path.name}: {self.reason}"


@dataclass
class SyncRun:
    """
    Description d'une synchronisation (ephemere, jamais persistee).

    Attributs:
        paths: Chemins candidats recus
        concurrency_limit: Taille du pool de workers
        added / skipped / failed: Compteurs mutuellement exclusifs
        outcomes: Resultats par fichier, dans l'ordre d'achevement
    """

    paths: list[Path]
    concurrency_limit: int
    added: int = 0
    skipped: int = 0
    failed: int = 0
    outcomes: list[FileOutcome] = field(default_factory=list)

    def record(self, outcome: FileOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.status == SyncStatus.ADDED:
            self.added += 1
        elif outcome.status == SyncStatus.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1

    @property
    def total(self) -> int:
        return self.added + self.skipped + self.failed

    @property
    def lines(self) -> list[str]:
        return [outcome.line for outcome in self.outcomes]


ProgressCallback = Callable[[FileOutcome, SyncRun], None]


class SyncCoordinator:
    """
    Synchronise une liste de fichiers video avec le catalogue.

    Le coordinateur ne connait rien de la presentation : la progression
    est exposee via un callback optionnel et le SyncRun final.

    Example:
        coordinator = SyncCoordinator(store, assembler)
        run = await coordinator.synchronize(scan_report.paths)
        print(run.added, run.skipped, run.failed)
    """

    def __init__(
        self,
        store: ICatalogStore,
        assembler: EntryAssembler,
        concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
    ) -> None:
        self._store = store
        self._assembler = assembler
        self._concurrency_limit = concurrency_limit
        self._merge_lock = threading.Lock()

    async def synchronize(
        self,
        candidate_paths: Iterable[Path],
        concurrency_limit: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SyncRun:
        """
        Synchronise les fichiers candidats avec le catalogue.

        Args:
            candidate_paths: Fichiers video trouves par le scanner
            concurrency_limit: Taille du pool (defaut : valeur du constructeur)
            on_progress: Appele apres chaque fichier traite

        Returns:
            SyncRun avec les compteurs finaux

        Raises:
            ValueError: Si concurrency_limit < 1
        """
        limit = check_limit(
            concurrency_limit if concurrency_limit is not None else self._concurrency_limit
        )

        paths = [Path(p).absolute() for p in candidate_paths]
        run = SyncRun(paths=paths, concurrency_limit=limit)

        def report(outcome: FileOutcome) -> None:
            run.record(outcome)
            if on_progress:
                on_progress(outcome, run)

        # Dedoublonnage : chemins deja catalogues ou repetes dans l'entree
        known = self._store.file_paths()
        queued: dict[Path, None] = {}
        for path in paths:
            if path in known:
                report(FileOutcome(path, SyncStatus.SKIPPED, reason="already cataloged"))
            elif path in queued:
                report(FileOutcome(path, SyncStatus.SKIPPED, reason="listed twice"))
            else:
                queued[path] = None

        logger.info(
            f"Synchronisation: {len(queued)} nouveau(x) fichier(s), "
            f"{run.skipped} deja catalogue(s), {limit} worker(s)"
        )

        async def handle(path: Path) -> None:
            report(await self._process(path))

        await run_bounded(queued, handle, limit, name="sync")

        logger.info(
            f"Synchronisation terminee: {run.added} ajoute(s), "
            f"{run.skipped} ignore(s), {run.failed} echec(s)"
        )
        return run

    async def _process(self, path: Path) -> FileOutcome:
        """Pipeline complet pour un fichier ; ne leve jamais."""
        title = derive_search_title(path)
        logger.debug(f"Traitement: {path.name} -> recherche '{title}'")

        try:
            entry = await self._assembler.assemble_from_title(title, file_path=path)
            loop = asyncio.get_running_loop()
            stored = await loop.run_in_executor(None, self._merge, entry)
        except CinecatError as e:
            logger.warning(f"Echec pour {path.name}: {e}")
            return FileOutcome(path, SyncStatus.FAILED, reason=str(e))
        except Exception as e:
            logger.exception(f"Erreur inattendue pour {path.name}")
            return FileOutcome(path, SyncStatus.FAILED, reason=f"unexpected error: {e!r}")

        logger.info(f"Ajoute: {stored.title} ({stored.release_year}) <- {path.name}")
        return FileOutcome(path, SyncStatus.ADDED, entry_id=stored.id, title=stored.title)

    def _merge(self, entry: CatalogEntry) -> CatalogEntry:
        """
        Fusionne une entree dans le catalogue (execute hors boucle asyncio).

        Une entree wishlist (sans fichier) du meme film recoit le fichier ;
        sinon une nouvelle entree est creee, meme si le film est deja
        catalogue avec un autre fichier.
        """
        with self._merge_lock:
            wished = next(
                (e for e in self._store.find_by_tmdb_id(entry.tmdb_id) if not e.has_file),
                None,
            )
            if wished is not None:
                return self._store.associate_file(wished.id, entry.file_path)
            return self._store.insert(entry)
