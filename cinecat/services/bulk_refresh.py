"""
Rafraichissement de toutes les entrees du catalogue.

Chaque entree est rafraichie comme par la commande refresh (metadonnees
rechargees, fichier, date d'ajout et journal conserves), via le meme pool
borne de workers que la synchronisation. Une entree en echec n'interrompt
jamais les autres.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from loguru import logger

from cinecat.core.errors import CinecatError, NotFound
from cinecat.core.ports.catalog_store import ICatalogStore
from cinecat.services.resolver import DisambiguationResolver
from cinecat.services.worker_pool import (
    DEFAULT_CONCURRENCY_LIMIT,
    check_limit,
    run_bounded,
)


class RefreshStatus(str, Enum):
    """Issue du rafraichissement d'une entree."""

    REFRESHED = "refreshed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class RefreshOutcome:
    """Resultat pour une entree."""

    entry_id: int
    title: str
    status: RefreshStatus
    reason: Optional[str] = None

    @property
    def line(self) -> str:
        if self.status == RefreshStatus.REFRESHED:
            return f"[refreshed] #{self.entry_id} {self.title}"
        return f"[{self.status.value}] #{self.entry_id} {self.title}: {self.reason}"


@dataclass
class RefreshRun:
    """Compteurs d'un rafraichissement global (ephemere)."""

    entry_ids: list[int]
    concurrency_limit: int
    refreshed: int = 0
    skipped: int = 0
    failed: int = 0
    outcomes: list[RefreshOutcome] = field(default_factory=list)

    def record(self, outcome: RefreshOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.status == RefreshStatus.REFRESHED:
            self.refreshed += 1
        elif outcome.status == RefreshStatus.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1

    @property
    def total(self) -> int:
        return self.refreshed + self.skipped + self.failed


RefreshProgressCallback = Callable[[RefreshOutcome, RefreshRun], None]


class BulkRefresher:
    """
    Rafraichit toutes les entrees presentes au lancement.

    Example:
        refresher = BulkRefresher(store, resolver)
        run = await refresher.refresh_all()
        print(run.refreshed, run.failed)
    """

    def __init__(
        self,
        store: ICatalogStore,
        resolver: DisambiguationResolver,
        concurrency_limit: int = DEFAULT_CONCURRENCY_LIMIT,
    ) -> None:
        self._store = store
        self._resolver = resolver
        self._concurrency_limit = concurrency_limit

    async def refresh_all(
        self,
        concurrency_limit: Optional[int] = None,
        on_progress: Optional[RefreshProgressCallback] = None,
    ) -> RefreshRun:
        """
        Rafraichit chaque entree du catalogue.

        Args:
            concurrency_limit: Taille du pool (defaut : valeur du constructeur)
            on_progress: Appele apres chaque entree traitee

        Raises:
            ValueError: Si concurrency_limit < 1
        """
        limit = check_limit(
            concurrency_limit if concurrency_limit is not None else self._concurrency_limit
        )
        entries = sorted(self._store.list_all(), key=lambda e: e.id)
        run = RefreshRun(entry_ids=[e.id for e in entries], concurrency_limit=limit)
        titles = {e.id: e.title for e in entries}

        logger.info(f"Rafraichissement global: {len(entries)} entree(s), {limit} worker(s)")

        async def handle(entry_id: int) -> None:
            outcome = await self._refresh_one(entry_id, titles[entry_id])
            run.record(outcome)
            if on_progress:
                on_progress(outcome, run)

        await run_bounded(run.entry_ids, handle, limit, name="refresh")

        logger.info(
            f"Rafraichissement termine: {run.refreshed} rafraichie(s), "
            f"{run.skipped} ignoree(s), {run.failed} echec(s)"
        )
        return run

    async def _refresh_one(self, entry_id: int, title: str) -> RefreshOutcome:
        """Rafraichit une entree ; ne leve jamais."""
        try:
            entry = await self._resolver.refresh(entry_id)
        except NotFound as e:
            if e.kind != "entry":
                logger.warning(f"Echec du rafraichissement de #{entry_id}: {e}")
                return RefreshOutcome(entry_id, title, RefreshStatus.FAILED, str(e))
            # Retiree entre la liste initiale et son tour
            return RefreshOutcome(entry_id, title, RefreshStatus.SKIPPED, "removed meanwhile")
        except CinecatError as e:
            logger.warning(f"Echec du rafraichissement de #{entry_id}: {e}")
            return RefreshOutcome(entry_id, title, RefreshStatus.FAILED, str(e))
        except Exception as e:
            logger.exception(f"Erreur inattendue pour #{entry_id}")
            return RefreshOutcome(
                entry_id, title, RefreshStatus.FAILED, f"unexpected error: {e!r}"
            )

        return RefreshOutcome(entry_id, entry.title, RefreshStatus.REFRESHED)
