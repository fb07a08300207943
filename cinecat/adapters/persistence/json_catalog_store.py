"""
Catalogue persiste dans un fichier JSON.

Implementation de ICatalogStore :
- Mapping en memoire id local -> CatalogEntry
- Ids locaux attribues a l'insertion (compteur persiste, jamais reutilise)
- Ecriture immediate apres chaque mutation (write-through)
- Ecriture atomique (fichier temporaire + os.replace) : un crash ne tronque
  jamais le fichier deja valide
- Un seul ecrivain a la fois (verrou) : les workers de synchronisation
  appellent insert depuis le pool de threads de la boucle asyncio

Les lectures se font sur un instantane immuable remplace en une seule
affectation : un lecteur voit le catalogue avant ou apres une mutation,
jamais une entree partielle.
"""

import os
import tempfile
import threading
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Union

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from cinecat.core.entities.catalog import CatalogEntry, WatchLogEntry
from cinecat.core.errors import CorruptStore, DuplicateEntry, NotFound
from cinecat.core.ports.catalog_store import ICatalogStore


@dataclass
class CatalogDocument:
    """Contenu du fichier : prochain id local et entrees."""

    next_id: int = 1
    entries: list[CatalogEntry] = field(default_factory=list)


# Un tableau JSON nu (fichier ecrit a la main) est aussi accepte en lecture
_READ_ADAPTER = TypeAdapter(Union[CatalogDocument, list[CatalogEntry]])
_WRITE_ADAPTER = TypeAdapter(CatalogDocument)


@dataclass(frozen=True)
class _Snapshot:
    """Etat immuable du catalogue : entrees par id et index des chemins."""

    entries: Mapping[int, CatalogEntry] = field(
        default_factory=lambda: MappingProxyType({})
    )
    by_path: Mapping[Path, int] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def build(cls, entries: dict[int, CatalogEntry]) -> "_Snapshot":
        by_path = {
            entry.file_path: entry.id
            for entry in entries.values()
            if entry.file_path is not None
        }
        return cls(MappingProxyType(entries), MappingProxyType(by_path))


class JsonCatalogStore(ICatalogStore):
    """
    Catalogue en memoire avec persistance JSON write-through.

    Le fichier contient un objet JSON {"next_id": ..., "entries": [...]},
    lisible et editable a la main.

    Example:
        store = JsonCatalogStore(Path("~/.local/share/cinecat/catalog.json"))
        store.load()
        stored = store.insert(entry)  # stored.id attribue par le catalogue
    """

    def __init__(self, catalog_file: Path) -> None:
        """
        Initialise le catalogue (vide tant que load() n'est pas appele).

        Args:
            catalog_file: Chemin du fichier JSON
        """
        self._catalog_file = catalog_file
        self._lock = threading.RLock()
        self._snapshot = _Snapshot()
        self._next_id = 1
        self._version = 0

    @property
    def catalog_file(self) -> Path:
        return self._catalog_file

    @property
    def version(self) -> int:
        return self._version

    def __len__(self) -> int:
        return len(self._snapshot.entries)

    # ------------------------------------------------------------------
    # Chargement / persistance
    # ------------------------------------------------------------------

    def load(self) -> None:
        """
        Charge le catalogue depuis le fichier.

        Un fichier absent ou vide donne un catalogue vide.

        Raises:
            CorruptStore: Si le fichier ne peut pas etre deserialise,
                          contient une entree sans id ou viole l'unicite
                          des ids ou des chemins
        """
        with self._lock:
            if not self._catalog_file.exists():
                logger.debug(f"Catalogue absent, demarrage a vide: {self._catalog_file}")
                self._replace_snapshot({}, 1)
                return

            content = self._catalog_file.read_bytes()
            if not content.strip():
                self._replace_snapshot({}, 1)
                return

            try:
                loaded = _READ_ADAPTER.validate_json(content)
            except ValidationError as e:
                raise CorruptStore(self._catalog_file, str(e)) from e
            if isinstance(loaded, list):
                loaded = CatalogDocument(entries=loaded)

            entries: dict[int, CatalogEntry] = {}
            seen_paths: set[Path] = set()
            for entry in loaded.entries:
                if entry.id is None:
                    raise CorruptStore(self._catalog_file, f"entry without id: {entry.title!r}")
                if entry.id in entries:
                    raise CorruptStore(self._catalog_file, f"duplicate id {entry.id}")
                if entry.file_path is not None:
                    if entry.file_path in seen_paths:
                        raise CorruptStore(
                            self._catalog_file, f"duplicate file path {entry.file_path}"
                        )
                    seen_paths.add(entry.file_path)
                entries[entry.id] = entry

            # Le compteur ne redescend jamais sous un id deja utilise
            next_id = max([loaded.next_id, *(entry_id + 1 for entry_id in entries)])
            self._replace_snapshot(entries, next_id)
            logger.info(f"Catalogue charge: {len(entries)} film(s)")

    def _replace_snapshot(self, entries: dict[int, CatalogEntry], next_id: int) -> None:
        self._snapshot = _Snapshot.build(entries)
        self._next_id = next_id
        self._version += 1

    def _write(self, entries: dict[int, CatalogEntry], next_id: int) -> None:
        """Ecrit le fichier de maniere atomique (meme repertoire + os.replace)."""
        directory = self._catalog_file.parent
        directory.mkdir(parents=True, exist_ok=True)
        document = CatalogDocument(next_id=next_id, entries=list(entries.values()))
        payload = _WRITE_ADAPTER.dump_json(document, indent=2)

        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".catalog-", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self._catalog_file)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _commit(self, entries: dict[int, CatalogEntry], next_id: Optional[int] = None) -> None:
        """Persiste puis publie le nouvel etat (a appeler sous verrou)."""
        next_id = self._next_id if next_id is None else next_id
        self._write(entries, next_id)
        self._replace_snapshot(entries, next_id)

    # ------------------------------------------------------------------
    # Lectures
    # ------------------------------------------------------------------

    def get(self, entry_id: int) -> Optional[CatalogEntry]:
        return self._snapshot.entries.get(entry_id)

    def find_by_path(self, file_path: Path) -> Optional[CatalogEntry]:
        snapshot = self._snapshot
        entry_id = snapshot.by_path.get(file_path)
        return snapshot.entries.get(entry_id) if entry_id is not None else None

    def find_by_tmdb_id(self, tmdb_id: int) -> list[CatalogEntry]:
        return sorted(
            (e for e in self._snapshot.entries.values() if e.tmdb_id == tmdb_id),
            key=lambda e: e.id,
        )

    def list_all(self) -> list[CatalogEntry]:
        return list(self._snapshot.entries.values())

    def file_paths(self) -> frozenset[Path]:
        return frozenset(self._snapshot.by_path)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _require(self, entries: Mapping[int, CatalogEntry], entry_id: Optional[int]) -> CatalogEntry:
        existing = entries.get(entry_id) if entry_id is not None else None
        if existing is None:
            raise NotFound("entry", entry_id if entry_id is not None else "without id")
        return existing

    def _check_path_free(
        self, file_path: Optional[Path], owner_id: Optional[int]
    ) -> None:
        if file_path is None:
            return
        holder = self._snapshot.by_path.get(file_path)
        if holder is not None and holder != owner_id:
            raise DuplicateEntry(f"{file_path} is already associated with entry {holder}")

    def insert(self, entry: CatalogEntry) -> CatalogEntry:
        with self._lock:
            entries = self._snapshot.entries
            if entry.id is None:
                entry = replace(entry, id=self._next_id)
            elif entry.id in entries:
                raise DuplicateEntry(f"entry {entry.id} already exists")
            self._check_path_free(entry.file_path, None)

            updated = dict(entries)
            updated[entry.id] = entry
            self._commit(updated, max(self._next_id, entry.id + 1))

        logger.debug(f"Entree ajoutee: #{entry.id} {entry.title} (tmdb {entry.tmdb_id})")
        return entry

    def update(self, entry: CatalogEntry) -> CatalogEntry:
        with self._lock:
            existing = self._require(self._snapshot.entries, entry.id)
            self._check_path_free(entry.file_path, entry.id)

            # added_at est fixe a la creation
            stored = self._put(replace(entry, added_at=existing.added_at))

        if stored.tmdb_id != existing.tmdb_id:
            logger.info(
                f"Entree #{stored.id} re-associee au film {stored.tmdb_id} ({stored.title})"
            )
        return stored

    def remove(self, entry_id: int) -> CatalogEntry:
        with self._lock:
            entries = self._snapshot.entries
            existing = self._require(entries, entry_id)
            updated = dict(entries)
            del updated[entry_id]
            self._commit(updated)

        logger.debug(f"Entree supprimee: #{entry_id} {existing.title}")
        return existing

    def associate_file(self, entry_id: int, file_path: Path) -> CatalogEntry:
        file_path = file_path.absolute()
        with self._lock:
            existing = self._require(self._snapshot.entries, entry_id)
            self._check_path_free(file_path, entry_id)
            return self._put(replace(existing, file_path=file_path))

    def add_watch_log(self, entry_id: int, log_entry: WatchLogEntry) -> CatalogEntry:
        with self._lock:
            existing = self._require(self._snapshot.entries, entry_id)
            return self._put(
                replace(existing, watch_log=existing.watch_log + (log_entry,))
            )

    def _put(self, entry: CatalogEntry) -> CatalogEntry:
        updated = dict(self._snapshot.entries)
        updated[entry.id] = entry
        self._commit(updated)
        return entry
