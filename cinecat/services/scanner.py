"""
Service de scan des repertoires de videos.

Liste les fichiers video (non recursif) des repertoires configures et
derive un titre de recherche a partir du nom de fichier.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from loguru import logger

from cinecat.core.errors import DirectoryUnreadable

# Extensions video supportees (comparaison insensible a la casse)
VIDEO_EXTENSIONS: frozenset[str] = frozenset({
    ".mp4", ".mkv", ".avi", ".mov", ".wmv", ".flv", ".webm", ".m4v"
})

_SEPARATORS = re.compile(r"[._]+")


def is_video_file(path: Path) -> bool:
    """Verifie l'extension d'un fichier contre la liste des extensions video."""
    return path.suffix.lower() in VIDEO_EXTENSIONS


def derive_search_title(path: Path) -> str:
    """
    Derive un titre de recherche a partir d'un nom de fichier.

    Retire l'extension, remplace les separateurs (points, underscores)
    par des espaces et normalise les espaces.

    Example:
        >>> derive_search_title(Path("/films/The_Thing.1982.mkv"))
        'The Thing 1982'
    """
    return " ".join(_SEPARATORS.sub(" ", path.stem).split())


@dataclass
class ScanReport:
    """
    Resultat d'un scan.

    Attributs:
        paths: Chemins absolus des fichiers video, sans doublons, dans l'ordre
               des repertoires puis de l'enumeration du systeme de fichiers
        warnings: Repertoires ignores (inexistants ou illisibles)
    """

    paths: list[Path] = field(default_factory=list)
    warnings: list[DirectoryUnreadable] = field(default_factory=list)


class DirectoryScanner:
    """
    Enumere les fichiers video des repertoires configures.

    Ne descend pas dans les sous-repertoires. Un repertoire illisible est
    ignore avec un avertissement : il n'interrompt jamais le scan des autres.
    """

    def scan(self, directories: Iterable[Path]) -> ScanReport:
        """
        Scanne une liste ordonnee de repertoires.

        Args:
            directories: Repertoires a scanner (les doublons sont toleres)

        Returns:
            ScanReport avec les chemins trouves et les repertoires ignores
        """
        report = ScanReport()
        seen: set[Path] = set()

        for directory in directories:
            directory = Path(directory).expanduser().absolute()
            try:
                found = self._list_directory(directory)
            except DirectoryUnreadable as e:
                logger.warning(str(e))
                report.warnings.append(e)
                continue

            for path in found:
                if path not in seen:
                    seen.add(path)
                    report.paths.append(path)

        logger.info(
            f"Scan termine: {len(report.paths)} fichier(s) video, "
            f"{len(report.warnings)} repertoire(s) ignore(s)"
        )
        return report

    def _list_directory(self, directory: Path) -> list[Path]:
        """
        Liste les fichiers video directement contenus dans un repertoire.

        Raises:
            DirectoryUnreadable: Si le repertoire n'existe pas ou ne peut pas etre lu
        """
        if not directory.is_dir():
            raise DirectoryUnreadable(directory, "not a directory or does not exist")

        # is_file() peut lever PermissionError (stat refuse), comme iterdir()
        try:
            return [
                child
                for child in directory.iterdir()
                if is_video_file(child) and child.is_file()
            ]
        except OSError as e:
            raise DirectoryUnreadable(directory, e.strerror or str(e)) from e
