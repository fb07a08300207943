"""
Configuration du logging de l'application via loguru.

Deux sorties :
- Console : coloree, avec le nom du worker emetteur ("main" hors pool,
  "sync-3" ou "refresh-1" dans un pool de workers)
- Fichier : JSON avec rotation ; le worker figure dans record.extra.worker,
  ce qui permet de suivre le traitement d'un fichier de bout en bout
"""

import sys
from pathlib import Path

from loguru import logger

# Nom du worker pour les messages emis hors d'un pool
MAIN_WORKER = "main"

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[worker]: <9}</magenta> | "
    "<level>{message}</level>"
)

# En DEBUG, l'emplacement du message est utile
_CONSOLE_DEBUG_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[worker]: <9}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def configure_logging(
    log_level: str = "INFO",
    log_file: Path = Path("logs/cinecat.log"),
    rotation_size: str = "10 MB",
    retention_count: int = 5,
) -> None:
    """Configure le logging de l'application.

    Args :
        log_level : Niveau minimum pour la console (DEBUG, INFO, WARNING, ERROR)
        log_file : Fichier de log JSON (toujours en DEBUG)
        rotation_size : Taille avant rotation (ex: "10 MB")
        retention_count : Nombre de fichiers rotatifs conserves
    """
    logger.remove()
    # Valeur par defaut ; run_bounded la remplace via logger.contextualize
    logger.configure(extra={"worker": MAIN_WORKER})

    logger.add(
        sys.stderr,
        level=log_level,
        format=_CONSOLE_DEBUG_FORMAT if log_level.upper() == "DEBUG" else _CONSOLE_FORMAT,
        colorize=True,
    )

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        level="DEBUG",
        format="{message}",
        serialize=True,
        rotation=rotation_size,
        retention=retention_count,
        compression="zip",
        # Les workers journalisent depuis la boucle et depuis l'executor
        enqueue=True,
    )

    logger.debug(f"Logging configure: console {log_level}, fichier {log_file}")
