"""
Pool fixe de workers asyncio.

Utilise par la synchronisation et le rafraichissement global : une file
remplie d'avance, min(limite, nombre d'elements) taches qui la vident.
Chaque worker journalise sous son nom (extra "worker" de loguru), ce qui
permet de suivre un fichier d'un bout a l'autre dans le log JSON.
"""

import asyncio
from typing import Awaitable, Callable, Iterable, TypeVar

from loguru import logger

T = TypeVar("T")

DEFAULT_CONCURRENCY_LIMIT = 10


def check_limit(limit: int) -> int:
    """Valide une taille de pool (ValueError si < 1)."""
    if limit < 1:
        raise ValueError(f"concurrency_limit must be >= 1, got {limit}")
    return limit


async def run_bounded(
    items: Iterable[T],
    handler: Callable[[T], Awaitable[None]],
    limit: int,
    name: str = "worker",
) -> None:
    """
    Traite les elements avec au plus `limit` appels de handler en cours.

    Le handler ne doit pas lever : une exception non capturee annule le
    lot entier via asyncio.gather.

    Args:
        items: Elements a traiter, dans l'ordre de prise en charge
        handler: Coroutine appelee une fois par element
        limit: Nombre maximal de workers
        name: Prefixe des noms de workers dans les logs (ex: "sync-3")
    """
    check_limit(limit)
    queue: asyncio.Queue[T] = asyncio.Queue()
    for item in items:
        queue.put_nowait(item)

    async def worker(worker_name: str) -> None:
        with logger.contextualize(worker=worker_name):
            while True:
                try:
                    item = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                await handler(item)

    workers = [
        asyncio.create_task(worker(f"{name}-{n}"))
        for n in range(1, min(limit, queue.qsize()) + 1)
    ]
    await asyncio.gather(*workers)
