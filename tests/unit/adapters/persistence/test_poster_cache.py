"""
Tests unitaires pour PosterCache.

Ces tests verifient:
- Nommage deterministe des affiches
- Aucun appel reseau quand l'affiche est deja en cache
- Un seul telechargement pour des demandes concurrentes du meme film
- Conversion des echecs en DownloadFailed
- Liberation des verrous par id une fois les telechargements termines
"""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from cinecat.adapters.persistence.poster_cache import PosterCache
from cinecat.core.errors import DownloadFailed, Unreachable


@pytest.fixture
def posters(tmp_path: Path, mock_client: AsyncMock) -> PosterCache:
    return PosterCache(tmp_path / "posters", mock_client)


class TestPosterCache:
    """Tests pour la classe PosterCache."""

    def test_reference_is_deterministic(self, posters: PosterCache) -> None:
        assert posters.reference_for(42) == "poster_42.jpg"
        assert posters.path_for(42) == posters.poster_dir / "poster_42.jpg"

    @pytest.mark.asyncio
    async def test_download_writes_file(self, posters: PosterCache, mock_client: AsyncMock) -> None:
        reference = await posters.ensure_cached(42, "/abc.jpg")

        assert reference == "poster_42.jpg"
        assert (posters.poster_dir / reference).read_bytes() == b"\xff\xd8\xff\xe0fake-jpeg"
        mock_client.download_image.assert_awaited_once_with("/abc.jpg")

    @pytest.mark.asyncio
    async def test_second_call_makes_no_network_request(
        self, posters: PosterCache, mock_client: AsyncMock
    ) -> None:
        first = await posters.ensure_cached(42, "/abc.jpg")
        second = await posters.ensure_cached(42, "/abc.jpg")

        assert first == second
        assert mock_client.download_image.await_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_requests_download_once(
        self, posters: PosterCache, mock_client: AsyncMock
    ) -> None:
        async def slow_download(image_path: str) -> bytes:
            await asyncio.sleep(0.01)
            return b"jpeg"

        mock_client.download_image.side_effect = slow_download

        references = await asyncio.gather(
            *(posters.ensure_cached(42, "/abc.jpg") for _ in range(5))
        )

        assert set(references) == {"poster_42.jpg"}
        assert mock_client.download_image.await_count == 1
        assert posters._locks == {}

    @pytest.mark.asyncio
    async def test_distinct_ids_download_separately(
        self, posters: PosterCache, mock_client: AsyncMock
    ) -> None:
        await asyncio.gather(posters.ensure_cached(1, "/a.jpg"), posters.ensure_cached(2, "/b.jpg"))

        assert posters.is_cached(1)
        assert posters.is_cached(2)
        assert mock_client.download_image.await_count == 2

    @pytest.mark.asyncio
    async def test_existing_file_is_reused_without_image_path(
        self, posters: PosterCache, mock_client: AsyncMock
    ) -> None:
        """Le cache est permanent : un fichier present suffit."""
        posters.poster_dir.mkdir(parents=True)
        posters.path_for(7).write_bytes(b"old")

        assert await posters.ensure_cached(7, None) == "poster_7.jpg"
        mock_client.download_image.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_poster_path_raises(self, posters: PosterCache) -> None:
        with pytest.raises(DownloadFailed, match="no poster"):
            await posters.ensure_cached(42, None)

    @pytest.mark.asyncio
    async def test_network_error_raises_download_failed(
        self, posters: PosterCache, mock_client: AsyncMock
    ) -> None:
        mock_client.download_image.side_effect = Unreachable("timeout")

        with pytest.raises(DownloadFailed) as exc_info:
            await posters.ensure_cached(42, "/abc.jpg")

        assert exc_info.value.movie_id == 42
        assert not posters.is_cached(42)

    @pytest.mark.asyncio
    async def test_empty_body_raises_download_failed(
        self, posters: PosterCache, mock_client: AsyncMock
    ) -> None:
        mock_client.download_image.return_value = b""

        with pytest.raises(DownloadFailed, match="empty"):
            await posters.ensure_cached(42, "/abc.jpg")
        assert not posters.is_cached(42)

    @pytest.mark.asyncio
    async def test_lock_is_released_after_failure(
        self, posters: PosterCache, mock_client: AsyncMock
    ) -> None:
        mock_client.download_image.side_effect = Unreachable("timeout")

        results = await asyncio.gather(
            *(posters.ensure_cached(42, "/abc.jpg") for _ in range(3)),
            return_exceptions=True,
        )

        assert all(isinstance(r, DownloadFailed) for r in results)
        assert posters._locks == {}

    @pytest.mark.asyncio
    async def test_locks_do_not_accumulate_across_movies(
        self, posters: PosterCache
    ) -> None:
        await asyncio.gather(*(posters.ensure_cached(n, f"/{n}.jpg") for n in range(50)))

        assert all(posters.is_cached(n) for n in range(50))
        assert posters._locks == {}
