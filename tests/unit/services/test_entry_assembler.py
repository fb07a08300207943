"""
Tests for EntryAssembler.
"""

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from cinecat.adapters.persistence.poster_cache import PosterCache
from cinecat.core.entities.catalog import CastMember
from cinecat.core.errors import NoMatch, NotFound
from cinecat.services.entry_assembler import EntryAssembler
from tests.fixtures.entries import make_details


@pytest.fixture
def assembler(mock_client: AsyncMock, tmp_path: Path) -> EntryAssembler:
    return EntryAssembler(mock_client, PosterCache(tmp_path / "posters", mock_client))


class TestAssemble:
    @pytest.mark.asyncio
    async def test_combines_details_reference_and_poster(
        self, assembler: EntryAssembler, mock_client: AsyncMock
    ) -> None:
        cast = (CastMember("Kurt Russell", "MacReady"),)

        async def details(movie_id: int):
            return make_details(movie_id, title="The Thing", release_year=1982,
                                director="John Carpenter", cast=cast)

        mock_client.fetch_details.side_effect = details
        mock_client.fetch_external_reference.return_value = "tt0084787"

        entry = await assembler.assemble(1091, file_path=Path("/films/thing.mkv"))

        assert entry.id is None
        assert entry.tmdb_id == 1091
        assert entry.title == "The Thing"
        assert entry.director == "John Carpenter"
        assert entry.cast_members == cast
        assert entry.external_reference_id == "tt0084787"
        assert entry.poster_reference == "poster_1091.jpg"
        assert entry.poster_url.endswith("/poster1091.jpg")
        assert entry.description == "A movie."
        assert entry.file_path == Path("/films/thing.mkv")

    @pytest.mark.asyncio
    async def test_keeps_given_added_at(self, assembler: EntryAssembler) -> None:
        added_at = datetime(2022, 2, 2, tzinfo=timezone.utc)

        entry = await assembler.assemble(1, added_at=added_at)

        assert entry.added_at == added_at

    @pytest.mark.asyncio
    async def test_no_poster_is_not_an_error(
        self, assembler: EntryAssembler, mock_client: AsyncMock
    ) -> None:
        async def details(movie_id: int):
            return make_details(movie_id, poster_path=None, poster_url=None)

        mock_client.fetch_details.side_effect = details

        entry = await assembler.assemble(7)

        assert entry.poster_reference is None
        mock_client.download_image.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_details_errors_propagate(
        self, assembler: EntryAssembler, mock_client: AsyncMock
    ) -> None:
        mock_client.fetch_details.side_effect = NotFound("movie", 3)

        with pytest.raises(NotFound):
            await assembler.assemble(3)


class TestAssembleFromTitle:
    @pytest.mark.asyncio
    async def test_uses_first_candidate(
        self, assembler: EntryAssembler, mock_client: AsyncMock
    ) -> None:
        entry = await assembler.assemble_from_title("Heat")

        first = (await mock_client.search("Heat"))[0]
        assert entry.tmdb_id == first.id

    @pytest.mark.asyncio
    async def test_no_candidate_raises_no_match(
        self, assembler: EntryAssembler, mock_client: AsyncMock
    ) -> None:
        mock_client.search.side_effect = None
        mock_client.search.return_value = []

        with pytest.raises(NoMatch):
            await assembler.assemble_from_title("zzzz")
