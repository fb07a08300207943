"""
Tests for DisambiguationResolver: candidates, apply, refresh, manual add.
"""

from datetime import date, datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from cinecat.adapters.persistence.json_catalog_store import JsonCatalogStore
from cinecat.adapters.persistence.poster_cache import PosterCache
from cinecat.core.entities.catalog import WatchLogEntry
from cinecat.core.errors import DuplicateEntry, NoMatch, NotFound, Unreachable
from cinecat.core.ports.api_clients import CandidateMatch
from cinecat.services.entry_assembler import EntryAssembler
from cinecat.services.resolver import DisambiguationResolver
from tests.fixtures.entries import make_details, make_entry

THING_CANDIDATES = [
    CandidateMatch(id=1091, title="The Thing", release_year=1982, rating_score=8.1),
    CandidateMatch(id=60935, title="The Thing", release_year=2011, rating_score=6.3),
]


@pytest.fixture
def resolver(store: JsonCatalogStore, mock_client: AsyncMock, tmp_path: Path) -> DisambiguationResolver:
    assembler = EntryAssembler(mock_client, PosterCache(tmp_path / "posters", mock_client))
    return DisambiguationResolver(store, mock_client, assembler)


class TestListCandidates:
    @pytest.mark.asyncio
    async def test_returns_service_order_unfiltered(
        self, resolver: DisambiguationResolver, mock_client: AsyncMock
    ) -> None:
        mock_client.search.side_effect = None
        mock_client.search.return_value = THING_CANDIDATES

        assert await resolver.list_candidates("The Thing") == THING_CANDIDATES

    @pytest.mark.asyncio
    async def test_errors_propagate(
        self, resolver: DisambiguationResolver, mock_client: AsyncMock
    ) -> None:
        mock_client.search.side_effect = Unreachable("offline")

        with pytest.raises(Unreachable):
            await resolver.list_candidates("The Thing")


class TestApplyCandidate:
    @pytest.mark.asyncio
    async def test_preserves_file_added_at_and_watch_log(
        self, resolver: DisambiguationResolver, store: JsonCatalogStore
    ) -> None:
        added_at = datetime(2023, 3, 4, tzinfo=timezone.utc)
        log = (WatchLogEntry(date(2023, 4, 1), 6.0),)
        store.insert(make_entry(
            7, tmdb_id=60935, title="The Thing", release_year=2011,
            file_path=Path("/films/The.Thing.mkv"), added_at=added_at, watch_log=log,
        ))

        updated = await resolver.apply_candidate(7, 1091)

        assert updated.id == 7
        assert updated.tmdb_id == 1091
        assert updated.title == "Movie 1091"
        assert updated.file_path == Path("/films/The.Thing.mkv")
        assert updated.added_at == added_at
        assert updated.watch_log == log
        assert store.get(7) == updated
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_unknown_entry_raises_not_found(self, resolver: DisambiguationResolver) -> None:
        with pytest.raises(NotFound) as exc_info:
            await resolver.apply_candidate(5, 1091)
        assert exc_info.value.kind == "entry"

    @pytest.mark.asyncio
    async def test_unknown_candidate_leaves_entry_unchanged(
        self, resolver: DisambiguationResolver, store: JsonCatalogStore, mock_client: AsyncMock
    ) -> None:
        original = make_entry(60935)
        store.insert(original)
        mock_client.fetch_details.side_effect = NotFound("movie", 999)

        with pytest.raises(NotFound):
            await resolver.apply_candidate(60935, 999)
        assert store.get(60935) == original

    @pytest.mark.asyncio
    async def test_two_entries_may_describe_the_same_movie(
        self, resolver: DisambiguationResolver, store: JsonCatalogStore
    ) -> None:
        store.insert(make_entry(1, tmdb_id=1091, file_path=Path("/films/a/thing.mkv")))
        store.insert(make_entry(2, tmdb_id=60935, file_path=Path("/films/b/thing.mkv")))

        await resolver.apply_candidate(2, 1091)

        assert [e.id for e in store.find_by_tmdb_id(1091)] == [1, 2]
        assert store.get(2).file_path == Path("/films/b/thing.mkv")


class TestRefresh:
    @pytest.mark.asyncio
    async def test_refresh_reloads_metadata(
        self, resolver: DisambiguationResolver, store: JsonCatalogStore, mock_client: AsyncMock
    ) -> None:
        store.insert(make_entry(1091, title="Old title", file_path=Path("/films/t.mkv")))

        async def details(movie_id: int):
            return make_details(movie_id, title="The Thing", rating_score=8.1)

        mock_client.fetch_details.side_effect = details

        refreshed = await resolver.refresh(1091)

        assert refreshed.title == "The Thing"
        assert refreshed.rating_score == 8.1
        assert refreshed.file_path == Path("/films/t.mkv")
        assert refreshed.poster_reference == "poster_1091.jpg"

    @pytest.mark.asyncio
    async def test_hand_written_entry_is_matched_by_title(
        self, resolver: DisambiguationResolver, store: JsonCatalogStore, mock_client: AsyncMock
    ) -> None:
        store.insert(make_entry(3, tmdb_id=None, title="The Thing"))
        mock_client.search.side_effect = None
        mock_client.search.return_value = THING_CANDIDATES

        refreshed = await resolver.refresh(3)

        assert refreshed.id == 3
        assert refreshed.tmdb_id == 1091
        assert mock_client.fetch_details.await_count == 1

    @pytest.mark.asyncio
    async def test_unknown_entry_raises_not_found(self, resolver: DisambiguationResolver) -> None:
        with pytest.raises(NotFound):
            await resolver.refresh(42)


class TestAddManual:
    @pytest.mark.asyncio
    async def test_wishlist_entry_without_file(
        self, resolver: DisambiguationResolver, store: JsonCatalogStore, mock_client: AsyncMock
    ) -> None:
        mock_client.search.side_effect = None
        mock_client.search.return_value = THING_CANDIDATES

        entry = await resolver.add_manual("The Thing")

        assert entry.id == 1
        assert entry.tmdb_id == 1091
        assert entry.file_path is None
        assert store.get(1) == entry

    @pytest.mark.asyncio
    async def test_chosen_candidate_with_file(
        self, resolver: DisambiguationResolver, store: JsonCatalogStore, mock_client: AsyncMock, tmp_path: Path
    ) -> None:
        mock_client.search.side_effect = None
        mock_client.search.return_value = THING_CANDIDATES
        video = tmp_path / "thing.mkv"
        video.touch()

        entry = await resolver.add_manual("The Thing", candidate_id=60935, file_path=video)

        assert entry.tmdb_id == 60935
        assert entry.file_path == video
        assert store.find_by_path(video) == entry

    @pytest.mark.asyncio
    async def test_candidate_not_in_results(
        self, resolver: DisambiguationResolver, mock_client: AsyncMock
    ) -> None:
        mock_client.search.side_effect = None
        mock_client.search.return_value = THING_CANDIDATES

        with pytest.raises(NotFound) as exc_info:
            await resolver.add_manual("The Thing", candidate_id=1)
        assert exc_info.value.kind == "movie"

    @pytest.mark.asyncio
    async def test_no_results_raises_no_match(
        self, resolver: DisambiguationResolver, mock_client: AsyncMock
    ) -> None:
        mock_client.search.side_effect = None
        mock_client.search.return_value = []

        with pytest.raises(NoMatch):
            await resolver.add_manual("zzzz")

    @pytest.mark.asyncio
    async def test_second_copy_of_a_cataloged_movie_is_added(
        self, resolver: DisambiguationResolver, store: JsonCatalogStore, mock_client: AsyncMock
    ) -> None:
        store.insert(make_entry(1, tmdb_id=1091))
        mock_client.search.side_effect = None
        mock_client.search.return_value = THING_CANDIDATES

        entry = await resolver.add_manual("The Thing")

        assert entry.id == 2
        assert [e.id for e in store.find_by_tmdb_id(1091)] == [1, 2]

    @pytest.mark.asyncio
    async def test_file_already_associated_raises_duplicate(
        self, resolver: DisambiguationResolver, store: JsonCatalogStore, mock_client: AsyncMock, tmp_path: Path
    ) -> None:
        video = tmp_path / "thing.mkv"
        video.touch()
        store.insert(make_entry(1, file_path=video))
        mock_client.search.side_effect = None
        mock_client.search.return_value = THING_CANDIDATES

        with pytest.raises(DuplicateEntry):
            await resolver.add_manual("The Thing", file_path=video)
        assert len(store) == 1
