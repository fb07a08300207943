"""
Tests for TMDBClient - TMDB API client implementation.

Uses respx to mock httpx calls and verifies:
- Search returns at most 20 CandidateMatch in relevance order
- Cache is checked BEFORE API calls (cache-first pattern)
- Details fall back to "Unknown" director and genre
- External ids and images are fetched from the right endpoints
- HTTP errors are mapped onto the application error taxonomy
"""

from unittest.mock import AsyncMock

import httpx
import pytest
import respx

from cinecat.adapters.api.cache import APICache
from cinecat.adapters.api.tmdb_client import TMDBClient
from cinecat.core.errors import Malformed, NotFound, RateLimited, Unreachable
from cinecat.core.ports.api_clients import CandidateMatch, IMetadataClient, MovieDetails
from tests.fixtures.tmdb_responses import (
    TMDB_EXTERNAL_IDS_EMPTY,
    TMDB_EXTERNAL_IDS_RESPONSE,
    TMDB_MOVIE_DETAILS_MINIMAL,
    TMDB_MOVIE_DETAILS_RESPONSE,
    TMDB_NOT_FOUND_RESPONSE,
    TMDB_SEARCH_EMPTY_RESPONSE,
    TMDB_SEARCH_RESPONSE,
)

SEARCH_URL = "https://api.themoviedb.org/3/search/movie"
DETAILS_URL = "https://api.themoviedb.org/3/movie/1091"


@pytest.fixture
def mock_cache() -> AsyncMock:
    """Mock APICache for testing."""
    cache = AsyncMock(spec=APICache)
    cache.get.return_value = None  # Cache miss by default
    return cache


@pytest.fixture
def tmdb_client(mock_cache: AsyncMock) -> TMDBClient:
    """TMDBClient instance with mocked cache and a single attempt (no retry delay)."""
    return TMDBClient(api_key="test_api_key", cache=mock_cache, max_attempts=1)


class TestTMDBClientInterface:
    """Test TMDBClient implements IMetadataClient correctly."""

    def test_implements_interface(self):
        assert isinstance(TMDBClient(api_key="k"), IMetadataClient)


class TestTMDBAuthentication:
    """v3 keys go in the query string, v4 tokens in the Authorization header."""

    @pytest.mark.asyncio
    async def test_v3_key_sent_as_query_param(self, respx_mock: respx.Router):
        route = respx_mock.get(SEARCH_URL).mock(
            return_value=httpx.Response(200, json=TMDB_SEARCH_EMPTY_RESPONSE)
        )
        client = TMDBClient(api_key="a" * 32)
        try:
            await client.search("Alien")
        finally:
            await client.close()

        request = route.calls.last.request
        assert request.url.params["api_key"] == "a" * 32
        assert "Authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_v4_token_sent_as_bearer(self, respx_mock: respx.Router):
        token = "eyJ" + "x" * 200
        route = respx_mock.get(SEARCH_URL).mock(
            return_value=httpx.Response(200, json=TMDB_SEARCH_EMPTY_RESPONSE)
        )
        client = TMDBClient(api_key=token)
        try:
            await client.search("Alien")
        finally:
            await client.close()

        request = route.calls.last.request
        assert request.headers["Authorization"] == f"Bearer {token}"
        assert "api_key" not in request.url.params


class TestTMDBSearch:
    """Tests for TMDBClient.search() method."""

    @pytest.mark.asyncio
    async def test_search_returns_candidates_in_relevance_order(
        self, tmdb_client: TMDBClient, respx_mock: respx.Router
    ):
        """search() keeps the service order, including both remakes."""
        route = respx_mock.get(SEARCH_URL).mock(
            return_value=httpx.Response(200, json=TMDB_SEARCH_RESPONSE)
        )

        results = await tmdb_client.search("The Thing")

        assert [r.id for r in results] == [1091, 60935, 987654]
        assert all(isinstance(r, CandidateMatch) for r in results)
        assert results[0] == CandidateMatch(
            id=1091, title="The Thing", release_year=1982, rating_score=8.1
        )
        # Date vide -> annee inconnue
        assert results[2].release_year is None
        assert results[2].rating_score == 0.0

        params = route.calls.last.request.url.params
        assert params["query"] == "The Thing"
        assert params["language"] == "en-US"
        assert params["include_adult"] == "false"

    @pytest.mark.asyncio
    async def test_search_caps_results_at_20(
        self, tmdb_client: TMDBClient, respx_mock: respx.Router
    ):
        many = {
            "results": [
                {"id": i, "title": f"Movie {i}", "release_date": "2001-01-01", "vote_average": 5}
                for i in range(1, 31)
            ]
        }
        respx_mock.get(SEARCH_URL).mock(return_value=httpx.Response(200, json=many))

        results = await tmdb_client.search("Movie")

        assert len(results) == 20
        assert results[-1].id == 20

    @pytest.mark.asyncio
    async def test_search_empty_results(
        self, tmdb_client: TMDBClient, respx_mock: respx.Router
    ):
        respx_mock.get(SEARCH_URL).mock(
            return_value=httpx.Response(200, json=TMDB_SEARCH_EMPTY_RESPONSE)
        )

        assert await tmdb_client.search("zzzzzz") == []

    @pytest.mark.asyncio
    @pytest.mark.respx(assert_all_called=False)
    async def test_blank_title_makes_no_request(
        self, tmdb_client: TMDBClient, respx_mock: respx.Router
    ):
        route = respx_mock.get(SEARCH_URL)

        assert await tmdb_client.search("   ") == []
        assert route.call_count == 0

    @pytest.mark.asyncio
    @pytest.mark.respx(assert_all_called=False)
    async def test_search_uses_cache_first(
        self, tmdb_client: TMDBClient, mock_cache: AsyncMock, respx_mock: respx.Router
    ):
        """A cache hit returns without any HTTP request."""
        cached = [CandidateMatch(id=1091, title="The Thing", release_year=1982, rating_score=8.1)]
        mock_cache.get.return_value = cached
        route = respx_mock.get(SEARCH_URL)

        results = await tmdb_client.search("The  Thing")

        assert results == cached
        assert route.call_count == 0
        mock_cache.get.assert_awaited_once_with("tmdb:search:en-US:the thing")

    @pytest.mark.asyncio
    async def test_search_stores_results_in_cache(
        self, tmdb_client: TMDBClient, mock_cache: AsyncMock, respx_mock: respx.Router
    ):
        respx_mock.get(SEARCH_URL).mock(
            return_value=httpx.Response(200, json=TMDB_SEARCH_RESPONSE)
        )

        results = await tmdb_client.search("The Thing")

        mock_cache.set_search.assert_awaited_once_with("tmdb:search:en-US:the thing", results)

    @pytest.mark.asyncio
    async def test_search_without_cache(self, respx_mock: respx.Router):
        respx_mock.get(SEARCH_URL).mock(
            return_value=httpx.Response(200, json=TMDB_SEARCH_RESPONSE)
        )
        client = TMDBClient(api_key="k", cache=None)
        try:
            results = await client.search("The Thing")
        finally:
            await client.close()

        assert len(results) == 3

    @pytest.mark.asyncio
    async def test_search_result_without_id_is_malformed(
        self, tmdb_client: TMDBClient, respx_mock: respx.Router
    ):
        respx_mock.get(SEARCH_URL).mock(
            return_value=httpx.Response(200, json={"results": [{"title": "No id"}]})
        )

        with pytest.raises(Malformed):
            await tmdb_client.search("No id")


class TestTMDBDetails:
    """Tests for TMDBClient.fetch_details() method."""

    @pytest.mark.asyncio
    async def test_fetch_details_parses_full_response(
        self, tmdb_client: TMDBClient, respx_mock: respx.Router
    ):
        route = respx_mock.get(DETAILS_URL).mock(
            return_value=httpx.Response(200, json=TMDB_MOVIE_DETAILS_RESPONSE)
        )

        details = await tmdb_client.fetch_details(1091)

        assert isinstance(details, MovieDetails)
        assert details.id == 1091
        assert details.title == "The Thing"
        assert details.release_year == 1982
        assert details.director == "John Carpenter"
        assert details.genres == ("Horror", "Mystery", "Science Fiction")
        assert details.rating_score == 8.1
        assert details.runtime_minutes == 109
        assert details.poster_path == "/tzGY49kseSE9QAKk47uuDGwnSCu.jpg"
        assert details.poster_url == (
            "https://image.tmdb.org/t/p/original/tzGY49kseSE9QAKk47uuDGwnSCu.jpg"
        )
        assert route.calls.last.request.url.params["append_to_response"] == "credits"

    @pytest.mark.asyncio
    async def test_fetch_details_keeps_five_cast_members(
        self, tmdb_client: TMDBClient, respx_mock: respx.Router
    ):
        respx_mock.get(DETAILS_URL).mock(
            return_value=httpx.Response(200, json=TMDB_MOVIE_DETAILS_RESPONSE)
        )

        details = await tmdb_client.fetch_details(1091)

        assert [m.name for m in details.cast] == [
            "Kurt Russell", "Wilford Brimley", "T.K. Carter", "David Clennon", "Keith David",
        ]
        assert details.cast[0].character == "MacReady"
        assert details.cast[0].photo_reference == (
            "https://image.tmdb.org/t/p/w185/tUaVfXAKMdH8tXF0wnxF6S2ZkPz.jpg"
        )
        assert details.cast[2].photo_reference == ""

    @pytest.mark.asyncio
    async def test_fetch_details_defaults_for_missing_fields(
        self, tmdb_client: TMDBClient, respx_mock: respx.Router
    ):
        """No director, no genres, no runtime, no poster."""
        respx_mock.get("https://api.themoviedb.org/3/movie/424242").mock(
            return_value=httpx.Response(200, json=TMDB_MOVIE_DETAILS_MINIMAL)
        )

        details = await tmdb_client.fetch_details(424242)

        assert details.director == "Unknown"
        assert details.genres == ("Unknown",)
        assert details.runtime_minutes is None
        assert details.release_year is None
        assert details.poster_path is None
        assert details.poster_url is None
        assert details.overview == ""
        assert details.cast == ()

    @pytest.mark.asyncio
    async def test_fetch_details_404_raises_not_found(
        self, tmdb_client: TMDBClient, respx_mock: respx.Router
    ):
        respx_mock.get("https://api.themoviedb.org/3/movie/999999").mock(
            return_value=httpx.Response(404, json=TMDB_NOT_FOUND_RESPONSE)
        )

        with pytest.raises(NotFound) as exc_info:
            await tmdb_client.fetch_details(999999)

        assert exc_info.value.kind == "movie"
        assert exc_info.value.identifier == 999999

    @pytest.mark.asyncio
    async def test_fetch_details_invalid_json_is_malformed(
        self, tmdb_client: TMDBClient, respx_mock: respx.Router
    ):
        respx_mock.get(DETAILS_URL).mock(
            return_value=httpx.Response(200, text="<html>oops</html>")
        )

        with pytest.raises(Malformed):
            await tmdb_client.fetch_details(1091)

    @pytest.mark.asyncio
    async def test_fetch_details_non_object_is_malformed(
        self, tmdb_client: TMDBClient, respx_mock: respx.Router
    ):
        respx_mock.get(DETAILS_URL).mock(return_value=httpx.Response(200, json=[1, 2]))

        with pytest.raises(Malformed):
            await tmdb_client.fetch_details(1091)

    @pytest.mark.asyncio
    async def test_details_are_never_cached(
        self, tmdb_client: TMDBClient, mock_cache: AsyncMock, respx_mock: respx.Router
    ):
        route = respx_mock.get(DETAILS_URL).mock(
            return_value=httpx.Response(200, json=TMDB_MOVIE_DETAILS_RESPONSE)
        )

        await tmdb_client.fetch_details(1091)
        await tmdb_client.fetch_details(1091)

        assert route.call_count == 2
        mock_cache.get.assert_not_awaited()
        mock_cache.set_search.assert_not_awaited()


class TestTMDBErrors:
    """HTTP failures are mapped onto the error taxonomy."""

    @pytest.mark.asyncio
    async def test_server_error_is_unreachable(
        self, tmdb_client: TMDBClient, respx_mock: respx.Router
    ):
        respx_mock.get(SEARCH_URL).mock(return_value=httpx.Response(503))

        with pytest.raises(Unreachable):
            await tmdb_client.search("Alien")

    @pytest.mark.asyncio
    async def test_connect_error_is_unreachable(
        self, tmdb_client: TMDBClient, respx_mock: respx.Router
    ):
        respx_mock.get(SEARCH_URL).mock(side_effect=httpx.ConnectError("no route"))

        with pytest.raises(Unreachable):
            await tmdb_client.search("Alien")

    @pytest.mark.asyncio
    async def test_unauthorized_is_unreachable(
        self, tmdb_client: TMDBClient, respx_mock: respx.Router
    ):
        respx_mock.get(SEARCH_URL).mock(return_value=httpx.Response(401))

        with pytest.raises(Unreachable, match="401"):
            await tmdb_client.search("Alien")

    @pytest.mark.asyncio
    async def test_persistent_429_is_rate_limited(
        self, tmdb_client: TMDBClient, respx_mock: respx.Router
    ):
        respx_mock.get(SEARCH_URL).mock(
            return_value=httpx.Response(429, headers={"Retry-After": "10"})
        )

        with pytest.raises(RateLimited) as exc_info:
            await tmdb_client.search("Alien")

        assert exc_info.value.retry_after == 10


class TestTMDBExternalReference:
    """Tests for TMDBClient.fetch_external_reference() method."""

    @pytest.mark.asyncio
    async def test_returns_imdb_id(self, tmdb_client: TMDBClient, respx_mock: respx.Router):
        respx_mock.get("https://api.themoviedb.org/3/movie/1091/external_ids").mock(
            return_value=httpx.Response(200, json=TMDB_EXTERNAL_IDS_RESPONSE)
        )

        assert await tmdb_client.fetch_external_reference(1091) == "tt0084787"

    @pytest.mark.asyncio
    async def test_missing_imdb_id_returns_none(
        self, tmdb_client: TMDBClient, respx_mock: respx.Router
    ):
        respx_mock.get("https://api.themoviedb.org/3/movie/424242/external_ids").mock(
            return_value=httpx.Response(200, json=TMDB_EXTERNAL_IDS_EMPTY)
        )

        assert await tmdb_client.fetch_external_reference(424242) is None

    @pytest.mark.asyncio
    async def test_unknown_movie_returns_none(
        self, tmdb_client: TMDBClient, respx_mock: respx.Router
    ):
        respx_mock.get("https://api.themoviedb.org/3/movie/5/external_ids").mock(
            return_value=httpx.Response(404, json=TMDB_NOT_FOUND_RESPONSE)
        )

        assert await tmdb_client.fetch_external_reference(5) is None


class TestTMDBImages:
    """Tests for TMDBClient.download_image() method."""

    @pytest.mark.asyncio
    async def test_download_image_returns_bytes(
        self, tmdb_client: TMDBClient, respx_mock: respx.Router
    ):
        route = respx_mock.get("https://image.tmdb.org/t/p/original/abc.jpg").mock(
            return_value=httpx.Response(200, content=b"\xff\xd8jpeg")
        )

        data = await tmdb_client.download_image("/abc.jpg")

        assert data == b"\xff\xd8jpeg"
        # La cle API n'est jamais envoyee au CDN
        assert "api_key" not in route.calls.last.request.url.params

    @pytest.mark.asyncio
    async def test_download_image_404_is_unreachable(
        self, tmdb_client: TMDBClient, respx_mock: respx.Router
    ):
        respx_mock.get("https://image.tmdb.org/t/p/original/missing.jpg").mock(
            return_value=httpx.Response(404)
        )

        with pytest.raises(Unreachable):
            await tmdb_client.download_image("/missing.jpg")
