"""
Fixtures pytest partagees pour les tests Cinecat.

Ce module contient les fixtures communes utilisees dans les tests:
- Catalogue JSON sur repertoire temporaire
- Mock de IMetadataClient
- Settings de test avec chemins temporaires
"""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from cinecat.adapters.persistence.json_catalog_store import JsonCatalogStore
from cinecat.config import Settings
from cinecat.core.ports.api_clients import CandidateMatch, IMetadataClient, MovieDetails
from tests.fixtures.entries import make_details


def title_to_id(title: str) -> int:
    """Id TMDB factice et stable derive d'un titre."""
    return 100_000 + sum(ord(c) * (i + 1) for i, c in enumerate(title))


@pytest.fixture
def catalog_file(tmp_path: Path) -> Path:
    return tmp_path / "data" / "catalog.json"


@pytest.fixture
def store(catalog_file: Path) -> JsonCatalogStore:
    """Catalogue JSON vide, charge, sur un repertoire temporaire."""
    catalog = JsonCatalogStore(catalog_file)
    catalog.load()
    return catalog


@pytest.fixture
def mock_client() -> AsyncMock:
    """
    Mock de IMetadataClient pour les tests.

    Par defaut : la recherche retourne un candidat dont l'id est derive du
    titre, les details sont construits a partir de l'id et les images
    sont de petits JPEG factices.
    Configurer le mock dans chaque test pour des comportements specifiques.
    """
    client = AsyncMock(spec=IMetadataClient)

    async def default_search(title: str) -> list[CandidateMatch]:
        return [CandidateMatch(id=title_to_id(title), title=title, release_year=2000, rating_score=7.0)]

    async def default_details(movie_id: int) -> MovieDetails:
        return make_details(movie_id)

    client.search.side_effect = default_search
    client.fetch_details.side_effect = default_details
    client.fetch_external_reference.return_value = "tt0000001"
    client.download_image.return_value = b"\xff\xd8\xff\xe0fake-jpeg"
    return client


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings de test avec chemins temporaires.

    Utilise tmp_path de pytest pour isoler la configuration, les donnees
    et les logs de chaque test.
    """
    return Settings(
        config_dir=tmp_path / "config",
        data_dir=tmp_path / "data",
        log_file=tmp_path / "logs" / "cinecat.log",
        api_key=None,
    )
