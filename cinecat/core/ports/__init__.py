"""
Ports (interfaces abstraites) definissant les contrats pour les adaptateurs.

Port client API : Contrat pour le service de metadonnees distant
- IMetadataClient : Recherche, details, id externe, images
- CandidateMatch : Candidat retourne par une recherche
- MovieDetails : Fiche complete d'un film

Port stockage : Contrat pour le catalogue persistant
- ICatalogStore : Mutations et lectures du catalogue
"""

from cinecat.core.ports.api_clients import (
    CandidateMatch,
    IMetadataClient,
    MovieDetails,
)
from cinecat.core.ports.catalog_store import ICatalogStore

__all__ = [
    # Client API
    "IMetadataClient",
    "CandidateMatch",
    "MovieDetails",
    # Stockage
    "ICatalogStore",
]
