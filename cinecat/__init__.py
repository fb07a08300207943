"""
Cinecat - Catalogue de films local enrichi par TMDB.

Ce package scanne des repertoires de videos, recupere les metadonnees
depuis The Movie Database et maintient un catalogue persistant que l'on
peut filtrer et trier.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entites, ports, erreurs)
- services/ : Couche application (scan, synchronisation, vues, resolution)
- adapters/ : Couche infrastructure (CLI, client API, stockage JSON, cache)
"""

__version__ = "0.1.0"
