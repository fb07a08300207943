"""
Couche infrastructure (adaptateurs).

- api/ : Client TMDB, politique de retry, cache des recherches
- persistence/ : Catalogue JSON et cache d'affiches sur disque
- cli/ : Interface en ligne de commande (couche de presentation)
"""
