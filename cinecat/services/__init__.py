"""
Couche application (cas d'utilisation).

- scanner : enumeration des fichiers video des repertoires configures
- entry_assembler : construction d'une entree depuis TMDB
- sync : coordinateur de synchronisation (pool de workers borne)
- catalog_view : projections filtrees et triees
- resolver : desambiguisation, rafraichissement, ajout manuel
- startup : sequence de demarrage (scan automatique)
"""
