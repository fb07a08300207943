"""
Couche domaine (core).

Contient les entites metier, les ports (interfaces abstraites) et la
taxonomie d'erreurs. Cette couche n'a AUCUNE dependance vers
l'infrastructure (HTTP, disque, CLI).

Sous-packages :
- entities/ : Entites metier (CatalogEntry, CastMember, WatchLogEntry)
- ports/ : Interfaces abstraites definissant les contrats pour les adaptateurs
- errors : Exceptions du domaine
"""
