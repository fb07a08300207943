"""
Interface en ligne de commande (couche de presentation).

Les commandes appellent les services et projettent leurs resultats avec
Rich ; aucune logique metier ne vit ici.
"""
