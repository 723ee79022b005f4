"""
ORM models. Importing this package registers every table on Base.metadata.
"""

from pokedex.models.catalog import Move, Nature, Species, Type, TypeEffectiveness
from pokedex.models.pokemon import Pokemon, PokemonBaseStats, PokemonMove, PokemonType

__all__ = [
    "Move",
    "Nature",
    "Pokemon",
    "PokemonBaseStats",
    "PokemonMove",
    "PokemonType",
    "Species",
    "Type",
    "TypeEffectiveness",
]
