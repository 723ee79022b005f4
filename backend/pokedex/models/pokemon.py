"""
Pokédex API: Pokémon Models
============================

What:  ORM models for the `pokemon` table and the three tables that hang off
       it: base stats (one-to-one), moves and types (junction tables).

Write-path invariants (enforced by PokemonService, not by constraints):
    - every Pokémon row has exactly one pokemon_base_stats row
    - moves/types are replaced wholesale (delete-then-insert) on update
    - on delete: pokemon_moves → pokemon_types → pokemon_base_stats → pokemon
"""

from typing import Optional

from sqlalchemy import Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from pokedex.database import Base


class Pokemon(Base):
    """
    A single Pokémon entry.

    image_url holds the public object-store URL of the uploaded artwork;
    it is only overwritten when a new image is uploaded.
    """

    __tablename__ = "pokemon"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    species_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("species.id"), nullable=True
    )
    height: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    weight: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    def __repr__(self) -> str:
        return f"<Pokemon(id={self.id}, name='{self.name}')>"


class PokemonBaseStats(Base):
    """The six base stats, keyed one-to-one by pokemon_id."""

    __tablename__ = "pokemon_base_stats"

    pokemon_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pokemon.id"), primary_key=True
    )
    hp: Mapped[int] = mapped_column(Integer, nullable=False)
    attack: Mapped[int] = mapped_column(Integer, nullable=False)
    defense: Mapped[int] = mapped_column(Integer, nullable=False)
    special_attack: Mapped[int] = mapped_column(Integer, nullable=False)
    special_defense: Mapped[int] = mapped_column(Integer, nullable=False)
    speed: Mapped[int] = mapped_column(Integer, nullable=False)


class PokemonMove(Base):
    """Junction row: Pokémon ↔ Move."""

    __tablename__ = "pokemon_moves"

    pokemon_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pokemon.id"), primary_key=True
    )
    move_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("moves.id"), primary_key=True
    )

    __table_args__ = (Index("idx_pokemon_moves_move_id", "move_id"),)


class PokemonType(Base):
    """Junction row: Pokémon ↔ Type."""

    __tablename__ = "pokemon_types"

    pokemon_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pokemon.id"), primary_key=True
    )
    type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("types.id"), primary_key=True
    )

    __table_args__ = (Index("idx_pokemon_types_type_id", "type_id"),)
