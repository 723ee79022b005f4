"""
Pokédex API: Reference Data Models
===================================

What:  ORM models for the lookup tables Pokémon point at: species, types,
       type-effectiveness edges, moves and natures.
Who:   Used by the catalog services for CRUD and by PokemonService for the
       aggregation joins; read by Alembic for migrations.

None of the foreign keys declare ON DELETE CASCADE. Services delete child
rows explicitly, in order, inside one transaction.
"""

from typing import Optional

from sqlalchemy import Float, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from pokedex.database import Base


class Species(Base):
    """A Pokémon species ("Seed Pokémon"). One species → many Pokémon."""

    __tablename__ = "species"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    def __repr__(self) -> str:
        return f"<Species(id={self.id}, name='{self.name}')>"


class Type(Base):
    """An elemental type such as Fire or Water, with a display colour."""

    __tablename__ = "types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    color: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    def __repr__(self) -> str:
        return f"<Type(id={self.id}, name='{self.name}')>"


class TypeEffectiveness(Base):
    """
    Directed, weighted edge between two types.

    (attacking_type_id → defending_type_id, effectiveness) reads as
    "moves of the attacking type deal `effectiveness`× damage to the
    defending type". The reverse direction is an independent row.
    """

    __tablename__ = "type_effectiveness"

    attacking_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("types.id"), primary_key=True
    )
    defending_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("types.id"), primary_key=True
    )
    effectiveness: Mapped[float] = mapped_column(Float, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<TypeEffectiveness({self.attacking_type_id}→{self.defending_type_id}, "
            f"x{self.effectiveness})>"
        )


class Move(Base):
    """
    A move a Pokémon can learn.

    power / accuracy are nullable: status moves have neither.
    """

    __tablename__ = "moves"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    types_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("types.id"), nullable=True
    )
    power: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    accuracy: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    power_point: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        return f"<Move(id={self.id}, name='{self.name}')>"


class Nature(Base):
    """A nature raising one stat and lowering another (both null when neutral)."""

    __tablename__ = "natures"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    increased_stat: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    decreased_stat: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Nature(id={self.id}, name='{self.name}')>"


# Backs the case-insensitive name filters (lower(name) = lower(:name)).
Index("idx_types_lower_name", func.lower(Type.name))
Index("idx_moves_lower_name", func.lower(Move.name))
