"""
Pokédex API: Pokémon Schemas
=============================

What:  Write payloads and the aggregated read projection for Pokémon.

Read projection (every Pokémon endpoint returns this shape):
    {
        "id": 1, "name": "Bulbasaur",
        "species_id": 1, "species": "Seed Pokémon",
        "height": 0.7, "weight": 6.9, "image_url": "https://...",
        "moves": [{"id": 1, "name": "Tackle"}],
        "type":  [{"id": 3, "name": "Grass", "color": "#78C850"}],
        "hp": 45, "attack": 49, "defense": 49,
        "special_attack": 65, "special_defense": 65, "speed": 45
    }

Write payloads use the same wire names (`moves`, `type`, `stats`) as the
read side so a client can round-trip what it reads.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class StatsPayload(BaseModel):
    """The six base stats; all required whenever stats are sent."""
    hp: int = Field(ge=0)
    attack: int = Field(ge=0)
    defense: int = Field(ge=0)
    special_attack: int = Field(ge=0)
    special_defense: int = Field(ge=0)
    speed: int = Field(ge=0)


class PokemonCreate(BaseModel):
    """
    The `pokemon` JSON of POST /pokemon.

    moves / type are lists of ids; duplicates are collapsed before insert.
    """
    name: str = Field(min_length=1)
    species_id: int
    height: Optional[float] = Field(default=None, ge=0)
    weight: Optional[float] = Field(default=None, ge=0)
    stats: StatsPayload
    moves: List[int] = Field(default_factory=list)
    type: List[int] = Field(default_factory=list)


class PokemonUpdate(BaseModel):
    """
    The `pokemon` JSON of PUT /pokemon[/{id}].

    Any subset of fields may be sent. Omitted fields are left as they are;
    a present scalar overwrites the column, so `"height": null` clears it.
    `name` can never be null. A present `moves` / `type` list replaces the
    whole set, so `[]` clears it; null `stats`, `moves` or `type` change
    nothing.
    """
    id: Optional[int] = Field(
        default=None, ge=1, le=2_147_483_647, description="Required when the path has no id"
    )
    name: Optional[str] = Field(default=None, min_length=1)
    species_id: Optional[int] = None
    height: Optional[float] = Field(default=None, ge=0)
    weight: Optional[float] = Field(default=None, ge=0)
    stats: Optional[StatsPayload] = None
    moves: Optional[List[int]] = None
    type: Optional[List[int]] = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("name cannot be null")
        return v


class MoveSummary(BaseModel):
    id: int
    name: str


class TypeSummary(BaseModel):
    id: int
    name: str
    color: Optional[str] = None


class PokemonResponse(BaseModel):
    """One Pokémon with species name, aggregated moves/types and base stats."""
    id: int
    name: str
    species_id: Optional[int] = None
    species: Optional[str] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    image_url: Optional[str] = None
    moves: List[MoveSummary] = Field(default_factory=list)
    type: List[TypeSummary] = Field(default_factory=list)
    hp: Optional[int] = None
    attack: Optional[int] = None
    defense: Optional[int] = None
    special_attack: Optional[int] = None
    special_defense: Optional[int] = None
    speed: Optional[int] = None
