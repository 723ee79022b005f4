"""
Pokédex API: Catalog Schemas
=============================

What:  Request/response contracts for species, types, moves and natures.

PUT bodies for these resources overwrite every scalar column, so the update
schemas share the create schemas' fields.
"""

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Species
# ══════════════════════════════════════════════════════════════════════════


class SpeciesCreate(BaseModel):
    """
    Body of POST /pokemon/species.

    Clients send ``species_name``; ``name`` is accepted as well. Presence is
    checked by the service so the error reads "Species name is required.".
    """
    name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("species_name", "name"),
        description="Species name, e.g. 'Seed Pokémon'",
    )


class SpeciesUpdate(BaseModel):
    name: str = Field(min_length=1, description="New species name")


class SpeciesResponse(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Types
# ══════════════════════════════════════════════════════════════════════════


class TypeCreate(BaseModel):
    """
    Body of POST /types.

    strengths:  ids of types this type is super-effective against
                (stored as this → listed)
    weaknesses: ids of types that are super-effective against this type
                (stored as listed → this)
    """
    name: str = Field(min_length=1)
    color: Optional[str] = Field(default=None, description="Display colour, e.g. '#FF0000'")
    strengths: List[int] = Field(default_factory=list)
    weaknesses: List[int] = Field(default_factory=list)


class TypeUpdate(BaseModel):
    name: str = Field(min_length=1)
    color: Optional[str] = None


class TypeResponse(BaseModel):
    id: int
    name: str
    color: Optional[str] = None

    model_config = {"from_attributes": True}


class EffectivenessEdge(BaseModel):
    attacking_type_id: int
    defending_type_id: int
    effectiveness: float

    model_config = {"from_attributes": True}


class TypeDetailResponse(TypeResponse):
    """GET /types/{id}: the type plus every edge it takes part in, either side."""
    effectiveness: List[EffectivenessEdge] = Field(default_factory=list)


# ══════════════════════════════════════════════════════════════════════════
# Moves
# ══════════════════════════════════════════════════════════════════════════


class MoveCreate(BaseModel):
    name: str = Field(min_length=1)
    types_id: Optional[int] = Field(default=None, description="Id of the move's type")
    power: Optional[int] = Field(default=None, ge=0)
    accuracy: Optional[int] = Field(default=None, ge=0, le=100)
    power_point: Optional[int] = Field(default=None, ge=0)


class MoveUpdate(MoveCreate):
    pass


class MoveResponse(BaseModel):
    id: int
    name: str
    types_id: Optional[int] = None
    type_name: Optional[str] = Field(default=None, description="Name of the move's type")
    power: Optional[int] = None
    accuracy: Optional[int] = None
    power_point: Optional[int] = None

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Natures
# ══════════════════════════════════════════════════════════════════════════


class NatureCreate(BaseModel):
    name: str = Field(min_length=1)
    increased_stat: Optional[str] = None
    decreased_stat: Optional[str] = None
    description: Optional[str] = None


class NatureUpdate(NatureCreate):
    pass


class NatureResponse(BaseModel):
    id: int
    name: str
    increased_stat: Optional[str] = None
    decreased_stat: Optional[str] = None
    description: Optional[str] = None

    model_config = {"from_attributes": True}
