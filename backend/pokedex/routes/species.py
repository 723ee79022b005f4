"""
Pokédex API: Species Route Handlers
====================================

What:  List/get/update/delete for /species.

Creation lives at POST /pokemon/species (routes/pokemon.py), the path
existing clients already call.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pokedex.database import get_db_session
from pokedex.routes.dependencies import PathId
from pokedex.schemas.catalog import SpeciesResponse, SpeciesUpdate
from pokedex.schemas.common import ErrorResponse, MessageResponse
from pokedex.services.species_service import species_service

router = APIRouter(prefix="/species", tags=["Species"])

_NOT_FOUND = {404: {"description": "Species not found", "model": ErrorResponse}}


@router.get("", response_model=List[SpeciesResponse], summary="List all species")
async def list_species(db: AsyncSession = Depends(get_db_session)) -> List[SpeciesResponse]:
    return await species_service.list_all(db)


@router.get(
    "/{species_id}",
    response_model=SpeciesResponse,
    responses=_NOT_FOUND,
    summary="Get a species",
)
async def get_species(
    species_id: PathId, db: AsyncSession = Depends(get_db_session)
) -> SpeciesResponse:
    return await species_service.get_by_id(db, species_id)


@router.put(
    "/{species_id}",
    response_model=MessageResponse,
    responses=_NOT_FOUND,
    summary="Rename a species",
)
async def update_species(
    species_id: PathId, body: SpeciesUpdate, db: AsyncSession = Depends(get_db_session)
) -> MessageResponse:
    return await species_service.update(db, species_id, body.model_dump())


@router.delete(
    "/{species_id}",
    response_model=MessageResponse,
    responses={
        **_NOT_FOUND,
        500: {"description": "Species still used by a Pokémon", "model": ErrorResponse},
    },
    summary="Delete a species",
)
async def delete_species(
    species_id: PathId, db: AsyncSession = Depends(get_db_session)
) -> MessageResponse:
    return await species_service.delete(db, species_id)
