"""
Pokédex API: Type Route Handlers
=================================

What:  CRUD for /types, including the effectiveness edges.

Effectiveness on create:
    POST /types {"name": "Fire", "color": "#FF0000",
                 "strengths": [12], "weaknesses": [11]}
    → (Fire → 12, ×2.0) and (11 → Fire, ×2.0), nothing else.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pokedex.database import get_db_session
from pokedex.routes.dependencies import PathId
from pokedex.schemas.catalog import TypeCreate, TypeDetailResponse, TypeResponse, TypeUpdate
from pokedex.schemas.common import ErrorResponse, MessageResponse
from pokedex.services.type_service import type_service

router = APIRouter(prefix="/types", tags=["Types"])

_NOT_FOUND = {404: {"description": "Type not found", "model": ErrorResponse}}


@router.get("", response_model=List[TypeResponse], summary="List all types")
async def list_types(db: AsyncSession = Depends(get_db_session)) -> List[TypeResponse]:
    return await type_service.list_all(db)


@router.get(
    "/{type_id}",
    response_model=TypeDetailResponse,
    responses=_NOT_FOUND,
    summary="Get a type with its effectiveness edges",
    description="`effectiveness` lists every edge where this type attacks or defends.",
)
async def get_type(
    type_id: PathId, db: AsyncSession = Depends(get_db_session)
) -> TypeDetailResponse:
    return await type_service.get_type(db, type_id)


@router.post(
    "",
    status_code=201,
    response_model=MessageResponse,
    summary="Create a type",
    description=(
        "Inserts the type and one ×2.0 edge per id in `strengths` (this type "
        "attacks) and `weaknesses` (this type defends), atomically."
    ),
)
async def create_type(
    body: TypeCreate, db: AsyncSession = Depends(get_db_session)
) -> MessageResponse:
    return await type_service.create_type(db, body)


@router.put("/{type_id}", response_model=MessageResponse, responses=_NOT_FOUND)
async def update_type(
    type_id: PathId, body: TypeUpdate, db: AsyncSession = Depends(get_db_session)
) -> MessageResponse:
    return await type_service.update(db, type_id, body.model_dump())


@router.delete(
    "/{type_id}",
    response_model=MessageResponse,
    responses=_NOT_FOUND,
    summary="Delete a type",
    description="Also removes its effectiveness edges and its Pokémon assignments.",
)
async def delete_type(type_id: PathId, db: AsyncSession = Depends(get_db_session)) -> MessageResponse:
    return await type_service.delete(db, type_id)
