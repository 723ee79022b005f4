"""
Pokédex API: Nature Route Handlers
===================================

What:  CRUD for /natures.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pokedex.database import get_db_session
from pokedex.routes.dependencies import PathId
from pokedex.schemas.catalog import NatureCreate, NatureResponse, NatureUpdate
from pokedex.schemas.common import ErrorResponse, MessageResponse
from pokedex.services.nature_service import nature_service

router = APIRouter(prefix="/natures", tags=["Natures"])

_NOT_FOUND = {404: {"description": "Nature not found", "model": ErrorResponse}}


@router.get("", response_model=List[NatureResponse], summary="List all natures")
async def list_natures(db: AsyncSession = Depends(get_db_session)) -> List[NatureResponse]:
    return await nature_service.list_all(db)


@router.get("/{nature_id}", response_model=NatureResponse, responses=_NOT_FOUND)
async def get_nature(
    nature_id: PathId, db: AsyncSession = Depends(get_db_session)
) -> NatureResponse:
    return await nature_service.get_by_id(db, nature_id)


@router.post("", status_code=201, response_model=MessageResponse, summary="Create a nature")
async def create_nature(
    body: NatureCreate, db: AsyncSession = Depends(get_db_session)
) -> MessageResponse:
    return await nature_service.create(db, body.model_dump())


@router.put("/{nature_id}", response_model=MessageResponse, responses=_NOT_FOUND)
async def update_nature(
    nature_id: PathId, body: NatureUpdate, db: AsyncSession = Depends(get_db_session)
) -> MessageResponse:
    return await nature_service.update(db, nature_id, body.model_dump())


@router.delete("/{nature_id}", response_model=MessageResponse, responses=_NOT_FOUND)
async def delete_nature(
    nature_id: PathId, db: AsyncSession = Depends(get_db_session)
) -> MessageResponse:
    return await nature_service.delete(db, nature_id)
