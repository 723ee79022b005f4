"""
Pokédex API: Move Route Handlers
=================================

What:  CRUD for /moves. Reads include the move's type name.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pokedex.database import get_db_session
from pokedex.routes.dependencies import PathId
from pokedex.schemas.catalog import MoveCreate, MoveResponse, MoveUpdate
from pokedex.schemas.common import ErrorResponse, MessageResponse
from pokedex.services.move_service import move_service

router = APIRouter(prefix="/moves", tags=["Moves"])

_NOT_FOUND = {404: {"description": "Move not found", "model": ErrorResponse}}


@router.get("", response_model=List[MoveResponse], summary="List all moves")
async def list_moves(db: AsyncSession = Depends(get_db_session)) -> List[MoveResponse]:
    return await move_service.list_all(db)


@router.get(
    "/{move_id}",
    response_model=MoveResponse,
    responses=_NOT_FOUND,
    summary="Get a move with its type name",
)
async def get_move(move_id: PathId, db: AsyncSession = Depends(get_db_session)) -> MoveResponse:
    return await move_service.get_by_id(db, move_id)


@router.post("", status_code=201, response_model=MessageResponse, summary="Create a move")
async def create_move(
    body: MoveCreate, db: AsyncSession = Depends(get_db_session)
) -> MessageResponse:
    return await move_service.create(db, body.model_dump())


@router.put(
    "/{move_id}",
    response_model=MessageResponse,
    responses=_NOT_FOUND,
    summary="Replace a move's fields",
)
async def update_move(
    move_id: PathId, body: MoveUpdate, db: AsyncSession = Depends(get_db_session)
) -> MessageResponse:
    return await move_service.update(db, move_id, body.model_dump())


@router.delete(
    "/{move_id}",
    response_model=MessageResponse,
    responses=_NOT_FOUND,
    summary="Delete a move",
    description="Also removes the move from every Pokémon that knows it.",
)
async def delete_move(move_id: PathId, db: AsyncSession = Depends(get_db_session)) -> MessageResponse:
    return await move_service.delete(db, move_id)
