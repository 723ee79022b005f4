"""
Pokédex API: Move Service
==========================

What:  CRUD for moves. Reads carry the name of the move's type
       (`type_name`) through an outer join on types.
How:   Deleting a move first removes its pokemon_moves rows in the same
       transaction, so no Pokémon is left pointing at a missing move.
"""

import logging
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from pokedex.database import transaction
from pokedex.models import Move, PokemonMove, Type
from pokedex.schemas.catalog import MoveResponse
from pokedex.services.crud_base import CrudService

logger = logging.getLogger(__name__)


class MoveService(CrudService):
    def __init__(self):
        super().__init__(Move, "Move", MoveResponse)

    def _select_with_type(self):
        return (
            select(Move, Type.name.label("type_name"))
            .outerjoin(Type, Type.id == Move.types_id)
            .order_by(Move.id)
        )

    @staticmethod
    def _to_response(move: Move, type_name) -> MoveResponse:
        return MoveResponse(
            id=move.id,
            name=move.name,
            types_id=move.types_id,
            type_name=type_name,
            power=move.power,
            accuracy=move.accuracy,
            power_point=move.power_point,
        )

    async def list_all(self, db: AsyncSession) -> List[MoveResponse]:
        async with transaction(db, "list_move"):
            result = await db.execute(self._select_with_type())
            return [self._to_response(move, type_name) for move, type_name in result]

    async def get_by_id(self, db: AsyncSession, resource_id: int) -> MoveResponse:
        async with transaction(db, "get_move", resource_id=resource_id):
            result = await db.execute(self._select_with_type().where(Move.id == resource_id))
            row = result.first()

        if row is None:
            raise self.not_found(resource_id)
        return self._to_response(*row)

    async def _delete_dependents(self, db: AsyncSession, resource_id: int) -> None:
        result = await db.execute(delete(PokemonMove).where(PokemonMove.move_id == resource_id))
        if result.rowcount:
            logger.info("Removed move %d from %d Pokémon", resource_id, result.rowcount)


# ── Singleton Instance ────────────────────────────────────────────────────
move_service = MoveService()
