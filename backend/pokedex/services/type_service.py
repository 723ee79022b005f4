"""
Pokédex API: Type Service
==========================

What:  CRUD for elemental types and their effectiveness edges.
How:   Creating a type with `strengths` / `weaknesses` inserts the type and
       its edges in one transaction. Edges are directional:

           strengths=[2]   →  (new → 2, ×2.0)
           weaknesses=[5]  →  (5 → new, ×2.0)

       No reciprocal edge is ever added. Deleting a type removes every edge
       it takes part in and its pokemon_types rows before the type itself.
       Moves still pointing at the type make the delete fail.
"""

import logging
from sqlalchemy import delete, insert, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from pokedex.database import transaction
from pokedex.models import PokemonType, Type, TypeEffectiveness
from pokedex.schemas.catalog import (
    EffectivenessEdge,
    TypeCreate,
    TypeDetailResponse,
    TypeResponse,
)
from pokedex.schemas.common import MessageResponse
from pokedex.services.crud_base import CrudService

logger = logging.getLogger(__name__)

SUPER_EFFECTIVE = 2.0


class TypeService(CrudService):
    def __init__(self):
        super().__init__(Type, "Type", TypeResponse)

    async def get_type(self, db: AsyncSession, type_id: int) -> TypeDetailResponse:
        """
        The type plus every effectiveness edge where it is the attacker or
        the defender, ordered by (attacking, defending).
        """
        async with transaction(db, "get_type", type_id=type_id):
            type_ = await db.get(Type, type_id)
            if type_ is None:
                raise self.not_found(type_id)

            result = await db.execute(
                select(TypeEffectiveness)
                .where(
                    or_(
                        TypeEffectiveness.attacking_type_id == type_id,
                        TypeEffectiveness.defending_type_id == type_id,
                    )
                )
                .order_by(
                    TypeEffectiveness.attacking_type_id,
                    TypeEffectiveness.defending_type_id,
                )
            )
            edges = [EffectivenessEdge.model_validate(edge) for edge in result.scalars()]

        return TypeDetailResponse(
            id=type_.id, name=type_.name, color=type_.color, effectiveness=edges
        )

    async def create_type(self, db: AsyncSession, payload: TypeCreate) -> MessageResponse:
        """
        Insert a type and its super-effective edges atomically.

        An unknown id in strengths/weaknesses violates the foreign key and
        rolls back the type as well (→ 500).
        """
        strengths = list(dict.fromkeys(payload.strengths))
        weaknesses = list(dict.fromkeys(payload.weaknesses))

        async with transaction(db, "create_type", name=payload.name):
            type_ = Type(name=payload.name, color=payload.color)
            db.add(type_)
            await db.flush()

            edges = [
                {
                    "attacking_type_id": type_.id,
                    "defending_type_id": target,
                    "effectiveness": SUPER_EFFECTIVE,
                }
                for target in strengths
            ] + [
                {
                    "attacking_type_id": source,
                    "defending_type_id": type_.id,
                    "effectiveness": SUPER_EFFECTIVE,
                }
                for source in weaknesses
            ]
            if edges:
                await db.execute(insert(TypeEffectiveness), edges)

        logger.info(
            "Type %d created: %s (strengths=%s, weaknesses=%s)",
            type_.id,
            type_.name,
            strengths,
            weaknesses,
        )
        return MessageResponse(message="Type added successfully!", id=type_.id)

    async def _delete_dependents(self, db: AsyncSession, resource_id: int) -> None:
        await db.execute(
            delete(TypeEffectiveness).where(
                or_(
                    TypeEffectiveness.attacking_type_id == resource_id,
                    TypeEffectiveness.defending_type_id == resource_id,
                )
            )
        )
        await db.execute(delete(PokemonType).where(PokemonType.type_id == resource_id))


# ── Singleton Instance ────────────────────────────────────────────────────
type_service = TypeService()
