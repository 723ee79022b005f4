"""
Pokédex API: Pokémon Service (Business Logic Orchestrator)
===========================================================

What:  Create, read, update and delete Pokémon across the four tables that
       make up one entry: pokemon, pokemon_base_stats, pokemon_moves and
       pokemon_types.
How:   Every unit of work runs inside `transaction()`, so a failure in any
       statement rolls back all of them. Images are uploaded through
       ImageService *before* the transaction opens.
Who:   Called by routes/pokemon.py.

Write Flow (POST /pokemon):
    ┌──────────┐    ┌──────────────┐    ┌─────────────────────────────────┐
    │  Parse   │───▶│ Upload image │───▶│ BEGIN                           │
    │  (Route) │    │ (optional)   │    │   INSERT pokemon → id           │
    └──────────┘    └──────────────┘    │   INSERT pokemon_base_stats     │
                                        │   INSERT pokemon_moves (batch)  │
                                        │   INSERT pokemon_types (batch)  │
                                        │ COMMIT                          │
                                        └─────────────────────────────────┘
    Upload fails  → StorageError, nothing written
    Any SQL fails → ROLLBACK, uploaded object deleted (best effort)

Read Flow (every GET that returns Pokémon):
    1. pokemon ⟕ species ⟕ pokemon_base_stats, ordered by id
    2. DISTINCT (pokemon_id, move) pairs for the ids from step 1
    3. DISTINCT (pokemon_id, type) pairs for the ids from step 1
    Steps 2 and 3 are folded into per-Pokémon lists sorted by id. Keeping the
    many-to-many reads separate avoids the moves × types row explosion a
    single joined query produces.
"""

import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pokedex.database import transaction
from pokedex.exceptions import NotFoundError, ValidationError
from pokedex.models import (
    Move,
    Pokemon,
    PokemonBaseStats,
    PokemonMove,
    PokemonType,
    Species,
    Type,
)
from pokedex.schemas.common import MessageResponse
from pokedex.schemas.pokemon import (
    MoveSummary,
    PokemonCreate,
    PokemonResponse,
    PokemonUpdate,
    TypeSummary,
)
from pokedex.services.image_service import ImageUpload, StoredImage, image_service
from pokedex.services.storage_base import ObjectStorage

logger = logging.getLogger(__name__)

STAT_FIELDS = (
    "hp",
    "attack",
    "defense",
    "special_attack",
    "special_defense",
    "speed",
)


def _unique(ids: List[int]) -> List[int]:
    """Drop repeated ids, keeping first-seen order."""
    return list(dict.fromkeys(ids))


class PokemonService:
    """
    Business logic layer for Pokémon.

    Responsibilities:
        - list/get/filter: the aggregated read projection
        - create/update/delete: multi-table writes in one transaction
        - image handling: upload before the write, discard if it rolls back
    """

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_pokemon(self, db: AsyncSession) -> List[PokemonResponse]:
        async with transaction(db, "list_pokemon"):
            return await self._fetch_pokemon(db)

    async def get_pokemon(self, db: AsyncSession, pokemon_id: int) -> PokemonResponse:
        """
        Raises:
            NotFoundError: no Pokémon with this id (→ 404)
        """
        async with transaction(db, "get_pokemon", pokemon_id=pokemon_id):
            rows = await self._fetch_pokemon(db, Pokemon.id == pokemon_id)

        if not rows:
            raise NotFoundError(
                resource="Pokémon", resource_id=pokemon_id, message="Pokémon not found"
            )
        return rows[0]

    async def list_pokemon_by_type(
        self, db: AsyncSession, type_name: str
    ) -> List[PokemonResponse]:
        """
        Every Pokémon having a type whose name matches `type_name`,
        case-insensitively. Each result still carries all of its types.
        """
        matching_ids = (
            select(PokemonType.pokemon_id)
            .join(Type, Type.id == PokemonType.type_id)
            .where(func.lower(Type.name) == type_name.lower())
        )
        async with transaction(db, "list_pokemon_by_type", type_name=type_name):
            rows = await self._fetch_pokemon(db, Pokemon.id.in_(matching_ids))

        if not rows:
            raise NotFoundError(
                resource="Pokémon",
                message=f"No Pokémon found with type: {type_name}",
                context={"type_name": type_name},
            )
        return rows

    async def list_pokemon_by_move(
        self, db: AsyncSession, move_name: str
    ) -> List[PokemonResponse]:
        matching_ids = (
            select(PokemonMove.pokemon_id)
            .join(Move, Move.id == PokemonMove.move_id)
            .where(func.lower(Move.name) == move_name.lower())
        )
        async with transaction(db, "list_pokemon_by_move", move_name=move_name):
            rows = await self._fetch_pokemon(db, Pokemon.id.in_(matching_ids))

        if not rows:
            raise NotFoundError(
                resource="Pokémon",
                message=f"No Pokémon found with move: {move_name}",
                context={"move_name": move_name},
            )
        return rows

    async def _fetch_pokemon(self, db: AsyncSession, *criteria: Any) -> List[PokemonResponse]:
        """
        Build the read projection for every Pokémon matching `criteria`.

        Must be called inside an open transaction.
        """
        base = (
            select(Pokemon, Species.name.label("species_name"), PokemonBaseStats)
            .outerjoin(Species, Species.id == Pokemon.species_id)
            .outerjoin(PokemonBaseStats, PokemonBaseStats.pokemon_id == Pokemon.id)
            .where(*criteria)
            .order_by(Pokemon.id)
        )
        rows = (await db.execute(base)).all()
        if not rows:
            return []

        ids = [row.Pokemon.id for row in rows]

        move_rows = await db.execute(
            select(PokemonMove.pokemon_id, Move.id, Move.name)
            .join(Move, Move.id == PokemonMove.move_id)
            .where(PokemonMove.pokemon_id.in_(ids))
            .distinct()
            .order_by(PokemonMove.pokemon_id, Move.id)
        )
        moves: Dict[int, List[MoveSummary]] = defaultdict(list)
        for pokemon_id, move_id, move_name in move_rows:
            moves[pokemon_id].append(MoveSummary(id=move_id, name=move_name))

        type_rows = await db.execute(
            select(PokemonType.pokemon_id, Type.id, Type.name, Type.color)
            .join(Type, Type.id == PokemonType.type_id)
            .where(PokemonType.pokemon_id.in_(ids))
            .distinct()
            .order_by(PokemonType.pokemon_id, Type.id)
        )
        types: Dict[int, List[TypeSummary]] = defaultdict(list)
        for pokemon_id, type_id, type_name, color in type_rows:
            types[pokemon_id].append(TypeSummary(id=type_id, name=type_name, color=color))

        results = []
        for pokemon, species_name, stats in rows:
            stat_values = (
                {field: getattr(stats, field) for field in STAT_FIELDS} if stats else {}
            )
            results.append(
                PokemonResponse(
                    id=pokemon.id,
                    name=pokemon.name,
                    species_id=pokemon.species_id,
                    species=species_name,
                    height=pokemon.height,
                    weight=pokemon.weight,
                    image_url=pokemon.image_url,
                    moves=moves.get(pokemon.id, []),
                    type=types.get(pokemon.id, []),
                    **stat_values,
                )
            )
        return results

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_pokemon(
        self,
        db: AsyncSession,
        payload: PokemonCreate,
        storage: ObjectStorage,
        image: Optional[ImageUpload] = None,
    ) -> MessageResponse:
        """
        Insert a Pokémon with its stats, moves and types.

        Steps:
            1. Upload the image, if any (no transaction open yet)
            2. BEGIN; insert the four tables; COMMIT
            3. On failure in 2, remove the object uploaded in 1

        Raises:
            ValidationError: image rejected (→ 400)
            StorageError:    image upload failed, nothing written (→ 500)
            DatabaseError:   any insert failed, everything rolled back (→ 500)
        """
        stored = await image_service.upload(image, storage) if image else None

        try:
            async with transaction(db, "create_pokemon", name=payload.name):
                pokemon = Pokemon(
                    name=payload.name,
                    species_id=payload.species_id,
                    height=payload.height,
                    weight=payload.weight,
                    image_url=stored.url if stored else None,
                )
                db.add(pokemon)
                await db.flush()

                db.add(PokemonBaseStats(pokemon_id=pokemon.id, **payload.stats.model_dump()))
                await db.flush()

                await self._insert_moves(db, pokemon.id, payload.moves)
                await self._insert_types(db, pokemon.id, payload.type)
        except Exception:
            await self._discard_upload(stored, storage)
            raise

        logger.info(
            "Pokémon %d created: %s (moves=%d, types=%d, image=%s)",
            pokemon.id,
            pokemon.name,
            len(_unique(payload.moves)),
            len(_unique(payload.type)),
            stored.key if stored else None,
        )
        return MessageResponse(message="Pokémon added successfully!", id=pokemon.id)

    async def update_pokemon(
        self,
        db: AsyncSession,
        pokemon_id: Optional[int],
        payload: PokemonUpdate,
        storage: ObjectStorage,
        image: Optional[ImageUpload] = None,
    ) -> MessageResponse:
        """
        Apply a partial update to one Pokémon.

        `pokemon_id` comes from the path; when it is None the id inside the
        payload is used. Only fields present in the payload are written; a
        present null clears a nullable column.
        A present `moves` / `type` list replaces the stored set entirely.

        Raises:
            ValidationError: no id at all, or path and body ids differ (→ 400)
            NotFoundError:   no Pokémon with this id (→ 404)
            StorageError:    image upload failed, nothing written (→ 500)
            DatabaseError:   any statement failed, everything rolled back (→ 500)
        """
        target_id = self._resolve_id(pokemon_id, payload.id)

        stored = await image_service.upload(image, storage) if image else None

        changes = payload.model_dump(
            exclude_unset=True,
            exclude={"id", "stats", "moves", "type"},
        )
        if stored:
            changes["image_url"] = stored.url

        try:
            async with transaction(db, "update_pokemon", pokemon_id=target_id):
                pokemon = await db.get(Pokemon, target_id)
                if pokemon is None:
                    raise NotFoundError(
                        resource="Pokémon", resource_id=target_id, message="Pokémon not found"
                    )

                for field, value in changes.items():
                    setattr(pokemon, field, value)

                if payload.stats is not None:
                    await db.execute(
                        update(PokemonBaseStats)
                        .where(PokemonBaseStats.pokemon_id == target_id)
                        .values(**payload.stats.model_dump())
                    )

                if payload.moves is not None:
                    await db.execute(delete(PokemonMove).where(PokemonMove.pokemon_id == target_id))
                    await self._insert_moves(db, target_id, payload.moves)

                if payload.type is not None:
                    await db.execute(delete(PokemonType).where(PokemonType.pokemon_id == target_id))
                    await self._insert_types(db, target_id, payload.type)
        except Exception:
            await self._discard_upload(stored, storage)
            raise

        logger.info(
            "Pokémon %d updated: fields=%s stats=%s moves=%s types=%s",
            target_id,
            sorted(changes),
            payload.stats is not None,
            payload.moves is not None,
            payload.type is not None,
        )
        return MessageResponse(message="Pokémon updated successfully!", id=target_id)

    async def delete_pokemon(self, db: AsyncSession, pokemon_id: int) -> MessageResponse:
        """
        Delete a Pokémon and its child rows, children first.

        The stored image is left in the object store.
        """
        async with transaction(db, "delete_pokemon", pokemon_id=pokemon_id):
            await db.execute(delete(PokemonMove).where(PokemonMove.pokemon_id == pokemon_id))
            await db.execute(delete(PokemonType).where(PokemonType.pokemon_id == pokemon_id))
            await db.execute(
                delete(PokemonBaseStats).where(PokemonBaseStats.pokemon_id == pokemon_id)
            )
            result = await db.execute(delete(Pokemon).where(Pokemon.id == pokemon_id))
            if result.rowcount == 0:
                raise NotFoundError(
                    resource="Pokémon", resource_id=pokemon_id, message="Pokémon not found"
                )

        logger.info("Pokémon %d deleted", pokemon_id)
        return MessageResponse(message="Pokémon deleted successfully!", id=pokemon_id)

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _resolve_id(path_id: Optional[int], body_id: Optional[int]) -> int:
        if path_id is None and body_id is None:
            raise ValidationError(message="Pokémon ID is required.", field="id")
        if path_id is not None and body_id is not None and path_id != body_id:
            raise ValidationError(
                message="Pokémon ID in the URL does not match the ID in the body.",
                field="id",
                context={"path_id": path_id, "body_id": body_id},
            )
        return path_id if path_id is not None else body_id

    async def _insert_moves(self, db: AsyncSession, pokemon_id: int, move_ids: List[int]) -> None:
        rows = [{"pokemon_id": pokemon_id, "move_id": m} for m in _unique(move_ids)]
        if rows:
            await db.execute(insert(PokemonMove), rows)

    async def _insert_types(self, db: AsyncSession, pokemon_id: int, type_ids: List[int]) -> None:
        rows = [{"pokemon_id": pokemon_id, "type_id": t} for t in _unique(type_ids)]
        if rows:
            await db.execute(insert(PokemonType), rows)

    async def _discard_upload(
        self, stored: Optional[StoredImage], storage: ObjectStorage
    ) -> None:
        if stored is not None:
            logger.warning("Write rolled back, removing uploaded image %s", stored.key)
            await image_service.discard(stored, storage)


# ── Singleton Instance ────────────────────────────────────────────────────
pokemon_service = PokemonService()
