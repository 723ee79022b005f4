"""
Pokédex API: Species Service
=============================

What:  CRUD for the species lookup table.
Who:   routes/species.py (list/get/update/delete) and routes/pokemon.py
       (POST /pokemon/species).
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from pokedex.exceptions import ValidationError
from pokedex.models import Species
from pokedex.schemas.common import MessageResponse
from pokedex.schemas.catalog import SpeciesResponse
from pokedex.services.crud_base import CrudService


class SpeciesService(CrudService):
    def __init__(self):
        super().__init__(Species, "Species", SpeciesResponse)

    async def create_species(self, db: AsyncSession, name: Optional[str]) -> MessageResponse:
        """
        Insert a species.

        Raises:
            ValidationError: name missing or blank (→ 400), checked before
                             any database access
        """
        if name is None or not name.strip():
            raise ValidationError(message="Species name is required.", field="species_name")
        return await self.create(db, {"name": name.strip()})


# ── Singleton Instance ────────────────────────────────────────────────────
species_service = SpeciesService()
