"""
Pokédex API: Nature Service
============================

What:  CRUD for natures. Nothing references the natures table, so the
       shared CrudService covers it unchanged.
"""

from pokedex.models import Nature
from pokedex.schemas.catalog import NatureResponse
from pokedex.services.crud_base import CrudService

# ── Singleton Instance ────────────────────────────────────────────────────
nature_service = CrudService(Nature, "Nature", NatureResponse)
