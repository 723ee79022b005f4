"""
Pokédex API: Shared Route Dependencies
=======================================

What:  FastAPI dependencies for process-wide clients other than the
       database session (which lives in pokedex.database), and the shared
       path-id parameter type.
"""

from typing import Annotated, Optional

from fastapi import Path, Request

from pokedex.exceptions import StorageError
from pokedex.services.storage_base import ObjectStorage

# Ids are SERIAL (int4) columns; anything outside that range is a 400.
MAX_ROW_ID = 2_147_483_647

PathId = Annotated[int, Path(ge=1, le=MAX_ROW_ID, description="Row id")]


def current_object_storage(request: Request) -> Optional[ObjectStorage]:
    """The ObjectStorage published on app.state, or None before startup."""
    return getattr(request.app.state, "object_storage", None)


def get_object_storage(request: Request) -> ObjectStorage:
    """
    The ObjectStorage opened in the application lifespan.

    Tests replace it with `app.dependency_overrides[get_object_storage]`.
    """
    storage = current_object_storage(request)
    if storage is None:
        raise StorageError(message="Image storage is not configured.")
    return storage
