"""
Pokédex API: Pokémon Route Handlers
====================================

What:  /pokemon endpoints: list, get, filter by type or move, create,
       update, delete, plus POST /pokemon/species.
How:   Thin handlers: decode the request, call PokemonService, return its
       result. All error responses come from the global handlers.

Write bodies (POST /pokemon, PUT /pokemon[/{id}]) arrive in one of two forms:
    multipart/form-data:
        pokemon = '{"name": "Bulbasaur", "species_id": 1, ...}'   (JSON text)
        image   = <file>                                         (optional)
    application/json:
        {"name": "Bulbasaur", "species_id": 1, ...}               (no image)

Route order matters: the two-segment filters are declared before
/pokemon/{pokemon_id} so "types" is never parsed as an id.
"""

import logging
from typing import List, Optional, Tuple, Type

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from pokedex.config import settings
from pokedex.database import get_db_session
from pokedex.exceptions import ValidationError
from pokedex.routes.dependencies import PathId, get_object_storage
from pokedex.schemas.catalog import SpeciesCreate
from pokedex.schemas.common import ErrorResponse, MessageResponse
from pokedex.schemas.pokemon import PokemonCreate, PokemonResponse, PokemonUpdate
from pokedex.services.image_service import ImageUpload, image_service
from pokedex.services.pokemon_service import pokemon_service
from pokedex.services.species_service import species_service
from pokedex.services.storage_base import ObjectStorage

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/pokemon", tags=["Pokémon"])

_WRITE_BODY_DOC = {
    "requestBody": {
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "properties": {
                        "pokemon": {"type": "string", "description": "Pokémon JSON"},
                        "image": {"type": "string", "format": "binary"},
                    },
                    "required": ["pokemon"],
                }
            },
            "application/json": {"schema": {"type": "object"}},
        },
        "required": True,
    }
}


async def read_pokemon_request(
    request: Request, schema: Type[BaseModel]
) -> Tuple[BaseModel, Optional[ImageUpload]]:
    """
    Decode a Pokémon write request into (payload, image).

    Raises:
        ValidationError:        multipart body without a `pokemon` field, or an
                                image over MAX_IMAGE_SIZE
        RequestValidationError: payload JSON malformed or failing `schema`
    """
    image: Optional[ImageUpload] = None
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        try:
            raw = form.get("pokemon")
            if not isinstance(raw, str):
                raise ValidationError(
                    message="Missing 'pokemon' field in form data.", field="pokemon"
                )
            upload = form.get("image")
            if isinstance(upload, UploadFile) and upload.filename:
                # Reject on the declared size, and never buffer past the limit
                if upload.size is not None:
                    image_service.validate_size(upload.size)
                content = await upload.read(settings.max_image_size + 1)
                image = ImageUpload(filename=upload.filename, content=content)
        finally:
            await form.close()
    else:
        raw = await request.body()

    try:
        payload = schema.model_validate_json(raw)
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from e

    logger.debug(
        "Decoded %s payload (image=%s)",
        schema.__name__,
        image.filename if image else None,
    )
    return payload, image


# ══════════════════════════════════════════════════════════════════════════
# Reads
# ══════════════════════════════════════════════════════════════════════════


@router.get(
    "",
    response_model=List[PokemonResponse],
    summary="List all Pokémon",
    description=(
        "Every Pokémon ordered by id, each with its species name, base stats "
        "and de-duplicated `moves` and `type` arrays."
    ),
)
async def list_pokemon(db: AsyncSession = Depends(get_db_session)) -> List[PokemonResponse]:
    return await pokemon_service.list_pokemon(db)


@router.get(
    "/types/{type_name}",
    response_model=List[PokemonResponse],
    responses={404: {"description": "No Pokémon has this type", "model": ErrorResponse}},
    summary="List Pokémon of a type",
    description="Case-insensitive exact match on the type name (`fire` == `FIRE`).",
)
async def list_pokemon_by_type(
    type_name: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[PokemonResponse]:
    return await pokemon_service.list_pokemon_by_type(db, type_name)


@router.get(
    "/moves/{move_name}",
    response_model=List[PokemonResponse],
    responses={404: {"description": "No Pokémon knows this move", "model": ErrorResponse}},
    summary="List Pokémon that know a move",
    description="Case-insensitive exact match on the move name.",
)
async def list_pokemon_by_move(
    move_name: str,
    db: AsyncSession = Depends(get_db_session),
) -> List[PokemonResponse]:
    return await pokemon_service.list_pokemon_by_move(db, move_name)


@router.get(
    "/{pokemon_id}",
    response_model=PokemonResponse,
    responses={
        400: {"description": "Malformed id", "model": ErrorResponse},
        404: {"description": "Pokémon not found", "model": ErrorResponse},
    },
    summary="Get a single Pokémon",
)
async def get_pokemon(
    pokemon_id: PathId,
    db: AsyncSession = Depends(get_db_session),
) -> PokemonResponse:
    return await pokemon_service.get_pokemon(db, pokemon_id)


# ══════════════════════════════════════════════════════════════════════════
# Writes
# ══════════════════════════════════════════════════════════════════════════


@router.post(
    "/species",
    status_code=201,
    response_model=MessageResponse,
    responses={400: {"description": "Species name missing", "model": ErrorResponse}},
    summary="Create a species",
    description="Accepts `{\"species_name\": ...}` (or `{\"name\": ...}`).",
)
async def create_species(
    body: SpeciesCreate,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await species_service.create_species(db, body.name)


@router.post(
    "",
    status_code=201,
    response_model=MessageResponse,
    responses={
        400: {"description": "Invalid payload or image", "model": ErrorResponse},
        500: {"description": "Database or storage failure", "model": ErrorResponse},
    },
    summary="Create a Pokémon",
    description=(
        "Inserts the Pokémon, its base stats, moves and types in one transaction. "
        "An optional `image` is uploaded to object storage first; if the upload "
        "fails nothing is written."
    ),
    openapi_extra=_WRITE_BODY_DOC,
)
async def create_pokemon(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    storage: ObjectStorage = Depends(get_object_storage),
) -> MessageResponse:
    """
    Create a Pokémon from a multipart or JSON body.

    Error responses (handled by global exception handlers):
        HTTP 400: malformed JSON, schema violation, bad image
        HTTP 500: upload failed, or a write failed and was rolled back
        HTTP 504: transaction exceeded REQUEST_TIMEOUT_SECONDS
    """
    payload, image = await read_pokemon_request(request, PokemonCreate)
    return await pokemon_service.create_pokemon(db, payload, storage, image=image)


@router.put(
    "",
    response_model=MessageResponse,
    responses={
        400: {"description": "Missing id or invalid payload", "model": ErrorResponse},
        404: {"description": "Pokémon not found", "model": ErrorResponse},
    },
    summary="Update a Pokémon (id in body)",
    openapi_extra=_WRITE_BODY_DOC,
)
async def update_pokemon_from_body(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    storage: ObjectStorage = Depends(get_object_storage),
) -> MessageResponse:
    payload, image = await read_pokemon_request(request, PokemonUpdate)
    return await pokemon_service.update_pokemon(db, None, payload, storage, image=image)


@router.put(
    "/{pokemon_id}",
    response_model=MessageResponse,
    responses={
        400: {"description": "Id mismatch or invalid payload", "model": ErrorResponse},
        404: {"description": "Pokémon not found", "model": ErrorResponse},
    },
    summary="Update a Pokémon",
    description=(
        "Partial update: only fields present in the payload change. A present "
        "`moves` or `type` list replaces the stored set (`[]` clears it). A new "
        "`image` replaces `image_url`; without one the URL is kept."
    ),
    openapi_extra=_WRITE_BODY_DOC,
)
async def update_pokemon(
    pokemon_id: PathId,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    storage: ObjectStorage = Depends(get_object_storage),
) -> MessageResponse:
    payload, image = await read_pokemon_request(request, PokemonUpdate)
    return await pokemon_service.update_pokemon(db, pokemon_id, payload, storage, image=image)


@router.delete(
    "/{pokemon_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Pokémon not found", "model": ErrorResponse}},
    summary="Delete a Pokémon",
    description="Removes the Pokémon with its moves, types and base stats.",
)
async def delete_pokemon(
    pokemon_id: PathId,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await pokemon_service.delete_pokemon(db, pokemon_id)
