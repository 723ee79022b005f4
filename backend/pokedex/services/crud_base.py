"""
Pokédex API: Shared CRUD for Reference Tables
==============================================

What:  List / get / create / update / delete by id for one ORM model.
How:   Each operation is one `transaction()`; update and delete use the
       statement's rowcount to detect a missing row. Subclasses override
       `_delete_dependents()` to remove rows that reference the target
       before it is deleted.
Who:   Base of SpeciesService, TypeService, MoveService and NatureService.
"""

import logging
from typing import Any, Dict, List

from pydantic import BaseModel
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pokedex.database import transaction
from pokedex.exceptions import NotFoundError
from pokedex.schemas.common import MessageResponse

logger = logging.getLogger(__name__)


class CrudService:
    """
    Id-keyed CRUD over a single table.

    Args:
        model:    ORM class with an integer `id` primary key
        label:    Human name used in messages ("Move" → "Move not found")
        response: Pydantic schema rows are validated into
    """

    def __init__(self, model, label: str, response: type[BaseModel]):
        self.model = model
        self.label = label
        self.response = response
        self.operation = label.lower()

    def not_found(self, resource_id: int) -> NotFoundError:
        return NotFoundError(
            resource=self.label, resource_id=resource_id, message=f"{self.label} not found"
        )

    async def list_all(self, db: AsyncSession) -> List[BaseModel]:
        async with transaction(db, f"list_{self.operation}"):
            result = await db.execute(select(self.model).order_by(self.model.id))
            return [self.response.model_validate(row) for row in result.scalars()]

    async def get_by_id(self, db: AsyncSession, resource_id: int) -> BaseModel:
        async with transaction(db, f"get_{self.operation}", resource_id=resource_id):
            row = await db.get(self.model, resource_id)
            if row is None:
                raise self.not_found(resource_id)
            return self.response.model_validate(row)

    async def create(self, db: AsyncSession, values: Dict[str, Any]) -> MessageResponse:
        async with transaction(db, f"create_{self.operation}"):
            row = self.model(**values)
            db.add(row)
            await db.flush()

        logger.info("%s %d created", self.label, row.id)
        return MessageResponse(message=f"{self.label} added successfully!", id=row.id)

    async def update(
        self, db: AsyncSession, resource_id: int, values: Dict[str, Any]
    ) -> MessageResponse:
        """Overwrite the given columns. Raises NotFoundError when no row matched."""
        async with transaction(db, f"update_{self.operation}", resource_id=resource_id):
            result = await db.execute(
                update(self.model).where(self.model.id == resource_id).values(**values)
            )
            if result.rowcount == 0:
                raise self.not_found(resource_id)

        logger.info("%s %d updated", self.label, resource_id)
        return MessageResponse(message=f"{self.label} updated successfully!", id=resource_id)

    async def delete(self, db: AsyncSession, resource_id: int) -> MessageResponse:
        async with transaction(db, f"delete_{self.operation}", resource_id=resource_id):
            await self._delete_dependents(db, resource_id)
            result = await db.execute(delete(self.model).where(self.model.id == resource_id))
            if result.rowcount == 0:
                raise self.not_found(resource_id)

        logger.info("%s %d deleted", self.label, resource_id)
        return MessageResponse(message=f"{self.label} deleted successfully!", id=resource_id)

    async def _delete_dependents(self, db: AsyncSession, resource_id: int) -> None:
        """Hook: remove rows referencing `resource_id`. Runs in the delete transaction."""
