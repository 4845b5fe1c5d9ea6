"""
Object identifiers and dual-key lookup.

Every persisted entity carries a readable code (e.g. "S001") next to its 24-hex object
identifier. Callers may reference a record by either; lookups try the readable code
first and fall back to the object identifier.
"""

import re
import secrets
from dataclasses import dataclass
from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schoolms.core.exceptions import ValidationError

OBJECT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")

_BLANK_IDENTIFIERS = ("", "undefined", "null")

ModelT = TypeVar("ModelT")


def new_object_id() -> str:
    """24 lowercase hex characters."""
    return secrets.token_hex(12)


def is_object_id(value: Any) -> bool:
    return isinstance(value, str) and bool(OBJECT_ID_PATTERN.match(value))


def clean_identifier(identifier: Optional[str], entity: str) -> str:
    """Reject empty or placeholder identifiers before hitting the database."""
    if identifier is None or identifier.strip() in _BLANK_IDENTIFIERS:
        raise ValidationError(f"Invalid {entity} ID provided", field="id")
    return identifier.strip()


@dataclass(frozen=True)
class EntityLookup(Generic[ModelT]):
    """Resolve a record by its readable code column, then by object identifier."""

    model: Type[ModelT]
    code_column: str
    entity: str

    async def get(self, db: AsyncSession, identifier: Optional[str]) -> Optional[ModelT]:
        ident = clean_identifier(identifier, self.entity)
        result = await db.execute(
            select(self.model).where(getattr(self.model, self.code_column) == ident)
        )
        obj = result.scalar_one_or_none()
        if obj is None and is_object_id(ident):
            obj = await db.get(self.model, ident.lower())
        return obj
