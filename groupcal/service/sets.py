"""
Element-level mutations for set-valued fields.

Group members, event attendees and calendar items are each stored as one row
per element in a link table whose primary key is (owner, element). Adding is
a single conflict-ignoring insert and removing a single delete, so two writers
touching the same set never overwrite each other's elements.
"""

from typing import Any

from sqlalchemy import delete
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from groupcal.core.models import SetChange


def _insert(conn: AsyncSession, model: type[SQLModel]):
    match conn.bind.dialect.name:
        case "sqlite":
            return sqlite.insert(model.__table__)
        case "postgresql":
            return postgresql.insert(model.__table__)
        case name:
            raise ValueError(f"Dialect {name} does not support element inserts")


async def insert_if_absent(
    model: type[SQLModel], values: dict[str, Any], conn: AsyncSession
) -> bool:
    """
    Insert a single row, doing nothing if it would violate a primary key or
    unique constraint. Returns True if a row was written.
    """
    query = _insert(conn, model).values(**values).on_conflict_do_nothing()
    result = await conn.execute(query)
    return result.rowcount > 0


async def add_element(
    element: SQLModel,
    conn: AsyncSession,
) -> SetChange:
    """
    Add one element (a link-table row) to its set.
    """
    values = element.model_dump()

    if await insert_if_absent(type(element), values, conn):
        return SetChange.ADDED

    return SetChange.ALREADY_PRESENT


async def remove_element(
    model: type[SQLModel],
    conn: AsyncSession,
    **keys: Any,
) -> SetChange:
    """
    Remove the element identified by `keys` (column name to value) from its
    set.
    """
    table = model.__table__
    query = delete(table).where(
        *(table.c[column] == value for column, value in keys.items())
    )
    result = await conn.execute(query)

    if result.rowcount > 0:
        return SetChange.REMOVED

    return SetChange.NOT_PRESENT
