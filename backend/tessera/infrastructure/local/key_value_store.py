"""
SQLite implementation of the key/value store.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from tessera.core.exceptions import InfrastructureError
from tessera.infrastructure.local.database import KeyValueORM, get_session_factory
from tessera.interfaces.key_value_store import IKeyValueStore
from tessera.utils.datetime_utils import now_utc


class SqliteKeyValueStore(IKeyValueStore):
    """SQLite implementation of key/value store."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    async def get(self, key: str) -> Optional[str]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(KeyValueORM).where(KeyValueORM.key == key)
                )
                orm = result.scalar_one_or_none()
                return orm.value if orm else None
        except SQLAlchemyError as e:
            raise InfrastructureError(f"Failed to read key {key}: {e}")

    async def set(self, key: str, value: str) -> None:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(KeyValueORM).where(KeyValueORM.key == key)
                )
                orm = result.scalar_one_or_none()
                now = now_utc()
                if orm:
                    orm.value = value
                    orm.updated_at = now
                else:
                    session.add(KeyValueORM(key=key, value=value, created_at=now, updated_at=now))
                await session.commit()
        except SQLAlchemyError as e:
            raise InfrastructureError(f"Failed to write key {key}: {e}")

    async def delete(self, key: str) -> bool:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(KeyValueORM).where(KeyValueORM.key == key)
                )
                orm = result.scalar_one_or_none()
                if not orm:
                    return False
                await session.delete(orm)
                await session.commit()
                return True
        except SQLAlchemyError as e:
            raise InfrastructureError(f"Failed to delete key {key}: {e}")
