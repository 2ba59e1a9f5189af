"""SQLAlchemy-backed authoritative store for the local backend.

Mirrors what the hosted platform does for the app: every request runs as
the identity currently held by the caller's auth provider, row-level
policy restricts reads and writes to that identity's own rows, and each
committed write is published to the change feed.
"""

import logging
import uuid
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models import Bookmark, ChangeEvent, ChangeKind, Identity
from app.models.bookmark import OWNER_COLUMN, utcnow
from app.services.change_feed import ChangeFeed
from app.services.exceptions import AuthorizationError, StoreError
from app.services.interfaces import AuthProvider

logger = logging.getLogger(__name__)

TABLES = {Bookmark.__tablename__: Bookmark}


class SqlBookmarkStore:
    """Authoritative store scoped to one client session."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        feed: ChangeFeed,
        auth: AuthProvider,
    ):
        """Initialize the store.

        Args:
            session_factory: Factory for database sessions
            feed: Change feed that receives committed writes
            auth: Auth provider whose identity every request runs as
        """
        self.session_factory = session_factory
        self.feed = feed
        self.auth = auth

    def _model(self, table: str):
        model = TABLES.get(table)
        if model is None:
            raise StoreError(f"Unknown table: {table}")
        return model

    async def _caller(self) -> Optional[Identity]:
        return await self.auth.get_current_identity()

    async def query(
        self,
        table: str,
        filters: dict[str, Any],
        order_by: str = "created_at",
        descending: bool = True,
    ) -> list[dict[str, Any]]:
        """Return the caller's rows matching every equality filter."""
        model = self._model(table)
        caller = await self._caller()
        if caller is None:
            # Anonymous reads see nothing
            return []

        column = getattr(model, order_by, None)
        if column is None:
            raise StoreError(f"Unknown column: {order_by}")

        stmt = select(model).where(getattr(model, OWNER_COLUMN) == caller.id)
        for name, value in filters.items():
            attr = getattr(model, name, None)
            if attr is None:
                raise StoreError(f"Unknown column: {name}")
            stmt = stmt.where(attr == value)
        stmt = stmt.order_by(column.desc() if descending else column.asc())

        try:
            async with self.session_factory() as db:
                result = await db.execute(stmt)
                return [row.to_row() for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise StoreError(f"Query on {table} failed: {e}") from e

    async def insert(self, table: str, values: dict[str, Any]) -> dict[str, Any]:
        """Insert a row owned by the caller and publish the change."""
        model = self._model(table)
        caller = await self._caller()
        if caller is None or values.get(OWNER_COLUMN) != caller.id:
            raise AuthorizationError(table)

        for required in ("title", "url"):
            if not values.get(required):
                raise StoreError(f"{required} must not be empty")

        row = model(
            id=str(uuid.uuid4()),
            user_id=caller.id,
            url=values["url"],
            title=values["title"],
            created_at=utcnow(),
        )
        try:
            async with self.session_factory() as db:
                db.add(row)
                await db.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Insert into {table} failed: {e}") from e

        data = row.to_row()
        self.feed.publish(ChangeEvent(kind=ChangeKind.INSERT, table=table, new=data))
        logger.debug("Inserted %s/%s for %s", table, data["id"], caller.id)
        return data

    async def delete(self, table: str, row_id: str) -> None:
        """Delete one of the caller's rows and publish the change.

        Deleting a row that no longer exists is a no-op.
        """
        model = self._model(table)
        caller = await self._caller()
        if caller is None:
            raise AuthorizationError(table, row_id)

        try:
            async with self.session_factory() as db:
                row = await db.get(model, row_id)
                if row is None:
                    return
                if getattr(row, OWNER_COLUMN) != caller.id:
                    raise AuthorizationError(table, row_id)
                old = row.to_row()
                await db.delete(row)
                await db.commit()
        except SQLAlchemyError as e:
            raise StoreError(f"Delete from {table} failed: {e}") from e

        self.feed.publish(ChangeEvent(kind=ChangeKind.DELETE, table=table, old=old))
        logger.debug("Deleted %s/%s for %s", table, row_id, caller.id)
