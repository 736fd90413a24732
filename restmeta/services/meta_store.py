"""
MetaStore

Per-post attribute store backed by the ``post_meta`` table. Values are
single JSON scalars addressed by ``(post_id, meta_key)``.

``update_meta`` reports failure only on a genuine database error: writing
a value that is already stored is a success, not a no-op error. Writes are
upserts, so two requests creating the same key both succeed and the last
one wins. Nothing is committed here; the request that owns the session
commits or rolls back all of its writes together.
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from restmeta.models.post_meta import PostMeta

logger = logging.getLogger(__name__)


class MetaStore:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_meta(self, post_id: int, meta_key: str, default: Any = None) -> Any:
        """Return the stored value, or *default* if the key was never set."""
        result = await self.db.execute(
            select(PostMeta.meta_value).where(PostMeta.post_id == post_id, PostMeta.meta_key == meta_key)
        )
        row = result.first()
        if row is None:
            return default
        return row[0]

    async def update_meta(self, post_id: int, meta_key: str, value: Any) -> bool:
        """
        Insert or overwrite the value stored under *meta_key* for *post_id*.

        Returns:
            True once the value is written (changed or not), False if the
            database rejected the write. The session is rolled back on failure.
        """
        insert = sqlite_insert if self.db.get_bind().dialect.name == "sqlite" else pg_insert
        stmt = insert(PostMeta).values(post_id=post_id, meta_key=meta_key, meta_value=value)
        stmt = stmt.on_conflict_do_update(
            index_elements=[PostMeta.post_id, PostMeta.meta_key],
            set_={"meta_value": stmt.excluded.meta_value},
        )

        try:
            await self.db.execute(stmt)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to update meta '{meta_key}' for post {post_id}: {e}")
            return False

        logger.debug("Meta '%s' stored for post %s", meta_key, post_id)
        return True
