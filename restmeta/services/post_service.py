import logging
import re
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from restmeta.exceptions import InvalidPostIdError, PostNotFoundError, RestMetaError
from restmeta.models.post import Post
from restmeta.models.user import User
from restmeta.utils.sanitize import sanitize_post_body, sanitize_post_title

logger = logging.getLogger(__name__)

POST_ID_RE = re.compile(r"^[0-9]+$")

# Largest id a BIGINT primary key can hold
MAX_POST_ID = 2**63 - 1


def parse_post_id(raw_id: Any) -> int:
    """
    Turn a raw request parameter into a post id.

    Raises:
        InvalidPostIdError: if the value is missing, not numeric, not positive
            or too large to address a row.
    """
    if isinstance(raw_id, bool) or raw_id is None:
        raise InvalidPostIdError(raw_id)
    if isinstance(raw_id, int):
        post_id = raw_id
    else:
        text = str(raw_id).strip()
        if not POST_ID_RE.match(text):
            raise InvalidPostIdError(raw_id)
        post_id = int(text)
    if post_id <= 0 or post_id > MAX_POST_ID:
        raise InvalidPostIdError(raw_id)
    return post_id


async def get_post(db: AsyncSession, post_id: int) -> Post:
    result = await db.execute(select(Post).where(Post.id == post_id))
    post = result.scalars().first()
    if not post:
        raise PostNotFoundError(post_id)
    return post


async def create_post(
    db: AsyncSession,
    author: User,
    title: str,
    body: str = "",
    post_type: str = "post",
    post_id: int | None = None,
) -> Post:
    """
    Creates a new post. The caller commits.

    Args:
        db (AsyncSession): The database session.
        author (User): The post's author.
        title (str): Title, stripped of HTML.
        body (str): Body, sanitized as rich content.
        post_type (str): Resource type of the post.
        post_id (int | None): Explicit id, used by imports and fixtures.

    Returns:
        Post: The newly created post.
    """
    new_post = Post(
        id=post_id,
        post_type=post_type,
        title=sanitize_post_title(title),
        body=sanitize_post_body(body),
        author_id=author.id,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow(),
    )
    db.add(new_post)

    try:
        await db.flush()
        await db.refresh(new_post)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error creating post: {str(e)}")
        raise RestMetaError("Failed to create post", error_code="create_failed") from e

    logger.info(f"Post created: {new_post.id}")
    return new_post


async def update_post(db: AsyncSession, post: Post, data: dict[str, Any]) -> Post:
    """Apply core attribute changes (title, body) to *post*. The caller commits."""
    changed = False
    if data.get("title") is not None:
        post.title = sanitize_post_title(data["title"])
        changed = True
    if data.get("body") is not None:
        post.body = sanitize_post_body(data["body"])
        changed = True

    if not changed:
        return post

    post.updated_at = datetime.utcnow()
    try:
        await db.flush()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error updating post {post.id}: {str(e)}")
        raise RestMetaError("Failed to update post", error_code="update_failed") from e

    return post
