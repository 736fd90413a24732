"""
PermissionService

Host capability checks. ``edit_post`` is a meta capability resolved
against a specific post:

  - roles with the wildcard ``*`` may edit any post
  - ``edit_others_posts`` allows editing any post
  - ``edit_posts`` allows editing posts the user authored

Anonymous callers and posts that do not exist are never granted.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from restmeta.models.post import Post
from restmeta.models.user import User
from restmeta.permissions_config.permissions import get_role_permissions

logger = logging.getLogger(__name__)


class PermissionService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def get_capabilities(self, user: User) -> set[str]:
        """Return the user's global capabilities (role table plus per-role extras)."""
        role_name = user.role.name if user.role else "subscriber"
        try:
            capabilities = set(get_role_permissions(role_name))
        except ValueError:
            logger.warning("User %s has unknown role %r", user.id, role_name)
            capabilities = set()
        if user.role and user.role.permissions:
            capabilities.update(user.role.permissions)
        return capabilities

    def has_capability(self, user: User | None, capability: str) -> bool:
        if user is None:
            return False
        capabilities = self.get_capabilities(user)
        return "*" in capabilities or capability in capabilities

    async def user_can(self, user: User | None, capability: str, post_id: int | None = None) -> bool:
        """
        Answer "may *user* perform *capability*", optionally on one post.

        Only ``edit_post`` is resolved against the post; every other
        capability is a plain role lookup.
        """
        if user is None:
            return False

        if capability != "edit_post":
            return self.has_capability(user, capability)

        if post_id is None:
            return False

        capabilities = self.get_capabilities(user)
        author_id = await self._get_author_id(post_id)
        if author_id is None:
            logger.debug("edit_post denied: post %s does not exist", post_id)
            return False

        if "*" in capabilities or "edit_others_posts" in capabilities:
            return True
        return "edit_posts" in capabilities and author_id == user.id

    async def _get_author_id(self, post_id: int) -> int | None:
        result = await self.db.execute(select(Post.author_id).where(Post.id == post_id))
        return result.scalar_one_or_none()
