"""
Default field callbacks.

These back a field with the post attribute store and gate it behind the
``edit_post`` capability of the addressed post:

  - get_meta_callback             read the stored value
  - update_meta_callback          authorize, validate, sanitize, persist
  - edit_post_permission_callback request-level gate (400 / 403)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from restmeta.exceptions import FieldPermissionError, FieldUpdateError
from restmeta.fields.values import prepare_value
from restmeta.services.meta_store import MetaStore
from restmeta.services.permission_service import PermissionService
from restmeta.services.post_service import parse_post_id

if TYPE_CHECKING:
    from fastapi import Request
    from sqlalchemy.ext.asyncio import AsyncSession

    from restmeta.fields.registry import FieldDefinition
    from restmeta.models.post import Post
    from restmeta.models.user import User

logger = logging.getLogger(__name__)


async def get_meta_callback(post: Post, definition: FieldDefinition, db: AsyncSession) -> Any:
    return await MetaStore(db).get_meta(post.id, definition.storage_key, default=definition.schema.empty_value)


async def update_meta_callback(
    value: Any,
    post: Post,
    definition: FieldDefinition,
    user: User | None,
    db: AsyncSession,
) -> bool:
    """
    Store a submitted value for *post*.

    Raises:
        FieldPermissionError: the user may not edit this post; nothing is written.
        FieldValidationError: the value cannot be represented as the field's type.
        FieldUpdateError:     the attribute store reported a write failure.
    """
    post_id = post.id
    if not await PermissionService(db).user_can(user, "edit_post", post_id):
        logger.warning(
            "Write to %s denied for user %s on post %s",
            definition.name,
            getattr(user, "id", None),
            post_id,
        )
        raise FieldPermissionError("You do not have permission to edit this post.", post_id=post_id)

    sanitized = prepare_value(value, definition.schema, definition.name)

    if not await MetaStore(db).update_meta(post_id, definition.storage_key, sanitized):
        raise FieldUpdateError(definition.name)

    logger.info("Field %s updated on post %s", definition.name, post_id)
    return True


async def edit_post_permission_callback(request: Request, user: User | None, db: AsyncSession) -> bool:
    """
    Allow the request only if the caller may edit the post it addresses.

    The post id is taken from the ``post_id`` or ``id`` path parameter, or
    the ``id`` query parameter.

    Raises:
        InvalidPostIdError:   the id is missing or not a positive integer.
        FieldPermissionError: the caller lacks ``edit_post`` on that post.
    """
    raw_id = request.path_params.get("post_id", request.path_params.get("id"))
    if raw_id is None:
        raw_id = request.query_params.get("id")
    post_id = parse_post_id(raw_id)

    if not await PermissionService(db).user_can(user, "edit_post", post_id):
        raise FieldPermissionError(post_id=post_id)
    return True
