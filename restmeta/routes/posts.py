from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from restmeta.auth import get_current_user, get_optional_user
from restmeta.database import get_db
from restmeta.exceptions import FieldPermissionError, FieldValidationError
from restmeta.fields.registry import FieldRegistry
from restmeta.fields.schema import FieldContext
from restmeta.models.post import Post
from restmeta.models.user import User
from restmeta.schemas import PostCreate, PostUpdate
from restmeta.services import post_service
from restmeta.services.permission_service import PermissionService
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


def get_field_registry(request: Request) -> FieldRegistry:
    return request.app.state.field_registry


def serialize_post(post: Post) -> dict[str, Any]:
    return {
        "id": post.id,
        "type": post.post_type,
        "title": post.title,
        "body": post.body,
        "author_id": post.author_id,
        "created_at": post.created_at.isoformat(),
        "updated_at": post.updated_at.isoformat(),
    }


async def render_post(
    request: Request,
    post: Post,
    user: Optional[User],
    db: AsyncSession,
    registry: FieldRegistry,
    context: FieldContext,
    gate: bool = True,
) -> dict[str, Any]:
    data = serialize_post(post)
    data.update(await registry.read_fields(request, post, user, db, context, gate=gate))
    return data


@router.post("/posts", status_code=status.HTTP_201_CREATED)
async def create_post(
    request: Request,
    payload: PostCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    registry: FieldRegistry = Depends(get_field_registry),
):
    if payload.type not in registry.resource_types:
        raise FieldValidationError(field="type", message=f"Unknown post type '{payload.type}'.")
    if not PermissionService(db).has_capability(current_user, "edit_posts"):
        raise FieldPermissionError("You are not allowed to create posts.", capability="edit_posts")

    try:
        post = await post_service.create_post(
            db, author=current_user, title=payload.title, body=payload.body, post_type=payload.type
        )
        written = await registry.write_fields(request, post, payload.field_values(), current_user, db, gate=False)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info(f"User {current_user.id} created post {post.id} (fields: {written})")

    # The new post has no id in the request path to authorize against
    return await render_post(request, post, current_user, db, registry, FieldContext.EDIT, gate=False)


@router.get("/posts/{post_id}")
async def read_post(
    request: Request,
    post_id: str,
    context: FieldContext = Query(FieldContext.VIEW),
    db: AsyncSession = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
    registry: FieldRegistry = Depends(get_field_registry),
):
    post = await post_service.get_post(db, post_service.parse_post_id(post_id))

    if context is FieldContext.EDIT and not await PermissionService(db).user_can(current_user, "edit_post", post.id):
        raise FieldPermissionError("Sorry, you are not allowed to edit this post.", post_id=post.id)

    return await render_post(request, post, current_user, db, registry, context)


@router.api_route("/posts/{post_id}", methods=["PUT", "PATCH", "POST"])
async def update_post(
    request: Request,
    post_id: str,
    payload: PostUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
    registry: FieldRegistry = Depends(get_field_registry),
):
    post = await post_service.get_post(db, post_service.parse_post_id(post_id))

    core_changes = payload.model_dump(include={"title", "body"}, exclude_none=True)
    if core_changes and not await PermissionService(db).user_can(current_user, "edit_post", post.id):
        raise FieldPermissionError("Sorry, you are not allowed to edit this post.", post_id=post.id)

    # Core attributes and fields are committed together or not at all
    try:
        if core_changes:
            post = await post_service.update_post(db, post, core_changes)
        written = await registry.write_fields(request, post, payload.field_values(), current_user, db)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info(f"Post {post.id} updated (core: {sorted(core_changes)}, fields: {written})")

    return await render_post(request, post, current_user, db, registry, FieldContext.VIEW)
