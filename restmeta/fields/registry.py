"""
Field Registry

FieldRegistry: explicit, per-application table of metadata fields bound to
resource types. It is built once in ``create_app()`` and handed to the
routes through ``app.state``; tests build their own.

Fields are keyed by ``(resource_type, name)``. Re-registering an identical
definition is a no-op; registering a different definition under a taken
key is an error, so conflicting configuration is surfaced at startup
instead of silently overwriting the earlier field.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from restmeta.exceptions import FieldConflictError, UnknownResourceTypeError
from restmeta.fields import callbacks
from restmeta.fields.schema import FieldAccess, FieldContext, FieldSchema
from restmeta.fields.values import validate_value

if TYPE_CHECKING:
    from fastapi import Request
    from sqlalchemy.ext.asyncio import AsyncSession

    from restmeta.models.post import Post
    from restmeta.models.user import User

logger = logging.getLogger(__name__)

ReadCallback = Callable[["Post", "FieldDefinition", "AsyncSession"], Awaitable[Any]]
WriteCallback = Callable[[Any, "Post", "FieldDefinition", "User | None", "AsyncSession"], Awaitable[bool]]
PermissionCallback = Callable[["Request", "User | None", "AsyncSession"], Awaitable[bool]]

# Core attributes of a post representation; fields may not shadow them
POST_ATTRIBUTES = frozenset({"id", "type", "title", "body", "author_id", "created_at", "updated_at"})

DEFAULT_RESOURCE_TYPES: dict[str, frozenset[str]] = {
    "post": POST_ATTRIBUTES,
    "page": POST_ATTRIBUTES,
}


@dataclass(frozen=True)
class FieldDefinition:
    """
    A metadata field bound to one or more resource types.

    Attributes:
        resource_types:      Resource types the field was registered on.
        name:                Public name in the JSON representation.
        storage_key:         Key the value is stored under in the attribute store.
        schema:              Declarative schema (type, contexts, readonly).
        access:              Which operations the permission callback gates.
        read_callback:       ``async (post, definition, db) -> value``
        write_callback:      ``async (value, post, definition, user, db) -> True``
        permission_callback: ``async (request, user, db) -> True``
    """

    resource_types: frozenset[str]
    name: str
    storage_key: str
    schema: FieldSchema
    access: FieldAccess
    read_callback: ReadCallback
    write_callback: WriteCallback
    permission_callback: PermissionCallback

    def same_field(self, other: FieldDefinition) -> bool:
        """True if both definitions describe the same field, ignoring resource types."""
        return (
            self.name == other.name
            and self.storage_key == other.storage_key
            and self.schema == other.schema
            and self.access == other.access
            and self.read_callback == other.read_callback
            and self.write_callback == other.write_callback
            and self.permission_callback == other.permission_callback
        )


class FieldRegistry:
    """Registry of metadata fields keyed by (resource_type, name)."""

    def __init__(self, resource_types: dict[str, Iterable[str]] | None = None) -> None:
        types = DEFAULT_RESOURCE_TYPES if resource_types is None else resource_types
        self._reserved: dict[str, frozenset[str]] = {t: frozenset(attrs) for t, attrs in types.items()}
        self._fields: dict[tuple[str, str], FieldDefinition] = {}

    # ── Registration ──────────────────────────────────────────────────────────

    @property
    def resource_types(self) -> frozenset[str]:
        return frozenset(self._reserved)

    def register(
        self,
        resource_types: str | Iterable[str],
        name: str,
        schema: FieldSchema,
        storage_key: str | None = None,
        *,
        access: FieldAccess | str = FieldAccess.READ_WRITE,
        read_callback: ReadCallback | None = None,
        write_callback: WriteCallback | None = None,
        permission_callback: PermissionCallback | None = None,
    ) -> None:
        """
        Register a field on one or more resource types.

        Every resource type is checked before anything is stored, so a
        failing call leaves the registry untouched.

        Raises:
            UnknownResourceTypeError: a resource type is not known to the host.
            FieldConflictError: the name shadows a core attribute, or a
                different field is already registered under it.
        """
        if isinstance(resource_types, str):
            resource_types = [resource_types]
        types = frozenset(resource_types)
        if not types:
            raise ValueError("At least one resource type is required")
        if not name:
            raise ValueError("Field name must not be empty")

        definition = FieldDefinition(
            resource_types=types,
            name=name,
            storage_key=storage_key or name,
            schema=schema,
            access=FieldAccess(access),
            read_callback=read_callback or callbacks.get_meta_callback,
            write_callback=write_callback or callbacks.update_meta_callback,
            permission_callback=permission_callback or callbacks.edit_post_permission_callback,
        )

        pending: list[str] = []
        for resource_type in sorted(types):
            if resource_type not in self._reserved:
                raise UnknownResourceTypeError(resource_type, self.resource_types)
            if name in self._reserved[resource_type]:
                raise FieldConflictError(resource_type, name, "name is a core attribute")

            existing = self._fields.get((resource_type, name))
            if existing is not None:
                if existing.same_field(definition):
                    logger.debug("Field %s already registered on %s", name, resource_type)
                    continue
                raise FieldConflictError(
                    resource_type,
                    name,
                    f"already registered with storage key '{existing.storage_key}'",
                )
            pending.append(resource_type)

        for resource_type in pending:
            for other in self.fields_for(resource_type):
                if other.storage_key == definition.storage_key:
                    logger.warning(
                        "Fields %s and %s on %s share storage key %s",
                        other.name,
                        name,
                        resource_type,
                        definition.storage_key,
                    )
            self._fields[(resource_type, name)] = definition
            logger.info(
                "Field registered: %s.%s (storage_key=%s, access=%s)",
                resource_type,
                name,
                definition.storage_key,
                definition.access.value,
            )

    def unregister(self, resource_type: str, name: str) -> bool:
        """Remove a field from one resource type. Returns False if it was not registered."""
        removed = self._fields.pop((resource_type, name), None)
        if removed is not None:
            logger.info("Field unregistered: %s.%s", resource_type, name)
        return removed is not None

    # ── Lookup ────────────────────────────────────────────────────────────────

    def get(self, resource_type: str, name: str) -> FieldDefinition | None:
        return self._fields.get((resource_type, name))

    def fields_for(self, resource_type: str, context: FieldContext | str | None = None) -> list[FieldDefinition]:
        """Return the fields of a resource type in registration order, optionally filtered by context."""
        return [
            definition
            for (rtype, _), definition in self._fields.items()
            if rtype == resource_type and (context is None or definition.schema.in_context(context))
        ]

    def schema_for(self, resource_type: str) -> dict[str, dict[str, Any]]:
        return {d.name: d.schema.to_json_schema() for d in self.fields_for(resource_type)}

    def __contains__(self, key: tuple[str, str]) -> bool:
        return key in self._fields

    def __len__(self) -> int:
        return len(self._fields)

    # ── Dispatch ──────────────────────────────────────────────────────────────

    async def read_fields(
        self,
        request: Request,
        post: Post,
        user: User | None,
        db: AsyncSession,
        context: FieldContext | str = FieldContext.VIEW,
        gate: bool = True,
    ) -> dict[str, Any]:
        """
        Collect the values of every field exposed in *context* for *post*.

        Fields whose access gates reads run their permission callback first;
        a denial fails the whole read. ``gate=False`` skips the callbacks.
        """
        values: dict[str, Any] = {}
        for definition in self.fields_for(post.post_type, context):
            if gate and definition.access.gates_read:
                await definition.permission_callback(request, user, db)
            values[definition.name] = await definition.read_callback(post, definition, db)
        return values

    async def write_fields(
        self,
        request: Request,
        post: Post,
        payload: dict[str, Any],
        user: User | None,
        db: AsyncSession,
        gate: bool = True,
    ) -> list[str]:
        """
        Write every editable field present in *payload*.

        Readonly fields and fields outside the edit context are ignored.
        Every submitted field is authorized and type-checked before the
        first one is written, so a bad value stores nothing. Nothing is
        committed here; the first failure propagates to the caller, which
        rolls the session back.
        With ``gate=False`` the request-level permission callbacks are
        skipped (requests that create the post have no id to address);
        the write callbacks still check the capability themselves.

        Returns:
            Names of the fields that were written.
        """
        submitted = [
            definition
            for definition in self.fields_for(post.post_type, FieldContext.EDIT)
            if definition.name in payload and not definition.schema.readonly
        ]

        for definition in submitted:
            if gate and definition.access.gates_write:
                await definition.permission_callback(request, user, db)
            validate_value(payload[definition.name], definition.schema.value_type, definition.name)

        for definition in submitted:
            await definition.write_callback(payload[definition.name], post, definition, user, db)
        return [definition.name for definition in submitted]
