"""Startup registration of the configured ``custom_meta`` field."""

import logging

from restmeta.config import Settings
from restmeta.fields.registry import FieldRegistry
from restmeta.fields.schema import FieldAccess, FieldContext, FieldSchema, ValueType

logger = logging.getLogger(__name__)


def custom_meta_schema(settings: Settings) -> FieldSchema:
    return FieldSchema(
        description=settings.custom_meta_description,
        value_type=ValueType.STRING,
        contexts=frozenset({FieldContext.VIEW, FieldContext.EDIT}),
        readonly=False,
    )


def register_custom_meta(registry: FieldRegistry, settings: Settings) -> None:
    """
    Register the custom meta field on every configured resource type.

    The public name and the storage key come from settings; by default the
    value is exposed as ``custom_meta`` and stored under ``_custom_meta``.
    """
    registry.register(
        settings.custom_meta_resource_types,
        settings.custom_meta_field_name,
        custom_meta_schema(settings),
        storage_key=settings.custom_meta_storage_key,
        access=FieldAccess(settings.custom_meta_access),
    )
    logger.debug(
        "custom meta field ready on %s",
        ", ".join(settings.custom_meta_resource_types),
    )
