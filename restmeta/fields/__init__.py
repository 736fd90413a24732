"""
Metadata fields for the content API.

A field is declared once at startup on one or more resource types and is
then embedded in every representation of those resources, keyed by its
public name. Reads and writes go through the callbacks carried by its
FieldDefinition.
"""

from restmeta.fields.registry import FieldDefinition, FieldRegistry
from restmeta.fields.schema import FieldAccess, FieldContext, FieldSchema, ValueType

__all__ = [
    "FieldAccess",
    "FieldContext",
    "FieldDefinition",
    "FieldRegistry",
    "FieldSchema",
    "ValueType",
]
