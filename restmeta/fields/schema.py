"""Field schema types: value type, request contexts and access coverage."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class ValueType(str, enum.Enum):
    """Scalar types a metadata field may hold."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"


class FieldContext(str, enum.Enum):
    """Request contexts a field is exposed in."""

    VIEW = "view"  # GET representations
    EDIT = "edit"  # update bodies and ?context=edit representations


class FieldAccess(str, enum.Enum):
    """Which operations the field's permission callback gates."""

    PUBLIC = "public"
    WRITE_ONLY = "write_only"
    READ_WRITE = "read_write"

    @property
    def gates_read(self) -> bool:
        return self is FieldAccess.READ_WRITE

    @property
    def gates_write(self) -> bool:
        return self is not FieldAccess.PUBLIC


@dataclass(frozen=True)
class FieldSchema:
    """
    Declarative schema of a metadata field.

    Attributes:
        description: Human-readable description advertised to API consumers.
        value_type:  Scalar type of the stored value.
        contexts:    Contexts the field appears in (view, edit).
        readonly:    Readonly fields are never written from request bodies.
    """

    description: str
    value_type: ValueType = ValueType.STRING
    contexts: frozenset[FieldContext] = field(
        default_factory=lambda: frozenset({FieldContext.VIEW, FieldContext.EDIT})
    )
    readonly: bool = False

    def __post_init__(self) -> None:
        # Accept plain strings so schemas can be built from settings
        object.__setattr__(self, "value_type", ValueType(self.value_type))
        object.__setattr__(self, "contexts", frozenset(FieldContext(c) for c in self.contexts))

    def in_context(self, context: FieldContext | str) -> bool:
        return FieldContext(context) in self.contexts

    @property
    def empty_value(self) -> Any:
        """Value reported for resources that never stored the field."""
        return "" if self.value_type is ValueType.STRING else None

    def to_json_schema(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "type": self.value_type.value,
            "context": sorted(c.value for c in self.contexts),
            "readonly": self.readonly,
        }
