"""
Value handling for metadata fields.

Submitted values pass through two stages:

  1. validate  - reject values that cannot be represented as the field's
                 type (FieldValidationError, 400)
  2. sanitize  - normalise accepted values; never rejects

``prepare_value`` runs both.
"""

from __future__ import annotations

import math
import re
from typing import Any

from restmeta.exceptions import FieldValidationError
from restmeta.fields.schema import FieldSchema, ValueType
from restmeta.utils.sanitize import sanitize_text_field

INTEGER_RE = re.compile(r"^[+-]?\d+$")

TRUE_STRINGS = {"true", "1", "yes", "on"}
FALSE_STRINGS = {"false", "0", "no", "off"}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_value(value: Any, value_type: ValueType, field_name: str) -> Any:
    """Return *value* unchanged if it is acceptable for *value_type*, else raise."""
    if value_type is ValueType.STRING:
        if isinstance(value, str) or _is_number(value):
            return value

    elif value_type is ValueType.INTEGER:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, float) and value.is_integer():
            return value
        if isinstance(value, str) and INTEGER_RE.match(value.strip()):
            return value

    elif value_type is ValueType.NUMBER:
        if _is_number(value) and math.isfinite(value):
            return value
        if isinstance(value, str):
            try:
                parsed = float(value.strip())
            except ValueError:
                pass
            else:
                if math.isfinite(parsed):
                    return value

    elif value_type is ValueType.BOOLEAN:
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return value
        if isinstance(value, str) and value.strip().lower() in TRUE_STRINGS | FALSE_STRINGS:
            return value

    raise FieldValidationError(
        field=field_name,
        message=f"{field_name} is not of type {value_type.value}.",
        value_type=value_type.value,
    )


def sanitize_value(value: Any, value_type: ValueType) -> Any:
    """Normalise an already validated value. Idempotent."""
    if value_type is ValueType.STRING:
        return sanitize_text_field(str(value))

    if value_type is ValueType.INTEGER:
        if isinstance(value, str):
            return int(value.strip())
        return int(value)

    if value_type is ValueType.NUMBER:
        if isinstance(value, str):
            value = float(value.strip())
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return bool(value)


def prepare_value(value: Any, schema: FieldSchema, field_name: str) -> Any:
    return sanitize_value(validate_value(value, schema.value_type, field_name), schema.value_type)
