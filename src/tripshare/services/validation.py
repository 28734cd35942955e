"""Coercion of raw ids and enum values into typed ones, raising ValidationError."""

import uuid
from enum import Enum
from typing import TypeVar

from tripshare.errors import ErrorCode, ValidationError

E = TypeVar("E", bound=Enum)


def coerce_enum(value: object, enum_cls: type[E], code: ErrorCode = ErrorCode.VALIDATION_ERROR) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as e:
        allowed = ", ".join(str(m.value) for m in enum_cls)
        raise ValidationError(f"Invalid {enum_cls.__name__} {value!r}; expected one of: {allowed}", code=code) from e


def coerce_uuid(value: object, field: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {field}: {value!r}", code=ErrorCode.INVALID_REQUEST) from e
