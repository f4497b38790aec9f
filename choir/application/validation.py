"""Input checks shared by the application services."""

from datetime import date
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ..domain.errors import ValidationError

EnumT = TypeVar("EnumT", bound=Enum)


def parse_enum(enum_cls: Type[EnumT], value: Any, label: str) -> EnumT:
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(item.value for item in enum_cls)
        raise ValidationError(f"{label} must be one of: {allowed}.") from exc


def parse_date(value: Any, label: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{label} must be a date in YYYY-MM-DD format.") from exc


def clean_text(value: Optional[str]) -> str:
    return (value or "").strip()
