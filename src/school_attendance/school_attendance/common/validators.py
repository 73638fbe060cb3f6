from __future__ import annotations

from typing import Optional

from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError


def require_positive_id(value: object, field_name: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a valid id")
    if parsed <= 0:
        raise ValidationError(f"{field_name} is not a valid id")
    return parsed


def optional_id(value: object, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return require_positive_id(value, field_name)


def require_status(value: object) -> AttendanceStatus:
    if isinstance(value, AttendanceStatus):
        return value
    try:
        return AttendanceStatus(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in AttendanceStatus)
        raise ValidationError(f"Invalid attendance status {value!r} (expected one of: {allowed})")


def clean_note(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None
