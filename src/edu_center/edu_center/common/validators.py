from __future__ import annotations

from ..core.exceptions import ValidationError


def require_positive_id(value: object, field_name: str) -> int:
    try:
        parsed = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not a valid id") from None
    if parsed <= 0:
        raise ValidationError(f"{field_name} is not a valid id")
    return parsed
