"""Argument checks shared by the engines."""

from typing import Any, List, Optional

from .errors import ValidationError

# Largest value SQLite stores in an INTEGER column
MAX_INTEGER = 2 ** 63 - 1


def require_str(value: Any, field: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"'{field}' must be a string", field=field)
    return value


def require_limit(value: Any, field: str = "limit") -> int:
    """Row limits are positive integers; bool is rejected even though it is an int."""
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= MAX_INTEGER:
        raise ValidationError(
            f"'{field}' must be a positive integer no greater than {MAX_INTEGER}",
            field=field
        )
    return value


def optional_id(value: Any, field: str = "id") -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"'{field}' must be an integer", field=field)
    if not -MAX_INTEGER - 1 <= value <= MAX_INTEGER:
        raise ValidationError(f"'{field}' must be a 64-bit integer", field=field)
    return value


def string_list(value: Any, field: str) -> List[str]:
    """Accept None as an empty list; anything else must be a list of strings."""
    if value is None:
        return []
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ValidationError(f"'{field}' must be a list of strings", field=field)
    return list(value)
