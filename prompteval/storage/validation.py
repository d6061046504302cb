"""Input checks run before any write."""

from typing import Any

from prompteval.errors import ValidationError

SCALAR_TYPES = (str, int, float, bool)


def require_text(value: str | None, field: str) -> str:
    """Reject missing or blank strings; returns the value stripped."""
    if value is None or not value.strip():
        raise ValidationError(f"{field} must not be empty")
    return value.strip()


def validate_input_mapping(data: Any) -> dict[str, Any]:
    """Test case input: string keys, scalar values. Keys are otherwise unconstrained."""
    if not isinstance(data, dict):
        raise ValidationError("input must be an object mapping variable names to values")
    for key, value in data.items():
        if not isinstance(key, str) or not key:
            raise ValidationError(f"input keys must be non-empty strings, got {key!r}")
        if not isinstance(value, SCALAR_TYPES):
            raise ValidationError(
                f"input value for '{key}' must be a string, number or boolean"
            )
    return dict(data)
