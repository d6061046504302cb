"""Canonical JSON and hashing utilities."""

import hashlib
import json
from decimal import Decimal
from typing import Any


def _canonical_value(obj: Any) -> Any:
    """Convert value for canonical representation."""
    if obj is None or isinstance(obj, (bool, str)):
        return obj
    if isinstance(obj, int):
        return obj
    if isinstance(obj, (float, Decimal)):
        return float(obj)
    if isinstance(obj, dict):
        return {str(k): _canonical_value(v) for k, v in sorted(obj.items())}
    if isinstance(obj, (list, tuple)):
        return [_canonical_value(v) for v in obj]
    return str(obj)


def canonical_json(obj: Any) -> str:
    """Produce canonical JSON string (sorted keys, compact separators, raw unicode)."""
    return json.dumps(
        _canonical_value(obj), sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )


def request_hash(rendered_prompt: str, model: str | None) -> str:
    """SHA256 of the exact generation request (rendered prompt + model)."""
    payload = {"prompt": rendered_prompt, "model": model}
    return hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()


def scalar_text(value: Any) -> str:
    """Text substituted for a variable: strings verbatim, other scalars as JSON."""
    if isinstance(value, str):
        return value
    return canonical_json(value)
