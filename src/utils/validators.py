"""Lightweight validation helpers for request payloads."""

import json
from typing import Any, Dict, Optional

from utils.error_handling import ValidationError


def ensure_present(value: Any, field: str) -> None:
    """Raise ValidationError if value is falsy."""
    if value in (None, "", []):
        raise ValidationError(f"{field} is required")


def parse_json_body(body: Optional[str]) -> Dict[str, Any]:
    """Decode a request body that must hold a JSON object."""
    ensure_present(body, "body")
    try:
        payload = json.loads(body)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"body is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValidationError("body must be a JSON object")
    return payload
