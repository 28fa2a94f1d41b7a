"""Uniform Lambda proxy response envelope."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
import json
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel


class HeaderMode(str, Enum):
    """Named header presets accepted by build_response."""

    ALLOW = "ALLOW"


CORS_HEADERS = {
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "*",
}

HeadersModel = Union[HeaderMode, str, Mapping[str, str], None]


def _json_default(value: Any) -> Any:
    # DynamoDB hands numbers back as Decimal.
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True)
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_body(body: Any) -> Optional[str]:
    """Serialize a body unless it already is a string."""
    if body is None or isinstance(body, str):
        return body
    if isinstance(body, BaseModel):
        return body.model_dump_json(by_alias=True)
    return json.dumps(body, default=_json_default)


def build_response(status: int, body: Any = None, headers: HeadersModel = None) -> Dict[str, Any]:
    """
    Build the `{statusCode, headers, body}` envelope returned by every handler.

    `headers` may be the ALLOW preset (wildcard CORS), an explicit mapping, or
    None for no headers. String bodies are passed through untouched so an
    already-serialized payload is never encoded twice.
    """
    if headers == HeaderMode.ALLOW:
        headers_to_use: Dict[str, str] = dict(CORS_HEADERS)
    elif headers:
        headers_to_use = dict(headers)
    else:
        headers_to_use = {}

    return {
        "statusCode": status,
        "headers": headers_to_use,
        "body": serialize_body(body),
    }
