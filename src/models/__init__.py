"""Pydantic models for API payloads."""

from models.item import ItemUpdate, NewItem  # noqa: F401
from models.request import (  # noqa: F401
    Authorizer,
    InvocationRequest,
    InvocationResult,
    JwtAuthorizer,
    RequestContext,
)
