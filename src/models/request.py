"""Transport-agnostic invocation shapes exchanged with handler units."""

import base64
import binascii
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class JwtAuthorizer(BaseModel):
    """JWT authorizer output on HTTP API (v2) events."""

    model_config = ConfigDict(extra="allow")

    claims: Dict[str, Any] = Field(default_factory=dict)


class Authorizer(BaseModel):
    """Authorizer output attached by API Gateway.

    REST APIs put Cognito claims at `authorizer.claims`, HTTP APIs put JWT
    claims at `authorizer.jwt.claims`.
    """

    model_config = ConfigDict(extra="allow")

    claims: Dict[str, Any] = Field(default_factory=dict)
    jwt: Optional[JwtAuthorizer] = None


class RequestContext(BaseModel):
    model_config = ConfigDict(extra="allow")

    authorizer: Authorizer = Field(default_factory=Authorizer)


class InvocationRequest(BaseModel):
    """
    What a handler operation receives.

    Field names follow the API Gateway proxy event so a real Lambda event
    validates directly; `body` is always a string (or absent) and handlers
    decode it themselves.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    path_parameters: Dict[str, str] = Field(default_factory=dict, alias="pathParameters")
    query_string_parameters: Dict[str, str] = Field(
        default_factory=dict, alias="queryStringParameters"
    )
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[str] = None
    request_context: RequestContext = Field(default_factory=RequestContext, alias="requestContext")

    @model_validator(mode="before")
    @classmethod
    def _decode_body(cls, data):
        """Binary payloads arrive base64 encoded with `isBase64Encoded` set."""
        if not isinstance(data, dict) or not data.get("isBase64Encoded"):
            return data
        body = data.get("body")
        if isinstance(body, str):
            try:
                decoded = base64.b64decode(body, validate=True)
            except binascii.Error as exc:
                raise ValueError("body is not valid base64") from exc
            data = {**data, "body": decoded.decode("utf-8", errors="replace")}
        return data

    @field_validator("path_parameters", "query_string_parameters", "headers", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        # API Gateway sends null rather than {} when there are none.
        return value or {}

    @field_validator("request_context", mode="before")
    @classmethod
    def _none_context(cls, value):
        return value or {}

    @property
    def claims(self) -> Dict[str, Any]:
        authorizer = self.request_context.authorizer
        if authorizer.claims:
            return authorizer.claims
        return authorizer.jwt.claims if authorizer.jwt else {}

    def path_param(self, name: str) -> Optional[str]:
        return self.path_parameters.get(name)


class InvocationResult(BaseModel):
    """What a handler operation returns: the Lambda proxy response shape."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    status_code: int = Field(default=200, alias="statusCode")
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Optional[str] = None

    @field_validator("headers", mode="before")
    @classmethod
    def _none_headers(cls, value):
        return value or {}

    def to_proxy(self) -> Dict[str, Any]:
        """Render as the dict API Gateway expects from a proxy integration."""
        return {
            "statusCode": self.status_code,
            "headers": self.headers,
            "body": self.body if self.body is not None else "",
        }
