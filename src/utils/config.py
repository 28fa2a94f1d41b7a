"""
Runtime settings for the data layer.

Values come from the Lambda environment (set by the CDK stack) or from a
local `.env` file when running the emulation server.
"""

from dataclasses import dataclass
import os
from typing import Optional

DEFAULT_LOCAL_ENDPOINT = "http://localhost:8000"
INDEX_NAME = "SK-PK-index"

_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Where the single table lives and how to reach it."""

    region: str = "eu-west-2"
    table_name: str = ""
    is_local: bool = False
    local_endpoint: str = DEFAULT_LOCAL_ENDPOINT
    index_name: str = INDEX_NAME

    @property
    def endpoint_url(self) -> Optional[str]:
        """Endpoint override for boto3; None targets the real service."""
        return self.local_endpoint if self.is_local else None

    @classmethod
    def from_environment(cls) -> "Settings":
        """Load settings from environment variables."""
        region = (
            os.environ.get("REGION")
            or os.environ.get("AWS_REGION")
            or cls.region
        )
        return cls(
            region=region,
            table_name=os.environ.get("TABLE_NAME", ""),
            is_local=os.environ.get("IS_LOCAL", "").strip().lower() in _TRUTHY,
            local_endpoint=os.environ.get("LOCAL_DYNAMODB_ENDPOINT", DEFAULT_LOCAL_ENDPOINT),
        )
