"""
Environment-specific configuration settings for the CDK app.

On-demand defaults suited to development; prod only changes retention and
Lambda sizing.
"""

from dataclasses import dataclass
import os


@dataclass
class Settings:
    """Deployment settings."""

    # Environment / stage name, also used as resource name prefix
    environment: str = "dev"
    aws_region: str = "eu-west-2"

    # Single table
    table_name: str = "dev-single-table"
    index_name: str = "SK-PK-index"

    # Lambda Configuration
    lambda_memory_mb: int = 256
    lambda_timeout_seconds: int = 30
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> "Settings":
        """Load settings from environment variables."""
        env = os.environ.get("ENVIRONMENT") or os.environ.get("STAGE", "dev")
        region = os.environ.get("REGION") or os.environ.get("CDK_DEFAULT_REGION") or cls.aws_region
        table_name = os.environ.get("TABLE_NAME", f"{env}-single-table")

        # Production overrides
        if env == "prod":
            return cls(
                environment="prod",
                aws_region=region,
                table_name=table_name,
                lambda_memory_mb=512,
                log_level="WARNING",
            )

        return cls(environment=env, aws_region=region, table_name=table_name)
