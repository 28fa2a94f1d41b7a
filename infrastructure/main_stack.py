"""
Main CDK Stack for the single-table CRUD API.
"""

from aws_cdk import (
    Stack,
    Tags,
    CfnOutput,
)
from constructs import Construct

from infrastructure.constructs.data_layer import DataLayerConstruct
from infrastructure.constructs.api_layer import ApiLayerConstruct
from infrastructure.config.settings import Settings


class CrudApiStack(Stack):
    """Main stack wiring the table and the API together."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        settings: Settings,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        Tags.of(self).add("Project", "single-table-crud")
        Tags.of(self).add("Environment", settings.environment)
        Tags.of(self).add("ManagedBy", "cdk")

        data_construct = DataLayerConstruct(
            self,
            "DataLayer",
            environment=settings.environment,
            table_name=settings.table_name,
            index_name=settings.index_name,
        )

        api_construct = ApiLayerConstruct(
            self,
            "ApiLayer",
            environment=settings.environment,
            region=settings.aws_region,
            table_name=data_construct.table.table_name,
            log_level=settings.log_level,
            lambda_memory_mb=settings.lambda_memory_mb,
            lambda_timeout_seconds=settings.lambda_timeout_seconds,
        )

        # Covers the table and its indexes (Query on SK-PK-index).
        data_construct.table.grant_read_write_data(api_construct.main_lambda)

        CfnOutput(self, "ApiEndpoint", value=api_construct.api.api_endpoint)
        CfnOutput(self, "TableName", value=data_construct.table.table_name)
