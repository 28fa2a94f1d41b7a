"""
Local table bootstrap.

Makes sure the single table exists on DynamoDB Local before the emulation
server starts taking requests. The schema mirrors the CDK data layer.
"""

from typing import Any, Dict, List

import boto3

from utils.config import Settings
from utils.logging_config import get_logger

logger = get_logger(__name__)


def table_definition(table_name: str, index_name: str) -> Dict[str, Any]:
    """CreateTable arguments for the PK/SK table with its inverted SK-PK index."""
    return {
        "TableName": table_name,
        "BillingMode": "PAY_PER_REQUEST",
        "KeySchema": [
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        "AttributeDefinitions": [
            {"AttributeName": "PK", "AttributeType": "S"},
            {"AttributeName": "SK", "AttributeType": "S"},
        ],
        "GlobalSecondaryIndexes": [
            {
                "IndexName": index_name,
                "KeySchema": [
                    {"AttributeName": "SK", "KeyType": "HASH"},
                    {"AttributeName": "PK", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            }
        ],
    }


class LocalTableSetup:
    """Create the table on the local endpoint when it is missing."""

    def __init__(self, settings: Settings, client=None):
        self.settings = settings
        self.client = client or boto3.client(
            "dynamodb",
            region_name=settings.region,
            endpoint_url=settings.local_endpoint,
        )

    def setup(self) -> bool:
        """Return True when the table had to be created."""
        table_name = self.settings.table_name
        if table_name in self.list_tables():
            logger.info("Table already exists", extra={"table": table_name})
            return False

        self.create_table()
        return True

    def list_tables(self) -> List[str]:
        names: List[str] = []
        for page in self.client.get_paginator("list_tables").paginate():
            names.extend(page.get("TableNames", []))
        logger.info("Found tables", extra={"count": len(names)})
        return names

    def create_table(self) -> None:
        table_name = self.settings.table_name
        logger.info("Creating table", extra={"table": table_name})
        self.client.create_table(**table_definition(table_name, self.settings.index_name))
        self.client.get_waiter("table_exists").wait(TableName=table_name)
        logger.info("Table created", extra={"table": table_name})
