"""
Local table bootstrap tests with a mocked DynamoDB client.
"""

from unittest.mock import MagicMock

from local.table_setup import LocalTableSetup, table_definition
from utils.config import Settings


def _client(existing):
    client = MagicMock()
    paginator = MagicMock()
    paginator.paginate.return_value = [{"TableNames": existing[:1]}, {"TableNames": existing[1:]}]
    client.get_paginator.return_value = paginator
    return client


def test_creates_missing_table():
    client = _client(["other"])
    setup = LocalTableSetup(Settings(table_name="crud", is_local=True), client=client)

    assert setup.setup() is True

    client.create_table.assert_called_once_with(**table_definition("crud", "SK-PK-index"))
    client.get_waiter.assert_called_once_with("table_exists")
    client.get_waiter.return_value.wait.assert_called_once_with(TableName="crud")


def test_existing_table_is_left_alone():
    client = _client(["other", "crud"])
    setup = LocalTableSetup(Settings(table_name="crud"), client=client)

    assert setup.setup() is False
    client.create_table.assert_not_called()


def test_table_definition_matches_single_table_schema():
    definition = table_definition("crud", "SK-PK-index")

    assert definition["BillingMode"] == "PAY_PER_REQUEST"
    assert definition["KeySchema"] == [
        {"AttributeName": "PK", "KeyType": "HASH"},
        {"AttributeName": "SK", "KeyType": "RANGE"},
    ]
    (index,) = definition["GlobalSecondaryIndexes"]
    assert index["IndexName"] == "SK-PK-index"
    assert index["KeySchema"] == [
        {"AttributeName": "SK", "KeyType": "HASH"},
        {"AttributeName": "PK", "KeyType": "RANGE"},
    ]
    assert index["Projection"] == {"ProjectionType": "ALL"}
