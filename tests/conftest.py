"""
Pytest configuration to ensure paths are set up correctly for tests.

This allows imports like `from handlers import items` to work when running
tests, simulating the Lambda environment where code is deployed from the
src/ directory. It also provides an in-memory stand-in for the DynamoDB
table so the data layer can be exercised offline.
"""

import copy
import os
import sys
from pathlib import Path

import boto3
import pytest


def _ensure_paths_on_sys_path() -> None:
    """Add repository root AND src/ to sys.path if missing.

    The src/ directory is added to simulate Lambda's import behavior,
    where Code.from_asset("src") makes src/ the root of the package.
    """
    repo_root = Path(__file__).resolve().parents[1]
    src_root = repo_root / "src"

    root_str = str(repo_root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)

    src_str = str(src_root)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


_ensure_paths_on_sys_path()

# Ensure boto3 has offline-friendly defaults so tests do not require AWS access.
os.environ.setdefault("AWS_REGION", "eu-west-2")
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-2")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")
os.environ.setdefault("AWS_SESSION_TOKEN", "test")

# Lambda environment variables used by the data layer
os.environ.setdefault("REGION", "eu-west-2")
os.environ.setdefault("TABLE_NAME", "test-single-table")

boto3.setup_default_session(region_name="eu-west-2")


class FakeTable:
    """
    In-memory DynamoDB Table exposing the calls the repository makes.

    Queries on the inverted index return records ordered by PK and split into
    pages of `page_size`, with LastEvaluatedKey set like the real service.
    """

    def __init__(self, page_size: int = 100):
        self.page_size = page_size
        self.records = {}
        self.query_calls = []

    def put_item(self, Item):
        self.records[(Item["PK"], Item["SK"])] = copy.deepcopy(Item)
        return {}

    def get_item(self, Key):
        item = self.records.get((Key["PK"], Key["SK"]))
        return {"Item": copy.deepcopy(item)} if item else {}

    def delete_item(self, Key):
        self.records.pop((Key["PK"], Key["SK"]), None)
        return {}

    def query(self, IndexName, KeyConditionExpression, ExpressionAttributeValues, ExclusiveStartKey=None):
        self.query_calls.append(
            {"IndexName": IndexName, "ExclusiveStartKey": ExclusiveStartKey}
        )
        sk = ExpressionAttributeValues[":sk"]
        prefix = ExpressionAttributeValues[":pk"]
        matching = sorted(
            (r for r in self.records.values() if r["SK"] == sk and r["PK"].startswith(prefix)),
            key=lambda r: r["PK"],
        )
        if ExclusiveStartKey:
            matching = [r for r in matching if r["PK"] > ExclusiveStartKey["PK"]]

        page = matching[: self.page_size]
        resp = {"Items": copy.deepcopy(page), "Count": len(page)}
        if len(matching) > self.page_size:
            last = page[-1]
            resp["LastEvaluatedKey"] = {"PK": last["PK"], "SK": last["SK"]}
        return resp


@pytest.fixture
def fake_table():
    return FakeTable()


@pytest.fixture
def settings():
    from utils.config import Settings

    return Settings(region="eu-west-2", table_name="test-single-table")


@pytest.fixture
def dynamodb_service(fake_table, settings):
    """A real DynamoDbService whose repository talks to FakeTable."""
    from repositories.dynamodb_repo import DynamoDbRepository
    from services.dynamodb_service import DynamoDbService

    repository = DynamoDbRepository(settings)
    repository.table = fake_table
    return DynamoDbService(settings=settings, repository=repository)


@pytest.fixture
def items_service(monkeypatch, dynamodb_service):
    """Route the items handler to the fake-backed service."""
    from handlers import items

    monkeypatch.setattr(items, "_dynamodb_service", dynamodb_service)
    return dynamodb_service


@pytest.fixture
def dispatcher():
    from handlers.dispatcher import Dispatcher
    from handlers.manifest import HANDLER_UNITS
    from handlers.registry import RouteRegistry

    return Dispatcher(RouteRegistry.from_manifest(HANDLER_UNITS))
