"""DynamoDB repository: thin, synchronous wrapper around the single table."""

from typing import Any, Dict, List, Optional, Tuple

import boto3

from utils.config import Settings


class DynamoDbRepository:
    """Provide one-call-per-method helpers; no key logic lives here."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.resource = boto3.resource(
            "dynamodb",
            region_name=settings.region,
            endpoint_url=settings.endpoint_url,
        )
        self.table = self.resource.Table(settings.table_name)

    def put(self, item: Dict[str, Any]) -> None:
        """Insert or replace an item."""
        self.table.put_item(Item=item)

    def get(self, key: Dict[str, str]) -> Optional[Dict[str, Any]]:
        """Point lookup; None when the key does not exist."""
        resp = self.table.get_item(Key=key)
        return resp.get("Item")

    def delete(self, key: Dict[str, str]) -> None:
        """Delete by full key. DynamoDB does not fail on a missing key."""
        self.table.delete_item(Key=key)

    def query_index_page(
        self,
        sk: str,
        pk_prefix: str,
        exclusive_start_key: Optional[Dict[str, Any]] = None,
    ) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        """Query one page of the inverted index; return items and the next cursor."""
        kwargs: Dict[str, Any] = {
            "IndexName": self.settings.index_name,
            "KeyConditionExpression": "SK = :sk and begins_with(PK, :pk)",
            "ExpressionAttributeValues": {":sk": sk, ":pk": pk_prefix},
        }
        if exclusive_start_key:
            kwargs["ExclusiveStartKey"] = exclusive_start_key
        resp = self.table.query(**kwargs)
        return resp.get("Items", []), resp.get("LastEvaluatedKey")
