"""
Single-table data access service.

Every entity type shares one DynamoDB table. Primary records are keyed
PK=`TYPE#id` / SK=`TYPE`, and the `SK-PK-index` inverted index lets us list
every record of a type without a scan. Link records (relationships) use keys
supplied by the caller.

boto3 is synchronous, so each table call runs in a worker thread and the
public methods are coroutines that never block the event loop.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional
import uuid

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    NoCredentialsError,
    ReadTimeoutError,
)

from repositories.dynamodb_repo import DynamoDbRepository
from services.keys import (
    KEY_FIELDS,
    EntityType,
    full_key,
    primary_key,
    strip_keys,
    type_name,
    type_prefix,
)
from utils.config import Settings
from utils.error_handling import (
    NotFoundError,
    StoreOperationError,
    StoreUnavailableError,
    ValidationError,
)
from utils.logging_config import get_logger

logger = get_logger(__name__)

IMMUTABLE_FIELDS = frozenset({"id", "createdOn"}) | frozenset(KEY_FIELDS)

_UNAVAILABLE = (EndpointConnectionError, NoCredentialsError, ConnectTimeoutError, ReadTimeoutError)


def utc_timestamp() -> str:
    """Current time as `2024-01-01T12:00:00.000Z`."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _to_store(value: Any) -> Any:
    """DynamoDB rejects floats; store them as Decimal."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: _to_store(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_store(v) for v in value]
    return value


class DynamoDbService:
    """Read, write, list and delete entities in the single table."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        repository: Optional[DynamoDbRepository] = None,
    ):
        self.settings = settings or Settings.from_environment()
        self.repository = repository or DynamoDbRepository(self.settings)

    async def list(self, entity_type: EntityType) -> List[Dict[str, Any]]:
        """Every primary record of a type, across all pages, keys stripped."""
        return await self.list_by_keys(type_name(entity_type), type_prefix(entity_type))

    async def list_by_keys(self, sk: str, pk_prefix: str) -> List[Dict[str, Any]]:
        """Query the inverted index for SK = sk and PK beginning with pk_prefix."""
        logger.debug("Executing index query for page 1", extra={"sk": sk, "pk_prefix": pk_prefix})
        items, last_key = await self._call("query", self.repository.query_index_page, sk, pk_prefix)
        items = list(items)

        page_number = 1
        while last_key:
            page_number += 1
            logger.debug("Loading next page", extra={"page": page_number, "sk": sk})
            page, last_key = await self._call(
                "query", self.repository.query_index_page, sk, pk_prefix, last_key
            )
            items.extend(page)

        logger.info("Listed records", extra={"sk": sk, "count": len(items), "pages": page_number})
        return strip_keys(items)

    async def get(self, entity_id: str, entity_type: EntityType) -> Optional[Dict[str, Any]]:
        """Point lookup by id; None when absent."""
        item = await self._call("get", self.repository.get, primary_key(entity_type, entity_id))
        if not item:
            return None
        return strip_keys([item])[0]

    async def create(self, entity: Dict[str, Any], entity_type: EntityType) -> str:
        """Store a new primary record and return its generated id."""
        entity_id = str(uuid.uuid4())
        record = dict(entity)
        record["id"] = entity_id
        record["createdOn"] = utc_timestamp()
        record.update(primary_key(entity_type, entity_id))

        await self._put(record)
        logger.info("Created record", extra={"type": type_name(entity_type), "id": entity_id})
        return entity_id

    async def create_link(self, record: Dict[str, Any], pk: str, sk: str) -> None:
        """Store a relation record under caller-supplied keys."""
        link = dict(record)
        link["createdOn"] = utc_timestamp()
        link.update(full_key(pk, sk))
        await self._put(link)

    async def update(
        self,
        entity: Dict[str, Any],
        entity_type: EntityType,
        fields: Optional[Iterable[str]] = None,
    ) -> None:
        """
        Merge-patch an existing record.

        `fields` is the set of attributes to overwrite; it defaults to every
        key on `entity`. Attributes outside the mask keep their stored
        values, and id/createdOn/PK/SK are never touched.
        """
        entity_id = entity.get("id")
        if not entity_id:
            raise ValidationError("id is required")

        key = primary_key(entity_type, entity_id)
        existing = await self._call("get", self.repository.get, key)
        if not existing:
            raise NotFoundError(f"{type_name(entity_type)} {entity_id} not found")

        mask = entity.keys() if fields is None else fields
        merged = dict(existing)
        for field in mask:
            if field in IMMUTABLE_FIELDS or field not in entity:
                continue
            merged[field] = entity[field]
        merged.update(key)

        await self._put(merged)
        logger.info("Updated record", extra={"type": type_name(entity_type), "id": entity_id})

    async def delete(self, entity_id: str, entity_type: EntityType) -> None:
        """Delete a primary record; deleting a missing id is not an error."""
        await self._call("delete", self.repository.delete, primary_key(entity_type, entity_id))

    async def delete_link(self, pk: str, sk: str) -> None:
        """Delete a record when both PK and SK are known."""
        await self._call("delete", self.repository.delete, full_key(pk, sk))

    async def _put(self, record: Dict[str, Any]) -> None:
        record["lastModifiedOn"] = utc_timestamp()
        await self._call("put", self.repository.put, _to_store(record))

    async def _call(self, operation: str, fn: Callable[..., Any], *args: Any) -> Any:
        """Run a repository call off the event loop and translate botocore errors."""
        try:
            return await asyncio.to_thread(fn, *args)
        except _UNAVAILABLE as exc:
            logger.error("Store unavailable", extra={"operation": operation, "error": str(exc)})
            raise StoreUnavailableError(str(exc)) from exc
        except (ClientError, BotoCoreError) as exc:
            logger.error("Store operation failed", extra={"operation": operation, "error": str(exc)})
            raise StoreOperationError(str(exc)) from exc
