"""
CRUD handler unit for the `items` resource.

One class serves all five routes; each operation validates its input, calls
the data service and translates domain errors into an envelope itself.
"""

from __future__ import annotations

from typing import Dict, Optional

from pydantic import ValidationError as PayloadError

from handlers.registry import HttpMethod, controller, route
from models.item import ItemUpdate, NewItem
from models.request import InvocationRequest
from services.keys import ResourceType
from utils.error_handling import AppError, NotFoundError, ValidationError, to_response
from utils.logging_config import get_logger
from utils.response import HeaderMode, build_response
from utils.validators import ensure_present, parse_json_body

logger = get_logger(__name__)

# Lazy-loaded service to avoid creating boto3 resources at import time
_dynamodb_service: Optional["DynamoDbService"] = None


def _get_dynamodb_service():
    """Lazy-load DynamoDbService."""
    global _dynamodb_service
    if _dynamodb_service is None:
        from services.dynamodb_service import DynamoDbService
        _dynamodb_service = DynamoDbService()
    return _dynamodb_service


def _payload_error(exc: PayloadError) -> ValidationError:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "body"
    return ValidationError(f"{location}: {first.get('msg', 'invalid value')}")


def _failure(action: str, exc: Exception) -> Dict:
    if isinstance(exc, AppError):
        logger.warning(f"Failed to {action}", extra={"status": exc.status_code, "error": str(exc)})
        return to_response(exc)
    logger.exception(f"Failed to {action}")
    return build_response(500, {"message": str(exc)}, HeaderMode.ALLOW)


@controller("items")
class ItemsController:
    """GET/POST /items and GET/PUT/DELETE /items/{id}."""

    resource_type = ResourceType.ITEM

    @route(HttpMethod.GET)
    async def list(self, request: InvocationRequest) -> Dict:
        try:
            logger.info("Fetching list of Items")
            items = await _get_dynamodb_service().list(self.resource_type)
            return build_response(200, items, HeaderMode.ALLOW)
        except Exception as exc:
            return _failure("list Items", exc)

    @route(HttpMethod.GET, "{id}")
    async def get(self, request: InvocationRequest) -> Dict:
        item_id = request.path_param("id")
        try:
            ensure_present(item_id, "id")
            item = await _get_dynamodb_service().get(item_id, self.resource_type)
            if item is None:
                raise NotFoundError(f"Item {item_id} not found")
            return build_response(200, item, HeaderMode.ALLOW)
        except Exception as exc:
            return _failure(f"get Item {item_id}", exc)

    @route(HttpMethod.POST)
    async def create(self, request: InvocationRequest) -> Dict:
        try:
            logger.info("Creating a new Item")
            try:
                new_item = NewItem.model_validate(parse_json_body(request.body))
            except PayloadError as exc:
                raise _payload_error(exc) from exc

            item_id = await _get_dynamodb_service().create(new_item.model_dump(), self.resource_type)
            return build_response(201, {"id": item_id}, HeaderMode.ALLOW)
        except Exception as exc:
            return _failure("create a new Item", exc)

    @route(HttpMethod.PUT, "{id}")
    async def update(self, request: InvocationRequest) -> Dict:
        item_id = request.path_param("id")
        try:
            ensure_present(item_id, "id")
            try:
                update = ItemUpdate.model_validate(parse_json_body(request.body))
            except PayloadError as exc:
                raise _payload_error(exc) from exc
            if update.id is not None and update.id != item_id:
                raise ValidationError("body id does not match path id")

            changes = update.changes()
            await _get_dynamodb_service().update(
                {**changes, "id": item_id}, self.resource_type, fields=changes.keys()
            )
            return build_response(204, None, HeaderMode.ALLOW)
        except Exception as exc:
            return _failure(f"update Item {item_id}", exc)

    @route(HttpMethod.DELETE, "{id}")
    async def delete(self, request: InvocationRequest) -> Dict:
        item_id = request.path_param("id")
        try:
            ensure_present(item_id, "id")
            await _get_dynamodb_service().delete(item_id, self.resource_type)
            return build_response(204, None, HeaderMode.ALLOW)
        except Exception as exc:
            return _failure(f"delete Item {item_id}", exc)
