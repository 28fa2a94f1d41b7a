"""Composite key construction for the single-table layout."""

from enum import Enum
from typing import Any, Dict, Iterable, List, Union

KEY_FIELDS = ("PK", "SK")


class ResourceType(str, Enum):
    """Primary entity types stored in the table."""

    ITEM = "ITEM"


EntityType = Union[ResourceType, str]


def type_name(entity_type: EntityType) -> str:
    return entity_type.value if isinstance(entity_type, ResourceType) else str(entity_type)


def type_prefix(entity_type: EntityType) -> str:
    """PK prefix shared by every primary record of a type, e.g. `ITEM#`."""
    return f"{type_name(entity_type)}#"


def primary_key(entity_type: EntityType, entity_id: str) -> Dict[str, str]:
    """Key of a primary record: PK=`TYPE#id`, SK=`TYPE`."""
    return {"PK": f"{type_prefix(entity_type)}{entity_id}", "SK": type_name(entity_type)}


def full_key(pk: str, sk: str) -> Dict[str, str]:
    return {"PK": pk, "SK": sk}


def strip_keys(records: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Drop PK/SK so storage keys never leave the data layer."""
    return [
        {field: value for field, value in record.items() if field not in KEY_FIELDS}
        for record in records
    ]
