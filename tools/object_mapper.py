"""Convert fetched store documents into id -> body mappings."""

from __future__ import annotations

from typing import Iterable

from store_models import JsonObject, StoredObject


def stored_object_from_hit(hit: dict, object_type: str) -> StoredObject:
    """Strip the store envelope (_id, _type, _version, ...) from a raw document."""
    return StoredObject(
        id=hit["_id"],
        type=hit.get("_type", object_type),
        body=hit.get("_source") or {},
    )


def to_id_map(objects: Iterable[StoredObject]) -> dict[str, JsonObject]:
    """Map each object's id to its body. Duplicate ids: last one wins."""
    return {obj.id: obj.body for obj in objects}
