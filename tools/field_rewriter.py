"""Rewrite the backing index of a saved search.

The index lives inside kibanaSavedObjectMeta.searchSourceJSON, which is a
JSON document serialised into a string field.
"""

from __future__ import annotations

import copy
import json

from errors import RewriteSkipError
from store_models import JsonObject

META_FIELD = "kibanaSavedObjectMeta"
SEARCH_SOURCE_FIELD = "searchSourceJSON"


def read_search_source(body: JsonObject) -> dict:
    """Parse kibanaSavedObjectMeta.searchSourceJSON into a dict."""
    meta = body.get(META_FIELD)
    if not isinstance(meta, dict) or not isinstance(meta.get(SEARCH_SOURCE_FIELD), str):
        raise RewriteSkipError(f"{META_FIELD}.{SEARCH_SOURCE_FIELD} is missing")
    try:
        source = json.loads(meta[SEARCH_SOURCE_FIELD])
    except json.JSONDecodeError as e:
        raise RewriteSkipError(f"{META_FIELD}.{SEARCH_SOURCE_FIELD} is not valid JSON: {e}") from e
    if not isinstance(source, dict):
        raise RewriteSkipError(f"{META_FIELD}.{SEARCH_SOURCE_FIELD} is not a JSON object")
    return source


def write_search_source(body: JsonObject, source: dict) -> None:
    """Serialise `source` back into kibanaSavedObjectMeta.searchSourceJSON."""
    body[META_FIELD][SEARCH_SOURCE_FIELD] = json.dumps(
        source, separators=(",", ":"), ensure_ascii=False
    )


def rewrite_search_index(body: JsonObject, new_index: str | None = None) -> JsonObject:
    """Return the saved search body with its backing index set to `new_index`.

    With no `new_index` the body is returned as is. Otherwise a copy is
    returned; the input is left untouched.
    """
    if new_index is None:
        return body

    source = read_search_source(body)
    source["index"] = new_index
    rewritten = copy.deepcopy(body)
    write_search_source(rewritten, source)
    return rewritten
