"""Dependency resolver — finds the objects a dashboard depends on.

A dashboard's panelsJSON lists the visualizations it shows; each
visualization may point at one saved search through savedSearchId.
"""

from __future__ import annotations

import json
import logging
from typing import Iterable

from errors import FatalFetchError
from object_mapper import to_id_map
from store_client import StoreClient
from store_models import JsonObject, ObjectType

log = logging.getLogger(__name__)


def visualization_ids_of(dashboard_body: JsonObject) -> list[str]:
    """Return the visualization id of every panel, in document order.

    Duplicates are kept. A missing or corrupt panelsJSON raises
    FatalFetchError since the whole copy hangs off the dashboard.
    """
    panels_json = dashboard_body.get("panelsJSON")
    if not isinstance(panels_json, str):
        raise FatalFetchError("Dashboard has no panelsJSON field")
    try:
        panels = json.loads(panels_json)
    except json.JSONDecodeError as e:
        raise FatalFetchError(f"Dashboard panelsJSON is not valid JSON: {e}") from e
    if not isinstance(panels, list):
        raise FatalFetchError("Dashboard panelsJSON is not a list of panels")

    ids = []
    for position, panel in enumerate(panels):
        if not isinstance(panel, dict) or panel.get("id") is None:
            raise FatalFetchError(f"Dashboard panel {position} has no visualization id")
        ids.append(str(panel["id"]))
    return ids


def saved_search_ids_of(visualization_bodies: Iterable[JsonObject]) -> set[str]:
    """Return the non-null savedSearchId values of the given visualizations."""
    return {
        body["savedSearchId"]
        for body in visualization_bodies
        if body.get("savedSearchId") is not None
    }


def fetch_visualizations(
    client: StoreClient,
    dashboard_body: JsonObject,
) -> tuple[list[str], dict[str, JsonObject]]:
    """Resolve and batch-fetch the visualizations a dashboard shows."""
    ids = visualization_ids_of(dashboard_body)
    log.info("Dashboard references %d visualizations", len(set(ids)))
    objects = client.search_by_ids(ObjectType.visualization.value, ids)
    return list(dict.fromkeys(ids)), to_id_map(objects)


def fetch_saved_searches(
    client: StoreClient,
    visualization_bodies: Iterable[JsonObject],
) -> tuple[list[str], dict[str, JsonObject]]:
    """Resolve and batch-fetch the saved searches used by visualizations."""
    ids = sorted(saved_search_ids_of(visualization_bodies))
    log.info("Visualizations reference %d saved searches", len(ids))
    objects = client.search_by_ids(ObjectType.search.value, ids)
    return ids, to_id_map(objects)
