"""Document store client.

Reads and writes Kibana saved objects (dashboards, visualizations and saved
searches) through the typed REST API of the document store:

    GET  /<index>/<type>/<id>
    POST /<index>/<type>/_search
    PUT  /<index>/<type>/<id>

One client holds one connection to one endpoint. Use it as a context
manager so the connection is released when a copy phase ends.
"""

from __future__ import annotations

import logging
from typing import Iterable
from urllib.parse import quote

import httpx

from config import HTTP_TIMEOUT, SEARCH_PAGE_SIZE
from errors import NotFoundError, StoreError
from object_mapper import stored_object_from_hit
from store_models import ClusterEndpoint, JsonObject, StoredObject, WriteOutcome, WriteResult

log = logging.getLogger(__name__)

HEADERS = {"Content-Type": "application/json"}


class StoreClient:
    """HTTP client for a single document store endpoint."""

    def __init__(
        self,
        endpoint: ClusterEndpoint,
        verbose: bool = False,
        timeout: float = HTTP_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        self.endpoint = endpoint
        self.verbose = verbose
        self.client = httpx.Client(
            base_url=endpoint.base_url,
            headers=HEADERS,
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> "StoreClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()

    # ── Paths ────────────────────────────────────────────────────────

    def _path(self, object_type: str, object_id: str | None = None) -> str:
        path = f"/{self.endpoint.index}/{object_type}/"
        if object_id is not None:
            path += quote(object_id, safe="")
        return path

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise StoreError(f"{method} {self.endpoint.base_url}{path} failed: {e}") from e
        log.debug("%s %s%s -> %d", method, self.endpoint.base_url, path, response.status_code)
        return response

    def _json(self, response: httpx.Response) -> dict:
        try:
            return response.json()
        except ValueError as e:
            raise StoreError(
                f"Invalid JSON in response from {response.request.url}: {e}",
                status_code=response.status_code,
            ) from e

    # ── Reads ────────────────────────────────────────────────────────

    def fetch_by_id(self, object_type: str, object_id: str) -> StoredObject:
        """Fetch one document. Raises NotFoundError or StoreError."""
        response = self._request("GET", self._path(object_type, object_id))
        if response.status_code == 404:
            raise NotFoundError(
                f"{object_type} {object_id} not found in {self.endpoint.describe()}",
                status_code=404,
            )
        if response.status_code != 200:
            raise StoreError(
                f"Fail {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        doc = self._json(response)
        if not doc.get("found", True):
            raise NotFoundError(
                f"{object_type} {object_id} not found in {self.endpoint.describe()}",
                status_code=response.status_code,
            )
        return stored_object_from_hit(doc, object_type)

    def search_by_ids(
        self,
        object_type: str,
        ids: Iterable[str],
        limit: int = SEARCH_PAGE_SIZE,
    ) -> list[StoredObject]:
        """Fetch every document of a type whose id is in `ids`, in one request.

        Only the first `limit` hits are returned. An empty id list returns
        an empty result without contacting the store.
        """
        values = list(dict.fromkeys(ids))
        if not values:
            return []

        query = {
            "from": 0,
            "size": limit,
            "query": {"filtered": {"filter": {"ids": {"values": values}}}},
        }
        response = self._request("POST", self._path(object_type) + "_search", json=query)
        if response.status_code != 200:
            raise StoreError(
                f"Failed to get {object_type} objects {values} "
                f"{response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        hits = self._json(response).get("hits", {})
        total = hits.get("total", 0)
        if isinstance(total, dict):
            total = total.get("value", 0)
        if total > limit:
            log.warning(
                "%d %s objects matched but only the first %d were fetched",
                total, object_type, limit,
            )
        return [stored_object_from_hit(hit, object_type) for hit in hits.get("hits", [])]

    # ── Writes ───────────────────────────────────────────────────────

    def upsert(self, object_type: str, object_id: str, body: JsonObject) -> WriteResult:
        """Create or overwrite the document stored under `object_id`."""
        try:
            response = self._request("PUT", self._path(object_type, object_id), json=body)
        except StoreError as e:
            return WriteResult(outcome=WriteOutcome.failed, message=str(e))

        if response.status_code == 200:
            outcome = WriteOutcome.updated
        elif response.status_code == 201:
            outcome = WriteOutcome.created
        else:
            return WriteResult(
                outcome=WriteOutcome.failed,
                status_code=response.status_code,
                message=response.reason_phrase,
            )

        if self.verbose:
            print(f"Writing {object_type} {object_id} {outcome.value}")
        return WriteResult(outcome=outcome, status_code=response.status_code)

    def create(self, object_type: str, body: JsonObject) -> WriteResult:
        """Index a new document under a store-assigned id."""
        try:
            response = self._request("POST", self._path(object_type), json=body)
        except StoreError as e:
            return WriteResult(outcome=WriteOutcome.failed, message=str(e))

        if response.status_code == 201:
            return WriteResult(outcome=WriteOutcome.created, status_code=201)
        return WriteResult(
            outcome=WriteOutcome.failed,
            status_code=response.status_code,
            message=response.text,
        )
