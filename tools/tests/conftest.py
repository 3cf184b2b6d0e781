"""Shared fixtures for the dashboard copy test suite."""

import json
import os
from urllib.parse import unquote

import httpx
import pytest

# ---- Environment setup (MUST happen before any tool module import) ----
os.environ["ES_HOST"] = "localhost"
os.environ["ES_PORT"] = "9200"
os.environ["KIBANA_INDEX"] = ".kibana"


# ── In-memory document store ─────────────────────────────────────────


class FakeStore:
    """Serves the typed document store REST API from a dict.

    Documents are keyed by (host, port, index, type, id) so one instance
    can stand in for both the source and the destination cluster.
    """

    def __init__(self):
        self.docs: dict[tuple, dict] = {}
        self.requests: list[httpx.Request] = []
        self.fail_puts: dict[str, int] = {}
        self.fail_searches: dict[str, int] = {}
        self.html_searches: set[str] = set()
        self._next_id = 0

    def put(self, endpoint, doc_type, doc_id, body):
        self.docs[(endpoint.host, endpoint.port, endpoint.index, doc_type, doc_id)] = body

    def get(self, endpoint, doc_type, doc_id):
        return self.docs.get((endpoint.host, endpoint.port, endpoint.index, doc_type, doc_id))

    def ids(self, endpoint, doc_type=None):
        return sorted(
            key[4] for key in self.docs
            if key[:3] == (endpoint.host, endpoint.port, endpoint.index)
            and (doc_type is None or key[3] == doc_type)
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host, port = request.url.host, request.url.port
        parts = [unquote(p) for p in request.url.raw_path.decode().split("?")[0].split("/")[1:]]
        index, doc_type = parts[0], parts[1]
        doc_id = parts[2] if len(parts) > 2 else ""

        if request.method == "GET":
            body = self.docs.get((host, port, index, doc_type, doc_id))
            if body is None:
                return httpx.Response(404, json={"_index": index, "_type": doc_type, "_id": doc_id, "found": False})
            return httpx.Response(200, json={
                "_index": index, "_type": doc_type, "_id": doc_id,
                "_version": 1, "found": True, "_source": body,
            })

        if request.method == "POST" and doc_id == "_search":
            if doc_type in self.fail_searches:
                return httpx.Response(self.fail_searches[doc_type])
            if doc_type in self.html_searches:
                return httpx.Response(200, content=b"<html>proxy</html>")
            query = json.loads(request.content)
            values = query["query"]["filtered"]["filter"]["ids"]["values"]
            hits = [
                {"_index": index, "_type": doc_type, "_id": v, "_score": 1.0,
                 "_source": self.docs[(host, port, index, doc_type, v)]}
                for v in values
                if (host, port, index, doc_type, v) in self.docs
            ]
            hits = hits[query["from"]:query["from"] + query["size"]]
            return httpx.Response(200, json={"hits": {"total": len(hits), "hits": hits}})

        if request.method == "POST":
            self._next_id += 1
            new_id = f"auto-{self._next_id}"
            self.docs[(host, port, index, doc_type, new_id)] = json.loads(request.content)
            return httpx.Response(201, json={"_id": new_id, "created": True})

        if request.method == "PUT":
            if doc_id in self.fail_puts:
                return httpx.Response(self.fail_puts[doc_id])
            key = (host, port, index, doc_type, doc_id)
            existed = key in self.docs
            self.docs[key] = json.loads(request.content)
            return httpx.Response(200 if existed else 201, json={"_id": doc_id, "created": not existed})

        return httpx.Response(405)


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def client_factory(fake_store):
    """StoreClient factory whose connections all go to `fake_store`."""
    from store_client import StoreClient

    def _factory(endpoint, verbose=False):
        return StoreClient(endpoint, verbose=verbose, transport=httpx.MockTransport(fake_store.handler))

    return _factory


# ── Endpoints ─────────────────────────────────────────────────────────


@pytest.fixture
def source():
    from store_models import ClusterEndpoint
    return ClusterEndpoint(host="old-cluster", port=9200, index=".kibana")


@pytest.fixture
def destination():
    from store_models import ClusterEndpoint
    return ClusterEndpoint(host="new-cluster", port=9200, index=".kibana")


# ── Saved object factories ────────────────────────────────────────────


@pytest.fixture
def make_dashboard():
    def _factory(vis_ids, title="Overview"):
        return {
            "title": title,
            "hits": 0,
            "description": "",
            "panelsJSON": json.dumps([
                {"col": 1, "id": vis_id, "panelIndex": i + 1, "row": 1,
                 "size_x": 6, "size_y": 3, "type": "visualization"}
                for i, vis_id in enumerate(vis_ids)
            ]),
            "optionsJSON": json.dumps({"darkTheme": False}),
            "version": 1,
            "timeRestore": False,
            "kibanaSavedObjectMeta": {
                "searchSourceJSON": json.dumps({"filter": [{"query": {"query_string": {"query": "*"}}}]}),
            },
        }

    return _factory


@pytest.fixture
def make_visualization():
    def _factory(title, saved_search_id=None):
        body = {
            "title": title,
            "visState": json.dumps({"title": title, "type": "histogram", "aggs": []}),
            "uiStateJSON": "{}",
            "description": "",
            "version": 1,
            "kibanaSavedObjectMeta": {"searchSourceJSON": json.dumps({"filter": []})},
        }
        if saved_search_id is not None:
            body["savedSearchId"] = saved_search_id
        return body

    return _factory


@pytest.fixture
def make_search():
    def _factory(title, index="logstash-*"):
        return {
            "title": title,
            "description": "",
            "hits": 0,
            "columns": ["_source"],
            "sort": ["@timestamp", "desc"],
            "version": 1,
            "kibanaSavedObjectMeta": {
                "searchSourceJSON": json.dumps({
                    "index": index,
                    "query": {"query_string": {"query": "level:error", "analyze_wildcard": True}},
                    "filter": [],
                    "highlight": {"pre_tags": ["@kibana-highlighted-field@"], "fields": {"*": {}}},
                }),
            },
        }

    return _factory


@pytest.fixture
def seeded_source(fake_store, source, make_dashboard, make_visualization, make_search):
    """Scenario A at the source: d1 -> [v1 -> s1, v2]."""
    fake_store.put(source, "dashboard", "d1", make_dashboard(["v1", "v2"]))
    fake_store.put(source, "visualization", "v1", make_visualization("Errors", saved_search_id="s1"))
    fake_store.put(source, "visualization", "v2", make_visualization("Latency"))
    fake_store.put(source, "search", "s1", make_search("Errors search"))
    return fake_store
